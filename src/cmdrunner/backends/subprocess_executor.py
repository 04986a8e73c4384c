"""Subprocess process executor implementation."""

import codecs
import os
import select
import signal
import subprocess
import threading
import time
from pathlib import Path
from typing import IO, List, Optional, Sequence

import structlog

from ..errors import ProcessSpawnFailure, TimeoutExceeded
from ..interfaces.process import ExecutionResult, LineCallback, ProcessExecutor
from ..models import RunnerSettings
from ..platform import supports_process_groups

log = structlog.get_logger(__name__)


class StreamReader(threading.Thread):
    """Drains one process pipe into memory until EOF.

    The reader owns its pipe and closes it when done. It never closes a pipe
    from another thread, since closing a buffered stream that is blocked in a
    read would hang the closing thread.
    """

    def __init__(
        self,
        stream: IO[bytes],
        encoding: str,
        on_line: Optional[LineCallback] = None,
        name: str = "cmdrunner-reader",
    ):
        super().__init__(name=name, daemon=True)
        self.stream = stream
        self.error: Optional[Exception] = None
        self.bytes_read = 0
        self.waiting = False
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._on_line = on_line
        self._chunks: List[str] = []
        self._lock = threading.Lock()

    def run(self) -> None:
        try:
            while True:
                self.waiting = True
                raw = self.stream.readline()
                self.waiting = False
                if not raw:
                    break
                self.bytes_read += len(raw)
                self._append(self._decoder.decode(raw))
            self._append(self._decoder.decode(b"", final=True))
        except Exception as e:
            self.error = e
        finally:
            self.waiting = False
            self.stream.close()

    def _append(self, text: str) -> None:
        if not text:
            return
        with self._lock:
            self._chunks.append(text)
        if self._on_line is None:
            return
        try:
            self._on_line(text.rstrip("\r\n"))
        except Exception as e:
            # Keep draining, or the child dies of SIGPIPE.
            log.warning(
                "reader.sink_failed",
                reader=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )

    def stalled(self, since_bytes: int) -> bool:
        """True if blocked on an empty pipe with nothing read since *since_bytes*."""
        if not self.is_alive() or not self.waiting or self.bytes_read != since_bytes:
            return False
        if not supports_process_groups():
            return True
        try:
            readable, _, _ = select.select([self.stream], [], [], 0)
        except (OSError, ValueError):
            return False
        return not readable

    def text(self) -> str:
        with self._lock:
            return "".join(self._chunks)


class SubprocessExecutor(ProcessExecutor):
    """Run processes using the subprocess module."""

    def __init__(self, settings: Optional[RunnerSettings] = None):
        self.settings = settings or RunnerSettings()

    def execute(
        self,
        argv: Sequence[str],
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
        on_line: Optional[LineCallback] = None,
    ) -> ExecutionResult:
        """Run a command, killing its process group if *timeout* expires."""
        argv = list(argv)
        started = time.monotonic()
        deadline = started + timeout if timeout else None

        process = self._spawn(argv, cwd)
        readers: List[StreamReader] = []

        try:
            readers = self._start_readers(process, on_line)

            try:
                exit_code = process.wait(timeout=self._remaining(deadline))
            except subprocess.TimeoutExpired as e:
                self._kill(process)
                process.wait()
                self._join(readers)
                log.warning("process.timeout", pid=process.pid, timeout=timeout)
                raise TimeoutExceeded(
                    f"Command did not finish within {timeout}s: {' '.join(argv)}",
                    argv=argv,
                    timeout=timeout,
                    pid=process.pid,
                    partial_output=readers[0].text(),
                ) from e

            complete = self._join(readers)
            for reader in readers:
                if reader.error is not None and not reader.is_alive():
                    raise reader.error

            duration = time.monotonic() - started
            log.debug(
                "process.exited",
                pid=process.pid,
                exit_code=exit_code,
                duration_ms=round(duration * 1000, 2),
                complete=complete,
            )
            return ExecutionResult(
                exit_code=exit_code,
                output=readers[0].text(),
                stderr=readers[1].text() if len(readers) > 1 else "",
                pid=process.pid,
                duration=duration,
                complete=complete,
            )
        finally:
            if process.poll() is None:
                self._kill(process)
                process.wait()
            self._close_unread(process, readers)

    def _spawn(self, argv: List[str], cwd: Optional[Path]) -> subprocess.Popen:
        stderr = subprocess.STDOUT if self.settings.merge_stderr else subprocess.PIPE
        try:
            process = subprocess.Popen(
                argv,
                cwd=str(cwd) if cwd else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=stderr,
                start_new_session=supports_process_groups(),
            )
        except (OSError, ValueError) as e:
            log.debug("process.spawn_failed", argv=argv, cwd=str(cwd) if cwd else None, error=str(e))
            raise ProcessSpawnFailure(f"Cannot start {argv[0]}: {e}", argv=argv) from e

        log.debug("process.spawned", pid=process.pid, argv=argv)
        return process

    def _start_readers(
        self, process: subprocess.Popen, on_line: Optional[LineCallback]
    ) -> List[StreamReader]:
        readers = [StreamReader(process.stdout, self.settings.encoding, on_line, name="cmdrunner-stdout")]
        if process.stderr is not None:
            readers.append(StreamReader(process.stderr, self.settings.encoding, name="cmdrunner-stderr"))
        for reader in readers:
            reader.start()
        return readers

    def _join(self, readers: List[StreamReader]) -> bool:
        """Wait for every reader to reach EOF.

        A reader is waited on for as long as it keeps draining. One that sits
        on an empty pipe for a whole ``reader_grace_period`` is left behind:
        a detached grandchild holds the write end open. Returns False when
        any reader was left behind.
        """
        grace = self.settings.reader_grace_period
        complete = True
        for reader in readers:
            seen = reader.bytes_read
            while True:
                reader.join(timeout=grace)
                if not reader.is_alive():
                    break
                if reader.stalled(seen):
                    log.warning(
                        "reader.detached",
                        reader=reader.name,
                        bytes_read=reader.bytes_read,
                        grace_period=grace,
                    )
                    complete = False
                    break
                seen = reader.bytes_read
        return complete

    @staticmethod
    def _remaining(deadline: Optional[float]) -> Optional[float]:
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        """SIGKILL the whole process group, or just the process without groups."""
        if supports_process_groups():
            try:
                os.killpg(process.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                return
            except PermissionError:
                log.debug("process.killpg_denied", pid=process.pid)
        process.kill()

    @staticmethod
    def _close_unread(process: subprocess.Popen, readers: List[StreamReader]) -> None:
        owned = {id(reader.stream) for reader in readers}
        for stream in (process.stdout, process.stderr):
            if stream is not None and id(stream) not in owned:
                stream.close()
