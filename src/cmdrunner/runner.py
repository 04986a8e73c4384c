"""
CommandRunner: configure an external command, run it once, read the result.

Commands run either directly, through a local ``sh -c`` (shell mode), or on
a remote host through ``ssh``. Shell and remote modes are only available on
Unix-like platforms.

Running shell commands built from user-supplied input is unsafe: the
escaping applied in shell mode only protects spaces and backslashes.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

import structlog

from cmdrunner.backends.subprocess_executor import SubprocessExecutor
from cmdrunner.composer import ComposedCommand, compose, normalize_command
from cmdrunner.di import get_container
from cmdrunner.errors import RunnerStateError, TimeoutExceeded, UnsupportedPlatformError
from cmdrunner.interfaces.process import ExecutionResult, ProcessExecutor
from cmdrunner.logging import log_operation
from cmdrunner.models import ExecutionOptions, RunnerSettings
from cmdrunner.platform import supports_remote_host, supports_shell_mode

log = structlog.get_logger(__name__)

LogSink = Callable[[str], None]
PathLike = Union[str, Path]


class RunnerState(Enum):
    """Lifecycle of a CommandRunner."""

    CONFIGURING = "configuring"
    EXECUTING = "executing"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


def _log_line(line: str) -> None:
    log.info(line)


class CommandRunner:
    """
    Runs an external process and captures its output.

    A runner is configured with the setters, executed once, and then
    queried for its exit code and output.

    Usage:
        runner = CommandRunner("cat", "first second.txt")
        runner.set_shell_mode(True)
        runner.execute()
        print(runner.exit_code, runner.output)
    """

    def __init__(
        self,
        *command: Union[str, Sequence[str]],
        executor: Optional[ProcessExecutor] = None,
        settings: Optional[RunnerSettings] = None,
        log_sink: Optional[LogSink] = None,
    ):
        if len(command) == 1 and isinstance(command[0], (list, tuple)):
            command = tuple(command[0])
        self._command = normalize_command(command)

        if executor is None and settings is not None:
            executor = SubprocessExecutor(settings)
        if settings is None:
            settings = get_container().resolve(RunnerSettings)
        self._settings = settings
        self._executor = executor
        self._log_sink = log_sink or _log_line

        self._options = ExecutionOptions(
            timeout=settings.timeout,
            logging_enabled=settings.logging_enabled,
        )
        self._state = RunnerState.CONFIGURING
        self._result: Optional[ExecutionResult] = None

    # ── configuration ────────────────────────────────────────────────────────

    def set_working_directory(self, working_directory: Optional[PathLike]) -> None:
        self._require_configuring()
        if working_directory is not None:
            working_directory = Path(working_directory)
            if not working_directory.is_dir():
                raise ValueError(f"No such directory: {working_directory}")
        self._options = self._options.with_changes(working_directory=working_directory)

    def set_shell_mode(self, shell_mode: bool) -> None:
        self._require_configuring()
        if shell_mode and not supports_shell_mode():
            raise UnsupportedPlatformError("Shell mode is not supported on the current platform")
        self._options = self._options.with_changes(shell_mode=shell_mode)

    def set_remote_host(self, remote_host: Optional[str], remote_user: Optional[str] = None) -> None:
        """Run the command on *remote_host* through ssh. This enables shell mode."""
        self._require_configuring()
        if remote_host is not None and not supports_remote_host():
            raise UnsupportedPlatformError(
                "Executing commands on a remote host is not supported on the current platform"
            )

        changes = {"remote_host": remote_host, "remote_user": remote_user}
        if remote_host is not None:
            changes["shell_mode"] = True
        self._options = self._options.with_changes(**changes)

    def set_timeout(self, timeout: Optional[float]) -> None:
        """Maximum running time in seconds. ``None`` or ``0`` disables the deadline."""
        self._require_configuring()
        self._options = self._options.with_changes(timeout=timeout)

    def set_logging_enabled(self, logging_enabled: bool) -> None:
        self._require_configuring()
        self._options = self._options.with_changes(logging_enabled=logging_enabled)

    @property
    def command(self) -> tuple:
        return self._command

    @property
    def options(self) -> ExecutionOptions:
        return self._options

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def working_directory(self) -> Optional[Path]:
        return self._options.working_directory

    @property
    def shell_mode(self) -> bool:
        return self._options.shell_mode

    @property
    def remote_host(self) -> Optional[str]:
        return self._options.remote_host

    @property
    def remote_user(self) -> Optional[str]:
        return self._options.remote_user

    @property
    def timeout(self) -> Optional[float]:
        return self._options.timeout

    @property
    def logging_enabled(self) -> bool:
        return self._options.logging_enabled

    @property
    def composed(self) -> ComposedCommand:
        return compose(self._command, self._options)

    @property
    def command_string(self) -> str:
        return self.composed.display_string

    # ── execution ────────────────────────────────────────────────────────────

    def execute(self, timeout: Optional[float] = None) -> ExecutionResult:
        """
        Run the command and block until it finishes.

        Args:
            timeout: Overrides the configured timeout for this call (seconds)

        Raises:
            ProcessSpawnFailure: the process could not be started
            TimeoutExceeded: the process was killed after the deadline
            RunnerStateError: the runner was already executed
        """
        self._require_configuring()

        options = self._options
        if timeout is not None:
            options = options.with_changes(timeout=timeout)
        composed = compose(self._command, options)
        executor = self._resolve_executor()

        on_line = None
        if options.logging_enabled:
            self._log_sink(composed.display_string)
            on_line = self._log_sink

        self._state = RunnerState.EXECUTING
        try:
            with log_operation(log, "command.execute", command=composed.display_string):
                self._result = executor.execute(
                    composed.argv,
                    cwd=options.working_directory,
                    timeout=options.effective_timeout,
                    on_line=on_line,
                )
        except TimeoutExceeded:
            self._state = RunnerState.TIMED_OUT
            raise
        except Exception:
            self._state = RunnerState.FAILED
            raise

        self._state = RunnerState.COMPLETED
        return self._result

    def _resolve_executor(self) -> ProcessExecutor:
        if self._executor is None:
            self._executor = get_container().resolve(ProcessExecutor)
        return self._executor

    def _require_configuring(self) -> None:
        if self._state is not RunnerState.CONFIGURING:
            raise RunnerStateError(f"CommandRunner already {self._state.value}")

    # ── results ──────────────────────────────────────────────────────────────

    @property
    def result(self) -> ExecutionResult:
        if self._state is not RunnerState.COMPLETED:
            raise RunnerStateError(f"Result not available, runner is {self._state.value}")
        return self._result

    def get_exit_code(self) -> int:
        return self.result.exit_code

    def get_output(self) -> str:
        """Everything the process wrote, with surrounding whitespace removed."""
        return self.result.output.strip()

    @property
    def exit_code(self) -> int:
        return self.get_exit_code()

    @property
    def output(self) -> str:
        return self.get_output()

    def __str__(self) -> str:
        return self.command_string

    def __repr__(self) -> str:
        return f"CommandRunner({self.command_string!r}, state={self._state.value})"


def run_command(
    *command: Union[str, Sequence[str]],
    working_directory: Optional[PathLike] = None,
    shell_mode: bool = False,
    remote_host: Optional[str] = None,
    remote_user: Optional[str] = None,
    timeout: Optional[float] = None,
    logging_enabled: Optional[bool] = None,
    executor: Optional[ProcessExecutor] = None,
    settings: Optional[RunnerSettings] = None,
) -> ExecutionResult:
    """
    Convenience function to configure and execute a CommandRunner.

    Usage:
        result = run_command("ls", "-l", working_directory="/tmp")
    """
    runner = CommandRunner(*command, executor=executor, settings=settings)
    if working_directory is not None:
        runner.set_working_directory(working_directory)
    if shell_mode:
        runner.set_shell_mode(True)
    if remote_host is not None:
        runner.set_remote_host(remote_host, remote_user)
    if timeout is not None:
        runner.set_timeout(timeout)
    if logging_enabled is not None:
        runner.set_logging_enabled(logging_enabled)
    return runner.execute()
