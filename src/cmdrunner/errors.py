"""Error types raised while composing and executing commands."""

from enum import Enum
from typing import Optional, Sequence


class ErrorKind(Enum):
    """Failure category, usable for matching on ``err.kind``."""

    INVALID_COMMAND = "invalid_command"
    SPAWN_FAILURE = "spawn_failure"
    TIMEOUT = "timeout"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    INVALID_STATE = "invalid_state"


class CommandRunnerError(Exception):
    """Base class for all cmdrunner failures."""

    kind: ErrorKind = ErrorKind.INVALID_STATE


class InvalidCommand(CommandRunnerError, ValueError):
    kind = ErrorKind.INVALID_COMMAND


class ProcessSpawnFailure(CommandRunnerError, OSError):
    """The operating system refused to create the process."""

    kind = ErrorKind.SPAWN_FAILURE

    def __init__(self, message: str, argv: Sequence[str] = ()):
        super().__init__(message)
        self.argv = tuple(argv)

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class TimeoutExceeded(CommandRunnerError, TimeoutError):
    """
    The process outlived its deadline and was killed.

    The process group has already been terminated and reaped when this is
    raised. ``partial_output`` holds whatever was captured before the kill.
    """

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        message: str,
        argv: Sequence[str] = (),
        timeout: Optional[float] = None,
        pid: Optional[int] = None,
        partial_output: str = "",
    ):
        super().__init__(message)
        self.argv = tuple(argv)
        self.timeout = timeout
        self.pid = pid
        self.partial_output = partial_output

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class UnsupportedPlatformError(CommandRunnerError, NotImplementedError):
    kind = ErrorKind.UNSUPPORTED_PLATFORM


class RunnerStateError(CommandRunnerError, RuntimeError):
    kind = ErrorKind.INVALID_STATE
