"""
cmdrunner - run external commands locally, through sh, or over ssh.

Builds the exact command line that will be executed, drains process output
on a background reader, and kills the whole process group when a timeout
expires.
"""

__version__ = "0.1.0"
__author__ = "cmdrunner Team"

from cmdrunner.composer import ComposedCommand, compose
from cmdrunner.errors import (
    CommandRunnerError,
    ErrorKind,
    InvalidCommand,
    ProcessSpawnFailure,
    RunnerStateError,
    TimeoutExceeded,
    UnsupportedPlatformError,
)
from cmdrunner.interfaces.process import ExecutionResult, ProcessExecutor
from cmdrunner.models import ExecutionOptions, RunnerSettings, load_settings
from cmdrunner.quoting import escape
from cmdrunner.runner import CommandRunner, RunnerState, run_command

__all__ = [
    "CommandRunner",
    "CommandRunnerError",
    "ComposedCommand",
    "ErrorKind",
    "ExecutionOptions",
    "ExecutionResult",
    "InvalidCommand",
    "ProcessExecutor",
    "ProcessSpawnFailure",
    "RunnerSettings",
    "RunnerState",
    "RunnerStateError",
    "TimeoutExceeded",
    "UnsupportedPlatformError",
    "compose",
    "escape",
    "load_settings",
    "run_command",
    "__version__",
]
