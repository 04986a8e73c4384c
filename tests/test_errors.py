"""Tests for the error taxonomy."""
import pytest

from cmdrunner.errors import (
    CommandRunnerError,
    ErrorKind,
    InvalidCommand,
    ProcessSpawnFailure,
    RunnerStateError,
    TimeoutExceeded,
    UnsupportedPlatformError,
)


@pytest.mark.parametrize(
    "error, kind, builtin",
    [
        (InvalidCommand("empty"), ErrorKind.INVALID_COMMAND, ValueError),
        (ProcessSpawnFailure("missing"), ErrorKind.SPAWN_FAILURE, OSError),
        (TimeoutExceeded("slow"), ErrorKind.TIMEOUT, TimeoutError),
        (UnsupportedPlatformError("windows"), ErrorKind.UNSUPPORTED_PLATFORM, NotImplementedError),
        (RunnerStateError("done"), ErrorKind.INVALID_STATE, RuntimeError),
    ],
)
def test_error_kinds(error, kind, builtin):
    assert isinstance(error, CommandRunnerError)
    assert isinstance(error, builtin)
    assert error.kind is kind


def test_timeout_exceeded_attributes():
    err = TimeoutExceeded("slow", argv=["sleep", "3"], timeout=0.5, pid=123, partial_output="x")

    assert str(err) == "slow"
    assert err.argv == ("sleep", "3")
    assert err.timeout == 0.5
    assert err.pid == 123
    assert err.partial_output == "x"


def test_spawn_failure_message():
    err = ProcessSpawnFailure("Cannot start foo", argv=["foo"])

    assert str(err) == "Cannot start foo"
    assert err.argv == ("foo",)
