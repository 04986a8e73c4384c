"""
Turns a command and its execution options into the argv handed to the OS.

Three modes, in increasing layering:

* direct: the tokens are passed as-is, nothing is escaped.
* shell: tokens are escaped and joined into ``S``; runs ``sh -c S``.
* remote: ``S`` is wrapped in double quotes and passed to ``ssh``; the ssh
  invocation itself runs through ``sh -c``.
"""

import os
from dataclasses import dataclass
from typing import Sequence, Tuple

from cmdrunner.errors import InvalidCommand
from cmdrunner.models import ExecutionOptions
from cmdrunner.quoting import escape_arguments, join_arguments, wrap_in_quotes

SHELL = "sh"
SHELL_COMMAND_FLAG = "-c"
SSH = "ssh"


@dataclass(frozen=True)
class ComposedCommand:
    """The final argv plus its human-readable reconstruction."""

    argv: Tuple[str, ...]
    display_string: str

    def __str__(self) -> str:
        return self.display_string


def normalize_command(command: Sequence[str]) -> Tuple[str, ...]:
    """Validate a raw command, converting path-like tokens to strings."""
    if isinstance(command, (str, bytes)):
        raise InvalidCommand("Command must be a sequence of tokens, not a single string")

    tokens = []
    for token in command:
        if isinstance(token, os.PathLike):
            token = os.fspath(token)
        if not isinstance(token, str):
            raise InvalidCommand(f"Command tokens must be strings, got {type(token).__name__}")
        tokens.append(token)

    if not tokens:
        raise InvalidCommand("Empty command")
    return tuple(tokens)


def shell_command_string(command: Sequence[str]) -> str:
    return join_arguments(escape_arguments(command))


def remote_command_string(command: Sequence[str], destination: str) -> str:
    quoted = wrap_in_quotes(shell_command_string(command))
    return join_arguments([SSH, destination, quoted])


def compose(command: Sequence[str], options: ExecutionOptions) -> ComposedCommand:
    """Build the argv and display string for *command* under *options*."""
    tokens = normalize_command(command)

    if not options.uses_shell:
        return ComposedCommand(argv=tokens, display_string=join_arguments(tokens))

    if options.remote_host is not None:
        script = remote_command_string(tokens, options.remote_destination)
    else:
        script = shell_command_string(tokens)

    argv = (SHELL, SHELL_COMMAND_FLAG, script)
    return ComposedCommand(argv=argv, display_string=join_arguments(argv))
