"""
Minimal escaping for command lines handed to ``sh -c``.

Only backslashes and spaces are escaped, so that a token containing
whitespace survives one round of shell word splitting. Quote characters,
``$``, backticks and glob characters are left untouched on purpose; this is
not a general purpose shell quoter.
"""

from typing import Iterable, List

_ESCAPES = {
    "\\": "\\\\",
    " ": "\\ ",
}


def escape(token: str) -> str:
    """Escape a single argument for one layer of shell tokenization.

    >>> escape("first second.txt")
    'first\\\\ second.txt'
    """
    return "".join(_ESCAPES.get(char, char) for char in token)


def escape_arguments(tokens: Iterable[str]) -> List[str]:
    return [escape(token) for token in tokens]


def join_arguments(tokens: Iterable[str]) -> str:
    return " ".join(tokens)


def wrap_in_quotes(command: str, quote: str = '"') -> str:
    """Wrap an already escaped command so it travels as one ``ssh`` argument."""
    return f"{quote}{command}{quote}"
