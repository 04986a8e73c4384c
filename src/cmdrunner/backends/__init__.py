"""Concrete process executors."""

from .subprocess_executor import StreamReader, SubprocessExecutor

__all__ = ["StreamReader", "SubprocessExecutor"]
