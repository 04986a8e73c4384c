"""Abstract interfaces used by the command runner."""

from .process import ExecutionResult, LineCallback, ProcessExecutor

__all__ = ["ExecutionResult", "LineCallback", "ProcessExecutor"]
