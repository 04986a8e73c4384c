"""Abstract interface for process execution."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

LineCallback = Callable[[str], None]


@dataclass(frozen=True)
class ExecutionResult:
    """Result of a process that ran to completion."""

    exit_code: int
    output: str
    stderr: str = ""
    pid: Optional[int] = None
    duration: float = 0.0
    # False when a detached child kept a pipe open and output may be cut short.
    complete: bool = True

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class ProcessExecutor(ABC):
    """Abstract interface for spawning a process and draining its output."""

    @abstractmethod
    def execute(
        self,
        argv: Sequence[str],
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
        on_line: Optional[LineCallback] = None,
    ) -> ExecutionResult:
        """
        Run *argv* to completion.

        Raises ``ProcessSpawnFailure`` when the process cannot be created and
        ``TimeoutExceeded`` after killing a process that outlived *timeout*.
        A non-zero exit code is returned, not raised.
        """
        pass
