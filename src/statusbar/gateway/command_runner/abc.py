"""Abstract base class for running short-lived external commands.

Every command the status line issues (git, mostly) goes through this gateway so
that collectors can be exercised against canned output in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class CommandRunner(ABC):
    """Abstract interface for bounded subprocess execution.

    Implementations must never raise for expected failures: a missing binary,
    a non-zero exit status and an exceeded timeout all yield None.
    """

    @abstractmethod
    async def run(self, cmd: list[str], *, cwd: Path, timeout: float) -> str | None:
        """Run a command and return its stripped stdout.

        Args:
            cmd: Program and arguments
            cwd: Working directory for the command
            timeout: Budget in seconds; the process is killed when exceeded

        Returns:
            Stripped stdout on exit status 0, None otherwise
        """
        ...
