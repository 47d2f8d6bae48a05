"""Abstract base class for launching background summary generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class SummaryLauncher(ABC):
    """Abstract interface for fire-and-forget summary generation.

    The launched work is expected to outlive the calling process. Callers
    never wait for it and never cancel it; the only channel back is the
    output file, which the launched process fills in when it finishes.
    """

    @abstractmethod
    def launch(self, *, prompt: str, cwd: Path, output_path: Path) -> bool:
        """Start generating a summary into output_path.

        output_path is truncated to an empty placeholder before this returns,
        so the caller's slot is claimed even if the launch itself fails.

        Args:
            prompt: Prompt for the summarizing model
            cwd: Working directory for the background process
            output_path: File that receives the model's stdout

        Returns:
            True if the background process was started
        """
        ...
