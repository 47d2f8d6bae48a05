"""Fake summary launcher for testing."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from statusbar.gateway.summary_launcher.abc import SummaryLauncher


@dataclass(frozen=True)
class LaunchedSummary:
    prompt: str
    cwd: Path
    output_path: Path


class FakeSummaryLauncher(SummaryLauncher):
    """Records launches and writes the placeholder without starting anything.

    Constructor Injection:
    ---------------------
    - succeeds: Whether launch() reports a started process
    """

    def __init__(self, *, succeeds: bool = True) -> None:
        self._succeeds = succeeds
        self._launched: list[LaunchedSummary] = []

    def launch(self, *, prompt: str, cwd: Path, output_path: Path) -> bool:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text("", encoding="utf-8")
        self._launched.append(LaunchedSummary(prompt=prompt, cwd=cwd, output_path=output_path))
        return self._succeeds

    @property
    def launched(self) -> list[LaunchedSummary]:
        return list(self._launched)
