"""Fake command runner for testing."""

from __future__ import annotations

from pathlib import Path

from statusbar.gateway.command_runner.abc import CommandRunner


class FakeCommandRunner(CommandRunner):
    """In-memory command runner returning pre-configured output.

    Commands without a configured response behave like a failing command and
    return None. Every invocation is recorded for assertions.

    Constructor Injection:
    ---------------------
    - responses: Mapping of argv tuple -> stdout (None simulates failure)
    """

    def __init__(self, *, responses: dict[tuple[str, ...], str | None] | None = None) -> None:
        self._responses = responses if responses is not None else {}
        self._calls: list[tuple[tuple[str, ...], Path]] = []

    async def run(self, cmd: list[str], *, cwd: Path, timeout: float) -> str | None:
        self._calls.append((tuple(cmd), cwd))
        response = self._responses.get(tuple(cmd))
        if response is None:
            return None
        return response.strip()

    @property
    def calls(self) -> list[tuple[str, ...]]:
        """Argv tuples of every command run, in order."""
        return [cmd for cmd, _ in self._calls]
