"""Integration tests for RealCommandRunner using simple system commands."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

from statusbar.gateway.command_runner.real import RealCommandRunner


def test_returns_stripped_stdout(tmp_path: Path) -> None:
    result = asyncio.run(RealCommandRunner().run(["echo", "  hello  "], cwd=tmp_path, timeout=5.0))
    assert result == "hello"


def test_non_zero_exit_is_none(tmp_path: Path) -> None:
    assert asyncio.run(RealCommandRunner().run(["false"], cwd=tmp_path, timeout=5.0)) is None


def test_missing_binary_is_none(tmp_path: Path) -> None:
    cmd = ["statusbar-no-such-binary-xyz"]
    assert asyncio.run(RealCommandRunner().run(cmd, cwd=tmp_path, timeout=5.0)) is None


def test_timeout_kills_the_process(tmp_path: Path) -> None:
    start = time.monotonic()
    result = asyncio.run(RealCommandRunner().run(["sleep", "10"], cwd=tmp_path, timeout=0.2))
    assert result is None
    assert time.monotonic() - start < 5.0
