"""Production command runner using asyncio subprocesses."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from statusbar.gateway.command_runner.abc import CommandRunner

logger = logging.getLogger(__name__)

# git must not take optional locks while a prompt is rendering
GIT_ENV_OVERRIDES = {"GIT_OPTIONAL_LOCKS": "0", "LC_ALL": "C"}


class RealCommandRunner(CommandRunner):
    """Runs commands with stdout captured and stderr discarded."""

    async def run(self, cmd: list[str], *, cwd: Path, timeout: float) -> str | None:
        env = None
        if cmd and cmd[0] == "git":
            env = {**os.environ, **GIT_ENV_OVERRIDES}

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logger.debug("Could not start %s: %s", cmd[0], e)
            return None

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except TimeoutError:
            logger.debug("Timed out after %.2fs: %s", timeout, " ".join(cmd))
            _kill(proc)
            await proc.wait()
            return None
        except asyncio.CancelledError:
            _kill(proc)
            raise

        if proc.returncode != 0:
            return None
        return stdout.decode("utf-8", errors="replace").strip()


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass
