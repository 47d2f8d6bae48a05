"""Production summary launcher that spawns a detached `claude` process."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from statusbar.gateway.summary_launcher.abc import SummaryLauncher

logger = logging.getLogger(__name__)

SUMMARY_MODEL = "haiku"


class RealSummaryLauncher(SummaryLauncher):
    """Spawns `claude -p` in its own session with stdout bound to the cache file.

    The child is released immediately: no handle is kept, so it keeps running
    after the status line process exits and writes its answer straight into
    the cache file.
    """

    def launch(self, *, prompt: str, cwd: Path, output_path: Path) -> bool:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as output:
                subprocess.Popen(
                    ["claude", "--model", SUMMARY_MODEL, "-p", prompt],
                    cwd=cwd,
                    stdin=subprocess.DEVNULL,
                    stdout=output,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
        except OSError as e:
            logger.debug("Could not launch summary generation: %s", e)
            return False
        return True
