"""Runtime configuration: command-line flags, environment and tunables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

# Budget for each git subprocess; the status line renders inline with the prompt
SUBPROCESS_TIMEOUT_SECONDS = 0.3
# Budget for each forge API request
NETWORK_TIMEOUT_SECONDS = 3.0
# Outer guard for a whole collector task in the fan-out
COLLECTOR_TIMEOUT_SECONDS = 8.0

PR_URL_TTL_SECONDS = 60
PR_STATUS_TTL_SECONDS = 30
# An empty summary placeholder younger than this is treated as in flight
SUMMARY_PENDING_TTL_SECONDS = 60

TRANSCRIPT_HEAD_BYTES = 64 * 1024
TRANSCRIPT_TAIL_BYTES = 128 * 1024

DEFAULT_CONTEXT_MAX = 160_000
LARGE_CONTEXT_MAX = 200_000

CACHE_SUBDIR = "statusbar"

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
CONTEXT_MAX_ENV_VAR = "CLAUDE_CTX_MAX"
DEBUG_ENV_VAR = "STATUSBAR_DEBUG"


@dataclass(frozen=True)
class StatuslineOptions:
    """Command-line flags. Each one is independent of the others."""

    short: bool = False
    no_pr: bool = False
    no_diff: bool = False
    no_transcript: bool = False
    no_color: bool = False


@dataclass(frozen=True)
class StatuslineEnvironment:
    """Values read once from the process environment."""

    github_token: str | None
    context_max_override: int | None
    home: Path | None
    debug: bool


def load_environment(environ: Mapping[str, str] | None = None) -> StatuslineEnvironment:
    """Read the environment variables the status line consumes.

    The token is looked up under each name in TOKEN_ENV_VARS; the first
    non-empty value wins. A context window override that is not a positive
    integer is ignored.
    """
    if environ is None:
        environ = os.environ

    token = None
    for name in TOKEN_ENV_VARS:
        value = environ.get(name, "")
        if value:
            token = value
            break

    context_max = None
    raw_max = environ.get(CONTEXT_MAX_ENV_VAR, "").strip()
    if raw_max.isdigit() and int(raw_max) > 0:
        context_max = int(raw_max)

    home = environ.get("HOME", "")
    return StatuslineEnvironment(
        github_token=token,
        context_max_override=context_max,
        home=Path(home) if home else None,
        debug=bool(environ.get(DEBUG_ENV_VAR, "")),
    )


def context_max_for_model(model_name: str, override: int | None) -> int:
    """Context window size used as the denominator of the context percentage."""
    if override is not None:
        return override
    lowered = model_name.lower()
    if "opus" in lowered or "sonnet" in lowered:
        return LARGE_CONTEXT_MAX
    return DEFAULT_CONTEXT_MAX
