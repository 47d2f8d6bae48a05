"""StatuslineContext - dependency injection container for statusline operations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from statusbar.config import (
    NETWORK_TIMEOUT_SECONDS,
    StatuslineEnvironment,
    StatuslineOptions,
    load_environment,
)
from statusbar.gateway.command_runner.abc import CommandRunner
from statusbar.gateway.command_runner.real import RealCommandRunner
from statusbar.gateway.forge.abc import Forge
from statusbar.gateway.forge.real import RealForge
from statusbar.gateway.summary_launcher.abc import SummaryLauncher
from statusbar.gateway.summary_launcher.real import RealSummaryLauncher
from statusbar.gateway.time.abc import Time
from statusbar.gateway.time.real import RealTime


@dataclass(frozen=True)
class StatuslineContext:
    """Context container for statusline operations.

    Provides access to the command runner, forge, summary launcher and clock
    gateways for testability. All external dependencies are accessed through
    this context.
    """

    runner: CommandRunner
    forge: Forge
    summary_launcher: SummaryLauncher
    time: Time
    options: StatuslineOptions
    environment: StatuslineEnvironment


def create_context(
    options: StatuslineOptions, environ: Mapping[str, str] | None = None
) -> StatuslineContext:
    """Create a StatuslineContext with real gateway implementations.

    Args:
        options: Parsed command-line flags
        environ: Environment to read; defaults to os.environ

    Returns:
        StatuslineContext configured with real gateways
    """
    environment = load_environment(environ)
    return StatuslineContext(
        runner=RealCommandRunner(),
        forge=RealForge(token=environment.github_token, timeout=NETWORK_TIMEOUT_SECONDS),
        summary_launcher=RealSummaryLauncher(),
        time=RealTime(),
        options=options,
        environment=environment,
    )
