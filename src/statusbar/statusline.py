#!/usr/bin/env python3
"""
Prompt status line.

Reads one JSON request on stdin and prints a single colorized line:
directory, git branch and file counts, context usage and duration of the
AI session, a generated session summary, and PR/CI status.

The slow sources run concurrently on one event loop. Each carries its own
timeout, and a source that fails or times out is simply left out of the line.
The command always exits 0.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable
from pathlib import Path
from typing import TypeVar

import click

from statusbar.cache_store import CacheStore
from statusbar.config import (
    CACHE_SUBDIR,
    COLLECTOR_TIMEOUT_SECONDS,
    SUBPROCESS_TIMEOUT_SECONDS,
    StatuslineOptions,
    context_max_for_model,
)
from statusbar.context import StatuslineContext, create_context
from statusbar.git_state import (
    GitDirs,
    GitSnapshot,
    collect_git_snapshot,
    get_git_dirs,
    get_github_remote,
)
from statusbar.pr_status import PRStatus, collect_pr_status
from statusbar.render import StatusFragments, render_statusline
from statusbar.request import StatusRequest, decode_request
from statusbar.session_summary import get_session_summary
from statusbar.transcript import TranscriptDigest, scan_transcript

logger = logging.getLogger(__name__)

T = TypeVar("T")

# unknown argv entries are ignored rather than rejected
CONTEXT_SETTINGS = dict(
    help_option_names=["-h", "--help"],
    ignore_unknown_options=True,
    allow_extra_args=True,
)


async def settle(name: str, awaitable: Awaitable[T], timeout: float) -> T | None:
    """Await a collector, turning any failure or timeout into None.

    A failing collector never cancels its siblings.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError:
        logger.debug("%s timed out after %.1fs", name, timeout)
        return None
    except Exception:
        logger.debug("%s failed", name, exc_info=True)
        return None


async def build_statusline(ctx: StatuslineContext, request: StatusRequest) -> str:
    """Collect every fragment for request and render the line."""
    options = ctx.options
    cwd = Path(request.working_dir) if request.working_dir else None

    git_dirs: GitDirs | None = None
    if cwd is not None:
        git_dirs = await settle(
            "git dirs",
            get_git_dirs(ctx.runner, cwd, timeout=SUBPROCESS_TIMEOUT_SECONDS),
            COLLECTOR_TIMEOUT_SECONDS,
        )

    cache = None
    if git_dirs is not None:
        cache = CacheStore(root=git_dirs.git_common_dir / CACHE_SUBDIR, time=ctx.time)

    context_max = context_max_for_model(
        request.model_name, ctx.environment.context_max_override
    )

    async def transcript_task() -> TranscriptDigest | None:
        if options.no_transcript:
            return None
        # synchronous: the bounded scan completes before the git task starts
        return scan_transcript(request.transcript_path, context_max=context_max, cache=cache)

    async def git_task() -> GitSnapshot | None:
        if cwd is None or git_dirs is None:
            return None
        return await collect_git_snapshot(
            ctx.runner, cwd, include_delta=not options.no_diff, timeout=SUBPROCESS_TIMEOUT_SECONDS
        )

    transcript = asyncio.ensure_future(
        settle("transcript", transcript_task(), COLLECTOR_TIMEOUT_SECONDS)
    )
    git = asyncio.ensure_future(settle("git state", git_task(), COLLECTOR_TIMEOUT_SECONDS))

    async def pr_task() -> PRStatus | None:
        if options.no_pr or cwd is None or cache is None:
            return None
        remote = await get_github_remote(ctx.runner, cwd, timeout=SUBPROCESS_TIMEOUT_SECONDS)
        if remote is None:
            return None
        # shared with the final gather; a timeout here must not cancel it
        snapshot = await asyncio.shield(git)
        if snapshot is None or not snapshot.branch:
            return None
        owner, repo = remote
        return await collect_pr_status(
            ctx.forge,
            cache,
            ctx.runner,
            owner=owner,
            repo=repo,
            branch=snapshot.branch,
            cwd=cwd,
            timeout=SUBPROCESS_TIMEOUT_SECONDS,
        )

    async def summary_task() -> str | None:
        if options.no_transcript or cwd is None or cache is None:
            return None
        digest = await asyncio.shield(transcript)
        return get_session_summary(
            cache,
            ctx.summary_launcher,
            session_id=request.session_id,
            first_user_message=digest.first_user_message if digest is not None else None,
            cwd=cwd,
        )

    transcript_digest, snapshot, pr, summary = await asyncio.gather(
        transcript,
        git,
        settle("pr status", pr_task(), COLLECTOR_TIMEOUT_SECONDS),
        settle("session summary", summary_task(), COLLECTOR_TIMEOUT_SECONDS),
    )

    fragments = StatusFragments(
        working_dir=request.working_dir,
        model_name=request.model_name,
        session_id=request.session_id,
        home=ctx.environment.home,
        short=options.short,
        git_dirs=git_dirs,
        git=snapshot,
        transcript=transcript_digest,
        summary=summary,
        pr=pr,
    )
    return render_statusline(fragments, use_color=not options.no_color)


def configure_logging(debug: bool) -> None:
    """Send package logs to stderr only when debugging is requested."""
    root = logging.getLogger("statusbar")
    if root.handlers:
        return
    if debug:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)
    else:
        root.addHandler(logging.NullHandler())
        root.propagate = False


@click.command("statusbar", context_settings=CONTEXT_SETTINGS)
@click.option("--short", is_flag=True, help="Omit the directory when it is ~/Projects/<repo>.")
@click.option("--no-pr", is_flag=True, help="Skip the PR URL and CI check lookups.")
@click.option("--no-diff", is_flag=True, help="Skip the line-delta computation.")
@click.option("--no-transcript", is_flag=True, help="Skip transcript scanning and summaries.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors.")
def main(short: bool, no_pr: bool, no_diff: bool, no_transcript: bool, no_color: bool) -> None:
    """Print the status line for the JSON request on stdin."""
    options = StatuslineOptions(
        short=short,
        no_pr=no_pr,
        no_diff=no_diff,
        no_transcript=no_transcript,
        no_color=no_color,
    )
    try:
        ctx = create_context(options)
        configure_logging(ctx.environment.debug)
        request = decode_request(click.get_text_stream("stdin").read())
        line = asyncio.run(build_statusline(ctx, request))
    except Exception:
        logger.debug("Status line failed", exc_info=True)
        line = "~"

    click.echo(line, nl=False)


if __name__ == "__main__":
    main()
