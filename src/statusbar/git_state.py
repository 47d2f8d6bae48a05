"""Git working-tree state for the status line.

Everything here is derived fresh on each invocation and never cached: it is
cheap to compute, changes constantly, and a stale branch name or file count
would be misleading.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from statusbar.gateway.command_runner.abc import CommandRunner

logger = logging.getLogger(__name__)

DETACHED_HEAD = "(detached)"
BRANCH_HEADER = "# branch.head "

_GITHUB_REMOTE = re.compile(
    r"^(?:git@github\.com:|(?:https?|ssh)://(?:[^@/]+@)?github\.com/)([^/]+)/([^/]+?)(?:\.git)?/?$",
    re.IGNORECASE,
)
_INSERTIONS = re.compile(r"(\d+)\s+insertions?\(\+\)")
_DELETIONS = re.compile(r"(\d+)\s+deletions?\(-\)")


@dataclass(frozen=True)
class GitDirs:
    """Absolute git directories for a working directory."""

    git_dir: Path
    git_common_dir: Path

    @property
    def is_worktree(self) -> bool:
        """True inside a linked worktree (git dir lives under .git/worktrees/)."""
        return "worktrees" in self.git_dir.parts


@dataclass(frozen=True)
class StatusCounts:
    added: int = 0
    modified: int = 0
    deleted: int = 0
    untracked: int = 0

    @property
    def is_clean(self) -> bool:
        return self.added + self.modified + self.deleted + self.untracked == 0


@dataclass(frozen=True)
class GitSnapshot:
    """Branch, file counts and line delta of one working tree."""

    branch: str
    added: int
    modified: int
    deleted: int
    untracked: int
    line_delta: int


async def run_git(runner: CommandRunner, args: list[str], cwd: Path, timeout: float) -> str | None:
    return await runner.run(["git", *args], cwd=cwd, timeout=timeout)


async def get_git_dirs(runner: CommandRunner, cwd: Path, *, timeout: float) -> GitDirs | None:
    """Resolve the git dir and common dir, or None outside a working tree.

    A single rev-parse call answers all three questions; relative paths in
    its output are relative to cwd.
    """
    output = await run_git(
        runner,
        ["rev-parse", "--is-inside-work-tree", "--git-dir", "--git-common-dir"],
        cwd,
        timeout,
    )
    if not output:
        return None

    lines = output.splitlines()
    if len(lines) < 2 or lines[0].strip() != "true":
        return None

    git_dir = (cwd / lines[1].strip()).resolve()
    common = lines[2].strip() if len(lines) > 2 and lines[2].strip() else lines[1].strip()
    return GitDirs(git_dir=git_dir, git_common_dir=(cwd / common).resolve())


def _classify(xy: str) -> str:
    if "A" in xy:
        return "added"
    if "M" in xy:
        return "modified"
    if "D" in xy:
        return "deleted"
    # rename/copy/unmerged codes without A/M/D
    return "modified"


def parse_status_v2(output: str) -> tuple[str, StatusCounts]:
    """Parse `git status --porcelain=v2 --branch -z` output.

    Returns:
        (branch header value or "", counts by category)
    """
    branch = ""
    counts = {"added": 0, "modified": 0, "deleted": 0, "untracked": 0}

    fields = output.split("\0")
    skip_next = False
    for field in fields:
        if skip_next:
            # original path of a rename/copy entry
            skip_next = False
            continue
        if not field:
            continue

        if field.startswith(BRANCH_HEADER):
            branch = field[len(BRANCH_HEADER) :].strip()
            continue

        tag = field[0]
        if tag in ("1", "2", "u"):
            counts[_classify(field[2:4])] += 1
            if tag == "2":
                skip_next = True
        elif tag == "?":
            counts["untracked"] += 1

    return branch, StatusCounts(**counts)


def parse_shortstat(output: str) -> int:
    """Insertions minus deletions from `git diff --shortstat`."""
    insertions = _INSERTIONS.search(output)
    deletions = _DELETIONS.search(output)
    adds = int(insertions.group(1)) if insertions else 0
    dels = int(deletions.group(1)) if deletions else 0
    return adds - dels


async def resolve_branch(runner: CommandRunner, cwd: Path, parsed: str, *, timeout: float) -> str:
    """Branch name for display, falling back to a short hash on detached HEAD."""
    if parsed and parsed != DETACHED_HEAD:
        return parsed

    current = await run_git(runner, ["branch", "--show-current"], cwd, timeout)
    if current:
        return current

    sha = await run_git(runner, ["rev-parse", "--short", "HEAD"], cwd, timeout)
    return sha or ""


async def collect_git_snapshot(
    runner: CommandRunner, cwd: Path, *, include_delta: bool, timeout: float
) -> GitSnapshot | None:
    """Collect branch, file counts and (optionally) the line delta.

    Args:
        runner: Command runner gateway
        cwd: Directory inside the working tree
        include_delta: Whether to issue the extra diff call for a dirty tree
        timeout: Per-command budget in seconds

    Returns:
        GitSnapshot, or None if the status call failed (not a repository,
        timeout, git missing)
    """
    output = await run_git(
        runner,
        [
            "-c",
            "status.renameLimit=0",
            "-c",
            "diff.renames=0",
            "status",
            "--porcelain=v2",
            "--branch",
            "-z",
        ],
        cwd,
        timeout,
    )
    if output is None:
        return None

    parsed_branch, counts = parse_status_v2(output)
    branch = await resolve_branch(runner, cwd, parsed_branch, timeout=timeout)

    line_delta = 0
    if include_delta and not counts.is_clean:
        stat = await run_git(runner, ["-c", "diff.renames=0", "diff", "--shortstat"], cwd, timeout)
        if stat:
            line_delta = parse_shortstat(stat)

    return GitSnapshot(
        branch=branch,
        added=counts.added,
        modified=counts.modified,
        deleted=counts.deleted,
        untracked=counts.untracked,
        line_delta=line_delta,
    )


def parse_github_remote(url: str) -> tuple[str, str] | None:
    """Parse owner and repo from a GitHub remote URL.

    Supports both SSH and HTTPS forms:
    - git@github.com:owner/repo.git
    - https://github.com/owner/repo
    """
    match = _GITHUB_REMOTE.search(url.strip())
    if match is None:
        return None
    return match.group(1), match.group(2)


async def get_github_remote(
    runner: CommandRunner, cwd: Path, *, timeout: float
) -> tuple[str, str] | None:
    url = await run_git(runner, ["remote", "get-url", "origin"], cwd, timeout)
    if not url:
        return None
    return parse_github_remote(url)


async def get_head_sha(runner: CommandRunner, cwd: Path, *, timeout: float) -> str | None:
    sha = await run_git(runner, ["rev-parse", "HEAD"], cwd, timeout)
    return sha or None
