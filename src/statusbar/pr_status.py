"""Pull request URL and CI check status from the GitHub REST API.

Two independent lookups, each cached per branch under its own TTL:

- PR URL: open pull request whose head is owner:branch (60s)
- Checks: check runs for HEAD, falling back to the legacy combined status (30s)

Failures of any kind are cached as empty results so an unreachable API is not
hammered on every prompt redraw.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from statusbar.cache_store import CacheStore
from statusbar.config import PR_STATUS_TTL_SECONDS, PR_URL_TTL_SECONDS
from statusbar.gateway.command_runner.abc import CommandRunner
from statusbar.gateway.forge.abc import Forge
from statusbar.git_state import get_head_sha

logger = logging.getLogger(__name__)

CHECK_NAME_ABBREVIATIONS = {
    "Playwright Tests": "play",
    "Unit Tests": "unit",
    "TypeScript": "ts",
    "Lint / Code Quality": "lint",
    "build": "build",
    "Vercel": "vercel",
    "security": "sec",
    "gemini-cli": "gemini",
    "review-pr": "review",
    "claude": "claude",
    "validate-supabase": "supa",
}
FAILING_CONCLUSIONS = frozenset({"failure", "timed_out", "cancelled", "action_required", "stale"})
MAX_SLUG_CHARS = 6
_NON_SLUG = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class CheckGroups:
    """Abbreviated check names grouped by outcome."""

    passed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.passed or self.failed or self.pending)


@dataclass(frozen=True)
class PRStatus:
    url: str
    checks: CheckGroups


def abbreviate_check_name(name: str) -> str:
    """Short token for a check name: lookup table, else a truncated slug."""
    if name in CHECK_NAME_ABBREVIATIONS:
        return CHECK_NAME_ABBREVIATIONS[name]
    return _NON_SLUG.sub("", name.lower())[:MAX_SLUG_CHARS]


def classify_check_runs(runs: list[dict[str, Any]]) -> CheckGroups:
    """Group check runs by conclusion.

    Anything that is neither a success nor a known failure is pending,
    including conclusions this code does not recognize.
    """
    groups = CheckGroups()
    for run in runs:
        if not isinstance(run, dict):
            continue
        name = abbreviate_check_name(run.get("name") or "check")
        conclusion = (run.get("conclusion") or "").lower()
        if conclusion == "success":
            groups.passed.append(name)
        elif conclusion in FAILING_CONCLUSIONS:
            groups.failed.append(name)
        else:
            groups.pending.append(name)
    return groups


def classify_legacy_statuses(statuses: list[dict[str, Any]]) -> CheckGroups:
    groups = CheckGroups()
    for status in statuses:
        if not isinstance(status, dict):
            continue
        name = abbreviate_check_name(status.get("context") or "check")
        state = (status.get("state") or "").lower()
        if state == "success":
            groups.passed.append(name)
        elif state == "pending":
            groups.pending.append(name)
        else:
            groups.failed.append(name)
    return groups


def encode_check_groups(groups: CheckGroups) -> str:
    return json.dumps(asdict(groups))


def decode_check_groups(raw: str) -> CheckGroups | None:
    """Inverse of encode_check_groups; None for corrupt data."""
    try:
        data = json.loads(raw)
        return CheckGroups(
            passed=[str(n) for n in data["passed"]],
            failed=[str(n) for n in data["failed"]],
            pending=[str(n) for n in data["pending"]],
        )
    except (json.JSONDecodeError, KeyError, TypeError):
        return None


async def fetch_pr_url(
    forge: Forge, cache: CacheStore, *, owner: str, repo: str, branch: str
) -> str:
    """URL of the open PR for branch, or "" if there is none."""
    key = f"pr-{branch}"
    cached = cache.read(key, PR_URL_TTL_SECONDS)
    if cached is not None:
        return cached

    pulls = await forge.get_json(
        f"/repos/{owner}/{repo}/pulls",
        params={"head": f"{owner}:{branch}", "state": "open", "per_page": "1"},
    )
    url = ""
    if isinstance(pulls, list) and pulls and isinstance(pulls[0], dict):
        html_url = pulls[0].get("html_url")
        if isinstance(html_url, str):
            url = html_url

    cache.write(key, url)
    return url


async def fetch_check_groups(
    forge: Forge,
    cache: CacheStore,
    runner: CommandRunner,
    *,
    owner: str,
    repo: str,
    branch: str,
    cwd: Path,
    timeout: float,
) -> CheckGroups:
    """CI check outcomes for the checked-out commit."""
    key = f"pr-status-{branch}"
    cached = cache.read(key, PR_STATUS_TTL_SECONDS)
    if cached is not None:
        decoded = decode_check_groups(cached) if cached else CheckGroups()
        if decoded is not None:
            return decoded

    sha = await get_head_sha(runner, cwd, timeout=timeout)
    if sha is None:
        logger.debug("No HEAD commit, caching empty check status for %s", branch)
        groups = CheckGroups()
        cache.write(key, encode_check_groups(groups))
        return groups

    groups = CheckGroups()
    check_runs = await forge.get_json(
        f"/repos/{owner}/{repo}/commits/{sha}/check-runs", params={"per_page": "100"}
    )
    if isinstance(check_runs, dict) and isinstance(check_runs.get("check_runs"), list):
        groups = classify_check_runs(check_runs["check_runs"])

    if groups.is_empty:
        combined = await forge.get_json(f"/repos/{owner}/{repo}/commits/{sha}/status", params={})
        if isinstance(combined, dict) and isinstance(combined.get("statuses"), list):
            groups = classify_legacy_statuses(combined["statuses"])

    cache.write(key, encode_check_groups(groups))
    return groups


async def collect_pr_status(
    forge: Forge,
    cache: CacheStore,
    runner: CommandRunner,
    *,
    owner: str,
    repo: str,
    branch: str,
    cwd: Path,
    timeout: float,
) -> PRStatus:
    """Run the URL and check lookups concurrently."""
    url, checks = await asyncio.gather(
        fetch_pr_url(forge, cache, owner=owner, repo=repo, branch=branch),
        fetch_check_groups(
            forge, cache, runner, owner=owner, repo=repo, branch=branch, cwd=cwd, timeout=timeout
        ),
    )
    return PRStatus(url=url, checks=checks)
