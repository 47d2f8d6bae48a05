"""Composition of the final status line.

Pure functions only: given whatever fragments resolved, build the line.
A fragment that is None was absent, failed or timed out, and its segment is
simply left out.

Layout (segments joined by thin spaces):
    ~/dir [branch +A ~M -D ?U Δ+N] • 42% Opus • 1h 5m • summary
        • PR-url ✗2:build,lint ✓3 • session
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from statusbar.colored_tokens import Color, Token, TokenSeq
from statusbar.git_state import GitDirs, GitSnapshot
from statusbar.pr_status import CheckGroups, PRStatus
from statusbar.transcript import TranscriptDigest

THIN_SPACE = "\u2009"
BULLET = "•"
WORKTREE_MARKER = "↟"
MAX_LISTED_CHECKS = 3
HOME_PROJECTS_DIR = "Projects"


@dataclass(frozen=True)
class StatusFragments:
    """Everything the renderer may show. None means "not available"."""

    working_dir: str
    model_name: str
    session_id: str
    home: Path | None
    short: bool
    git_dirs: GitDirs | None
    git: GitSnapshot | None
    transcript: TranscriptDigest | None
    summary: str | None
    pr: PRStatus | None


def homeify(path: str, home: Path | None) -> str:
    """Abbreviate a leading home directory to "~"."""
    if home is None:
        return path
    home_str = str(home).rstrip("/")
    if not home_str:
        return path
    if path == home_str:
        return "~"
    if path.startswith(home_str + "/"):
        return "~" + path[len(home_str) :]
    return path


def model_abbreviation(model_name: str) -> str:
    lowered = model_name.lower()
    for family in ("Opus", "Sonnet", "Haiku"):
        if family.lower() in lowered:
            return family
    return "?"


def percent_color(context_percent: str) -> Color:
    try:
        pct = float(context_percent)
    except ValueError:
        pct = 0.0
    if pct >= 90:
        return Color.RED
    if pct >= 70:
        return Color.ORANGE
    if pct >= 50:
        return Color.YELLOW
    return Color.GRAY


def _bullet(*tokens: Token) -> TokenSeq:
    """A segment introduced by a gray bullet."""
    return TokenSeq((Token(THIN_SPACE), Token(BULLET, Color.GRAY), Token(THIN_SPACE), *tokens))


def build_model_segment(model_name: str, transcript: TranscriptDigest | None) -> TokenSeq:
    if not model_name:
        return TokenSeq()

    tokens: list[Token] = []
    if transcript is not None:
        pct = transcript.context_percent
        tokens.extend([Token(f"{pct}%", percent_color(pct)), Token(THIN_SPACE)])
    tokens.append(Token(model_abbreviation(model_name), Color.GRAY))

    parts: list[Token | TokenSeq] = [_bullet(*tokens)]
    if transcript is not None and transcript.duration_label:
        parts.append(_bullet(Token(transcript.duration_label, Color.LIGHT_GRAY)))
    return TokenSeq(tuple(parts))


def git_status_text(snapshot: GitSnapshot) -> str:
    """Counts and line delta, each preceded by a thin space."""
    text = ""
    for symbol, count in (
        ("+", snapshot.added),
        ("~", snapshot.modified),
        ("-", snapshot.deleted),
        ("?", snapshot.untracked),
    ):
        if count:
            text += f"{THIN_SPACE}{symbol}{count}"
    if snapshot.line_delta > 0:
        text += f"{THIN_SPACE}Δ+{snapshot.line_delta}"
    elif snapshot.line_delta < 0:
        text += f"{THIN_SPACE}Δ{snapshot.line_delta}"
    return text


def build_git_segment(snapshot: GitSnapshot, *, is_worktree: bool, worktree_name: str) -> Token:
    """Bracketed branch and status, e.g. [main ~2 ?1].

    In a linked worktree the segment is magenta and carries a marker; the
    branch name is dropped when it equals the worktree directory name.
    """
    status = git_status_text(snapshot)
    if is_worktree:
        branch = "" if snapshot.branch == worktree_name else snapshot.branch
        return Token(f"[{branch}{WORKTREE_MARKER}{status}]", Color.MAGENTA)
    return Token(f"[{snapshot.branch}{status}]", Color.GREEN)


def _check_group(symbol: str, names: list[str], color: Color) -> Token:
    count = str(len(names)) if len(names) > 1 else ""
    listed = ",".join(names[:MAX_LISTED_CHECKS])
    more = "..." if len(names) > MAX_LISTED_CHECKS else ""
    return Token(f"{symbol}{count}:{listed}{more}", color)


def build_checks_segment(checks: CheckGroups) -> TokenSeq:
    """Failures first, then pending, then the pass count."""
    tokens: list[Token] = []
    if checks.failed:
        tokens.append(_check_group("✗", checks.failed, Color.RED))
    if checks.pending:
        tokens.append(_check_group("○", checks.pending, Color.YELLOW))
    if checks.passed:
        tokens.append(Token(f"✓{len(checks.passed)}", Color.GREEN))
    return TokenSeq(tuple(tokens))


def _display_dir(fragments: StatusFragments) -> str:
    """Directory text for a git line; empty under --short for ~/Projects/<name>."""
    working_dir = fragments.working_dir
    if fragments.short and fragments.home is not None:
        home_project = fragments.home / HOME_PROJECTS_DIR / Path(working_dir).name
        if working_dir == str(home_project):
            return ""
    return homeify(working_dir, fragments.home)


def render_statusline(fragments: StatusFragments, *, use_color: bool) -> str:
    """Render the status line for the resolved fragments."""
    model = build_model_segment(fragments.model_name, fragments.transcript)

    if not fragments.working_dir:
        line = TokenSeq((Token("~", Color.CYAN), model))
        return line.render(use_color=use_color)

    if fragments.git_dirs is None:
        line = TokenSeq((Token(homeify(fragments.working_dir, fragments.home), Color.CYAN), model))
        return line.render(use_color=use_color)

    directory = _display_dir(fragments)
    parts: list[Token | TokenSeq] = [Token(directory, Color.CYAN)]
    # a failed status call only drops the bracket; the other segments still render
    if fragments.git is not None:
        if directory:
            parts.append(Token(THIN_SPACE))
        parts.append(
            build_git_segment(
                fragments.git,
                is_worktree=fragments.git_dirs.is_worktree,
                worktree_name=Path(fragments.working_dir).name,
            )
        )
    parts.append(model)

    if fragments.summary:
        parts.append(_bullet(Token(fragments.summary, Color.STEEL_BLUE)))

    if fragments.pr is not None:
        if fragments.pr.url:
            parts.append(_bullet(Token(fragments.pr.url)))
        checks = build_checks_segment(fragments.pr.checks)
        if checks:
            parts.append(Token(THIN_SPACE))
            parts.append(Token(checks.join(THIN_SPACE, use_color=use_color)))

    if fragments.session_id:
        parts.append(_bullet(Token(fragments.session_id, Color.GRAY)))

    return TokenSeq(tuple(parts)).render(use_color=use_color)
