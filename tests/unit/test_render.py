"""Tests for status line composition."""

from dataclasses import replace
from pathlib import Path

import pytest

from statusbar.colored_tokens import RESET, Color, Token, TokenSeq
from statusbar.git_state import GitDirs, GitSnapshot
from statusbar.pr_status import CheckGroups, PRStatus
from statusbar.render import (
    THIN_SPACE,
    StatusFragments,
    build_checks_segment,
    build_git_segment,
    homeify,
    model_abbreviation,
    percent_color,
    render_statusline,
)
from statusbar.transcript import TranscriptDigest

HOME = Path("/home/u")
REPO_DIR = "/home/u/Projects/widgets"
MAIN_DIRS = GitDirs(
    git_dir=Path("/home/u/Projects/widgets/.git"),
    git_common_dir=Path("/home/u/Projects/widgets/.git"),
)
WORKTREE_DIRS = GitDirs(
    git_dir=Path("/home/u/Projects/widgets/.git/worktrees/feature-x"),
    git_common_dir=Path("/home/u/Projects/widgets/.git"),
)
SNAPSHOT = GitSnapshot(
    branch="feature/x", added=0, modified=2, deleted=0, untracked=1, line_delta=0
)
DIGEST = TranscriptDigest(context_percent="42", duration_label="1h 5m", first_user_message=None)


def _plain(text: str) -> str:
    return text.replace(THIN_SPACE, " ")


def _fragments(**overrides: object) -> StatusFragments:
    base = StatusFragments(
        working_dir=REPO_DIR,
        model_name="Opus 4",
        session_id="",
        home=HOME,
        short=False,
        git_dirs=MAIN_DIRS,
        git=SNAPSHOT,
        transcript=DIGEST,
        summary=None,
        pr=None,
    )
    return replace(base, **overrides)


class TestTokens:
    def test_colored_token(self) -> None:
        assert Token("x", Color.RED).render() == f"{Color.RED.value}x{RESET}"

    def test_no_color(self) -> None:
        assert Token("x", Color.RED).render(use_color=False) == "x"

    def test_empty_token_renders_nothing(self) -> None:
        assert Token("", Color.RED).render() == ""
        assert not TokenSeq((Token(""), Token("")))

    def test_join_skips_empty_items(self) -> None:
        seq = TokenSeq((Token("a"), Token(""), Token("b")))
        assert seq.join(",") == "a,b"


class TestHelpers:
    def test_homeify(self) -> None:
        assert homeify("/home/u/code", HOME) == "~/code"
        assert homeify("/home/u", HOME) == "~"
        assert homeify("/home/user2/code", HOME) == "/home/user2/code"
        assert homeify("/srv/code", None) == "/srv/code"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("Opus 4.1", "Opus"), ("Claude Sonnet 4", "Sonnet"), ("haiku", "Haiku"), ("GPT", "?")],
    )
    def test_model_abbreviation(self, name: str, expected: str) -> None:
        assert model_abbreviation(name) == expected

    @pytest.mark.parametrize(
        ("pct", "expected"),
        [
            ("93.4", Color.RED),
            ("90.0", Color.RED),
            ("70", Color.ORANGE),
            ("50", Color.YELLOW),
            ("49", Color.GRAY),
        ],
    )
    def test_percent_color(self, pct: str, expected: Color) -> None:
        assert percent_color(pct) == expected


class TestGitSegment:
    def test_branch_and_counts(self) -> None:
        token = build_git_segment(SNAPSHOT, is_worktree=False, worktree_name="widgets")
        assert _plain(token.text) == "[feature/x ~2 ?1]"
        assert token.color == Color.GREEN

    def test_line_delta(self) -> None:
        snapshot = replace(SNAPSHOT, added=1, deleted=3, line_delta=-12)
        token = build_git_segment(snapshot, is_worktree=False, worktree_name="widgets")
        assert _plain(token.text) == "[feature/x +1 ~2 -3 ?1 Δ-12]"

    def test_clean_tree(self) -> None:
        snapshot = replace(SNAPSHOT, branch="main", modified=0, untracked=0)
        token = build_git_segment(snapshot, is_worktree=False, worktree_name="widgets")
        assert token.text == "[main]"

    def test_worktree_marker(self) -> None:
        token = build_git_segment(SNAPSHOT, is_worktree=True, worktree_name="feature-x")
        assert _plain(token.text) == "[feature/x↟ ~2 ?1]"
        assert token.color == Color.MAGENTA

    def test_worktree_named_after_branch_hides_branch(self) -> None:
        snapshot = replace(SNAPSHOT, branch="feature-x", modified=0, untracked=0)
        token = build_git_segment(snapshot, is_worktree=True, worktree_name="feature-x")
        assert token.text == "[↟]"


class TestChecksSegment:
    def test_order_failures_pending_passed(self) -> None:
        checks = CheckGroups(
            passed=["unit", "ts", "vercel"], failed=["build", "lint"], pending=["sec"]
        )
        text = build_checks_segment(checks).join(" ", use_color=False)
        assert text == "✗2:build,lint ○:sec ✓3"

    def test_long_lists_are_truncated(self) -> None:
        checks = CheckGroups(failed=["a", "b", "c", "d"])
        assert build_checks_segment(checks).join(" ", use_color=False) == "✗4:a,b,c..."

    def test_empty(self) -> None:
        assert not build_checks_segment(CheckGroups())


class TestRenderStatusline:
    def test_full_line(self) -> None:
        fragments = _fragments(
            session_id="abc123",
            summary="Refactor billing client",
            pr=PRStatus(
                url="https://github.com/acme/widgets/pull/42",
                checks=CheckGroups(passed=["unit", "ts", "vercel"], failed=["build", "lint"]),
            ),
        )
        line = _plain(render_statusline(fragments, use_color=False))
        assert line == (
            "~/Projects/widgets [feature/x ~2 ?1] • 42% Opus • 1h 5m"
            " • Refactor billing client"
            " • https://github.com/acme/widgets/pull/42 ✗2:build,lint ✓3"
            " • abc123"
        )

    def test_failed_checks_precede_pass_count(self) -> None:
        pr = PRStatus(url="", checks=CheckGroups(passed=["a", "b", "c"], failed=["build", "lint"]))
        line = _plain(render_statusline(_fragments(pr=pr), use_color=False))
        assert line.index("✗2:build,lint") < line.index("✓3")

    def test_no_color_has_no_escapes(self) -> None:
        line = render_statusline(_fragments(), use_color=False)
        assert "\x1b" not in line

    def test_color_wraps_segments(self) -> None:
        line = render_statusline(_fragments(), use_color=True)
        assert Color.CYAN.value in line
        assert Color.GREEN.value in line
        assert line.endswith(RESET)

    def test_outside_git(self) -> None:
        fragments = _fragments(working_dir="/tmp/scratch", git_dirs=None, git=None)
        line = _plain(render_statusline(fragments, use_color=False))
        assert "[" not in line
        assert line == "/tmp/scratch • 42% Opus • 1h 5m"

    def test_status_failure_keeps_other_segments(self) -> None:
        fragments = _fragments(
            git=None,
            summary="Refactor billing client",
            session_id="abc123",
            pr=PRStatus(url="https://github.com/acme/widgets/pull/42", checks=CheckGroups()),
        )
        line = _plain(render_statusline(fragments, use_color=False))
        assert line == (
            "~/Projects/widgets • 42% Opus • 1h 5m • Refactor billing client"
            " • https://github.com/acme/widgets/pull/42 • abc123"
        )

    def test_pr_url_uses_default_color(self) -> None:
        url = "https://github.com/acme/widgets/pull/42"
        fragments = _fragments(pr=PRStatus(url=url, checks=CheckGroups()))
        line = render_statusline(fragments, use_color=True)
        assert f"{THIN_SPACE}{url}" in line
        assert f"{url}{RESET}" not in line

    def test_no_working_directory(self) -> None:
        fragments = _fragments(working_dir="", git_dirs=None, git=None)
        line = _plain(render_statusline(fragments, use_color=False))
        assert line == "~ • 42% Opus • 1h 5m"

    def test_no_transcript_omits_percent_and_duration(self) -> None:
        line = _plain(render_statusline(_fragments(transcript=None), use_color=False))
        assert line == "~/Projects/widgets [feature/x ~2 ?1] • Opus"

    def test_short_hides_projects_dir(self) -> None:
        line = _plain(render_statusline(_fragments(short=True), use_color=False))
        assert line.startswith("[feature/x ~2 ?1]")

    def test_short_keeps_other_dirs(self) -> None:
        fragments = _fragments(short=True, working_dir="/home/u/code/widgets")
        line = _plain(render_statusline(fragments, use_color=False))
        assert line.startswith("~/code/widgets [feature/x")

    def test_worktree_line(self) -> None:
        fragments = _fragments(
            working_dir="/home/u/Projects/widgets/.worktrees/feature-x", git_dirs=WORKTREE_DIRS
        )
        line = _plain(render_statusline(fragments, use_color=False))
        assert "[feature/x↟ ~2 ?1]" in line

    def test_pr_without_url_shows_checks_only(self) -> None:
        pr = PRStatus(url="", checks=CheckGroups(pending=["sec"]))
        line = _plain(render_statusline(_fragments(pr=pr), use_color=False))
        assert line.endswith("1h 5m ○:sec")
