import os
from pathlib import Path

from statusbar.cache_store import CacheStore
from statusbar.gateway.summary_launcher.fake import FakeSummaryLauncher
from statusbar.gateway.time.fake import FakeTime
from statusbar.session_summary import (
    build_summary_prompt,
    get_session_summary,
    summary_cache_key,
)

CWD = Path("/work/repo")
SESSION = "4f9c2a"
FIRST_MESSAGE = "Please refactor the billing module to use the new API client"


def _summary(
    cache: CacheStore, launcher: FakeSummaryLauncher, first_message: str | None = FIRST_MESSAGE
) -> str | None:
    return get_session_summary(
        cache, launcher, session_id=SESSION, first_user_message=first_message, cwd=CWD
    )


def _set_age(cache: CacheStore, fake_time: FakeTime, seconds: float) -> None:
    mtime = fake_time.now() - seconds
    os.utime(cache.path(summary_cache_key(SESSION)), (mtime, mtime))


def test_first_call_claims_slot_and_launches(cache: CacheStore) -> None:
    launcher = FakeSummaryLauncher()

    assert _summary(cache, launcher) is None

    assert len(launcher.launched) == 1
    launched = launcher.launched[0]
    assert launched.output_path == cache.path("session-4f9c2a-summary")
    assert launched.cwd == CWD
    assert FIRST_MESSAGE in launched.prompt
    assert cache.read_raw(summary_cache_key(SESSION)) == ""


def test_in_flight_placeholder_does_not_relaunch(cache: CacheStore, fake_time: FakeTime) -> None:
    launcher = FakeSummaryLauncher()
    _summary(cache, launcher)
    _set_age(cache, fake_time, 5)

    assert _summary(cache, launcher) is None
    assert len(launcher.launched) == 1


def test_stale_placeholder_is_reclaimed(cache: CacheStore, fake_time: FakeTime) -> None:
    launcher = FakeSummaryLauncher()
    _summary(cache, launcher)
    _set_age(cache, fake_time, 61)

    assert _summary(cache, launcher) is None
    assert len(launcher.launched) == 2


def test_completed_summary_is_returned_without_launch(cache: CacheStore) -> None:
    cache.write_raw(summary_cache_key(SESSION), "  Refactor billing API client\n")
    launcher = FakeSummaryLauncher()

    assert _summary(cache, launcher) == "Refactor billing API client"
    assert launcher.launched == []


def test_completed_summary_needs_no_transcript(cache: CacheStore) -> None:
    cache.write_raw(summary_cache_key(SESSION), "Refactor billing API client")
    summary = _summary(cache, FakeSummaryLauncher(), first_message=None)
    assert summary == "Refactor billing API client"


def test_nothing_to_summarize(cache: CacheStore) -> None:
    launcher = FakeSummaryLauncher()
    assert _summary(cache, launcher, first_message=None) is None
    assert launcher.launched == []


def test_missing_session_id(cache: CacheStore) -> None:
    launcher = FakeSummaryLauncher()
    result = get_session_summary(
        cache, launcher, session_id="", first_user_message=FIRST_MESSAGE, cwd=CWD
    )
    assert result is None
    assert launcher.launched == []


def test_failed_launch_still_returns_none(cache: CacheStore) -> None:
    assert _summary(cache, FakeSummaryLauncher(succeeds=False)) is None


def test_prompt_uses_first_500_characters() -> None:
    prompt = build_summary_prompt("a" * 600 + "TAIL")
    assert "a" * 500 + "</TEXTBLOCK>" in prompt
    assert "TAIL" not in prompt
    assert prompt.startswith("Write a 3-6 word summary")


def test_session_id_with_path_separator_is_rejected(cache: CacheStore) -> None:
    launcher = FakeSummaryLauncher()
    result = get_session_summary(
        cache, launcher, session_id="../../escape", first_user_message=FIRST_MESSAGE, cwd=CWD
    )
    assert result is None
    assert launcher.launched == []
    assert not cache.root.exists()
