from pathlib import Path

from statusbar.config import (
    DEFAULT_CONTEXT_MAX,
    LARGE_CONTEXT_MAX,
    context_max_for_model,
    load_environment,
)


class TestLoadEnvironment:
    def test_empty_environment(self) -> None:
        env = load_environment({})
        assert env.github_token is None
        assert env.context_max_override is None
        assert env.home is None
        assert env.debug is False

    def test_github_token_takes_precedence(self) -> None:
        env = load_environment({"GITHUB_TOKEN": "ghp_one", "GH_TOKEN": "ghp_two"})
        assert env.github_token == "ghp_one"

    def test_gh_token_fallback(self) -> None:
        env = load_environment({"GITHUB_TOKEN": "", "GH_TOKEN": "ghp_two"})
        assert env.github_token == "ghp_two"

    def test_context_max_override(self) -> None:
        assert load_environment({"CLAUDE_CTX_MAX": "1000000"}).context_max_override == 1_000_000

    def test_invalid_context_max_is_ignored(self) -> None:
        for raw in ("0", "-5", "lots", "1e6"):
            assert load_environment({"CLAUDE_CTX_MAX": raw}).context_max_override is None

    def test_home_and_debug(self) -> None:
        env = load_environment({"HOME": "/home/u", "STATUSBAR_DEBUG": "1"})
        assert env.home == Path("/home/u")
        assert env.debug is True


class TestContextMaxForModel:
    def test_large_models(self) -> None:
        assert context_max_for_model("Opus 4", None) == LARGE_CONTEXT_MAX
        assert context_max_for_model("Claude Sonnet 4.5", None) == LARGE_CONTEXT_MAX

    def test_other_models(self) -> None:
        assert context_max_for_model("Haiku", None) == DEFAULT_CONTEXT_MAX
        assert context_max_for_model("", None) == DEFAULT_CONTEXT_MAX

    def test_override_wins(self) -> None:
        assert context_max_for_model("Opus 4", 1_000_000) == 1_000_000
