"""Fake forge for testing."""

from __future__ import annotations

from typing import Any

from statusbar.gateway.forge.abc import Forge


class FakeForge(Forge):
    """In-memory forge returning pre-configured JSON documents.

    Unconfigured paths behave like an unreachable API and return None.

    Constructor Injection:
    ---------------------
    - responses: Mapping of API path -> decoded JSON body
    """

    def __init__(self, *, responses: dict[str, Any] | None = None) -> None:
        self._responses = responses if responses is not None else {}
        self._requests: list[tuple[str, dict[str, str]]] = []

    async def get_json(self, path: str, *, params: dict[str, str]) -> Any | None:
        self._requests.append((path, dict(params)))
        return self._responses.get(path)

    @property
    def requests(self) -> list[tuple[str, dict[str, str]]]:
        """(path, params) of every request made, in order."""
        return list(self._requests)
