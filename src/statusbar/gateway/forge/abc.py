"""Abstract base class for read-only GitHub REST API access."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Forge(ABC):
    """Abstract interface for forge (GitHub) API lookups.

    Only GET requests are needed by the status line. Implementations treat a
    network error, a non-2xx response and an undecodable body alike: the
    call returns None and the caller renders nothing for that source.
    """

    @abstractmethod
    async def get_json(self, path: str, *, params: dict[str, str]) -> Any | None:
        """Fetch a JSON document from the API.

        Args:
            path: API path starting with "/", e.g. "/repos/owner/repo/pulls"
            params: Query string parameters

        Returns:
            Decoded JSON body, or None if the request did not succeed
        """
        ...
