"""Production GitHub REST client using aiohttp."""

from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp

from statusbar.gateway.forge.abc import Forge

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class RealForge(Forge):
    """GitHub REST client with an optional bearer token.

    A missing token is not an error: requests go out unauthenticated and may be
    rate limited, which surfaces as an ordinary empty result.
    """

    def __init__(
        self, *, token: str | None, timeout: float, base_url: str = GITHUB_API_URL
    ) -> None:
        self._token = token
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._base_url = base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "statusbar",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def get_json(self, path: str, *, params: dict[str, str]) -> Any | None:
        url = f"{self._base_url}{path}"
        try:
            async with aiohttp.ClientSession(
                timeout=self._timeout, headers=self._headers()
            ) as session:
                async with session.get(url, params=params) as response:
                    if response.status < 200 or response.status >= 300:
                        logger.debug("GET %s returned %d", path, response.status)
                        return None
                    body = await response.text()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.debug("GET %s failed: %s", path, e)
            return None

        try:
            return json.loads(body)
        except json.JSONDecodeError:
            logger.debug("GET %s returned malformed JSON", path)
            return None
