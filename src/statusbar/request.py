"""Decoding of the JSON document the host writes to stdin."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusRequest:
    """One status line request. Missing fields are empty strings."""

    working_dir: str
    model_name: str
    session_id: str
    transcript_path: str


EMPTY_REQUEST = StatusRequest(working_dir="", model_name="", session_id="", transcript_path="")


def _string_at(data: dict[str, Any], *keys: str) -> str:
    value: Any = data
    for key in keys:
        if not isinstance(value, dict):
            return ""
        value = value.get(key)
    return value if isinstance(value, str) else ""


def decode_request(raw: str) -> StatusRequest:
    """Parse the stdin payload.

    Expected shape:
        {"workspace": {"current_dir": ...}, "model": {"display_name": ...},
         "session_id": ..., "transcript_path": ...}

    Anything undecodable yields EMPTY_REQUEST rather than an error.
    """
    try:
        data = json.loads(raw) if raw.strip() else {}
    except json.JSONDecodeError as e:
        logger.debug("Ignoring undecodable request: %s", e)
        return EMPTY_REQUEST

    if not isinstance(data, dict):
        return EMPTY_REQUEST

    return StatusRequest(
        working_dir=_string_at(data, "workspace", "current_dir"),
        model_name=_string_at(data, "model", "display_name"),
        session_id=_string_at(data, "session_id"),
        transcript_path=_string_at(data, "transcript_path"),
    )
