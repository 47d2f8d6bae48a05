"""Bounded scanning of the session transcript.

The transcript is an append-only JSONL log that can grow to many megabytes.
Only a head window and a tail window are ever read:

- head: session start time and the first meaningful user message
- tail: last timestamp and the most recent assistant token usage

Results are cached per transcript path together with the file fingerprint
(mtime, size). While the fingerprint is unchanged no file content is read.

Transcript Entry Structure (fields used here):
    {
        "timestamp": ISO_string | epoch_number,
        "message": {
            "role": "user" | "assistant",
            "content": str | [{"type": "text", "text": "..."}, ...],
            "usage": {"input_tokens": n, "output_tokens": n,
                      "cache_read_input_tokens": n,
                      "cache_creation_input_tokens": n}
        }
    }
"""

from __future__ import annotations

import base64
import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from statusbar.cache_store import CacheStore
from statusbar.config import TRANSCRIPT_HEAD_BYTES, TRANSCRIPT_TAIL_BYTES

logger = logging.getLogger(__name__)

MIN_USER_MESSAGE_CHARS = 20
BOILERPLATE_PREFIXES = ("/", "Caveat:", "<command-", "<local-command-")
BOILERPLATE_FRAGMENTS = ("(no content)", "DO NOT respond to these messages")
USAGE_FIELDS = (
    "input_tokens",
    "output_tokens",
    "cache_read_input_tokens",
    "cache_creation_input_tokens",
)
# Numeric timestamps above this are epoch milliseconds
_EPOCH_MILLIS_THRESHOLD = 1e11


# ============================================================================
# Records
# ============================================================================


@dataclass(frozen=True)
class UserMessage:
    timestamp: float | None
    text: str | None


@dataclass(frozen=True)
class AssistantUsage:
    timestamp: float | None
    tokens: int


@dataclass(frozen=True)
class OtherRecord:
    timestamp: float | None


@dataclass(frozen=True)
class MalformedLine:
    """A line that is not a JSON object. Skipped by the scanner."""

    error: str


TranscriptRecord = UserMessage | AssistantUsage | OtherRecord


def parse_timestamp(value: Any) -> float | None:
    """Epoch seconds from an ISO-8601 string or an epoch number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = float(value)
        if seconds > _EPOCH_MILLIS_THRESHOLD:
            seconds /= 1000.0
        return seconds
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
        except ValueError:
            return None
    return None


def _message_text(content: Any) -> str | None:
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list) and content:
        first = content[0]
        if isinstance(first, dict) and isinstance(first.get("text"), str):
            return first["text"].strip()
    return None


def _usage_tokens(usage: dict[str, Any]) -> int:
    total = 0
    for field in USAGE_FIELDS:
        value = usage.get(field)
        if isinstance(value, int) and not isinstance(value, bool):
            total += value
    return total


def parse_record(line: str) -> TranscriptRecord | MalformedLine:
    """Classify one transcript line."""
    try:
        entry = json.loads(line)
    except json.JSONDecodeError as e:
        return MalformedLine(error=str(e))
    if not isinstance(entry, dict):
        return MalformedLine(error="not a JSON object")

    timestamp = parse_timestamp(entry.get("timestamp"))
    message = entry.get("message")
    if not isinstance(message, dict):
        return OtherRecord(timestamp=timestamp)

    role = message.get("role")
    if role == "user":
        return UserMessage(timestamp=timestamp, text=_message_text(message.get("content")))
    usage = message.get("usage")
    if role == "assistant" and isinstance(usage, dict):
        return AssistantUsage(timestamp=timestamp, tokens=_usage_tokens(usage))
    return OtherRecord(timestamp=timestamp)


def is_meaningful_user_text(text: str | None) -> bool:
    """True for real prompts; false for slash commands and injected boilerplate."""
    if not text or len(text) <= MIN_USER_MESSAGE_CHARS:
        return False
    if text.startswith(BOILERPLATE_PREFIXES):
        return False
    return not any(fragment in text for fragment in BOILERPLATE_FRAGMENTS)


# ============================================================================
# Formatting
# ============================================================================


def format_context_percent(used_tokens: int, context_max: int) -> str:
    """Percentage of the context window in use.

    One decimal place from 90% upward, where the difference matters;
    whole numbers below.
    """
    if context_max <= 0:
        return "0"
    pct = min(100.0, used_tokens * 100.0 / context_max)
    if pct >= 90:
        return f"{pct:.1f}"
    return str(int(pct + 0.5))


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return "<1m"
    total_minutes = int(seconds // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


# ============================================================================
# Scanning
# ============================================================================


@dataclass(frozen=True)
class TranscriptDigest:
    context_percent: str
    duration_label: str | None
    first_user_message: str | None


EMPTY_DIGEST = TranscriptDigest(context_percent="0", duration_label=None, first_user_message=None)


@dataclass(frozen=True)
class Fingerprint:
    mtime_ms: int
    size: int


def digest_cache_key(transcript_path: str) -> str:
    encoded = base64.urlsafe_b64encode(transcript_path.encode("utf-8")).decode("ascii")
    return f"tcache-{encoded.rstrip('=')}.json"


def _read_cached_digest(
    cache: CacheStore, transcript_path: str, fingerprint: Fingerprint, context_max: int
) -> TranscriptDigest | None:
    raw = cache.read_raw(digest_cache_key(transcript_path))
    if not raw:
        return None
    try:
        data = json.loads(raw)
        if (
            data["mtime_ms"] != fingerprint.mtime_ms
            or data["size"] != fingerprint.size
            or data["context_max"] != context_max
        ):
            return None
        digest = data["digest"]
        return TranscriptDigest(
            context_percent=str(digest["context_percent"]),
            duration_label=digest.get("duration_label"),
            first_user_message=digest.get("first_user_message"),
        )
    except (json.JSONDecodeError, KeyError, TypeError):
        return None


def _write_cached_digest(
    cache: CacheStore,
    transcript_path: str,
    fingerprint: Fingerprint,
    context_max: int,
    digest: TranscriptDigest,
) -> None:
    payload = {
        "mtime_ms": fingerprint.mtime_ms,
        "size": fingerprint.size,
        "context_max": context_max,
        "digest": asdict(digest),
    }
    cache.write_raw(digest_cache_key(transcript_path), json.dumps(payload))


def read_windows(path: Path, size: int) -> tuple[list[str], list[str]]:
    """Read the head and tail windows as lists of complete lines.

    A window that ends (head) or starts (tail) mid-file drops its partial line.
    Small files are read once and both windows share the same lines.
    """
    with open(path, "rb") as f:
        if size <= TRANSCRIPT_HEAD_BYTES + TRANSCRIPT_TAIL_BYTES:
            text = f.read(size).decode("utf-8", errors="replace")
            lines = [line for line in text.split("\n") if line.strip()]
            return lines, lines

        head = f.read(TRANSCRIPT_HEAD_BYTES).decode("utf-8", errors="replace")
        f.seek(size - TRANSCRIPT_TAIL_BYTES)
        tail = f.read(TRANSCRIPT_TAIL_BYTES).decode("utf-8", errors="replace")

    head = head[: head.rfind("\n") + 1]
    newline = tail.find("\n")
    tail = "" if newline == -1 else tail[newline + 1 :]
    head_lines = [line for line in head.split("\n") if line.strip()]
    tail_lines = [line for line in tail.split("\n") if line.strip()]
    return head_lines, tail_lines


def summarize_lines(
    head_lines: list[str], tail_lines: list[str], *, context_max: int
) -> TranscriptDigest:
    first_timestamp: float | None = None
    first_message: str | None = None
    for line in head_lines:
        record = parse_record(line)
        if isinstance(record, MalformedLine):
            continue
        if first_timestamp is None and record.timestamp is not None:
            first_timestamp = record.timestamp
        if (
            first_message is None
            and isinstance(record, UserMessage)
            and is_meaningful_user_text(record.text)
        ):
            first_message = record.text
        if first_timestamp is not None and first_message is not None:
            break

    last_timestamp: float | None = None
    latest_tokens: int | None = None
    for line in reversed(tail_lines):
        record = parse_record(line)
        if isinstance(record, MalformedLine):
            continue
        if last_timestamp is None and record.timestamp is not None:
            last_timestamp = record.timestamp
        if latest_tokens is None and isinstance(record, AssistantUsage):
            latest_tokens = record.tokens
        if last_timestamp is not None and latest_tokens is not None:
            break

    context_percent = "0"
    if latest_tokens is not None:
        context_percent = format_context_percent(latest_tokens, context_max)

    duration_label = None
    if first_timestamp is not None and last_timestamp is not None:
        if last_timestamp >= first_timestamp:
            duration_label = format_duration(last_timestamp - first_timestamp)

    return TranscriptDigest(
        context_percent=context_percent,
        duration_label=duration_label,
        first_user_message=first_message,
    )


def scan_transcript(
    transcript_path: str, *, context_max: int, cache: CacheStore | None
) -> TranscriptDigest:
    """Digest the transcript, reusing the cached digest while the file is unchanged.

    Args:
        transcript_path: Path of the JSONL transcript (may be empty)
        context_max: Context window size in tokens
        cache: Cache store for digests, or None to always scan

    Returns:
        TranscriptDigest; EMPTY_DIGEST if the file is missing, empty or unreadable
    """
    if not transcript_path:
        return EMPTY_DIGEST

    path = Path(transcript_path)
    try:
        st = os.stat(path)
    except OSError:
        return EMPTY_DIGEST
    if st.st_size <= 0:
        return EMPTY_DIGEST

    fingerprint = Fingerprint(mtime_ms=st.st_mtime_ns // 1_000_000, size=st.st_size)
    if cache is not None:
        cached = _read_cached_digest(cache, transcript_path, fingerprint, context_max)
        if cached is not None:
            return cached

    try:
        head_lines, tail_lines = read_windows(path, st.st_size)
    except OSError as e:
        logger.debug("Could not read transcript %s: %s", transcript_path, e)
        return EMPTY_DIGEST

    digest = summarize_lines(head_lines, tail_lines, context_max=context_max)
    if cache is not None:
        _write_cached_digest(cache, transcript_path, fingerprint, context_max, digest)
    return digest
