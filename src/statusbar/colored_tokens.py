"""Immutable text tokens with optional ANSI color.

The renderer assembles the status line from Token and TokenSeq values and
only decides at the very end whether escape codes are emitted, so the same
structure renders with or without color.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

RESET = "\x1b[0m"


class Color(Enum):
    CYAN = "\x1b[36m"
    GREEN = "\x1b[32m"
    MAGENTA = "\x1b[35m"
    GRAY = "\x1b[90m"
    RED = "\x1b[31m"
    ORANGE = "\x1b[38;5;208m"
    YELLOW = "\x1b[33m"
    STEEL_BLUE = "\x1b[38;5;75m"
    LIGHT_GRAY = "\x1b[38;5;245m"


@dataclass(frozen=True)
class Token:
    """A run of text in a single color (or uncolored)."""

    text: str
    color: Color | None = None

    def render(self, *, use_color: bool = True) -> str:
        if not self.text:
            return ""
        if self.color is None or not use_color:
            return self.text
        return f"{self.color.value}{self.text}{RESET}"

    def __bool__(self) -> bool:
        return bool(self.text)


@dataclass(frozen=True)
class TokenSeq:
    """An ordered group of tokens and nested sequences."""

    items: tuple[Token | TokenSeq, ...] = ()

    def render(self, *, use_color: bool = True) -> str:
        return "".join(item.render(use_color=use_color) for item in self.items)

    def join(self, separator: str, *, use_color: bool = True) -> str:
        """Render non-empty items separated by separator."""
        rendered = (item.render(use_color=use_color) for item in self.items)
        return separator.join(part for part in rendered if part)

    def __bool__(self) -> bool:
        return any(bool(item) for item in self.items)
