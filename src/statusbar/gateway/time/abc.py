"""Clock gateway so cache freshness can be tested deterministically."""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract source of wall-clock time."""

    @abstractmethod
    def now(self) -> float:
        """Return the current time as epoch seconds."""
        ...
