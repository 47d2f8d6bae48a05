"""Fake clock for testing."""

from statusbar.gateway.time.abc import Time


class FakeTime(Time):
    """Clock that only moves when a test advances it.

    Constructor Injection:
    ---------------------
    - current: Epoch seconds reported by now()
    """

    def __init__(self, *, current: float = 1_700_000_000.0) -> None:
        self._current = current

    def now(self) -> float:
        return self._current

    def advance(self, seconds: float) -> None:
        self._current += seconds
