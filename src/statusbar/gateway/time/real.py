"""Production clock backed by time.time()."""

import time

from statusbar.gateway.time.abc import Time


class RealTime(Time):
    def now(self) -> float:
        return time.time()
