"""Fake clocks for deterministic timing tests."""

from datetime import date


class FakeClock:
    """Manually advanced clock returning seconds.

    Usable anywhere the engine accepts a ``clock`` / ``timer`` callable.

    Example:
        >>> clock = FakeClock(1000.0)
        >>> clock()
        1000.0
        >>> clock.advance(0.5)
        >>> clock()
        1000.5
    """

    def __init__(self, start: float = 1000.0):
        """Initialize fake clock at ``start`` seconds."""
        self._now = float(start)
        self.calls = 0

    def __call__(self) -> float:
        """Current time in seconds."""
        self.calls += 1
        return self._now

    def advance(self, seconds: float) -> None:
        """Move the clock forward."""
        self._now += seconds


class BrokenClock:
    """Clock that always raises."""

    def __call__(self) -> float:
        raise RuntimeError("clock unavailable")


TODAY = date(2024, 7, 1)


def fixed_today() -> date:
    """Clock for date-relative rules used throughout the tests."""
    return TODAY
