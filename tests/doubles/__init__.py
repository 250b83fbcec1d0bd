"""Test doubles for unit testing.

Test doubles are fake implementations used for testing. They're faster and
more reliable than mocking, and they implement the actual contracts.

Types of test doubles:
- Fake: Lightweight working implementation (e.g., a manual clock)
- Stub: Returns predetermined values
- Spy: Records calls for verification

Example:
    >>> from tests.doubles import FakeClock
    >>> clock = FakeClock(100.0)
    >>> clock.advance(31)
    >>> clock()
    131.0
"""

from .fake_clock import TODAY, BrokenClock, FakeClock, fixed_today
from .fake_rules import ExplodingBusinessRule, ExplodingRule, SlowBusinessRule

__all__ = [
    "TODAY",
    "BrokenClock",
    "ExplodingBusinessRule",
    "ExplodingRule",
    "FakeClock",
    "SlowBusinessRule",
    "fixed_today",
]
