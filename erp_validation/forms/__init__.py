"""Shipped form rule sets.

Importing this package registers the named predicates, cross-field rule
types and business rule types referenced by the daily work and holiday
configuration files.
"""

from . import daily_work, holiday, predicates

__all__ = ["daily_work", "holiday", "predicates"]
