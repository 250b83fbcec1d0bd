"""Error handling decorators for rule fault containment.

A rule whose test function raises is an engine fault, not a validation
failure. These decorators log the fault and convert it into a fallback
value (normally a synthetic RuleViolation) so a single misbehaving rule
never crashes a whole validation pass.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from ...const import BUSINESS_RULE_FAULT_MESSAGE, RULE_FAULT_MESSAGE
from ...domain.entities.rule_violation import RuleViolation

FAULT_RULE_ID = "engine.rule_fault"


def fault_violation(
    field: str | None, message: str = RULE_FAULT_MESSAGE
) -> RuleViolation:
    """Synthetic violation reported in place of a faulting rule.

    Classified as severity high, category business_rule.
    """
    return RuleViolation(field=field, message=message, rule_id=FAULT_RULE_ID)


def business_fault_violation(field: str | None = None) -> RuleViolation:
    """Synthetic violation for a failed or rejected business-rule check."""
    return fault_violation(field, BUSINESS_RULE_FAULT_MESSAGE)


def contain_rule_faults(
    operation_name: str,
    fallback: Callable[..., Any],
    logger: logging.Logger | None = None,
):
    """Decorator for standardized rule fault handling.

    Args:
        operation_name: Human-readable operation name for logging
        fallback: Called as ``fallback(err, *args, **kwargs)`` to produce
            the value returned in place of the failed call
        logger: Logger to use (defaults to function's module logger)

    Cancellation is never swallowed.

    Example:
        @contain_rule_faults("Field rule", fallback=lambda err, self, rule, *a: ...)
        def _check(self, rule, value, context):
            return None if rule.test(value, context) else rule.violation(value, context)
    """

    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            log = logger or logging.getLogger(func.__module__)
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except asyncio.TimeoutError as err:
                log.warning("%s timed out: %s", operation_name, err)
                return fallback(err, *args, **kwargs)
            except Exception as err:
                log.error(
                    "%s unexpected error: %s",
                    operation_name,
                    err,
                    exc_info=True,
                )
                return fallback(err, *args, **kwargs)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            log = logger or logging.getLogger(func.__module__)
            try:
                return func(*args, **kwargs)
            except Exception as err:
                log.error(
                    "%s error: %s",
                    operation_name,
                    err,
                    exc_info=True,
                )
                return fallback(err, *args, **kwargs)

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator
