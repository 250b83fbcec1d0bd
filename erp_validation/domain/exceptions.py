"""Custom exceptions for the form validation engine.

Validation failures are data (RuleViolation), never exceptions. The classes
here represent engine faults and configuration problems only.
"""


class ValidationEngineError(Exception):
    """Base class for engine faults."""


class RuleRegistryError(ValidationEngineError):
    """No usable rule registry is available.

    Raised from ValidationEngine.validate_form when the engine was built
    without a registry, since there is nothing meaningful to validate
    against.

    Example:
        >>> raise RuleRegistryError("Rule registry is not configured")
    """


class RuleConfigError(ValidationEngineError, ValueError):
    """Rule configuration file is missing, malformed or unsupported."""
