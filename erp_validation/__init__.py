"""Rule-driven validation engine for ERP forms.

Validates the daily work and holiday forms of an ERP front end as the user
edits them: debounced per-field validation, cross-field and business rules
at submit time, severity / category classification with remediation
suggestions, and a form summary that decides whether the form can be
submitted.

Example:
    >>> from erp_validation import create_engine
    >>> engine = create_engine("holiday")
    >>> summary = await engine.validate_form(record, existing_holidays)
    >>> summary.can_submit
"""

from . import forms
from .config_loader import EngineSettings, load_form_config
from .domain.entities import (
    RuleViolation,
    ValidationRequest,
    ValidationResult,
    ValidationSummary,
)
from .domain.exceptions import RuleConfigError, RuleRegistryError, ValidationEngineError
from .domain.value_objects.severity import Category, Severity
from .engine import ValidationEngine
from .presentation.container import create_container, create_engine

__version__ = "1.0.0"

__all__ = [
    "Category",
    "EngineSettings",
    "RuleConfigError",
    "RuleRegistryError",
    "RuleViolation",
    "Severity",
    "ValidationEngine",
    "ValidationEngineError",
    "ValidationRequest",
    "ValidationResult",
    "ValidationSummary",
    "__version__",
    "create_container",
    "create_engine",
    "forms",
    "load_form_config",
]
