"""Constants for the ERP form validation engine.

This file contains only essential constants needed by the engine code.
Rule definitions are stored in YAML configuration files.
"""

from __future__ import annotations

# Key used in ValidationSummary.errors_by_field for whole-record violations
FORM_FIELD = "__form__"

# Timing defaults (in seconds)
DEFAULT_DEBOUNCE_DELAY = 0.3  # Keystroke debounce (300ms)
DEFAULT_CACHE_TTL = 30.0  # Cached results expire after 30s
DEFAULT_CACHE_MAX_ENTRIES = 500
DEFAULT_HISTORY_SIZE = 100  # Performance tracker rolling window

# Configuration file versions accepted by the loader
SUPPORTED_CONFIG_MAJOR = "1."

# Generic messages used when a rule itself misbehaves
RULE_FAULT_MESSAGE = "Unable to validate this field, please review the value"
BUSINESS_RULE_FAULT_MESSAGE = "Business rule check could not be completed"
GENERIC_SUGGESTION = "Review the {label} field"

# Work date window for daily work entries
DEFAULT_MAX_PAST_DAYS = 365
HOURS_PER_WORK_DAY = 8
