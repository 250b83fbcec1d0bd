"""Validation request data class."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidationRequest:
    """One request to validate a field value.

    Attributes:
        field: Field being validated
        value: Candidate value
        context: Sibling field values (and reference sets) at request time
        request_token: Per-field monotonically increasing counter
        immediate: True for submit-time requests that bypass debouncing
    """

    field: str
    value: Any
    context: Mapping[str, Any] = field(default_factory=dict)
    request_token: int = 0
    immediate: bool = False
