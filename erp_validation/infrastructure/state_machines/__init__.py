"""State machines for managing validation request lifecycles."""

from .validation_state_machine import (
    RequestEvent,
    RequestState,
    ValidationStateMachine,
)

__all__ = [
    "ValidationStateMachine",
    "RequestState",
    "RequestEvent",
]
