"""Validation request state machine for explicit lifecycle management."""

import logging
from enum import Enum, auto
from typing import Callable, Dict, Optional

_LOGGER = logging.getLogger(__name__)


class RequestState(Enum):
    """Validation request states."""

    IDLE = auto()
    SCHEDULED = auto()
    RUNNING = auto()
    RESOLVED = auto()
    SUPERSEDED = auto()


class RequestEvent(Enum):
    """Events that trigger request state transitions."""

    SCHEDULE = auto()
    START = auto()
    RESOLVE = auto()
    SUPERSEDE = auto()


class ValidationStateMachine:
    """State machine for one validation request's lifecycle.

    Valid transitions:
        IDLE -> SCHEDULED (on SCHEDULE, debounced field validation)
        IDLE -> RUNNING (on START, immediate validation)
        SCHEDULED -> RUNNING (on START, debounce delay elapsed)
        SCHEDULED -> SUPERSEDED (on SUPERSEDE, newer request issued)
        RUNNING -> RESOLVED (on RESOLVE, result applied)
        RUNNING -> SUPERSEDED (on SUPERSEDE, result discarded as stale)

    RESOLVED and SUPERSEDED are terminal.

    Example:
        >>> sm = ValidationStateMachine("title", 1)
        >>> sm.transition(RequestEvent.SCHEDULE)
        True
        >>> sm.transition(RequestEvent.START)
        True
        >>> sm.transition(RequestEvent.RESOLVE)
        True
        >>> sm.is_terminal
        True
    """

    def __init__(self, field: str = "", request_token: int = 0):
        """Initialize state machine in IDLE state."""
        self._field = field
        self._request_token = request_token
        self._state = RequestState.IDLE
        self._previous_state: Optional[RequestState] = None

        # Callbacks for state changes
        self._on_state_change: Dict[RequestState, Callable] = {}

        # Valid transitions: (current_state, event) -> new_state
        self._transitions = {
            (RequestState.IDLE, RequestEvent.SCHEDULE): RequestState.SCHEDULED,
            (RequestState.IDLE, RequestEvent.START): RequestState.RUNNING,
            (RequestState.SCHEDULED, RequestEvent.START): RequestState.RUNNING,
            (RequestState.SCHEDULED, RequestEvent.SUPERSEDE): RequestState.SUPERSEDED,
            (RequestState.RUNNING, RequestEvent.RESOLVE): RequestState.RESOLVED,
            (RequestState.RUNNING, RequestEvent.SUPERSEDE): RequestState.SUPERSEDED,
        }

    @property
    def field(self) -> str:
        """Field the request belongs to."""
        return self._field

    @property
    def request_token(self) -> int:
        """Token of the request."""
        return self._request_token

    @property
    def state(self) -> RequestState:
        """Get current state."""
        return self._state

    @property
    def previous_state(self) -> Optional[RequestState]:
        """Get the state before the last transition."""
        return self._previous_state

    @property
    def is_pending(self) -> bool:
        """Check if the request is waiting or running."""
        return self._state in (RequestState.SCHEDULED, RequestState.RUNNING)

    @property
    def is_terminal(self) -> bool:
        """Check if the request has finished one way or another."""
        return self._state in (RequestState.RESOLVED, RequestState.SUPERSEDED)

    def transition(self, event: RequestEvent) -> bool:
        """Attempt state transition.

        Args:
            event: Event triggering transition

        Returns:
            True if transition valid and executed, False otherwise
        """
        key = (self._state, event)

        if key not in self._transitions:
            _LOGGER.debug(
                "Invalid transition for %s#%d: %s + %s",
                self._field,
                self._request_token,
                self._state.name,
                event.name,
            )
            return False

        self._change_state(self._transitions[key], event)
        return True

    def _change_state(self, new_state: RequestState, event: RequestEvent):
        """Change to new state and invoke callbacks."""
        self._previous_state = self._state
        self._state = new_state

        _LOGGER.debug(
            "Validation request %s#%d: %s -> %s (event: %s)",
            self._field,
            self._request_token,
            self._previous_state.name,
            new_state.name,
            event.name,
        )

        if new_state in self._on_state_change:
            try:
                self._on_state_change[new_state]()
            except Exception as err:
                _LOGGER.error("Error in state change callback: %s", err)

    def on_state(self, state: RequestState, callback: Callable):
        """Register callback for state entry.

        Args:
            state: State to watch
            callback: Function to call on state entry (no args)
        """
        self._on_state_change[state] = callback

    def __str__(self) -> str:
        """String representation."""
        return f"ValidationStateMachine({self._field}#{self._request_token}, state={self._state.name})"

    def __repr__(self) -> str:
        """Developer representation."""
        return (
            f"ValidationStateMachine(field={self._field!r}, token={self._request_token}, "
            f"state={self._state!r}, previous={self._previous_state!r})"
        )
