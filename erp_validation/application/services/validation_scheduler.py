"""Validation scheduler.

Coordinates when field validation executes: debounced for keystroke-time
changes, immediate for explicit and submit-time validation. Every request
gets a per-field token; a result is applied only while its token is still
the latest issued for the field, so out-of-order results never clobber
newer ones.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from ...const import DEFAULT_DEBOUNCE_DELAY
from ...domain.entities.validation_request import ValidationRequest
from ...domain.entities.validation_result import ValidationResult
from ...infrastructure.state_machines.validation_state_machine import (
    RequestEvent,
    RequestState,
    ValidationStateMachine,
)

_LOGGER = logging.getLogger(__name__)

RunnerOutcome = Union[ValidationResult, Awaitable[ValidationResult]]
Runner = Callable[[ValidationRequest], RunnerOutcome]
ApplyCallback = Callable[[Mapping[str, ValidationResult]], None]


@dataclass
class _PendingRequest:
    request: ValidationRequest
    machine: ValidationStateMachine
    task: Optional[asyncio.Task] = None


class ValidationScheduler:
    """Debounce, supersede and apply field validations.

    The scheduler is the sole writer of applied results: ``apply`` is only
    ever called with results whose token is current. Cancellation is
    implicit. Issuing a request for a field cancels that field's pending
    debounce timer; a request that is already running finishes and its
    result is discarded by the token check.

    Callers awaiting a superseded request receive the result of the request
    that superseded it.

    Example:
        >>> scheduler = ValidationScheduler(runner, apply, debounce_delay=0.3)
        >>> first = scheduler.schedule("title", "Sum")
        >>> second = scheduler.schedule("title", "Summer")
        >>> (await first) is (await second)  # one execution, for "Summer"
        True
    """

    def __init__(
        self,
        runner: Runner,
        apply: ApplyCallback,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
    ):
        """Initialize scheduler.

        Args:
            runner: Executes one request; may return a result or an
                awaitable resolving to one (run_now requires a result)
            apply: Receives every batch of current results
            debounce_delay: Quiet period before a debounced run, in seconds
        """
        self._runner = runner
        self._apply = apply
        self._debounce_delay = debounce_delay
        self._tokens: dict[str, int] = {}
        self._pending: dict[str, _PendingRequest] = {}
        self._machines: dict[str, ValidationStateMachine] = {}
        self._waiters: dict[str, list[asyncio.Future]] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def debounce_delay(self) -> float:
        """Debounce delay in seconds."""
        return self._debounce_delay

    @property
    def pending_fields(self) -> tuple[str, ...]:
        """Fields with a scheduled or running request."""
        return tuple(
            field for field, machine in self._machines.items() if machine.is_pending
        )

    def latest_token(self, field: str) -> int:
        """Most recently issued token for a field (0 if none)."""
        return self._tokens.get(field, 0)

    def field_state(self, field: str) -> RequestState:
        """State of the latest request for a field."""
        machine = self._machines.get(field)
        return machine.state if machine else RequestState.IDLE

    def is_current(self, field: str, request_token: int) -> bool:
        """Check if a token is still the latest issued for its field."""
        return self._tokens.get(field, 0) == request_token

    def _issue(
        self,
        field: str,
        value: Any,
        context: Optional[Mapping[str, Any]],
        immediate: bool,
    ) -> tuple[ValidationRequest, ValidationStateMachine]:
        """Issue a new request for a field, superseding the previous one."""
        token = self._tokens.get(field, 0) + 1
        self._tokens[field] = token

        previous = self._pending.pop(field, None)
        if previous is not None and previous.machine.state is RequestState.SCHEDULED:
            previous.machine.transition(RequestEvent.SUPERSEDE)
            if previous.task is not None and not previous.task.done():
                previous.task.cancel()
            _LOGGER.debug(
                "Cancelled scheduled validation %s#%d",
                field,
                previous.request.request_token,
            )

        request = ValidationRequest(
            field=field,
            value=value,
            context=dict(context or {}),
            request_token=token,
            immediate=immediate,
        )
        machine = ValidationStateMachine(field, token)
        self._machines[field] = machine
        return request, machine

    def schedule(
        self,
        field: str,
        value: Any,
        context: Optional[Mapping[str, Any]] = None,
    ) -> asyncio.Future:
        """Schedule a debounced validation.

        Must be called from a running event loop.

        Returns:
            Future resolving with the field's next applied result
        """
        loop = asyncio.get_running_loop()
        request, machine = self._issue(field, value, context, immediate=False)
        machine.transition(RequestEvent.SCHEDULE)

        waiter = loop.create_future()
        self._waiters.setdefault(field, []).append(waiter)

        pending = _PendingRequest(request=request, machine=machine)
        pending.task = loop.create_task(self._run_debounced(pending))
        self._tasks.add(pending.task)
        pending.task.add_done_callback(self._tasks.discard)
        self._pending[field] = pending

        _LOGGER.debug(
            "Scheduled validation %s#%d in %.3fs",
            field,
            request.request_token,
            self._debounce_delay,
        )
        return waiter

    async def _run_debounced(self, pending: _PendingRequest) -> None:
        request = pending.request
        await asyncio.sleep(self._debounce_delay)

        pending.machine.transition(RequestEvent.START)
        try:
            outcome = self._runner(request)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except asyncio.CancelledError:
            raise
        except Exception as err:
            _LOGGER.exception(
                "Validation %s#%d failed", request.field, request.request_token
            )
            pending.machine.transition(RequestEvent.SUPERSEDE)
            if self.is_current(request.field, request.request_token):
                self._fail_waiters(request.field, err)
            return
        finally:
            if self._pending.get(request.field) is pending:
                del self._pending[request.field]

        self._resolve(request, pending.machine, outcome)

    def run_now(
        self,
        field: str,
        value: Any,
        context: Optional[Mapping[str, Any]] = None,
    ) -> ValidationResult:
        """Validate a field immediately, bypassing the debounce.

        Supersedes any scheduled request for the field. Callers awaiting
        that request receive this result.

        Raises:
            TypeError: If the runner returns an awaitable
        """
        request, machine = self._issue(field, value, context, immediate=True)
        machine.transition(RequestEvent.START)

        outcome = self._runner(request)
        if inspect.isawaitable(outcome):
            if inspect.iscoroutine(outcome):
                outcome.close()
            machine.transition(RequestEvent.SUPERSEDE)
            raise TypeError("run_now requires a synchronous runner")

        self._resolve(request, machine, outcome)
        return outcome

    def begin_pass(self, fields: Iterable[str]) -> dict[str, ValidationStateMachine]:
        """Start a submit-time pass over ``fields``.

        Bumps every field's token and cancels pending timers, so debounced
        results issued before the pass can no longer be applied.

        Returns:
            Field -> running request of the pass, to hand to commit_pass
        """
        machines = {}
        for field in fields:
            _, machine = self._issue(field, None, None, immediate=True)
            machine.transition(RequestEvent.START)
            machines[field] = machine
        return machines

    def commit_pass(
        self,
        machines: Mapping[str, ValidationStateMachine],
        results: Mapping[str, ValidationResult],
    ) -> dict[str, ValidationResult]:
        """Apply a pass's results in one step.

        Fields that received a newer request since begin_pass are left out.

        Returns:
            The results that were applied
        """
        applied: dict[str, ValidationResult] = {}
        for field, result in results.items():
            machine = machines.get(field)
            if machine is None or not self.is_current(field, machine.request_token):
                if machine is not None:
                    machine.transition(RequestEvent.SUPERSEDE)
                _LOGGER.debug("Discarded stale pass result for %s", field)
                continue
            machine.transition(RequestEvent.RESOLVE)
            applied[field] = result

        self._apply(applied)
        for field, result in applied.items():
            self._release_waiters(field, result)
        return applied

    def abort_pass(self, machines: Mapping[str, ValidationStateMachine]) -> None:
        """Abandon a pass started with begin_pass without applying anything.

        Callers still waiting on a field the pass owns are cancelled. Fields
        that received a newer request since begin_pass are left alone.
        """
        for field, machine in machines.items():
            if machine.is_pending:
                machine.transition(RequestEvent.SUPERSEDE)
            if self.is_current(field, machine.request_token):
                for waiter in self._waiters.pop(field, ()):
                    waiter.cancel()
        _LOGGER.debug("Aborted validation pass over %d field(s)", len(machines))

    def _resolve(
        self,
        request: ValidationRequest,
        machine: ValidationStateMachine,
        result: ValidationResult,
    ) -> bool:
        """Apply a result if its token is still current."""
        if not self.is_current(request.field, request.request_token):
            machine.transition(RequestEvent.SUPERSEDE)
            _LOGGER.debug(
                "Discarded stale result %s#%d (latest #%d)",
                request.field,
                request.request_token,
                self.latest_token(request.field),
            )
            return False

        machine.transition(RequestEvent.RESOLVE)
        self._apply({request.field: result})
        self._release_waiters(request.field, result)
        return True

    def _release_waiters(self, field: str, result: ValidationResult) -> None:
        for waiter in self._waiters.pop(field, ()):
            if not waiter.done():
                waiter.set_result(result)

    def _fail_waiters(self, field: str, err: Exception) -> None:
        for waiter in self._waiters.pop(field, ()):
            if not waiter.done():
                waiter.set_exception(err)

    def cancel_all(self) -> list[asyncio.Task]:
        """Cancel every scheduled and running request.

        Waiting callers are cancelled too.

        Returns:
            The cancelled tasks, so callers can await their completion
        """
        for pending in self._pending.values():
            pending.machine.transition(RequestEvent.SUPERSEDE)
        self._pending.clear()

        # Includes superseded requests that are still running
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()

        for waiters in self._waiters.values():
            for waiter in waiters:
                waiter.cancel()
        self._waiters.clear()

        if tasks:
            _LOGGER.debug("Cancelled %d pending validation(s)", len(tasks))
        return tasks

    async def shutdown(self) -> None:
        """Cancel all pending work and wait for it to finish."""
        tasks = self.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
