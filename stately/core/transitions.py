# stately/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, List

from stately.core.errors import InvalidTransition
from stately.core.states import Callback, StateDefinition, state_name
from stately.interfaces.types import Handler, StateID, ValidationHandler

if TYPE_CHECKING:
    from stately.core.machine import Machine

logger = logging.getLogger(__name__)


class TransitionResult(Enum):
    """
    Outcome of a transition attempt.

    COMMITTED: the state attribute was written and callbacks ran.
    REJECTED: the transition is not allowed from the current state (only
        returned when the caller asked not to raise InvalidTransition).
    ABORTED: a validation returned False; nothing ran and nothing changed.
    """

    COMMITTED = "committed"
    REJECTED = "rejected"
    ABORTED = "aborted"

    def __bool__(self) -> bool:
        return self is TransitionResult.COMMITTED


def current_state(machine: "Machine", host: Any) -> StateID:
    """
    Return the host's current state in string form, falling back to the
    machine's start state when the attribute is unset.
    """
    value = getattr(host, machine.state_attr, None)
    if value is None:
        return machine.start
    return state_name(value)


def is_allowed(machine: "Machine", current: StateID, target: StateDefinition) -> bool:
    """
    Apply the allow/prevent rules for a move from ``current`` into ``target``.

    A state can never transition into itself. A non-empty allow list is
    exclusive; otherwise every defined state not on the prevent list may enter.
    """
    if current == target.name:
        return False
    if target.allow_from:
        return current in target.allow_from
    return current in machine.state_names() and current not in target.prevent_from


def can_transition(machine: "Machine", host: Any, target: Any) -> bool:
    """
    Check whether the host may transition into ``target`` right now. Only the
    allow/prevent rules are consulted; validations are not run.

    :raises StateNotDefinedError: If ``target`` is not defined on the machine.
    """
    definition = machine.get_state(target)
    return is_allowed(machine, current_state(machine, host), definition)


def attempt_transition(
    machine: "Machine", host: Any, target: Any, raise_on_invalid: bool = True
) -> TransitionResult:
    """
    Move ``host`` into ``target``.

    The attribute is written exactly once, after every validation passed and
    every eligible before-callback ran. Exceptions from handlers propagate
    unchanged; one raised by an after-callback leaves the new state committed.

    :param machine: The machine governing the host.
    :param host: The object whose state attribute is updated.
    :param target: The requested state.
    :param raise_on_invalid: Raise InvalidTransition for disallowed moves
        instead of returning TransitionResult.REJECTED.
    :return: COMMITTED, ABORTED when a validation failed, or REJECTED.
    :raises StateNotDefinedError: If ``target`` is not defined on the machine.
    :raises InvalidTransition: If the move is not allowed.
    """
    definition = machine.get_state(target)
    current = current_state(machine, host)

    if not is_allowed(machine, current, definition):
        logger.debug("Rejected transition from %s to %s", current, definition.name)
        if raise_on_invalid:
            raise InvalidTransition(current, definition.name)
        return TransitionResult.REJECTED

    if not _ValidationRunner().run(definition.validations, host):
        logger.debug("Validation vetoed transition from %s to %s", current, definition.name)
        return TransitionResult.ABORTED

    executor = _CallbackExecutor()
    executor.execute(definition.before_transitions, host, current)
    setattr(host, machine.state_attr, definition.name)
    logger.debug("Committed transition from %s to %s", current, definition.name)
    executor.execute(definition.after_transitions, host, current)
    return TransitionResult.COMMITTED


def invoke_handler(handler: Handler, host: Any) -> Any:
    """
    Call a handler on the host: a string names a zero-argument method, anything
    else is called with the host.
    """
    if isinstance(handler, str):
        return getattr(host, handler)()
    return handler(host)


def handler_name(handler: Handler) -> str:
    if isinstance(handler, str):
        return handler
    return getattr(handler, "__qualname__", repr(handler))


class _ValidationRunner:
    """
    Internal helper evaluating a state's validations. Every validation runs,
    even after one has failed, since callers may rely on their side effects.
    """

    def run(self, validations: Iterable[ValidationHandler], host: Any) -> bool:
        """
        :return: False if any validation returned False, otherwise True.
        """
        results: List[Any] = []
        for v in validations:
            result = invoke_handler(v, host)
            logger.debug("Validation %s returned %r", handler_name(v), result)
            results.append(result)
        return not any(r is False for r in results)


class _CallbackExecutor:
    """
    Internal helper running the callbacks that apply to the pre-transition state,
    in declaration order.
    """

    def execute(self, callbacks: Iterable[Callback], host: Any, current: StateID) -> None:
        for cb in callbacks:
            if cb.applies_to(current):
                logger.debug("Running callback %s", handler_name(cb.do))
                invoke_handler(cb.do, host)
