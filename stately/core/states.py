# stately/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple

from stately.core.actions import guess_action_for
from stately.core.errors import ConfigurationError
from stately.interfaces.types import CallbackHandler, StateID, ValidationHandler


def state_name(value: Any) -> StateID:
    """
    Return the string form used to compare and store a state identifier.

    Strings are returned unchanged. Enum members resolve to their value when it
    is a string and to their member name otherwise, so ``Status.DONE`` and
    ``"done"`` name the same state when ``Status.DONE.value == "done"``.
    """
    if isinstance(value, StateDefinition):
        return value.name
    if isinstance(value, Enum):
        return value.value if isinstance(value.value, str) else value.name
    return str(value)


def _union(existing: Tuple[StateID, ...], states: Iterable[Any]) -> Tuple[StateID, ...]:
    merged: List[StateID] = list(existing)
    for s in states:
        name = state_name(s)
        if name not in merged:
            merged.append(name)
    return tuple(merged)


def _check_handler(handler: Any) -> None:
    if isinstance(handler, str):
        if not handler:
            raise ConfigurationError("Handler names must be non-empty strings.")
    elif not callable(handler):
        raise ConfigurationError(f"Handler {handler!r} must be a method name or a callable.")


@dataclass(frozen=True)
class Callback:
    """
    A before/after transition callback, optionally scoped to a source state.

    :param do: Method name on the host, or a callable taking the host.
    :param from_state: When set, the callback only runs for transitions leaving
        this state.
    """

    do: CallbackHandler
    from_state: Optional[StateID] = None

    def applies_to(self, current: StateID) -> bool:
        """Return True if this callback should run for a transition leaving ``current``."""
        return self.from_state is None or self.from_state == current


@dataclass(frozen=True)
class StateDefinition:
    """
    Configuration for a single state: its name, the action that triggers a
    transition into it, which source states may transition into it, and the
    callbacks and validations that surround the transition.

    Instances are immutable; build them with StateConfigurator or
    Machine.state().
    """

    name: StateID
    action: str
    allow_from: Tuple[StateID, ...] = ()
    prevent_from: Tuple[StateID, ...] = ()
    before_transitions: Tuple[Callback, ...] = ()
    after_transitions: Tuple[Callback, ...] = ()
    validations: Tuple[ValidationHandler, ...] = ()

    @classmethod
    def create(cls, name: Any, action: Optional[str] = None) -> "StateDefinition":
        """Create an unconstrained definition, inferring the action when not given."""
        key = state_name(name)
        if not key:
            raise ConfigurationError("State name must be a non-empty string.")
        return cls(name=key, action=str(action) if action else guess_action_for(key))

    def __str__(self) -> str:
        return self.name


class StateConfigurator:
    """
    Collects the allow/prevent rules, callbacks and validations for one state.

    Each call appends to the corresponding ordered list; ``allow_from`` and
    ``prevent_from`` accumulate as a de-duplicated union across calls. When used
    as a context manager, the built definition is handed to ``on_build`` as the
    ``with`` block exits cleanly, and ``on_error`` is called instead when the
    block raises.
    """

    def __init__(
        self,
        name: Any,
        action: Optional[str] = None,
        on_build: Optional[Callable[[StateDefinition], None]] = None,
        on_error: Optional[Callable[[], None]] = None,
    ) -> None:
        self._base = StateDefinition.create(name, action)
        self._on_build = on_build
        self._on_error = on_error
        self._allow_from: Tuple[StateID, ...] = ()
        self._prevent_from: Tuple[StateID, ...] = ()
        self._before: List[Callback] = []
        self._after: List[Callback] = []
        self._validations: List[ValidationHandler] = []

    @property
    def name(self) -> StateID:
        return self._base.name

    def allow_from(self, *states: Any) -> "StateConfigurator":
        """
        Only allow transitions into this state from the given states.

        :param states: Source states; merged with those of earlier calls.
        """
        self._allow_from = _union(self._allow_from, states)
        return self

    def prevent_from(self, *states: Any) -> "StateConfigurator":
        """
        Forbid transitions into this state from the given states. Ignored when
        an allow list is set.

        :param states: Source states; merged with those of earlier calls.
        """
        self._prevent_from = _union(self._prevent_from, states)
        return self

    def before_transition(self, do: CallbackHandler, from_state: Any = None) -> "StateConfigurator":
        """
        Run ``do`` before the state attribute is written.

        :param do: Method name on the host, or a callable taking the host.
        :param from_state: Only run when transitioning away from this state.
        """
        self._before.append(self._callback(do, from_state))
        return self

    def after_transition(self, do: CallbackHandler, from_state: Any = None) -> "StateConfigurator":
        """
        Run ``do`` after the state attribute is written.

        :param do: Method name on the host, or a callable taking the host.
        :param from_state: Only run when transitioning away from this state.
        """
        self._after.append(self._callback(do, from_state))
        return self

    def validate(self, handler: ValidationHandler) -> "StateConfigurator":
        """
        Add a validation; a False result vetoes the transition without raising.
        """
        _check_handler(handler)
        self._validations.append(handler)
        return self

    def build(self) -> StateDefinition:
        return StateDefinition(
            name=self._base.name,
            action=self._base.action,
            allow_from=self._allow_from,
            prevent_from=self._prevent_from,
            before_transitions=tuple(self._before),
            after_transitions=tuple(self._after),
            validations=tuple(self._validations),
        )

    def __enter__(self) -> "StateConfigurator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            if self._on_build is not None:
                self._on_build(self.build())
        elif self._on_error is not None:
            self._on_error()

    @staticmethod
    def _callback(do: CallbackHandler, from_state: Any) -> Callback:
        _check_handler(do)
        return Callback(do=do, from_state=None if from_state is None else state_name(from_state))
