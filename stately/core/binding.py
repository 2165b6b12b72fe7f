# stately/core/binding.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, List, Optional

from stately.core.errors import ConfigurationError
from stately.core.machine import Machine
from stately.core.transitions import TransitionResult, attempt_transition, can_transition, current_state
from stately.core.validations import Validator
from stately.interfaces.types import StateID
from stately.runtime.concurrency import host_lock, supports_host_lock, with_lock

logger = logging.getLogger(__name__)

# Marks functions installed on a host class, so rebinding a subclass may replace them.
_ENTRY_MARKER = "_stately_entry"


def stately(
    start: Any,
    attr: str = "state",
    configure: Optional[Callable[[Machine], Any]] = None,
    thread_safe: bool = False,
) -> Callable[[type], type]:
    """
    Class decorator defining a state machine for the decorated class::

        def order_states(m):
            with m.state("completed") as s:
                s.prevent_from("refunded")
                s.before_transition(from_state="processing", do="calculate_total")
                s.validate("validates_credit_card")
            with m.state("refunded") as s:
                s.allow_from("completed")

        @stately(start="processing", configure=order_states)
        class Order:
            ...

    :param start: The initial state, written to new instances.
    :param attr: Name of the attribute storing the current state.
    :param configure: Callable receiving the Machine to define states on.
    :param thread_safe: Serialize transitions per instance with a lock.
    """
    machine = Machine(state_attr=attr, start=start)
    if configure is not None:
        configure(machine)

    def decorator(cls: type) -> type:
        return bind(machine, cls, thread_safe=thread_safe)

    return decorator


def bind(machine: Machine, cls: type, thread_safe: bool = False) -> type:
    """
    Attach ``machine`` to ``cls``: validate the definition against the class,
    set the start state on new instances, and install one trigger method per
    action and one ``is_<state>`` query per state, along with the generic
    ``transition_to``, ``can_transition_to``, ``is_state`` and ``states``.

    :raises ConfigurationError: If the machine is invalid for ``cls``, an
        entry point would shadow an existing attribute, or ``thread_safe`` is
        set for a class whose instances cannot carry a lock.
    """
    Validator().validate_machine(machine, cls)
    if thread_safe and not supports_host_lock(cls):
        raise ConfigurationError(
            f"{cls.__name__} needs a __dict__ or __weakref__ slot to bind with thread_safe=True."
        )

    methods = _generic_methods(thread_safe)
    entry_points = machine.entry_points()
    generated = [(action, _trigger(name)) for action, name in entry_points.actions.items()]
    generated += [(f"is_{name}", _query(name)) for name in entry_points.queries.values()]
    for method_name, fn in generated:
        if method_name in methods:
            raise ConfigurationError(f"Entry point {method_name} of {cls.__name__} is defined twice.")
        methods[method_name] = fn

    for method_name in methods:
        _check_free(cls, method_name)

    for method_name, fn in methods.items():
        fn.__name__ = method_name
        fn.__qualname__ = f"{cls.__qualname__}.{method_name}"
        setattr(fn, _ENTRY_MARKER, True)
        setattr(cls, method_name, fn)

    cls.stately_machine = machine
    _wrap_init(cls)
    logger.debug("Bound state machine %r to %s", machine, cls.__qualname__)
    return cls


def _check_free(cls: type, name: str) -> None:
    existing = getattr(cls, name, None)
    if existing is not None and not getattr(existing, _ENTRY_MARKER, False):
        raise ConfigurationError(f"{cls.__name__}.{name} is already defined.")


def _generic_methods(thread_safe: bool) -> Dict[str, Callable]:
    def transition_to(self, name: Any) -> TransitionResult:
        machine = type(self).stately_machine
        if thread_safe:
            with with_lock(host_lock(self)):
                return attempt_transition(machine, self, name)
        return attempt_transition(machine, self, name)

    def can_transition_to(self, name: Any) -> bool:
        return can_transition(type(self).stately_machine, self, name)

    def is_state(self, name: Any) -> bool:
        machine = type(self).stately_machine
        return current_state(machine, self) == machine.get_state(name).name

    def states(self) -> List[StateID]:
        return type(self).stately_machine.state_names()

    return {
        "transition_to": transition_to,
        "can_transition_to": can_transition_to,
        "is_state": is_state,
        "states": states,
    }


def _trigger(name: StateID) -> Callable:
    def trigger(self) -> TransitionResult:
        return self.transition_to(name)

    trigger.__doc__ = f"Transition into the {name} state."
    return trigger


def _query(name: StateID) -> Callable:
    def query(self) -> bool:
        return self.is_state(name)

    query.__doc__ = f"Return True if the current state is {name}."
    return query


def _wrap_init(cls: type) -> None:
    original = cls.__init__
    if getattr(original, _ENTRY_MARKER, False):
        return

    @functools.wraps(original)
    def __init__(self, *args, **kwargs):
        original(self, *args, **kwargs)
        machine = type(self).stately_machine
        if getattr(self, machine.state_attr, None) is None:
            setattr(self, machine.state_attr, machine.start)

    setattr(__init__, _ENTRY_MARKER, True)
    cls.__init__ = __init__
