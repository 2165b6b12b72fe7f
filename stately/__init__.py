# stately/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
stately: a finite state machine governing a single attribute of a host class.

A Machine holds the state definitions; binding it to a class installs one
trigger method per state (``order.complete()``) and one query per state
(``order.is_completed()``). Disallowed transitions raise InvalidTransition,
failed validations silently leave the state unchanged.
"""

from stately.core.binding import bind, stately
from stately.core.errors import ConfigurationError, InvalidTransition, StateNotDefinedError, StatelyError
from stately.core.machine import EntryPoints, Machine
from stately.core.states import Callback, StateConfigurator, StateDefinition
from stately.core.transitions import TransitionResult, attempt_transition, can_transition, current_state

__version__ = "0.1.0"

__all__ = [
    "Callback",
    "ConfigurationError",
    "EntryPoints",
    "InvalidTransition",
    "Machine",
    "StateConfigurator",
    "StateDefinition",
    "StateNotDefinedError",
    "StatelyError",
    "TransitionResult",
    "attempt_transition",
    "bind",
    "can_transition",
    "current_state",
    "stately",
]
