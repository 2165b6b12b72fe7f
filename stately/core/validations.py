# stately/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from stately.core.errors import ConfigurationError
from stately.core.states import StateDefinition

if TYPE_CHECKING:
    from stately.core.machine import Machine


class Validator:
    """
    Performs construction-time validation of a machine definition, and of its
    binding to a host class, so configuration mistakes surface before the
    first transition.
    """

    def __init__(self) -> None:
        self._rules_engine = _ValidationRulesEngine()

    def validate_machine(self, machine: "Machine", host_cls: Optional[type] = None) -> None:
        """
        Check the machine's states for consistency.

        :param machine: The machine to validate.
        :param host_cls: When given, also check that named handlers exist on it.
        :raises ConfigurationError: If validation fails.
        """
        self._rules_engine.validate_machine(machine)
        if host_cls is not None:
            self._rules_engine.validate_host(machine, host_cls)


class _ValidationRulesEngine:
    """
    Internal engine applying the default rule set to machines and host classes.
    """

    def __init__(self) -> None:
        self._default_rules = _DefaultValidationRules

    def validate_machine(self, machine: "Machine") -> None:
        self._default_rules.validate_references(machine)
        self._default_rules.validate_actions(machine)

    def validate_host(self, machine: "Machine", host_cls: type) -> None:
        self._default_rules.validate_handlers(machine, host_cls)


class _DefaultValidationRules:
    """
    Built-in rules: referenced states must be defined, action names must be
    unique, and named handlers must resolve to callables on the host class.
    """

    @staticmethod
    def validate_references(machine: "Machine") -> None:
        known = set(machine.state_names())
        for s in machine.states:
            referenced = list(s.allow_from) + list(s.prevent_from)
            referenced += [cb.from_state for cb in s.before_transitions + s.after_transitions if cb.from_state]
            for name in referenced:
                if name not in known:
                    raise ConfigurationError(f"State {s.name} references undefined state {name}.")

    @staticmethod
    def validate_actions(machine: "Machine") -> None:
        seen: Dict[str, str] = {}
        for s in machine.states:
            if s.action in seen:
                raise ConfigurationError(
                    f"States {seen[s.action]} and {s.name} share the action name {s.action}."
                )
            seen[s.action] = s.name

    @staticmethod
    def validate_handlers(machine: "Machine", host_cls: type) -> None:
        for s in machine.states:
            for handler in _handlers_of(s):
                if isinstance(handler, str):
                    attr = getattr(host_cls, handler, None)
                    if attr is None or not callable(attr):
                        raise ConfigurationError(
                            f"{host_cls.__name__} has no method {handler} required by state {s.name}."
                        )
                elif not callable(handler):
                    raise ConfigurationError(f"Handler {handler!r} of state {s.name} is not callable.")


def _handlers_of(definition: StateDefinition) -> List[Any]:
    handlers = [cb.do for cb in definition.before_transitions + definition.after_transitions]
    handlers.extend(definition.validations)
    return handlers
