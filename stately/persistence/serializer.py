# stately/persistence/serializer.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Conversion of machine definitions to and from plain data.

Only the definition is serialized (states, rules, handler names); the current
state of host instances is not. Handlers must be method names, since arbitrary
callables have no portable representation.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

from stately.core.errors import ConfigurationError
from stately.core.machine import Machine
from stately.core.states import Callback, StateConfigurator, StateDefinition

FORMAT_VERSION = 1


def machine_to_dict(machine: Machine) -> Dict[str, Any]:
    """
    :raises ConfigurationError: If any handler is a callable rather than a name.
    """
    return {
        "version": FORMAT_VERSION,
        "attr": machine.state_attr,
        "start": machine.start,
        "states": [_state_to_dict(s) for s in machine.states],
    }


def machine_from_dict(data: Mapping[str, Any]) -> Machine:
    """
    Build a machine from the output of machine_to_dict(). States are defined in
    list order; listing the start state redefines it.

    :raises ConfigurationError: If the data is malformed.
    """
    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ConfigurationError(f"Unsupported machine format version {version}.")
    if "start" not in data:
        raise ConfigurationError("Machine data must name a start state.")

    machine = Machine(state_attr=data.get("attr", "state"), start=data["start"])
    for entry in data.get("states", []):
        if not isinstance(entry, Mapping) or "name" not in entry:
            raise ConfigurationError(f"Invalid state entry: {entry!r}")
        machine.state(entry["name"], action=entry.get("action"), configure=_configurator_for(entry))
    return machine


def dumps(machine: Machine, **kwargs: Any) -> str:
    return json.dumps(machine_to_dict(machine), **kwargs)


def loads(text: str) -> Machine:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid machine JSON: {e}") from e
    if not isinstance(data, Mapping):
        raise ConfigurationError("Machine JSON must be an object.")
    return machine_from_dict(data)


def _state_to_dict(definition: StateDefinition) -> Dict[str, Any]:
    return {
        "name": definition.name,
        "action": definition.action,
        "allow_from": list(definition.allow_from),
        "prevent_from": list(definition.prevent_from),
        "before_transitions": [_callback_to_dict(cb) for cb in definition.before_transitions],
        "after_transitions": [_callback_to_dict(cb) for cb in definition.after_transitions],
        "validations": [_handler_name(v) for v in definition.validations],
    }


def _callback_to_dict(callback: Callback) -> Dict[str, Any]:
    result: Dict[str, Any] = {"do": _handler_name(callback.do)}
    if callback.from_state is not None:
        result["from"] = callback.from_state
    return result


def _handler_name(handler: Any) -> str:
    if not isinstance(handler, str):
        raise ConfigurationError(f"Only named handlers can be serialized, got {handler!r}.")
    return handler


def _configurator_for(entry: Mapping[str, Any]):
    def configure(s: StateConfigurator) -> None:
        s.allow_from(*_names(entry, "allow_from"))
        s.prevent_from(*_names(entry, "prevent_from"))
        for cb in entry.get("before_transitions", []):
            s.before_transition(**_callback_kwargs(cb))
        for cb in entry.get("after_transitions", []):
            s.after_transition(**_callback_kwargs(cb))
        for v in entry.get("validations", []):
            s.validate(_handler_name(v))

    return configure


def _names(entry: Mapping[str, Any], key: str) -> List[str]:
    value = entry.get(key, [])
    if isinstance(value, str) or not isinstance(value, list):
        raise ConfigurationError(f"{key} must be a list of state names.")
    return value


def _callback_kwargs(cb: Any) -> Dict[str, Any]:
    if not isinstance(cb, Mapping) or "do" not in cb:
        raise ConfigurationError(f"Invalid callback entry: {cb!r}")
    return {"do": _handler_name(cb["do"]), "from_state": cb.get("from")}
