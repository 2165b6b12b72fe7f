# stately/core/machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Union

from stately.core.errors import ConfigurationError, StateNotDefinedError
from stately.core.states import StateConfigurator, StateDefinition, state_name
from stately.interfaces.types import StateID

logger = logging.getLogger(__name__)


class EntryPoints(NamedTuple):
    """
    Callable entry points derived from a machine's states.

    actions maps each trigger name to the state it transitions into; queries
    maps ``"<state>?"`` to the state it tests for.
    """

    actions: Dict[str, StateID]
    queries: Dict[str, StateID]


class Machine:
    """
    A container for StateDefinitions, shared read-only by every instance of the
    host class it is bound to.

    The start state is always defined: it is created, unconstrained, when the
    machine is constructed, and may be redefined like any other state.
    """

    def __init__(self, state_attr: str = "state", start: Any = None) -> None:
        """
        :param state_attr: Name of the host attribute storing the current state.
        :param start: The initial state.
        :raises ConfigurationError: If no start state is given.
        """
        if start is None or not state_name(start):
            raise ConfigurationError("A start state is required.")
        if not state_attr or not isinstance(state_attr, str):
            raise ConfigurationError("State attribute name must be a non-empty string.")

        self._state_attr = state_attr
        self._start = state_name(start)
        self._states: List[StateDefinition] = [StateDefinition.create(self._start)]

    @property
    def state_attr(self) -> str:
        return self._state_attr

    @property
    def start(self) -> StateID:
        return self._start

    @property
    def states(self) -> List[StateDefinition]:
        """State definitions in declaration order."""
        return list(self._states)

    def state(
        self,
        name: Any,
        action: Optional[str] = None,
        configure: Optional[Callable[[StateConfigurator], Any]] = None,
    ) -> Union[StateDefinition, StateConfigurator]:
        """
        Define a state, replacing any prior definition with the same name. The
        new definition always goes to the end of the declaration order.

        With ``configure``, it is called with a StateConfigurator and the built
        definition is returned. Without it, the unconstrained state is defined
        right away and a configurator is returned; using it as a context manager
        redefines the state with the collected configuration when the block
        exits. If the block raises, the machine's states are restored to what
        they were before the call::

            with machine.state("refunded") as s:
                s.allow_from("completed")
                s.after_transition(do="email_receipt")

        :param name: The state name; stored in the host's state attribute.
        :param action: Trigger name, when it can't be inferred from ``name``.
        :param configure: Optional callable populating the configurator.
        """
        if configure is not None:
            configurator = StateConfigurator(name, action)
            configure(configurator)
            definition = configurator.build()
            self._add(definition)
            return definition

        previous = list(self._states)

        def restore() -> None:
            self._states = previous
            logger.debug("Discarded definition of state %s", configurator.name)

        configurator = StateConfigurator(name, action, on_build=self._add, on_error=restore)
        self._add(configurator.build())
        return configurator

    def _add(self, definition: StateDefinition) -> None:
        self._states = [s for s in self._states if s.name != definition.name]
        self._states.append(definition)
        logger.debug("Defined state %s (action %s)", definition.name, definition.action)

    def lookup(self, name: Any) -> Optional[StateDefinition]:
        """Return the definition whose name matches ``name``'s string form, if any."""
        key = state_name(name)
        for s in self._states:
            if s.name == key:
                return s
        return None

    def get_state(self, name: Any) -> StateDefinition:
        """
        Like lookup(), but fail fast for undefined states.

        :raises StateNotDefinedError: If the state is not defined.
        """
        definition = self.lookup(name)
        if definition is None:
            raise StateNotDefinedError(state_name(name))
        return definition

    def state_names(self) -> List[StateID]:
        """Return the defined state names in declaration order."""
        return [s.name for s in self._states]

    def entry_points(self) -> EntryPoints:
        return EntryPoints(
            actions={s.action: s.name for s in self._states},
            queries={f"{s.name}?": s.name for s in self._states},
        )

    def bind(self, cls: type = None, *, thread_safe: bool = False):
        """
        Attach this machine to a host class. Usable as a plain call or as a
        class decorator, with or without arguments.
        """
        from stately.core.binding import bind

        if cls is None:
            return lambda c: bind(self, c, thread_safe=thread_safe)
        return bind(self, cls, thread_safe=thread_safe)

    def __contains__(self, name: Any) -> bool:
        return self.lookup(name) is not None

    def __iter__(self) -> Iterator[StateDefinition]:
        return iter(list(self._states))

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return f"Machine(state_attr={self._state_attr!r}, start={self._start!r}, states={self.state_names()!r})"
