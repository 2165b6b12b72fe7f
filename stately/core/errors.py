# stately/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details


class StatelyError(Exception):
    """
    Base exception class for errors raised by the stately engine.
    """


class InvalidTransition(StatelyError):
    """
    Raised when a transition is attempted from a state that is not allowed by the
    target state's allow_from/prevent_from rules, or when the target state is
    already the current state.

    :param from_state: The state the host was in when the transition was attempted.
    :param to_state: The requested target state.
    """

    def __init__(self, from_state: str, to_state: str) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Prevented transition from {from_state} to {to_state}.")

    def __reduce__(self):
        return (self.__class__, (self.from_state, self.to_state))


class StateNotDefinedError(StatelyError, LookupError):
    """
    Raised when a state is looked up on a machine that does not define it.
    """

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"State {state} is not defined in this state machine.")

    def __reduce__(self):
        return (self.__class__, (self.state,))


class ConfigurationError(StatelyError):
    """
    Raised when a machine definition, or its binding to a host class, is invalid.
    """
