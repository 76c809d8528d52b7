# statetree/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Optional


class StateTreeError(Exception):
    """
    Base exception class for errors within the state tree library.
    """


class StateNotFoundError(StateTreeError):
    """
    Raised when a requested state does not exist in the tree.
    """


class UnknownPathError(StateNotFoundError):
    """
    Raised when a transition path cannot be resolved from the current state or
    any of its ancestors. The current state is left unchanged.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f'Could not find state for path: "{path}"')
        self.path = path


class TransitionError(StateTreeError):
    """
    Raised when an attempted state transition is invalid or cannot be completed.
    """


class ContextOverflowError(TransitionError):
    """
    Raised when more contexts are supplied than states able to consume them.
    """


class InitialStateUnresolvedError(TransitionError):
    """
    Raised when a manager cannot enter its initial state during construction.
    """


class NoCurrentStateError(StateTreeError):
    """
    Raised when an event is sent before any state has been entered.
    """


class UnhandledEventError(StateTreeError):
    """
    Raised when no state in the current state's ancestor chain handles an event.
    """

    def __init__(self, message: str, event_name: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.event_name = event_name
        self.path = path


class ValidationError(StateTreeError):
    """
    Raised when validation detects configuration or runtime constraints violations.
    """
