"""
Core package providing the state tree engine.

- `State` declarations describe the tree; `compose` merges declaration fragments
- `StateNode` is a built node: tree queries, listeners, per-manager path cache
- `TransitionPlan` normalizes a resolved path into exit and enter lists
- `StateManager` owns the current state, runs transitions and dispatches events
"""

# Import order matters to avoid circular dependencies
from .errors import (
    ContextOverflowError,
    InitialStateUnresolvedError,
    NoCurrentStateError,
    StateNotFoundError,
    StateTreeError,
    TransitionError,
    UnhandledEventError,
    UnknownPathError,
    ValidationError,
)
from .events import DEFAULT_TRANSITION_EVENT, ENTER, EXIT, UNHANDLED_EVENT, Event
from .base import StateNode
from .states import State, compose
from .transitions import UNSET, RawTransition, TransitionPlan
from .hooks import Hook, HookManager, HookProtocol
from .validations import Validator
from .state_machine import ManagerOptions, StateManager

__all__ = [
    # Errors
    "StateTreeError",
    "StateNotFoundError",
    "UnknownPathError",
    "TransitionError",
    "ContextOverflowError",
    "InitialStateUnresolvedError",
    "NoCurrentStateError",
    "UnhandledEventError",
    "ValidationError",
    # Events
    "Event",
    "ENTER",
    "EXIT",
    "UNHANDLED_EVENT",
    "DEFAULT_TRANSITION_EVENT",
    # Tree
    "State",
    "StateNode",
    "compose",
    # Transitions
    "UNSET",
    "RawTransition",
    "TransitionPlan",
    # Manager
    "Hook",
    "HookManager",
    "HookProtocol",
    "Validator",
    "ManagerOptions",
    "StateManager",
]
