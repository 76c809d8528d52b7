"""statetree: hierarchical finite state machine engine

A tree of named states, a manager that tracks the single active leaf and moves
between states by path, and event dispatch that bubbles unhandled actions up
through the ancestors of the current state.

Responsibilities:
    - Building node trees from reusable state declarations
    - Resolving absolute and relative transition paths
    - Entering nested initial states and matching contexts to states
    - Ordered exit/enter callbacks and transition events
    - Event bubbling with an unhandled-event fallback

Cross-cutting Concerns:
    Thread Safety:
        - Not thread-safe; a manager and its tree must be driven from one
          thread at a time, callers serialize access

    Error Handling:
        - Structured error hierarchy rooted at StateTreeError
        - Errors are reported to hooks, then propagate to the caller

    Logging:
        - Standard library logging under the "statetree" logger
        - enable_logging raises transition messages from DEBUG to INFO
"""

from statetree.core import (
    ContextOverflowError,
    Event,
    Hook,
    InitialStateUnresolvedError,
    ManagerOptions,
    NoCurrentStateError,
    State,
    StateManager,
    StateNode,
    StateTreeError,
    UnhandledEventError,
    UnknownPathError,
    ValidationError,
    compose,
)

__version__ = "0.1.0"

__all__ = [
    "ContextOverflowError",
    "Event",
    "Hook",
    "InitialStateUnresolvedError",
    "ManagerOptions",
    "NoCurrentStateError",
    "State",
    "StateManager",
    "StateNode",
    "StateTreeError",
    "UnhandledEventError",
    "UnknownPathError",
    "ValidationError",
    "compose",
]
