# statetree/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Tuple

ENTER = "enter"
EXIT = "exit"
UNHANDLED_EVENT = "unhandled_event"
DEFAULT_TRANSITION_EVENT = "setup"


class Event:
    """
    Represents a named action sent to a state manager. Events are dispatched to
    the current state and bubble up through its ancestors until handled.
    """

    def __init__(self, name: str, *contexts: Any) -> None:
        """
        Create an event identified by a name, carrying optional contexts.

        :param name: A string identifying this event.
        :param contexts: Positional values passed along to the handler.
        """
        self._name = name
        self._contexts: Tuple[Any, ...] = tuple(contexts)
        self._metadata: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        """The name of the event."""
        return self._name

    @property
    def contexts(self) -> Tuple[Any, ...]:
        """Context values delivered to the handler after the manager."""
        return self._contexts

    @property
    def metadata(self) -> Dict[str, Any]:
        """Optional dictionary of additional event data."""
        return self._metadata

    def __repr__(self) -> str:
        return f"Event({self._name!r}, contexts={self._contexts!r})"
