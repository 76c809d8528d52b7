# statetree/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from statetree.core.base import StateNode
from statetree.core.events import Event

if TYPE_CHECKING:
    from statetree.core.state_machine import StateManager

Listener = Callable[..., Any]


def _as_list(listeners: Union[Listener, Iterable[Listener], None]) -> List[Listener]:
    if listeners is None:
        return []
    if callable(listeners):
        return [listeners]
    return list(listeners)


class State:
    """
    Declares a state: its sub-states, its default sub-state, whether it takes a
    context on entry, and the callbacks it reacts with.

    A declaration carries no parent and no runtime data, so the same `State`
    can appear in several trees. Each manager builds its own `StateNode` tree
    from the declarations it is given.
    """

    def __init__(
        self,
        states: Optional[Mapping[str, "State"]] = None,
        *,
        initial_state: Optional[str] = None,
        requires_context: bool = False,
        entry_actions: Optional[List[Listener]] = None,
        exit_actions: Optional[List[Listener]] = None,
        actions: Optional[Mapping[str, Listener]] = None,
        listeners: Optional[Mapping[str, Union[Listener, Iterable[Listener]]]] = None,
    ) -> None:
        """
        :param states: Child declarations keyed by name.
        :param initial_state: Child entered when this state is the transition
            target. Defaults to a child named "start" when one exists.
        :param requires_context: Whether this state consumes a context on entry.
        :param entry_actions: Callables run with the manager when the state is entered.
        :param exit_actions: Callables run with the manager when the state is exited.
        :param actions: Event handlers keyed by event name, called as
            ``handler(manager, *contexts)``.
        :param listeners: Callables keyed by event name, e.g. the transition event.
        """
        self.states: Dict[str, State] = dict(states or {})
        self.initial_state = initial_state
        self.requires_context = requires_context
        self.entry_actions: List[Listener] = list(entry_actions or [])
        self.exit_actions: List[Listener] = list(exit_actions or [])
        self.actions: Dict[str, Listener] = dict(actions or {})
        self._listeners: Dict[str, List[Listener]] = {
            event: _as_list(callbacks) for event, callbacks in (listeners or {}).items()
        }

    def on(self, event: str, listener: Listener) -> None:
        """Register a listener delivered by every node built from this declaration."""
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listeners_for(self, event: str) -> List[Listener]:
        return list(self._listeners.get(event, ()))

    @property
    def listeners(self) -> Dict[str, List[Listener]]:
        """A copy of all registered listeners keyed by event name."""
        return {event: list(callbacks) for event, callbacks in self._listeners.items()}

    def build(self, name: Optional[str] = None, parent: Optional[StateNode] = None) -> StateNode:
        """
        Build the node tree for this declaration and its descendants.

        :param name: Name of the resulting node; None for a tree root.
        :param parent: Parent node to attach to.
        :return: The node built from this declaration.
        """
        node = StateNode(name, self, parent)
        for child_name, child in self.states.items():
            node._add_child(child.build(child_name, node))
        return node

    @staticmethod
    def transition_to(target: str) -> Callable[..., None]:
        """
        Create an action handler that transitions the manager to `target`.

        The handler forwards contexts: if its first argument is an `Event`,
        that event's contexts are used; otherwise the extra arguments are.

        :param target: Path to transition to.
        :return: A handler suitable for the `actions` mapping.
        """

        def transition_function(manager: "StateManager", *args: Any) -> None:
            if args and isinstance(args[0], Event):
                contexts = list(args[0].contexts)
            else:
                contexts = list(args)
            manager.transition_to(target, *contexts)

        transition_function.transition_target = target
        return transition_function

    def __repr__(self) -> str:
        return f"State(states={list(self.states)!r}, initial_state={self.initial_state!r})"


def compose(*fragments: State) -> State:
    """
    Merge state declarations left to right into a new declaration.

    Child states and actions from later fragments replace earlier ones with
    the same name. Entry actions, exit actions and listeners are concatenated.
    The last declared initial state wins.

    :param fragments: Declarations to merge.
    :return: A new `State`; the fragments are not modified.
    """
    merged = State()
    for fragment in fragments:
        merged.states.update(fragment.states)
        merged.actions.update(fragment.actions)
        merged.entry_actions.extend(fragment.entry_actions)
        merged.exit_actions.extend(fragment.exit_actions)
        for event, callbacks in fragment.listeners.items():
            for callback in callbacks:
                merged.on(event, callback)
        if fragment.initial_state is not None:
            merged.initial_state = fragment.initial_state
        merged.requires_context = merged.requires_context or fragment.requires_context
    return merged
