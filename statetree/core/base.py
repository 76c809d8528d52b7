# statetree/core/base.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import weakref
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional

from statetree.core.events import ENTER, EXIT

if TYPE_CHECKING:
    from statetree.core.state_machine import StateManager
    from statetree.core.states import State
    from statetree.core.transitions import RawTransition


class StateNode:
    """
    An addressable node in a built state tree. Nodes are created from `State`
    declarations once per manager, hold a weak reference to their parent and
    a fixed mapping of children, and deliver enter/exit and named
    notifications to listeners.

    The synthetic root of a tree has no name and no parent.
    """

    def __init__(self, name: Optional[str], definition: "State", parent: Optional[StateNode] = None) -> None:
        """
        :param name: Key of this node in its parent's child mapping, None for the root.
        :param definition: The declaration this node was built from.
        :param parent: Parent node, None for the root.
        """
        self.name = name
        self._definition = definition
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self._children: Dict[str, StateNode] = {}
        self._listeners: Dict[str, List[Callable[..., Any]]] = {}
        self._paths_cache: "weakref.WeakKeyDictionary[StateManager, Dict[str, RawTransition]]" = (
            weakref.WeakKeyDictionary()
        )

    def _add_child(self, child: StateNode) -> None:
        # Only called while the tree is being built.
        self._children[child.name] = child

    @property
    def definition(self) -> "State":
        """The declaration this node was built from."""
        return self._definition

    @property
    def parent(self) -> Optional[StateNode]:
        """The parent node, or None for the root (or if the parent was collected)."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def children(self) -> Mapping[str, StateNode]:
        """Read-only mapping of child names to child nodes."""
        return MappingProxyType(self._children)

    @property
    def child_states(self) -> List[StateNode]:
        return list(self._children.values())

    @property
    def requires_context(self) -> bool:
        return self._definition.requires_context

    @property
    def initial_state(self) -> Optional[str]:
        return self._definition.initial_state

    @property
    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return not self._children

    @property
    def path(self) -> str:
        """Dot-joined names from the root to this node; empty for the root."""
        names = []
        node: Optional[StateNode] = self
        while node is not None:
            if node.name is not None:
                names.append(node.name)
            node = node.parent
        return ".".join(reversed(names))

    def child_by_name(self, name: str) -> Optional[StateNode]:
        """
        Look up an immediate child.

        :param name: The child's name.
        :return: The child node, or None if no such child exists.
        """
        return self._children.get(name)

    def get_handler(self, name: str) -> Optional[Callable[..., Any]]:
        """Return the action handler declared for `name`, if any."""
        return self._definition.actions.get(name)

    def get_paths_cache(self, manager: "StateManager", path: str) -> Optional["RawTransition"]:
        """
        Retrieve a previously computed transition for this node, manager and path.
        """
        paths = self._paths_cache.get(manager)
        if paths is None:
            return None
        return paths.get(path)

    def set_paths_cache(self, manager: "StateManager", path: str, transition: "RawTransition") -> None:
        """
        Memoize a computed transition for this node, manager and path.
        """
        self._paths_cache.setdefault(manager, {})[path] = transition

    def clear_paths_cache(self, manager: Optional["StateManager"] = None) -> None:
        """
        Drop cached transitions for one manager, or for every manager if none is given.
        """
        if manager is None:
            self._paths_cache.clear()
        else:
            self._paths_cache.pop(manager, None)

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        """
        Register a listener on this node only.

        :param event: Event name, e.g. "enter", "exit" or the transition event.
        :param listener: Callable receiving the manager first, then any extra arguments.
        """
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        """Remove a listener registered with `on`. Unknown listeners are ignored."""
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def notify(self, event: str, manager: "StateManager", *args: Any) -> None:
        """
        Deliver `event` to the declaration's actions and listeners, then to
        listeners registered on this node. Every callback receives `manager`
        as its first argument.
        """
        if event == ENTER:
            callbacks = list(self._definition.entry_actions)
        elif event == EXIT:
            callbacks = list(self._definition.exit_actions)
        else:
            callbacks = []
        callbacks.extend(self._definition.listeners_for(event))
        callbacks.extend(self._listeners.get(event, ()))

        for callback in callbacks:
            callback(manager, *args)

    def __repr__(self) -> str:
        if self.name is None:
            return "<StateNode (root)>"
        return f"<StateNode {self.path}>"
