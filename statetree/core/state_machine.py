# statetree/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from statetree.core.base import StateNode
from statetree.core.errors import (
    InitialStateUnresolvedError,
    NoCurrentStateError,
    UnhandledEventError,
    UnknownPathError,
)
from statetree.core.events import DEFAULT_TRANSITION_EVENT, ENTER, EXIT, UNHANDLED_EVENT, Event
from statetree.core.hooks import HookManager, HookProtocol
from statetree.core.states import State, compose
from statetree.core.transitions import DEFAULT_INITIAL_STATE, UNSET, RawTransition, TransitionPlan
from statetree.core.validations import Validator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManagerOptions:
    """
    Behavior switches for a StateManager.

    :param initial_state: Path entered on construction. Defaults to the root
        declaration's initial state, then to a top-level state named "start".
    :param transition_event: Event delivered to every entered state once the
        current state has been updated.
    :param error_on_unhandled_event: Raise UnhandledEventError when no state
        handles a sent event. When False such sends return None.
    :param enable_logging: Log transitions and dispatch at INFO instead of DEBUG.
    """

    initial_state: Optional[str] = None
    transition_event: str = DEFAULT_TRANSITION_EVENT
    error_on_unhandled_event: bool = True
    enable_logging: bool = False


class StateManager:
    """
    Tracks the single active leaf of a state tree, moves between states by
    path and routes events from the current state up through its ancestors.

    The manager builds its own node tree from the declarations it is given,
    rooted at a synthetic node with no name. Everything runs synchronously on
    the caller's thread; callbacks may call `transition_to` or `send` again.
    """

    def __init__(
        self,
        states: Union[State, Mapping[str, State], None] = None,
        *,
        options: Optional[ManagerOptions] = None,
        hooks: Optional[List[HookProtocol]] = None,
        validator: Optional[Validator] = None,
        actions: Optional[Mapping[str, Any]] = None,
        **overrides: Any,
    ) -> None:
        """
        :param states: A root declaration, or a mapping of top-level declarations.
        :param options: Base options; keyword overrides are applied on top.
        :param hooks: Optional list of hook objects implementing on_enter, on_exit, on_error.
        :param validator: Optional validator for declaration and event checks.
        :param actions: Manager-level event handlers, e.g. a fallback "unhandled_event".
        :param overrides: Any ManagerOptions field, e.g. ``initial_state="idle"``.
        :raises ValidationError: If the declarations are malformed.
        :raises InitialStateUnresolvedError: If the initial state cannot be entered.
        """
        self._options = replace(options or ManagerOptions(), **overrides)
        self._hooks = HookManager(hooks)
        self._validator = validator or Validator()

        if isinstance(states, State):
            definition = states
        else:
            definition = State(states or {})
        if actions:
            definition = compose(definition, State(actions=actions))

        self._validator.validate_definition(definition)
        self._definition = definition
        self._root = definition.build()
        self._current_state: Optional[StateNode] = None
        self._contexts: Dict[StateNode, Any] = {}
        self._call_depth = 0

        self._enter_initial_state()

    def _enter_initial_state(self) -> None:
        initial_state = self._options.initial_state or self._definition.initial_state
        if not initial_state and self._root.child_by_name(DEFAULT_INITIAL_STATE) is not None:
            initial_state = DEFAULT_INITIAL_STATE
        if not initial_state:
            return

        try:
            self.transition_to(initial_state)
        except UnknownPathError as e:
            raise InitialStateUnresolvedError(f'Failed to transition to initial state "{initial_state}"') from e
        if self._current_state is None:
            raise InitialStateUnresolvedError(f'Failed to transition to initial state "{initial_state}"')

    @property
    def options(self) -> ManagerOptions:
        return self._options

    @property
    def error_on_unhandled_event(self) -> bool:
        return self._options.error_on_unhandled_event

    @error_on_unhandled_event.setter
    def error_on_unhandled_event(self, value: bool) -> None:
        self._options = replace(self._options, error_on_unhandled_event=value)

    @property
    def transition_event(self) -> str:
        return self._options.transition_event

    @property
    def hooks(self) -> HookManager:
        return self._hooks

    @property
    def root(self) -> StateNode:
        """The synthetic root node of this manager's tree."""
        return self._root

    @property
    def states(self) -> Mapping[str, StateNode]:
        """Top-level states keyed by name."""
        return self._root.children

    @property
    def current_state(self) -> Optional[StateNode]:
        """The active leaf state, or None before the first transition."""
        return self._current_state

    @property
    def current_path(self) -> Optional[str]:
        """Dotted path of the current state, or None before the first transition."""
        if self._current_state is None:
            return None
        return self._current_state.path

    def get_context(self, state: StateNode) -> Any:
        """Return the context `state` was entered with under this manager, or UNSET."""
        return self._contexts.get(state, UNSET)

    def _log(self, message: str, *args: Any) -> None:
        level = logging.INFO if self._options.enable_logging else logging.DEBUG
        logger.log(level, message, *args)

    # Path lookups

    def get_states_in_path(self, root: StateNode, path: str) -> Optional[List[StateNode]]:
        """
        Follow `path` down from `root`, returning every state along it.

        :param root: Node to resolve from; the path's first name is one of its children.
        :param path: Dotted path such as "posts.show".
        :return: The nodes from `root`'s child to the target, or None if any name is missing.
        """
        if not path:
            return None

        result = []
        state = root
        for name in path.split("."):
            state = state.child_by_name(name)
            if state is None:
                return None
            result.append(state)
        return result

    def get_state_by_path(self, root: StateNode, path: str) -> Optional[StateNode]:
        """Return the node at `path` below `root`, or None."""
        states = self.get_states_in_path(root, path)
        if not states:
            return None
        return states[-1]

    def find_state_by_path(self, state: Optional[StateNode], path: str) -> Optional[StateNode]:
        """Return the node at `path` below `state` or the nearest ancestor containing it."""
        while state is not None:
            found = self.get_state_by_path(state, path)
            if found is not None:
                return found
            state = state.parent
        return None

    def clear_paths_cache(self) -> None:
        """Drop every transition this manager cached on its nodes."""
        stack = [self._root]
        while stack:
            node = stack.pop()
            node.clear_paths_cache(self)
            stack.extend(node.child_states)

    # Transitions

    def transition_to(self, path: Optional[str], *contexts: Any) -> None:
        """
        Move to the state at `path`, which may be absolute or relative to any
        ancestor of the current state. Exits run leaf first, enters root first,
        then the current state is updated and the transition event delivered.

        An empty path does nothing.

        Callbacks may call `transition_to` again; the nested call runs to
        completion first. Since the current state only changes after every
        enter callback has run, a transition started from an enter callback
        resolves from the previous current state: it exits states the outer
        transition already exited a second time, and the outer transition then
        makes its own final state current when it resumes.

        :param path: Dotted state path.
        :param contexts: Contexts for states that require one, outermost first.
        :raises UnknownPathError: If the path does not resolve; the current state is unchanged.
        :raises ContextOverflowError: If contexts are left after reaching the root.
        """
        if not path:
            return

        current_state = self._current_state or self._root
        with self._reporting_errors():
            raw = self.context_free_transition(current_state, path)
            plan = TransitionPlan(raw, contexts, self._contexts)
            self.enter_state(plan)
            self.trigger_setup_context(plan)

    def context_free_transition(self, current_state: StateNode, path: str) -> RawTransition:
        """
        Resolve `path` from `current_state` or the closest ancestor under which it
        exists, and strip states shared by both the exit and enter lists.

        Results are cached on `current_state` for this manager and path.

        :raises UnknownPathError: If no ancestor, including the root, contains the path.
        """
        cached = current_state.get_paths_cache(self, path)
        if cached is not None:
            return cached

        enter_states = self.get_states_in_path(current_state, path)
        exit_states: List[StateNode] = []
        resolve_state = current_state

        # Walk up until some ancestor contains `path`. The top of the walk is
        # the tree root, so the final attempt is always an absolute lookup.
        while enter_states is None:
            parent = resolve_state.parent
            if parent is None:
                raise UnknownPathError(path)
            exit_states.insert(0, resolve_state)
            resolve_state = parent
            enter_states = self.get_states_in_path(resolve_state, path)

        while enter_states and exit_states and enter_states[0] is exit_states[0]:
            resolve_state = enter_states.pop(0)
            exit_states.pop(0)

        transition = RawTransition(
            exit_states=tuple(exit_states),
            enter_states=tuple(enter_states),
            resolve_state=resolve_state,
        )
        current_state.set_paths_cache(self, path, transition)
        return transition

    def enter_state(self, plan: TransitionPlan) -> None:
        """
        Exit `plan.exit_states` deepest first, enter `plan.enter_states` outermost
        first, then make `plan.final_state` current.
        """
        for state in reversed(plan.exit_states):
            self._log("Exiting %s", state.path)
            self._contexts.pop(state, None)
            state.notify(EXIT, self)
            self._hooks.execute_on_exit(state)

        for index, state in enumerate(plan.enter_states):
            self._log("Entering %s", state.path)
            context = plan.context_for(index)
            if context is UNSET:
                self._contexts.pop(state, None)
            else:
                self._contexts[state] = context
            state.notify(ENTER, self)
            self._hooks.execute_on_enter(state)

        self._current_state = plan.final_state
        self._log("Current state is now %s", plan.final_state.path)

    def trigger_setup_context(self, plan: TransitionPlan) -> None:
        """
        Deliver the transition event to every entered state, outermost first.
        States entered with a context receive it after the manager.
        """
        transition_event = self._options.transition_event
        for index, state in enumerate(plan.enter_states):
            context = plan.context_for(index)
            if context is UNSET:
                state.notify(transition_event, self)
            else:
                state.notify(transition_event, self, context)

    # Event dispatch

    def send(self, event: Union[Event, str], *contexts: Any) -> Any:
        """
        Dispatch an event to the current state. If the state has no handler for
        it, its parent is tried, and so on up to the root. Failing that, the same
        walk looks for an "unhandled_event" handler, which receives the event name
        before the contexts.

        :param event: An Event or an event name.
        :param contexts: Extra values passed to the handler after the manager.
        :return: The handler's return value, or None if unhandled in relaxed mode.
        :raises NoCurrentStateError: If no state has been entered yet.
        :raises UnhandledEventError: If nothing handles the event and
            `error_on_unhandled_event` is set.
        """
        if isinstance(event, Event):
            event_name = event.name
            contexts = event.contexts + contexts
        else:
            event_name = event

        self._validator.validate_event(event_name)
        if self._current_state is None:
            raise NoCurrentStateError(f'Cannot send event "{event_name}" while currentState is None')

        with self._reporting_errors():
            state, handler = self._find_handler(event_name)
            if handler is not None:
                self._log("Sending event '%s' to state %s.", event_name, state.path)
                return handler(self, *contexts)

            state, handler = self._find_handler(UNHANDLED_EVENT)
            if handler is not None:
                self._log("Unhandled event '%s' being sent to state %s.", event_name, state.path)
                return handler(self, event_name, *contexts)

            if self._options.error_on_unhandled_event:
                raise UnhandledEventError(
                    f"{self!r} could not respond to event {event_name} in state {self.current_path}.",
                    event_name=event_name,
                    path=self.current_path,
                )
            self._log("Event '%s' was not handled in state %s.", event_name, self.current_path)
            return None

    @contextmanager
    def _reporting_errors(self) -> Iterator[None]:
        # Only the outermost transition_to or send reports to hooks.
        self._call_depth += 1
        try:
            yield
        except Exception as e:
            if self._call_depth == 1:
                self._hooks.execute_on_error(e)
            raise
        finally:
            self._call_depth -= 1

    def _find_handler(self, name: str):
        state = self._current_state
        while state is not None:
            handler = state.get_handler(name)
            if handler is not None:
                return state, handler
            state = state.parent
        return None, None

    def __repr__(self) -> str:
        return f"<StateManager current={self.current_path!r}>"
