# statetree/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from statetree.core.base import StateNode
from statetree.core.errors import ContextOverflowError

DEFAULT_INITIAL_STATE = "start"


class _Unset:
    """Marker for a state entered without an explicit context."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class RawTransition:
    """
    Context-free result of resolving a path from a state. Cached per node,
    manager and path, so it must never be mutated.
    """

    exit_states: Tuple[StateNode, ...]
    enter_states: Tuple[StateNode, ...]
    resolve_state: StateNode


class TransitionPlan:
    """
    Normalizes a raw transition into the exact states to exit and enter.

    - matches supplied contexts to the states that require one
    - descends into initial sub-states so the plan ends on a leaf
    - drops leading states that are both exited and entered without change

    A plan is built fresh for every transition and discarded afterwards.
    """

    def __init__(
        self,
        raw: RawTransition,
        contexts: Sequence[Any] = (),
        active_contexts: Optional[Mapping[StateNode, Any]] = None,
    ) -> None:
        """
        :param raw: Exit, enter and resolve states from pivot resolution.
        :param contexts: Contexts passed to the transition, outermost first.
        :param active_contexts: Contexts currently held by active states; used to
            keep states whose context did not change.
        """
        self.exit_states: List[StateNode] = list(raw.exit_states)
        self.enter_states: List[StateNode] = list(raw.enter_states)
        self.resolve_state: StateNode = raw.resolve_state
        self.final_state: StateNode = self.enter_states[-1] if self.enter_states else self.resolve_state
        self.contexts: Optional[List[Any]] = None

        if contexts:
            self.match_contexts_to_states(list(contexts))
        self.add_initial_states()
        self.remove_unchanged_contexts(active_contexts or {})

    @property
    def tracks_contexts(self) -> bool:
        return self.contexts is not None

    def context_for(self, index: int) -> Any:
        """Context matched to `enter_states[index]`, or UNSET."""
        if self.contexts is None:
            return UNSET
        return self.contexts[index]

    def match_contexts_to_states(self, contexts: List[Any]) -> None:
        """
        Assign contexts to enter states starting at the leaf. When contexts remain
        after every enter state has been visited, the plan is extended with the
        resolve state's ancestors, which are then both exited and re-entered.

        :raises ContextOverflowError: If the root is reached with contexts left.
        """
        matched: List[Any] = []
        index = len(self.enter_states) - 1

        while contexts:
            if index >= 0:
                state = self.enter_states[index]
                index -= 1
            else:
                state = self.resolve_state
                if state.parent is None:
                    raise ContextOverflowError(
                        f"Cannot match {len(contexts)} remaining context(s) to states for {self.final_state!r}"
                    )
                self.enter_states.insert(0, state)
                self.exit_states.insert(0, state)
                self.resolve_state = state.parent

            if state.requires_context:
                matched.insert(0, contexts.pop())
            else:
                matched.insert(0, UNSET)

        # States above the matched range keep no explicit context.
        self.contexts = [UNSET] * (len(self.enter_states) - len(matched)) + matched

    def add_initial_states(self) -> None:
        """
        Follow initial sub-states (or children named "start") down from the final state.
        """
        state = self.final_state
        while True:
            name = state.initial_state or DEFAULT_INITIAL_STATE
            state = state.child_by_name(name)
            if state is None:
                break

            self.final_state = state
            self.enter_states.append(state)
            if self.contexts is not None:
                self.contexts.append(UNSET)

    def remove_unchanged_contexts(self, active_contexts: Mapping[StateNode, Any]) -> None:
        """
        Pop leading states present in both lists. With contexts tracked, a state is
        only kept out of the plan if it has no explicit context or the one it
        already holds is the same.
        """
        while self.enter_states and self.exit_states:
            state = self.enter_states[0]
            if state is not self.exit_states[0]:
                break

            if self.contexts is not None:
                context = self.contexts[0]
                if context is not UNSET and active_contexts.get(state, UNSET) != context:
                    break
                self.contexts.pop(0)

            self.resolve_state = self.enter_states.pop(0)
            self.exit_states.pop(0)

    def __repr__(self) -> str:
        return (
            f"TransitionPlan(exit={[s.path for s in self.exit_states]!r}, "
            f"enter={[s.path for s in self.enter_states]!r}, final={self.final_state.path!r})"
        )
