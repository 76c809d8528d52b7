# statetree/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import List, Tuple, Union

from statetree.core.errors import ValidationError
from statetree.core.events import Event
from statetree.core.states import State


class Validator:
    """
    Performs construction-time and runtime validation of state declarations and
    events, so that malformed trees fail before any state is entered.
    """

    def __init__(self) -> None:
        """
        Initialize the validator with the default rules.
        """
        self._rules_engine = _ValidationRulesEngine()

    def validate_definition(self, definition: State) -> None:
        """
        Check a root declaration and all of its descendants.

        :param definition: The root state declaration.
        :raises ValidationError: If validation fails.
        """
        self._rules_engine.validate_definition(definition)

    def validate_event(self, event: Union[Event, str]) -> None:
        """
        Validate that an event is well-defined and usable.

        :param event: The event, or event name, to validate.
        :raises ValidationError: If validation fails.
        """
        self._rules_engine.validate_event(event)


class _ValidationRulesEngine:
    """
    Internal engine applying a set of validation rules. Centralizes validation
    logic for easier maintenance.
    """

    def __init__(self) -> None:
        self._default_rules = _DefaultValidationRules

    def validate_definition(self, definition: State) -> None:
        self._default_rules.validate_tree(definition)

    def validate_event(self, event: Union[Event, str]) -> None:
        self._default_rules.validate_event(event)


class _DefaultValidationRules:
    """
    Provides built-in validation rules ensuring basic correctness of state
    declarations and events out of the box.
    """

    @staticmethod
    def validate_tree(root: State) -> None:
        """
        Walk the declaration tree depth first:
        - child names are non-empty strings without dots
        - children are State declarations
        - no declaration contains itself
        - callbacks are callable

        A declared initial state that names no child is accepted; descent
        stops at the declaring state.
        """
        stack: List[Tuple[State, Tuple[str, ...], Tuple[int, ...]]] = [(root, (), ())]

        while stack:
            definition, names, ancestors = stack.pop()
            label = ".".join(names) or "<root>"

            _DefaultValidationRules.validate_callbacks(definition, label)

            lineage = ancestors + (id(definition),)
            for name, child in definition.states.items():
                if not isinstance(name, str) or not name:
                    raise ValidationError(f"State {label} has a child with an invalid name: {name!r}.")
                if "." in name:
                    raise ValidationError(f"State name '{name}' in {label} must not contain '.'.")
                if not isinstance(child, State):
                    raise ValidationError(f"Child '{name}' of state {label} is not a State.")
                if id(child) in lineage:
                    raise ValidationError(f"Cycle detected: {' -> '.join(names + (name,))}")
                stack.append((child, names + (name,), lineage))

    @staticmethod
    def validate_callbacks(definition: State, label: str) -> None:
        for action in definition.entry_actions + definition.exit_actions:
            if not callable(action):
                raise ValidationError(f"Entry and exit actions of state {label} must be callable.")
        for name, handler in definition.actions.items():
            if not callable(handler):
                raise ValidationError(f"Action '{name}' of state {label} must be callable.")
        for event, listeners in definition.listeners.items():
            for listener in listeners:
                if not callable(listener):
                    raise ValidationError(f"Listener for '{event}' on state {label} must be callable.")

    @staticmethod
    def validate_event(event: Union[Event, str]) -> None:
        """
        Check that event name is a non-empty string.
        """
        name = event.name if isinstance(event, Event) else event
        if not isinstance(name, str) or not name:
            raise ValidationError("Event must have a name.")
