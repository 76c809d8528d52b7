# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import List, Tuple
from unittest.mock import MagicMock

import pytest

from statetree.core.states import State


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")


class CallLog:
    """Records enter/exit/setup callbacks in the order they fire."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []

    def recorder(self, kind: str, name: str):
        def _record(manager, *args):
            self.calls.append((kind, name))

        return _record

    def tracked(self, name: str, states=None, **kwargs) -> State:
        """A State whose enter, exit and setup callbacks are logged under `name`."""
        listeners = dict(kwargs.pop("listeners", {}))
        listeners.setdefault("setup", self.recorder("setup", name))
        return State(
            states,
            entry_actions=[self.recorder("enter", name)] + kwargs.pop("entry_actions", []),
            exit_actions=[self.recorder("exit", name)] + kwargs.pop("exit_actions", []),
            listeners=listeners,
            **kwargs,
        )

    def names(self, kind: str) -> List[str]:
        return [name for k, name in self.calls if k == kind]

    def count(self, kind: str, name: str) -> int:
        return self.calls.count((kind, name))

    def reset(self) -> None:
        self.calls = []


@pytest.fixture
def call_log():
    """A fresh CallLog for each test."""
    return CallLog()


@pytest.fixture
def robot_states(call_log):
    """
    poweredDown
    ├─ charging
    └─ charged
    poweredUp
    ├─ mobile
    └─ stationary
    """
    return {
        "poweredDown": call_log.tracked(
            "poweredDown",
            {"charging": call_log.tracked("charging"), "charged": call_log.tracked("charged")},
        ),
        "poweredUp": call_log.tracked(
            "poweredUp",
            {"mobile": call_log.tracked("mobile"), "stationary": call_log.tracked("stationary")},
        ),
    }


@pytest.fixture
def robot_manager(robot_states):
    """A manager that starts in poweredDown."""
    from statetree.core.state_machine import StateManager

    return StateManager(robot_states, initial_state="poweredDown")


@pytest.fixture
def dummy_hooks():
    """A list of hook mocks for testing HookManager."""
    hook = MagicMock()
    # hook should have on_enter(state), on_exit(state), on_error(error)
    hook.on_enter = MagicMock()
    hook.on_exit = MagicMock()
    hook.on_error = MagicMock()
    return [hook]


@pytest.fixture
def dummy_state():
    """A built leaf node with no callbacks."""
    return State().build("dummy")


@pytest.fixture
def error_classes():
    """Provides a tuple of error classes for quick reference."""
    from statetree.core.errors import StateNotFoundError, StateTreeError, TransitionError, ValidationError

    return (StateTreeError, StateNotFoundError, TransitionError, ValidationError)
