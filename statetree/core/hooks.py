# statetree/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from statetree.core.base import StateNode


@runtime_checkable
class HookProtocol(Protocol):
    """
    Lifecycle observer attached to a manager. Hooks see every state the manager
    enters or exits and every error raised while transitioning or dispatching.
    """

    def on_enter(self, state: "StateNode") -> None:
        ...

    def on_exit(self, state: "StateNode") -> None:
        ...

    def on_error(self, error: Exception) -> None:
        ...


class Hook:
    """
    No-op base hook. Subclass and override the methods you need.
    """

    def on_enter(self, state: "StateNode") -> None:
        pass

    def on_exit(self, state: "StateNode") -> None:
        pass

    def on_error(self, error: Exception) -> None:
        pass


class HookManager:
    """
    Manages the registration and execution of hooks that listen to state manager
    lifecycle events (on_enter, on_exit, on_error). Users can attach logging,
    monitoring, or custom side effects without altering core logic.
    """

    def __init__(self, hooks: Optional[List[HookProtocol]] = None) -> None:
        """
        Initialize with an optional list of hook objects.
        """
        self._hooks: List[HookProtocol] = list(hooks or [])
        self._invoker = _HookInvoker(self._hooks)

    @property
    def hooks(self) -> List[HookProtocol]:
        return list(self._hooks)

    def register_hook(self, hook: HookProtocol) -> None:
        """
        Add a new hook to the manager's list of hooks.

        :param hook: An object implementing HookProtocol methods.
        """
        self._hooks.append(hook)

    def unregister_hook(self, hook: HookProtocol) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def execute_on_enter(self, state: "StateNode") -> None:
        """
        Run all hooks' on_enter logic when entering a state.
        """
        self._invoker.invoke_on_enter(state)

    def execute_on_exit(self, state: "StateNode") -> None:
        """
        Run all hooks' on_exit logic when exiting a state.
        """
        self._invoker.invoke_on_exit(state)

    def execute_on_error(self, error: Exception) -> None:
        """
        Run all hooks' on_error logic when an exception occurs.
        """
        self._invoker.invoke_on_error(error)


class _HookInvoker:
    """
    Internal helper that iterates through a list of hooks and invokes their
    lifecycle methods in a controlled manner. Hooks lacking a method are skipped.
    """

    def __init__(self, hooks: List[HookProtocol]) -> None:
        """
        Store hooks for invocation. The list is shared with the owning manager.
        """
        self._hooks = hooks

    def invoke_on_enter(self, state: "StateNode") -> None:
        for hook in list(self._hooks):
            if hasattr(hook, "on_enter"):
                hook.on_enter(state)

    def invoke_on_exit(self, state: "StateNode") -> None:
        for hook in list(self._hooks):
            if hasattr(hook, "on_exit"):
                hook.on_exit(state)

    def invoke_on_error(self, error: Exception) -> None:
        for hook in list(self._hooks):
            if hasattr(hook, "on_error"):
                hook.on_error(error)
