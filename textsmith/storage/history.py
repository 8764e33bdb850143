"""Per-scope undo history with a fixed depth.

``push_action``, ``pop_action`` and ``clear_actions`` are pure transitions
over ``HistoryStack`` values. ``BoundedHistory`` applies them against a
``HistoryStore`` under a lock; persisting the stacks is the store's job.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 10


@dataclass(slots=True, frozen=True)
class UndoAction:
    action_type: str
    timestamp: float = field(default_factory=time.time)
    data: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_type": self.action_type,
            "timestamp": self.timestamp,
            "data": self.data,
        }


@dataclass(slots=True, frozen=True)
class HistoryStack:
    scope_key: str
    actions: Tuple[UndoAction, ...] = ()

    def __len__(self) -> int:
        return len(self.actions)


def push_action(
    stack: HistoryStack, action: UndoAction, depth: int = DEFAULT_DEPTH
) -> HistoryStack:
    """Prepend ``action``; the oldest entries beyond ``depth`` are dropped."""
    return replace(stack, actions=((action,) + stack.actions)[:depth])


def pop_action(stack: HistoryStack) -> Tuple[HistoryStack, Optional[UndoAction]]:
    if not stack.actions:
        return stack, None
    return replace(stack, actions=stack.actions[1:]), stack.actions[0]


def clear_actions(stack: HistoryStack) -> HistoryStack:
    return replace(stack, actions=())


class HistoryStore(Protocol):
    def load_history(self, scope_key: str) -> HistoryStack: ...

    def save_history(self, scope_key: str, stack: HistoryStack) -> None: ...


class InMemoryHistoryStore:
    """Process-local store; stacks are created lazily per scope."""

    def __init__(self) -> None:
        self._stacks: Dict[str, HistoryStack] = {}

    def load_history(self, scope_key: str) -> HistoryStack:
        stack = self._stacks.get(scope_key)
        return stack if stack is not None else HistoryStack(scope_key=scope_key)

    def save_history(self, scope_key: str, stack: HistoryStack) -> None:
        self._stacks[scope_key] = stack

    def scopes(self) -> Tuple[str, ...]:
        return tuple(self._stacks)


class BoundedHistory:
    def __init__(
        self, depth: int = DEFAULT_DEPTH, store: Optional[HistoryStore] = None
    ) -> None:
        if depth < 1:
            raise ValueError("depth must be at least 1")
        self.depth = depth
        self.store: HistoryStore = store or InMemoryHistoryStore()
        self._lock = threading.Lock()

    def stack(self, scope_key: str) -> HistoryStack:
        with self._lock:
            return self.store.load_history(scope_key)

    def push(self, scope_key: str, action: UndoAction) -> HistoryStack:
        with self._lock:
            stack = push_action(self.store.load_history(scope_key), action, self.depth)
            self.store.save_history(scope_key, stack)
        logger.debug(f"Pushed {action.action_type} onto history for {scope_key}")
        return stack

    def pop(self, scope_key: str) -> Optional[UndoAction]:
        with self._lock:
            stack, action = pop_action(self.store.load_history(scope_key))
            if action is not None:
                self.store.save_history(scope_key, stack)
        return action

    def clear(self, scope_key: str) -> HistoryStack:
        with self._lock:
            stack = clear_actions(self.store.load_history(scope_key))
            self.store.save_history(scope_key, stack)
        return stack
