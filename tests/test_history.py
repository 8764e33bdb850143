import threading

import pytest

from textsmith.storage.history import (
    BoundedHistory,
    HistoryStack,
    InMemoryHistoryStore,
    UndoAction,
    clear_actions,
    pop_action,
    push_action,
)


def action(index: int) -> UndoAction:
    return UndoAction(action_type="rewrite", timestamp=float(index), data={"n": index})


def test_push_prepends_and_truncates_to_depth():
    stack = HistoryStack(scope_key="example.com")
    for index in range(15):
        stack = push_action(stack, action(index))

    assert len(stack) == 10
    assert [entry.data["n"] for entry in stack.actions] == list(range(14, 4, -1))
    assert all(entry.data["n"] >= 5 for entry in stack.actions)


def test_pop_returns_most_recent_and_handles_empty():
    stack = push_action(push_action(HistoryStack("s"), action(1)), action(2))
    stack, popped = pop_action(stack)
    assert popped.data == {"n": 2}
    stack, popped = pop_action(stack)
    assert popped.data == {"n": 1}
    stack, popped = pop_action(stack)
    assert popped is None
    assert stack.actions == ()


def test_clear_keeps_scope_key():
    stack = push_action(HistoryStack("docs.example"), action(1))
    cleared = clear_actions(stack)
    assert cleared.scope_key == "docs.example"
    assert cleared.actions == ()
    # Transitions never mutate their input.
    assert len(stack) == 1


def test_bounded_history_scopes_are_independent():
    history = BoundedHistory(depth=3)
    for index in range(5):
        history.push("a.example", action(index))
    history.push("b.example", action(99))

    assert len(history.stack("a.example")) == 3
    assert history.pop("b.example").data == {"n": 99}
    assert history.pop("b.example") is None
    assert history.pop("a.example").data == {"n": 4}
    assert len(history.stack("a.example")) == 2


def test_bounded_history_persists_through_store():
    store = InMemoryHistoryStore()
    history = BoundedHistory(store=store)
    assert store.scopes() == ()

    history.push("site", action(1))
    assert store.load_history("site").actions[0].data == {"n": 1}

    history.clear("site")
    assert store.load_history("site") == HistoryStack("site")
    assert store.scopes() == ("site",)


def test_depth_must_be_positive():
    with pytest.raises(ValueError):
        BoundedHistory(depth=0)


def test_concurrent_pushes_respect_depth():
    history = BoundedHistory(depth=5)

    def writer(worker: int) -> None:
        for index in range(100):
            history.push("shared", action(worker * 1000 + index))

    threads = [threading.Thread(target=writer, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(history.stack("shared")) == 5
