"""
Tests for the store, its middleware chain and selectors.
"""

import logging

import pytest
from immutables import Map

from pyreducthor import (
    Action, BaseMiddleware, LoggerMiddleware, create_action_table, create_reducer, create_store
)


def counter_reducer():
    def boom(state):
        raise ValueError("boom")

    return create_reducer(create_action_table({
        "INCREMENT": lambda state, by=1: state.set("count", state.get("count", 0) + by),
        "RENAME": lambda state, name: state.set("name", name),
        "BOOM": boom,
    }), Map({"count": 0}))


class RecordingMiddleware(BaseMiddleware):
    def __init__(self):
        self.calls = []

    def on_next(self, action, prev_state):
        self.calls.append(("next", action.type, prev_state["count"]))

    def on_complete(self, next_state, action):
        self.calls.append(("complete", action.type, next_state["count"]))

    def on_error(self, error, action):
        self.calls.append(("error", action.type, str(error)))


class TestDispatch:

    def test_initial_state_comes_from_reducer(self):
        store = create_store(counter_reducer())
        assert store.state == Map({"count": 0})

    def test_explicit_initial_state_wins(self):
        store = create_store(counter_reducer(), Map({"count": 5}))
        assert store.get_state()["count"] == 5

    def test_dispatch_runs_reducer_synchronously(self):
        store = create_store(counter_reducer())
        returned = store.dispatch(Action("INCREMENT", (2,)))

        assert returned == Action("INCREMENT", (2,))
        assert store.state["count"] == 2

    def test_thunk_receives_dispatch_and_get_state(self):
        store = create_store(counter_reducer())

        def thunk(dispatch, get_state):
            dispatch(Action("INCREMENT"))
            dispatch(Action("INCREMENT"))
            return get_state()["count"]

        assert store.dispatch(thunk) == 2

    def test_reducer_error_propagates_and_keeps_state(self):
        store = create_store(counter_reducer())
        before = store.state

        with pytest.raises(ValueError):
            store.dispatch(Action("BOOM"))

        assert store.state is before


class TestMiddleware:

    def test_hooks_wrap_each_dispatch(self):
        middleware = RecordingMiddleware()
        store = create_store(counter_reducer(), middleware=[middleware])

        store.dispatch(Action("INCREMENT", (3,)))

        assert middleware.calls == [("next", "INCREMENT", 0), ("complete", "INCREMENT", 3)]

    def test_error_hook_is_called_and_error_reraised(self):
        middleware = RecordingMiddleware()
        store = create_store(counter_reducer(), middleware=[middleware])

        with pytest.raises(ValueError):
            store.dispatch(Action("BOOM"))

        assert middleware.calls == [("next", "BOOM", 0), ("error", "BOOM", "boom")]

    def test_thunks_bypass_object_middleware(self):
        middleware = RecordingMiddleware()
        store = create_store(counter_reducer(), middleware=[middleware])

        store.dispatch(lambda dispatch, get_state: dispatch(Action("INCREMENT")))

        assert [call[0] for call in middleware.calls] == ["next", "complete"]

    def test_middleware_classes_are_instantiated(self):
        store = create_store(counter_reducer(), middleware=[RecordingMiddleware])
        store.dispatch(Action("INCREMENT"))
        assert store.state["count"] == 1

    def test_apply_middleware_rebuilds_chain(self):
        store = create_store(counter_reducer())
        middleware = RecordingMiddleware()

        store.apply_middleware(middleware)
        store.dispatch(Action("INCREMENT"))

        assert len(middleware.calls) == 2

    def test_unsupported_middleware_is_rejected(self):
        with pytest.raises(TypeError):
            create_store(counter_reducer(), middleware=[object()])

    def test_logger_middleware_logs_states(self, caplog):
        store = create_store(counter_reducer(), middleware=[LoggerMiddleware(level=logging.INFO)])

        with caplog.at_level(logging.INFO, logger="pyreducthor.middleware"):
            store.dispatch(Action("RENAME", ("ana",)))

        messages = [record.getMessage() for record in caplog.records]
        assert any("dispatching RENAME" in message for message in messages)
        assert any("state after RENAME" in message and "'ana'" in message for message in messages)


class TestObservables:

    def test_select_emits_only_changes(self):
        store = create_store(counter_reducer())
        emitted = []
        store.select(lambda state: state["count"]).subscribe(emitted.append)

        store.dispatch(Action("INCREMENT"))
        store.dispatch(Action("RENAME", ("ana",)))
        store.dispatch(Action("INCREMENT"))

        assert emitted == [(0, 1), (1, 2)]

    def test_select_without_selector_emits_state_pairs(self):
        store = create_store(counter_reducer())
        emitted = []
        store.select().subscribe(emitted.append)

        store.dispatch(Action("INCREMENT"))

        assert emitted == [(Map({"count": 0}), Map({"count": 1}))]

    def test_actions_stream_sees_reduced_actions(self):
        store = create_store(counter_reducer())
        seen = []
        store.actions.subscribe(lambda action: seen.append(action.type))

        store.dispatch(Action("INCREMENT"))
        store.dispatch(Action("UNKNOWN"))

        assert seen == ["INCREMENT", "UNKNOWN"]
