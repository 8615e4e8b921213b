"""
Tests for lifecycle handlers and reducer synthesis.
"""

import pytest
from immutables import Map

from pyreducthor import (
    Action, ActionDescriptor, LifecycleStatus, build_request_handlers, build_simple_handler,
    combine_reducers, create_action_table, create_reducer, derive_action_names
)


def _request(**callbacks) -> ActionDescriptor:
    return ActionDescriptor(name="FETCH_ITEM", kind="request", path="/items/:id", **callbacks)


class TestRequestHandlers:
    """Each lifecycle transition updates the status key before its callback runs."""

    def test_status_updated_without_callbacks(self):
        names = derive_action_names("FETCH_ITEM")
        handlers = build_request_handlers(_request(), names)
        state = Map()

        state = handlers[names.requesting_type](state, 10)
        assert state["FETCH_ITEM_STATUS"] == "REQUESTING"

        state = handlers[names.ok_type](state, {"id": 10}, 10)
        assert state["FETCH_ITEM_STATUS"] == LifecycleStatus.OK

        state = handlers[names.error_type](state, RuntimeError("boom"), 10)
        assert state["FETCH_ITEM_STATUS"] == "ERROR"

    def test_progress_and_finish_pass_state_through(self):
        names = derive_action_names("FETCH_ITEM")
        handlers = build_request_handlers(_request(), names)
        state = Map({"FETCH_ITEM_STATUS": "OK"})

        assert handlers[names.upload_progress_type](state, {"loaded": 1, "total": 2}, 10) is state
        assert handlers[names.download_progress_type](state, {"loaded": 1, "total": 2}, 10) is state
        assert handlers[names.finished_type](state, 10) is state

    def test_callbacks_receive_status_state_and_arguments(self):
        seen = {}

        def on_action(state, item_id):
            seen["requesting"] = state["FETCH_ITEM_STATUS"]
            return state.set("loading", item_id)

        def on_request_ok(state, response, item_id):
            seen["ok"] = state["FETCH_ITEM_STATUS"]
            return state.set("item", response).set("loading", None)

        def on_upload_progress(state, event, item_id):
            return state.set("uploaded", event["loaded"])

        names = derive_action_names("FETCH_ITEM")
        handlers = build_request_handlers(
            _request(on_action=on_action, on_request_ok=on_request_ok, on_upload_progress=on_upload_progress),
            names,
        )

        state = handlers[names.requesting_type](Map(), 10)
        state = handlers[names.upload_progress_type](state, {"loaded": 5, "total": 10}, 10)
        state = handlers[names.ok_type](state, {"id": 10}, 10)

        assert seen == {"requesting": "REQUESTING", "ok": "OK"}
        assert state["item"] == {"id": 10}
        assert state["uploaded"] == 5
        assert state["loading"] is None

    def test_error_callback_receives_error_first(self):
        error = RuntimeError("boom")
        names = derive_action_names("FETCH_ITEM")
        handlers = build_request_handlers(
            _request(on_request_error=lambda state, err, item_id: state.set("error", (err, item_id))),
            names,
        )

        state = handlers[names.error_type](Map(), error, 10)

        assert state["error"] == (error, 10)
        assert state["FETCH_ITEM_STATUS"] == "ERROR"


class TestSimpleHandler:

    def test_identity_without_action(self):
        handler = build_simple_handler(ActionDescriptor(name="NOOP"))["NOOP"]
        state = Map({"a": 1})
        assert handler(state, 1, 2) is state

    def test_action_receives_all_arguments(self):
        descriptor = ActionDescriptor(name="ADD", action=lambda state, a, b: state.set("sum", a + b))
        handler = build_simple_handler(descriptor)["ADD"]
        assert handler(Map(), 2, 3)["sum"] == 5


class TestCreateReducer:

    def test_routes_by_type_and_ignores_unknown(self):
        table = create_action_table(
            {"SET": lambda state, key, value: state.set(key, value)},
        )
        reducer = create_reducer(table)

        state = reducer(None, Action("SET", ("a", 1)))
        assert state == Map({"a": 1})
        assert reducer(state, Action("UNKNOWN", ())) is state
        assert reducer.initial_state == Map()

    def test_later_handlers_overwrite_earlier_ones(self):
        table = create_action_table(
            {"SET": lambda state: state.set("who", "first")},
            {"SET": lambda state: state.set("who", "second")},
        )
        assert create_reducer(table)(Map(), Action("SET"))["who"] == "second"

    def test_action_table_is_immutable(self):
        table = create_action_table({"SET": lambda state: state})
        assert isinstance(table, Map)
        with pytest.raises(TypeError):
            table["SET"] = None


class TestCombineReducers:

    def test_broadcast_action_reaches_every_slice(self):
        users = create_reducer(create_action_table({"SET_NAME": lambda state, name: state.set("name", name)}))
        admins = create_reducer(create_action_table({"SET_NAME": lambda state, name: state.set("name", name.upper())}))
        reducer = combine_reducers({"users": users, "admins": admins})

        state = reducer(None, Action("SET_NAME", ("ana",)))

        assert state["users"] == Map({"name": "ana"})
        assert state["admins"] == Map({"name": "ANA"})

    def test_namespaced_action_reaches_only_its_reducer(self):
        users = create_reducer(create_action_table({"SET_NAME": lambda state, name: state.set("name", name)}))
        admins = create_reducer(create_action_table({"SET_NAME": lambda state, name: state.set("name", name)}))
        reducer = combine_reducers({"users": users, "admins": admins})

        state = reducer(None, Action("SET_NAME", ("ana",), namespace="users"))

        assert state["users"]["name"] == "ana"
        assert "name" not in state["admins"]

    def test_missing_slices_are_initialized(self):
        users = create_reducer(create_action_table({}))
        reducer = combine_reducers({"users": users})

        state = reducer(Map({"other": 1}), Action("[Root] Init Store"))

        assert state["users"] == Map()
        assert state["other"] == 1

    def test_unchanged_state_keeps_identity(self):
        reducer = combine_reducers({"users": create_reducer(create_action_table({}))})
        state = reducer(None, None)
        assert reducer(state, Action("UNKNOWN")) is state
