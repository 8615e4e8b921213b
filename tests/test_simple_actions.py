"""
Tests for generated simple action functions.
"""

import pytest
from immutables import Map

from pyreducthor import ActionRejected, ActionResult, Reducthor

from .conftest import run


def make_api(devtools, **options):
    def set_filter(state, value, extra=None):
        return state.set("filter", value).set("extra", extra)

    def explode(state, value):
        raise KeyError(value)

    return Reducthor({
        "actions": [
            {"name": "SET_FILTER", "action": set_filter},
            {"name": "EXPLODE", "action": explode},
            {"name": "NOOP"},
        ],
        "middleware": [devtools],
        **options,
    })


def test_resolves_with_call_arguments(devtools):
    api = make_api(devtools)

    async def scenario():
        return await api.actions.setFilter("open", 3)

    result = run(scenario())

    assert result == ActionResult(args=("open", 3))
    assert result.response is None
    assert api.get_state()["filter"] == "open"
    assert api.get_state()["extra"] == 3
    assert devtools.action_types == ["SET_FILTER"]


def test_state_is_updated_before_awaiting(devtools):
    api = make_api(devtools)

    async def scenario():
        future = api.actions.setFilter("closed")
        assert api.get_state()["filter"] == "closed"
        await future

    run(scenario())


def test_callback_error_rejects_and_keeps_state(devtools):
    api = make_api(devtools, initial_state={"filter": "all"})
    before = api.get_state()

    async def scenario():
        await api.actions.explode("missing")

    with pytest.raises(ActionRejected) as info:
        run(scenario())

    assert isinstance(info.value.error, KeyError)
    assert info.value.call_args == ("missing",)
    assert api.get_state() is before
    assert devtools.action_types == []


def test_call_outside_event_loop_leaves_state_untouched(devtools):
    api = make_api(devtools, initial_state={"filter": "all"})
    before = api.get_state()

    with pytest.raises(RuntimeError):
        api.actions.setFilter("open")

    assert api.get_state() is before
    assert devtools.action_types == []


def test_action_without_callback_is_identity(devtools):
    api = make_api(devtools, initial_state={"filter": "all"})
    before = api.get_state()

    async def scenario():
        return await api.actions.noop(1, 2)

    assert run(scenario()).args == (1, 2)
    assert api.get_state() is before
    assert devtools.action_types == ["NOOP"]


def test_initial_state_is_made_immutable(devtools):
    api = make_api(devtools, initial_state={"tags": ["a", "b"], "user": {"name": "ana"}})
    state = api.get_state()

    assert isinstance(state, Map)
    assert state["tags"] == ("a", "b")
    assert state["user"] == Map({"name": "ana"})


def test_generated_function_names(devtools):
    api = make_api(devtools)

    assert sorted(api.actions) == ["explode", "noop", "setFilter"]
    assert api.actions.setFilter.__name__ == "setFilter"
    assert api.actions["noop"] is api.actions.noop
