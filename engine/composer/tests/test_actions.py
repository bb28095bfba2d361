"""
Composer -- Action Dispatch Tests

Covers:
  - core action catalogue
  - dispatch awaits the handler exactly once with the validated payload
  - payload bindings resolved against the runtime context
  - UnknownActionId / InvalidActionPayload raised before the handler runs
  - handler exceptions propagate unchanged
  - custom handlers replace the logging default
"""

import logging

import pytest

from engine.composer.actions import (
    CORE_ACTIONS,
    ActionRegistry,
    InvalidActionPayload,
    UnknownActionId,
    dispatch,
    register_core_actions,
    validate_payload,
)
from engine.composer.types import ActionRef

CTX = {"product": {"variants": [{"id": "v1"}, {"id": "v2"}]}, "selected_variant": {"id": "v2"}}


class Recorder:
    """Handler double that remembers every call."""

    def __init__(self, result="ok", error=None):
        self.calls = []
        self.result = result
        self.error = error

    async def __call__(self, payload, context):
        self.calls.append((payload, context))
        if self.error:
            raise self.error
        return self.result


# ============================================================================
# Catalogue
# ============================================================================


class TestCatalogue:
    def test_core_ids(self, actions):
        ids = {d.id for d in actions.list()}
        assert ids == {a[0] for a in CORE_ACTIONS}
        assert "ADD_TO_CART" in actions
        assert "NAVIGATE" in actions

    def test_register_once(self, actions):
        before = len(actions)
        register_core_actions(actions, {"ADD_TO_CART": Recorder()})
        assert len(actions) == before
        assert not isinstance(actions.get("ADD_TO_CART").handler, Recorder)

    def test_definition_serializes(self, actions):
        d = actions.get("SET_DELIVERY_MODE").to_dict()
        assert d["id"] == "SET_DELIVERY_MODE"
        assert "mode" in d["payload_schema"]["properties"]

    def test_unknown_get(self):
        assert ActionRegistry().get("NOPE") is None


# ============================================================================
# Dispatch
# ============================================================================


class TestDispatch:
    @pytest.mark.asyncio
    async def test_default_handler_echoes(self, actions):
        result = await dispatch(actions, ActionRef("OPEN_CART_SIDEBAR"), {})
        assert result == {"action_id": "OPEN_CART_SIDEBAR", "payload": {"open": True}}

    @pytest.mark.asyncio
    async def test_handler_called_once(self):
        recorder = Recorder(result={"cart": 1})
        reg = ActionRegistry()
        register_core_actions(reg, {"ADD_TO_CART": recorder})

        result = await dispatch(reg, ActionRef("ADD_TO_CART", payload={"variant_id": "v1", "quantity": 2}), CTX)

        assert result == {"cart": 1}
        assert len(recorder.calls) == 1
        payload, context = recorder.calls[0]
        assert payload == {"variant_id": "v1", "quantity": 2, "open_cart": True}
        assert context == CTX

    @pytest.mark.asyncio
    async def test_payload_bindings(self):
        recorder = Recorder()
        reg = ActionRegistry()
        register_core_actions(reg, {"ADD_TO_CART": recorder})
        ref = ActionRef(
            "ADD_TO_CART",
            payload={"quantity": 1},
            payload_bindings={"variant_id": "selected_variant.id"},
        )

        await dispatch(reg, ref, CTX)

        assert recorder.calls[0][0]["variant_id"] == "v2"

    @pytest.mark.asyncio
    async def test_unknown_action(self, actions):
        with pytest.raises(UnknownActionId) as exc:
            await dispatch(actions, ActionRef("TELEPORT"), {})
        assert exc.value.action_id == "TELEPORT"

    @pytest.mark.asyncio
    async def test_invalid_payload_skips_handler(self):
        recorder = Recorder()
        reg = ActionRegistry()
        register_core_actions(reg, {"SELECT_VARIANT": recorder})

        with pytest.raises(InvalidActionPayload) as exc:
            await dispatch(reg, ActionRef("SELECT_VARIANT", payload={}), {})

        assert exc.value.action_id == "SELECT_VARIANT"
        assert any(e.startswith("variant_id:") for e in exc.value.errors)
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_extra_payload_fields_rejected(self, actions):
        with pytest.raises(InvalidActionPayload):
            await dispatch(actions, ActionRef("NAVIGATE", payload={"to": "/", "hack": True}), {})

    @pytest.mark.asyncio
    async def test_handler_error_propagates(self, caplog):
        boom = RuntimeError("payment gateway down")
        reg = ActionRegistry()
        register_core_actions(reg, {"BUY_NOW": Recorder(error=boom)})

        with caplog.at_level(logging.WARNING, logger="engine.composer.actions"):
            with pytest.raises(RuntimeError) as exc:
                await dispatch(reg, ActionRef("BUY_NOW"), {})

        assert exc.value is boom
        assert "BUY_NOW failed" in caplog.text


class TestValidatePayload:
    def test_defaults_applied(self, actions):
        assert validate_payload(actions.get("NAVIGATE"), {"to": "/products"}) == {
            "to": "/products",
            "params": None,
            "replace": False,
        }

    def test_literal_enforced(self, actions):
        with pytest.raises(InvalidActionPayload):
            validate_payload(actions.get("SET_DELIVERY_MODE"), {"mode": "DRONE"})

    def test_quantity_minimum(self, actions):
        with pytest.raises(InvalidActionPayload) as exc:
            validate_payload(actions.get("ADD_TO_CART"), {"quantity": 0})
        assert exc.value.errors[0].startswith("quantity:")
