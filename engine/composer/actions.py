"""
Storefront Composer — Actions

Registry of user-triggered actions and the dispatcher that invokes them.

A node names an action per slot with an ActionRef. dispatch() looks the id
up, lays any payload bindings over the literal payload, validates it against
the action's pydantic schema, and awaits the handler exactly once. Handler
failures propagate to the caller; nothing here retries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from engine.composer.bindings import resolve_payload_bindings
from engine.composer.types import ActionDefinition, ActionHandler, ActionRef

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class UnknownActionId(Exception):
    """No action is registered under the requested id."""

    def __init__(self, action_id: str) -> None:
        super().__init__(f"Unknown action: {action_id}")
        self.action_id = action_id


class InvalidActionPayload(Exception):
    """The resolved payload does not satisfy the action's schema."""

    def __init__(self, action_id: str, errors: list[str]) -> None:
        super().__init__(f"Invalid payload for {action_id}: {'; '.join(errors)}")
        self.action_id = action_id
        self.errors = errors


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ActionRegistry:
    """In-memory catalogue of action definitions, keyed by id."""

    def __init__(self) -> None:
        self._actions: dict[str, ActionDefinition] = {}

    def register(self, definition: ActionDefinition) -> None:
        self._actions[definition.id] = definition

    def get(self, action_id: str) -> ActionDefinition | None:
        return self._actions.get(action_id)

    def list(self) -> list[ActionDefinition]:
        return list(self._actions.values())

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._actions

    def __len__(self) -> int:
        return len(self._actions)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def validate_payload(definition: ActionDefinition, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and normalise a payload. Raises InvalidActionPayload."""
    try:
        model = definition.payload_schema.model_validate(dict(payload))
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}" for err in e.errors()]
        raise InvalidActionPayload(definition.id, errors) from e
    return model.model_dump()


async def dispatch(registry: ActionRegistry, ref: ActionRef, context: Mapping[str, Any]) -> Any:
    """
    Invoke the action a node refers to.

    Raises UnknownActionId or InvalidActionPayload before the handler runs.
    Whatever the handler raises is re-raised unchanged.
    """
    definition = registry.get(ref.action_id)
    if definition is None:
        raise UnknownActionId(ref.action_id)

    payload = resolve_payload_bindings(ref.payload, ref.payload_bindings, context)
    payload = validate_payload(definition, payload)

    logger.info("dispatch: %s", definition.id)
    try:
        return await definition.handler(payload, dict(context))
    except Exception:
        logger.warning("dispatch: handler for %s failed", definition.id, exc_info=True)
        raise


# ---------------------------------------------------------------------------
# Core actions
# ---------------------------------------------------------------------------


class AddToCartPayload(BaseModel):
    model_config = {"extra": "forbid"}

    variant_id: str | None = None
    quantity: int = Field(default=1, ge=1)
    open_cart: bool = True


class BuyNowPayload(BaseModel):
    model_config = {"extra": "forbid"}

    variant_id: str | None = None
    quantity: int = Field(default=1, ge=1)


class SelectVariantPayload(BaseModel):
    model_config = {"extra": "forbid"}

    variant_id: str


class SetDeliveryModePayload(BaseModel):
    model_config = {"extra": "forbid"}

    mode: Literal["DELIVERY", "PICKUP"]


class ApplyDiscountPayload(BaseModel):
    model_config = {"extra": "forbid"}

    code: str | None = None


class OpenCartSidebarPayload(BaseModel):
    model_config = {"extra": "forbid"}

    open: bool = True


class NavigatePayload(BaseModel):
    model_config = {"extra": "forbid"}

    to: str
    params: dict[str, str] | None = None
    replace: bool = False


class UpdateUIStatePayload(BaseModel):
    model_config = {"extra": "forbid"}

    key: str
    value: Any = None


class SubmitFormPayload(BaseModel):
    model_config = {"extra": "forbid"}

    form_type: Literal["checkout", "login", "signup", "profile", "contact"]
    data: dict[str, Any] | None = None


CORE_ACTIONS: list[tuple[str, str, str, type[BaseModel]]] = [
    ("ADD_TO_CART", "Add to cart", "Add a product variant to the shopping cart", AddToCartPayload),
    ("BUY_NOW", "Buy now", "Add item and go directly to checkout", BuyNowPayload),
    ("SELECT_VARIANT", "Select variant", "Select a product variant", SelectVariantPayload),
    ("SET_DELIVERY_MODE", "Set delivery mode", "Toggle between delivery and pickup", SetDeliveryModePayload),
    ("APPLY_DISCOUNT", "Apply discount", "Apply a discount code to the cart", ApplyDiscountPayload),
    ("OPEN_CART_SIDEBAR", "Open cart sidebar", "Toggle the cart sidebar visibility", OpenCartSidebarPayload),
    ("NAVIGATE", "Navigate", "Navigate to a different page", NavigatePayload),
    ("UPDATE_UI_STATE", "Update UI state", "Update client-side UI state", UpdateUIStatePayload),
    ("SUBMIT_FORM", "Submit form", "Submit a checkout, login, signup, profile or contact form", SubmitFormPayload),
]


def _logging_handler(action_id: str) -> ActionHandler:
    async def handler(payload: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        logger.info("action %s: payload=%s", action_id, payload)
        return {"action_id": action_id, "payload": payload}

    return handler


def register_core_actions(
    registry: ActionRegistry,
    handlers: Mapping[str, ActionHandler] | None = None,
) -> None:
    """
    Populate the registry with the built-in actions, once.

    handlers supplies real implementations by action id (cart, checkout,
    navigation live outside the composer); any id left out gets a handler
    that only logs.
    """
    if len(registry) > 0:
        return
    handlers = handlers or {}
    for action_id, label, description, schema in CORE_ACTIONS:
        registry.register(
            ActionDefinition(
                id=action_id,
                label=label,
                description=description,
                payload_schema=schema,
                handler=handlers.get(action_id) or _logging_handler(action_id),
            )
        )
