"""Component and action catalogue routes, for the editor palette."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.auth import Tenant, get_current_tenant
from backend.services.storefront import get_actions, get_components
from engine.composer.actions import ActionRegistry
from engine.composer.registry import ComponentRegistry, UnknownComponentType
from engine.composer.tree import create_node

router = APIRouter(prefix="/api/storefront", tags=["catalog"])


@router.get("/components", status_code=200)
async def list_components(
    tenant: Tenant = Depends(get_current_tenant),
    components: ComponentRegistry = Depends(get_components),
) -> list[dict]:
    """Every registered component type with its props schema and action slots."""
    return [d.to_dict() for d in components.list()]


@router.get("/actions", status_code=200)
async def list_actions(
    tenant: Tenant = Depends(get_current_tenant),
    actions: ActionRegistry = Depends(get_actions),
) -> list[dict]:
    """Every registered action with its payload schema."""
    return [d.to_dict() for d in actions.list()]


@router.post("/components/{type_name}/nodes", status_code=201)
async def create_component_node(
    type_name: str,
    tenant: Tenant = Depends(get_current_tenant),
    components: ComponentRegistry = Depends(get_components),
) -> dict:
    """A fresh node of the given type, filled with its defaults, for the editor to insert."""
    try:
        node = create_node(components, type_name)
    except UnknownComponentType as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return node.to_dict()
