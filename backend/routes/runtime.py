"""Public storefront runtime routes — render published documents, dispatch actions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.models.storefront import DispatchRequest, DispatchResponse, RenderRequest, RenderResponse
from backend.services.storefront import get_actions, get_store, published_theme_vars, render_document
from engine.composer.actions import ActionRegistry, InvalidActionPayload, UnknownActionId, dispatch
from engine.composer.store import StorefrontStore

router = APIRouter(prefix="/s/{store_id}", tags=["runtime"])


@router.post("/render", status_code=200)
async def render(
    store_id: str,
    req: RenderRequest,
    store: StorefrontStore = Depends(get_store),
) -> RenderResponse:
    """
    Resolve a published document against the request's runtime context.

    Falls back to the built-in default for known keys when the store has
    not published its own.
    """
    resolved = await render_document(store, store_id, req.kind, req.key, req.context, req.breakpoint, req.with_layout)
    if resolved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found.")
    return RenderResponse(
        kind=req.kind,
        key=req.key,
        tree=resolved.to_dict(),
        theme=await published_theme_vars(store, store_id),
    )


@router.post("/actions", status_code=200)
async def dispatch_action(
    store_id: str,
    req: DispatchRequest,
    actions: ActionRegistry = Depends(get_actions),
) -> DispatchResponse:
    """Dispatch one action. Handler errors are not caught here."""
    context = {**req.context, "store_id": store_id}
    ref = req.action.to_ref()
    try:
        result = await dispatch(actions, ref, context)
    except UnknownActionId as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InvalidActionPayload as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail={"message": "Invalid action payload.", "errors": e.errors},
        ) from e
    return DispatchResponse(action_id=ref.action_id, result=result)
