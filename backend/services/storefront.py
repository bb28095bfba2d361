"""
Storefront service: request-scoped access to the composer and the
render pipeline used by the public runtime routes.

The registries and the StorefrontStore live on app.state; they are built
once at startup (see backend.main) and handed to routes through the
dependencies below.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request

from engine.composer.actions import ActionRegistry
from engine.composer.defaults import default_theme
from engine.composer.registry import ComponentRegistry
from engine.composer.runtime import fill_slot, inline_prefabs, prefab_keys, resolve_tree
from engine.composer.store import StorefrontStore
from engine.composer.types import DocumentKind, Node, ResolvedNode

logger = logging.getLogger(__name__)

GLOBAL_LAYOUT_KEY = "GLOBAL_LAYOUT"
# Prefabs may embed other prefabs; resolve at most this many levels.
MAX_PREFAB_DEPTH = 4


def get_store(request: Request) -> StorefrontStore:
    """FastAPI dependency: the app's StorefrontStore."""
    return request.app.state.storefront


def get_components(request: Request) -> ComponentRegistry:
    return request.app.state.components


def get_actions(request: Request) -> ActionRegistry:
    return request.app.state.actions


async def compose_document(
    store: StorefrontStore,
    store_id: str,
    kind: DocumentKind,
    key: str,
    with_layout: bool = True,
) -> Node | None:
    """
    Published tree for a document, ready to resolve.

    Pages and templates are placed in the store's global layout when
    with_layout is set. PrefabInstance nodes are replaced by the published
    (or default) prefab they name. Returns None if the document has neither
    a published version nor a built-in default.
    """
    tree = await store.get_published_or_default(store_id, kind, key)
    if tree is None:
        return None

    if with_layout and kind in (DocumentKind.PAGE, DocumentKind.TEMPLATE):
        layout = await store.get_published_or_default(store_id, DocumentKind.LAYOUT, GLOBAL_LAYOUT_KEY)
        if layout is not None:
            tree = fill_slot(layout, tree)

    prefabs: dict[str, Node] = {}
    looked_up: set[str] = set()
    pending = prefab_keys(tree)
    for _ in range(MAX_PREFAB_DEPTH):
        if not pending:
            break
        for prefab_key in pending:
            prefab = await store.get_published_or_default(store_id, DocumentKind.PREFAB, prefab_key)
            if prefab is not None:
                prefabs[prefab_key] = prefab
        looked_up |= pending
        pending = {k for p in prefabs.values() for k in prefab_keys(p)} - looked_up

    return inline_prefabs(tree, prefabs)


async def render_document(
    store: StorefrontStore,
    store_id: str,
    kind: DocumentKind,
    key: str,
    context: dict[str, Any],
    breakpoint: str = "base",
    with_layout: bool = True,
) -> ResolvedNode | None:
    """Compose and resolve a published document for one request."""
    tree = await compose_document(store, store_id, kind, key, with_layout)
    if tree is None:
        return None
    logger.debug("render: store=%s %s:%s breakpoint=%s", store_id, kind.value, key, breakpoint)
    return resolve_tree(tree, context, breakpoint)


async def published_theme_vars(store: StorefrontStore, store_id: str) -> dict[str, str]:
    """Published theme variables, or the built-in defaults."""
    theme = await store.get_published_theme(store_id)
    return theme.vars if theme else default_theme()
