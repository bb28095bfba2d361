"""Storefront editor routes — documents, draft/publish, themes, seeding."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.auth import Tenant, require_store_access
from backend.models.storefront import (
    DocumentResponse,
    DocumentSummary,
    SaveDraftRequest,
    SeedResponse,
    ThemeRequest,
    ThemeResponse,
)
from backend.services.storefront import get_store
from engine.composer.store import DraftConflict, InvalidDocument, NoDraftToPublish, StorefrontStore
from engine.composer.types import DocumentKind, DocumentStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores/{store_id}/storefront", tags=["storefront"])


def _invalid(e: InvalidDocument) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        detail={"message": "Document failed validation.", "errors": e.errors},
    )


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# ── documents ───────────────────────────────────────────────────────────────


@router.get("/documents", status_code=200)
async def list_documents(
    store_id: str,
    kind: DocumentKind | None = None,
    doc_status: DocumentStatus | None = Query(default=None, alias="status"),
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> list[DocumentSummary]:
    """List the store's documents, optionally filtered by kind and status."""
    docs = await store.list_documents(store_id, kind, doc_status)
    return [DocumentSummary.from_document(d) for d in docs]


@router.get("/documents/{kind}/{key}", status_code=200)
async def get_document(
    store_id: str,
    kind: DocumentKind,
    key: str,
    doc_status: DocumentStatus = Query(default=DocumentStatus.DRAFT, alias="status"),
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> DocumentResponse:
    """Get the DRAFT (default) or PUBLISHED version of a document."""
    doc = await store.get_document(store_id, kind, key, doc_status)
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found.")
    return DocumentResponse.from_document(doc)


@router.put("/documents/{kind}/{key}", status_code=200)
async def save_draft(
    store_id: str,
    kind: DocumentKind,
    key: str,
    req: SaveDraftRequest,
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> DocumentResponse:
    """
    Validate and save the DRAFT.

    Send expected_version (the version last read) to be told with a 409
    when someone else saved in between. Omit it to overwrite.
    """
    try:
        doc = await store.save_draft(store_id, kind, key, req.tree.to_node(), req.meta, req.expected_version)
    except InvalidDocument as e:
        raise _invalid(e) from e
    except DraftConflict as e:
        raise _conflict(e) from e
    return DocumentResponse.from_document(doc)


@router.post("/documents/{kind}/{key}/publish", status_code=200)
async def publish_document(
    store_id: str,
    kind: DocumentKind,
    key: str,
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> DocumentResponse:
    """Copy the DRAFT over PUBLISHED."""
    try:
        doc = await store.publish(store_id, kind, key)
    except NoDraftToPublish as e:
        raise _conflict(e) from e
    logger.info("user %s published %s:%s for store %s", tenant.user_id, kind.value, key, store_id)
    return DocumentResponse.from_document(doc)


@router.delete("/documents/{kind}/{key}", status_code=200)
async def delete_document(
    store_id: str,
    kind: DocumentKind,
    key: str,
    doc_status: DocumentStatus = Query(default=DocumentStatus.DRAFT, alias="status"),
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> dict:
    """Delete one version of a document."""
    deleted = await store.delete_document(store_id, kind, key, doc_status)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found.")
    return {"message": "Document deleted."}


# ── theme ───────────────────────────────────────────────────────────────────


@router.get("/theme", status_code=200)
async def get_theme(
    store_id: str,
    doc_status: DocumentStatus = Query(default=DocumentStatus.DRAFT, alias="status"),
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> ThemeResponse:
    if doc_status == DocumentStatus.PUBLISHED:
        theme = await store.get_published_theme(store_id)
    else:
        theme = await store.get_theme_draft(store_id)
    if not theme:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Theme not found.")
    return ThemeResponse.from_theme(theme)


@router.put("/theme", status_code=200)
async def save_theme(
    store_id: str,
    req: ThemeRequest,
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> ThemeResponse:
    try:
        theme = await store.save_theme_draft(store_id, req.vars)
    except InvalidDocument as e:
        raise _invalid(e) from e
    return ThemeResponse.from_theme(theme)


@router.post("/theme/publish", status_code=200)
async def publish_theme(
    store_id: str,
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> ThemeResponse:
    try:
        theme = await store.publish_theme(store_id)
    except NoDraftToPublish as e:
        raise _conflict(e) from e
    return ThemeResponse.from_theme(theme)


# ── seeding ─────────────────────────────────────────────────────────────────


@router.post("/seed", status_code=200)
async def seed_defaults(
    store_id: str,
    tenant: Tenant = Depends(require_store_access),
    store: StorefrontStore = Depends(get_store),
) -> SeedResponse:
    """Give a new store the default layout, pages, prefabs and theme. No-op if it has any documents."""
    return SeedResponse(seeded=await store.seed_defaults(store_id))
