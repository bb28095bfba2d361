"""Storefront document, theme and runtime request/response models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from engine.composer.types import (
    ActionRef,
    DocumentKind,
    DocumentStatus,
    Node,
    StorefrontDocument,
    StorefrontTheme,
)

Breakpoint = Literal["base", "sm", "md", "lg", "xl"]


class ActionRefPayload(BaseModel):
    """A node's action reference as sent over the wire."""

    model_config = {"extra": "forbid"}

    action_id: str = Field(min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)
    payload_bindings: dict[str, str] = Field(default_factory=dict)

    def to_ref(self) -> ActionRef:
        return ActionRef.from_dict(self.model_dump())


class NodePayload(BaseModel):
    """One node of a document tree as sent over the wire. Recursive."""

    model_config = {"extra": "forbid"}

    id: str
    type: str
    props: dict[str, Any] = Field(default_factory=dict)
    styles: dict[str, Any] = Field(default_factory=lambda: {"base": {}})
    bindings: dict[str, str] = Field(default_factory=dict)
    actions: dict[str, ActionRefPayload] = Field(default_factory=dict)
    children: list[NodePayload] = Field(default_factory=list)

    def to_node(self) -> Node:
        return Node.from_dict(self.model_dump())


NodePayload.model_rebuild()


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class SaveDraftRequest(BaseModel):
    """What the editor sends to save a DRAFT."""

    model_config = {"extra": "forbid"}

    tree: NodePayload
    meta: dict[str, Any] = Field(default_factory=dict)
    expected_version: int | None = Field(default=None, ge=0)  # 0 = "must not exist yet"


class DocumentSummary(BaseModel):
    """A document row without its tree, for listings."""

    kind: DocumentKind
    key: str
    status: DocumentStatus
    version: int
    meta: dict[str, Any]
    updated_at: datetime

    @classmethod
    def from_document(cls, doc: StorefrontDocument) -> DocumentSummary:
        return cls(
            kind=doc.kind,
            key=doc.key,
            status=doc.status,
            version=doc.version,
            meta=doc.meta,
            updated_at=doc.updated_at,
        )


class DocumentResponse(BaseModel):
    """What the API returns for a single document."""

    store_id: str
    kind: DocumentKind
    key: str
    status: DocumentStatus
    tree: dict[str, Any]
    meta: dict[str, Any]
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, doc: StorefrontDocument) -> DocumentResponse:
        return cls(
            store_id=doc.store_id,
            kind=doc.kind,
            key=doc.key,
            status=doc.status,
            tree=doc.tree.to_dict(),
            meta=doc.meta,
            version=doc.version,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )


class SeedResponse(BaseModel):
    seeded: bool


# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------


class ThemeRequest(BaseModel):
    """What the editor sends to save the DRAFT theme."""

    model_config = {"extra": "forbid"}

    # Left loose so the store reports non-string values with its own messages.
    vars: dict[str, Any]


class ThemeResponse(BaseModel):
    store_id: str
    status: DocumentStatus
    vars: dict[str, str]
    version: int
    updated_at: datetime

    @classmethod
    def from_theme(cls, theme: StorefrontTheme) -> ThemeResponse:
        return cls(
            store_id=theme.store_id,
            status=theme.status,
            vars=theme.vars,
            version=theme.version,
            updated_at=theme.updated_at,
        )


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


class RenderRequest(BaseModel):
    """Resolve a published document for one storefront request."""

    model_config = {"extra": "forbid"}

    kind: DocumentKind = DocumentKind.PAGE
    key: str = Field(min_length=1)
    context: dict[str, Any] = Field(default_factory=dict)
    breakpoint: Breakpoint = "base"
    with_layout: bool = True


class RenderResponse(BaseModel):
    kind: DocumentKind
    key: str
    tree: dict[str, Any]
    theme: dict[str, str]


class DispatchRequest(BaseModel):
    """Invoke one action on behalf of a shopper."""

    model_config = {"extra": "forbid"}

    action: ActionRefPayload
    context: dict[str, Any] = Field(default_factory=dict)


class DispatchResponse(BaseModel):
    action_id: str
    result: Any = None
