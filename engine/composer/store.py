"""
Storefront Composer — Versioning Store

Coordinates validation and persistence of storefront documents and themes.
Every (store, kind, key) identity has at most one DRAFT row and one
PUBLISHED row. Saves only ever touch the DRAFT. publish() copies the DRAFT
over the PUBLISHED row in one atomic step; the DRAFT is left as it was.

Themes follow the same draft/publish pair per store, but carry a flat map
of string variables instead of a tree.

Storage is pluggable: MemoryStorage here for tests, a Postgres adapter in
the backend.
"""

from __future__ import annotations

import copy
import logging
from datetime import UTC, datetime
from typing import Any

from engine.composer.defaults import default_document, default_documents, default_theme
from engine.composer.registry import ComponentRegistry
from engine.composer.types import DocumentKind, DocumentStatus, Node, StorefrontDocument, StorefrontTheme
from engine.composer.validation import validate_document, validate_theme_vars

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class InvalidDocument(Exception):
    """A tree or theme failed validation; nothing was written."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Invalid document: {', '.join(errors)}")
        self.errors = errors


class NoDraftToPublish(Exception):
    """publish was called for an identity with no DRAFT row."""


class DraftConflict(Exception):
    """The DRAFT changed since the version the caller last read."""

    def __init__(self, expected: int, actual: int | None) -> None:
        super().__init__(f"Draft version conflict: expected {expected}, found {actual}")
        self.expected = expected
        self.actual = actual


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class StorefrontStorage:
    """
    Abstract persistence interface.

    Each method must be atomic on its own: a save replaces the whole DRAFT
    row or nothing, and a publish is observed as a single write.
    """

    async def get_document(
        self, store_id: str, kind: DocumentKind, key: str, status: DocumentStatus
    ) -> StorefrontDocument | None:
        raise NotImplementedError

    async def list_documents(
        self, store_id: str, kind: DocumentKind | None = None, status: DocumentStatus | None = None
    ) -> list[StorefrontDocument]:
        raise NotImplementedError

    async def save_draft(
        self,
        store_id: str,
        kind: DocumentKind,
        key: str,
        tree: Node,
        meta: dict[str, Any],
        expected_version: int | None = None,
    ) -> StorefrontDocument:
        """Create or replace the DRAFT row. Raises DraftConflict on a stale expected_version."""
        raise NotImplementedError

    async def publish_document(self, store_id: str, kind: DocumentKind, key: str) -> StorefrontDocument:
        """Copy DRAFT over PUBLISHED. Raises NoDraftToPublish."""
        raise NotImplementedError

    async def delete_document(self, store_id: str, kind: DocumentKind, key: str, status: DocumentStatus) -> bool:
        raise NotImplementedError

    async def count_documents(self, store_id: str) -> int:
        raise NotImplementedError

    async def get_theme(self, store_id: str, status: DocumentStatus) -> StorefrontTheme | None:
        raise NotImplementedError

    async def save_theme_draft(self, store_id: str, variables: dict[str, str]) -> StorefrontTheme:
        raise NotImplementedError

    async def publish_theme(self, store_id: str) -> StorefrontTheme:
        """Copy the DRAFT theme over PUBLISHED. Raises NoDraftToPublish."""
        raise NotImplementedError

    async def delete_theme(self, store_id: str, status: DocumentStatus) -> bool:
        raise NotImplementedError

    async def seed(
        self,
        store_id: str,
        documents: list[tuple[DocumentKind, str, Node]],
        theme: dict[str, str],
    ) -> None:
        """Write DRAFT and PUBLISHED rows for every document and the theme, all or nothing."""
        raise NotImplementedError


class MemoryStorage(StorefrontStorage):
    """
    In-memory storage for tests and local tooling.

    No method awaits between reading and writing, so each one is atomic
    under a single event loop. Rows are deep-copied on the way in and out.
    """

    def __init__(self) -> None:
        self.documents: dict[tuple[str, DocumentKind, str, DocumentStatus], StorefrontDocument] = {}
        self.themes: dict[tuple[str, DocumentStatus], StorefrontTheme] = {}

    async def get_document(self, store_id, kind, key, status):
        doc = self.documents.get((store_id, kind, key, status))
        return copy.deepcopy(doc) if doc else None

    async def list_documents(self, store_id, kind=None, status=None):
        rows = [
            copy.deepcopy(doc)
            for (sid, k, _, s), doc in self.documents.items()
            if sid == store_id and (kind is None or k == kind) and (status is None or s == status)
        ]
        return sorted(rows, key=lambda d: (d.kind.value, d.key, d.status.value))

    async def save_draft(self, store_id, kind, key, tree, meta, expected_version=None):
        ident = (store_id, kind, key, DocumentStatus.DRAFT)
        existing = self.documents.get(ident)
        current_version = existing.version if existing else 0
        if expected_version is not None and expected_version != current_version:
            raise DraftConflict(expected_version, existing.version if existing else None)

        now = datetime.now(UTC)
        doc = StorefrontDocument(
            store_id=store_id,
            kind=kind,
            key=key,
            status=DocumentStatus.DRAFT,
            tree=copy.deepcopy(tree),
            meta=copy.deepcopy(meta),
            version=current_version + 1,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self.documents[ident] = doc
        return copy.deepcopy(doc)

    async def publish_document(self, store_id, kind, key):
        draft = self.documents.get((store_id, kind, key, DocumentStatus.DRAFT))
        if draft is None:
            raise NoDraftToPublish(f"No draft document found for {kind.value}:{key}")

        ident = (store_id, kind, key, DocumentStatus.PUBLISHED)
        existing = self.documents.get(ident)
        now = datetime.now(UTC)
        published = StorefrontDocument(
            store_id=store_id,
            kind=kind,
            key=key,
            status=DocumentStatus.PUBLISHED,
            tree=copy.deepcopy(draft.tree),
            meta=copy.deepcopy(draft.meta),
            version=draft.version,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self.documents[ident] = published
        return copy.deepcopy(published)

    async def delete_document(self, store_id, kind, key, status):
        return self.documents.pop((store_id, kind, key, status), None) is not None

    async def count_documents(self, store_id):
        return sum(1 for (sid, *_rest) in self.documents if sid == store_id)

    async def get_theme(self, store_id, status):
        theme = self.themes.get((store_id, status))
        return copy.deepcopy(theme) if theme else None

    async def save_theme_draft(self, store_id, variables):
        ident = (store_id, DocumentStatus.DRAFT)
        existing = self.themes.get(ident)
        now = datetime.now(UTC)
        theme = StorefrontTheme(
            store_id=store_id,
            status=DocumentStatus.DRAFT,
            vars=dict(variables),
            version=existing.version + 1 if existing else 1,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self.themes[ident] = theme
        return copy.deepcopy(theme)

    async def publish_theme(self, store_id):
        draft = self.themes.get((store_id, DocumentStatus.DRAFT))
        if draft is None:
            raise NoDraftToPublish("No draft theme found")
        ident = (store_id, DocumentStatus.PUBLISHED)
        existing = self.themes.get(ident)
        now = datetime.now(UTC)
        published = StorefrontTheme(
            store_id=store_id,
            status=DocumentStatus.PUBLISHED,
            vars=dict(draft.vars),
            version=draft.version,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self.themes[ident] = published
        return copy.deepcopy(published)

    async def delete_theme(self, store_id, status):
        return self.themes.pop((store_id, status), None) is not None

    async def seed(self, store_id, documents, theme):
        now = datetime.now(UTC)
        for kind, key, tree in documents:
            for status in DocumentStatus:
                self.documents[(store_id, kind, key, status)] = StorefrontDocument(
                    store_id=store_id,
                    kind=kind,
                    key=key,
                    status=status,
                    tree=copy.deepcopy(tree),
                    created_at=now,
                    updated_at=now,
                )
        for status in DocumentStatus:
            self.themes[(store_id, status)] = StorefrontTheme(
                store_id=store_id, status=status, vars=dict(theme), created_at=now, updated_at=now
            )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class StorefrontStore:
    """
    Draft/publish lifecycle for one storage backend.

    Usage:
        store = StorefrontStore(MemoryStorage(), registry)
        await store.save_draft("store_1", DocumentKind.PAGE, "HOME", tree)
        await store.publish("store_1", DocumentKind.PAGE, "HOME")
    """

    def __init__(self, storage: StorefrontStorage, registry: ComponentRegistry) -> None:
        self.storage = storage
        self.registry = registry

    # -- documents ----------------------------------------------------------

    async def save_draft(
        self,
        store_id: str,
        kind: DocumentKind,
        key: str,
        tree: Node,
        meta: dict[str, Any] | None = None,
        expected_version: int | None = None,
    ) -> StorefrontDocument:
        """
        Validate the tree, then create or replace the DRAFT row.

        Raises InvalidDocument before anything is written, or DraftConflict
        when expected_version is given and the stored DRAFT has moved on.
        Without expected_version the last writer wins.
        """
        kind = DocumentKind(kind)
        errors = validate_document(tree, kind, self.registry)
        if errors:
            raise InvalidDocument(errors)

        doc = await self.storage.save_draft(store_id, kind, key, tree, dict(meta or {}), expected_version)
        logger.info("save_draft: store=%s %s:%s version=%d", store_id, kind.value, key, doc.version)
        return doc

    async def publish(self, store_id: str, kind: DocumentKind, key: str) -> StorefrontDocument:
        """Copy the DRAFT over PUBLISHED. Raises NoDraftToPublish."""
        kind = DocumentKind(kind)
        doc = await self.storage.publish_document(store_id, kind, key)
        logger.info("publish: store=%s %s:%s version=%d", store_id, kind.value, key, doc.version)
        return doc

    async def get_document(
        self, store_id: str, kind: DocumentKind, key: str, status: DocumentStatus
    ) -> StorefrontDocument | None:
        return await self.storage.get_document(store_id, DocumentKind(kind), key, DocumentStatus(status))

    async def get_draft(self, store_id: str, kind: DocumentKind, key: str) -> StorefrontDocument | None:
        return await self.get_document(store_id, kind, key, DocumentStatus.DRAFT)

    async def get_published(self, store_id: str, kind: DocumentKind, key: str) -> StorefrontDocument | None:
        return await self.get_document(store_id, kind, key, DocumentStatus.PUBLISHED)

    async def get_published_or_default(self, store_id: str, kind: DocumentKind, key: str) -> Node | None:
        """Published tree for the identity, else the built-in default for that key, else None."""
        doc = await self.get_published(store_id, kind, key)
        if doc is not None:
            return doc.tree
        return default_document(DocumentKind(kind), key)

    async def list_documents(
        self,
        store_id: str,
        kind: DocumentKind | None = None,
        status: DocumentStatus | None = None,
    ) -> list[StorefrontDocument]:
        return await self.storage.list_documents(
            store_id,
            DocumentKind(kind) if kind else None,
            DocumentStatus(status) if status else None,
        )

    async def delete_document(self, store_id: str, kind: DocumentKind, key: str, status: DocumentStatus) -> bool:
        return await self.storage.delete_document(store_id, DocumentKind(kind), key, DocumentStatus(status))

    async def has_documents(self, store_id: str) -> bool:
        return await self.storage.count_documents(store_id) > 0

    async def seed_defaults(self, store_id: str) -> bool:
        """
        Give a new store the default layout, pages, prefabs and theme,
        both DRAFT and PUBLISHED. Returns False if it already has documents.
        """
        if await self.has_documents(store_id):
            return False
        documents = default_documents()
        await self.storage.seed(store_id, documents, default_theme())
        logger.info("seed_defaults: store=%s documents=%d", store_id, len(documents))
        return True

    # -- themes -------------------------------------------------------------

    async def save_theme_draft(self, store_id: str, variables: dict[str, str]) -> StorefrontTheme:
        errors = validate_theme_vars(variables)
        if errors:
            raise InvalidDocument(errors)
        return await self.storage.save_theme_draft(store_id, dict(variables))

    async def publish_theme(self, store_id: str) -> StorefrontTheme:
        theme = await self.storage.publish_theme(store_id)
        logger.info("publish_theme: store=%s version=%d", store_id, theme.version)
        return theme

    async def get_theme_draft(self, store_id: str) -> StorefrontTheme | None:
        return await self.storage.get_theme(store_id, DocumentStatus.DRAFT)

    async def get_published_theme(self, store_id: str) -> StorefrontTheme | None:
        return await self.storage.get_theme(store_id, DocumentStatus.PUBLISHED)

    async def delete_theme(self, store_id: str, status: DocumentStatus) -> bool:
        return await self.storage.delete_theme(store_id, DocumentStatus(status))
