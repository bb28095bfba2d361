"""Postgres storage for storefront documents and themes."""

from __future__ import annotations

import asyncpg

from backend.db import store_conn
from engine.composer.store import DraftConflict, NoDraftToPublish, StorefrontStorage
from engine.composer.types import DocumentKind, DocumentStatus, Node, StorefrontDocument, StorefrontTheme

_DRAFT = DocumentStatus.DRAFT.value
_PUBLISHED = DocumentStatus.PUBLISHED.value


def _row_to_document(row: asyncpg.Record) -> StorefrontDocument:
    """Convert a database row to a StorefrontDocument."""
    return StorefrontDocument(
        store_id=row["store_id"],
        kind=DocumentKind(row["kind"]),
        key=row["key"],
        status=DocumentStatus(row["status"]),
        tree=Node.from_dict(row["tree"]),
        meta=row["meta"] or {},
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_theme(row: asyncpg.Record) -> StorefrontTheme:
    """Convert a database row to a StorefrontTheme."""
    return StorefrontTheme(
        store_id=row["store_id"],
        status=DocumentStatus(row["status"]),
        vars=row["vars"] or {},
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresStorefrontStorage(StorefrontStorage):
    """
    StorefrontStorage backed by the storefront_documents and
    storefront_themes tables.

    Every method runs in one store_conn() transaction, so RLS scopes it to
    the store and a multi-statement method commits or rolls back as a unit.
    """

    # -- documents ----------------------------------------------------------

    async def get_document(self, store_id, kind, key, status):
        async with store_conn(store_id) as conn:
            row = await conn.fetchrow(
                """
                SELECT * FROM storefront_documents
                WHERE store_id = $1 AND kind = $2 AND key = $3 AND status = $4
                """,
                store_id,
                kind.value,
                key,
                status.value,
            )
            return _row_to_document(row) if row else None

    async def list_documents(self, store_id, kind=None, status=None):
        conditions = ["store_id = $1"]
        params: list = [store_id]
        if kind is not None:
            params.append(kind.value)
            conditions.append(f"kind = ${len(params)}")
        if status is not None:
            params.append(status.value)
            conditions.append(f"status = ${len(params)}")

        async with store_conn(store_id) as conn:
            # S608/B608: conditions only contain fixed column names and placeholders
            rows = await conn.fetch(
                f"""
                SELECT * FROM storefront_documents
                WHERE {" AND ".join(conditions)}
                ORDER BY kind, key, status
                """,  # nosec B608
                *params,
            )
            return [_row_to_document(row) for row in rows]

    async def save_draft(self, store_id, kind, key, tree, meta, expected_version=None):
        async with store_conn(store_id) as conn:
            current = await conn.fetchval(
                """
                SELECT version FROM storefront_documents
                WHERE store_id = $1 AND kind = $2 AND key = $3 AND status = $4
                FOR UPDATE
                """,
                store_id,
                kind.value,
                key,
                _DRAFT,
            )
            if expected_version is not None and expected_version != (current or 0):
                raise DraftConflict(expected_version, current)

            # The WHERE guard also catches a concurrent first insert that won the race.
            row = await conn.fetchrow(
                """
                INSERT INTO storefront_documents (store_id, kind, key, status, tree, meta, version)
                VALUES ($1, $2, $3, $4, $5, $6, 1)
                ON CONFLICT (store_id, kind, key, status) DO UPDATE
                SET tree = EXCLUDED.tree,
                    meta = EXCLUDED.meta,
                    version = storefront_documents.version + 1,
                    updated_at = now()
                WHERE $7::int IS NULL OR storefront_documents.version = $7::int
                RETURNING *
                """,
                store_id,
                kind.value,
                key,
                _DRAFT,
                tree.to_dict(),
                meta,
                expected_version,
            )
            if row is None:
                raise DraftConflict(expected_version, current)
            return _row_to_document(row)

    async def publish_document(self, store_id, kind, key):
        async with store_conn(store_id) as conn:
            draft = await conn.fetchrow(
                """
                SELECT tree, meta, version FROM storefront_documents
                WHERE store_id = $1 AND kind = $2 AND key = $3 AND status = $4
                FOR UPDATE
                """,
                store_id,
                kind.value,
                key,
                _DRAFT,
            )
            if draft is None:
                raise NoDraftToPublish(f"No draft document found for {kind.value}:{key}")

            row = await conn.fetchrow(
                """
                INSERT INTO storefront_documents (store_id, kind, key, status, tree, meta, version)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                ON CONFLICT (store_id, kind, key, status) DO UPDATE
                SET tree = EXCLUDED.tree,
                    meta = EXCLUDED.meta,
                    version = EXCLUDED.version,
                    updated_at = now()
                RETURNING *
                """,
                store_id,
                kind.value,
                key,
                _PUBLISHED,
                draft["tree"],
                draft["meta"],
                draft["version"],
            )
            return _row_to_document(row)

    async def delete_document(self, store_id, kind, key, status):
        async with store_conn(store_id) as conn:
            result = await conn.execute(
                """
                DELETE FROM storefront_documents
                WHERE store_id = $1 AND kind = $2 AND key = $3 AND status = $4
                """,
                store_id,
                kind.value,
                key,
                status.value,
            )
            return result == "DELETE 1"

    async def count_documents(self, store_id):
        async with store_conn(store_id) as conn:
            return await conn.fetchval(
                "SELECT count(*) FROM storefront_documents WHERE store_id = $1",
                store_id,
            )

    # -- themes -------------------------------------------------------------

    async def get_theme(self, store_id, status):
        async with store_conn(store_id) as conn:
            row = await conn.fetchrow(
                "SELECT * FROM storefront_themes WHERE store_id = $1 AND status = $2",
                store_id,
                status.value,
            )
            return _row_to_theme(row) if row else None

    async def save_theme_draft(self, store_id, variables):
        async with store_conn(store_id) as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO storefront_themes (store_id, status, vars, version)
                VALUES ($1, $2, $3, 1)
                ON CONFLICT (store_id, status) DO UPDATE
                SET vars = EXCLUDED.vars,
                    version = storefront_themes.version + 1,
                    updated_at = now()
                RETURNING *
                """,
                store_id,
                _DRAFT,
                variables,
            )
            return _row_to_theme(row)

    async def publish_theme(self, store_id):
        async with store_conn(store_id) as conn:
            draft = await conn.fetchrow(
                "SELECT vars, version FROM storefront_themes WHERE store_id = $1 AND status = $2 FOR UPDATE",
                store_id,
                _DRAFT,
            )
            if draft is None:
                raise NoDraftToPublish("No draft theme found")

            row = await conn.fetchrow(
                """
                INSERT INTO storefront_themes (store_id, status, vars, version)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (store_id, status) DO UPDATE
                SET vars = EXCLUDED.vars,
                    version = EXCLUDED.version,
                    updated_at = now()
                RETURNING *
                """,
                store_id,
                _PUBLISHED,
                draft["vars"],
                draft["version"],
            )
            return _row_to_theme(row)

    async def delete_theme(self, store_id, status):
        async with store_conn(store_id) as conn:
            result = await conn.execute(
                "DELETE FROM storefront_themes WHERE store_id = $1 AND status = $2",
                store_id,
                status.value,
            )
            return result == "DELETE 1"

    # -- seeding ------------------------------------------------------------

    async def seed(self, store_id, documents, theme):
        async with store_conn(store_id) as conn:
            await conn.executemany(
                """
                INSERT INTO storefront_documents (store_id, kind, key, status, tree, meta, version)
                VALUES ($1, $2, $3, $4, $5, '{}'::jsonb, 1)
                ON CONFLICT (store_id, kind, key, status) DO NOTHING
                """,
                [
                    (store_id, kind.value, key, status.value, tree.to_dict())
                    for kind, key, tree in documents
                    for status in DocumentStatus
                ],
            )
            await conn.executemany(
                """
                INSERT INTO storefront_themes (store_id, status, vars, version)
                VALUES ($1, $2, $3, 1)
                ON CONFLICT (store_id, status) DO NOTHING
                """,
                [(store_id, status.value, theme) for status in DocumentStatus],
            )
