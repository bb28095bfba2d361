"""Storefront documents and themes with store-scoped RLS.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

# Rows are visible when they belong to the connection's store, or to any
# store when app.store_id is empty (system_conn).
_STORE_SCOPE = """
    NULLIF(current_setting('app.store_id', true), '') IS NULL
    OR store_id = current_setting('app.store_id', true)
"""


def upgrade():
    # One row per (store, kind, key, status): at most one DRAFT and one PUBLISHED
    op.execute("""
        CREATE TABLE storefront_documents (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            store_id TEXT NOT NULL,
            kind TEXT NOT NULL CHECK (kind IN ('LAYOUT', 'PAGE', 'TEMPLATE', 'PREFAB')),
            key TEXT NOT NULL,
            status TEXT NOT NULL CHECK (status IN ('DRAFT', 'PUBLISHED')),
            tree JSONB NOT NULL,
            meta JSONB NOT NULL DEFAULT '{}'::jsonb,
            version INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            UNIQUE (store_id, kind, key, status)
        );
    """)

    op.execute("""
        CREATE INDEX idx_storefront_documents_store ON storefront_documents(store_id);
    """)

    op.execute("""
        CREATE TABLE storefront_themes (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            store_id TEXT NOT NULL,
            status TEXT NOT NULL CHECK (status IN ('DRAFT', 'PUBLISHED')),
            vars JSONB NOT NULL DEFAULT '{}'::jsonb,
            version INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            UNIQUE (store_id, status)
        );
    """)

    for table in ("storefront_documents", "storefront_themes"):
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")
        # FORCE so the table owner (the app role) is subject to the policy too
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY;")
        op.execute(f"""
            CREATE POLICY {table}_store_scope
            ON {table}
            FOR ALL
            USING ({_STORE_SCOPE})
            WITH CHECK ({_STORE_SCOPE});
        """)


def downgrade():
    op.execute("DROP TABLE IF EXISTS storefront_themes CASCADE;")
    op.execute("DROP TABLE IF EXISTS storefront_documents CASCADE;")
