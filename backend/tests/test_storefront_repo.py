"""
Tests for PostgresStorefrontStorage, including RLS isolation between stores.

Needs a migrated database in DATABASE_URL; skipped otherwise.
"""

from __future__ import annotations

from uuid import uuid4

import pytest
import pytest_asyncio

from backend import db
from backend.main import components
from backend.repos.storefront_repo import PostgresStorefrontStorage
from engine.composer.store import DraftConflict, NoDraftToPublish, StorefrontStore
from engine.composer.tree import create_default_layout
from engine.composer.types import DocumentKind, DocumentStatus

pytestmark = pytest.mark.asyncio(loop_scope="session")

PAGE = DocumentKind.PAGE


@pytest_asyncio.fixture(loop_scope="session")
async def store_id(initialize_pool):
    """A fresh store id; its rows are removed afterwards."""
    sid = f"store_{uuid4().hex[:8]}"
    yield sid
    async with db.system_conn() as conn:
        await conn.execute("DELETE FROM storefront_documents WHERE store_id = $1", sid)
        await conn.execute("DELETE FROM storefront_themes WHERE store_id = $1", sid)


@pytest_asyncio.fixture(loop_scope="session")
async def second_store_id(initialize_pool):
    sid = f"store_{uuid4().hex[:8]}"
    yield sid
    async with db.system_conn() as conn:
        await conn.execute("DELETE FROM storefront_documents WHERE store_id = $1", sid)
        await conn.execute("DELETE FROM storefront_themes WHERE store_id = $1", sid)


@pytest.fixture
def store():
    return StorefrontStore(PostgresStorefrontStorage(), components)


async def test_save_and_get(store, store_id):
    tree = create_default_layout(components)
    saved = await store.save_draft(store_id, PAGE, "HOME", tree, {"title": "Home"})

    fetched = await store.get_draft(store_id, PAGE, "HOME")

    assert saved.version == 1
    assert fetched.tree == tree
    assert fetched.meta == {"title": "Home"}


async def test_version_increments(store, store_id):
    tree = create_default_layout(components)
    await store.save_draft(store_id, PAGE, "HOME", tree)
    second = await store.save_draft(store_id, PAGE, "HOME", tree)
    assert second.version == 2


async def test_stale_version_conflicts(store, store_id):
    tree = create_default_layout(components)
    await store.save_draft(store_id, PAGE, "HOME", tree, expected_version=0)

    with pytest.raises(DraftConflict):
        await store.save_draft(store_id, PAGE, "HOME", tree, expected_version=0)
    with pytest.raises(DraftConflict):
        await store.save_draft(store_id, PAGE, "ABOUT", tree, expected_version=2)

    assert (await store.get_draft(store_id, PAGE, "HOME")).version == 1
    assert await store.get_draft(store_id, PAGE, "ABOUT") is None


async def test_publish(store, store_id):
    tree = create_default_layout(components)
    draft = await store.save_draft(store_id, PAGE, "HOME", tree)

    published = await store.publish(store_id, PAGE, "HOME")

    assert published.status == DocumentStatus.PUBLISHED
    assert published.tree == draft.tree
    assert published.version == draft.version


async def test_publish_without_draft(store, store_id):
    with pytest.raises(NoDraftToPublish):
        await store.publish(store_id, PAGE, "HOME")


async def test_list_and_delete(store, store_id):
    tree = create_default_layout(components)
    await store.save_draft(store_id, PAGE, "HOME", tree)
    await store.publish(store_id, PAGE, "HOME")

    assert len(await store.list_documents(store_id)) == 2
    assert len(await store.list_documents(store_id, status=DocumentStatus.PUBLISHED)) == 1

    assert await store.delete_document(store_id, PAGE, "HOME", DocumentStatus.DRAFT) is True
    assert await store.delete_document(store_id, PAGE, "HOME", DocumentStatus.DRAFT) is False


async def test_seed_and_theme(store, store_id):
    assert await store.seed_defaults(store_id) is True
    assert await store.seed_defaults(store_id) is False

    layout = await store.get_published(store_id, DocumentKind.LAYOUT, "GLOBAL_LAYOUT")
    assert layout is not None

    await store.save_theme_draft(store_id, {"primary": "#123456"})
    published = await store.publish_theme(store_id)
    assert published.vars == {"primary": "#123456"}
    assert published.version == 2


async def test_rls_isolates_stores(store, store_id, second_store_id):
    """A connection scoped to one store cannot see another store's rows."""
    tree = create_default_layout(components)
    await store.save_draft(store_id, PAGE, "HOME", tree)

    async with db.store_conn(second_store_id) as conn:
        count = await conn.fetchval("SELECT count(*) FROM storefront_documents WHERE store_id = $1", store_id)

    assert count == 0
    assert await store.get_draft(second_store_id, PAGE, "HOME") is None
