"""
Storefront composer FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend import db
from backend.config import settings
from backend.repos.storefront_repo import PostgresStorefrontStorage
from backend.routes import catalog as catalog_routes
from backend.routes import runtime as runtime_routes
from backend.routes import storefront as storefront_routes
from engine.composer.actions import ActionRegistry, register_core_actions
from engine.composer.components import register_core_components
from engine.composer.registry import ComponentRegistry
from engine.composer.store import StorefrontStore

logger = logging.getLogger(__name__)

# Registries are built once per process and shared through app.state.
components = ComponentRegistry()
register_core_components(components)
actions = ActionRegistry()
register_core_actions(actions)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Configure logging
    - Initialize database pool and the Postgres-backed store
    - Close database pool on shutdown
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    await db.init_pool()
    app.state.storefront = StorefrontStore(PostgresStorefrontStorage(), components)
    logger.info("Storefront store ready (%d components, %d actions)", len(components), len(actions))

    yield

    await db.close_pool()


app = FastAPI(
    title="Storefront Composer",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
    lifespan=lifespan,
)
app.state.components = components
app.state.actions = actions

# Register routes
app.include_router(storefront_routes.router)
app.include_router(catalog_routes.router)
app.include_router(runtime_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
