"""
Pydantic models for the storefront service.

All wire shapes defined here. No imports from db, repos, or routes.
"""

from backend.models.storefront import (
    ActionRefPayload,
    DispatchRequest,
    DispatchResponse,
    DocumentResponse,
    DocumentSummary,
    NodePayload,
    RenderRequest,
    RenderResponse,
    SaveDraftRequest,
    SeedResponse,
    ThemeRequest,
    ThemeResponse,
)

__all__ = [
    # Documents
    "NodePayload",
    "ActionRefPayload",
    "SaveDraftRequest",
    "DocumentSummary",
    "DocumentResponse",
    "SeedResponse",
    # Themes
    "ThemeRequest",
    "ThemeResponse",
    # Runtime
    "RenderRequest",
    "RenderResponse",
    "DispatchRequest",
    "DispatchResponse",
]
