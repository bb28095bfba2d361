"""
Repository layer for the storefront service.

All SQL lives here and ONLY here. No database access outside this module.
"""

from backend.repos.storefront_repo import PostgresStorefrontStorage

__all__ = [
    "PostgresStorefrontStorage",
]
