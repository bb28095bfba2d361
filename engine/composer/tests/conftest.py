"""
Composer test configuration.

Every test gets its own registries and in-memory store; nothing is shared
across tests.
"""

import pytest

from engine.composer.actions import ActionRegistry, register_core_actions
from engine.composer.components import register_core_components
from engine.composer.registry import ComponentRegistry
from engine.composer.store import MemoryStorage, StorefrontStore


@pytest.fixture
def registry():
    reg = ComponentRegistry()
    register_core_components(reg)
    return reg


@pytest.fixture
def actions():
    reg = ActionRegistry()
    register_core_actions(reg)
    return reg


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, registry):
    return StorefrontStore(storage, registry)
