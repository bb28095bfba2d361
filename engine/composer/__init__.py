"""
Storefront Composer — the document composition engine.

Components:
  registry    — component catalogue (type → definition)
  tree        — pure structural operations over node trees
  bindings    — safe path resolution against a runtime context
  actions     — action catalogue and dispatcher
  validation  — structural checks before a document is saved
  runtime     — binding + style resolution of a whole tree for rendering
  store       — DRAFT/PUBLISHED versioning of documents and themes
"""

from engine.composer.actions import (
    ActionRegistry,
    InvalidActionPayload,
    UnknownActionId,
    dispatch,
    register_core_actions,
)
from engine.composer.bindings import (
    UNRESOLVED,
    parse_binding_path,
    resolve_binding_path,
    resolve_bindings,
    validate_binding_path,
)
from engine.composer.components import register_core_components
from engine.composer.registry import ComponentRegistry, UnknownComponentType
from engine.composer.runtime import build_runtime_context, resolve_tree
from engine.composer.store import (
    DraftConflict,
    InvalidDocument,
    MemoryStorage,
    NoDraftToPublish,
    StorefrontStorage,
    StorefrontStore,
)
from engine.composer.tree import (
    contains_node,
    create_node,
    find_node,
    insert_node,
    move_node,
    remove_node,
    update_node,
)
from engine.composer.types import ActionRef, DocumentKind, DocumentStatus, Node
from engine.composer.validation import validate_document

__all__ = [
    # Registries
    "ComponentRegistry",
    "ActionRegistry",
    "register_core_components",
    "register_core_actions",
    # Tree
    "Node",
    "ActionRef",
    "create_node",
    "find_node",
    "contains_node",
    "update_node",
    "remove_node",
    "insert_node",
    "move_node",
    # Bindings
    "UNRESOLVED",
    "parse_binding_path",
    "validate_binding_path",
    "resolve_binding_path",
    "resolve_bindings",
    # Runtime
    "build_runtime_context",
    "resolve_tree",
    "dispatch",
    # Store
    "DocumentKind",
    "DocumentStatus",
    "StorefrontStore",
    "StorefrontStorage",
    "MemoryStorage",
    "validate_document",
    # Errors
    "UnknownComponentType",
    "UnknownActionId",
    "InvalidActionPayload",
    "InvalidDocument",
    "NoDraftToPublish",
    "DraftConflict",
]
