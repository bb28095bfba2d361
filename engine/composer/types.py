"""
Storefront Composer — Shared Types

Data classes used across the registry, tree model, bindings, actions,
validation and the versioning store. These are the contracts that bind the
composer together.

Nodes are plain dataclasses compared structurally. The tree operators in
`engine.composer.tree` never mutate a node in place; they build new nodes
with `dataclasses.replace`.
"""

from __future__ import annotations

import copy
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DocumentKind(str, Enum):
    LAYOUT = "LAYOUT"
    PAGE = "PAGE"
    TEMPLATE = "TEMPLATE"
    PREFAB = "PREFAB"


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


COMPONENT_CATEGORIES: set[str] = {
    "layout",
    "content",
    "commerce",
    "navigation",
    "utility",
}

# Sub-contexts a renderer normally supplies. Bindings may name others.
RUNTIME_CONTEXT_ROOTS: tuple[str, ...] = (
    "store",
    "settings",
    "user",
    "cart",
    "product",
    "selected_variant",
    "collection",
    "route",
    "ui_state",
)


# ---------------------------------------------------------------------------
# Tree data classes
# ---------------------------------------------------------------------------


@dataclass
class ActionRef:
    """A node's reference to a registered action, with a literal payload."""

    action_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    payload_bindings: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"action_id": self.action_id, "payload": copy.deepcopy(self.payload)}
        if self.payload_bindings:
            d["payload_bindings"] = dict(self.payload_bindings)
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ActionRef:
        return cls(
            action_id=d.get("action_id", ""),
            payload=copy.deepcopy(d.get("payload") or {}),
            payload_bindings=dict(d.get("payload_bindings") or {}),
        )


@dataclass
class Node:
    """
    One element of a document tree.

    styles is a style object: {"base": {...}, "breakpoints": {...}, "states": {...}}
    bindings maps a prop key to a runtime-context path.
    actions maps an action slot name (e.g. "on_click") to an ActionRef.
    """

    id: str
    type: str
    props: dict[str, Any] = field(default_factory=dict)
    styles: dict[str, Any] = field(default_factory=lambda: {"base": {}})
    bindings: dict[str, str] = field(default_factory=dict)
    actions: dict[str, ActionRef] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "props": copy.deepcopy(self.props),
            "styles": copy.deepcopy(self.styles),
            "bindings": dict(self.bindings),
            "actions": {slot: ref.to_dict() for slot, ref in self.actions.items()},
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Node:
        return cls(
            id=d["id"],
            type=d["type"],
            props=copy.deepcopy(d.get("props") or {}),
            styles=copy.deepcopy(d.get("styles") or {"base": {}}),
            bindings=dict(d.get("bindings") or {}),
            actions={slot: ActionRef.from_dict(ref) for slot, ref in (d.get("actions") or {}).items()},
            children=[cls.from_dict(child) for child in d.get("children") or []],
        )


@dataclass
class ResolvedNode:
    """A node after binding and style resolution, ready for a renderer."""

    id: str
    type: str
    props: dict[str, Any]
    styles: dict[str, Any]
    actions: dict[str, ActionRef]
    children: list[ResolvedNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "props": self.props,
            "styles": self.styles,
            "actions": {slot: ref.to_dict() for slot, ref in self.actions.items()},
            "children": [child.to_dict() for child in self.children],
        }


# ---------------------------------------------------------------------------
# Registry definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ActionSlot:
    name: str
    label: str


@dataclass(frozen=True)
class NodeDefaults:
    """Declared starting values for a freshly created node of a type."""

    props: dict[str, Any] = field(default_factory=dict)
    styles: dict[str, Any] = field(default_factory=lambda: {"base": {}})
    bindings: dict[str, str] = field(default_factory=dict)
    actions: dict[str, ActionRef] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)


@dataclass(frozen=True)
class ComponentDefinition:
    """
    Static description of a component type.

    props_schema is a pydantic model used to validate a node's static props;
    None means the type accepts free-form props.
    """

    type: str
    category: str
    display_name: str
    props_schema: type[BaseModel] | None = None
    action_slots: tuple[ActionSlot, ...] = ()
    accepts_children: bool = False
    defaults: NodeDefaults = field(default_factory=NodeDefaults)

    @property
    def slot_names(self) -> set[str]:
        return {slot.name for slot in self.action_slots}

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "category": self.category,
            "display_name": self.display_name,
            "props_schema": self.props_schema.model_json_schema() if self.props_schema else None,
            "action_slots": [{"name": s.name, "label": s.label} for s in self.action_slots],
            "accepts_children": self.accepts_children,
        }


ActionHandler = Callable[[dict[str, Any], dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class ActionDefinition:
    id: str
    label: str
    payload_schema: type[BaseModel]
    handler: ActionHandler
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "payload_schema": self.payload_schema.model_json_schema(),
        }


# ---------------------------------------------------------------------------
# Persisted rows
# ---------------------------------------------------------------------------


@dataclass
class StorefrontDocument:
    """One (store, kind, key, status) row of the versioning store."""

    store_id: str
    kind: DocumentKind
    key: str
    status: DocumentStatus
    tree: Node
    meta: dict[str, Any] = field(default_factory=dict)
    version: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "store_id": self.store_id,
            "kind": self.kind.value,
            "key": self.key,
            "status": self.status.value,
            "tree": self.tree.to_dict(),
            "meta": copy.deepcopy(self.meta),
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class StorefrontTheme:
    """One (store, status) theme row: a flat map of presentation tokens."""

    store_id: str
    status: DocumentStatus
    vars: dict[str, str] = field(default_factory=dict)
    version: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
