"""
Storefront Composer — Document Validation

Checks a tree before it is persisted. Returns a list of error strings;
empty list = valid. Every error is prefixed with the node's location, e.g.
`root.children[1].bindings.text: Invalid path format`.

Checks applied to every node:
- id is a non-empty string, unique within the document
- type is registered
- props satisfy the type's props schema
- children only under types that accept them
- binding targets are props the type declares, paths are well-formed
- styles use known layers and safe properties
- actions sit on declared slots and carry an action id

Kind rules:
- LAYOUT   exactly one Slot (where page content goes)
- PAGE     no Slot
- TEMPLATE no Slot
- PREFAB   unconstrained
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from engine.composer.bindings import validate_binding_path
from engine.composer.registry import ComponentRegistry
from engine.composer.styles import validate_style_object
from engine.composer.tree import iter_nodes
from engine.composer.types import DocumentKind, Node

SLOT_TYPE = "Slot"


def validate_document(tree: Any, kind: DocumentKind, registry: ComponentRegistry) -> list[str]:
    """Validate a whole document tree for the given kind."""
    if not isinstance(tree, Node):
        return ["Document tree must be a node"]

    errors: list[str] = []
    seen: set[str] = set()
    _validate_node(tree, "root", registry, seen, errors)

    slot_count = sum(1 for node in iter_nodes(tree) if node.type == SLOT_TYPE)
    if kind == DocumentKind.LAYOUT and slot_count != 1:
        errors.append(f"Layout documents must contain exactly one Slot (found {slot_count})")
    elif kind in (DocumentKind.PAGE, DocumentKind.TEMPLATE) and slot_count:
        errors.append(f"{kind.value.title()} documents cannot contain a Slot")

    return errors


def validate_theme_vars(variables: Any) -> list[str]:
    if not isinstance(variables, dict):
        return ["Theme vars must be an object"]
    errors: list[str] = []
    for name, value in variables.items():
        if not isinstance(name, str) or not name:
            errors.append(f"Invalid theme variable name: {name!r}")
        elif not isinstance(value, str):
            errors.append(f"Theme variable '{name}' must be a string")
    return errors


# ---------------------------------------------------------------------------
# Per-node checks
# ---------------------------------------------------------------------------


def _validate_node(node: Node, path: str, registry: ComponentRegistry, seen: set[str], errors: list[str]) -> None:
    if not isinstance(node.id, str) or not node.id:
        errors.append(f"{path}: Node must have a non-empty string id")
    elif node.id in seen:
        errors.append(f"{path}: Duplicate node id '{node.id}'")
    else:
        seen.add(node.id)

    definition = registry.get(node.type) if isinstance(node.type, str) else None
    if definition is None:
        errors.append(f'{path}: Unknown component type "{node.type}"')

    if not isinstance(node.props, dict):
        errors.append(f"{path}: Props must be an object")
    elif definition is not None and definition.props_schema is not None:
        try:
            definition.props_schema.model_validate(node.props)
        except ValidationError as e:
            for err in e.errors():
                loc = ".".join(str(p) for p in err["loc"])
                errors.append(f"{path}.props.{loc}: {err['msg']}")

    _validate_bindings(node, path, definition, errors)

    for error in validate_style_object(node.styles):
        errors.append(f"{path}.styles: {error}")

    _validate_actions(node, path, definition, errors)

    if not isinstance(node.children, list):
        errors.append(f"{path}.children: Children must be a list")
        return
    if node.children and definition is not None and not definition.accepts_children:
        errors.append(f"{path}: {node.type} does not accept children")
    for index, child in enumerate(node.children):
        child_path = f"{path}.children[{index}]"
        if not isinstance(child, Node):
            errors.append(f"{child_path}: Child must be a node")
            continue
        _validate_node(child, child_path, registry, seen, errors)


def _validate_bindings(node: Node, path: str, definition, errors: list[str]) -> None:
    if not isinstance(node.bindings, dict):
        errors.append(f"{path}.bindings: Bindings must be an object")
        return
    declared = set(definition.props_schema.model_fields) if definition and definition.props_schema else None
    for prop_key, binding_path in node.bindings.items():
        if declared is not None and prop_key not in declared:
            errors.append(f"{path}.bindings.{prop_key}: {node.type} has no prop '{prop_key}'")
        error = validate_binding_path(binding_path)
        if error:
            errors.append(f"{path}.bindings.{prop_key}: {error}")


def _validate_actions(node: Node, path: str, definition, errors: list[str]) -> None:
    if not isinstance(node.actions, dict):
        errors.append(f"{path}.actions: Actions must be an object")
        return
    for slot, ref in node.actions.items():
        where = f"{path}.actions.{slot}"
        if definition is not None and slot not in definition.slot_names:
            errors.append(f"{where}: {node.type} has no action slot '{slot}'")
        if not isinstance(ref.action_id, str) or not ref.action_id:
            errors.append(f"{where}: Action must have a valid action_id")
        if not isinstance(ref.payload, dict):
            errors.append(f"{where}.payload: Payload must be an object")
        for key, binding_path in (ref.payload_bindings or {}).items():
            error = validate_binding_path(binding_path)
            if error:
                errors.append(f"{where}.payload_bindings.{key}: {error}")
