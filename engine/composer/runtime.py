"""
Storefront Composer — Runtime Resolution

Turns a stored tree into what a renderer draws for one request:
bindings resolved against the runtime context, styles flattened for the
breakpoint, Repeater subtrees expanded once per item, Conditional
subtrees dropped unless their show prop is truthy.

Before resolution a page can be composed: placed into its layout's Slot
(fill_slot) and PrefabInstance nodes replaced by the prefab trees they
name (inline_prefabs).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from engine.composer.bindings import resolve_bindings, with_scope
from engine.composer.styles import resolve_styles
from engine.composer.tree import find_node_by_type, iter_nodes, update_node
from engine.composer.types import Node, ResolvedNode
from engine.composer.validation import SLOT_TYPE

REPEATER_TYPE = "Repeater"
CONDITIONAL_TYPE = "Conditional"
PREFAB_INSTANCE_TYPE = "PrefabInstance"


def build_runtime_context(**sub_contexts: Any) -> dict[str, Any]:
    """
    Assemble a request-scoped context from named sub-contexts.

    build_runtime_context(store={...}, cart={...}, product=None)
    Sub-contexts passed as None are left out.
    """
    return {name: value for name, value in sub_contexts.items() if value is not None}


def effective_props(node: Node, context: Mapping[str, Any]) -> dict[str, Any]:
    """Static props with every resolved binding laid over them."""
    return {**node.props, **resolve_bindings(node.bindings, context)}


def resolve_tree(node: Node, context: Mapping[str, Any], breakpoint: str = "base") -> ResolvedNode:
    props = effective_props(node, context)

    if node.type == REPEATER_TYPE:
        children = _expand_repeater(node, props, context, breakpoint)
    elif node.type == CONDITIONAL_TYPE and not props.get("show"):
        children = []
    else:
        children = [resolve_tree(child, context, breakpoint) for child in node.children]

    return ResolvedNode(
        id=node.id,
        type=node.type,
        props=props,
        styles=resolve_styles(node.styles, breakpoint),
        actions=dict(node.actions),
        children=children,
    )


def _expand_repeater(
    node: Node,
    props: dict[str, Any],
    context: Mapping[str, Any],
    breakpoint: str,
) -> list[ResolvedNode]:
    items = props.get("items")
    if not isinstance(items, list):
        return []
    limit = props.get("limit")
    if isinstance(limit, int) and limit > 0:
        items = items[:limit]

    expanded: list[ResolvedNode] = []
    for index, item in enumerate(items):
        scoped = with_scope(context, item, index)
        for child in node.children:
            resolved = resolve_tree(child, scoped, breakpoint)
            expanded.append(_suffix_ids(resolved, index))
    return expanded


def _suffix_ids(node: ResolvedNode, index: int) -> ResolvedNode:
    # Repeated subtrees must not share ids with each other.
    node.id = f"{node.id}:{index}"
    for child in node.children:
        _suffix_ids(child, index)
    return node


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def fill_slot(layout: Node, content: Node) -> Node:
    """Put content where the layout's Slot is. A layout without a Slot comes back unchanged."""
    slot = find_node_by_type(layout, SLOT_TYPE)
    if slot is None:
        return layout
    return update_node(layout, slot.id, lambda _: content)


def inline_prefabs(tree: Node, prefabs: Mapping[str, Node]) -> Node:
    """
    Replace every PrefabInstance whose prefab_key is known with that prefab's tree.

    Inlined ids are prefixed with the instance id so two instances of the
    same prefab stay distinct. A prefab that (directly or not) contains
    itself is left as an instance at the point it recurs.
    """
    return _inline(tree, prefabs, frozenset())


def _inline(node: Node, prefabs: Mapping[str, Node], expanding: frozenset[str]) -> Node:
    if node.type == PREFAB_INSTANCE_TYPE:
        key = node.props.get("prefab_key")
        prefab = prefabs.get(key) if isinstance(key, str) else None
        if prefab is not None and key not in expanding:
            inlined = _inline(prefab, prefabs, expanding | {key})
            return _prefix_ids(inlined, f"{node.id}/")
        return node
    return replace(node, children=[_inline(child, prefabs, expanding) for child in node.children])


def _prefix_ids(node: Node, prefix: str) -> Node:
    return replace(
        node,
        id=f"{prefix}{node.id}",
        children=[_prefix_ids(child, prefix) for child in node.children],
    )


def prefab_keys(tree: Node) -> set[str]:
    """prefab_key of every PrefabInstance in the tree."""
    return {
        node.props["prefab_key"]
        for node in iter_nodes(tree)
        if node.type == PREFAB_INSTANCE_TYPE and isinstance(node.props.get("prefab_key"), str)
    }
