"""
Storefront Composer — Tree Model

Pure structural operations over a document tree: (root, ...) → new root.

None of these mutate their input. Missing ids are absorbed as no-ops so an
edit can be replayed or retried safely; only create_node raises, for an
unregistered type.
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Callable, Iterator
from dataclasses import replace

from engine.composer.registry import ComponentRegistry
from engine.composer.types import Node


def new_node_id() -> str:
    return f"node_{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def create_node(registry: ComponentRegistry, type_name: str) -> Node:
    """
    Create a fresh node of a registered type.

    Defaults are deep-copied so no two instances share a dict or list.
    Raises UnknownComponentType if the type is not registered.
    """
    definition = registry.require(type_name)
    defaults = definition.defaults
    return Node(
        id=new_node_id(),
        type=type_name,
        props=copy.deepcopy(defaults.props),
        styles=copy.deepcopy(defaults.styles),
        bindings=copy.deepcopy(defaults.bindings),
        actions=copy.deepcopy(defaults.actions),
        children=[duplicate_node(child) for child in defaults.children],
    )


def duplicate_node(node: Node) -> Node:
    """Deep copy a subtree, giving every node in it a fresh id."""
    return replace(
        copy.deepcopy(node),
        id=new_node_id(),
        children=[duplicate_node(child) for child in node.children],
    )


def create_default_layout(registry: ComponentRegistry) -> Node:
    """The starter home layout: a Container holding a Heading and a Text."""
    heading = create_node(registry, "Heading")
    heading = replace(heading, props={**heading.props, "text": "Welcome to your storefront"})
    text = create_node(registry, "Text")
    text = replace(text, props={**text.props, "text": "Start building by selecting a component from the palette."})
    container = create_node(registry, "Container")
    return replace(container, children=[heading, text])


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def find_node(root: Node, node_id: str) -> Node | None:
    """Depth-first search. Returns None when the id is absent."""
    if root.id == node_id:
        return root
    for child in root.children:
        match = find_node(child, node_id)
        if match is not None:
            return match
    return None


def contains_node(root: Node, node_id: str) -> bool:
    """True if node_id is root itself or any descendant of it."""
    if root.id == node_id:
        return True
    return any(contains_node(child, node_id) for child in root.children)


def find_parent(root: Node, node_id: str) -> Node | None:
    for child in root.children:
        if child.id == node_id:
            return root
        parent = find_parent(child, node_id)
        if parent is not None:
            return parent
    return None


def node_path(root: Node, node_id: str) -> list[int] | None:
    """Child indices leading from root to node_id; [] for the root itself."""
    if root.id == node_id:
        return []
    for index, child in enumerate(root.children):
        sub = node_path(child, node_id)
        if sub is not None:
            return [index, *sub]
    return None


def iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order traversal."""
    yield root
    for child in root.children:
        yield from iter_nodes(child)


def find_node_by_type(root: Node, type_name: str) -> Node | None:
    return next((n for n in iter_nodes(root) if n.type == type_name), None)


# ---------------------------------------------------------------------------
# Mutators
# ---------------------------------------------------------------------------


def update_node(root: Node, node_id: str, updater: Callable[[Node], Node]) -> Node:
    """
    Replace the node matching node_id with updater(node).

    Every ancestor on the way back up is rebuilt. If the id is absent the
    result equals the input.
    """
    if root.id == node_id:
        return updater(root)
    return replace(root, children=[update_node(child, node_id, updater) for child in root.children])


def remove_node(root: Node, node_id: str) -> Node:
    """
    Remove node_id wherever it appears as a child.

    Removing the root id is a no-op: a document always keeps its one root.
    """
    if root.id == node_id:
        return root
    return replace(
        root,
        children=[remove_node(child, node_id) for child in root.children if child.id != node_id],
    )


def insert_node(root: Node, parent_id: str, node: Node, index: int | None = None) -> Node:
    """
    Insert node under parent_id, appended unless an index is given.

    No-op if parent_id is absent.
    """

    def _insert(parent: Node) -> Node:
        children = list(parent.children)
        if index is None or index >= len(children):
            children.append(node)
        else:
            children.insert(max(index, 0), node)
        return replace(parent, children=children)

    return update_node(root, parent_id, _insert)


def move_node(root: Node, node_id: str, target_parent_id: str) -> Node:
    """
    Re-parent node_id as the last child of target_parent_id.

    The tree is returned unchanged when the node would be moved into itself
    or into its own subtree, or when either id is absent.
    """
    if node_id == target_parent_id:
        return root

    node = find_node(root, node_id)
    if node is None:
        return root

    if contains_node(node, target_parent_id):
        return root

    # An absent target would otherwise drop the detached node.
    if find_node(root, target_parent_id) is None:
        return root

    return insert_node(remove_node(root, node_id), target_parent_id, node)
