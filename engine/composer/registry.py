"""
Storefront Composer — Component Registry

Maps a component type name to its ComponentDefinition. One registry is
built at startup, populated once, and passed to whatever needs it.
"""

from __future__ import annotations

from engine.composer.types import ComponentDefinition


class UnknownComponentType(Exception):
    """No component is registered under the requested type."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Unknown component type: {type_name}")
        self.type_name = type_name


class ComponentRegistry:
    """In-memory catalogue of component definitions, keyed by type."""

    def __init__(self) -> None:
        self._components: dict[str, ComponentDefinition] = {}

    def register(self, definition: ComponentDefinition) -> None:
        """Add or overwrite a type's definition."""
        self._components[definition.type] = definition

    def get(self, type_name: str) -> ComponentDefinition | None:
        return self._components.get(type_name)

    def require(self, type_name: str) -> ComponentDefinition:
        definition = self._components.get(type_name)
        if definition is None:
            raise UnknownComponentType(type_name)
        return definition

    def list(self) -> list[ComponentDefinition]:
        return list(self._components.values())

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._components

    def __len__(self) -> int:
        return len(self._components)
