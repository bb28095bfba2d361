"""
Storefront Composer — Core Components

The built-in component catalogue. Each type declares a pydantic props model
(extra keys forbidden), its action slots, whether it accepts children, and
the defaults a new node of that type starts from.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from engine.composer.registry import ComponentRegistry
from engine.composer.types import ActionRef, ActionSlot, ComponentDefinition, NodeDefaults

# ---------------------------------------------------------------------------
# Props models
# ---------------------------------------------------------------------------


class ContainerProps(BaseModel):
    model_config = {"extra": "forbid"}

    max_width: str | None = None


class FlexProps(BaseModel):
    model_config = {"extra": "forbid"}

    direction: Literal["row", "column"] = "row"
    gap: float = 16
    wrap: bool = False


class GridProps(BaseModel):
    model_config = {"extra": "forbid"}

    columns: int = Field(default=3, ge=1, le=12)
    gap: float = 16


class SpacerProps(BaseModel):
    model_config = {"extra": "forbid"}

    size: float = Field(default=24, ge=0)


class EmptyProps(BaseModel):
    model_config = {"extra": "forbid"}


class HeadingProps(BaseModel):
    model_config = {"extra": "forbid"}

    text: str = ""
    level: int = Field(default=2, ge=1, le=6)


class TextProps(BaseModel):
    model_config = {"extra": "forbid"}

    text: str = ""


class ImageProps(BaseModel):
    model_config = {"extra": "forbid"}

    src: str = ""
    alt: str = ""
    object_fit: Literal["cover", "contain"] = "cover"


class ButtonProps(BaseModel):
    model_config = {"extra": "forbid"}

    label: str = ""
    variant: Literal["primary", "secondary", "outline"] = "primary"
    disabled: bool = False


class LinkProps(BaseModel):
    model_config = {"extra": "forbid"}

    text: str = ""
    href: str = "/"


class NavbarProps(BaseModel):
    model_config = {"extra": "forbid"}

    title: str = ""
    logo: str | None = None
    links: list[dict[str, str]] = Field(default_factory=list)
    show_cart: bool = True


class ProductCardProps(BaseModel):
    model_config = {"extra": "forbid"}

    title: str = ""
    image: str | None = None
    price: float | None = None
    currency: str = "USD"
    href: str | None = None


class ProductGridProps(BaseModel):
    model_config = {"extra": "forbid"}

    products: list[dict[str, Any]] = Field(default_factory=list)
    columns: int = Field(default=4, ge=1, le=12)
    limit: int | None = Field(default=None, ge=1)


class PriceDisplayProps(BaseModel):
    model_config = {"extra": "forbid"}

    amount: float | None = None
    compare_at: float | None = None
    currency: str = "USD"


class AddToCartButtonProps(BaseModel):
    model_config = {"extra": "forbid"}

    label: str = "Add to cart"
    variant_id: str | None = None
    disabled: bool = False


class VariantSelectorProps(BaseModel):
    model_config = {"extra": "forbid"}

    variants: list[dict[str, Any]] = Field(default_factory=list)
    selected_id: str | None = None


class RepeaterProps(BaseModel):
    model_config = {"extra": "forbid"}

    items: list[Any] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=1)


class ConditionalProps(BaseModel):
    model_config = {"extra": "forbid"}

    show: bool = False


class PrefabInstanceProps(BaseModel):
    model_config = {"extra": "forbid"}

    prefab_key: str = ""


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

ON_CLICK = ActionSlot(name="on_click", label="On click")
ON_CHANGE = ActionSlot(name="on_change", label="On change")

_BOX_PADDING = {"paddingTop": 24, "paddingRight": 24, "paddingBottom": 24, "paddingLeft": 24}


def core_components() -> list[ComponentDefinition]:
    """Build the definitions for every built-in component type."""
    return [
        # Layout
        ComponentDefinition(
            type="Container",
            category="layout",
            display_name="Container",
            props_schema=ContainerProps,
            accepts_children=True,
            defaults=NodeDefaults(
                props={"max_width": "1200px"},
                styles={"base": {"display": "block", **_BOX_PADDING}},
            ),
        ),
        ComponentDefinition(
            type="Section",
            category="layout",
            display_name="Section",
            props_schema=ContainerProps,
            accepts_children=True,
            defaults=NodeDefaults(props={"max_width": "1200px"}, styles={"base": {"display": "block"}}),
        ),
        ComponentDefinition(
            type="Flex",
            category="layout",
            display_name="Flex",
            props_schema=FlexProps,
            accepts_children=True,
            defaults=NodeDefaults(props={"direction": "row", "gap": 16}, styles={"base": {"display": "flex"}}),
        ),
        ComponentDefinition(
            type="Grid",
            category="layout",
            display_name="Grid",
            props_schema=GridProps,
            accepts_children=True,
            defaults=NodeDefaults(props={"columns": 3, "gap": 16}, styles={"base": {"display": "grid"}}),
        ),
        ComponentDefinition(
            type="Spacer",
            category="layout",
            display_name="Spacer",
            props_schema=SpacerProps,
            defaults=NodeDefaults(props={"size": 24}),
        ),
        ComponentDefinition(
            type="Divider",
            category="layout",
            display_name="Divider",
            props_schema=EmptyProps,
            defaults=NodeDefaults(styles={"base": {"borderTop": "1px solid var(--border)"}}),
        ),
        ComponentDefinition(
            type="Slot",
            category="layout",
            display_name="Page slot",
            props_schema=EmptyProps,
        ),
        # Content
        ComponentDefinition(
            type="Heading",
            category="content",
            display_name="Heading",
            props_schema=HeadingProps,
            defaults=NodeDefaults(
                props={"text": "Heading", "level": 2},
                styles={"base": {"fontSize": 32, "fontWeight": 600}},
            ),
        ),
        ComponentDefinition(
            type="Text",
            category="content",
            display_name="Text",
            props_schema=TextProps,
            defaults=NodeDefaults(props={"text": "Add your text here"}, styles={"base": {"fontSize": 16}}),
        ),
        ComponentDefinition(
            type="Image",
            category="content",
            display_name="Image",
            props_schema=ImageProps,
            defaults=NodeDefaults(
                props={"src": "", "alt": "", "object_fit": "cover"},
                styles={"base": {"width": "100%"}},
            ),
        ),
        ComponentDefinition(
            type="Button",
            category="content",
            display_name="Button",
            props_schema=ButtonProps,
            action_slots=(ON_CLICK,),
            defaults=NodeDefaults(props={"label": "Click me", "variant": "primary"}),
        ),
        # Navigation
        ComponentDefinition(
            type="Link",
            category="navigation",
            display_name="Link",
            props_schema=LinkProps,
            action_slots=(ON_CLICK,),
            defaults=NodeDefaults(props={"text": "Link", "href": "/"}),
        ),
        ComponentDefinition(
            type="Navbar",
            category="navigation",
            display_name="Navbar",
            props_schema=NavbarProps,
            action_slots=(ActionSlot(name="on_cart_click", label="On cart click"),),
            defaults=NodeDefaults(
                props={"title": "", "links": [], "show_cart": True},
                bindings={"title": "store.name"},
                actions={"on_cart_click": ActionRef(action_id="OPEN_CART_SIDEBAR", payload={"open": True})},
            ),
        ),
        # Commerce
        ComponentDefinition(
            type="ProductCard",
            category="commerce",
            display_name="Product card",
            props_schema=ProductCardProps,
            action_slots=(ON_CLICK,),
            defaults=NodeDefaults(props={"title": "Product", "currency": "USD"}),
        ),
        ComponentDefinition(
            type="ProductGrid",
            category="commerce",
            display_name="Product grid",
            props_schema=ProductGridProps,
            defaults=NodeDefaults(
                props={"products": [], "columns": 4},
                bindings={"products": "collection.products"},
            ),
        ),
        ComponentDefinition(
            type="PriceDisplay",
            category="commerce",
            display_name="Price",
            props_schema=PriceDisplayProps,
            defaults=NodeDefaults(props={"currency": "USD"}, bindings={"amount": "product.price"}),
        ),
        ComponentDefinition(
            type="AddToCartButton",
            category="commerce",
            display_name="Add to cart",
            props_schema=AddToCartButtonProps,
            action_slots=(ON_CLICK,),
            defaults=NodeDefaults(
                props={"label": "Add to cart"},
                bindings={"variant_id": "selected_variant.id"},
                actions={
                    "on_click": ActionRef(
                        action_id="ADD_TO_CART",
                        payload={"quantity": 1, "open_cart": True},
                        payload_bindings={"variant_id": "selected_variant.id"},
                    )
                },
            ),
        ),
        ComponentDefinition(
            type="VariantSelector",
            category="commerce",
            display_name="Variant selector",
            props_schema=VariantSelectorProps,
            action_slots=(ON_CHANGE,),
            defaults=NodeDefaults(
                bindings={"variants": "product.variants", "selected_id": "selected_variant.id"},
                actions={"on_change": ActionRef(action_id="SELECT_VARIANT")},
            ),
        ),
        # Utility
        ComponentDefinition(
            type="Repeater",
            category="utility",
            display_name="Repeater",
            props_schema=RepeaterProps,
            accepts_children=True,
            defaults=NodeDefaults(props={"items": []}),
        ),
        ComponentDefinition(
            type="Conditional",
            category="utility",
            display_name="Conditional",
            props_schema=ConditionalProps,
            accepts_children=True,
            defaults=NodeDefaults(props={"show": True}),
        ),
        ComponentDefinition(
            type="PrefabInstance",
            category="utility",
            display_name="Prefab",
            props_schema=PrefabInstanceProps,
        ),
    ]


def register_core_components(registry: ComponentRegistry) -> None:
    """Populate the registry with the built-in catalogue, once."""
    if len(registry) > 0:
        return
    for definition in core_components():
        registry.register(definition)
