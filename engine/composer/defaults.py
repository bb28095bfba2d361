"""
Storefront Composer — Default Documents

The starter layout, pages, prefabs and theme every new store is seeded
with, and the runtime falls back to when a store has not published its own.
Ids are fixed so the defaults are stable across stores.
"""

from __future__ import annotations

from typing import Any

from engine.composer.types import DocumentKind, Node

DEFAULT_THEME: dict[str, str] = {
    "background": "#ffffff",
    "foreground": "#0a0a0a",
    "primary": "#171717",
    "primary_foreground": "#fafafa",
    "secondary": "#f5f5f5",
    "secondary_foreground": "#171717",
    "muted": "#f5f5f5",
    "muted_foreground": "#737373",
    "accent": "#f5f5f5",
    "accent_foreground": "#171717",
    "destructive": "#ef4444",
    "border": "#e5e5e5",
    "input": "#e5e5e5",
    "ring": "#0a0a0a",
    "radius": "0.5rem",
}


def _n(node_id: str, type_name: str, children: list[dict] | None = None, **fields: Any) -> dict[str, Any]:
    return {"id": node_id, "type": type_name, "children": children or [], **fields}


GLOBAL_LAYOUT = _n(
    "layout_root",
    "Container",
    props={"max_width": "100%"},
    children=[
        _n("layout_navbar", "PrefabInstance", props={"prefab_key": "Navbar"}),
        _n("layout_slot", "Slot"),
        _n(
            "layout_footer",
            "Section",
            styles={"base": {"paddingTop": 32, "paddingBottom": 32, "textAlign": "center"}},
            children=[
                _n("footer_text", "Text", props={"text": ""}, bindings={"text": "store.name"}),
            ],
        ),
    ],
)

HOME_PAGE = _n(
    "page_home",
    "Container",
    children=[
        _n(
            "home_hero",
            "Section",
            styles={"base": {"paddingTop": 64, "paddingBottom": 64, "textAlign": "center"}},
            children=[
                _n(
                    "hero_heading",
                    "Heading",
                    props={"text": "Welcome to Our Store", "level": 1},
                    bindings={"text": "store.name"},
                    styles={"base": {"fontSize": 48, "fontWeight": 700}},
                ),
                _n("hero_subtext", "Text", props={"text": "Discover our collection of products"}),
                _n(
                    "hero_cta",
                    "Button",
                    props={"label": "Shop now", "variant": "primary"},
                    actions={"on_click": {"action_id": "NAVIGATE", "payload": {"to": "/collection"}}},
                ),
            ],
        ),
        _n(
            "home_featured",
            "Section",
            children=[
                _n("featured_heading", "Heading", props={"text": "Featured products", "level": 2}),
                _n(
                    "featured_grid",
                    "ProductGrid",
                    props={"products": [], "columns": 4, "limit": 8},
                    bindings={"products": "collection.products"},
                ),
            ],
        ),
    ],
)

COLLECTION_PAGE = _n(
    "page_collection",
    "Container",
    children=[
        _n(
            "collection_title",
            "Heading",
            props={"text": "All products", "level": 1},
            bindings={"text": "collection.name"},
        ),
        _n(
            "collection_grid",
            "ProductGrid",
            props={"products": [], "columns": 4},
            bindings={"products": "collection.products"},
        ),
    ],
)

PDP_TEMPLATE = _n(
    "page_pdp",
    "Container",
    children=[
        _n(
            "pdp_layout",
            "Grid",
            props={"columns": 2, "gap": 32},
            children=[
                _n("pdp_image", "Image", props={"src": "", "alt": ""}, bindings={"src": "product.images[0].url"}),
                _n(
                    "pdp_info",
                    "Flex",
                    props={"direction": "column", "gap": 16},
                    children=[
                        _n("pdp_title", "Heading", props={"text": "", "level": 1}, bindings={"text": "product.name"}),
                        _n(
                            "pdp_price",
                            "PriceDisplay",
                            bindings={"amount": "selected_variant.price", "currency": "store.currency"},
                        ),
                        _n("pdp_variants", "VariantSelector", bindings={"variants": "product.variants"}),
                        _n(
                            "pdp_add_to_cart",
                            "AddToCartButton",
                            props={"label": "Add to cart"},
                            actions={
                                "on_click": {
                                    "action_id": "ADD_TO_CART",
                                    "payload": {"quantity": 1, "open_cart": True},
                                    "payload_bindings": {"variant_id": "selected_variant.id"},
                                }
                            },
                        ),
                        _n("pdp_description", "Text", bindings={"text": "product.description"}),
                    ],
                ),
            ],
        ),
    ],
)

CHECKOUT_PAGE = _n(
    "page_checkout",
    "Container",
    children=[
        _n("checkout_heading", "Heading", props={"text": "Checkout", "level": 1}),
        _n(
            "checkout_submit",
            "Button",
            props={"label": "Place order"},
            actions={"on_click": {"action_id": "SUBMIT_FORM", "payload": {"form_type": "checkout"}}},
        ),
    ],
)

NAVBAR_PREFAB = _n(
    "prefab_navbar",
    "Navbar",
    props={"title": "", "links": [{"label": "Shop", "href": "/collection"}], "show_cart": True},
    bindings={"title": "store.name", "logo": "store.logo"},
    actions={"on_cart_click": {"action_id": "OPEN_CART_SIDEBAR", "payload": {"open": True}}},
)

PRODUCT_CARD_PREFAB = _n(
    "prefab_product_card",
    "ProductCard",
    bindings={
        "title": "item.name",
        "image": "item.images[0].url",
        "price": "item.price",
        "href": "item.url",
    },
    actions={"on_click": {"action_id": "NAVIGATE", "payload": {"to": "/product"}, "payload_bindings": {"to": "item.url"}}},
)

DEFAULT_DOCUMENTS: list[tuple[DocumentKind, str, dict[str, Any]]] = [
    (DocumentKind.LAYOUT, "GLOBAL_LAYOUT", GLOBAL_LAYOUT),
    (DocumentKind.PAGE, "HOME", HOME_PAGE),
    (DocumentKind.PAGE, "COLLECTION", COLLECTION_PAGE),
    (DocumentKind.PAGE, "CHECKOUT", CHECKOUT_PAGE),
    (DocumentKind.TEMPLATE, "PDP:default", PDP_TEMPLATE),
    (DocumentKind.PREFAB, "Navbar", NAVBAR_PREFAB),
    (DocumentKind.PREFAB, "ProductCard", PRODUCT_CARD_PREFAB),
]


def default_documents() -> list[tuple[DocumentKind, str, Node]]:
    """Fresh Node trees for every default document."""
    return [(kind, key, Node.from_dict(tree)) for kind, key, tree in DEFAULT_DOCUMENTS]


def default_document(kind: DocumentKind, key: str) -> Node | None:
    for doc_kind, doc_key, tree in DEFAULT_DOCUMENTS:
        if doc_kind == kind and doc_key == key:
            return Node.from_dict(tree)
    return None


def default_theme() -> dict[str, str]:
    return dict(DEFAULT_THEME)
