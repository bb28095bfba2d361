"""
Storefront Composer — Style Objects

A node's styles are layered:

    {
        "base": {"display": "flex", "gap": 16},
        "breakpoints": {"md": {"gap": 24}},
        "states": {"hover": {"opacity": 0.8}},
    }

Only properties on the safe allowlist may be set; everything else is
rejected at save time and dropped at resolve time.
"""

from __future__ import annotations

from typing import Any

BREAKPOINTS: tuple[str, ...] = ("base", "sm", "md", "lg", "xl")
BREAKPOINT_MIN_WIDTHS: dict[str, int] = {"sm": 640, "md": 768, "lg": 1024, "xl": 1280}
STATES: set[str] = {"hover", "focus", "active"}
STYLE_LAYERS: set[str] = {"base", "breakpoints", "states"}

SAFE_CSS_PROPERTIES: frozenset[str] = frozenset(
    {
        # Layout
        "display", "position", "top", "right", "bottom", "left",
        "width", "height", "minWidth", "minHeight", "maxWidth", "maxHeight",
        "margin", "marginTop", "marginRight", "marginBottom", "marginLeft",
        "padding", "paddingTop", "paddingRight", "paddingBottom", "paddingLeft",
        "overflow", "overflowX", "overflowY",
        # Flexbox
        "flexDirection", "flexWrap", "justifyContent", "alignItems", "alignContent",
        "flex", "flexGrow", "flexShrink", "flexBasis", "alignSelf", "order",
        "gap", "rowGap", "columnGap",
        # Grid
        "gridTemplateColumns", "gridTemplateRows", "gridColumn", "gridRow",
        "gridAutoFlow", "gridAutoColumns", "gridAutoRows", "placeItems", "placeContent",
        # Typography
        "fontFamily", "fontSize", "fontWeight", "fontStyle", "lineHeight",
        "letterSpacing", "textAlign", "textDecoration", "textTransform",
        "whiteSpace", "wordBreak", "wordSpacing", "textOverflow",
        # Colour
        "color", "backgroundColor", "opacity",
        # Borders
        "border", "borderWidth", "borderStyle", "borderColor",
        "borderTop", "borderRight", "borderBottom", "borderLeft",
        "borderRadius", "borderTopLeftRadius", "borderTopRightRadius",
        "borderBottomLeftRadius", "borderBottomRightRadius",
        # Effects
        "boxShadow", "textShadow", "transform", "transformOrigin",
        "transition", "transitionProperty", "transitionDuration",
        "transitionTimingFunction", "transitionDelay",
        "visibility", "zIndex", "cursor", "pointerEvents",
        "objectFit", "objectPosition", "aspectRatio", "filter", "backdropFilter",
    }
)  # fmt: skip


def is_safe_property(name: str) -> bool:
    return name in SAFE_CSS_PROPERTIES


def filter_safe_properties(layer: dict[str, Any] | None) -> dict[str, Any]:
    if not isinstance(layer, dict):
        return {}
    return {k: v for k, v in layer.items() if k in SAFE_CSS_PROPERTIES and v is not None}


def breakpoint_for_width(width: int) -> str:
    """Widest breakpoint whose minimum width fits."""
    current = "base"
    for name in BREAKPOINTS[1:]:
        if width >= BREAKPOINT_MIN_WIDTHS[name]:
            current = name
    return current


def _check_layer(layer: Any, where: str, errors: list[str]) -> None:
    if not isinstance(layer, dict):
        errors.append(f"{where} must be an object")
        return
    for prop in layer:
        if not is_safe_property(prop):
            errors.append(f'Unsafe property "{prop}" in {where}')


def validate_style_object(styles: Any) -> list[str]:
    """Return style errors. Empty list = valid."""
    errors: list[str] = []
    if not isinstance(styles, dict):
        return ["Styles must be an object"]

    for layer in styles:
        if layer not in STYLE_LAYERS:
            errors.append(f"Unknown style layer: {layer}")

    if "base" in styles:
        _check_layer(styles["base"], "base", errors)

    breakpoints = styles.get("breakpoints") or {}
    if not isinstance(breakpoints, dict):
        errors.append("breakpoints must be an object")
    else:
        for name, layer in breakpoints.items():
            if name not in BREAKPOINT_MIN_WIDTHS:
                errors.append(f"Unknown breakpoint: {name}")
                continue
            _check_layer(layer, f"breakpoints.{name}", errors)

    states = styles.get("states") or {}
    if not isinstance(states, dict):
        errors.append("states must be an object")
    else:
        for name, layer in states.items():
            if name not in STATES:
                errors.append(f"Unknown state: {name}")
                continue
            _check_layer(layer, f"states.{name}", errors)

    return errors


def resolve_styles(styles: dict[str, Any] | None, breakpoint: str = "base", state: str | None = None) -> dict[str, Any]:
    """
    Flatten a style object for one breakpoint and optional interaction state.

    Cascades base → sm → md → lg → xl up to the requested breakpoint, then
    applies the state layer on top.
    """
    if not styles:
        return {}

    resolved = filter_safe_properties(styles.get("base"))
    breakpoints = styles.get("breakpoints")
    if isinstance(breakpoints, dict):
        stop = BREAKPOINTS.index(breakpoint) if breakpoint in BREAKPOINTS else 0
        for name in BREAKPOINTS[1 : stop + 1]:
            resolved.update(filter_safe_properties(breakpoints.get(name)))

    states = styles.get("states")
    if state and isinstance(states, dict):
        resolved.update(filter_safe_properties(states.get(state)))
    return resolved
