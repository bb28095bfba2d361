"""
Composer -- Style Object Tests

Covers:
  - allowlist filtering
  - breakpoint cascade and state layer
  - validate_style_object error messages
  - breakpoint_for_width thresholds
"""

import pytest

from engine.composer.styles import (
    breakpoint_for_width,
    filter_safe_properties,
    is_safe_property,
    resolve_styles,
    validate_style_object,
)

STYLES = {
    "base": {"display": "flex", "gap": 8, "color": "#111"},
    "breakpoints": {"sm": {"gap": 12}, "md": {"gap": 16, "flexDirection": "row"}, "xl": {"gap": 32}},
    "states": {"hover": {"color": "#f00"}},
}


class TestAllowlist:
    def test_safe(self):
        assert is_safe_property("backgroundColor")
        assert not is_safe_property("behavior")

    def test_filter_drops_unsafe_and_none(self):
        assert filter_safe_properties({"color": "red", "behavior": "x", "opacity": None}) == {"color": "red"}

    def test_filter_non_dict(self):
        assert filter_safe_properties(None) == {}
        assert filter_safe_properties("color: red") == {}


class TestResolveStyles:
    def test_base_only(self):
        assert resolve_styles(STYLES) == {"display": "flex", "gap": 8, "color": "#111"}

    def test_cascades_up_to_breakpoint(self):
        resolved = resolve_styles(STYLES, breakpoint="lg")
        assert resolved["gap"] == 16
        assert resolved["flexDirection"] == "row"

    def test_xl_wins(self):
        assert resolve_styles(STYLES, breakpoint="xl")["gap"] == 32

    def test_state_on_top(self):
        assert resolve_styles(STYLES, breakpoint="md", state="hover")["color"] == "#f00"

    def test_unknown_breakpoint_is_base(self):
        assert resolve_styles(STYLES, breakpoint="tv")["gap"] == 8

    def test_empty(self):
        assert resolve_styles(None) == {}
        assert resolve_styles({}) == {}

    def test_malformed_layers_ignored(self):
        assert resolve_styles({"base": {"gap": 1}, "breakpoints": "md", "states": ["hover"]}, "md", "hover") == {
            "gap": 1
        }

    def test_unsafe_dropped(self):
        assert resolve_styles({"base": {"behavior": "url(x)", "color": "red"}}) == {"color": "red"}


class TestValidateStyles:
    def test_valid(self):
        assert validate_style_object(STYLES) == []

    def test_not_object(self):
        assert validate_style_object("red") == ["Styles must be an object"]

    def test_unknown_layer(self):
        assert validate_style_object({"print": {}}) == ["Unknown style layer: print"]

    def test_unsafe_property(self):
        assert validate_style_object({"base": {"behavior": "x"}}) == ['Unsafe property "behavior" in base']

    def test_unknown_breakpoint(self):
        assert validate_style_object({"breakpoints": {"xxl": {}}}) == ["Unknown breakpoint: xxl"]

    def test_unknown_state(self):
        assert validate_style_object({"states": {"visited": {}}}) == ["Unknown state: visited"]

    def test_nested_unsafe(self):
        errors = validate_style_object({"breakpoints": {"md": {"expression": "1"}}})
        assert errors == ['Unsafe property "expression" in breakpoints.md']

    def test_layer_must_be_object(self):
        assert validate_style_object({"base": []}) == ["base must be an object"]


@pytest.mark.parametrize(
    "width,expected",
    [(0, "base"), (639, "base"), (640, "sm"), (800, "md"), (1024, "lg"), (1920, "xl")],
)
def test_breakpoint_for_width(width, expected):
    assert breakpoint_for_width(width) == expected
