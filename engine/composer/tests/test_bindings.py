"""
Composer -- Binding Resolution Tests

Covers:
  - path parsing into key / index tokens, malformed paths
  - resolution through dicts and lists
  - missing keys, out-of-range indexes, None mid-walk → UNRESOLVED
  - a present None leaf resolves to None
  - forbidden keys never resolve, regardless of context
  - indexes only apply to lists, keys only to mappings
  - resolve_bindings omits unresolved keys
  - payload bindings and repeater scope
  - path validation messages
"""

import pytest

from engine.composer.bindings import (
    UNRESOLVED,
    IndexToken,
    KeyToken,
    parse_binding_path,
    resolve_binding_path,
    resolve_bindings,
    resolve_payload_bindings,
    validate_binding_path,
    with_scope,
)

CTX = {
    "store": {"name": "Acme", "currency": "EUR", "logo": None},
    "product": {
        "name": "Mug",
        "variants": [{"id": "v1", "price": 1999}, {"id": "v2", "price": 2499}],
        "tags": ["ceramic", "blue"],
    },
    "cart": {"items": []},
}

# ============================================================================
# Parsing
# ============================================================================


class TestParse:
    def test_simple(self):
        assert parse_binding_path("store.name") == (KeyToken("store"), KeyToken("name"))

    def test_indexes(self):
        assert parse_binding_path("product.variants[0].price") == (
            KeyToken("product"),
            KeyToken("variants"),
            IndexToken(0),
            KeyToken("price"),
        )

    def test_consecutive_indexes(self):
        assert parse_binding_path("grid[1][2]") == (KeyToken("grid"), IndexToken(1), IndexToken(2))

    @pytest.mark.parametrize(
        "path",
        ["", "store..name", "store.name\n", ".store", "store.", "[0]", "a[x]", "a[-1]", "a[0", "1abc", "a.b()", "a b"]
        + [None, 42],
    )
    def test_malformed(self, path):
        assert parse_binding_path(path) is None


# ============================================================================
# resolve_binding_path
# ============================================================================


class TestResolvePath:
    def test_variant_price(self):
        assert resolve_binding_path("product.variants[0].price", CTX) == 1999

    def test_empty_variants_unresolved(self):
        ctx = {"product": {"variants": []}}
        assert resolve_binding_path("product.variants[0].price", ctx) is UNRESOLVED

    def test_root_value(self):
        assert resolve_binding_path("store", CTX) == CTX["store"]

    def test_missing_key(self):
        assert resolve_binding_path("store.phone", CTX) is UNRESOLVED

    def test_missing_root(self):
        assert resolve_binding_path("collection.name", CTX) is UNRESOLVED

    def test_out_of_range(self):
        assert resolve_binding_path("product.tags[5]", CTX) is UNRESOLVED

    def test_none_leaf_resolves_to_none(self):
        assert resolve_binding_path("store.logo", CTX) is None

    def test_none_mid_walk(self):
        assert resolve_binding_path("store.logo.url", CTX) is UNRESOLVED

    def test_index_on_dict(self):
        assert resolve_binding_path("store[0]", CTX) is UNRESOLVED

    def test_index_on_string(self):
        assert resolve_binding_path("store.name[0]", CTX) is UNRESOLVED

    def test_key_on_list(self):
        assert resolve_binding_path("product.variants.length", CTX) is UNRESOLVED

    def test_key_on_scalar(self):
        assert resolve_binding_path("store.name.upper", CTX) is UNRESOLVED

    def test_malformed_path(self):
        assert resolve_binding_path("store..name", CTX) is UNRESOLVED

    @pytest.mark.parametrize(
        "ctx",
        [
            {},
            CTX,
            {"__proto__": {"polluted": True}},
            {"__proto__": {"polluted": "yes"}, "constructor": {"prototype": {}}},
        ],
    )
    def test_proto_never_resolves(self, ctx):
        assert resolve_binding_path("__proto__.polluted", ctx) is UNRESOLVED

    @pytest.mark.parametrize("path", ["store.constructor", "a.prototype.x", "constructor"])
    def test_forbidden_keys(self, path):
        ctx = {"store": {"constructor": 1}, "a": {"prototype": {"x": 1}}, "constructor": 2}
        assert resolve_binding_path(path, ctx) is UNRESOLVED

    def test_deterministic(self):
        assert resolve_binding_path("product.tags[1]", CTX) == resolve_binding_path("product.tags[1]", CTX)

    def test_unresolved_is_falsy_singleton(self):
        assert not UNRESOLVED
        assert repr(UNRESOLVED) == "UNRESOLVED"
        assert type(UNRESOLVED)() is UNRESOLVED


# ============================================================================
# resolve_bindings
# ============================================================================


class TestResolveBindings:
    def test_overlay_only_has_resolved_keys(self):
        overlay = resolve_bindings(
            {"title": "product.name", "price": "product.variants[9].price", "bad": "__proto__.x"},
            CTX,
        )
        assert overlay == {"title": "Mug"}

    def test_none_value_is_kept(self):
        assert resolve_bindings({"logo": "store.logo"}, CTX) == {"logo": None}

    def test_empty(self):
        assert resolve_bindings({}, CTX) == {}
        assert resolve_bindings(None, CTX) == {}

    def test_does_not_mutate_context(self):
        ctx = {"product": {"name": "Mug"}}
        resolve_bindings({"title": "product.name"}, ctx)
        assert ctx == {"product": {"name": "Mug"}}


class TestPayloadBindings:
    def test_overlays_literal_payload(self):
        payload = resolve_payload_bindings(
            {"quantity": 1, "variant_id": "fallback"},
            {"variant_id": "product.variants[1].id"},
            CTX,
        )
        assert payload == {"quantity": 1, "variant_id": "v2"}

    def test_unresolved_keeps_literal(self):
        payload = resolve_payload_bindings({"variant_id": "fallback"}, {"variant_id": "nope.id"}, CTX)
        assert payload == {"variant_id": "fallback"}

    def test_literal_payload_not_mutated(self):
        literal = {"quantity": 1}
        resolve_payload_bindings(literal, {"variant_id": "product.variants[0].id"}, CTX)
        assert literal == {"quantity": 1}


class TestScope:
    def test_item_and_index(self):
        ctx = with_scope(CTX, {"name": "Plate", "images": [{"url": "p.png"}]}, 3)
        assert resolve_binding_path("item.name", ctx) == "Plate"
        assert resolve_binding_path("item.images[0].url", ctx) == "p.png"
        assert resolve_binding_path("index", ctx) == 3

    def test_scope_keeps_context_roots(self):
        ctx = with_scope(CTX, {}, 0)
        assert resolve_binding_path("store.name", ctx) == "Acme"

    def test_without_scope_item_is_unresolved(self):
        assert resolve_binding_path("item.name", CTX) is UNRESOLVED

    def test_with_scope_copies(self):
        with_scope(CTX, {}, 0)
        assert "__scope" not in CTX


# ============================================================================
# validate_binding_path
# ============================================================================


class TestValidatePath:
    def test_valid(self):
        assert validate_binding_path("product.variants[0].price") is None

    def test_empty(self):
        assert validate_binding_path("") == "Path must be a non-empty string"

    def test_not_string(self):
        assert validate_binding_path(5) == "Path must be a non-empty string"

    def test_expression(self):
        assert "Expressions" in validate_binding_path("a ? b : c")

    def test_function_call(self):
        assert "function calls" in validate_binding_path("store.name()")

    def test_forbidden(self):
        assert validate_binding_path("store.__proto__") == "Forbidden key: __proto__"

    def test_bad_format(self):
        assert validate_binding_path("store..name") == "Invalid path format"

    def test_trailing_newline(self):
        assert validate_binding_path("store.name\n") == "Invalid path format"
        assert resolve_binding_path("store.name\n", {"store": {"name": "S"}}) is UNRESOLVED
