"""
Storefront Composer — Binding Resolution

Resolves declarative binding paths against a runtime context.

A path looks like `product.variants[0].price`: an identifier followed by
any number of `.identifier` or `[index]` segments. It is parsed into a
tuple of KeyToken / IndexToken and walked against the context.

Resolution never raises. Anything ambiguous (malformed path, missing key,
index out of range, None mid-walk, forbidden key, wrong container type)
yields UNRESOLVED, and resolve_bindings simply leaves that prop out so the
node's static value stays visible.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

FORBIDDEN_KEYS: frozenset[str] = frozenset(
    {
        "__proto__",
        "constructor",
        "prototype",
        "__defineGetter__",
        "__defineSetter__",
        "__lookupGetter__",
        "__lookupSetter__",
    }
)

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
_PATH_RE = re.compile(rf"{_IDENTIFIER}(?:\.{_IDENTIFIER}|\[\d+\])*")
_SEGMENT_RE = re.compile(rf"\.?({_IDENTIFIER})|\[(\d+)\]")
_EXPRESSION_CHARS = set("()?:+-*/=!&|<> ")

SCOPE_KEY = "__scope"


class _Unresolved:
    """Sentinel for a binding that did not resolve."""

    _instance: _Unresolved | None = None

    def __new__(cls) -> _Unresolved:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = _Unresolved()


@dataclass(frozen=True)
class KeyToken:
    name: str


@dataclass(frozen=True)
class IndexToken:
    index: int


Token = KeyToken | IndexToken


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_binding_path(path: str) -> tuple[Token, ...] | None:
    """
    Parse a path into tokens. Returns None if the path is malformed.

      "store.name"                  → (Key store, Key name)
      "product.variants[0].price"   → (Key product, Key variants, Index 0, Key price)
    """
    if not isinstance(path, str) or not _PATH_RE.fullmatch(path):
        return None
    tokens: list[Token] = []
    for key, index in _SEGMENT_RE.findall(path):
        tokens.append(KeyToken(key) if key else IndexToken(int(index)))
    return tuple(tokens)


def validate_binding_path(path: Any) -> str | None:
    """Return an error message for an unusable path, or None if it is fine."""
    if not isinstance(path, str) or not path:
        return "Path must be a non-empty string"
    if _EXPRESSION_CHARS & set(path):
        return "Expressions and function calls are not allowed"
    tokens = parse_binding_path(path)
    if tokens is None:
        return "Invalid path format"
    for token in tokens:
        if isinstance(token, KeyToken) and token.name in FORBIDDEN_KEYS:
            return f"Forbidden key: {token.name}"
    return None


# ---------------------------------------------------------------------------
# Walking
# ---------------------------------------------------------------------------


def _step(current: Any, token: Token) -> Any:
    if isinstance(token, KeyToken):
        if token.name in FORBIDDEN_KEYS or not isinstance(current, Mapping):
            return UNRESOLVED
        return current.get(token.name, UNRESOLVED)

    # IndexToken: only real sequences, never strings
    if isinstance(current, (str, bytes)) or not isinstance(current, Sequence):
        return UNRESOLVED
    if token.index >= len(current):
        return UNRESOLVED
    return current[token.index]


def walk_tokens(value: Any, tokens: Sequence[Token]) -> Any:
    current = value
    for token in tokens:
        if current is None or current is UNRESOLVED:
            return UNRESOLVED
        current = _step(current, token)
    return current


def resolve_binding_path(path: str, context: Mapping[str, Any]) -> Any:
    """
    Resolve one path against the context.

    Returns the value found (which may be None if the context holds None
    there) or UNRESOLVED.
    """
    tokens = parse_binding_path(path)
    if not tokens:
        return UNRESOLVED

    first = tokens[0]
    scope = context.get(SCOPE_KEY) if isinstance(context, Mapping) else None
    if isinstance(scope, Mapping) and isinstance(first, KeyToken) and first.name in ("item", "index"):
        return walk_tokens(scope, tokens)

    return walk_tokens(context, tokens)


def resolve_bindings(bindings: Mapping[str, str], context: Mapping[str, Any]) -> dict[str, Any]:
    """Props overlay holding only the bindings that resolved."""
    overlay: dict[str, Any] = {}
    for prop_key, path in (bindings or {}).items():
        value = resolve_binding_path(path, context)
        if value is not UNRESOLVED:
            overlay[prop_key] = value
    return overlay


def resolve_payload_bindings(
    payload: Mapping[str, Any] | None,
    payload_bindings: Mapping[str, str] | None,
    context: Mapping[str, Any],
) -> dict[str, Any]:
    """Copy of payload with any resolved payload bindings laid over it."""
    resolved = dict(payload or {})
    resolved.update(resolve_bindings(payload_bindings or {}, context))
    return resolved


def with_scope(context: Mapping[str, Any], item: Any, index: int) -> dict[str, Any]:
    """Context copy in which `item` and `index` resolve to a repeater's current entry."""
    scoped = dict(context)
    scoped[SCOPE_KEY] = {"item": item, "index": index}
    return scoped
