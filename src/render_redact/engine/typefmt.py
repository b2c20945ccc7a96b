"""Type prefix formatting."""

from __future__ import annotations

import io
from typing import TextIO

from render_redact.engine.typeinfo import ANY, Kind, RType

# Kinds whose prefix is always parenthesised
_HANDLE_KINDS = frozenset({Kind.CHANNEL, Kind.FUNCTION, Kind.OPAQUE})


def write_type(out: TextIO, depth: int, t: RType) -> None:
    """Write the type prefix of ``t`` reached through ``depth`` references."""
    parens = depth > 0 or t.kind in _HANDLE_KINDS
    if parens:
        out.write("(")
        out.write("*" * depth)
    out.write(_type_text(t, depth))
    if parens:
        out.write(")")


def type_string(t: RType) -> str:
    """Return the depth-zero type prefix of ``t``."""
    buf = io.StringIO()
    write_type(buf, 0, t)
    return buf.getvalue()


def type_name(t: RType) -> str:
    """Return the unparenthesised type text, used as the formatter lookup key."""
    return _type_text(t, 0)


def _type_text(t: RType, depth: int) -> str:
    kind = t.kind
    if kind is Kind.REFERENCE:
        prefix = "*" if depth == 0 else ""
        return prefix + type_string(t.elem or ANY)
    if kind is Kind.INTERFACE:
        return t.name or "Any"
    if kind is Kind.INVALID:
        return "None"
    if t.name:
        return t.name
    if kind is Kind.ARRAY:
        if t.items is None:
            return "tuple"
        if not t.items:
            return "tuple[()]"
        return "tuple[" + ", ".join(type_string(i) for i in t.items) + "]"
    if kind is Kind.SEQUENCE:
        base = t.pytype.__name__ if t.pytype is not None else "list"
        if t.elem is None:
            return base
        if base == "tuple":
            return f"tuple[{type_string(t.elem)}, ...]"
        return f"{base}[{type_string(t.elem)}]"
    if kind is Kind.SET:
        base = t.pytype.__name__ if t.pytype is not None else "set"
        if t.elem is None:
            return base
        return f"{base}[{type_string(t.elem)}]"
    if kind is Kind.MAP:
        if t.key is None and t.elem is None:
            return "dict"
        return f"dict[{type_string(t.key or ANY)}, {type_string(t.elem or ANY)}]"
    if kind is Kind.STRUCT:
        if t.fields is None:
            return "namespace"
        members = ", ".join(f"{n}: {type_string(i)}" for n, i in zip(t.fields, t.items or ()))
        return f"namespace({members})"
    return t.pytype.__name__ if t.pytype is not None else kind.value
