"""
Recursive traversal engine.

Walks a value graph by type category and writes its text form, consulting
the type formatter registry, the redaction policy, the key canonicalizer and
the masking writer along the way. One Traversal serves exactly one top-level
call: it owns the output buffer and the per-call descriptor caches.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable
from typing import Any

from render_redact.engine.fields import FieldResolver
from render_redact.engine.keys import KeyCanonicalizer
from render_redact.engine.masking import MaskingPolicy, MaskWriter
from render_redact.engine.redaction import FieldAction, RedactionPolicy
from render_redact.engine.scalars import (
    bytes_literal,
    format_bool,
    format_complex,
    format_float,
    format_int,
    quote_string,
)
from render_redact.engine.state import TraversalState
from render_redact.engine.typefmt import type_name, type_string, write_type
from render_redact.engine.typeinfo import (
    ANY,
    BUILTIN_NAMES,
    Kind,
    RType,
    is_anon,
    resolve_slot,
    rtype_from_annotation,
    type_of,
)
from render_redact.protocol.types import RenderOptions
from render_redact.registry.formatters import TypeFormatterRegistry

# Kinds whose values are checked against the traversal chain
_TRACKED_KINDS = frozenset({Kind.STRUCT, Kind.ARRAY, Kind.SEQUENCE, Kind.MAP, Kind.SET})
# Map key kinds rendered without a type prefix
_IMPLICIT_KEY_KINDS = frozenset({Kind.INT, Kind.FLOAT, Kind.STRING})

Handler = Callable[[TraversalState, int, Any, RType, bool, bool], None]


class Traversal:
    """State of one render call."""

    def __init__(
        self,
        options: RenderOptions,
        formatters: TypeFormatterRegistry | None = None,
        *,
        redact: bool = False,
    ) -> None:
        self.options = options
        self.redacting = redact
        self.out = io.StringIO()
        self.policy = RedactionPolicy(options.redact_tag)
        self.fields = FieldResolver()
        self.keys = KeyCanonicalizer(self.fields)
        self._formatters = formatters or TypeFormatterRegistry(options.type_formatters)
        self._masking = MaskingPolicy.from_options(options)
        self._handlers: dict[Kind, Handler] = {
            Kind.BOOL: self._render_scalar,
            Kind.INT: self._render_scalar,
            Kind.FLOAT: self._render_scalar,
            Kind.COMPLEX: self._render_scalar,
            Kind.STRING: self._render_scalar,
            Kind.BYTES: self._render_scalar,
            Kind.ENUM: self._render_scalar,
            Kind.STRUCT: self._render_struct,
            Kind.ARRAY: self._render_array,
            Kind.SEQUENCE: self._render_sequence,
            Kind.SET: self._render_set,
            Kind.MAP: self._render_map,
            Kind.REFERENCE: self._render_reference,
            Kind.INTERFACE: self._render_interface,
            Kind.CHANNEL: self._render_handle,
            Kind.FUNCTION: self._render_handle,
            Kind.OPAQUE: self._render_handle,
        }

    def run(self, value: Any, as_type: Any = None, masked: bool = False) -> str:
        """Render a top-level value and return the text.

        Args:
            value: The value to render
            as_type: Optional annotation declaring the value's type
            masked: Mask every value, as if the root carried a MASK directive

        Returns:
            The rendered text
        """
        declared = rtype_from_annotation(as_type) if as_type is not None else None
        self.render(TraversalState(), 0, value, resolve_slot(declared, value), False, masked)
        return self.out.getvalue()

    def value_writer(self, masked: bool) -> MaskWriter:
        """Writer for value text; masks only while redacting."""
        return MaskWriter(self.out, self._masking, enabled=masked and self.redacting)

    def field_action(self, annotations: Any, masked: bool) -> FieldAction:
        if not self.redacting:
            return FieldAction(None, masked)
        return self.policy.decide(annotations, masked)

    def write_recursion(self, type_text: str) -> None:
        self.out.write(f"<{self.options.recursion_placeholder}({type_text})>")

    def render(
        self,
        state: TraversalState,
        ptrs: int,
        obj: Any,
        vt: RType,
        implicit: bool,
        masked: bool,
    ) -> None:
        """Write ``obj`` of type ``vt`` reached through ``ptrs`` references."""
        kind = vt.kind
        if kind is Kind.INVALID:
            self.out.write("nil")
            return

        if kind is not Kind.INTERFACE and self._render_override(ptrs, obj, vt, implicit):
            return

        if kind in _TRACKED_KINDS and obj is not None:
            forked = state.fork_for(id(obj))
            if forked is None:
                self._render_cycle(ptrs, vt, implicit)
                return
            state = forked

        self._handlers[kind](state, ptrs, obj, vt, implicit, masked)

    def _render_override(self, ptrs: int, obj: Any, vt: RType, implicit: bool) -> bool:
        text = self._formatters.format(type_name(vt), obj)
        if text is None:
            return False
        if not implicit:
            write_type(self.out, ptrs, vt)
        self.out.write(f"({text})")
        return True

    def _render_cycle(self, ptrs: int, vt: RType, implicit: bool) -> None:
        if implicit:
            self.write_recursion("")
        elif ptrs and vt.kind in (Kind.STRUCT, Kind.ARRAY):
            self.write_recursion("*" * ptrs + type_string(vt))
        else:
            buf = io.StringIO()
            write_type(buf, ptrs, vt)
            self.write_recursion(buf.getvalue())

    def _render_reference(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        ptrs += 1
        if obj is None:
            if not implicit:
                write_type(self.out, ptrs, vt)
            self.out.write("(nil)")
            return
        target = resolve_slot(vt.elem, obj) if vt.elem is not None else type_of(obj)
        self.render(state, ptrs, obj, target, False, masked)

    def _render_interface(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        if obj is None:
            write_type(self.out, ptrs, vt)
            self.out.write("(nil)")
            return
        self.render(state, ptrs, obj, type_of(obj), False, masked)

    def _render_struct(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        out = self.out
        if not implicit:
            write_type(out, ptrs, vt)
        struct_anon = not vt.name
        out.write("{")
        first = True
        for desc, value in self.fields.fields_of(obj):
            action = self.field_action(desc.annotations, masked)
            if action.remove:
                continue
            if not first:
                out.write(", ")
            first = False

            slot = resolve_slot(desc.declared, value)
            anon = struct_anon and is_anon(desc.declared or slot)
            if not anon:
                out.write(desc.name)
                out.write(":")
            if action.replace:
                out.write(f"<{self.options.replacement_placeholder}>")
                continue
            self.render(state, 0, value, slot, anon, action.masked)
        out.write("}")

    def _render_items(
        self,
        state: TraversalState,
        ptrs: int,
        vt: RType,
        implicit: bool,
        masked: bool,
        items: Iterable[tuple[RType, Any]],
    ) -> None:
        out = self.out
        if not implicit:
            write_type(out, ptrs, vt)
        out.write("{")
        for i, (declared, item) in enumerate(items):
            if i:
                out.write(", ")
            anon = not vt.name and is_anon(declared)
            self.render(state, 0, item, resolve_slot(declared, item), anon, masked)
        out.write("}")

    def _write_nil_container(self, ptrs: int, vt: RType, implicit: bool) -> None:
        if implicit:
            self.out.write("nil")
            return
        write_type(self.out, ptrs, vt)
        self.out.write("(nil)")

    def _render_array(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        positions = vt.items
        items = (
            (positions[i] if positions is not None and i < len(positions) else ANY, item)
            for i, item in enumerate(obj)
        )
        self._render_items(state, ptrs, vt, implicit, masked, items)

    def _render_sequence(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        if obj is None:
            self._write_nil_container(ptrs, vt, implicit)
            return
        elem = vt.elem or ANY
        self._render_items(state, ptrs, vt, implicit, masked, ((elem, item) for item in obj))

    def _render_set(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        if obj is None:
            self._write_nil_container(ptrs, vt, implicit)
            return
        elem = vt.elem or ANY
        ordered = self.keys.sort(obj, elem)
        self._render_items(state, ptrs, vt, implicit, masked, ((elem, item) for item in ordered))

    def _render_map(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        out = self.out
        if not implicit:
            write_type(out, ptrs, vt)
        if obj is None:
            out.write("(nil)")
            return

        key_type = vt.key or ANY
        value_type = vt.elem or ANY
        key_anon = key_type.kind in _IMPLICIT_KEY_KINDS
        value_anon = not vt.name and is_anon(value_type)

        out.write("{")
        for i, key in enumerate(self.keys.sort(list(obj.keys()), key_type)):
            if i:
                out.write(", ")
            self.render(state, 0, key, resolve_slot(key_type, key), key_anon, masked)
            out.write(":")
            value = obj[key]
            self.render(state, 0, value, resolve_slot(value_type, value), value_anon, masked)
        out.write("}")

    def _render_handle(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        write_type(self.out, ptrs, vt)
        self.out.write("(")
        self.options.pointer_renderer(self.value_writer(masked), id(obj))
        self.out.write(")")

    def _render_scalar(
        self, state: TraversalState, ptrs: int, obj: Any, vt: RType, implicit: bool, masked: bool
    ) -> None:
        out = self.out
        kind = vt.kind
        implicit = implicit or (ptrs == 0 and BUILTIN_NAMES.get(kind) == type_name(vt))
        if not implicit:
            write_type(out, ptrs, vt)
            out.write("(")

        writer = self.value_writer(masked)
        if kind is Kind.STRING:
            out.write(quote_string(writer.transform(str.__str__(obj))))
        elif kind is Kind.BYTES:
            opening, content, closing = bytes_literal(obj)
            out.write(opening)
            writer.write(content)
            out.write(closing)
        elif kind is Kind.BOOL:
            writer.write(format_bool(obj))
        elif kind is Kind.INT:
            writer.write(format_int(obj))
        elif kind is Kind.FLOAT:
            writer.write(format_float(obj))
        elif kind is Kind.COMPLEX:
            writer.write(format_complex(obj))
        else:
            writer.write(obj.name if obj.name is not None else str(obj.value))

        if not implicit:
            out.write(")")
