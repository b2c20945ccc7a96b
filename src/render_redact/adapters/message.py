"""
Structured-message adapter.

Renders schema-described messages as ``FullName{field:value, ...}`` using a
descriptor of each message type instead of runtime reflection. The bundled
adapter describes pydantic models: the full name is the model's qualified
name, field options come from ``Field(json_schema_extra=...)`` and
``Annotated`` extras, and enums render as ``EnumName(SYMBOL)``.
"""

from __future__ import annotations

import collections.abc
import enum
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel

from render_redact.engine.fields import model_field_annotations
from render_redact.engine.scalars import (
    bytes_literal,
    format_bool,
    format_float,
    format_int,
    quote_string,
)
from render_redact.engine.state import TraversalState
from render_redact.engine.traversal import Traversal
from render_redact.engine.typeinfo import (
    ANY,
    canonical_name,
    resolve_slot,
    rtype_from_annotation,
    split_annotated,
)

_LIST_ORIGINS = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
}
_MAP_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}


class FieldKind(str, Enum):
    """Kinds of message fields."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    ENUM = "enum"
    MESSAGE = "message"
    LIST = "list"
    MAP = "map"
    VALUE = "value"  # Anything else; rendered by the traversal engine


@dataclass(frozen=True)
class MessageField:
    """One field of a message descriptor.

    ``element`` describes list elements and map values, ``key`` map keys.
    ``symbols`` maps enum values to their symbol names.
    """

    name: str
    kind: FieldKind
    options: Mapping[str, Any] = field(default_factory=dict)
    enum_name: str = ""
    symbols: Mapping[Any, str] = field(default_factory=dict)
    element: MessageField | None = None
    key: MessageField | None = None
    annotation: Any = None


@dataclass(frozen=True)
class MessageDescriptor:
    """Full name and ordered fields of a message type."""

    full_name: str
    fields: tuple[MessageField, ...]


class MessageAdapter(Protocol):
    """Describes messages and reads their fields."""

    def is_message(self, value: Any) -> bool: ...

    def describe(self, message: Any) -> MessageDescriptor: ...

    def get(self, message: Any, message_field: MessageField) -> Any: ...


# bool before int
_SCALAR_KINDS: tuple[tuple[type, FieldKind], ...] = (
    (bool, FieldKind.BOOL),
    (int, FieldKind.INT),
    (float, FieldKind.FLOAT),
    (str, FieldKind.STRING),
    (bytes, FieldKind.BYTES),
)


def _describe_field(
    name: str, annotation: Any, options: Mapping[str, Any] | None = None
) -> MessageField:
    tp, _ = split_annotated(annotation)
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    options = options or {}

    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1:
            return _describe_field(name, members[0], options)
        return MessageField(name, FieldKind.VALUE, options, annotation=tp)

    if origin in _LIST_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return MessageField(name, FieldKind.VALUE, options, annotation=tp)
        element = _describe_field(name, args[0] if args else Any)
        return MessageField(name, FieldKind.LIST, options, element=element, annotation=tp)
    if origin in _MAP_ORIGINS:
        key = _describe_field(name, args[0] if args else Any)
        element = _describe_field(name, args[1] if len(args) == 2 else Any)
        return MessageField(name, FieldKind.MAP, options, element=element, key=key, annotation=tp)

    if isinstance(tp, type):
        if issubclass(tp, enum.Enum):
            symbols = {member.value: member.name for member in tp}
            return MessageField(
                name,
                FieldKind.ENUM,
                options,
                enum_name=canonical_name(tp),
                symbols=symbols,
                annotation=tp,
            )
        if issubclass(tp, BaseModel):
            return MessageField(name, FieldKind.MESSAGE, options, annotation=tp)
        for scalar, kind in _SCALAR_KINDS:
            if issubclass(tp, scalar):
                return MessageField(name, kind, options, annotation=tp)
    return MessageField(name, FieldKind.VALUE, options, annotation=tp)


class PydanticMessageAdapter:
    """Message adapter for pydantic models."""

    def __init__(self) -> None:
        self._descriptors: dict[type, MessageDescriptor] = {}

    def is_message(self, value: Any) -> bool:
        return isinstance(value, BaseModel)

    def describe(self, message: Any) -> MessageDescriptor:
        cls = type(message)
        cached = self._descriptors.get(cls)
        if cached is not None:
            return cached
        descriptor = MessageDescriptor(
            full_name=canonical_name(cls),
            fields=tuple(
                _describe_field(name, info.annotation, model_field_annotations(info))
                for name, info in cls.model_fields.items()
            ),
        )
        self._descriptors[cls] = descriptor
        return descriptor

    def get(self, message: Any, message_field: MessageField) -> Any:
        return getattr(message, message_field.name, None)


class MessageWalker:
    """Writes messages into the buffer of a Traversal."""

    def __init__(self, traversal: Traversal, adapter: MessageAdapter | None = None) -> None:
        self._traversal = traversal
        self._adapter = adapter or PydanticMessageAdapter()

    def run(self, message: Any) -> str:
        self.render_message(TraversalState(), message, False)
        return self._traversal.out.getvalue()

    def render_message(self, state: TraversalState, message: Any, masked: bool) -> None:
        t = self._traversal
        out = t.out
        if message is None:
            out.write("nil")
            return
        if not self._adapter.is_message(message):
            t.render(state, 0, message, resolve_slot(None, message), False, masked)
            return

        descriptor = self._adapter.describe(message)
        forked = state.fork_for(id(message))
        if forked is None:
            t.write_recursion(descriptor.full_name)
            return

        out.write(descriptor.full_name)
        out.write("{")
        first = True
        for message_field in descriptor.fields:
            action = t.field_action(message_field.options, masked)
            if action.remove:
                continue
            if not first:
                out.write(", ")
            first = False
            out.write(message_field.name)
            out.write(":")
            if action.replace:
                out.write(f"<{t.options.replacement_placeholder}>")
                continue
            value = self._adapter.get(message, message_field)
            self._render_value(forked, message_field, value, action.masked)
        out.write("}")

    def _render_value(
        self, state: TraversalState, message_field: MessageField, value: Any, masked: bool
    ) -> None:
        t = self._traversal
        out = t.out
        kind = message_field.kind

        if kind is FieldKind.VALUE:
            declared = (
                rtype_from_annotation(message_field.annotation)
                if message_field.annotation is not None
                else None
            )
            t.render(state, 0, value, resolve_slot(declared, value), False, masked)
            return
        if value is None:
            out.write("nil")
            return
        if kind is FieldKind.MESSAGE:
            self.render_message(state, value, masked)
            return
        if kind in (FieldKind.LIST, FieldKind.MAP):
            forked = state.fork_for(id(value))
            if forked is None:
                t.write_recursion(kind.value)
                return
            if kind is FieldKind.LIST:
                self._render_list(forked, message_field, value, masked)
            else:
                self._render_map(forked, message_field, value, masked)
            return

        writer = t.value_writer(masked)
        if kind is FieldKind.ENUM:
            symbol = value.name if isinstance(value, Enum) else message_field.symbols.get(value)
            out.write(message_field.enum_name)
            out.write("(")
            writer.write(symbol if symbol is not None else str(value))
            out.write(")")
        elif kind is FieldKind.STRING:
            out.write(quote_string(writer.transform(str(value))))
        elif kind is FieldKind.BYTES:
            opening, content, closing = bytes_literal(value)
            out.write(opening)
            writer.write(content)
            out.write(closing)
        elif kind is FieldKind.BOOL:
            writer.write(format_bool(value))
        elif kind is FieldKind.INT:
            writer.write(format_int(value))
        else:
            writer.write(format_float(value))

    def _render_list(
        self, state: TraversalState, message_field: MessageField, value: Any, masked: bool
    ) -> None:
        element = message_field.element or MessageField(message_field.name, FieldKind.VALUE)
        items = value
        if isinstance(value, (set, frozenset)):
            items = self._traversal.keys.sort(value, ANY)
        out = self._traversal.out
        out.write("{")
        for i, item in enumerate(items):
            if i:
                out.write(", ")
            self._render_value(state, element, item, masked)
        out.write("}")

    def _render_map(
        self, state: TraversalState, message_field: MessageField, value: Any, masked: bool
    ) -> None:
        key_field = message_field.key or MessageField(message_field.name, FieldKind.VALUE)
        element = message_field.element or MessageField(message_field.name, FieldKind.VALUE)
        key_type = (
            rtype_from_annotation(key_field.annotation)
            if key_field.annotation is not None
            else ANY
        )
        out = self._traversal.out
        out.write("{")
        for i, key in enumerate(self._traversal.keys.sort(list(value.keys()), key_type)):
            if i:
                out.write(", ")
            self._render_value(state, key_field, key, masked)
            out.write(":")
            self._render_value(state, element, value[key], masked)
        out.write("}")
