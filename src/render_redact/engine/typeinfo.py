"""
Runtime type descriptors for the traversal engine.

Every rendered position is described by an RType: the category the engine
dispatches on, the canonical type name, and the element, key and position
types of containers. Types come from annotations when a slot declares one and
from the value's class otherwise.
"""

from __future__ import annotations

import asyncio
import collections.abc
import dataclasses
import enum
import functools
import inspect
import queue
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel


class Kind(str, Enum):
    """Closed set of runtime type categories."""

    INVALID = "invalid"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    COMPLEX = "complex"
    STRING = "string"
    BYTES = "bytes"
    ENUM = "enum"
    STRUCT = "struct"
    ARRAY = "array"
    SEQUENCE = "sequence"
    MAP = "map"
    SET = "set"
    REFERENCE = "reference"
    INTERFACE = "interface"
    CHANNEL = "channel"
    FUNCTION = "function"
    OPAQUE = "opaque"


# Builtin spelling of each scalar category
BUILTIN_NAMES: dict[Kind, str] = {
    Kind.BOOL: "bool",
    Kind.INT: "int",
    Kind.FLOAT: "float",
    Kind.COMPLEX: "complex",
    Kind.STRING: "str",
    Kind.BYTES: "bytes",
}
BUILTIN_NAME_SET = frozenset(BUILTIN_NAMES.values())

SCALAR_KINDS = frozenset(
    {Kind.BOOL, Kind.INT, Kind.FLOAT, Kind.COMPLEX, Kind.STRING, Kind.BYTES, Kind.ENUM}
)
NILLABLE_KINDS = frozenset({Kind.INVALID, Kind.SEQUENCE, Kind.MAP, Kind.SET, Kind.INTERFACE})


@dataclass(frozen=True)
class RType:
    """Type of one rendered position.

    ``name`` is empty for structural types (list[int], dict, tuple, references,
    SimpleNamespace). ``elem`` is the reference target, sequence or set element,
    or map value; ``items`` holds per-position tuple types or namespace field
    types, with ``fields`` naming the latter.
    """

    kind: Kind
    name: str = ""
    pytype: type | None = None
    elem: RType | None = None
    key: RType | None = None
    items: tuple[RType, ...] | None = None
    fields: tuple[str, ...] | None = None


INVALID = RType(Kind.INVALID)
ANY = RType(Kind.INTERFACE)

_QUEUE_TYPES: tuple[type, ...] = (queue.Queue, queue.SimpleQueue, asyncio.Queue)
_ROUTINE_TYPES: tuple[type, ...] = (
    types.FunctionType,
    types.LambdaType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    types.MethodDescriptorType,
    types.ClassMethodDescriptorType,
    functools.partial,
)
_SEQUENCE_ORIGINS = {
    list,
    collections.deque,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
}
_MAP_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}
_SET_ORIGINS = {set, frozenset, collections.abc.Set, collections.abc.MutableSet}
_STRUCTURAL = {list, dict, tuple, set, frozenset}


def canonical_name(cls: type) -> str:
    """Return ``module.QualName`` for a class, or the bare name for builtins."""
    qualname = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", repr(cls))
    module = getattr(cls, "__module__", None)
    if module in (None, "builtins"):
        return qualname
    return f"{module}.{qualname}"


def is_struct_class(cls: type) -> bool:
    """True for dataclasses, NamedTuples and pydantic models."""
    if dataclasses.is_dataclass(cls):
        return True
    if issubclass(cls, tuple) and hasattr(cls, "_fields"):
        return True
    return issubclass(cls, BaseModel)


def _has_attributes(cls: type) -> bool:
    if cls.__dictoffset__ != 0:
        return True
    return any("__slots__" in vars(klass) for klass in cls.__mro__ if klass is not object)


def _is_interface_class(cls: type) -> bool:
    return bool(getattr(cls, "_is_protocol", False)) or inspect.isabstract(cls)


def _generic_args(cls: type, origins: set[Any]) -> tuple[Any, ...]:
    """Find the parameters a container subclass passed to its generic base."""
    for klass in cls.__mro__:
        for base in vars(klass).get("__orig_bases__", ()):
            if typing.get_origin(base) in origins:
                return typing.get_args(base)
    return ()


def _own_name(cls: type) -> str:
    return "" if cls in _STRUCTURAL else canonical_name(cls)


def rtype_of_class(cls: type) -> RType:
    """Derive the RType of instances of ``cls``."""
    if cls is type(None):
        return INVALID
    if issubclass(cls, bool):
        return RType(Kind.BOOL, canonical_name(cls), cls)
    if issubclass(cls, enum.Enum):
        return RType(Kind.ENUM, canonical_name(cls), cls)
    if issubclass(cls, int):
        return RType(Kind.INT, canonical_name(cls), cls)
    if issubclass(cls, float):
        return RType(Kind.FLOAT, canonical_name(cls), cls)
    if issubclass(cls, complex):
        return RType(Kind.COMPLEX, canonical_name(cls), cls)
    if issubclass(cls, str):
        return RType(Kind.STRING, canonical_name(cls), cls)
    if issubclass(cls, (bytes, bytearray)):
        return RType(Kind.BYTES, canonical_name(cls), cls)
    if cls is types.SimpleNamespace:
        return RType(Kind.STRUCT, "", cls)
    if is_struct_class(cls):
        return RType(Kind.STRUCT, canonical_name(cls), cls)
    if issubclass(cls, tuple):
        return RType(Kind.ARRAY, _own_name(cls), cls)
    if issubclass(cls, collections.abc.Mapping):
        args = _generic_args(cls, _MAP_ORIGINS)
        key, value = (rtype_from_annotation(a) for a in args) if len(args) == 2 else (None, None)
        return RType(Kind.MAP, _own_name(cls), cls, elem=value, key=key)
    if issubclass(cls, collections.abc.Set):
        args = _generic_args(cls, _SET_ORIGINS)
        elem = rtype_from_annotation(args[0]) if args else None
        return RType(Kind.SET, _own_name(cls), cls, elem=elem)
    if issubclass(cls, (list, collections.deque, collections.abc.Sequence)):
        args = _generic_args(cls, _SEQUENCE_ORIGINS)
        elem = rtype_from_annotation(args[0]) if args else None
        return RType(Kind.SEQUENCE, _own_name(cls), cls, elem=elem)
    if issubclass(cls, _QUEUE_TYPES):
        return RType(Kind.CHANNEL, canonical_name(cls), cls)
    if issubclass(cls, _ROUTINE_TYPES):
        return RType(Kind.FUNCTION, canonical_name(cls), cls)
    if issubclass(cls, (type, types.ModuleType)):
        return RType(Kind.OPAQUE, canonical_name(cls), cls)
    if _is_interface_class(cls):
        return RType(Kind.INTERFACE, canonical_name(cls), cls)
    if _has_attributes(cls):
        return RType(Kind.STRUCT, canonical_name(cls), cls)
    return RType(Kind.OPAQUE, canonical_name(cls), cls)


def type_of(obj: Any) -> RType:
    """Derive the runtime RType of a value."""
    if obj is None:
        return INVALID
    cls = type(obj)
    if cls is types.SimpleNamespace:
        attrs = vars(obj)
        return RType(
            Kind.STRUCT,
            "",
            cls,
            items=tuple(rtype_of_class(type(v)) for v in attrs.values()),
            fields=tuple(attrs),
        )
    return rtype_of_class(cls)


def split_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, x, ...]`` into ``(T, (x, ...))``."""
    extras: tuple[Any, ...] = ()
    while typing.get_origin(tp) is typing.Annotated:
        args = typing.get_args(tp)
        tp, extras = args[0], extras + tuple(args[1:])
    return tp, extras


def _union_of(members: list[Any], nullable: bool) -> RType:
    from render_redact.engine.typefmt import type_string

    if len(members) == 1:
        inner = rtype_from_annotation(members[0])
    else:
        inner = RType(
            Kind.INTERFACE,
            " | ".join(type_string(rtype_from_annotation(m)) for m in members),
        )
    if nullable and inner.kind not in NILLABLE_KINDS:
        return RType(Kind.REFERENCE, elem=inner)
    return inner


def rtype_from_annotation(tp: Any) -> RType:
    """Derive the declared RType of a slot from its annotation.

    Unresolvable annotations (strings, forward references, type variables)
    yield a dynamic slot, so the runtime type of the value decides.
    """
    tp, _ = split_annotated(tp)
    if tp is None or tp is type(None):
        return INVALID
    if tp is Any or tp is object:
        return ANY

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        return _union_of(members, nullable=len(members) != len(args))
    if origin is typing.Literal:
        classes = {type(a) for a in args}
        return rtype_of_class(classes.pop()) if len(classes) == 1 else ANY
    if origin in (typing.ClassVar, typing.Final):
        return rtype_from_annotation(args[0]) if args else ANY
    if hasattr(tp, "__supertype__"):
        # typing.NewType
        return rtype_from_annotation(tp.__supertype__)

    if origin is not None:
        if origin is tuple:
            if not args:
                return RType(Kind.ARRAY, "", tuple)
            if len(args) == 2 and args[1] is Ellipsis:
                return RType(Kind.SEQUENCE, "", tuple, elem=rtype_from_annotation(args[0]))
            if args == ((),):
                return RType(Kind.ARRAY, "", tuple, items=())
            return RType(Kind.ARRAY, "", tuple, items=tuple(rtype_from_annotation(a) for a in args))
        if origin in _MAP_ORIGINS:
            key, value = (rtype_from_annotation(a) for a in args) if len(args) == 2 else (ANY, ANY)
            return RType(Kind.MAP, "", dict, elem=value, key=key)
        if origin in _SET_ORIGINS:
            pytype = frozenset if origin is frozenset else set
            elem = rtype_from_annotation(args[0]) if args else ANY
            return RType(Kind.SET, "", pytype, elem=elem)
        if origin in _SEQUENCE_ORIGINS and origin is not collections.deque:
            elem = rtype_from_annotation(args[0]) if args else ANY
            return RType(Kind.SEQUENCE, "", list, elem=elem)
        if origin is collections.abc.Callable:
            return RType(Kind.FUNCTION, "Callable")
        if isinstance(origin, type):
            base = rtype_of_class(origin)
            if base.kind in (Kind.SEQUENCE, Kind.SET) and args:
                return dataclasses.replace(base, elem=rtype_from_annotation(args[0]))
            if base.kind is Kind.MAP and len(args) == 2:
                return dataclasses.replace(
                    base,
                    key=rtype_from_annotation(args[0]),
                    elem=rtype_from_annotation(args[1]),
                )
            return base
        return ANY

    if isinstance(tp, type):
        return rtype_of_class(tp)
    return ANY


def resolve_slot(declared: RType | None, obj: Any) -> RType:
    """Pick the RType used to render ``obj`` held by a slot of type ``declared``.

    The declared type wins when the value's class is exactly the declared
    class. A None in a slot that cannot be nil becomes a nil reference to the
    declared type; otherwise the runtime type of the value is used.
    """
    if declared is None:
        return type_of(obj)
    kind = declared.kind
    if kind is Kind.INTERFACE:
        return declared
    if kind is Kind.REFERENCE:
        if obj is None:
            return declared
        target = resolve_slot(declared.elem, obj)
        if target is declared.elem:
            return declared
        return dataclasses.replace(declared, elem=target)
    if obj is None:
        if kind in NILLABLE_KINDS:
            return declared
        return RType(Kind.REFERENCE, elem=declared)
    if kind is Kind.INVALID or declared.pytype is None or type(obj) is not declared.pytype:
        return type_of(obj)
    if kind is Kind.STRUCT and not declared.name:
        return type_of(obj)
    if kind is Kind.ARRAY and declared.items is not None and len(declared.items) != len(obj):
        return type_of(obj)
    return declared


def is_anon(t: RType) -> bool:
    """True when a value of type ``t`` is written without its type prefix
    inside an unnamed container.
    """
    if t.name and t.name not in BUILTIN_NAME_SET:
        return False
    return t.kind is not Kind.INTERFACE
