"""
Struct field descriptors.

A FieldDescriptor is the name, declared type and annotation mapping of one
struct field. Descriptors are produced from dataclass fields and their
``metadata``, NamedTuple annotations, pydantic ``model_fields`` (options from
``json_schema_extra``), ``Annotated[T, {...}]`` extras, and the instance
attributes of plain objects and SimpleNamespaces.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import types
import typing
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from render_redact.engine.typeinfo import RType, rtype_from_annotation, split_annotated

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class FieldDescriptor:
    """Name, declared type and annotations of one struct field.

    ``declared`` is None when the field has no usable annotation; the value's
    runtime type is used instead.
    """

    name: str
    declared: RType | None = None
    annotations: Mapping[str, Any] = field(default_factory=dict)


def merge_annotations(*sources: Any) -> dict[str, Any]:
    """Merge the mapping-valued sources into one annotation mapping."""
    merged: dict[str, Any] = {}
    for source in sources:
        if isinstance(source, Mapping):
            merged.update(source)
    return merged


def model_field_annotations(info: FieldInfo) -> dict[str, Any]:
    """Annotation mapping of a pydantic field: Annotated extras, then json_schema_extra."""
    return merge_annotations(*info.metadata, info.json_schema_extra)


def _descriptor(name: str, annotation: Any, *extra_sources: Any) -> FieldDescriptor:
    if annotation is _MISSING or isinstance(annotation, (str, typing.ForwardRef)):
        return FieldDescriptor(name, None, merge_annotations(*extra_sources))
    inner, extras = split_annotated(annotation)
    return FieldDescriptor(
        name,
        rtype_from_annotation(inner),
        merge_annotations(*extras, *extra_sources),
    )


class FieldResolver:
    """Lists the fields of struct values, caching class-level work per call."""

    def __init__(self) -> None:
        self._hints: dict[type, dict[str, Any]] = {}
        self._descriptors: dict[type, tuple[FieldDescriptor, ...]] = {}

    def hints(self, cls: type) -> dict[str, Any]:
        """Resolved annotations of ``cls``, keeping Annotated extras."""
        cached = self._hints.get(cls)
        if cached is not None:
            return cached
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except Exception:
            logger.debug("Could not resolve annotations of %r", cls, exc_info=True)
            hints = dict(inspect.get_annotations(cls))
        self._hints[cls] = hints
        return hints

    def descriptors(self, cls: type) -> tuple[FieldDescriptor, ...]:
        """Declared fields of a dataclass, NamedTuple or pydantic model class."""
        cached = self._descriptors.get(cls)
        if cached is not None:
            return cached
        if issubclass(cls, BaseModel):
            result = tuple(
                FieldDescriptor(
                    name,
                    rtype_from_annotation(info.annotation)
                    if info.annotation is not None
                    else None,
                    model_field_annotations(info),
                )
                for name, info in cls.model_fields.items()
            )
        elif dataclasses.is_dataclass(cls):
            hints = self.hints(cls)
            result = tuple(
                _descriptor(f.name, hints.get(f.name, _MISSING), f.metadata)
                for f in dataclasses.fields(cls)
            )
        elif issubclass(cls, tuple) and hasattr(cls, "_fields"):
            hints = self.hints(cls)
            result = tuple(_descriptor(n, hints.get(n, _MISSING)) for n in cls._fields)
        else:
            result = ()
        self._descriptors[cls] = result
        return result

    def fields_of(self, obj: Any) -> Iterator[tuple[FieldDescriptor, Any]]:
        """Yield ``(descriptor, value)`` for every field of a struct value."""
        cls = type(obj)
        if cls is types.SimpleNamespace:
            for name, value in vars(obj).items():
                yield FieldDescriptor(name), value
            return

        declared = self.descriptors(cls)
        if declared:
            for desc in declared:
                value = getattr(obj, desc.name, _MISSING)
                if value is not _MISSING:
                    yield desc, value
            if isinstance(obj, BaseModel) and obj.model_extra:
                for name, value in obj.model_extra.items():
                    yield FieldDescriptor(name), value
            return
        if dataclasses.is_dataclass(cls) or isinstance(obj, BaseModel):
            return

        yield from self._attributes_of(obj)

    def _attributes_of(self, obj: Any) -> Iterator[tuple[FieldDescriptor, Any]]:
        cls = type(obj)
        hints = self.hints(cls)
        seen: set[str] = set()
        for klass in reversed(cls.__mro__):
            slots = vars(klass).get("__slots__", ())
            if isinstance(slots, str):
                slots = (slots,)
            for name in slots:
                if name in ("__dict__", "__weakref__") or name in seen:
                    continue
                value = getattr(obj, name, _MISSING)
                if value is _MISSING:
                    continue
                seen.add(name)
                yield _descriptor(name, hints.get(name, _MISSING)), value
        for name, value in getattr(obj, "__dict__", {}).items():
            if name in seen:
                continue
            yield _descriptor(name, hints.get(name, _MISSING)), value
