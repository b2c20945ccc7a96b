"""
Map-key canonicalizer.

Orders dict keys and set elements so that equal containers render
identically whatever their insertion order. Comparators are chosen by the
declared key type; dynamically typed keys are ordered by their runtime type
name first and then by that type's comparator.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable
from typing import Any

from render_redact.engine.fields import FieldResolver
from render_redact.engine.typefmt import type_name
from render_redact.engine.typeinfo import ANY, Kind, RType, type_of

Comparator = Callable[[Any, Any], int]

_NATURAL_KINDS = frozenset({Kind.BOOL, Kind.INT, Kind.FLOAT, Kind.STRING, Kind.BYTES})
_IDENTITY_KINDS = frozenset({Kind.REFERENCE, Kind.CHANNEL, Kind.OPAQUE})
_ORDERED_KINDS = (
    _NATURAL_KINDS
    | _IDENTITY_KINDS
    | {Kind.COMPLEX, Kind.ENUM, Kind.INTERFACE, Kind.STRUCT, Kind.ARRAY}
)


def _natural(a: Any, b: Any) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def _complex(a: complex, b: complex) -> int:
    return _natural(a.real, b.real) or _natural(a.imag, b.imag)


def _identity(a: Any, b: Any) -> int:
    return _natural(id(a), id(b))


def _compare_enum(a: Any, b: Any, names: list[str]) -> int:
    """Order members by definition; composite flags and other pseudo-members by value."""
    if a.name in names and b.name in names:
        return _natural(names.index(a.name), names.index(b.name))
    try:
        return _natural(a.value, b.value)
    except TypeError:
        return 0


class KeyCanonicalizer:
    """Three-way comparison and stable sorting of keys by type category."""

    def __init__(self, fields: FieldResolver | None = None) -> None:
        self._fields = fields or FieldResolver()
        # Struct pairs currently being compared
        self._comparing: set[tuple[int, int]] = set()

    def comparator_for(self, t: RType) -> Comparator | None:
        """Return a comparator for keys of type ``t``, or None when the type
        has no ordering and native order must be kept.
        """
        if t.kind not in _ORDERED_KINDS:
            return None
        return functools.partial(self.compare, t=t)

    def sort(self, keys: Iterable[Any], t: RType | None) -> list[Any]:
        """Return ``keys`` in canonical order for key type ``t``."""
        comparator = self.comparator_for(t or ANY)
        if comparator is None:
            return list(keys)
        return sorted(keys, key=functools.cmp_to_key(comparator))

    def compare(self, a: Any, b: Any, t: RType) -> int:
        kind = t.kind
        if kind in (Kind.INTERFACE, Kind.INVALID) or not (
            _conforms(a, t) and _conforms(b, t)
        ):
            return self._compare_dynamic(a, b)
        if kind in _NATURAL_KINDS:
            return _natural(a, b)
        if kind is Kind.COMPLEX:
            return _complex(a, b)
        if kind is Kind.ENUM:
            return _compare_enum(a, b, t.pytype._member_names_)  # type: ignore[union-attr]
        if kind in _IDENTITY_KINDS:
            return _identity(a, b)
        if kind is Kind.STRUCT:
            return self._compare_struct(a, b)
        if kind is Kind.ARRAY:
            return self._compare_array(a, b, t)
        return 0

    def _compare_dynamic(self, a: Any, b: Any) -> int:
        ta, tb = type_of(a), type_of(b)
        result = _natural(type_name(ta), type_name(tb))
        if result or ta.kind in (Kind.INVALID, Kind.INTERFACE):
            return result
        if type(a) is not type(b):
            # Distinct classes sharing a qualified name
            return _identity(type(a), type(b))
        return self.compare(a, b, ta)

    def _compare_struct(self, a: Any, b: Any) -> int:
        pair = (id(a), id(b))
        if pair in self._comparing:
            # Keys referencing each other; equal as far as the cycle goes
            return 0
        self._comparing.add(pair)
        try:
            for (desc, va), (_, vb) in zip(
                self._fields.fields_of(a), self._fields.fields_of(b)
            ):
                declared = desc.declared or ANY
                if declared.kind not in _ORDERED_KINDS and declared.kind is not Kind.INVALID:
                    continue
                result = self.compare(va, vb, declared)
                if result:
                    return result
            return 0
        finally:
            self._comparing.discard(pair)

    def _compare_array(self, a: tuple, b: tuple, t: RType) -> int:
        for i, (va, vb) in enumerate(zip(a, b)):
            declared = t.items[i] if t.items is not None and i < len(t.items) else ANY
            result = self.compare(va, vb, declared)
            if result:
                return result
        return _natural(len(a), len(b))


def _conforms(value: Any, t: RType) -> bool:
    if t.kind is Kind.REFERENCE:
        return True
    return t.pytype is None or isinstance(value, t.pytype)
