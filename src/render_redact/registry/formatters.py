"""Registry of user-supplied per-type formatters."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from importlib import metadata
from types import MappingProxyType
from typing import Any

from render_redact.engine.typefmt import type_name
from render_redact.engine.typeinfo import rtype_from_annotation

_ENTRY_POINT_GROUP = "render_redact.type_formatters"
_log = logging.getLogger(__name__)

TypeFormatter = Callable[[Any], str]


def type_key(key: Any) -> str:
    """Normalise a formatter key (type name, class or annotation) to its canonical name."""
    if isinstance(key, str):
        normalized = key.strip()
        if not normalized:
            raise ValueError("Type formatter key must be a non-empty string.")
        return normalized
    return type_name(rtype_from_annotation(key))


class TypeFormatterRegistry:
    """Immutable mapping of canonical type name to formatter.

    A formatter receives the value and returns its text. Formatters that raise
    or return something other than a string are skipped for that value, which
    then renders through the default path.
    """

    def __init__(self, formatters: Mapping[Any, TypeFormatter] | None = None) -> None:
        normalized = {type_key(k): fn for k, fn in (formatters or {}).items() if fn is not None}
        self._formatters: Mapping[str, TypeFormatter] = MappingProxyType(normalized)

    def __len__(self) -> int:
        return len(self._formatters)

    def format(self, name: str, value: Any) -> str | None:
        """Run the formatter registered for ``name``.

        Returns:
            The formatter's text, or None when no formatter is registered or
            the formatter failed.
        """
        formatter = self._formatters.get(name)
        if formatter is None:
            return None
        try:
            text = formatter(value)
        except Exception:
            _log.debug(
                "Type formatter for '%s' failed; using default rendering.", name, exc_info=True
            )
            return None
        if not isinstance(text, str):
            _log.debug(
                "Type formatter for '%s' returned %s, not str; using default rendering.",
                name,
                type(text).__name__,
            )
            return None
        return text

    def with_formatter(self, key: Any, formatter: TypeFormatter) -> TypeFormatterRegistry:
        """Return a new registry with ``formatter`` registered under ``key``."""
        if not callable(formatter):
            raise TypeError("Type formatter must be callable.")
        merged = dict(self._formatters)
        merged[type_key(key)] = formatter
        return TypeFormatterRegistry(merged)

    def as_dict(self) -> dict[str, TypeFormatter]:
        return dict(self._formatters)


def discover_type_formatters() -> dict[str, TypeFormatter]:
    """Load formatters published under the ``render_redact.type_formatters`` entry point group.

    The entry point name is the canonical type name; its object is the formatter.
    """
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover
        _log.debug("Failed to read type formatter entry points.", exc_info=True)
        return {}

    discovered: dict[str, TypeFormatter] = {}
    for entry_point in _select_entry_points(entry_points, _ENTRY_POINT_GROUP):
        try:
            formatter = entry_point.load()
        except Exception:
            _log.debug(
                "Failed to load type formatter entry point '%s'.", entry_point.name, exc_info=True
            )
            continue
        if not callable(formatter):
            _log.debug(
                "Type formatter entry point '%s' resolved to non-callable %r; skipping.",
                entry_point.name,
                formatter,
            )
            continue
        discovered[entry_point.name] = formatter
    return discovered


def _select_entry_points(entry_points: Any, group: str) -> Iterable[Any]:
    select = getattr(entry_points, "select", None)
    if callable(select):
        result: Iterable[Any] = select(group=group)
        return result
    if isinstance(entry_points, dict):
        return entry_points.get(group, [])
    return []
