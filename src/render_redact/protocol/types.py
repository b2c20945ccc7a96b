"""
Protocol types for render-redact.

Defines the field redaction directives, the masking direction and the
immutable RenderOptions model consumed by the Marshaller.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_REDACT_TAG = "redact"
DEFAULT_REPLACEMENT_PLACEHOLDER = "redacted"
DEFAULT_RECURSION_PLACEHOLDER = "recursive"
DEFAULT_MASKING_CHAR = "#"
DEFAULT_MASKING_LENGTH = 4

REDACT_TAG_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


class RenderRedactError(Exception):
    """Base error for render-redact."""


class ConfigurationError(RenderRedactError, ValueError):
    """Raised when marshaller options fail validation."""


class RedactMode(str, Enum):
    """Per-field redaction directives."""

    REMOVE = "REMOVE"  # Drop the field and its separator
    REPLACE = "REPLACE"  # Write the replacement placeholder
    MASK = "MASK"  # Mask every value in the field's subtree

    @classmethod
    def parse(cls, value: Any) -> RedactMode | None:
        """Parse an annotation value, returning None for unknown directives."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return None
        return None


class MaskDirection(str, Enum):
    """Which end of a value the mask covers."""

    PREFIX = "prefix"  # Mask the first N characters
    SUFFIX = "suffix"  # Mask the last N characters


def default_pointer_renderer(writer: Any, ident: int) -> None:
    """Write an identity as a zero-padded hexadecimal address."""
    writer.write(f"0x{ident:016x}")


class RenderOptions(BaseModel):
    """Immutable configuration for a Marshaller."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    redact_tag: str = Field(
        default=DEFAULT_REDACT_TAG,
        description="Annotation key holding field redaction directives",
    )
    replacement_placeholder: str = Field(
        default=DEFAULT_REPLACEMENT_PLACEHOLDER,
        description="Text written as <placeholder> for REPLACE fields",
    )
    recursion_placeholder: str = Field(
        default=DEFAULT_RECURSION_PLACEHOLDER,
        description="Text written as <placeholder(Type)> when a cycle is found",
    )
    masking_char: str = Field(
        default=DEFAULT_MASKING_CHAR,
        min_length=1,
        max_length=1,
        description="Character substituted for masked characters",
    )
    masking_length: int = Field(
        default=DEFAULT_MASKING_LENGTH,
        description="Characters to mask; negative masks the whole value",
    )
    masking_direction: MaskDirection = Field(
        default=MaskDirection.PREFIX,
        description="Mask the leading (prefix) or trailing (suffix) characters",
    )
    type_formatters: dict[str, Callable[[Any], str]] = Field(
        default_factory=dict,
        description="Canonical type name -> formatter returning the value text",
    )
    pointer_renderer: Callable[[Any, int], None] = Field(
        default=default_pointer_renderer,
        description="Writes the identity of channels, functions and opaque handles",
    )

    @field_validator("redact_tag")
    @classmethod
    def _check_redact_tag(cls, value: str) -> str:
        if not REDACT_TAG_PATTERN.match(value):
            raise ValueError(
                f"redact tag {value!r} must match {REDACT_TAG_PATTERN.pattern}"
            )
        return value

    @field_validator("type_formatters", mode="before")
    @classmethod
    def _normalize_type_formatters(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("type_formatters must be a mapping of type to callable")
        from render_redact.registry.formatters import type_key

        normalized: dict[str, Any] = {}
        for key, formatter in value.items():
            if formatter is None:
                continue
            normalized[type_key(key)] = formatter
        return normalized


def build_options(
    options: RenderOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> RenderOptions:
    """Merge overrides onto base options and validate the result.

    Args:
        options: Base options (model or plain mapping), defaults when None
        **overrides: Individual option values taking precedence

    Returns:
        Validated RenderOptions

    Raises:
        ConfigurationError: If any option value is invalid
    """
    merged: dict[str, Any] = dict(options) if options is not None else {}
    merged.update(overrides)
    unknown = sorted(set(merged) - set(RenderOptions.model_fields))
    if unknown:
        raise ConfigurationError(f"Unknown render options: {', '.join(unknown)}")
    try:
        return RenderOptions(**merged)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid render options: {problems}") from e
