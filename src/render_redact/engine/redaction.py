"""Field redaction policy."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from render_redact.protocol.types import DEFAULT_REDACT_TAG, RedactMode


@dataclass(frozen=True)
class FieldAction:
    """What to do with one field: its directive and whether it renders masked."""

    directive: RedactMode | None
    masked: bool

    @property
    def remove(self) -> bool:
        return self.directive is RedactMode.REMOVE

    @property
    def replace(self) -> bool:
        return self.directive is RedactMode.REPLACE


class RedactionPolicy:
    """Reads redaction directives from field annotations under one tag."""

    def __init__(self, tag: str = DEFAULT_REDACT_TAG) -> None:
        self.tag = tag

    def directive_for(self, annotations: Mapping[str, Any] | None) -> RedactMode | None:
        """Return the field's directive, or None when absent or unrecognised."""
        if not annotations:
            return None
        raw = annotations.get(self.tag)
        if raw is None:
            return None
        return RedactMode.parse(raw)

    def decide(self, annotations: Mapping[str, Any] | None, masked: bool) -> FieldAction:
        """Combine a field's directive with the masking inherited from its parent."""
        directive = self.directive_for(annotations)
        return FieldAction(directive, masked or directive is RedactMode.MASK)
