"""
Masking writer.

Value text written through a MaskWriter has part of its characters replaced
by the masking character when masking is enabled. Structural text never goes
through it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TextIO

from render_redact.protocol.types import (
    DEFAULT_MASKING_CHAR,
    DEFAULT_MASKING_LENGTH,
    MaskDirection,
    RenderOptions,
)


@dataclass(frozen=True)
class MaskingPolicy:
    """How many characters to mask, with what, and from which end."""

    char: str = DEFAULT_MASKING_CHAR
    length: int = DEFAULT_MASKING_LENGTH
    direction: MaskDirection = MaskDirection.PREFIX

    @classmethod
    def from_options(cls, options: RenderOptions) -> MaskingPolicy:
        return cls(
            char=options.masking_char,
            length=options.masking_length,
            direction=options.masking_direction,
        )

    def apply(self, text: str) -> str:
        """Mask ``text``.

        A negative length, or one covering the whole text, masks every
        character. Otherwise PREFIX masks the first ``length`` characters and
        SUFFIX masks the last ``length``.
        """
        size = len(text)
        if self.length < 0 or self.length >= size:
            return self.char * size
        if self.direction is MaskDirection.SUFFIX:
            keep = size - self.length
            return text[:keep] + self.char * self.length
        return self.char * self.length + text[self.length :]


class MaskWriter:
    """Writer that masks everything written to it while enabled."""

    def __init__(
        self,
        out: TextIO,
        policy: MaskingPolicy | None = None,
        enabled: bool = True,
    ) -> None:
        self._out = out
        self._policy = policy or MaskingPolicy()
        self.enabled = enabled

    def transform(self, text: str) -> str:
        """Return ``text`` as it would be written."""
        return self._policy.apply(text) if self.enabled else text

    def write(self, text: str) -> int:
        return self._out.write(self.transform(text))
