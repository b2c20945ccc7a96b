"""
Protocol definitions for render-redact.

Includes the redaction directives, masking direction and the RenderOptions model.
"""

from render_redact.protocol.types import (
    ConfigurationError,
    MaskDirection,
    RedactMode,
    RenderOptions,
    RenderRedactError,
    build_options,
)

__all__ = [
    "ConfigurationError",
    "MaskDirection",
    "RedactMode",
    "RenderOptions",
    "RenderRedactError",
    "build_options",
]
