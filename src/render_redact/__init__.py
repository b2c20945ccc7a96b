"""render-redact package."""

from .marshaller import Marshaller, redact, redact_message, render, render_message
from .protocol.types import (
    ConfigurationError,
    MaskDirection,
    RedactMode,
    RenderOptions,
    RenderRedactError,
)
from .registry.formatters import TypeFormatter, TypeFormatterRegistry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigurationError",
    "Marshaller",
    "MaskDirection",
    "RedactMode",
    "RenderOptions",
    "RenderRedactError",
    "TypeFormatter",
    "TypeFormatterRegistry",
    "redact",
    "redact_message",
    "render",
    "render_message",
]
