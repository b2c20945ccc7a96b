"""
Type formatter registry for render-redact.

Maps canonical type names to user formatters and loads formatters published
by installed packages.
"""

from render_redact.registry.formatters import (
    TypeFormatter,
    TypeFormatterRegistry,
    discover_type_formatters,
    type_key,
)

__all__ = [
    "TypeFormatter",
    "TypeFormatterRegistry",
    "discover_type_formatters",
    "type_key",
]
