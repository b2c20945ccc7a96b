"""
Adapters for schema-described messages.

Messages are rendered from a descriptor of their fields rather than by
reflection; pydantic models are supported out of the box.
"""

from render_redact.adapters.message import (
    FieldKind,
    MessageAdapter,
    MessageDescriptor,
    MessageField,
    MessageWalker,
    PydanticMessageAdapter,
)

__all__ = [
    "FieldKind",
    "MessageAdapter",
    "MessageDescriptor",
    "MessageField",
    "MessageWalker",
    "PydanticMessageAdapter",
]
