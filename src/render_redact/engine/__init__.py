"""
Render engine - traversal and redaction of arbitrary value graphs.

The engine coordinates:
1. Type discovery from annotations and runtime classes
2. Recursive traversal with cycle detection
3. Canonical ordering of dict keys and set elements
4. Field redaction and value masking
"""

from render_redact.engine.fields import FieldDescriptor, FieldResolver
from render_redact.engine.keys import KeyCanonicalizer
from render_redact.engine.masking import MaskingPolicy, MaskWriter
from render_redact.engine.redaction import FieldAction, RedactionPolicy
from render_redact.engine.state import TraversalState
from render_redact.engine.traversal import Traversal
from render_redact.engine.typefmt import type_name, type_string, write_type
from render_redact.engine.typeinfo import (
    Kind,
    RType,
    is_anon,
    resolve_slot,
    rtype_from_annotation,
    type_of,
)

__all__ = [
    # Traversal
    "Traversal",
    "TraversalState",
    # Types
    "Kind",
    "RType",
    "is_anon",
    "resolve_slot",
    "rtype_from_annotation",
    "type_of",
    "type_name",
    "type_string",
    "write_type",
    # Fields and redaction
    "FieldAction",
    "FieldDescriptor",
    "FieldResolver",
    "RedactionPolicy",
    # Ordering and masking
    "KeyCanonicalizer",
    "MaskingPolicy",
    "MaskWriter",
]
