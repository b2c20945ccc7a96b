"""Traversal chain used for cycle detection."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TraversalState:
    """Immutable linked chain of the identities on the current render path.

    The root node carries no identity. Forking never mutates a node, so
    sibling branches share their common ancestors and unwinding the recursion
    discards the forked nodes.
    """

    parent: TraversalState | None = None
    ident: int | None = None

    def __contains__(self, ident: object) -> bool:
        node: TraversalState | None = self
        while node is not None:
            if node.ident is not None and node.ident == ident:
                return True
            node = node.parent
        return False

    def fork_for(self, ident: int) -> TraversalState | None:
        """Extend the chain with ``ident``, or return None if it is already on it."""
        if ident in self:
            return None
        return TraversalState(parent=self, ident=ident)
