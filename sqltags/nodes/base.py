"""Template node abstraction.

A compiled statement is a tree of :class:`SqlNode` objects.  Nodes are
immutable once built; all per-call state lives in the
:class:`~sqltags.runtime.context.DynamicContext` passed to :meth:`apply`, so one
tree can be evaluated by many threads at once.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext


class SqlNode(ABC):
    """One node of a compiled statement."""

    @abstractmethod
    def apply(self, context: DynamicContext) -> bool:
        """Append this node's SQL to ``context``.

        Returns:
            ``True`` if the node applied (a conditional whose test failed
            returns ``False``).
        """

    def children(self) -> tuple[SqlNode, ...]:
        """Direct child nodes (none for leaves)."""
        return ()

    def walk(self) -> Iterator[SqlNode]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()
