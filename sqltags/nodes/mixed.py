"""Ordered composite node."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqltags.nodes.base import SqlNode

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext


@dataclass(frozen=True)
class MixedSqlNode(SqlNode):
    """Applies its children in order against the same context."""

    contents: tuple[SqlNode, ...] = ()

    def apply(self, context: DynamicContext) -> bool:
        for node in self.contents:
            node.apply(context)
        return True

    def children(self) -> tuple[SqlNode, ...]:
        return self.contents
