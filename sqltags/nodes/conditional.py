"""``<if>``, ``<when>`` and ``<choose>`` nodes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqltags.nodes.base import SqlNode

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext


@dataclass(frozen=True)
class IfSqlNode(SqlNode):
    """Applies ``contents`` only when ``test`` is true."""

    test: str
    contents: SqlNode

    def apply(self, context: DynamicContext) -> bool:
        if context.evaluate_boolean(self.test):
            self.contents.apply(context)
            return True
        return False

    def children(self) -> tuple[SqlNode, ...]:
        return (self.contents,)


@dataclass(frozen=True)
class ChooseSqlNode(SqlNode):
    """First-true-wins branch selection with an optional default."""

    when_nodes: tuple[SqlNode, ...]
    default: SqlNode | None = None

    def apply(self, context: DynamicContext) -> bool:
        for node in self.when_nodes:
            if node.apply(context):
                return True
        if self.default is not None:
            self.default.apply(context)
            return True
        return False

    def children(self) -> tuple[SqlNode, ...]:
        if self.default is None:
            return self.when_nodes
        return (*self.when_nodes, self.default)
