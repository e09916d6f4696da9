"""``<bind>`` node."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqltags.nodes.base import SqlNode

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext


@dataclass(frozen=True)
class VarDeclSqlNode(SqlNode):
    """Evaluates ``expression`` once and binds the result to ``name``.

    The binding lands in the current scope: later siblings and their
    descendants see it, earlier siblings do not.
    """

    name: str
    expression: str

    def apply(self, context: DynamicContext) -> bool:
        context.bind(self.name, context.evaluate(self.expression))
        return True
