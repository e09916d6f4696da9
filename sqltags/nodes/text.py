"""Text nodes: literal SQL and ``${...}`` substitution."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqltags.errors import ExpressionError
from sqltags.nodes.base import SqlNode
from sqltags.runtime.tokens import GenericTokenParser, contains_token

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext

SUBSTITUTION_OPEN = "${"
SUBSTITUTION_CLOSE = "}"


@dataclass(frozen=True)
class StaticTextSqlNode(SqlNode):
    """Literal text, appended verbatim."""

    text: str

    def apply(self, context: DynamicContext) -> bool:
        context.append_sql(self.text)
        return True


@dataclass(frozen=True)
class TextSqlNode(SqlNode):
    """Text whose ``${expr}`` markers are replaced by the expression's value.

    ``None`` values substitute as the empty string.  When the engine is
    configured with a ``substitution_filter``, every value must fully match it.
    ``#{...}`` placeholders are left untouched for the rewriter.
    """

    text: str

    def is_dynamic(self) -> bool:
        return contains_token(self.text, SUBSTITUTION_OPEN, SUBSTITUTION_CLOSE)

    def apply(self, context: DynamicContext) -> bool:
        parser = GenericTokenParser(
            SUBSTITUTION_OPEN,
            SUBSTITUTION_CLOSE,
            lambda body: self._substitute(body, context),
        )
        context.append_sql(parser.parse(self.text))
        return True

    @staticmethod
    def _substitute(expression: str, context: DynamicContext) -> str:
        value = context.evaluate(expression)
        text = "" if value is None else str(value)
        pattern = context.config.substitution_filter
        if pattern is not None and re.fullmatch(pattern, text) is None:
            raise ExpressionError(
                f"Invalid input. Please conform to regex '{pattern}'.",
                expression=expression,
                details={"value": text},
            )
        return text
