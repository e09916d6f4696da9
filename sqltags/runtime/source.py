"""Template sources: compiled statements that produce bound statements.

Three implementations:

* :class:`StaticSqlSource` holds SQL whose placeholders were already
  rewritten; every call returns the same text and mappings.
* :class:`RawSqlSource` wraps a node tree with no dynamic construct.  The tree
  is rendered and rewritten once, at construction.
* :class:`DynamicSqlSource` renders its tree against a fresh
  :class:`~sqltags.runtime.context.DynamicContext` on every call.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from sqltags.nodes.base import SqlNode
from sqltags.runtime.context import DynamicContext
from sqltags.schema.bound import BoundStatement, ParameterMapping

if TYPE_CHECKING:
    from sqltags.compile.context import BuildContext

logger = logging.getLogger(__name__)


class SqlSource(ABC):
    """A compiled statement."""

    @abstractmethod
    def get_bound_sql(self, parameter_object: Any = None) -> BoundStatement:
        """Produce the bound statement for one invocation argument.

        Raises:
            ExpressionError: If an expression cannot be evaluated for
                ``parameter_object``.
        """


class StaticSqlSource(SqlSource):
    """Already-rewritten SQL and its parameter mappings."""

    def __init__(
        self,
        ctx: BuildContext,
        sql: str,
        parameter_mappings: list[ParameterMapping] | None = None,
    ) -> None:
        self._ctx = ctx
        self.sql = sql
        self.parameter_mappings = list(parameter_mappings or [])

    def get_bound_sql(self, parameter_object: Any = None) -> BoundStatement:
        return BoundStatement(
            sql=self.sql,
            parameter_mappings=list(self.parameter_mappings),
            parameter_object=parameter_object,
        )


class RawSqlSource(SqlSource):
    """Static statement, rendered once when the source is built.

    Args:
        ctx: Build context.
        root_node: Node tree without any dynamic construct.
        parameter_type: Declared argument type, used for type inference.
    """

    def __init__(
        self,
        ctx: BuildContext,
        root_node: SqlNode,
        parameter_type: type | None = None,
    ) -> None:
        from sqltags.compile.placeholder import PlaceholderRewriter

        context = DynamicContext(None, ctx.evaluator, ctx.config)
        root_node.apply(context)
        self._source = PlaceholderRewriter(ctx).parse(
            context.sql, parameter_type or object, {}
        )

    @property
    def sql(self) -> str:
        return self._source.sql

    def get_bound_sql(self, parameter_object: Any = None) -> BoundStatement:
        return self._source.get_bound_sql(parameter_object)


class DynamicSqlSource(SqlSource):
    """Statement re-rendered for every invocation argument.

    Args:
        ctx: Build context.
        root_node: Root of the compiled node tree.
    """

    def __init__(self, ctx: BuildContext, root_node: SqlNode) -> None:
        self._ctx = ctx
        self.root_node = root_node

    def get_bound_sql(self, parameter_object: Any = None) -> BoundStatement:
        from sqltags.compile.placeholder import PlaceholderRewriter

        context = DynamicContext(parameter_object, self._ctx.evaluator, self._ctx.config)
        self.root_node.apply(context)

        parameter_type = object if parameter_object is None else type(parameter_object)
        additional = context.additional_bindings
        source = PlaceholderRewriter(self._ctx).parse(
            context.sql, parameter_type, additional, parameter_object
        )
        bound = source.get_bound_sql(parameter_object)
        for name, value in additional.items():
            bound.set_additional_parameter(name, value)

        logger.debug("Preparing: %s", bound.sql)
        logger.debug(
            "Parameters: %s", ", ".join(m.property for m in bound.parameter_mappings)
        )
        return bound
