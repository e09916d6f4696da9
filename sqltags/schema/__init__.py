"""sqltags data models: markup trees, engine config, column types.

``sqltags.schema.bound`` is imported directly; it depends on the runtime
type handlers, which in turn depend on :mod:`sqltags.schema.types`.
"""
from sqltags.schema.config import EngineConfig, EngineConfigBuilder
from sqltags.schema.markup import (
    ElementTreeNode,
    MarkupElement,
    MarkupNode,
    MarkupText,
    TextNode,
    parse_markup,
)
from sqltags.schema.types import JdbcType, ParameterMode

__all__ = [
    "EngineConfig",
    "EngineConfigBuilder",
    "ElementTreeNode",
    "MarkupElement",
    "MarkupNode",
    "MarkupText",
    "TextNode",
    "parse_markup",
    "JdbcType",
    "ParameterMode",
]
