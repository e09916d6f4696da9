"""sqltags – dynamic SQL templates from tagged markup.

Write the statement once, render it per call.

Public API
----------
``compile_statement``
    Compile a script (XML markup or plain SQL text) into a reusable
    :class:`SqlSource`.

``render``
    Compile (cached) and evaluate a script against one argument, returning a
    :class:`BoundStatement` ready for ``cursor.execute``.

Example::

    import sqltags

    bound = sqltags.render(
        '''
        <script>
          SELECT * FROM blog
          <where>
            <if test="state != null">state = #{state}</if>
            <if test="title != null">AND title LIKE #{title}</if>
          </where>
        </script>
        ''',
        {"state": "ACTIVE", "title": None},
    )
    cursor.execute(bound.sql, bound.parameter_values())

Extensibility
-------------
Positional marker styles are registered via::

    from sqltags.compile.registry import PlaceholderStyleFactory

    @PlaceholderStyleFactory.register("named_colon")
    class NamedColonStyle(PlaceholderStyle):
        ...

After registration, any :class:`EngineConfig` may name the style in
``placeholder_style``.
"""

from __future__ import annotations

import threading
from typing import Any

from sqltags.compile.base import PlaceholderStyle
from sqltags.compile.driver import LanguageDriver
from sqltags.compile.registry import (
    PlaceholderStyleFactory,
    TypeAliasRegistry,
    TypeHandlerRegistry,
)
from sqltags.compile.styles import DollarStyle, FormatStyle, NumericStyle, QmarkStyle
from sqltags.errors import BuildError, ExpressionError, SqlTagsError, UnknownTagError
from sqltags.runtime.handlers import TypeHandler
from sqltags.runtime.source import DynamicSqlSource, RawSqlSource, SqlSource, StaticSqlSource
from sqltags.schema.bound import BoundStatement, ParameterMapping
from sqltags.schema.config import EngineConfig, EngineConfigBuilder
from sqltags.schema.markup import MarkupElement, MarkupNode, MarkupText, parse_markup
from sqltags.schema.types import JdbcType, ParameterMode

# ---------------------------------------------------------------------------
# Register built-in placeholder styles with PlaceholderStyleFactory
# ---------------------------------------------------------------------------

PlaceholderStyleFactory.register_class("qmark", QmarkStyle)
PlaceholderStyleFactory.register_class("format", FormatStyle)
PlaceholderStyleFactory.register_class("numeric", NumericStyle)
PlaceholderStyleFactory.register_class("dollar", DollarStyle)

__all__ = [
    # Core pipeline
    "compile_statement",
    "render",
    "LanguageDriver",
    # Sources and results
    "SqlSource",
    "StaticSqlSource",
    "RawSqlSource",
    "DynamicSqlSource",
    "BoundStatement",
    "ParameterMapping",
    # Configuration
    "EngineConfig",
    "EngineConfigBuilder",
    # Markup
    "MarkupNode",
    "MarkupElement",
    "MarkupText",
    "parse_markup",
    # Types and registries
    "JdbcType",
    "ParameterMode",
    "TypeHandler",
    "TypeAliasRegistry",
    "TypeHandlerRegistry",
    "PlaceholderStyle",
    "PlaceholderStyleFactory",
    "QmarkStyle",
    "FormatStyle",
    "NumericStyle",
    "DollarStyle",
    # Errors
    "SqlTagsError",
    "BuildError",
    "UnknownTagError",
    "ExpressionError",
]

_default_drivers: dict[EngineConfig, LanguageDriver] = {}
_default_lock = threading.Lock()


def _driver_for(config: EngineConfig | None) -> LanguageDriver:
    key = config or EngineConfig()
    with _default_lock:
        driver = _default_drivers.get(key)
        if driver is None:
            driver = _default_drivers[key] = LanguageDriver(key)
        return driver


def compile_statement(
    script: MarkupNode | str,
    parameter_type: type | None = None,
    config: EngineConfig | None = None,
) -> SqlSource:
    """Compile a statement script.

    Args:
        script: XML markup text, a parsed :class:`MarkupNode`, or plain SQL.
        parameter_type: Declared type of the invocation argument; used to
            infer parameter types of static statements.
        config: Engine settings; defaults to ``EngineConfig()``.

    Returns:
        A reusable, thread-safe :class:`SqlSource`.

    Raises:
        BuildError: If the script is malformed.
    """
    return _driver_for(config).create_sql_source(script, parameter_type)


def render(
    script: MarkupNode | str,
    argument: Any = None,
    config: EngineConfig | None = None,
) -> BoundStatement:
    """Compile ``script`` and evaluate it against ``argument``.

    Args:
        script: XML markup text, a parsed :class:`MarkupNode`, or plain SQL.
        argument: The invocation argument: a scalar, a mapping or an object.
        config: Engine settings; defaults to ``EngineConfig()``.

    Returns:
        The :class:`BoundStatement` for this call.

    Raises:
        BuildError: If the script is malformed.
        ExpressionError: If an expression fails for ``argument``.
    """
    parameter_type = None if argument is None else type(argument)
    source = compile_statement(script, parameter_type, config)
    return source.get_bound_sql(argument)
