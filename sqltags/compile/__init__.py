"""sqltags compilation layer: markup → template sources."""
from sqltags.compile.base import PlaceholderStyle
from sqltags.compile.context import BuildContext
from sqltags.compile.driver import LanguageDriver
from sqltags.compile.placeholder import PlaceholderRewriter, parse_parameter_expression
from sqltags.compile.registry import (
    PlaceholderStyleFactory,
    TypeAliasRegistry,
    TypeHandlerRegistry,
)
from sqltags.compile.script_builder import XMLScriptBuilder
from sqltags.compile.styles import DollarStyle, FormatStyle, NumericStyle, QmarkStyle

__all__ = [
    "PlaceholderStyle",
    "BuildContext",
    "LanguageDriver",
    "PlaceholderRewriter",
    "parse_parameter_expression",
    "PlaceholderStyleFactory",
    "TypeAliasRegistry",
    "TypeHandlerRegistry",
    "XMLScriptBuilder",
    "DollarStyle",
    "FormatStyle",
    "NumericStyle",
    "QmarkStyle",
]
