"""Unit tests for placeholder parsing and rewriting."""

from __future__ import annotations

from decimal import Decimal

import pytest

from sqltags.compile.context import BuildContext
from sqltags.compile.placeholder import PlaceholderRewriter, parse_parameter_expression
from sqltags.compile.registry import TypeAliasRegistry
from sqltags.errors import BuildError
from sqltags.runtime.handlers import DecimalTypeHandler, ObjectTypeHandler, TypeHandler
from sqltags.schema.config import EngineConfig
from sqltags.schema.types import JdbcType, ParameterMode
from tests.fixtures import Author, Blog


class UpperHandler(TypeHandler):
    def set_non_null_parameter(self, value, jdbc_type):
        return str(value).upper()


def _rewrite(sql, parameter_type=dict, additional=None, argument=None, ctx=None):
    rewriter = PlaceholderRewriter(ctx or BuildContext())
    if argument is None:
        return rewriter.parse(sql, parameter_type, additional or {})
    return rewriter.parse(sql, parameter_type, additional or {}, argument)


# ---------------------------------------------------------------------------
# Placeholder body grammar
# ---------------------------------------------------------------------------


def test_parse_plain_property():
    assert parse_parameter_expression("id") == {"property": "id"}


def test_parse_jdbc_type_shorthand():
    assert parse_parameter_expression("born:DATE") == {"property": "born", "jdbcType": "DATE"}


def test_parse_options():
    assert parse_parameter_expression(" price , pythonType=decimal , numericScale=2") == {
        "property": "price",
        "pythonType": "decimal",
        "numericScale": "2",
    }


def test_parse_expression_form_rejected():
    with pytest.raises(BuildError, match="not supported"):
        parse_parameter_expression("(a + b)")


def test_parse_option_without_value_reports_position():
    with pytest.raises(BuildError, match="position 3"):
        parse_parameter_expression("id,jdbcType")


def test_parse_empty_property_rejected():
    with pytest.raises(BuildError, match="Missing property"):
        parse_parameter_expression("  ")


# ---------------------------------------------------------------------------
# Rewriting
# ---------------------------------------------------------------------------


def test_rewrite_preserves_placeholder_order():
    source = _rewrite(
        "SELECT * FROM t WHERE a = #{a} AND b = #{b} OR a2 = #{a}",
        argument={"a": 1, "b": "x"},
    )
    assert source.sql == "SELECT * FROM t WHERE a = ? AND b = ? OR a2 = ?"
    assert [m.property for m in source.parameter_mappings] == ["a", "b", "a"]
    assert [m.python_type for m in source.parameter_mappings] == [int, str, int]


@pytest.mark.parametrize(
    "style, expected",
    [
        ("qmark", "a = ? AND b = ?"),
        ("format", "a = %s AND b = %s"),
        ("numeric", "a = :1 AND b = :2"),
        ("dollar", "a = $1 AND b = $2"),
    ],
)
def test_rewrite_uses_configured_style(style, expected):
    ctx = BuildContext(config=EngineConfig(placeholder_style=style))
    assert _rewrite("a = #{a} AND b = #{b}", ctx=ctx).sql == expected


def test_rewrite_escaped_placeholder_is_literal():
    source = _rewrite("a = \\#{a}")
    assert source.sql == "a = #{a}"
    assert source.parameter_mappings == []


def test_rewrite_unterminated_placeholder_is_literal():
    source = _rewrite("a = #{a")
    assert source.sql == "a = #{a"
    assert source.parameter_mappings == []


def test_rewrite_shrinks_whitespace_when_configured():
    ctx = BuildContext(config=EngineConfig(shrink_whitespace=True))
    assert _rewrite("SELECT  *\n   FROM t\n", ctx=ctx).sql == "SELECT * FROM t"


def test_rewrite_invalid_hint_rejected():
    with pytest.raises(BuildError, match="An invalid property 'foo'"):
        _rewrite("#{a,foo=1}")


def test_rewrite_expression_hint_rejected():
    with pytest.raises(BuildError, match="not supported"):
        _rewrite("#{a,expression=b}")


def test_rewrite_bad_jdbc_type_rejected():
    with pytest.raises(BuildError, match="Unknown jdbcType"):
        _rewrite("#{a,jdbcType=NOPE}")


def test_rewrite_bad_numeric_scale_rejected():
    with pytest.raises(BuildError, match="numericScale"):
        _rewrite("#{a,numericScale=two}")


def test_rewrite_malformed_property_rejected():
    with pytest.raises(BuildError):
        _rewrite("#{a..b}")


def test_rewrite_hints_populate_mapping():
    source = _rewrite("#{total,mode=OUT,jdbcType=NUMERIC,numericScale=2,jdbcTypeName=MONEY}")
    mapping = source.parameter_mappings[0]
    assert mapping.mode is ParameterMode.OUT
    assert mapping.jdbc_type is JdbcType.NUMERIC
    assert mapping.numeric_scale == 2
    assert mapping.jdbc_type_name == "MONEY"


def test_rewrite_jdbc_type_shorthand():
    mapping = _rewrite("#{born:DATE}").parameter_mappings[0]
    assert mapping.jdbc_type is JdbcType.DATE


def test_python_type_alias_selects_handler():
    mapping = _rewrite("#{price,pythonType=decimal}").parameter_mappings[0]
    assert mapping.python_type is Decimal
    assert isinstance(mapping.type_handler, DecimalTypeHandler)


def test_python_type_dotted_path():
    mapping = _rewrite("#{price,pythonType=decimal.Decimal}").parameter_mappings[0]
    assert mapping.python_type is Decimal


def test_type_handler_alias():
    aliases = TypeAliasRegistry()
    aliases.register_alias("upper", UpperHandler)
    ctx = BuildContext(aliases=aliases)
    source = _rewrite("#{name,typeHandler=upper}", argument={"name": "bob"}, ctx=ctx)
    mapping = source.parameter_mappings[0]
    assert isinstance(mapping.type_handler, UpperHandler)
    assert source.get_bound_sql({"name": "bob"}).parameter_values() == ("BOB",)


def test_type_handler_must_be_a_handler():
    with pytest.raises(BuildError, match="not a TypeHandler"):
        _rewrite("#{name,typeHandler=decimal}")


class PairHandler(TypeHandler):
    def __init__(self, left, right):
        self.left, self.right = left, right

    def set_non_null_parameter(self, value, jdbc_type):
        return value


def test_type_handler_that_cannot_be_built_rejected():
    aliases = TypeAliasRegistry()
    aliases.register_alias("pair", PairHandler)
    with pytest.raises(BuildError, match="cannot be instantiated"):
        _rewrite("#{id,typeHandler=pair}", ctx=BuildContext(aliases=aliases))


# ---------------------------------------------------------------------------
# Type inference
# ---------------------------------------------------------------------------


def test_additional_bindings_take_precedence():
    mapping = _rewrite("#{p}", additional={"p": 5}, argument={"p": "x"}).parameter_mappings[0]
    assert mapping.python_type is int


def test_scalar_parameter_type_used_directly():
    mapping = _rewrite("#{anything}", parameter_type=int, argument=5).parameter_mappings[0]
    assert mapping.python_type is int


def test_unknown_property_falls_back_to_object():
    mapping = _rewrite("#{zzz}", argument={"a": 1}).parameter_mappings[0]
    assert mapping.python_type is object
    assert isinstance(mapping.type_handler, ObjectTypeHandler)


def test_annotations_used_without_argument():
    source = _rewrite("#{title} #{author.username} #{author.id}", parameter_type=Blog)
    assert [m.python_type for m in source.parameter_mappings] == [str, str, int]


def test_nested_value_type_from_argument():
    blog = Blog(author=Author(1, username="u"))
    mapping = _rewrite("#{author.username}", parameter_type=Blog, argument=blog).parameter_mappings[0]
    assert mapping.python_type is str
