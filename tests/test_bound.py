"""Unit tests for BoundStatement parameter resolution."""

from __future__ import annotations

import pytest

from sqltags.errors import ExpressionError
from sqltags.runtime.handlers import BooleanTypeHandler
from sqltags.schema.bound import BoundStatement, ParameterMapping
from sqltags.schema.types import JdbcType, ParameterMode
from tests.fixtures import Author, Blog


def _bound(properties, argument, additional=None):
    return BoundStatement(
        sql="",
        parameter_mappings=[ParameterMapping(p) for p in properties],
        additional_parameters=dict(additional or {}),
        parameter_object=argument,
    )


def test_values_resolve_from_mapping_argument():
    assert _bound(["a", "b"], {"a": 1, "b": 2}).parameter_values() == (1, 2)


def test_values_resolve_dotted_paths_on_beans():
    blog = Blog(title="t", author=Author(3, username="u"))
    assert _bound(["title", "author.id"], blog).parameter_values() == ("t", 3)


def test_indexed_paths():
    assert _bound(["ids[1]"], {"ids": [10, 20]}).parameter_values() == (20,)


def test_none_midway_short_circuits():
    assert _bound(["author.username"], Blog()).parameter_values() == (None,)


def test_scalar_argument_answers_any_property():
    assert _bound(["whatever"], 42).parameter_values() == (42,)


def test_additional_parameters_take_precedence():
    bound = _bound(["a", "item.name"], {"a": 1}, {"a": 9, "item": {"name": "n"}})
    assert bound.has_additional_parameter("item.name") is True
    assert bound.get_additional_parameter("item.name") == "n"
    assert bound.parameter_values() == (9, "n")


def test_out_parameters_bind_none():
    bound = BoundStatement(
        sql="",
        parameter_mappings=[ParameterMapping("total", mode=ParameterMode.OUT)],
        parameter_object={"total": 5},
    )
    assert bound.parameter_values() == (None,)


def test_type_handler_applied():
    mapping = ParameterMapping(
        "flag", python_type=bool, jdbc_type=JdbcType.INTEGER, type_handler=BooleanTypeHandler()
    )
    bound = BoundStatement(sql="", parameter_mappings=[mapping], parameter_object={"flag": True})
    assert bound.parameter_values() == (1,)


def test_missing_bean_property_raises():
    with pytest.raises(ExpressionError, match="no property named 'nope'"):
        _bound(["nope"], Blog()).parameter_values()


def test_private_bean_property_is_inaccessible():
    with pytest.raises(ExpressionError, match="not accessible"):
        _bound(["_secret"], Blog()).parameter_values()
