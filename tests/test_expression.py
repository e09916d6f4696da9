"""Unit tests for ExpressionEvaluator and DynamicContext name resolution."""

from __future__ import annotations

import pytest

from sqltags.errors import ExpressionError
from sqltags.runtime.expression import normalize_expression
from sqltags.schema.config import EngineConfig
from tests.fixtures import Author, Blog


def _eval(make_context, expression, argument=None, config=None):
    return make_context(argument, config).evaluate(expression)


# ---------------------------------------------------------------------------
# Operator normalisation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "source, expected",
    [
        ("a && b", "a and b"),
        ("a || b", "a or b"),
        ("!a", "not a"),
        ("a != b", "a != b"),
        ("age gte 18", "age >= 18"),
        ("age lt 18", "age < 18"),
        ("role eq 'admin'", "role == 'admin'"),
        ("role neq 'admin'", "role != 'admin'"),
        ("'b' eq name", "'b' == name"),
        ("(a) gt -1", "(a) > -1"),
        ("lt != null", "lt != null"),
        ("eq", "eq"),
        ("x.gt == 1 and lt gt 2", "x.gt == 1 and lt > 2"),
    ],
)
def test_normalize_expression(source, expected):
    assert " ".join(normalize_expression(source).split()) == expected


def test_normalize_leaves_string_literals_alone():
    assert normalize_expression("name == 'a && !b'") == "name == 'a && !b'"


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def test_logical_operators(make_context):
    assert _eval(make_context, "a && !b", {"a": True, "b": False}) is True
    assert _eval(make_context, "a || b", {"a": False, "b": False}) is False


def test_word_comparisons(make_context):
    assert _eval(make_context, "age gte 18 and role eq 'admin'", {"age": 20, "role": "admin"})


def test_property_named_like_word_operator(make_context):
    assert _eval(make_context, "lt != null and eq", {"lt": 1, "eq": True}) is True
    assert _eval(make_context, "lt gt 0", {"lt": 1}) is True


def test_string_literal_with_operators(make_context):
    assert _eval(make_context, "name == 'a && b'", {"name": "a && b"}) is True


def test_null_keyword(make_context):
    assert _eval(make_context, "title == null", {"title": None}) is True
    assert _eval(make_context, "null", {}) is None


def test_mapping_missing_key_is_none(make_context):
    assert _eval(make_context, "title == null", {}) is True


def test_mapping_nested_attribute_access(make_context):
    arg = {"author": {"name": "bob"}}
    assert _eval(make_context, "author.name == 'bob'", arg) is True
    assert _eval(make_context, "author.missing == null", arg) is True


def test_bean_attribute_access(make_context):
    blog = Blog(title="t", author=Author(1, username="u"))
    assert _eval(make_context, "author.username == 'u'", blog) is True
    assert _eval(make_context, "title", blog) == "t"


def test_bean_missing_property_raises(make_context):
    with pytest.raises(ExpressionError):
        _eval(make_context, "missing != null", Blog())


def test_bare_unresolved_name_raises(make_context):
    with pytest.raises(ExpressionError, match="could not be resolved"):
        _eval(make_context, "missing", Blog())


def test_scalar_argument_answers_any_name(make_context):
    assert _eval(make_context, "value > 3", 5) is True
    assert _eval(make_context, "anything", "text") == "text"


def test_parameter_builtin(make_context):
    assert _eval(make_context, "_parameter", 5) == 5
    assert _eval(make_context, "_parameter.title", Blog(title="x")) == "x"


def test_database_id_builtin(make_context):
    config = EngineConfig(database_id="sqlite")
    assert _eval(make_context, "_databaseId == 'sqlite'", {}, config) is True


def test_argument_names_shadow_jinja_globals(make_context):
    assert _eval(make_context, "range", {"range": 3}) == 3


def test_filters_are_available(make_context):
    assert _eval(make_context, "ids | length", {"ids": [1, 2]}) == 2


def test_syntax_error_raises(make_context):
    with pytest.raises(ExpressionError, match="Malformed expression"):
        _eval(make_context, "a ==", {})


def test_runtime_error_raises(make_context):
    with pytest.raises(ExpressionError):
        _eval(make_context, "a / b", {"a": 1, "b": 0})


def test_sandbox_blocks_dunder_access(make_context):
    with pytest.raises(ExpressionError):
        _eval(make_context, "_parameter.__class__", Blog())


# ---------------------------------------------------------------------------
# Boolean and iterable evaluation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), (1, True), (0, False), (-1.5, True), ("", True), ([], True), (None, False)],
)
def test_evaluate_boolean(make_context, value, expected):
    assert make_context({"v": value}).evaluate_boolean("v") is expected


def test_evaluate_iterable_sequence(make_context, evaluator):
    pairs = evaluator.evaluate_iterable("ids", make_context({"ids": ["a", "b"]}))
    assert pairs == [(0, "a"), (1, "b")]


def test_evaluate_iterable_mapping(make_context, evaluator):
    pairs = evaluator.evaluate_iterable("m", make_context({"m": {"k": 1}}))
    assert pairs == [("k", 1)]


def test_evaluate_iterable_set(make_context, evaluator):
    pairs = evaluator.evaluate_iterable("s", make_context({"s": {7}}))
    assert pairs == [(0, 7)]


def test_evaluate_iterable_nullable(make_context, evaluator):
    assert evaluator.evaluate_iterable("s", make_context({"s": None}), nullable=True) == []


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


def test_inner_scope_shadows_and_is_discarded(make_context):
    c = make_context({"x": "arg"})
    c.bind("x", "root")
    with c.scope():
        c.bind("x", "inner")
        assert c.evaluate("x") == "inner"
    assert c.evaluate("x") == "root"


def test_root_scope_cannot_be_popped(make_context):
    with pytest.raises(RuntimeError):
        make_context().pop_scope()


def test_scratch_shares_bindings_not_buffer(make_context):
    c = make_context()
    c.append_sql("outer")
    scratch = c.scratch()
    scratch.bind("y", 1)
    scratch.append_sql("inner")
    assert c.sql == "outer"
    assert scratch.sql == "inner"
    assert c.lookup("y") == 1
    assert c.unique_number() != scratch.unique_number()
