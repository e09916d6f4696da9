"""Tests for EngineConfig, PlaceholderStyleFactory and the type registries."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

import pydantic
import pytest

from sqltags.compile.base import PlaceholderStyle
from sqltags.compile.registry import (
    PlaceholderStyleFactory,
    TypeAliasRegistry,
    TypeHandlerRegistry,
)
from sqltags.errors import BuildError
from sqltags.runtime.handlers import (
    BooleanTypeHandler,
    DateTimeTypeHandler,
    EnumTypeHandler,
    IntegerTypeHandler,
    ObjectTypeHandler,
    StringTypeHandler,
    TypeHandler,
    UuidTypeHandler,
)
from sqltags.schema.config import EngineConfig
from sqltags.schema.types import JdbcType
from tests.fixtures import Blog


class Color(enum.Enum):
    RED = 1
    GREEN = 2


# ---------------------------------------------------------------------------
# EngineConfig
# ---------------------------------------------------------------------------


def test_config_defaults():
    config = EngineConfig()
    assert config.placeholder_style == "qmark"
    assert config.shrink_whitespace is False
    assert config.substitution_filter is None
    assert config.cache_size == 512


def test_config_builder():
    config = (
        EngineConfig.builder()
        .placeholder_style("dollar")
        .shrink_whitespace()
        .substitution_filter(r"\w+")
        .database_id("postgres")
        .cache_size(16)
        .build()
    )
    assert config == EngineConfig(
        placeholder_style="dollar",
        shrink_whitespace=True,
        substitution_filter=r"\w+",
        database_id="postgres",
        cache_size=16,
    )


def test_config_from_dict():
    config = EngineConfig.model_validate({"placeholder_style": "numeric"})
    assert config.placeholder_style == "numeric"


@pytest.mark.parametrize(
    "configure",
    [
        lambda b: b.placeholder_style("bogus"),
        lambda b: b.cache_size(-1),
        lambda b: b.substitution_filter("(unclosed"),
    ],
)
def test_config_builder_rejects_invalid_values(configure):
    with pytest.raises(BuildError):
        configure(EngineConfig.builder()).build()


def test_config_rejects_unknown_fields():
    with pytest.raises(pydantic.ValidationError):
        EngineConfig.model_validate({"paramstyle": "qmark"})


def test_config_is_frozen():
    with pytest.raises(pydantic.ValidationError):
        EngineConfig().cache_size = 3


# ---------------------------------------------------------------------------
# PlaceholderStyleFactory
# ---------------------------------------------------------------------------


def test_builtin_styles_registered():
    assert {"qmark", "format", "numeric", "dollar"} <= set(
        PlaceholderStyleFactory.registered_styles()
    )


def test_unknown_style_raises():
    with pytest.raises(BuildError, match="Unsupported placeholder style"):
        PlaceholderStyleFactory.create("bogus")


def test_custom_style_registration():
    @PlaceholderStyleFactory.register("at_numbered")
    class AtStyle(PlaceholderStyle):
        @property
        def style_name(self) -> str:
            return "at_numbered"

        def marker(self, position: int) -> str:
            return f"@p{position}"

    try:
        style = PlaceholderStyleFactory.create("at_numbered")
        assert style.marker(2) == "@p2"
        assert EngineConfig(placeholder_style="at_numbered").placeholder_style == "at_numbered"
    finally:
        PlaceholderStyleFactory._styles.pop("at_numbered", None)


# ---------------------------------------------------------------------------
# TypeAliasRegistry
# ---------------------------------------------------------------------------


def test_alias_lookup_is_case_insensitive():
    aliases = TypeAliasRegistry()
    assert aliases.resolve_alias("INT") is int
    assert aliases.resolve_alias(" Timestamp ") is datetime
    assert aliases.resolve_alias(None) is None


def test_alias_dotted_import():
    assert TypeAliasRegistry().resolve_alias("tests.fixtures.Blog") is Blog


@pytest.mark.parametrize("name", ["nope", "no.such.module.Type", "os.path.join"])
def test_alias_unresolvable(name):
    with pytest.raises(BuildError):
        TypeAliasRegistry().resolve_alias(name)


def test_alias_conflict_rejected():
    aliases = TypeAliasRegistry()
    aliases.register_alias("blog", Blog)
    aliases.register_alias("BLOG", Blog)
    with pytest.raises(BuildError, match="already mapped"):
        aliases.register_alias("blog", dict)


# ---------------------------------------------------------------------------
# TypeHandlerRegistry
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "python_type, handler_type",
    [
        (str, StringTypeHandler),
        (int, IntegerTypeHandler),
        (bool, BooleanTypeHandler),
        (datetime, DateTimeTypeHandler),
        (uuid.UUID, UuidTypeHandler),
        (Color, EnumTypeHandler),
        (Blog, ObjectTypeHandler),
        (None, ObjectTypeHandler),
    ],
)
def test_handler_lookup_walks_mro(python_type, handler_type):
    assert isinstance(TypeHandlerRegistry().get(python_type), handler_type)


def test_has_handler_excludes_object_fallback():
    handlers = TypeHandlerRegistry()
    assert handlers.has_handler(int) is True
    assert handlers.has_handler(Blog) is False
    assert handlers.has_handler(None) is False


def test_jdbc_specific_handler_wins():
    handlers = TypeHandlerRegistry()

    @handlers.register(str, JdbcType.CLOB)
    class ClobHandler(TypeHandler):
        def set_non_null_parameter(self, value, jdbc_type):
            return value.encode()

    assert isinstance(handlers.get(str, JdbcType.CLOB), ClobHandler)
    assert isinstance(handlers.get(str, JdbcType.VARCHAR), StringTypeHandler)
    assert isinstance(handlers.get(str), StringTypeHandler)


def test_instantiate_rejects_non_handler():
    with pytest.raises(BuildError, match="not a TypeHandler"):
        TypeHandlerRegistry().instantiate(dict)


def test_instantiate_passes_python_type_when_accepted():
    class TypedHandler(TypeHandler):
        def __init__(self, python_type):
            self.python_type = python_type

        def set_non_null_parameter(self, value, jdbc_type):
            return value

    handler = TypeHandlerRegistry().instantiate(TypedHandler, Decimal)
    assert handler.python_type is Decimal


class TwoArgHandler(TypeHandler):
    def __init__(self, first, second):
        self.first, self.second = first, second

    def set_non_null_parameter(self, value, jdbc_type):
        return value


def test_instantiate_unconstructible_handler_raises_build_error():
    with pytest.raises(BuildError, match="cannot be instantiated") as excinfo:
        TypeHandlerRegistry().instantiate(TwoArgHandler, int)
    assert isinstance(excinfo.value.__cause__, TypeError)
    assert "TwoArgHandler" in excinfo.value.details["type_handler"]


# ---------------------------------------------------------------------------
# Built-in handlers
# ---------------------------------------------------------------------------


def test_handlers_pass_none_through():
    assert IntegerTypeHandler().set_parameter(None) is None


@pytest.mark.parametrize(
    "handler, value, jdbc_type, expected",
    [
        (BooleanTypeHandler(), True, JdbcType.INTEGER, 1),
        (BooleanTypeHandler(), False, None, False),
        (EnumTypeHandler(), Color.GREEN, None, "GREEN"),
        (EnumTypeHandler(), Color.GREEN, JdbcType.INTEGER, 2),
        (DateTimeTypeHandler(), "2024-05-01T10:00:00", None, datetime(2024, 5, 1, 10)),
        (DateTimeTypeHandler(), datetime(2024, 5, 1, 10), JdbcType.DATE, date(2024, 5, 1)),
        (IntegerTypeHandler(), "7", None, 7),
    ],
)
def test_builtin_conversions(handler, value, jdbc_type, expected):
    assert handler.set_parameter(value, jdbc_type) == expected


def test_uuid_handler_binary_columns():
    value = uuid.uuid4()
    assert UuidTypeHandler().set_parameter(value, JdbcType.BINARY) == value.bytes
    assert UuidTypeHandler().set_parameter(value) == str(value)
