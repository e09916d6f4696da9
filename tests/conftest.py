"""Shared pytest fixtures for sqltags unit and integration tests."""
from __future__ import annotations

import pytest

from sqltags.compile.context import BuildContext
from sqltags.compile.driver import LanguageDriver
from sqltags.runtime.context import DynamicContext
from sqltags.runtime.expression import ExpressionEvaluator
from sqltags.schema.config import EngineConfig
from sqltags.schema.markup import MarkupNode
from tests.fixtures import load_statements


@pytest.fixture(scope="session")
def statements() -> dict[str, MarkupNode]:
    """Statements of the sample blog mapper, by id."""
    return load_statements()


@pytest.fixture()
def driver() -> LanguageDriver:
    """Driver with the default (qmark) configuration."""
    return LanguageDriver()


@pytest.fixture()
def ctx() -> BuildContext:
    return BuildContext()


@pytest.fixture(scope="session")
def evaluator() -> ExpressionEvaluator:
    return ExpressionEvaluator()


@pytest.fixture()
def make_context(evaluator: ExpressionEvaluator):
    """Factory for a fresh evaluation context around one argument."""

    def _make(argument=None, config: EngineConfig | None = None) -> DynamicContext:
        return DynamicContext(argument, evaluator, config or EngineConfig())

    return _make
