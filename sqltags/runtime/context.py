"""Per-invocation evaluation state.

A :class:`DynamicContext` is created for every call to
:meth:`~sqltags.runtime.source.DynamicSqlSource.get_bound_sql` and thrown away
afterwards.  It owns:

* the **fragment buffer** the template nodes append SQL text to;
* the **scope chain** of ephemeral bindings (``<bind>`` values and
  ``<foreach>`` items/indexes), innermost scope last;
* the **exported bindings** that outlive evaluation and end up in
  :attr:`~sqltags.schema.bound.BoundStatement.additional_parameters`;
* the wrapped **invocation argument**.

``scratch()`` returns a context with its own empty buffer that shares
everything else; ``<trim>`` and ``<foreach>`` evaluate their bodies into one
before deciding what to append to the parent.
"""
from __future__ import annotations

import itertools
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from jinja2.utils import missing

from sqltags.runtime.expression import ExpressionEvaluator
from sqltags.runtime.properties import has_segment, is_simple
from sqltags.schema.config import EngineConfig

PARAMETER_OBJECT_KEY = "_parameter"
DATABASE_ID_KEY = "_databaseId"

_BUILTIN_NAMES: dict[str, Any] = {"null": None, "nil": None}


class _SharedState:
    """Bindings and counters shared by a context and its scratch contexts."""

    def __init__(self, parameter_object: Any, config: EngineConfig) -> None:
        self.parameter_object = parameter_object
        self.builtins: dict[str, Any] = {
            **_BUILTIN_NAMES,
            PARAMETER_OBJECT_KEY: parameter_object,
            DATABASE_ID_KEY: config.database_id,
        }
        self.scopes: list[dict[str, Any]] = [{}]
        self.exported: dict[str, Any] = {}
        self.counter = itertools.count()


class DynamicContext:
    """Mutable state for one evaluation pass.

    Args:
        parameter_object: The invocation argument.
        evaluator: Expression evaluator shared by the engine.
        config: Engine settings.
    """

    def __init__(
        self,
        parameter_object: Any,
        evaluator: ExpressionEvaluator,
        config: EngineConfig,
        _state: _SharedState | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.config = config
        self._state = _state or _SharedState(parameter_object, config)
        self._fragments: list[str] = []

    # ------------------------------------------------------------------
    # Buffer
    # ------------------------------------------------------------------

    def append_sql(self, sql: str) -> None:
        """Append a fragment; fragments are joined with single spaces."""
        self._fragments.append(sql)

    @property
    def sql(self) -> str:
        return " ".join(self._fragments).strip()

    def scratch(self) -> DynamicContext:
        """Return a context with an empty buffer sharing this context's bindings."""
        return DynamicContext(
            self._state.parameter_object, self.evaluator, self.config, _state=self._state
        )

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    @property
    def parameter_object(self) -> Any:
        return self._state.parameter_object

    def bind(self, name: str, value: Any) -> None:
        """Bind ``name`` in the innermost scope.

        Bindings made while no ``<foreach>`` scope is open are exported
        under their own name. Loop-scope bindings are exported by the loop
        under per-iteration names.
        """
        self._state.scopes[-1][name] = value
        if len(self._state.scopes) == 1:
            self._state.exported[name] = value

    def export(self, name: str, value: Any) -> None:
        """Record a binding that must survive evaluation."""
        self._state.exported[name] = value

    def push_scope(self) -> None:
        self._state.scopes.append({})

    def pop_scope(self) -> None:
        if len(self._state.scopes) == 1:
            raise RuntimeError("Cannot pop the root binding scope.")
        self._state.scopes.pop()

    @contextmanager
    def scope(self) -> Iterator[DynamicContext]:
        """Open a nested binding scope for the duration of the block."""
        self.push_scope()
        try:
            yield self
        finally:
            self.pop_scope()

    def local_bindings(self) -> dict[str, Any]:
        """Copy of the innermost scope."""
        return dict(self._state.scopes[-1])

    def unique_number(self) -> int:
        """Return a number unique within this invocation."""
        return next(self._state.counter)

    @property
    def additional_bindings(self) -> dict[str, Any]:
        """Copy of the exported bindings."""
        return dict(self._state.exported)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, name: str, default: Any = missing) -> Any:
        """Resolve a bare name.

        Order: scopes innermost first, built-in names (``_parameter``,
        ``_databaseId``, ``null``), then the invocation argument.  A scalar
        argument answers every name; a mapping answers every name (``None``
        when the key is absent); a bean answers its public attributes.
        """
        for bindings in reversed(self._state.scopes):
            if name in bindings:
                return bindings[name]
        if name in self._state.builtins:
            return self._state.builtins[name]
        argument = self._state.parameter_object
        if is_simple(argument):
            return argument
        if isinstance(argument, Mapping):
            return argument.get(name)
        if has_segment(argument, name):
            return getattr(argument, name)
        return default

    def evaluate(self, expression: str) -> Any:
        return self.evaluator.evaluate(expression, self)

    def evaluate_boolean(self, expression: str) -> bool:
        return self.evaluator.evaluate_boolean(expression, self)
