"""Expression evaluation for ``test``, ``${...}``, ``bind`` and ``collection``.

Expressions are compiled with a sandboxed Jinja2 environment, so the grammar
is Jinja2's expression grammar (``and``/``or``/``not``, comparisons, ``in``,
attribute and item access, literals, filters).  A thin normalisation pass
accepts the operators SQL mapper files are usually written with::

    name != null && name != ''      ->  name != null and name != ''
    !archived || role eq 'admin'    ->  not archived or role == 'admin'
    age gte 18                      ->  age >= 18

The word operators are only rewritten between two operands, so a property
named ``lt`` or ``eq`` can still be tested on its own (``lt != null``).

Names are resolved through the :class:`~sqltags.runtime.context.DynamicContext`
(ephemeral bindings first, then the invocation argument); the Jinja2 context
class is swapped for one that asks the dynamic context before giving up.
"""
from __future__ import annotations

import re
import threading
from collections.abc import Iterable, Mapping
from numbers import Number
from typing import TYPE_CHECKING, Any

from jinja2 import StrictUndefined, TemplateError, TemplateSyntaxError
from jinja2.runtime import Context, Undefined
from jinja2.sandbox import SandboxedEnvironment
from jinja2.utils import missing

from sqltags.errors import ExpressionError
from sqltags.runtime.properties import is_indexed

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext

_SCOPE_KEY = "__sqltags_scope__"

_STRING_LITERAL_RE = re.compile(r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")""")
_LITERAL_MARK_RE = re.compile(r"\x00(\d+)\x00")

_OPERAND_BEFORE = r"(?<=[\w)\]\x00])"
_OPERAND_AFTER = r"(?=[\w(\[\x00+-])"


def _word_operator(word: str, symbol: str) -> tuple[re.Pattern[str], str]:
    return re.compile(rf"{_OPERAND_BEFORE}\s+{word}\s+{_OPERAND_AFTER}"), f" {symbol} "


_OPERATOR_REWRITES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!(?!=)"), " not "),
    _word_operator("gte", ">="),
    _word_operator("lte", "<="),
    _word_operator("gt", ">"),
    _word_operator("lt", "<"),
    _word_operator("neq", "!="),
    _word_operator("eq", "=="),
]


def normalize_expression(expression: str) -> str:
    """Rewrite mapper-style operators to Jinja2 syntax, leaving string literals alone."""
    literals: list[str] = []

    def stash(match: re.Match[str]) -> str:
        literals.append(match.group(0))
        return f"\x00{len(literals) - 1}\x00"

    masked = _STRING_LITERAL_RE.sub(stash, expression)
    for pattern, replacement in _OPERATOR_REWRITES:
        masked = pattern.sub(replacement, masked)
    return _LITERAL_MARK_RE.sub(lambda m: literals[int(m.group(1))], masked).strip()


class _ScopedContext(Context):
    """Jinja2 context that falls back to the dynamic context for free names."""

    def resolve_or_missing(self, key: str) -> Any:
        if key in self.vars:
            return self.vars[key]
        scope = self.parent.get(_SCOPE_KEY)
        if scope is not None and key != _SCOPE_KEY:
            value = scope.lookup(key, missing)
            if value is not missing:
                return value
        return super().resolve_or_missing(key)


class _ExpressionEnvironment(SandboxedEnvironment):
    """Sandboxed environment with mapping-friendly attribute access.

    ``params.name`` on a mapping reads the key and yields ``None`` when it is
    absent, which is what ``name != null`` style tests expect.
    """

    context_class = _ScopedContext

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            if attribute in obj:
                return obj[attribute]
            if not hasattr(obj, attribute):
                return None
        return super().getattr(obj, attribute)


class ExpressionEvaluator:
    """Evaluates expressions against a :class:`DynamicContext`.

    Compiled expressions are cached; the evaluator itself holds no per-call
    state and can be shared by every statement and thread.
    """

    def __init__(self) -> None:
        self._env = _ExpressionEnvironment(undefined=StrictUndefined, autoescape=False)
        self._cache: dict[str, Any] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(self, expression: str, context: DynamicContext) -> Any:
        """Return the value of ``expression``.

        Raises:
            ExpressionError: On syntax errors, unresolved names, sandbox
                violations, or errors raised while evaluating.
        """
        compiled = self._compile(expression)
        try:
            value = compiled({_SCOPE_KEY: context})
        except ExpressionError:
            raise
        except TemplateError as exc:
            raise ExpressionError(
                f"Error evaluating expression '{expression}'. Cause: {exc}",
                expression=expression,
            ) from exc
        except (TypeError, ValueError, ArithmeticError, LookupError, AttributeError) as exc:
            raise ExpressionError(
                f"Error evaluating expression '{expression}'. Cause: {exc}",
                expression=expression,
            ) from exc
        if isinstance(value, Undefined):
            raise ExpressionError(
                f"Expression '{expression}' could not be resolved against the "
                "current bindings or parameter object.",
                expression=expression,
            )
        return value

    def evaluate_boolean(self, expression: str, context: DynamicContext) -> bool:
        """Evaluate a test expression.

        Booleans are returned as-is, numbers are true when non-zero, and any
        other value is true when it is not ``None``.
        """
        value = self.evaluate(expression, context)
        if isinstance(value, bool):
            return value
        if isinstance(value, Number):
            return value != 0
        return value is not None

    def evaluate_iterable(
        self,
        expression: str,
        context: DynamicContext,
        nullable: bool = False,
    ) -> list[tuple[Any, Any]]:
        """Evaluate a collection expression into ``(index_or_key, item)`` pairs.

        Sequences yield their positions, mappings their keys, other iterables
        (sets, generators, views) their iteration positions.

        Raises:
            ExpressionError: If the value is ``None`` (unless ``nullable``),
                text, or not iterable.
        """
        value = self.evaluate(expression, context)
        if value is None:
            if nullable:
                return []
            raise ExpressionError(
                f"The expression '{expression}' evaluated to a null value.",
                expression=expression,
            )
        if isinstance(value, Mapping):
            return list(value.items())
        if is_indexed(value) or (
            isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray))
        ):
            return list(enumerate(value))
        raise ExpressionError(
            f"Error evaluating expression '{expression}'. "
            f"Return value ({value!r}) was not iterable.",
            expression=expression,
            details={"type": type(value).__name__},
        )

    # ------------------------------------------------------------------
    # Compilation cache
    # ------------------------------------------------------------------

    def _compile(self, expression: str) -> Any:
        with self._lock:
            compiled = self._cache.get(expression)
        if compiled is not None:
            return compiled
        try:
            compiled = self._env.compile_expression(
                normalize_expression(expression), undefined_to_none=False
            )
        except TemplateSyntaxError as exc:
            raise ExpressionError(
                f"Malformed expression '{expression}': {exc}",
                expression=expression,
            ) from exc
        with self._lock:
            self._cache[expression] = compiled
        return compiled
