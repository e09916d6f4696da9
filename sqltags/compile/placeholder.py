"""``#{...}`` placeholder rewriting.

Runs after template evaluation, on the fully expanded SQL text.  Every
``#{property[:jdbcType][,hint=value]*}`` is replaced by the positional marker
of the configured :class:`~sqltags.compile.base.PlaceholderStyle` and
described by one :class:`~sqltags.schema.bound.ParameterMapping`, in the order
the placeholders appear.  A repeated property yields one mapping per
occurrence.

Supported hints::

    #{id}                                  plain property
    #{author.name}                         property path
    #{born,jdbcType=DATE}                  target column type
    #{born:DATE}                           shorthand for the above
    #{price,pythonType=decimal,numericScale=2}
    #{uid,typeHandler=myapp.types.UuidBinaryHandler}
    #{total,mode=OUT,jdbcType=NUMERIC}
"""
from __future__ import annotations

import logging
import re
import typing
from collections.abc import Mapping
from typing import Any

from sqltags.compile.context import BuildContext
from sqltags.errors import BuildError, ExpressionError
from sqltags.runtime.properties import get_segment, resolve_path, split_path
from sqltags.runtime.tokens import GenericTokenParser
from sqltags.schema.bound import ParameterMapping
from sqltags.schema.types import JdbcType, ParameterMode

logger = logging.getLogger(__name__)

PLACEHOLDER_OPEN = "#{"
PLACEHOLDER_CLOSE = "}"

VALID_HINTS: tuple[str, ...] = (
    "pythonType",
    "jdbcType",
    "mode",
    "numericScale",
    "typeHandler",
    "jdbcTypeName",
    "property",
)

_NO_ARGUMENT = object()
_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Placeholder body grammar
# ---------------------------------------------------------------------------


def parse_parameter_expression(body: str) -> dict[str, str]:
    """Parse a placeholder body into ``{"property": ..., hint: value, ...}``.

    Raises:
        BuildError: On ``(expression)`` bodies, an empty property, a missing
            jdbc type after ``:``, or an option without ``=``.
    """
    result: dict[str, str] = {}
    pos = _skip_ws(body, 0)
    if pos < len(body) and body[pos] == "(":
        raise BuildError(
            f"Expression based parameters are not supported: #{{{body}}}",
            details={"placeholder": body},
        )

    end = _skip_until(body, pos, ",:")
    prop = body[pos:end].strip()
    if not prop:
        raise BuildError(
            f"Missing property name in placeholder #{{{body}}}",
            details={"placeholder": body},
        )
    result["property"] = prop

    pos = _skip_ws(body, end)
    if pos < len(body) and body[pos] == ":":
        start = _skip_ws(body, pos + 1)
        end = _skip_until(body, start, ",")
        jdbc = body[start:end].strip()
        if not jdbc:
            raise _parse_error(body, start)
        result["jdbcType"] = jdbc
        pos = end
    if pos < len(body):
        if body[pos] != ",":
            raise _parse_error(body, pos)
        _parse_options(body, pos + 1, result)
    return result


def _parse_options(body: str, pos: int, result: dict[str, str]) -> None:
    while pos < len(body):
        start = _skip_ws(body, pos)
        if start >= len(body):
            raise _parse_error(body, start)
        eq = _skip_until(body, start, "=")
        if eq >= len(body):
            raise _parse_error(body, start)
        name = body[start:eq].strip()
        end = _skip_until(body, eq + 1, ",")
        value = body[eq + 1 : end].strip()
        if not name or "," in name:
            raise _parse_error(body, start)
        result[name] = value
        pos = end + 1


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] <= " ":
        pos += 1
    return pos


def _skip_until(text: str, pos: int, stops: str) -> int:
    while pos < len(text) and text[pos] not in stops:
        pos += 1
    return pos


def _parse_error(body: str, pos: int) -> BuildError:
    return BuildError(
        f"Parsing error in {{{body}}} in position {pos}",
        details={"placeholder": body, "position": pos},
    )


# ---------------------------------------------------------------------------
# Rewriter
# ---------------------------------------------------------------------------


class PlaceholderRewriter:
    """Turns expanded SQL into a :class:`~sqltags.runtime.source.StaticSqlSource`.

    Args:
        ctx: Shared build context (style, registries, config).
    """

    def __init__(self, ctx: BuildContext) -> None:
        self._ctx = ctx

    def parse(
        self,
        original_sql: str,
        parameter_type: type | None = None,
        additional_parameters: Mapping[str, Any] | None = None,
        parameter_object: Any = _NO_ARGUMENT,
    ):
        """Rewrite ``original_sql``.

        Args:
            original_sql: SQL text with ``#{...}`` placeholders.
            parameter_type: Declared type of the invocation argument, used to
                infer parameter types from annotations.
            additional_parameters: Exported bindings; they take precedence over
                the argument's own properties.
            parameter_object: The invocation argument itself, when known.

        Returns:
            A :class:`~sqltags.runtime.source.StaticSqlSource`.

        Raises:
            BuildError: On malformed placeholders or unresolvable type hints.
        """
        from sqltags.runtime.source import StaticSqlSource

        mappings: list[ParameterMapping] = []
        additional = additional_parameters or {}

        def handle(body: str) -> str:
            mappings.append(
                self.build_mapping(body, parameter_type, additional, parameter_object)
            )
            return self._ctx.style.marker(len(mappings))

        sql = GenericTokenParser(PLACEHOLDER_OPEN, PLACEHOLDER_CLOSE, handle).parse(original_sql)
        if self._ctx.config.shrink_whitespace:
            sql = _WHITESPACE_RE.sub(" ", sql).strip()
        logger.debug("Rewrote %d placeholder(s)", len(mappings))
        return StaticSqlSource(self._ctx, sql, mappings)

    def build_mapping(
        self,
        body: str,
        parameter_type: type | None,
        additional: Mapping[str, Any],
        parameter_object: Any = _NO_ARGUMENT,
    ) -> ParameterMapping:
        """Build the :class:`ParameterMapping` for one placeholder body."""
        options = parse_parameter_expression(body)
        prop = options.pop("property")
        python_type = self._infer_type(prop, parameter_type, additional, parameter_object)
        jdbc_type: JdbcType | None = None
        mode = ParameterMode.IN
        numeric_scale: int | None = None
        handler_alias: str | None = None
        jdbc_type_name: str | None = None

        for name, value in options.items():
            if name == "pythonType":
                python_type = self._ctx.aliases.resolve_alias(value) or object
            elif name == "jdbcType":
                jdbc_type = _enum_value(JdbcType, value, "jdbcType", body)
            elif name == "mode":
                mode = _enum_value(ParameterMode, value, "mode", body)
            elif name == "numericScale":
                try:
                    numeric_scale = int(value)
                except ValueError as exc:
                    raise BuildError(
                        f"numericScale must be an integer in #{{{body}}}",
                        details={"placeholder": body},
                    ) from exc
            elif name == "typeHandler":
                handler_alias = value
            elif name == "jdbcTypeName":
                jdbc_type_name = value
            elif name == "property":
                pass
            elif name == "expression":
                raise BuildError(
                    "Expression based parameters are not supported.",
                    details={"placeholder": body},
                )
            else:
                raise BuildError(
                    f"An invalid property '{name}' was found in mapping #{{{body}}}. "
                    f"Valid properties are {', '.join(VALID_HINTS)}",
                    details={"placeholder": body, "property": name},
                )

        if handler_alias:
            handler_type = self._ctx.aliases.resolve_alias(handler_alias)
            handler = self._ctx.handlers.instantiate(handler_type, python_type)
        else:
            handler = self._ctx.handlers.get(python_type, jdbc_type)
        if handler is None:
            raise BuildError(
                f"Type handler was null on parameter mapping for property '{prop}'. "
                "It was either not specified and/or could not be found for the "
                f"pythonType ({python_type.__qualname__}) : jdbcType ({jdbc_type}) combination.",
                details={"property": prop},
            )

        return ParameterMapping(
            property=prop,
            python_type=python_type,
            jdbc_type=jdbc_type,
            mode=mode,
            numeric_scale=numeric_scale,
            type_handler=handler,
            jdbc_type_name=jdbc_type_name,
        )

    # ------------------------------------------------------------------
    # Type inference
    # ------------------------------------------------------------------

    def _infer_type(
        self,
        prop: str,
        parameter_type: type | None,
        additional: Mapping[str, Any],
        parameter_object: Any,
    ) -> type:
        try:
            root, *rest = split_path(prop)
        except ExpressionError as exc:
            raise BuildError(str(exc), details={"property": prop}) from exc
        if root in additional:
            try:
                return _type_of(_resolve_rest(additional[root], rest))
            except ExpressionError:
                return object
        if self._ctx.handlers.has_handler(parameter_type):
            return parameter_type  # type: ignore[return-value]
        if parameter_object is not _NO_ARGUMENT and parameter_object is not None:
            try:
                return _type_of(resolve_path(parameter_object, prop))
            except ExpressionError:
                return object
        return _annotated_type(parameter_type, [root, *rest])


def _resolve_rest(value: Any, segments: list[str | int]) -> Any:
    for segment in segments:
        if value is None:
            return None
        value = get_segment(value, segment)
    return value


def _type_of(value: Any) -> type:
    return object if value is None else type(value)


def _annotated_type(owner: type | None, segments: list[str | int]) -> type:
    current: Any = owner
    for segment in segments:
        if current is None or current is object or isinstance(segment, int):
            return object
        try:
            hints = typing.get_type_hints(current)
        except (NameError, TypeError):
            return object
        current = _unwrap_optional(hints.get(segment))
    return current if isinstance(current, type) else object


def _unwrap_optional(hint: Any) -> Any:
    args = [a for a in typing.get_args(hint) if a is not type(None)]
    if typing.get_origin(hint) is not None and len(args) == 1:
        return args[0]
    return hint


def _enum_value(enum_cls: type, value: str, hint: str, body: str):
    try:
        return enum_cls(value.strip().upper())
    except ValueError as exc:
        valid = ", ".join(m.value for m in enum_cls)
        raise BuildError(
            f"Unknown {hint} '{value}' in #{{{body}}}. Valid values are {valid}",
            details={"placeholder": body, hint: value},
        ) from exc
