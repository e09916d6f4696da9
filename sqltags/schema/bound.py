"""Output of one statement evaluation: SQL text plus ordered parameters."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqltags.runtime.handlers import ObjectTypeHandler, TypeHandler
from sqltags.runtime.properties import get_segment, is_simple, resolve_path, split_path
from sqltags.schema.types import JdbcType, ParameterMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterMapping:
    """Describes one positional parameter of a bound statement.

    Attributes:
        property: Property path the value is read from (``author.id``).
        python_type: Declared or inferred Python type of the value.
        jdbc_type: Target column type hint.
        mode: Parameter direction.
        numeric_scale: Scale hint for numeric ``OUT`` parameters.
        type_handler: Converter applied before the value reaches the driver.
        jdbc_type_name: Vendor-specific type name hint.
    """

    property: str
    python_type: type = object
    jdbc_type: JdbcType | None = None
    mode: ParameterMode = ParameterMode.IN
    numeric_scale: int | None = None
    type_handler: TypeHandler = field(default_factory=ObjectTypeHandler)
    jdbc_type_name: str | None = None


@dataclass
class BoundStatement:
    """The final, executable form of a statement for one invocation.

    Attributes:
        sql: Statement text with positional markers.
        parameter_mappings: One entry per marker, in marker order.
        additional_parameters: Named values contributed by ``<bind>`` and
            ``<foreach>`` that placeholders may refer to.
        parameter_object: The invocation argument the statement was built for.
    """

    sql: str
    parameter_mappings: list[ParameterMapping]
    additional_parameters: dict[str, Any] = field(default_factory=dict)
    parameter_object: Any = None

    def has_additional_parameter(self, name: str) -> bool:
        """True if the first segment of ``name`` is an additional parameter."""
        root = split_path(name)[0]
        return root in self.additional_parameters

    def get_additional_parameter(self, name: str) -> Any:
        """Resolve ``name`` (a dotted path) against the additional parameters."""
        root, *rest = split_path(name)
        value = self.additional_parameters.get(root)
        for segment in rest:
            if value is None:
                return None
            value = get_segment(value, segment)
        return value

    def set_additional_parameter(self, name: str, value: Any) -> None:
        self.additional_parameters[name] = value

    def resolve_parameter(self, mapping: ParameterMapping) -> Any:
        """Return the raw value for ``mapping``.

        Additional parameters take precedence over the invocation argument.
        A scalar invocation argument answers every property name.
        """
        name = mapping.property
        if self.has_additional_parameter(name):
            return self.get_additional_parameter(name)
        if is_simple(self.parameter_object):
            return self.parameter_object
        return resolve_path(self.parameter_object, name)

    def parameter_values(self) -> tuple[Any, ...]:
        """Return the converted positional values for ``cursor.execute``.

        Only ``IN`` and ``INOUT`` mappings contribute a value; ``OUT``
        parameters are bound as ``None``.
        """
        values: list[Any] = []
        for mapping in self.parameter_mappings:
            if mapping.mode is ParameterMode.OUT:
                values.append(None)
                continue
            raw = self.resolve_parameter(mapping)
            values.append(mapping.type_handler.set_parameter(raw, mapping.jdbc_type))
        logger.debug("Parameters: %s", values)
        return tuple(values)
