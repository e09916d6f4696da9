"""Type handlers: convert bound values before they reach the DB-API driver.

A handler is selected for every parameter mapping when the statement is
rewritten, either explicitly (``#{id,typeHandler=myapp.types.UuidHandler}``)
or from the :class:`~sqltags.compile.registry.TypeHandlerRegistry` using the
parameter's declared Python type and optional ``jdbcType``.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from sqltags.schema.types import JdbcType


class TypeHandler(ABC):
    """Converts one Python value into a driver-ready parameter value."""

    def set_parameter(self, value: Any, jdbc_type: JdbcType | None = None) -> Any:
        """Return the value handed to the driver for this parameter.

        ``None`` is passed through untouched so the driver binds ``NULL``.
        """
        if value is None:
            return None
        return self.set_non_null_parameter(value, jdbc_type)

    @abstractmethod
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        """Convert a non-``None`` value."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ObjectTypeHandler(TypeHandler):
    """Fallback handler: values are passed through unchanged."""

    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        return value


class StringTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        return str(value)


class IntegerTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        return int(value)


class FloatTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        return float(value)


class DecimalTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))


class BooleanTypeHandler(TypeHandler):
    """Booleans, rendered as ``1``/``0`` when the column is numeric."""

    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        flag = bool(value)
        if jdbc_type in (JdbcType.INTEGER, JdbcType.TINYINT, JdbcType.SMALLINT, JdbcType.BIT):
            return 1 if flag else 0
        return flag


class DateTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            return date.fromisoformat(value)
        return value


class TimeTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        if isinstance(value, str):
            return time.fromisoformat(value)
        return value


class DateTimeTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        if jdbc_type is JdbcType.DATE and isinstance(value, datetime):
            return value.date()
        return value


class BytesTypeHandler(TypeHandler):
    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        return bytes(value)


class UuidTypeHandler(TypeHandler):
    """UUIDs as text unless the column is binary."""

    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        if jdbc_type in (JdbcType.BINARY, JdbcType.VARBINARY):
            return value.bytes
        return str(value)


class EnumTypeHandler(TypeHandler):
    """Enums by name, or by value when the column is numeric."""

    def set_non_null_parameter(self, value: Any, jdbc_type: JdbcType | None) -> Any:
        if not isinstance(value, Enum):
            return value
        if jdbc_type in (JdbcType.INTEGER, JdbcType.SMALLINT, JdbcType.TINYINT, JdbcType.NUMERIC):
            return value.value
        return value.name


#: Handlers registered by default, keyed by the Python type they serve.
DEFAULT_HANDLERS: dict[type, TypeHandler] = {
    object: ObjectTypeHandler(),
    str: StringTypeHandler(),
    int: IntegerTypeHandler(),
    bool: BooleanTypeHandler(),
    float: FloatTypeHandler(),
    Decimal: DecimalTypeHandler(),
    date: DateTypeHandler(),
    time: TimeTypeHandler(),
    datetime: DateTimeTypeHandler(),
    bytes: BytesTypeHandler(),
    uuid.UUID: UuidTypeHandler(),
    Enum: EnumTypeHandler(),
}
