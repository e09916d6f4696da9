"""Column type and parameter mode enumerations used in placeholder hints."""
from __future__ import annotations

from enum import Enum


class JdbcType(str, Enum):
    """Target column type named by a ``jdbcType`` placeholder hint.

    The names are the column type vocabulary SQL mapper files conventionally
    use (``#{name,jdbcType=VARCHAR}``).
    """

    ARRAY = "ARRAY"
    BIGINT = "BIGINT"
    BINARY = "BINARY"
    BIT = "BIT"
    BLOB = "BLOB"
    BOOLEAN = "BOOLEAN"
    CHAR = "CHAR"
    CLOB = "CLOB"
    CURSOR = "CURSOR"
    DATE = "DATE"
    DECIMAL = "DECIMAL"
    DOUBLE = "DOUBLE"
    FLOAT = "FLOAT"
    INTEGER = "INTEGER"
    LONGVARCHAR = "LONGVARCHAR"
    NCHAR = "NCHAR"
    NCLOB = "NCLOB"
    NULL = "NULL"
    NUMERIC = "NUMERIC"
    NVARCHAR = "NVARCHAR"
    OTHER = "OTHER"
    REAL = "REAL"
    SMALLINT = "SMALLINT"
    STRUCT = "STRUCT"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    TINYINT = "TINYINT"
    UNDEFINED = "UNDEFINED"
    VARBINARY = "VARBINARY"
    VARCHAR = "VARCHAR"


class ParameterMode(str, Enum):
    """Direction of a parameter; ``OUT``/``INOUT`` only matter for procedures."""

    IN = "IN"
    OUT = "OUT"
    INOUT = "INOUT"
