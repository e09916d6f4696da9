"""Built-in positional placeholder styles."""

from __future__ import annotations

from sqltags.compile.base import PlaceholderStyle


class QmarkStyle(PlaceholderStyle):
    """``?`` markers – sqlite3 and ODBC drivers."""

    @property
    def style_name(self) -> str:
        return "qmark"

    def marker(self, position: int) -> str:
        return "?"


class FormatStyle(PlaceholderStyle):
    """``%s`` markers – psycopg and PyMySQL.

    Literal ``%`` characters elsewhere in the statement must already be
    doubled by the statement author; the rewriter does not touch them.
    """

    @property
    def style_name(self) -> str:
        return "format"

    def marker(self, position: int) -> str:
        return "%s"


class NumericStyle(PlaceholderStyle):
    """``:1``, ``:2`` ... markers – Oracle drivers."""

    @property
    def style_name(self) -> str:
        return "numeric"

    def marker(self, position: int) -> str:
        return f":{position}"


class DollarStyle(PlaceholderStyle):
    """``$1``, ``$2`` ... markers – asyncpg and PostgreSQL server-side prepare."""

    @property
    def style_name(self) -> str:
        return "dollar"

    def marker(self, position: int) -> str:
        return f"${position}"
