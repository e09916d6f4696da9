"""Placeholder style abstraction.

The rewriter turns every ``#{...}`` placeholder into the positional marker the
target DB-API driver understands.  Each driver family uses a different
``paramstyle`` (PEP 249), so the marker is produced by a small strategy object:

- ``QmarkStyle``   -> ``?``      (sqlite3, pyodbc)
- ``FormatStyle``  -> ``%s``     (psycopg, PyMySQL)
- ``NumericStyle`` -> ``:1``     (cx_Oracle / python-oracledb)
- ``DollarStyle``  -> ``$1``     (asyncpg)
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class PlaceholderStyle(ABC):
    """Abstract base for positional marker styles."""

    @abstractmethod
    def marker(self, position: int) -> str:
        """Return the marker for the parameter at ``position``.

        Args:
            position: 1-based position of the parameter in the statement.

        Returns:
            The marker text to splice into the SQL.
        """

    @property
    @abstractmethod
    def style_name(self) -> str:
        """Return the canonical style name (``'qmark'``, ``'format'``, ...)."""
