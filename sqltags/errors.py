"""Custom exception hierarchy for sqltags.

All public errors inherit from SqlTagsError so callers can catch the base
class for any sqltags-specific failure.

Two families exist:

* :class:`BuildError` is raised while a statement is being compiled.  A
  statement that fails to build must never be registered for execution.
* :class:`ExpressionError` is raised while a compiled statement is evaluated
  against one invocation argument.  It never affects the compiled tree.
"""
from __future__ import annotations

from typing import Any


class SqlTagsError(Exception):
    """Base exception for all sqltags errors."""


class BuildError(SqlTagsError):
    """Raised when a statement cannot be compiled.

    Args:
        message: Human-readable description.
        tag: The markup tag being compiled when the error occurred, if any.
        details: Extra structured context (offending token, valid options...).
    """

    def __init__(
        self,
        message: str,
        tag: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.tag = tag
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for tooling."""
        return {
            "error": "BUILD_ERROR",
            "message": str(self),
            "tag": self.tag,
            "details": self.details,
        }


class UnknownTagError(BuildError):
    """Raised when the markup contains an element with no registered handler."""

    def __init__(self, tag: str, known_tags: list[str]) -> None:
        super().__init__(
            f"Unknown element <{tag}> in SQL statement.",
            tag=tag,
            details={"known_tags": known_tags},
        )


class ExpressionError(SqlTagsError):
    """Raised when an expression cannot be evaluated for one invocation.

    Args:
        message: Human-readable description.
        expression: The expression text that failed.
        details: Extra structured context.
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.expression = expression
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for tooling."""
        return {
            "error": "EXPRESSION_ERROR",
            "message": str(self),
            "expression": self.expression,
            "details": self.details,
        }
