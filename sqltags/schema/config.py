"""Pydantic model for engine-wide settings.

Create a config directly, from a dict (e.g. parsed JSON/YAML), or through the
builder::

    from sqltags import EngineConfig

    config = (
        EngineConfig.builder()
        .placeholder_style("format")      # %s markers for psycopg / PyMySQL
        .shrink_whitespace()
        .substitution_filter(r"[A-Za-z0-9_]+")
        .build()
    )
"""
from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sqltags.errors import BuildError


class EngineConfig(BaseModel):
    """Settings shared by every statement compiled with one driver.

    Attributes:
        placeholder_style: Name of a registered
            :class:`~sqltags.compile.base.PlaceholderStyle`
            (``qmark``, ``format``, ``numeric``, ``dollar``).
        shrink_whitespace: Collapse whitespace runs in the final SQL.
        substitution_filter: Regex every ``${...}`` value must fully match;
            ``None`` disables the check.
        database_id: Exposed to expressions as ``_databaseId``.
        cache_size: Maximum number of compiled scripts kept by the driver.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    placeholder_style: str = "qmark"
    shrink_whitespace: bool = False
    substitution_filter: str | None = None
    database_id: str | None = None
    cache_size: int = Field(default=512, ge=0)

    @field_validator("placeholder_style")
    @classmethod
    def _known_style(cls, value: str) -> str:
        from sqltags.compile.registry import PlaceholderStyleFactory

        if value not in PlaceholderStyleFactory.registered_styles():
            raise BuildError(
                f"Unsupported placeholder style: '{value}'. "
                f"Registered styles: {PlaceholderStyleFactory.registered_styles()}.",
                details={"style": value},
            )
        return value

    @field_validator("substitution_filter")
    @classmethod
    def _compilable_filter(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise BuildError(
                    f"Invalid substitution filter pattern '{value}': {exc}"
                ) from exc
        return value

    @classmethod
    def builder(cls) -> EngineConfigBuilder:
        """Return a fluent :class:`EngineConfigBuilder`."""
        return EngineConfigBuilder()


class EngineConfigBuilder:
    """Fluent builder for :class:`EngineConfig`.

    Each method sets exactly one option and returns the builder.
    """

    def __init__(self) -> None:
        self._values: dict[str, object] = {}

    def placeholder_style(self, name: str) -> EngineConfigBuilder:
        self._values["placeholder_style"] = name
        return self

    def shrink_whitespace(self, enabled: bool = True) -> EngineConfigBuilder:
        self._values["shrink_whitespace"] = enabled
        return self

    def substitution_filter(self, pattern: str | None) -> EngineConfigBuilder:
        self._values["substitution_filter"] = pattern
        return self

    def database_id(self, database_id: str | None) -> EngineConfigBuilder:
        self._values["database_id"] = database_id
        return self

    def cache_size(self, size: int) -> EngineConfigBuilder:
        self._values["cache_size"] = size
        return self

    def build(self) -> EngineConfig:
        """Validate and return the :class:`EngineConfig`.

        Raises:
            BuildError: If an option is invalid.
        """
        try:
            return EngineConfig.model_validate(self._values)
        except ValidationError as exc:
            raise BuildError(f"Invalid engine configuration: {exc}") from exc
