"""Build context value object.

Packages the ``(config, aliases, handlers, evaluator)`` data clump shared by the
script builder, the placeholder rewriter and the sql sources into a single
cohesive object.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from sqltags.compile.base import PlaceholderStyle
from sqltags.compile.registry import (
    PlaceholderStyleFactory,
    TypeAliasRegistry,
    TypeHandlerRegistry,
)
from sqltags.runtime.expression import ExpressionEvaluator
from sqltags.schema.config import EngineConfig


@dataclass(frozen=True)
class BuildContext:
    """Immutable context shared by every statement built with one driver.

    Attributes:
        config: Engine settings.
        aliases: Type alias table used by ``pythonType``/``typeHandler`` hints.
        handlers: Type handler table used to pick a converter per parameter.
        evaluator: Shared expression evaluator.
        style: Positional marker style named by ``config.placeholder_style``.
    """

    config: EngineConfig = field(default_factory=EngineConfig)
    aliases: TypeAliasRegistry = field(default_factory=TypeAliasRegistry)
    handlers: TypeHandlerRegistry = field(default_factory=TypeHandlerRegistry)
    evaluator: ExpressionEvaluator = field(default_factory=ExpressionEvaluator)
    style: PlaceholderStyle = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "style", PlaceholderStyleFactory.create(self.config.placeholder_style)
        )
