"""``<trim>``, ``<where>`` and ``<set>`` nodes.

Override matching
-----------------
Override lists are ``|``-separated tokens (``prefixOverrides="AND|OR"``).
Matching is deterministic:

* blank tokens are ignored and surrounding whitespace in a token is
  irrelevant; whitespace inside a multi-word token (``"ORDER BY"``) matches any
  whitespace run;
* comparison is case-insensitive;
* longer tokens are tried first, ties keep declaration order;
* a token that ends (prefix side) or starts (suffix side) with a word
  character must sit on a word boundary, so ``AND`` never eats the start of
  ``ANDROID``;
* at most one occurrence is stripped from each end.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqltags.nodes.base import SqlNode

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext


def parse_overrides(overrides: str | None) -> tuple[str, ...]:
    """Split a ``|``-separated override list into normalised tokens."""
    if not overrides:
        return ()
    tokens: list[str] = []
    for raw in overrides.split("|"):
        token = " ".join(raw.split())
        if token and token.upper() not in (t.upper() for t in tokens):
            tokens.append(token)
    return tuple(tokens)


def _compile_overrides(tokens: tuple[str, ...], at_start: bool) -> tuple[re.Pattern[str], ...]:
    ordered = sorted(tokens, key=len, reverse=True)
    patterns = []
    for token in ordered:
        body = r"\s+".join(re.escape(word) for word in token.split())
        if at_start:
            tail = r"(?!\w)" if re.match(r"\w", token[-1]) else ""
            patterns.append(re.compile(rf"^{body}{tail}", re.IGNORECASE))
        else:
            head = r"(?<!\w)" if re.match(r"\w", token[0]) else ""
            patterns.append(re.compile(rf"{head}{body}$", re.IGNORECASE))
    return tuple(patterns)


@dataclass(frozen=True)
class TrimSqlNode(SqlNode):
    """Evaluates ``contents`` into a scratch buffer and tidies both ends.

    Attributes:
        contents: Body of the element.
        prefix: Prepended (with one space) when the tidied body is non-empty.
        prefix_overrides: Tokens stripped from the start of the body.
        suffix: Appended (with one space) when the tidied body is non-empty.
        suffix_overrides: Tokens stripped from the end of the body.
    """

    contents: SqlNode
    prefix: str | None = None
    prefix_overrides: tuple[str, ...] = ()
    suffix: str | None = None
    suffix_overrides: tuple[str, ...] = ()
    _prefix_patterns: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False, default=()
    )
    _suffix_patterns: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False, default=()
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_prefix_patterns", _compile_overrides(self.prefix_overrides, at_start=True)
        )
        object.__setattr__(
            self, "_suffix_patterns", _compile_overrides(self.suffix_overrides, at_start=False)
        )

    def apply(self, context: DynamicContext) -> bool:
        scratch = context.scratch()
        result = self.contents.apply(scratch)
        body = self.trim(scratch.sql)
        if body:
            context.append_sql(body)
        return result

    def trim(self, sql: str) -> str:
        """Apply override stripping and prefix/suffix wrapping to ``sql``."""
        body = sql.strip()
        if not body:
            return ""
        for pattern in self._prefix_patterns:
            match = pattern.match(body)
            if match:
                body = body[match.end():].lstrip()
                break
        for pattern in self._suffix_patterns:
            match = pattern.search(body)
            if match:
                body = body[: match.start()].rstrip()
                break
        if not body:
            return ""
        if self.prefix:
            body = f"{self.prefix} {body}"
        if self.suffix:
            body = f"{body} {self.suffix}"
        return body

    def children(self) -> tuple[SqlNode, ...]:
        return (self.contents,)


@dataclass(frozen=True)
class WhereSqlNode(TrimSqlNode):
    """``<where>``: ``WHERE`` prefix, leading ``AND``/``OR`` removed."""

    prefix: str | None = "WHERE"
    prefix_overrides: tuple[str, ...] = ("AND", "OR")


@dataclass(frozen=True)
class SetSqlNode(TrimSqlNode):
    """``<set>``: ``SET`` prefix, stray leading/trailing commas removed."""

    prefix: str | None = "SET"
    prefix_overrides: tuple[str, ...] = (",",)
    suffix_overrides: tuple[str, ...] = (",",)
