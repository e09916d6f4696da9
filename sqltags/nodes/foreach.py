"""``<foreach>`` node."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from sqltags.nodes.base import SqlNode
from sqltags.runtime.tokens import GenericTokenParser

if TYPE_CHECKING:
    from sqltags.runtime.context import DynamicContext


@dataclass(frozen=True)
class ForEachSqlNode(SqlNode):
    """Repeats ``contents`` once per element of a collection.

    Each iteration runs in a fresh binding scope holding ``item`` (the
    element, or the value for mappings), ``index`` (the position, or the
    key for mappings) and any ``<bind>`` made in the body.  Placeholders that
    refer to those names (``#{item}``, ``#{item.name}``) are renamed to
    per-call unique names (``#{__frch_item_0.name}``) whose values are
    exported, so the rewritten statement stays resolvable after the scope is
    gone.

    Iterations producing no text are skipped when joining with ``separator``.
    An empty collection contributes nothing at all, ``open``/``close``
    included.
    """

    ITEM_PREFIX: ClassVar[str] = "__frch_"

    contents: SqlNode
    collection: str
    item: str | None = None
    index: str | None = None
    open: str = ""
    close: str = ""
    separator: str = ""
    nullable: bool = False

    def apply(self, context: DynamicContext) -> bool:
        entries = context.evaluator.evaluate_iterable(self.collection, context, self.nullable)
        if not entries:
            return True

        pieces: list[str] = []
        for key, value in entries:
            number = context.unique_number()
            scratch = context.scratch()
            with context.scope():
                if self.index:
                    context.bind(self.index, key)
                if self.item:
                    context.bind(self.item, value)
                self.contents.apply(scratch)
                local = context.local_bindings()
            for name, bound in local.items():
                context.export(self.itemize(name, number), bound)
            text = self._rename_placeholders(scratch.sql, tuple(local), number)
            if text:
                pieces.append(text)

        context.append_sql(f"{self.open}{self.separator.join(pieces)}{self.close}")
        return True

    @classmethod
    def itemize(cls, name: str, number: int) -> str:
        return f"{cls.ITEM_PREFIX}{name}_{number}"

    def _rename_placeholders(self, sql: str, names: tuple[str, ...], number: int) -> str:
        renames = [
            (re.compile(rf"^\s*{re.escape(name)}(?![^.,:\s\[])"), self.itemize(name, number))
            for name in names
        ]
        if not renames:
            return sql

        def rename(body: str) -> str:
            for pattern, unique in renames:
                body, count = pattern.subn(unique, body, count=1)
                if count:
                    break
            return "#{" + body + "}"

        return GenericTokenParser("#{", "}", rename, keep_escapes=True).parse(sql)

    def children(self) -> tuple[SqlNode, ...]:
        return (self.contents,)
