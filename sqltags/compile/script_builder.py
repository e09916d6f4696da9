"""Markup → node tree compilation.

:class:`XMLScriptBuilder` walks a :class:`~sqltags.schema.markup.MarkupNode`
tree and dispatches every element to the handler registered for its tag.
The handler table is closed: the nine tags below are the whole language.

=============  ===================================================
Tag            Node
=============  ===================================================
``trim``       :class:`~sqltags.nodes.TrimSqlNode`
``where``      :class:`~sqltags.nodes.WhereSqlNode`
``set``        :class:`~sqltags.nodes.SetSqlNode`
``foreach``    :class:`~sqltags.nodes.ForEachSqlNode`
``if``         :class:`~sqltags.nodes.IfSqlNode`
``choose``     :class:`~sqltags.nodes.ChooseSqlNode`
``when``       :class:`~sqltags.nodes.IfSqlNode` (inside ``choose``)
``otherwise``  :class:`~sqltags.nodes.MixedSqlNode` (inside ``choose``)
``bind``       :class:`~sqltags.nodes.VarDeclSqlNode`
=============  ===================================================

A statement made only of text without ``${...}`` is static and compiles to a
:class:`~sqltags.runtime.source.RawSqlSource`; anything else compiles to a
:class:`~sqltags.runtime.source.DynamicSqlSource`.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from sqltags.compile.context import BuildContext
from sqltags.errors import BuildError, UnknownTagError
from sqltags.nodes import (
    ChooseSqlNode,
    ForEachSqlNode,
    IfSqlNode,
    MixedSqlNode,
    SetSqlNode,
    SqlNode,
    StaticTextSqlNode,
    TextSqlNode,
    TrimSqlNode,
    VarDeclSqlNode,
    WhereSqlNode,
)
from sqltags.nodes.trim import parse_overrides
from sqltags.runtime.source import DynamicSqlSource, RawSqlSource, SqlSource
from sqltags.schema.markup import MarkupNode

logger = logging.getLogger(__name__)

NodeHandler = Callable[[MarkupNode, list[SqlNode]], None]

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})


class XMLScriptBuilder:
    """Compiles one statement's markup into a template source.

    Args:
        ctx: Build context shared by every statement of a driver.
        root: Root markup node; its tag is not interpreted, only its children.
        parameter_type: Declared argument type, used by static statements for
            parameter type inference.
    """

    def __init__(
        self,
        ctx: BuildContext,
        root: MarkupNode,
        parameter_type: type | None = None,
    ) -> None:
        self._ctx = ctx
        self._root = root
        self._parameter_type = parameter_type
        self._is_dynamic = False
        self._handlers: dict[str, NodeHandler] = {
            "trim": self._handle_trim,
            "where": self._handle_where,
            "set": self._handle_set,
            "foreach": self._handle_foreach,
            "if": self._handle_if,
            "choose": self._handle_choose,
            "when": self._handle_if,
            "otherwise": self._handle_otherwise,
            "bind": self._handle_bind,
        }

    @property
    def is_dynamic(self) -> bool:
        return self._is_dynamic

    def parse_script_node(self) -> SqlSource:
        """Compile the root node.

        Returns:
            A :class:`DynamicSqlSource` if any dynamic construct was found,
            otherwise a pre-rendered :class:`RawSqlSource`.

        Raises:
            BuildError: On unknown tags, missing attributes, a ``choose`` with
                more than one ``otherwise``, or malformed static placeholders.
        """
        root_node = self.parse_dynamic_tags(self._root)
        logger.debug(
            "Compiled <%s>: %d node(s), %s",
            self._root.tag,
            sum(1 for _ in root_node.walk()),
            "dynamic" if self._is_dynamic else "static",
        )
        if self._is_dynamic:
            return DynamicSqlSource(self._ctx, root_node)
        return RawSqlSource(self._ctx, root_node, self._parameter_type)

    def parse_dynamic_tags(self, node: MarkupNode) -> MixedSqlNode:
        """Compile the children of ``node`` into a composite, in document order."""
        contents: list[SqlNode] = []
        for child in node.children:
            if child.kind == "text":
                text_node = TextSqlNode(child.text)
                if text_node.is_dynamic():
                    contents.append(text_node)
                    self._is_dynamic = True
                else:
                    contents.append(StaticTextSqlNode(child.text))
                continue
            handler = self._handlers.get(child.tag)
            if handler is None:
                raise UnknownTagError(child.tag, sorted(self._handlers))
            handler(child, contents)
            self._is_dynamic = True
        return MixedSqlNode(tuple(contents))

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_bind(self, node: MarkupNode, target: list[SqlNode]) -> None:
        name = _required(node, "name")
        value = _required(node, "value")
        target.append(VarDeclSqlNode(name, value))

    def _handle_trim(self, node: MarkupNode, target: list[SqlNode]) -> None:
        contents = self.parse_dynamic_tags(node)
        target.append(
            TrimSqlNode(
                contents,
                prefix=node.get_attribute("prefix"),
                prefix_overrides=parse_overrides(node.get_attribute("prefixOverrides")),
                suffix=node.get_attribute("suffix"),
                suffix_overrides=parse_overrides(node.get_attribute("suffixOverrides")),
            )
        )

    def _handle_where(self, node: MarkupNode, target: list[SqlNode]) -> None:
        target.append(WhereSqlNode(self.parse_dynamic_tags(node)))

    def _handle_set(self, node: MarkupNode, target: list[SqlNode]) -> None:
        target.append(SetSqlNode(self.parse_dynamic_tags(node)))

    def _handle_foreach(self, node: MarkupNode, target: list[SqlNode]) -> None:
        contents = self.parse_dynamic_tags(node)
        target.append(
            ForEachSqlNode(
                contents,
                collection=_required(node, "collection"),
                item=node.get_attribute("item") or None,
                index=node.get_attribute("index") or None,
                open=node.get_attribute("open") or "",
                close=node.get_attribute("close") or "",
                separator=node.get_attribute("separator") or "",
                nullable=_flag(node, "nullable"),
            )
        )

    def _handle_if(self, node: MarkupNode, target: list[SqlNode]) -> None:
        contents = self.parse_dynamic_tags(node)
        target.append(IfSqlNode(_required(node, "test"), contents))

    def _handle_otherwise(self, node: MarkupNode, target: list[SqlNode]) -> None:
        target.append(self.parse_dynamic_tags(node))

    def _handle_choose(self, node: MarkupNode, target: list[SqlNode]) -> None:
        when_nodes: list[SqlNode] = []
        defaults: list[SqlNode] = []
        for child in node.children:
            if child.kind == "text":
                continue
            handler = self._handlers.get(child.tag)
            if handler is None:
                raise UnknownTagError(child.tag, sorted(self._handlers))
            if handler == self._handle_if:
                handler(child, when_nodes)
            elif handler == self._handle_otherwise:
                handler(child, defaults)
            else:
                raise BuildError(
                    f"Element <{child.tag}> is not allowed inside <choose>; "
                    "expected <when> or <otherwise>.",
                    tag="choose",
                )
        if len(defaults) > 1:
            raise BuildError(
                "Too many default (otherwise) elements in choose statement.",
                tag="choose",
            )
        target.append(ChooseSqlNode(tuple(when_nodes), defaults[0] if defaults else None))


def _required(node: MarkupNode, name: str) -> str:
    value = node.get_attribute(name)
    if value is None or not value.strip():
        raise BuildError(
            f"Element <{node.tag}> requires attribute '{name}'.",
            tag=node.tag,
            details={"attribute": name},
        )
    return value


def _flag(node: MarkupNode, name: str) -> bool:
    raw = (node.get_attribute(name) or "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise BuildError(
        f"Attribute '{name}' of <{node.tag}> must be 'true' or 'false', got '{raw}'.",
        tag=node.tag,
        details={"attribute": name},
    )
