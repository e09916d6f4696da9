"""Read-only markup node abstraction consumed by the script builder.

The builder only needs four capabilities from a markup node: its kind, its tag
name, its attributes and its ordered children (text fragments included).
Anything that satisfies :class:`MarkupNode` can be compiled, so the builder has
no dependency on a specific markup parser.

Two implementations ship with the library:

* :class:`ElementTreeNode` wraps ``xml.etree.ElementTree`` elements and is what
  :func:`parse_markup` returns.
* :class:`MarkupElement` / :class:`MarkupText` are Pydantic models describing a
  detached tree, convenient for building statements programmatically or
  loading them from JSON::

      MarkupElement.model_validate({
          "tag": "where",
          "children": [
              {"tag": "if", "attributes": {"test": "name != null"},
               "children": [{"text": "AND name = #{name}"}]},
          ],
      })
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Literal, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from sqltags.errors import BuildError

NodeKind = Literal["element", "text"]


@runtime_checkable
class MarkupNode(Protocol):
    """Read-only view of one markup node."""

    @property
    def kind(self) -> NodeKind: ...

    @property
    def tag(self) -> str: ...

    @property
    def attributes(self) -> Mapping[str, str]: ...

    @property
    def children(self) -> Sequence[MarkupNode]: ...

    @property
    def text(self) -> str: ...

    def get_attribute(self, name: str, default: str | None = None) -> str | None: ...


# ---------------------------------------------------------------------------
# xml.etree adapter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextNode:
    """A text or CDATA fragment."""

    text: str

    kind: NodeKind = "text"
    tag: str = "#text"

    @property
    def attributes(self) -> Mapping[str, str]:
        return {}

    @property
    def children(self) -> Sequence[MarkupNode]:
        return ()

    def get_attribute(self, name: str, default: str | None = None) -> str | None:
        return default


class ElementTreeNode:
    """Adapts an ``xml.etree.ElementTree.Element`` to :class:`MarkupNode`.

    ElementTree stores character data as ``element.text`` (before the first
    child) and ``child.tail`` (after each child).  The adapter re-interleaves
    them so ``children`` follows document order.
    """

    kind: NodeKind = "element"

    def __init__(self, element: ET.Element) -> None:
        self._element = element

    @property
    def tag(self) -> str:
        return self._element.tag

    @property
    def attributes(self) -> Mapping[str, str]:
        return dict(self._element.attrib)

    @property
    def text(self) -> str:
        return "".join(self._element.itertext())

    @property
    def children(self) -> Sequence[MarkupNode]:
        nodes: list[MarkupNode] = []
        if self._element.text:
            nodes.append(TextNode(self._element.text))
        for child in self._element:
            nodes.append(ElementTreeNode(child))
            if child.tail:
                nodes.append(TextNode(child.tail))
        return nodes

    def get_attribute(self, name: str, default: str | None = None) -> str | None:
        return self._element.attrib.get(name, default)

    def __repr__(self) -> str:
        return f"ElementTreeNode(<{self.tag}>)"


def parse_markup(source: str) -> ElementTreeNode:
    """Parse XML text into a :class:`MarkupNode` tree.

    Args:
        source: XML document text; its root element is the statement body
            (conventionally ``<script>`` or ``<select>``).

    Returns:
        The root :class:`ElementTreeNode`.

    Raises:
        BuildError: If ``source`` is not well-formed XML.
    """
    try:
        root = ET.fromstring(source)
    except ET.ParseError as exc:
        raise BuildError(f"Malformed statement markup: {exc}") from exc
    return ElementTreeNode(root)


# ---------------------------------------------------------------------------
# Detached Pydantic tree
# ---------------------------------------------------------------------------


class MarkupText(BaseModel):
    """A text fragment: ``{"text": "SELECT * FROM blog"}``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str

    @property
    def kind(self) -> NodeKind:
        return "text"

    @property
    def tag(self) -> str:
        return "#text"

    @property
    def attributes(self) -> Mapping[str, str]:
        return {}

    @property
    def children(self) -> Sequence[MarkupNode]:
        return ()

    def get_attribute(self, name: str, default: str | None = None) -> str | None:
        return default


class MarkupElement(BaseModel):
    """An element with attributes and ordered children."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tag: str
    attributes: dict[str, str] = Field(default_factory=dict)
    children: list[Union[MarkupText, MarkupElement]] = Field(default_factory=list)

    @property
    def kind(self) -> NodeKind:
        return "element"

    @property
    def text(self) -> str:
        return "".join(c.text for c in self.children)

    def get_attribute(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)


MarkupElement.model_rebuild()
