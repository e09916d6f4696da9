"""Test fixtures: sample mapper XML documents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sqltags.schema.markup import MarkupNode, parse_markup

_FIXTURES_DIR = Path(__file__).parent


def load_mapper_text(name: str = "blog_mapper.xml") -> str:
    """Return the raw XML of a mapper document in this directory."""
    return (_FIXTURES_DIR / name).read_text()


def load_statements(name: str = "blog_mapper.xml") -> dict[str, MarkupNode]:
    """Parse a mapper document and index its statements by ``id``.

    Args:
        name: File name of the mapper document.

    Returns:
        Mapping of statement id to the statement's markup node; each node's
        children form the statement body.
    """
    root = parse_markup(load_mapper_text(name))
    return {
        child.get_attribute("id"): child
        for child in root.children
        if child.kind == "element"
    }


def squash(sql: str) -> str:
    """Collapse whitespace runs so assertions ignore markup indentation."""
    return " ".join(sql.split())


@dataclass
class Author:
    id: int
    username: str | None = None
    email: str | None = None
    password: str | None = None
    bio: str | None = None


@dataclass
class Blog:
    title: str | None = None
    state: str | None = None
    author: Author | None = None
