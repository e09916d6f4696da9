"""Compiled template node variants."""
from sqltags.nodes.base import SqlNode
from sqltags.nodes.bind import VarDeclSqlNode
from sqltags.nodes.conditional import ChooseSqlNode, IfSqlNode
from sqltags.nodes.foreach import ForEachSqlNode
from sqltags.nodes.mixed import MixedSqlNode
from sqltags.nodes.text import StaticTextSqlNode, TextSqlNode
from sqltags.nodes.trim import SetSqlNode, TrimSqlNode, WhereSqlNode

__all__ = [
    "SqlNode",
    "StaticTextSqlNode",
    "TextSqlNode",
    "IfSqlNode",
    "ChooseSqlNode",
    "TrimSqlNode",
    "WhereSqlNode",
    "SetSqlNode",
    "ForEachSqlNode",
    "VarDeclSqlNode",
    "MixedSqlNode",
]
