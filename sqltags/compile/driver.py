"""Language driver: the front door from scripts to template sources."""
from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict

from sqltags.compile.context import BuildContext
from sqltags.compile.registry import TypeAliasRegistry, TypeHandlerRegistry
from sqltags.compile.script_builder import XMLScriptBuilder
from sqltags.nodes import MixedSqlNode, StaticTextSqlNode, TextSqlNode
from sqltags.runtime.source import DynamicSqlSource, RawSqlSource, SqlSource
from sqltags.schema.config import EngineConfig
from sqltags.schema.markup import MarkupNode, parse_markup

logger = logging.getLogger(__name__)


class LanguageDriver:
    """Turns statement scripts into :class:`~sqltags.runtime.source.SqlSource` objects.

    A script is one of:

    * a :class:`~sqltags.schema.markup.MarkupNode` (already parsed markup);
    * XML text, recognised by a leading ``<``; the root element is a wrapper
      (conventionally ``<script>``) whose children form the statement;
    * plain SQL text, dynamic only when it contains ``${...}``.

    Compiled text scripts are kept in a bounded LRU cache keyed by a hash of
    the script and the declared parameter type.  Sources are immutable, so a
    cached source may be shared by any number of threads.

    Args:
        config: Engine settings; defaults to ``EngineConfig()``.
        aliases: Type alias registry; defaults to the built-in aliases.
        handlers: Type handler registry; defaults to the built-in handlers.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        aliases: TypeAliasRegistry | None = None,
        handlers: TypeHandlerRegistry | None = None,
    ) -> None:
        self._ctx = BuildContext(
            config=config or EngineConfig(),
            aliases=aliases or TypeAliasRegistry(),
            handlers=handlers or TypeHandlerRegistry(),
        )
        self._cache: OrderedDict[str, SqlSource] = OrderedDict()
        self._cache_lock = threading.Lock()

    @property
    def context(self) -> BuildContext:
        return self._ctx

    @property
    def config(self) -> EngineConfig:
        return self._ctx.config

    def create_sql_source(
        self,
        script: MarkupNode | str,
        parameter_type: type | None = None,
    ) -> SqlSource:
        """Compile ``script``.

        Args:
            script: Markup node, XML text or plain SQL text.
            parameter_type: Declared type of the invocation argument.

        Returns:
            The compiled template source.

        Raises:
            BuildError: If the script cannot be compiled.
        """
        if not isinstance(script, str):
            return XMLScriptBuilder(self._ctx, script, parameter_type).parse_script_node()

        if self._ctx.config.cache_size == 0:
            return self._compile_text(script, parameter_type)

        key = _cache_key(script, parameter_type)
        with self._cache_lock:
            source = self._cache.get(key)
            if source is not None:
                self._cache.move_to_end(key)
                logger.debug("Statement cache hit: %s", key)
                return source

        source = self._compile_text(script, parameter_type)
        with self._cache_lock:
            self._cache[key] = source
            if len(self._cache) > self._ctx.config.cache_size:
                self._cache.popitem(last=False)
        return source

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def _compile_text(self, script: str, parameter_type: type | None) -> SqlSource:
        if script.lstrip().startswith("<"):
            root = parse_markup(script.strip())
            return XMLScriptBuilder(self._ctx, root, parameter_type).parse_script_node()

        text_node = TextSqlNode(script)
        if text_node.is_dynamic():
            return DynamicSqlSource(self._ctx, MixedSqlNode((text_node,)))
        return RawSqlSource(
            self._ctx, MixedSqlNode((StaticTextSqlNode(script),)), parameter_type
        )


def _cache_key(script: str, parameter_type: type | None) -> str:
    type_name = "" if parameter_type is None else (
        f"{parameter_type.__module__}.{parameter_type.__qualname__}"
    )
    payload = f"{type_name}\0{script}"
    return hashlib.md5(payload.encode(), usedforsecurity=False).hexdigest()
