"""Placeholder-style, type-alias and type-handler registries.

``PlaceholderStyleFactory``
    Central registry for :class:`~sqltags.compile.base.PlaceholderStyle`
    implementations.  Register a new style once; engine configs can then
    name it in ``placeholder_style``.

``TypeAliasRegistry``
    Short names (``string``, ``int``, ``timestamp``...) for Python types, used
    by the ``pythonType`` and ``typeHandler`` placeholder hints.

``TypeHandlerRegistry``
    Maps a Python type (and optionally a :class:`~sqltags.schema.types.JdbcType`)
    to the :class:`~sqltags.runtime.handlers.TypeHandler` that converts its
    values.

The alias and handler registries are populated by the application before any
statement is compiled and are only read afterwards.

Usage::

    from sqltags.compile.registry import PlaceholderStyleFactory

    @PlaceholderStyleFactory.register("pyformat_positional")
    class MyStyle(PlaceholderStyle):
        ...
"""

from __future__ import annotations

import importlib
import uuid
from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from typing import ClassVar

from sqltags.compile.base import PlaceholderStyle
from sqltags.errors import BuildError
from sqltags.runtime.handlers import DEFAULT_HANDLERS, TypeHandler
from sqltags.schema.types import JdbcType

# ---------------------------------------------------------------------------
# Placeholder style factory
# ---------------------------------------------------------------------------


class PlaceholderStyleFactory:
    """Registry mapping style names to :class:`PlaceholderStyle` classes.

    Example::

        @PlaceholderStyleFactory.register("qmark")
        class QmarkStyle(PlaceholderStyle):
            ...

        style = PlaceholderStyleFactory.create("qmark")
    """

    _styles: ClassVar[dict[str, type[PlaceholderStyle]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[PlaceholderStyle]], type[PlaceholderStyle]]:
        """Decorator that registers a style class under ``name``."""

        def decorator(style_cls: type[PlaceholderStyle]) -> type[PlaceholderStyle]:
            cls._styles[name] = style_cls
            return style_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, style_cls: type[PlaceholderStyle]) -> None:
        """Register a style class without using the decorator form."""
        cls._styles[name] = style_cls

    @classmethod
    def create(cls, name: str) -> PlaceholderStyle:
        """Instantiate the style registered for ``name``.

        Raises:
            BuildError: If no style is registered for ``name``.
        """
        style_cls = cls._styles.get(name)
        if style_cls is None:
            registered = sorted(cls._styles)
            raise BuildError(
                f"Unsupported placeholder style: '{name}'. Registered styles: {registered}.",
                details={"style": name, "registered": registered},
            )
        return style_cls()

    @classmethod
    def registered_styles(cls) -> list[str]:
        """Return the sorted list of registered style names."""
        return sorted(cls._styles)


# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

_DEFAULT_ALIASES: dict[str, type] = {
    "string": str,
    "str": str,
    "int": int,
    "integer": int,
    "long": int,
    "short": int,
    "byte": int,
    "float": float,
    "double": float,
    "decimal": Decimal,
    "bigdecimal": Decimal,
    "bool": bool,
    "boolean": bool,
    "date": date,
    "time": time,
    "datetime": datetime,
    "timestamp": datetime,
    "bytes": bytes,
    "list": list,
    "dict": dict,
    "map": dict,
    "object": object,
    "uuid": uuid.UUID,
}


class TypeAliasRegistry:
    """Case-insensitive alias → Python type table.

    Names that are not registered aliases are tried as dotted import paths
    (``"myapp.models.Blog"``).
    """

    def __init__(self) -> None:
        self._aliases: dict[str, type] = dict(_DEFAULT_ALIASES)

    def register_alias(self, alias: str, target: type) -> None:
        """Register ``alias`` for ``target``.

        Raises:
            BuildError: If ``alias`` is already bound to a different type.
        """
        key = alias.lower()
        existing = self._aliases.get(key)
        if existing is not None and existing is not target:
            raise BuildError(
                f"The alias '{alias}' is already mapped to the value '{existing.__qualname__}'.",
                details={"alias": alias},
            )
        self._aliases[key] = target

    def resolve_alias(self, name: str | None) -> type | None:
        """Return the type for ``name`` (``None`` passes through).

        Raises:
            BuildError: If ``name`` is neither an alias nor an importable class.
        """
        if name is None:
            return None
        key = name.strip().lower()
        if key in self._aliases:
            return self._aliases[key]
        return _import_type(name.strip())

    @property
    def aliases(self) -> dict[str, type]:
        return dict(self._aliases)


def _import_type(dotted: str) -> type:
    module_name, _, attr = dotted.rpartition(".")
    if not module_name:
        raise BuildError(
            f"Could not resolve type alias '{dotted}'.", details={"alias": dotted}
        )
    try:
        module = importlib.import_module(module_name)
        resolved = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise BuildError(
            f"Could not resolve type alias '{dotted}'. Cause: {exc}",
            details={"alias": dotted},
        ) from exc
    if not isinstance(resolved, type):
        raise BuildError(
            f"Type alias '{dotted}' does not name a class.", details={"alias": dotted}
        )
    return resolved


# ---------------------------------------------------------------------------
# Type handlers
# ---------------------------------------------------------------------------


class TypeHandlerRegistry:
    """Maps ``(python_type, jdbc_type)`` to a :class:`TypeHandler`.

    Lookup walks the Python type's MRO, so a handler registered for ``Enum``
    serves every enum class and the ``object`` handler serves everything else.
    Within one Python type, a handler registered for the exact ``jdbc_type``
    wins over the type's generic (``jdbc_type=None``) handler.

    Example::

        registry = TypeHandlerRegistry()

        @registry.register(Money)
        class MoneyHandler(TypeHandler):
            ...
    """

    def __init__(self) -> None:
        self._handlers: dict[type, dict[JdbcType | None, TypeHandler]] = {}
        for python_type, handler in DEFAULT_HANDLERS.items():
            self.register_handler(python_type, handler)

    def register(
        self, python_type: type, jdbc_type: JdbcType | None = None
    ) -> Callable[[type[TypeHandler]], type[TypeHandler]]:
        """Decorator that instantiates and registers a handler class."""

        def decorator(handler_cls: type[TypeHandler]) -> type[TypeHandler]:
            self.register_handler(python_type, handler_cls(), jdbc_type)
            return handler_cls

        return decorator

    def register_handler(
        self,
        python_type: type,
        handler: TypeHandler,
        jdbc_type: JdbcType | None = None,
    ) -> None:
        """Register ``handler`` for ``python_type`` (and ``jdbc_type``)."""
        self._handlers.setdefault(python_type, {})[jdbc_type] = handler

    def get(self, python_type: type | None, jdbc_type: JdbcType | None = None) -> TypeHandler | None:
        """Return the handler for the pair, or ``None`` if nothing matches."""
        for cls in (python_type or object).__mro__:
            by_jdbc = self._handlers.get(cls)
            if not by_jdbc:
                continue
            if jdbc_type in by_jdbc:
                return by_jdbc[jdbc_type]
            if None in by_jdbc:
                return by_jdbc[None]
            return next(iter(by_jdbc.values()))
        return None

    def has_handler(self, python_type: type | None) -> bool:
        """True if ``python_type`` has a handler other than the ``object`` fallback."""
        if python_type is None:
            return False
        return any(cls in self._handlers for cls in python_type.__mro__ if cls is not object)

    def instantiate(self, handler_type: type, python_type: type | None = None) -> TypeHandler:
        """Create a handler instance for an explicit ``typeHandler`` hint.

        The handler class is tried with the target Python type as its only
        argument first, then with no arguments.

        Raises:
            BuildError: If ``handler_type`` is not a :class:`TypeHandler` or
                cannot be constructed either way.
        """
        if not (isinstance(handler_type, type) and issubclass(handler_type, TypeHandler)):
            raise BuildError(
                f"Type '{handler_type!r}' is not a TypeHandler.",
                details={"type_handler": repr(handler_type)},
            )
        if python_type is not None:
            try:
                return handler_type(python_type)  # type: ignore[call-arg]
            except TypeError:
                pass
        try:
            return handler_type()
        except TypeError as exc:
            raise BuildError(
                f"Type handler '{handler_type.__qualname__}' cannot be instantiated: {exc}",
                details={"type_handler": repr(handler_type)},
            ) from exc


def default_registries() -> tuple[TypeAliasRegistry, TypeHandlerRegistry]:
    """Return fresh alias and handler registries with the built-in entries."""
    return TypeAliasRegistry(), TypeHandlerRegistry()
