"""Resolution of class names found in documents and rule configuration."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import Any

from digester.errors import ClassResolutionError


class ClassResolver:
    """Resolves class names to factories.

    Explicitly registered aliases are consulted first, so documents can
    refer to "com.example.Widget" without a Python module of that name.
    Other names are imported as "package.module.ClassName".
    """

    def __init__(self, aliases: dict[str, Callable[..., Any]] | None = None) -> None:
        self._aliases: dict[str, Callable[..., Any]] = dict(aliases or {})
        self._frozen = False

    def register(self, name: str, factory: Callable[..., Any]) -> None:
        """Register an alias for a class or factory.

        Args:
            name: The name documents use (e.g., "com.example.Widget")
            factory: Class or callable to use for that name

        Raises:
            ClassResolutionError: If the resolver is frozen
        """
        if self._frozen:
            raise ClassResolutionError(name, "resolver is frozen")
        self._aliases[name] = factory

    def freeze(self) -> ClassResolver:
        self._frozen = True
        return self

    def resolve(self, name: str) -> Callable[..., Any]:
        """Resolve a class name.

        Args:
            name: Alias or dotted import path

        Returns:
            The class or factory

        Raises:
            ClassResolutionError: If the name cannot be resolved
        """
        if not name:
            raise ClassResolutionError(str(name), "empty class name")

        factory = self._aliases.get(name)
        if factory is not None:
            return factory

        module_name, _, attr = name.rpartition(".")
        if not module_name:
            raise ClassResolutionError(name, "not registered and not a dotted path")

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ClassResolutionError(name, str(e)) from e

        try:
            factory = getattr(module, attr)
        except AttributeError as e:
            raise ClassResolutionError(
                name, f"module '{module_name}' has no attribute '{attr}'"
            ) from e

        if not callable(factory):
            raise ClassResolutionError(name, "not callable")
        return factory

    def name_of(self, factory: Callable[..., Any]) -> str:
        """Return the name a factory is known by (alias or dotted path)."""
        for alias, candidate in self._aliases.items():
            if candidate is factory:
                return alias
        module = getattr(factory, "__module__", "")
        qualname = getattr(factory, "__qualname__", repr(factory))
        return f"{module}.{qualname}" if module else qualname
