"""Strategies for finding and loading the custom rules of a plugin class.

A RuleFinder inspects a plugin class and its declaration properties and
returns a RuleLoader, or None when it does not apply. Finders are tried in
order and the first loader found wins.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Protocol

from digester.config import (
    DEFAULT_RULE_INFO_SUFFIX,
    DEFAULT_RULES_METHOD,
    RULE_CLASS_PROPERTY,
    RULE_METHOD_PROPERTY,
    SET_PROPERTIES_PROPERTY,
)
from digester.errors import (
    ClassResolutionError,
    PluginConfigurationError,
    PluginError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from digester.rules.engine import Digester


class RuleLoader(Protocol):
    """Protocol for adding a plugin's rules below a mount path."""

    def add_rules(self, digester: Digester, path: str) -> None:
        """Register the plugin's rules.

        Args:
            digester: The digester; its current rules are the plugin scope
            path: Match path of the plugin element
        """
        ...


class RuleFinder(Protocol):
    """Protocol for locating the rule loader of a plugin class."""

    def find_loader(
        self,
        digester: Digester,
        plugin_class: Any,
        properties: Mapping[str, str],
    ) -> RuleLoader | None:
        ...


def locate_rules_method(owner: Any, method_name: str) -> Callable[..., Any] | None:
    """Return a callable attribute of ``owner``, or None."""
    method = getattr(owner, method_name, None)
    return method if callable(method) else None


@dataclass
class LoaderFromClass:
    """Calls ``rules_class.<method_name>(digester, path)``."""

    rules_class: Any
    method_name: str = DEFAULT_RULES_METHOD

    def add_rules(self, digester: Digester, path: str) -> None:
        method = locate_rules_method(self.rules_class, self.method_name)
        if method is None:
            raise PluginConfigurationError(
                f"Rules class {_name(self.rules_class)} has no method "
                f"'{self.method_name}'"
            )
        digester.log.debug(
            f"Loading rules for <{path}> from {_name(self.rules_class)}.{self.method_name}"
        )
        try:
            method(digester, path)
        except PluginError:
            raise
        except Exception as e:
            raise PluginConfigurationError(
                f"Unable to invoke rules method '{self.method_name}' on rules "
                f"class {_name(self.rules_class)}: {e}"
            ) from e


@dataclass
class LoaderSetProperties:
    """Maps every attribute of the plugin element onto a plugin property."""

    def add_rules(self, digester: Digester, path: str) -> None:
        # digester.rules imports the plugin manager, which imports this module
        from digester.rules.actions.properties import SetPropertiesRule

        digester.log.debug(f"Loading set-properties rule for <{path}>")
        digester.register(path, SetPropertiesRule())


@dataclass
class FinderFromClass:
    """Uses the class named by the declaration's ``ruleclass`` property."""

    property_name: str = RULE_CLASS_PROPERTY
    method_property: str = RULE_METHOD_PROPERTY

    def find_loader(self, digester, plugin_class, properties) -> RuleLoader | None:
        class_name = properties.get(self.property_name)
        if class_name is None:
            return None

        try:
            rules_class = digester.class_resolver.resolve(class_name)
        except ClassResolutionError as e:
            raise PluginConfigurationError(
                f"Unable to load rules class [{class_name}]: {e}"
            ) from e
        method_name = properties.get(self.method_property, DEFAULT_RULES_METHOD)
        return LoaderFromClass(rules_class, method_name)


@dataclass
class FinderFromMethod:
    """Uses a method of the plugin class named by the ``method`` property."""

    property_name: str = RULE_METHOD_PROPERTY

    def find_loader(self, digester, plugin_class, properties) -> RuleLoader | None:
        method_name = properties.get(self.property_name)
        if method_name is None:
            return None

        if locate_rules_method(plugin_class, method_name) is None:
            raise PluginConfigurationError(
                f"Plugin class {_name(plugin_class)} has no rules method "
                f"'{method_name}'"
            )
        return LoaderFromClass(plugin_class, method_name)


@dataclass
class FinderFromDfltMethod:
    """Uses ``add_rules(digester, path)`` defined on the plugin class."""

    method_name: str = DEFAULT_RULES_METHOD

    def find_loader(self, digester, plugin_class, properties) -> RuleLoader | None:
        if locate_rules_method(plugin_class, self.method_name) is None:
            return None
        return LoaderFromClass(plugin_class, self.method_name)


@dataclass
class FinderFromDfltClass:
    """Uses a ``<PluginName>RuleInfo`` class from the plugin's module."""

    suffix: str = DEFAULT_RULE_INFO_SUFFIX
    method_name: str = DEFAULT_RULES_METHOD

    def find_loader(self, digester, plugin_class, properties) -> RuleLoader | None:
        module_name = getattr(plugin_class, "__module__", None)
        class_name = getattr(plugin_class, "__name__", None)
        if not module_name or not class_name:
            return None

        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None

        rule_info = getattr(module, f"{class_name}{self.suffix}", None)
        if rule_info is None or locate_rules_method(rule_info, self.method_name) is None:
            return None
        return LoaderFromClass(rule_info, self.method_name)


@dataclass
class FinderSetProperties:
    """Falls back to mapping attributes to properties.

    Disabled for a declaration with ``setprops="false"``.
    """

    property_name: str = SET_PROPERTIES_PROPERTY

    def find_loader(self, digester, plugin_class, properties) -> RuleLoader | None:
        if properties.get(self.property_name, "true").strip().lower() == "false":
            return None
        return LoaderSetProperties()


def default_rule_finders() -> tuple[RuleFinder, ...]:
    """Return the finders in their default order."""
    return (
        FinderFromClass(),
        FinderFromMethod(),
        FinderFromDfltMethod(),
        FinderFromDfltClass(),
        FinderSetProperties(),
    )


def _name(owner: Any) -> str:
    return getattr(owner, "__qualname__", None) or repr(owner)
