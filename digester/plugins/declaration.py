"""Plugin declarations binding a class (and optional id) to its rule loader."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from digester.errors import ClassResolutionError, PluginInvalidInputError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from digester.plugins.manager import PluginManager
    from digester.plugins.strategies import RuleLoader
    from digester.rules.engine import Digester


class Declaration:
    """A plugin class plus the loader that adds its custom rules.

    Declarations made in a document carry a class name that is resolved
    when the declaration is initialised; declarations made in code may pass
    the class itself. Initialising twice is a no-op.
    """

    def __init__(
        self,
        plugin: type | str,
        id: str | None = None,
        properties: Mapping[str, str] | None = None,
        rule_loader: RuleLoader | None = None,
    ) -> None:
        """Initialize the declaration.

        Args:
            plugin: Plugin class, or the name the class resolver knows it by
            id: Identifier documents use to refer to this declaration
            properties: Extra declaration attributes consulted by rule finders
            rule_loader: Explicit loader; skips rule finder discovery
        """
        if isinstance(plugin, str):
            self.class_name = plugin
            self.plugin_class: Any = None
        else:
            self.plugin_class = plugin
            self.class_name = f"{plugin.__module__}.{plugin.__qualname__}"
        self.id = id
        self.properties: dict[str, str] = dict(properties or {})
        self.rule_loader = rule_loader
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self, digester: Digester, manager: PluginManager) -> None:
        """Resolve the plugin class and bind its rule loader.

        Raises:
            PluginInvalidInputError: If the class name cannot be resolved
            PluginConfigurationError: If a rule finder is misconfigured
        """
        if self._initialized:
            return

        if self.plugin_class is None:
            try:
                self.plugin_class = digester.class_resolver.resolve(self.class_name)
            except ClassResolutionError as e:
                raise PluginInvalidInputError(
                    f"Unable to load plugin class [{self.class_name}]: {e}"
                ) from e

        if self.rule_loader is None:
            self.rule_loader = manager.find_loader(
                digester, self.id, self.plugin_class, self.properties
            )
        self._initialized = True
        digester.log.debug(f"Initialized {self!r}")

    def configure(self, digester: Digester, path: str) -> None:
        """Add the plugin's rules for an element at ``path``."""
        if self.rule_loader is None:
            digester.log.debug(f"No custom rules for plugin {self.class_name}")
            return
        self.rule_loader.add_rules(digester, path)

    def __repr__(self) -> str:
        return (
            f"Declaration(class={self.class_name!r}, id={self.id!r}, "
            f"loader={type(self.rule_loader).__name__ if self.rule_loader else None})"
        )
