"""Plugin managers holding the declarations visible in one scope."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from digester.config import PLUGIN_CLASS_ATTR, PLUGIN_ID_ATTR
from digester.errors import PluginConfigurationError, PluginError
from digester.plugins.strategies import default_rule_finders

if TYPE_CHECKING:
    from collections.abc import Mapping

    from digester.plugins.declaration import Declaration
    from digester.plugins.strategies import RuleFinder, RuleLoader
    from digester.rules.engine import Digester


@dataclass(frozen=True)
class PluginContext:
    """Plugin configuration shared by every manager of a parse.

    Immutable, so one context can serve many concurrent parses.
    """

    rule_finders: tuple[RuleFinder, ...] = field(default_factory=default_rule_finders)
    """Rule finders in the order they are tried."""

    class_attribute: str = PLUGIN_CLASS_ATTR
    id_attribute: str = PLUGIN_ID_ATTR
    class_attribute_ns: str | None = None
    id_attribute_ns: str | None = None


class PluginManager:
    """Declarations made in one scope, delegating lookups to its parent.

    The root manager of a parse has no parent; every plugin instance gets a
    child manager so declarations made inside it stay local to its subtree.
    """

    def __init__(
        self,
        context: PluginContext | None = None,
        parent: PluginManager | None = None,
    ) -> None:
        if context is None:
            context = parent.context if parent is not None else PluginContext()
        self.context = context
        self.parent = parent
        self._by_class: dict[str, Declaration] = {}
        self._by_id: dict[str, Declaration] = {}

    def add_declaration(self, declaration: Declaration) -> None:
        """Make a declaration visible in this scope and nested ones."""
        self._by_class[declaration.class_name] = declaration
        if declaration.id is not None:
            self._by_id[declaration.id] = declaration

    def get_declaration_by_class(self, class_name: str) -> Declaration | None:
        manager: PluginManager | None = self
        while manager is not None:
            declaration = manager._by_class.get(class_name)
            if declaration is not None:
                return declaration
            manager = manager.parent
        return None

    def get_declaration_by_id(self, plugin_id: str) -> Declaration | None:
        manager: PluginManager | None = self
        while manager is not None:
            declaration = manager._by_id.get(plugin_id)
            if declaration is not None:
                return declaration
            manager = manager.parent
        return None

    def find_loader(
        self,
        digester: Digester,
        plugin_id: str | None,
        plugin_class: Any,
        properties: Mapping[str, str],
    ) -> RuleLoader | None:
        """Ask each rule finder in turn for a loader.

        Returns:
            The first loader found, or None if the plugin has no custom rules

        Raises:
            PluginConfigurationError: If a finder fails
        """
        for finder in self.context.rule_finders:
            try:
                loader = finder.find_loader(digester, plugin_class, properties)
            except PluginError:
                raise
            except Exception as e:
                raise PluginConfigurationError(
                    f"Unable to locate rules for plugin id [{plugin_id}], "
                    f"class [{getattr(plugin_class, '__name__', plugin_class)}]: {e}"
                ) from e
            if loader is not None:
                digester.log.debug(
                    f"{type(finder).__name__} found {type(loader).__name__}"
                )
                return loader
        return None

    def __repr__(self) -> str:
        return (
            f"PluginManager(ids={sorted(self._by_id)}, "
            f"parent={'yes' if self.parent else 'no'})"
        )
