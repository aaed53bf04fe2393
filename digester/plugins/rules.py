"""Rules that declare plugins and create plugin instances."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from digester.config import validate_attribute_name
from digester.errors import (
    DigesterError,
    PluginConfigurationError,
    PluginInvalidInputError,
)
from digester.plugins.declaration import Declaration
from digester.plugins.manager import PluginManager
from digester.rules.protocols import BaseRule
from digester.rules.scopes import PluginRules

if TYPE_CHECKING:
    from digester.plugins.strategies import RuleLoader
    from digester.rules.engine import Digester
    from digester.rules.protocols import Attributes


class PluginDeclarationRule(BaseRule):
    """Declares a plugin from an element such as ``<plugin id="x" class="..."/>``.

    Every attribute is kept as a declaration property, so rule finders can
    read settings like ``ruleclass`` or ``method``. The declaration goes into
    the manager of the innermost plugin scope. ``class`` is mandatory; a
    declaration without ``id`` still binds the rules used for that class.
    """

    def begin(
        self,
        digester: Digester,
        namespace: str | None,
        name: str,
        attributes: Attributes,
    ) -> None:
        context = digester.plugin_context
        properties = {local: value for _, local, value in attributes.items_ns()}

        plugin_id = attributes.get_ns(context.id_attribute_ns, context.id_attribute)
        class_name = attributes.get_ns(
            context.class_attribute_ns, context.class_attribute
        )
        if not class_name:
            raise PluginInvalidInputError(
                f"Mandatory attribute '{context.class_attribute}' missing on plugin "
                f"declaration at <{digester.current_path}>"
            )

        declaration = Declaration(class_name, id=plugin_id or None, properties=properties)
        manager = digester.plugin_manager
        declaration.init(digester, manager)
        manager.add_declaration(declaration)
        digester.log.debug(f"Declared plugin {plugin_id or '(no id)'} -> {class_name}")


class PluginCreateRule(BaseRule):
    """Creates a plugin instance whose class is chosen by the document.

    The class comes from the element's ``class`` attribute, else from the
    declaration named by its ``id`` attribute, else from the default
    plugin class. The plugin's own rules are loaded into a scope mounted at
    the element; inside the element only those rules apply, and the ones
    registered for the element itself also receive its start tag.
    """

    def __init__(
        self,
        base_class: type = object,
        default_plugin_class: type | str | None = None,
        default_rule_loader: RuleLoader | None = None,
        class_attribute: str | None = None,
        id_attribute: str | None = None,
        require_rules: bool = False,
    ) -> None:
        """Initialize the rule.

        Args:
            base_class: Every plugin class must derive from this class
            default_plugin_class: Used when the element names no plugin
            default_rule_loader: Loader for the default plugin class
            class_attribute: Overrides the context's class attribute name
            id_attribute: Overrides the context's id attribute name
            require_rules: Fail when a plugin has no custom rules
        """
        for attribute_name in (class_attribute, id_attribute):
            if attribute_name is not None:
                try:
                    validate_attribute_name(attribute_name)
                except ValueError as e:
                    raise PluginConfigurationError(str(e)) from e

        self.base_class = base_class
        self.default_plugin_class = default_plugin_class
        self.default_rule_loader = default_rule_loader
        self.class_attribute = class_attribute
        self.id_attribute = id_attribute
        self.require_rules = require_rules

    def _declaration_for(
        self, digester: Digester, manager: PluginManager, attributes: Attributes
    ) -> Declaration:
        context = digester.plugin_context
        if self.class_attribute is not None:
            class_name = attributes.get(self.class_attribute)
        else:
            class_name = attributes.get_ns(
                context.class_attribute_ns, context.class_attribute
            )
        if self.id_attribute is not None:
            plugin_id = attributes.get(self.id_attribute)
        else:
            plugin_id = attributes.get_ns(context.id_attribute_ns, context.id_attribute)

        if class_name:
            declaration = manager.get_declaration_by_class(class_name)
            if declaration is None:
                declaration = Declaration(class_name)
                declaration.init(digester, manager)
                manager.add_declaration(declaration)
            return declaration

        if plugin_id:
            declaration = manager.get_declaration_by_id(plugin_id)
            if declaration is None:
                raise PluginInvalidInputError(
                    f"Plugin id [{plugin_id}] is not defined at <{digester.current_path}>"
                )
            return declaration

        if self.default_plugin_class is not None:
            declaration = Declaration(
                self.default_plugin_class, rule_loader=self.default_rule_loader
            )
            declaration.init(digester, manager)
            return declaration

        raise PluginInvalidInputError(
            f"No plugin class specified for element <{digester.current_path}>"
        )

    def begin(self, digester, namespace, name, attributes) -> None:
        path = digester.current_path
        manager = digester.plugin_manager
        declaration = self._declaration_for(digester, manager, attributes)

        plugin_class = declaration.plugin_class
        if not isinstance(plugin_class, type):
            raise PluginConfigurationError(
                f"Plugin {declaration.class_name} resolves to "
                f"{type(plugin_class).__name__}, not a class"
            )
        if not issubclass(plugin_class, self.base_class):
            raise PluginConfigurationError(
                f"Plugin class {plugin_class.__name__} does not derive from "
                f"{self.base_class.__name__}"
            )
        if self.require_rules and declaration.rule_loader is None:
            raise PluginConfigurationError(
                f"No rules found for plugin {declaration.class_name} at <{path}>"
            )

        scope = PluginRules(
            parent=digester.rules,
            mount_point=path,
            plugin_manager=PluginManager(parent=manager),
            delegate=digester.rules.new_scope(),
        )
        digester.rules = scope
        with digester.log.indent_block(
            f"Plugin scope for <{path}>: {declaration!r}", double_line=True
        ):
            declaration.configure(digester, path)

        try:
            instance: Any = plugin_class()
        except Exception as e:
            raise PluginConfigurationError(
                f"Unable to instantiate plugin class {declaration.class_name}: {e}"
            ) from e
        digester.push(instance)
        digester.inject_rules(scope.mounted_rules(namespace))

    def end(self, digester, namespace, name) -> None:
        scope = digester.rules
        if not isinstance(scope, PluginRules) or scope.mount_point != digester.current_path:
            raise DigesterError(f"Plugin scope for <{name}> was not the innermost scope")
        digester.pop()
        digester.rules = scope.parent
