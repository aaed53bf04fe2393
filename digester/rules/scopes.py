"""Rule sources installed for the duration of one element's subtree."""

from __future__ import annotations

from typing import TYPE_CHECKING

from digester.config import validate_pattern
from digester.errors import InvalidRuleError, PluginConfigurationError

if TYPE_CHECKING:
    from digester.plugins.manager import PluginManager
    from digester.rules.protocols import Rule, RuleRegistration, RuleSource
    from digester.rules.registry import RuleRegistry


def is_within(path: str, mount_point: str) -> bool:
    """Check whether a path is the mount point or lies below it."""
    return path == mount_point or path.startswith(f"{mount_point}/")


class ScopedRules:
    """Base for rule sources layered over the digester's current rules.

    A scope remembers the rules it replaced so the rule that installed it
    can put them back when its element ends.
    """

    def __init__(
        self,
        parent: RuleSource,
        mount_point: str,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self.parent = parent
        self.mount_point = mount_point
        self.plugin_manager = (
            plugin_manager
            if plugin_manager is not None
            else getattr(parent, "plugin_manager", None)
        )

    def match(self, path: str, namespace_uri: str | None = None) -> list[Rule]:
        return self.parent.match(path, namespace_uri)

    def register(
        self, pattern: str, rule: Rule, namespace_uri: str | None = None
    ) -> RuleRegistration:
        return self.parent.register(pattern, rule, namespace_uri)

    def add_default(self, rule: Rule, namespace_uri: str | None = None) -> RuleRegistration:
        return self.parent.add_default(rule, namespace_uri)

    def new_scope(self) -> RuleRegistry:
        return self.parent.new_scope()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mount_point={self.mount_point!r})"


class PluginRules(ScopedRules):
    """Rules private to one plugin instance.

    Inside the plugin's subtree only the rules the plugin registered apply;
    the mount element itself still sees the parent's rules, since those
    are the ones that created the plugin.
    """

    def __init__(
        self,
        parent: RuleSource,
        mount_point: str,
        plugin_manager: PluginManager,
        delegate: RuleRegistry,
    ) -> None:
        super().__init__(parent, mount_point, plugin_manager)
        self.delegate = delegate

    def match(self, path: str, namespace_uri: str | None = None) -> list[Rule]:
        if path == self.mount_point:
            return self.parent.match(path, namespace_uri)
        return self.delegate.match(path, namespace_uri)

    def mounted_rules(self, namespace_uri: str | None = None) -> list[Rule]:
        """Plugin rules registered for the mount element itself."""
        return self.delegate.match_patterns(self.mount_point, namespace_uri)

    def register(
        self, pattern: str, rule: Rule, namespace_uri: str | None = None
    ) -> RuleRegistration:
        """Register a plugin rule.

        Raises:
            PluginConfigurationError: If the pattern lies outside the
                plugin's subtree
        """
        try:
            normalised = validate_pattern(pattern)
        except ValueError as e:
            raise InvalidRuleError(str(pattern), str(e)) from e
        if not is_within(normalised, self.mount_point):
            raise PluginConfigurationError(
                f"Plugin rule pattern '{normalised}' must be at or below "
                f"'{self.mount_point}'"
            )
        return self.delegate.register(normalised, rule, namespace_uri)

    def add_default(self, rule: Rule, namespace_uri: str | None = None) -> RuleRegistration:
        return self.delegate.add_default(rule, namespace_uri)

    def new_scope(self) -> RuleRegistry:
        return self.delegate.new_scope()


class ChildRules(ScopedRules):
    """Adds one rule to every direct child of the mount element."""

    def __init__(self, parent: RuleSource, mount_point: str, child_rule: Rule) -> None:
        super().__init__(parent, mount_point)
        self.child_rule = child_rule
        self._depth = len(mount_point.split("/"))

    def match(self, path: str, namespace_uri: str | None = None) -> list[Rule]:
        rules = self.parent.match(path, namespace_uri)
        if is_within(path, self.mount_point) and len(path.split("/")) == self._depth + 1:
            rules = [*rules, self.child_rule]
        return rules
