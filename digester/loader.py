"""Reusable rule templates for parsing many documents with the same rules."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Callable, Protocol, Union

from digester.errors import DigesterError
from digester.plugins.manager import PluginContext
from digester.resolver import ClassResolver
from digester.rules.engine import Digester
from digester.rules.registry import RuleRegistry

if TYPE_CHECKING:
    from digester.logging_config import IndentLogger
    from digester.rules.protocols import PatternMatcher
    from digester.substitution import Substitutor


class RuleModule(Protocol):
    """A group of rule registrations."""

    def configure(self, registry: RuleRegistry) -> None:
        ...


ModuleLike = Union[RuleModule, Callable[[RuleRegistry], None]]


class DigesterLoader:
    """Builds a frozen rule template once and mints a Digester per parse.

    The registry, plugin context and class resolver are shared by every
    digester created here and are read-only once the template is built, so
    digesters may parse concurrently on separate threads.
    """

    def __init__(
        self,
        *modules: ModuleLike,
        matcher: PatternMatcher | None = None,
        plugin_context: PluginContext | None = None,
        class_resolver: ClassResolver | None = None,
        substitutor: Substitutor | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            modules: Rule modules, or callables taking the registry
            matcher: Matcher for the template registry (default: exact)
            plugin_context: Plugin configuration shared by all parses
            class_resolver: Resolver shared by all parses
            substitutor: Default substitutor for new digesters
        """
        self._modules: list[ModuleLike] = list(modules)
        self._matcher = matcher
        self.plugin_context = plugin_context or PluginContext()
        self.class_resolver = class_resolver or ClassResolver()
        self.substitutor = substitutor
        self._template: RuleRegistry | None = None
        self._lock = threading.Lock()

    def add_module(self, module: ModuleLike) -> DigesterLoader:
        """Add a rule module; only allowed before the template is built."""
        if self._template is not None:
            raise DigesterError("Cannot add rule modules after the template is built")
        self._modules.append(module)
        return self

    def register_class(self, name: str, factory: Callable[..., Any]) -> DigesterLoader:
        """Register a class alias with the shared resolver."""
        self.class_resolver.register(name, factory)
        return self

    @property
    def template(self) -> RuleRegistry:
        """The frozen registry shared by all digesters (built on first use)."""
        with self._lock:
            if self._template is None:
                registry = RuleRegistry(self._matcher)
                for module in self._modules:
                    configure = getattr(module, "configure", module)
                    configure(registry)
                self.class_resolver.freeze()
                self._template = registry.freeze()
            return self._template

    def new_digester(
        self,
        substitutor: Substitutor | None = None,
        logger: IndentLogger | None = None,
    ) -> Digester:
        """Create a fresh Digester sharing the frozen template."""
        return Digester(
            self.template,
            plugin_context=self.plugin_context,
            class_resolver=self.class_resolver,
            substitutor=substitutor if substitutor is not None else self.substitutor,
            logger=logger,
        )

    def parse(self, source: Any, initial_object: Any = None) -> Any:
        """Parse a document with a new Digester."""
        return self.new_digester().parse(source, initial_object)
