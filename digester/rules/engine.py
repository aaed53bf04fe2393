"""Parse engine that fires matching rules for each XML event."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from lxml import etree

from digester.errors import DigesterError, ParseError
from digester.logging_config import IndentLogger, get_logger
from digester.plugins.manager import PluginContext, PluginManager
from digester.resolver import ClassResolver
from digester.rules.actions.calls import (
    CallMethodRule,
    CallParamRule,
    ObjectParamRule,
    PathCallParamRule,
)
from digester.rules.actions.objects import (
    FactoryCreateRule,
    ObjectCreateRule,
    SetNextRule,
    SetRootRule,
    SetTopRule,
)
from digester.rules.actions.properties import (
    BeanPropertySetterRule,
    SetNestedPropertiesRule,
    SetPropertiesRule,
    SetPropertyRule,
)
from digester.rules.path import MatchPath
from digester.rules.registry import RuleRegistry
from digester.rules.stacks import ObjectStack, ParamStack
from digester.sources import Locator, LxmlEventSource, as_event_source

if TYPE_CHECKING:
    from digester.rules.protocols import (
        Attributes,
        PatternMatcher,
        Rule,
        RuleRegistration,
        RuleSource,
    )
    from digester.substitution import Substitutor


class DigesterState(Enum):
    """Lifecycle of a Digester."""

    IDLE = "idle"
    PARSING = "parsing"
    FAILED = "failed"


@dataclass
class MatchFrame:
    """Rules matched for one open element."""

    rules: list[Rule] = field(default_factory=list)
    cursor: int = -1
    """Index of the rule whose begin() is firing, -1 outside begin."""


_NO_OBJECT = object()


class Digester:
    """Event-driven XML to object mapper.

    Receives SAX-style events, keeps the current match path, and fires the
    rules registered for each element: ``begin`` in registration order,
    ``body`` with the element's own text, ``end`` in reverse order and
    ``finish`` once per matched rule when the document ends.

    A Digester holds all per-parse state and is used for one parse at a
    time; the rule registry can be frozen and shared between digesters.
    """

    def __init__(
        self,
        rules: RuleRegistry | None = None,
        *,
        matcher: PatternMatcher | None = None,
        plugin_context: PluginContext | None = None,
        class_resolver: ClassResolver | None = None,
        substitutor: Substitutor | None = None,
        logger: IndentLogger | None = None,
    ) -> None:
        """Initialize the digester.

        Args:
            rules: Rule registry to match against (default: new registry)
            matcher: Matcher for the default registry when ``rules`` is omitted
            plugin_context: Shared plugin configuration
            class_resolver: Resolves class names found in documents
            substitutor: Applied to attributes and body text before rules see them
            logger: Logger for this digester (default: fresh "digester" logger)
        """
        self.registry = rules if rules is not None else RuleRegistry(matcher)
        self.rules: RuleSource = self.registry
        self.plugin_context = plugin_context or PluginContext()
        self.class_resolver = class_resolver or ClassResolver()
        self.substitutor = substitutor
        self.log = logger or get_logger()

        self.state = DigesterState.IDLE
        self.locator = Locator()
        self.match_path = MatchPath()
        self.objects = ObjectStack()
        self.params = ParamStack()

        self._matches: list[MatchFrame] = []
        self._body_texts: list[list[str]] = []
        self._matched_rules: dict[int, Rule] = {}
        self._named_stacks: dict[str, list[Any]] = {}
        self._plugin_manager: PluginManager | None = None
        self._pending_initial: Any = None
        self._root: Any = _NO_OBJECT

    # -- rule registration ---------------------------------------------------

    def add_rule(
        self, pattern: str, rule: Rule, namespace_uri: str | None = None
    ) -> RuleRegistration:
        """Register a rule with the rules currently in effect."""
        return self.rules.register(pattern, rule, namespace_uri)

    register = add_rule

    def add_default_rule(
        self, rule: Rule, namespace_uri: str | None = None
    ) -> RuleRegistration:
        """Register a rule for elements that no pattern matches."""
        return self.rules.add_default(rule, namespace_uri)

    def add_object_create(
        self, pattern: str, cls: type | str, attribute_name: str | None = None
    ) -> RuleRegistration:
        return self.add_rule(pattern, ObjectCreateRule(cls, attribute_name))

    def add_factory_create(
        self,
        pattern: str,
        factory: Callable[[Attributes], Any],
        ignore_create_errors: bool = False,
    ) -> RuleRegistration:
        return self.add_rule(pattern, FactoryCreateRule(factory, ignore_create_errors))

    def add_set_next(self, pattern: str, method: str) -> RuleRegistration:
        return self.add_rule(pattern, SetNextRule(method))

    def add_set_top(self, pattern: str, method: str) -> RuleRegistration:
        return self.add_rule(pattern, SetTopRule(method))

    def add_set_root(self, pattern: str, method: str) -> RuleRegistration:
        return self.add_rule(pattern, SetRootRule(method))

    def add_set_properties(
        self,
        pattern: str,
        aliases: dict[str, str | None] | None = None,
        ignore_missing: bool = True,
    ) -> RuleRegistration:
        return self.add_rule(pattern, SetPropertiesRule(aliases, ignore_missing))

    def add_set_property(
        self, pattern: str, name_attr: str = "name", value_attr: str = "value"
    ) -> RuleRegistration:
        return self.add_rule(pattern, SetPropertyRule(name_attr, value_attr))

    def add_bean_property_setter(
        self, pattern: str, property_name: str | None = None
    ) -> RuleRegistration:
        return self.add_rule(pattern, BeanPropertySetterRule(property_name))

    def add_set_nested_properties(
        self,
        pattern: str,
        aliases: dict[str, str | None] | None = None,
        allow_unknown: bool = False,
        trim: bool = True,
    ) -> RuleRegistration:
        return self.add_rule(
            pattern, SetNestedPropertiesRule(aliases, allow_unknown, trim)
        )

    def add_call_method(
        self,
        pattern: str,
        method: str,
        param_count: int = 0,
        param_types: tuple[Callable[[str], Any] | None, ...] | None = None,
        target_offset: int = 0,
    ) -> RuleRegistration:
        return self.add_rule(
            pattern, CallMethodRule(method, param_count, param_types, target_offset)
        )

    def add_call_param(
        self,
        pattern: str,
        index: int,
        attribute_name: str | None = None,
        from_stack: bool = False,
        stack_index: int = 0,
    ) -> RuleRegistration:
        return self.add_rule(
            pattern, CallParamRule(index, attribute_name, from_stack, stack_index)
        )

    def add_object_param(
        self, pattern: str, index: int, value: Any, attribute_name: str | None = None
    ) -> RuleRegistration:
        return self.add_rule(pattern, ObjectParamRule(index, value, attribute_name))

    def add_call_param_path(self, pattern: str, index: int) -> RuleRegistration:
        return self.add_rule(pattern, PathCallParamRule(index))

    def add_plugin_create(self, pattern: str, base_class: type = object, **options: Any) -> RuleRegistration:
        """Register a PluginCreateRule; options are passed to the rule."""
        from digester.plugins.rules import PluginCreateRule

        return self.add_rule(pattern, PluginCreateRule(base_class, **options))

    def add_plugin_declaration(self, pattern: str) -> RuleRegistration:
        from digester.plugins.rules import PluginDeclarationRule

        return self.add_rule(pattern, PluginDeclarationRule())

    # -- stacks --------------------------------------------------------------

    def push(self, obj: Any) -> None:
        self.objects.push(obj)

    def pop(self) -> Any:
        return self.objects.pop()

    def peek(self, offset: int = 0) -> Any:
        return self.objects.peek(offset)

    def count(self) -> int:
        """Number of objects on the object stack."""
        return len(self.objects)

    def push_params(self, params: list[Any]) -> None:
        self.params.push(params)

    def pop_params(self) -> list[Any]:
        return self.params.pop()

    def peek_params(self, offset: int = 0) -> list[Any]:
        return self.params.peek(offset)

    def push_named(self, stack_name: str, value: Any) -> None:
        """Push onto a named stack private to this parse."""
        self._named_stacks.setdefault(stack_name, []).append(value)

    def pop_named(self, stack_name: str) -> Any:
        stack = self._named_stacks.get(stack_name)
        if not stack:
            raise DigesterError(f"Named stack '{stack_name}' is empty")
        return stack.pop()

    def peek_named(self, stack_name: str) -> Any:
        stack = self._named_stacks.get(stack_name)
        if not stack:
            raise DigesterError(f"Named stack '{stack_name}' is empty")
        return stack[-1]

    def set_root(self, obj: Any) -> None:
        """Pin the object returned from the parse."""
        self._root = obj

    @property
    def root(self) -> Any:
        if self._root is not _NO_OBJECT:
            return self._root
        return self.objects.root

    @property
    def current_path(self) -> str:
        return str(self.match_path)

    @property
    def plugin_manager(self) -> PluginManager:
        """Plugin manager of the innermost plugin scope."""
        manager = getattr(self.rules, "plugin_manager", None)
        if manager is not None:
            return manager
        if self._plugin_manager is None:
            self._plugin_manager = PluginManager(self.plugin_context)
        return self._plugin_manager

    def inject_rules(self, rules: list[Rule]) -> None:
        """Add rules to the element whose begin() is firing.

        The rules are placed right after the rule that is firing, receive
        the same begin() event and then take part in body() and end() like
        the other rules matched for the element.

        Raises:
            DigesterError: If called outside a begin() callback
        """
        frame = self._matches[-1] if self._matches else None
        if frame is None or frame.cursor < 0:
            raise DigesterError("Rules can only be injected while begin() is firing")
        position = frame.cursor + 1
        frame.rules[position:position] = list(rules)

    # -- content handler -----------------------------------------------------

    def set_locator(self, locator: Locator) -> None:
        self.locator = locator

    def start_document(self, initial_object: Any = None) -> None:
        """Reset per-parse state and push the initial object, if any."""
        self.state = DigesterState.PARSING
        self.match_path.clear()
        self.objects.clear()
        self.params.clear()
        self._matches.clear()
        self._body_texts.clear()
        self._matched_rules.clear()
        self._named_stacks.clear()
        self._root = _NO_OBJECT
        self.rules = self.registry
        self._plugin_manager = PluginManager(self.plugin_context)
        self.log.tree.reset()

        if initial_object is None:
            initial_object = self._pending_initial
        self._pending_initial = None
        if initial_object is not None:
            self.push(initial_object)

    def start_element(
        self, namespace: str | None, name: str, attributes: Attributes
    ) -> None:
        self._body_texts.append([])
        path = self.match_path.push(name, namespace)

        frame = MatchFrame(list(self.rules.match(path, namespace)))
        self._matches.append(frame)
        if self.log.is_debug_enabled():
            self.log.debug(f"<{name}> match='{path}' rules={len(frame.rules)}")
        self.log.tree.increase()

        if not frame.rules:
            return

        if self.substitutor is not None:
            attributes = self.substitutor.substitute_attributes(attributes)

        index = 0
        while index < len(frame.rules):
            rule = frame.rules[index]
            frame.cursor = index
            self._matched_rules.setdefault(id(rule), rule)
            self.log.debug(f"begin {rule!r}")
            self._fire("begin", rule, rule.begin, namespace, name, attributes)
            index += 1
        frame.cursor = -1

    def characters(self, text: str) -> None:
        if self._body_texts:
            self._body_texts[-1].append(text)

    def end_element(self, namespace: str | None, name: str) -> None:
        frame = self._matches.pop()
        try:
            if frame.rules:
                text = "".join(self._body_texts[-1])
                if self.substitutor is not None:
                    try:
                        text = self.substitutor.substitute_body(text)
                    except Exception as e:
                        raise self._wrap("body", None, e) from e

                for rule in frame.rules:
                    self.log.debug(f"body {rule!r}")
                    self._fire("body", rule, rule.body, namespace, name, text)

                for rule in reversed(frame.rules):
                    self.log.debug(f"end {rule!r}")
                    self._fire("end", rule, rule.end, namespace, name)
        finally:
            self._body_texts.pop()
            self.match_path.pop()
            self.log.tree.decrease()

    def end_document(self) -> Any:
        """Fire finish() for every matched rule and return the parse result."""
        for rule in reversed(list(self._matched_rules.values())):
            self._fire("finish", rule, rule.finish)
        self.state = DigesterState.IDLE
        return self.root

    # -- parsing -------------------------------------------------------------

    def parse(self, source: Any, initial_object: Any = None) -> Any:
        """Parse a document and return the root object.

        Args:
            source: Path, bytes, binary file object or EventSource
            initial_object: Object pushed before the first element

        Returns:
            The pinned root, or the first object pushed onto the empty stack

        Raises:
            DigesterError: If this digester is already parsing
            ParseError: If the document is malformed or a rule fails
        """
        if self.state is DigesterState.PARSING:
            raise DigesterError(
                "Digester is already parsing; use a new Digester for each parse"
            )

        event_source = as_event_source(source)
        self._pending_initial = initial_object
        try:
            result = event_source.drive(self)
        except etree.XMLSyntaxError as e:
            self.state = DigesterState.FAILED
            line, column = e.position if e.position else (None, None)
            raise ParseError(
                f"Malformed XML: {e.msg}",
                path=self.current_path,
                line=line,
                column=column,
            ) from e
        except BaseException:
            self.state = DigesterState.FAILED
            raise

        self.state = DigesterState.IDLE
        return result

    def parse_string(self, text: str | bytes, initial_object: Any = None) -> Any:
        return self.parse(LxmlEventSource.from_string(text), initial_object)

    def parse_url(self, url: str, initial_object: Any = None) -> Any:
        return self.parse(LxmlEventSource.from_url(url), initial_object)

    # -- errors --------------------------------------------------------------

    def _fire(self, event: str, rule: Rule, callback: Callable[..., Any], *args: Any) -> None:
        try:
            callback(self, *args)
        except ParseError:
            raise
        except Exception as e:
            raise self._wrap(event, rule, e) from e

    def _wrap(self, event: str, rule: Rule | None, error: Exception) -> ParseError:
        source = f" of {rule!r}" if rule is not None else ""
        self.log.error(f"{event}(){source} failed: {error}")
        return self.create_parse_error(f"Error in {event}(){source}: {error}")

    def create_parse_error(self, message: str) -> ParseError:
        """Create a ParseError located at the current path and line."""
        return ParseError(
            message,
            path=self.current_path,
            line=self.locator.line,
            column=self.locator.column,
        )
