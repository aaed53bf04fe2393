"""Rule registry mapping patterns to rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from digester.config import validate_pattern
from digester.errors import InvalidRuleError
from digester.rules.matchers import ExactMatcher
from digester.rules.protocols import RuleRegistration

if TYPE_CHECKING:
    from digester.rules.protocols import PatternMatcher, Rule


class RuleRegistry:
    """Registry mapping patterns to rules.

    Registrations are kept in one ordered list. ``match`` returns the rules
    of every registration the matcher accepts, in global registration
    order, so an element matching both an exact and a wildcard pattern
    fires their rules in the order they were registered.

    Default rules (``add_default``) fire only for elements no pattern
    matches.
    """

    def __init__(self, matcher: PatternMatcher | None = None) -> None:
        """Initialize an empty registry.

        Args:
            matcher: Matching strategy (default: ExactMatcher)
        """
        self.matcher: PatternMatcher = matcher if matcher is not None else ExactMatcher()
        self._registrations: list[RuleRegistration] = []
        self._defaults: list[RuleRegistration] = []
        self._next_order = 0
        self._frozen = False

    def register(
        self,
        pattern: str,
        rule: Rule,
        namespace_uri: str | None = None,
    ) -> RuleRegistration:
        """Register a rule under a pattern.

        Args:
            pattern: Slash-delimited element path (e.g., "catalog/book")
            rule: The rule to fire for matching elements
            namespace_uri: Only match elements in this namespace

        Returns:
            The stored registration

        Raises:
            InvalidRuleError: If the pattern is invalid or the registry is frozen
        """
        if self._frozen:
            raise InvalidRuleError(str(pattern), "registry is frozen")
        if rule is None:
            raise InvalidRuleError(str(pattern), "rule must not be None")
        try:
            normalised = validate_pattern(pattern)
            check = getattr(self.matcher, "validate", None)
            if check is not None:
                check(normalised)
        except ValueError as e:
            raise InvalidRuleError(str(pattern), str(e)) from e

        registration = RuleRegistration(
            pattern=normalised,
            rule=rule,
            order=self._take_order(),
            namespace_uri=namespace_uri,
        )
        self._registrations.append(registration)
        return registration

    def add_default(
        self, rule: Rule, namespace_uri: str | None = None
    ) -> RuleRegistration:
        """Register a rule that fires when no pattern matches an element.

        Args:
            rule: The fallback rule
            namespace_uri: Only apply to unmatched elements in this namespace

        Raises:
            InvalidRuleError: If the rule is None or the registry is frozen
        """
        if self._frozen:
            raise InvalidRuleError("(default)", "registry is frozen")
        if rule is None:
            raise InvalidRuleError("(default)", "rule must not be None")

        registration = RuleRegistration(
            pattern="",
            rule=rule,
            order=self._take_order(),
            namespace_uri=namespace_uri,
        )
        self._defaults.append(registration)
        return registration

    def _take_order(self) -> int:
        order = self._next_order
        self._next_order += 1
        return order

    def match(self, path: str, namespace_uri: str | None = None) -> list[Rule]:
        """Get the rules matching a path.

        Args:
            path: Current match path (e.g., "a/b/c")
            namespace_uri: Namespace of the current element

        Returns:
            Matching rules in registration order; the default rules when
            no pattern matches (empty if there are none)
        """
        matched = self.match_patterns(path, namespace_uri)
        if matched:
            return matched
        return [
            registration.rule
            for registration in self._defaults
            if _in_namespace(registration, namespace_uri)
        ]

    def match_patterns(self, path: str, namespace_uri: str | None = None) -> list[Rule]:
        """Get the rules whose pattern matches a path, ignoring defaults."""
        matched: list[Rule] = []
        for registration in self._registrations:
            if not _in_namespace(registration, namespace_uri):
                continue
            if self.matcher.matches(path, registration.pattern):
                matched.append(registration.rule)
        return matched

    def rules(self) -> list[Rule]:
        """Return all distinct rules, defaults included, in registration order."""
        seen: set[int] = set()
        result: list[Rule] = []
        everything = sorted(self._registrations + self._defaults, key=lambda r: r.order)
        for registration in everything:
            if id(registration.rule) not in seen:
                seen.add(id(registration.rule))
                result.append(registration.rule)
        return result

    def registrations(self) -> list[RuleRegistration]:
        return list(self._registrations)

    def defaults(self) -> list[RuleRegistration]:
        return list(self._defaults)

    def patterns(self) -> set[str]:
        """Return set of all registered patterns."""
        return {registration.pattern for registration in self._registrations}

    def freeze(self) -> RuleRegistry:
        """Make the registry read-only so it can be shared between parses."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> RuleRegistry:
        """Return an unfrozen copy with the same registrations and matcher."""
        registry = RuleRegistry(type(self.matcher)())
        registry._registrations = list(self._registrations)
        registry._defaults = list(self._defaults)
        registry._next_order = self._next_order
        return registry

    def new_scope(self) -> RuleRegistry:
        """Return an empty registry using the same kind of matcher."""
        return RuleRegistry(type(self.matcher)())

    def clear(self) -> None:
        if self._frozen:
            raise InvalidRuleError("*", "registry is frozen")
        self._registrations.clear()
        self._defaults.clear()

    def __len__(self) -> int:
        return len(self._registrations) + len(self._defaults)

    def __repr__(self) -> str:
        return (
            f"RuleRegistry(matcher={type(self.matcher).__name__}, "
            f"rules={len(self)})"
        )


def _in_namespace(registration: RuleRegistration, namespace_uri: str | None) -> bool:
    return registration.namespace_uri is None or registration.namespace_uri == namespace_uri
