"""Pattern-matched rules and the engine that fires them."""

from digester.rules.engine import Digester, DigesterState, MatchFrame
from digester.rules.matchers import ExactMatcher, RegexMatcher, WildcardMatcher
from digester.rules.path import MatchPath
from digester.rules.protocols import (
    Attribute,
    Attributes,
    BaseRule,
    PatternMatcher,
    Rule,
    RuleRegistration,
    RuleSource,
)
from digester.rules.registry import RuleRegistry
from digester.rules.stacks import ObjectStack, ParamStack

__all__ = [
    "Attribute",
    "Attributes",
    "BaseRule",
    "Digester",
    "DigesterState",
    "ExactMatcher",
    "MatchFrame",
    "MatchPath",
    "ObjectStack",
    "ParamStack",
    "PatternMatcher",
    "RegexMatcher",
    "Rule",
    "RuleRegistration",
    "RuleRegistry",
    "RuleSource",
    "WildcardMatcher",
]
