"""
xml-digester - event-driven XML to object mapping

Rules registered under element patterns fire as a document streams past,
building an object graph on a stack.
"""

__version__ = "0.1.0"

from digester.errors import (
    ClassResolutionError,
    DigesterError,
    EmptyStackError,
    ExpansionError,
    InvalidRuleError,
    MethodNotFoundError,
    ParseError,
    PluginConfigurationError,
    PluginError,
    PluginInvalidInputError,
    PropertyError,
)
from digester.loader import DigesterLoader, RuleModule
from digester.resolver import ClassResolver
from digester.rules import (
    Attributes,
    BaseRule,
    Digester,
    DigesterState,
    ExactMatcher,
    Rule,
    RuleRegistry,
    WildcardMatcher,
)
from digester.substitution import (
    CompoundSubstitutor,
    MultiVariableExpander,
    VariableSubstitutor,
)

__all__ = [
    "Attributes",
    "BaseRule",
    "ClassResolutionError",
    "ClassResolver",
    "CompoundSubstitutor",
    "Digester",
    "DigesterError",
    "DigesterLoader",
    "DigesterState",
    "EmptyStackError",
    "ExactMatcher",
    "ExpansionError",
    "InvalidRuleError",
    "MethodNotFoundError",
    "MultiVariableExpander",
    "ParseError",
    "PluginConfigurationError",
    "PluginError",
    "PluginInvalidInputError",
    "PropertyError",
    "Rule",
    "RuleModule",
    "RuleRegistry",
    "VariableSubstitutor",
    "WildcardMatcher",
    "__version__",
]
