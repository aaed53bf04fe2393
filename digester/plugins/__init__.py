"""Plugins: elements whose class, and whose rules, are chosen by the document."""

from digester.plugins.declaration import Declaration
from digester.plugins.manager import PluginContext, PluginManager
from digester.plugins.rules import PluginCreateRule, PluginDeclarationRule
from digester.plugins.strategies import (
    FinderFromClass,
    FinderFromDfltClass,
    FinderFromDfltMethod,
    FinderFromMethod,
    FinderSetProperties,
    LoaderFromClass,
    LoaderSetProperties,
    RuleFinder,
    RuleLoader,
    default_rule_finders,
)

__all__ = [
    "Declaration",
    "FinderFromClass",
    "FinderFromDfltClass",
    "FinderFromDfltMethod",
    "FinderFromMethod",
    "FinderSetProperties",
    "LoaderFromClass",
    "LoaderSetProperties",
    "PluginContext",
    "PluginCreateRule",
    "PluginDeclarationRule",
    "PluginManager",
    "RuleFinder",
    "RuleLoader",
    "default_rule_finders",
]
