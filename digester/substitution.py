"""Variable substitution applied to attributes and body text.

Values are expanded lazily: an attribute is only expanded the first time a
rule reads it. Unresolved variables are fatal, so no object is ever built
from text that still contains a placeholder.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from digester.config import DEFAULT_VARIABLE_MARKER
from digester.errors import ExpansionError
from digester.rules.protocols import Attributes


class VariableExpander(Protocol):
    """Protocol for expanding variable expressions in a string."""

    def expand(self, text: str) -> str:
        ...


@dataclass
class MultiVariableExpander:
    """Expands ``marker{key}`` expressions from one or more sources.

    Sources are applied in the order they were added; each source has its
    own marker, e.g. ``$`` for ``${name}`` or ``#`` for ``#{name}``.
    """

    _sources: list[tuple[str, Mapping[str, Any]]] = field(default_factory=list)

    def add_source(self, marker: str, source: Mapping[str, Any]) -> None:
        """Add a keyed symbol source.

        Args:
            marker: Marker character(s) preceding "{" (e.g., "$")
            source: Mapping of variable name to value
        """
        self._sources.append((marker, source))

    def expand(self, text: str) -> str:
        for marker, source in self._sources:
            text = self.expand_with(text, marker, source)
        return text

    @staticmethod
    def expand_with(text: str, marker: str, source: Mapping[str, Any]) -> str:
        """Expand all expressions of one marker using one source.

        Args:
            text: The string to expand
            marker: Marker preceding the opening brace
            source: Variable values

        Returns:
            The expanded string

        Raises:
            ExpansionError: If an expression is unterminated or its key is
                not defined in the source
        """
        start_mark = f"{marker}{{"
        index = 0
        while True:
            index = text.find(start_mark, index)
            if index == -1:
                return text

            key_start = index + len(start_mark)
            key_end = text.find("}", key_start)
            if key_end == -1:
                raise ExpansionError(text, "variable expression starts but does not end")

            key = text[key_start:key_end]
            value = source.get(key)
            if value is None:
                raise ExpansionError(text, f"parameter [{key}] is not defined")

            replacement = str(value)
            text = text[:index] + replacement + text[key_end + 1 :]
            # Replacement text is never re-expanded
            index += len(replacement)


def expander_from(
    variables: Mapping[str, Any], marker: str = DEFAULT_VARIABLE_MARKER
) -> MultiVariableExpander:
    """Create an expander with a single source."""
    expander = MultiVariableExpander()
    expander.add_source(marker, variables)
    return expander


class VariableAttributes(Attributes):
    """Attributes whose values are expanded on first read."""

    def __init__(self, attributes: Attributes, expander: VariableExpander) -> None:
        super().__init__(attributes.attribute_list())
        self._source = attributes
        self._expander = expander
        self._expanded: dict[int, str] = {}

    def value_at(self, index: int) -> str:
        value = self._expanded.get(index)
        if value is None:
            # Read through the source so chained substitutors compose
            value = self._expander.expand(self._source.value_at(index))
            self._expanded[index] = value
        return value


class Substitutor(Protocol):
    """Protocol for substituting attributes and body text before rules see them."""

    def substitute_attributes(self, attributes: Attributes) -> Attributes:
        ...

    def substitute_body(self, text: str) -> str:
        ...


@dataclass
class VariableSubstitutor:
    """Substitutor backed by variable expanders.

    Either expander may be omitted, in which case that part of the input
    is passed through unchanged.
    """

    attributes_expander: VariableExpander | None = None
    body_expander: VariableExpander | None = None

    def substitute_attributes(self, attributes: Attributes) -> Attributes:
        if self.attributes_expander is None:
            return attributes
        return VariableAttributes(attributes, self.attributes_expander)

    def substitute_body(self, text: str) -> str:
        if self.body_expander is None:
            return text
        return self.body_expander.expand(text)


@dataclass
class CompoundSubstitutor:
    """Chains two substitutors; the output of ``first`` feeds ``second``."""

    first: Substitutor
    second: Substitutor

    def __post_init__(self) -> None:
        if self.first is None:
            raise ValueError("First Substitutor must not be None")
        if self.second is None:
            raise ValueError("Second Substitutor must not be None")

    def substitute_attributes(self, attributes: Attributes) -> Attributes:
        return self.second.substitute_attributes(
            self.first.substitute_attributes(attributes)
        )

    def substitute_body(self, text: str) -> str:
        return self.second.substitute_body(self.first.substitute_body(text))
