"""Protocol definitions for the rule system."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from digester.rules.engine import Digester


@dataclass(frozen=True)
class Attribute:
    """A single attribute of a start-element event."""

    local_name: str
    value: str
    namespace_uri: str | None = None
    qname: str = ""


class Attributes(Mapping[str, str]):
    """Read-only attribute list of one element.

    Behaves as a mapping keyed by local name; namespaced access goes
    through ``get_ns``. Document order is preserved.
    """

    def __init__(self, attributes: list[Attribute] | None = None) -> None:
        self._attributes: list[Attribute] = list(attributes or [])
        self._index: dict[str, int] = {}
        for i, attr in enumerate(self._attributes):
            self._index.setdefault(attr.local_name, i)

    @classmethod
    def from_dict(cls, values: Mapping[str, str]) -> Attributes:
        """Build attributes from a plain name -> value mapping."""
        return cls(
            [Attribute(local_name=k, value=v, qname=k) for k, v in values.items()]
        )

    def value_at(self, index: int) -> str:
        """Return the value of the attribute at ``index``."""
        return self._attributes[index].value

    def attribute_at(self, index: int) -> Attribute:
        return self._attributes[index]

    def attribute_list(self) -> list[Attribute]:
        """Return every attribute in document order."""
        return list(self._attributes)

    def index_of(self, local_name: str, namespace_uri: str | None = None) -> int:
        """Return the position of an attribute, or -1 if absent."""
        if namespace_uri is None:
            return self._index.get(local_name, -1)
        for i, attr in enumerate(self._attributes):
            if attr.local_name == local_name and attr.namespace_uri == namespace_uri:
                return i
        return -1

    def get_ns(self, namespace_uri: str | None, local_name: str) -> str | None:
        """Get an attribute value by namespace and local name."""
        index = self.index_of(local_name, namespace_uri)
        if index == -1:
            return None
        return self.value_at(index)

    def items_ns(self) -> Iterator[tuple[str | None, str, str]]:
        """Iterate (namespace, local name, value) in document order."""
        for i, attr in enumerate(self._attributes):
            yield attr.namespace_uri, attr.local_name, self.value_at(i)

    def __getitem__(self, local_name: str) -> str:
        index = self._index.get(local_name)
        if index is None:
            raise KeyError(local_name)
        return self.value_at(index)

    def __contains__(self, local_name: object) -> bool:
        # Presence checks must not read (and so expand) the value
        return local_name in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self)!r})"


@runtime_checkable
class Rule(Protocol):
    """Protocol for rules.

    A rule reacts to the lifecycle of every element its pattern matches.
    Rules keep only configuration; anything that changes during a parse is
    kept on the Digester passed to each callback.
    """

    def begin(
        self,
        digester: Digester,
        namespace: str | None,
        name: str,
        attributes: Attributes,
    ) -> None:
        """Called when the start tag of a matching element is seen.

        Args:
            digester: The digester driving the parse
            namespace: Namespace URI of the element, if any
            name: Local name of the element
            attributes: Attributes of the element
        """
        ...

    def body(
        self,
        digester: Digester,
        namespace: str | None,
        name: str,
        text: str,
    ) -> None:
        """Called with the element's own character data before ``end``."""
        ...

    def end(self, digester: Digester, namespace: str | None, name: str) -> None:
        """Called when the end tag of a matching element is seen."""
        ...

    def finish(self, digester: Digester) -> None:
        """Called once at the end of the document for every matched rule."""
        ...


class BaseRule:
    """Rule with no-op callbacks, for rules that only need some of them."""

    def begin(self, digester, namespace, name, attributes) -> None:
        pass

    def body(self, digester, namespace, name, text) -> None:
        pass

    def end(self, digester, namespace, name) -> None:
        pass

    def finish(self, digester) -> None:
        pass

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


class PatternMatcher(Protocol):
    """Protocol for pattern matching strategies."""

    def matches(self, path: str, pattern: str) -> bool:
        """Check whether a registered pattern applies to a match path.

        Args:
            path: The current match path (e.g., "a/b/c")
            pattern: A registered pattern

        Returns:
            True if rules registered under the pattern should fire
        """
        ...


class RuleSource(Protocol):
    """Anything the Digester can ask for the rules matching a path."""

    def match(self, path: str, namespace_uri: str | None = None) -> list[Rule]:
        ...


@dataclass(frozen=True)
class RuleRegistration:
    """A rule registered under a pattern."""

    pattern: str
    rule: Rule
    order: int
    """Registration index; the only tie-break between matches."""

    namespace_uri: str | None = None
    """Restricts the rule to elements in this namespace."""
