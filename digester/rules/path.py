"""Live element path tracked during a parse."""

from __future__ import annotations

from digester.errors import EmptyStackError


class MatchPath:
    """Mutable stack of element names mirroring the current nesting.

    Renders as "a/b/c", the key rules are matched against.
    """

    def __init__(self) -> None:
        self._names: list[str] = []
        self._namespaces: list[str | None] = []
        self._rendered: list[str] = []

    def push(self, name: str, namespace_uri: str | None = None) -> str:
        """Enter an element.

        Args:
            name: Local name of the element
            namespace_uri: Namespace of the element, if any

        Returns:
            The new rendered path
        """
        parent = self._rendered[-1] if self._rendered else ""
        rendered = f"{parent}/{name}" if parent else name
        self._names.append(name)
        self._namespaces.append(namespace_uri)
        self._rendered.append(rendered)
        return rendered

    def pop(self) -> str:
        """Leave the current element and return its name."""
        if not self._names:
            raise EmptyStackError("match path")
        self._namespaces.pop()
        self._rendered.pop()
        return self._names.pop()

    def clear(self) -> None:
        self._names.clear()
        self._namespaces.clear()
        self._rendered.clear()

    @property
    def depth(self) -> int:
        return len(self._names)

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self._names)

    @property
    def current_name(self) -> str | None:
        return self._names[-1] if self._names else None

    @property
    def current_namespace(self) -> str | None:
        return self._namespaces[-1] if self._namespaces else None

    def __len__(self) -> int:
        return len(self._names)

    def __str__(self) -> str:
        return self._rendered[-1] if self._rendered else ""

    def __repr__(self) -> str:
        return f"MatchPath('{self}')"
