"""Object and parameter stacks threaded through a parse."""

from __future__ import annotations

from typing import Any

from digester.errors import EmptyStackError


class _Stack:
    """List-backed stack; offset 0 is the top."""

    name = "object"

    def __init__(self) -> None:
        self._items: list[Any] = []

    def pop(self) -> Any:
        if not self._items:
            raise EmptyStackError(self.name)
        return self._items.pop()

    def peek(self, offset: int = 0) -> Any:
        """Return the entry ``offset`` positions below the top."""
        index = len(self._items) - 1 - offset
        if offset < 0 or index < 0:
            raise EmptyStackError(self.name, offset)
        return self._items[index]

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        # Bottom to top
        return iter(list(self._items))


class ObjectStack(_Stack):
    """Stack of domain objects under construction, parent below child."""

    name = "object"

    def __init__(self) -> None:
        super().__init__()
        self.root: Any = None

    def push(self, obj: Any) -> None:
        # An object pushed onto an empty stack becomes the root
        if not self._items:
            self.root = obj
        self._items.append(obj)

    def clear(self) -> None:
        super().clear()
        self.root = None


class ParamStack(_Stack):
    """Stack of pending method-call argument arrays."""

    name = "parameter"

    def push(self, params: list[Any]) -> None:
        self._items.append(params)
