"""Rules that create objects and link them together."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from digester.beans import find_method
from digester.errors import ClassResolutionError, MethodNotFoundError
from digester.rules.protocols import BaseRule

if TYPE_CHECKING:
    from digester.rules.engine import Digester
    from digester.rules.protocols import Attributes


def _invoke(target: Any, method_name: str, *args: Any) -> Any:
    method = find_method(target, method_name)
    if method is None:
        raise MethodNotFoundError(target, method_name)
    return method(*args)


class ObjectCreateRule(BaseRule):
    """Creates an object on begin and pops it on end.

    The class may be given as a class object or as a name resolved through
    the digester's ClassResolver. When ``attribute_name`` is set and the
    element carries that attribute, its value names the class instead;
    a name from the document must resolve to a class.
    """

    def __init__(self, cls: type | str, attribute_name: str | None = None) -> None:
        self.cls = cls
        self.attribute_name = attribute_name

    def begin(
        self,
        digester: Digester,
        namespace: str | None,
        name: str,
        attributes: Attributes,
    ) -> None:
        factory: Any = self.cls
        override = None
        if self.attribute_name is not None:
            override = attributes.get(self.attribute_name) or None
        if override is not None:
            factory = digester.class_resolver.resolve(override)
            # Documents may only name classes, never arbitrary callables
            if not isinstance(factory, type):
                raise ClassResolutionError(override, "document names a non-class")
        elif isinstance(factory, str):
            factory = digester.class_resolver.resolve(factory)

        instance = factory()
        digester.log.debug(f"New {type(instance).__name__}")
        digester.push(instance)

    def end(self, digester: Digester, namespace: str | None, name: str) -> None:
        top = digester.pop()
        digester.log.debug(f"Pop {type(top).__name__}")


class FactoryCreateRule(BaseRule):
    """Creates an object by calling ``factory(attributes)``.

    With ``ignore_create_errors`` a failing factory pushes nothing and the
    matching end() leaves the stack alone.
    """

    def __init__(
        self,
        factory: Callable[[Attributes], Any],
        ignore_create_errors: bool = False,
    ) -> None:
        self.factory = factory
        self.ignore_create_errors = ignore_create_errors

    @property
    def _ignored_stack(self) -> str:
        return f"factory-create-ignored:{id(self)}"

    def begin(self, digester, namespace, name, attributes) -> None:
        if not self.ignore_create_errors:
            digester.push(self.factory(attributes))
            return

        try:
            instance = self.factory(attributes)
        except Exception as e:
            digester.log.warning(f"Ignoring factory error for <{name}>: {e}")
            digester.push_named(self._ignored_stack, True)
            return
        digester.push_named(self._ignored_stack, False)
        digester.push(instance)

    def end(self, digester, namespace, name) -> None:
        if self.ignore_create_errors and digester.pop_named(self._ignored_stack):
            return
        digester.pop()


class SetNextRule(BaseRule):
    """On end, passes the top object to a method of the object below it."""

    def __init__(self, method: str) -> None:
        self.method = method

    def end(self, digester, namespace, name) -> None:
        child = digester.peek(0)
        parent = digester.peek(1)
        digester.log.debug(
            f"{type(parent).__name__}.{self.method}({type(child).__name__})"
        )
        _invoke(parent, self.method, child)


class SetTopRule(BaseRule):
    """On end, passes the object below the top to a method of the top object."""

    def __init__(self, method: str) -> None:
        self.method = method

    def end(self, digester, namespace, name) -> None:
        child = digester.peek(0)
        parent = digester.peek(1)
        digester.log.debug(
            f"{type(child).__name__}.{self.method}({type(parent).__name__})"
        )
        _invoke(child, self.method, parent)


class SetRootRule(BaseRule):
    """On end, passes the top object to a method of the root object."""

    def __init__(self, method: str) -> None:
        self.method = method

    def end(self, digester, namespace, name) -> None:
        child = digester.peek(0)
        root = digester.objects.root
        digester.log.debug(
            f"{type(root).__name__}.{self.method}({type(child).__name__})"
        )
        _invoke(root, self.method, child)
