"""Rules that call methods with parameters gathered from the document."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from digester.beans import find_method
from digester.errors import MethodNotFoundError
from digester.rules.protocols import BaseRule

if TYPE_CHECKING:
    from digester.rules.engine import Digester
    from digester.rules.protocols import Attributes


class CallMethodRule(BaseRule):
    """Calls a method on a stack object when the element ends.

    ``param_count == 0`` and ``param_types is None``: the trimmed body
    text is the only argument. ``param_types == ()``: the method takes no
    arguments. ``param_count > 0``: a parameter list is pushed on begin and
    filled by parameter rules on child (or the same) elements; a
    single-parameter call whose parameter is still None is skipped.

    ``param_types`` holds converters applied to string arguments; None
    leaves that argument unchanged.
    """

    def __init__(
        self,
        method: str,
        param_count: int = 0,
        param_types: tuple[Callable[[str], Any] | None, ...] | None = None,
        target_offset: int = 0,
    ) -> None:
        if param_count < 0:
            raise ValueError(f"param_count must not be negative, got {param_count}")
        if param_types is not None and param_count > 0 and len(param_types) != param_count:
            raise ValueError(
                f"Expected {param_count} parameter types, got {len(param_types)}"
            )
        self.method = method
        self.param_count = param_count
        self.param_types = param_types
        self.target_offset = target_offset

    @property
    def _uses_body(self) -> bool:
        return self.param_count == 0 and self.param_types is None

    @property
    def _body_stack(self) -> str:
        return f"call-method-body:{id(self)}"

    def begin(
        self,
        digester: Digester,
        namespace: str | None,
        name: str,
        attributes: Attributes,
    ) -> None:
        if self.param_count > 0:
            digester.push_params([None] * self.param_count)

    def body(self, digester, namespace, name, text) -> None:
        if self._uses_body:
            digester.push_named(self._body_stack, text.strip())

    def end(self, digester, namespace, name) -> None:
        if self.param_count > 0:
            params = digester.pop_params()
            if self.param_count == 1 and params[0] is None:
                digester.log.debug(f"Skip {self.method}(): parameter not set")
                return
        elif self._uses_body:
            params = [digester.pop_named(self._body_stack)]
        else:
            params = []

        if self.param_types:
            params = [
                convert(value) if convert is not None and isinstance(value, str) else value
                for convert, value in zip(self.param_types, params)
            ]

        target = digester.peek(self.target_offset)
        method = find_method(target, self.method)
        if method is None:
            raise MethodNotFoundError(target, self.method)
        digester.log.debug(f"Call {type(target).__name__}.{self.method}{tuple(params)!r}")
        method(*params)


class CallParamRule(BaseRule):
    """Fills one parameter of the enclosing CallMethodRule.

    The value comes from an attribute, from an object on the stack, or
    (by default) from the element's trimmed body text.
    """

    def __init__(
        self,
        index: int,
        attribute_name: str | None = None,
        from_stack: bool = False,
        stack_index: int = 0,
    ) -> None:
        self.index = index
        self.attribute_name = attribute_name
        self.from_stack = from_stack
        self.stack_index = stack_index

    def begin(self, digester, namespace, name, attributes) -> None:
        if self.attribute_name is not None:
            value = attributes.get(self.attribute_name)
            if value is not None:
                digester.peek_params()[self.index] = value
        elif self.from_stack:
            digester.peek_params()[self.index] = digester.peek(self.stack_index)

    def body(self, digester, namespace, name, text) -> None:
        if self.attribute_name is None and not self.from_stack:
            digester.peek_params()[self.index] = text.strip()


class ObjectParamRule(BaseRule):
    """Sets a fixed value as a call parameter.

    With ``attribute_name`` the value is only used when the element
    carries that attribute.
    """

    def __init__(self, index: int, value: Any, attribute_name: str | None = None) -> None:
        self.index = index
        self.value = value
        self.attribute_name = attribute_name

    def begin(self, digester, namespace, name, attributes) -> None:
        if self.attribute_name is None or self.attribute_name in attributes:
            digester.peek_params()[self.index] = self.value


class PathCallParamRule(BaseRule):
    """Sets the current match path as a call parameter."""

    def __init__(self, index: int) -> None:
        self.index = index

    def begin(self, digester, namespace, name, attributes) -> None:
        digester.peek_params()[self.index] = digester.current_path
