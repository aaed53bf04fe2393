"""Rules that set properties on the object at the top of the stack."""

from __future__ import annotations

from typing import TYPE_CHECKING

from digester.beans import has_property, set_property
from digester.errors import DigesterError, PropertyError
from digester.rules.protocols import BaseRule
from digester.rules.scopes import ChildRules

if TYPE_CHECKING:
    from digester.rules.engine import Digester
    from digester.rules.protocols import Attributes


class SetPropertiesRule(BaseRule):
    """Sets one property per attribute of the element.

    ``aliases`` maps attribute names to property names; mapping an
    attribute to None skips it.
    """

    def __init__(
        self,
        aliases: dict[str, str | None] | None = None,
        ignore_missing: bool = True,
    ) -> None:
        self.aliases = dict(aliases or {})
        self.ignore_missing = ignore_missing

    def begin(
        self,
        digester: Digester,
        namespace: str | None,
        name: str,
        attributes: Attributes,
    ) -> None:
        top = digester.peek()
        for _, local_name, value in attributes.items_ns():
            property_name = self.aliases.get(local_name, local_name)
            if property_name is None:
                continue
            digester.log.debug(f"Set {type(top).__name__}.{property_name} = {value!r}")
            set_property(top, property_name, value, ignore_missing=self.ignore_missing)


class SetPropertyRule(BaseRule):
    """Sets the property named by one attribute to the value of another.

    ``<param name="colour" value="red"/>`` sets ``colour`` to ``"red"``.
    """

    def __init__(self, name_attr: str = "name", value_attr: str = "value") -> None:
        self.name_attr = name_attr
        self.value_attr = value_attr

    def begin(self, digester, namespace, name, attributes) -> None:
        property_name = attributes.get(self.name_attr)
        value = attributes.get(self.value_attr)
        if property_name is None or value is None:
            return
        set_property(digester.peek(), property_name, value)


class BeanPropertySetterRule(BaseRule):
    """Sets a property from the element's trimmed body text.

    The property defaults to the element's own name.
    """

    def __init__(self, property_name: str | None = None) -> None:
        self.property_name = property_name

    def body(self, digester, namespace, name, text) -> None:
        property_name = self.property_name or name
        top = digester.peek()
        digester.log.debug(f"Set {type(top).__name__}.{property_name} from body")
        set_property(top, property_name, text.strip())


class _ChildPropertySetter(BaseRule):
    def __init__(self, owner: SetNestedPropertiesRule) -> None:
        self.owner = owner

    def body(self, digester, namespace, name, text) -> None:
        owner = self.owner
        property_name = owner.aliases.get(name, name)
        if property_name is None:
            return

        top = digester.peek()
        if not owner.allow_unknown and not has_property(top, property_name):
            raise PropertyError(top, property_name, f"no property for child <{name}>")
        value = text.strip() if owner.trim else text
        set_property(top, property_name, value, ignore_missing=owner.allow_unknown)

    def __repr__(self) -> str:
        return "NestedPropertySetter()"


class SetNestedPropertiesRule(BaseRule):
    """Sets a property from the body of each direct child element.

    ``<person><name>Ann</name></person>`` calls ``set_property(person,
    "name", "Ann")``. Child elements keep any rules of their own.
    """

    def __init__(
        self,
        aliases: dict[str, str | None] | None = None,
        allow_unknown: bool = False,
        trim: bool = True,
    ) -> None:
        self.aliases = dict(aliases or {})
        self.allow_unknown = allow_unknown
        self.trim = trim
        self._child_rule = _ChildPropertySetter(self)

    def begin(self, digester, namespace, name, attributes) -> None:
        digester.rules = ChildRules(
            digester.rules, digester.current_path, self._child_rule
        )

    def end(self, digester, namespace, name) -> None:
        scope = digester.rules
        if not isinstance(scope, ChildRules) or scope.child_rule is not self._child_rule:
            raise DigesterError(
                f"Nested property scope for <{name}> was not the innermost scope"
            )
        digester.rules = scope.parent

    def __repr__(self) -> str:
        return f"SetNestedPropertiesRule(aliases={self.aliases!r})"
