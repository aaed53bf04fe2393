"""Concrete rules for building objects from XML."""

from digester.rules.actions.calls import (
    CallMethodRule,
    CallParamRule,
    ObjectParamRule,
    PathCallParamRule,
)
from digester.rules.actions.objects import (
    FactoryCreateRule,
    ObjectCreateRule,
    SetNextRule,
    SetRootRule,
    SetTopRule,
)
from digester.rules.actions.properties import (
    BeanPropertySetterRule,
    SetNestedPropertiesRule,
    SetPropertiesRule,
    SetPropertyRule,
)

__all__ = [
    "BeanPropertySetterRule",
    "CallMethodRule",
    "CallParamRule",
    "FactoryCreateRule",
    "ObjectCreateRule",
    "ObjectParamRule",
    "PathCallParamRule",
    "SetNestedPropertiesRule",
    "SetNextRule",
    "SetPropertiesRule",
    "SetPropertyRule",
    "SetRootRule",
    "SetTopRule",
]
