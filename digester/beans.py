"""Property and method access on target objects.

Maps XML names onto Python objects: ``first-name`` is looked up as
``set_first_name()``, then as a mapping key, then as the attribute
``first_name``.
"""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from typing import Any

from digester.errors import PropertyError

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def python_name(name: str) -> str:
    """Convert an XML name to a Python identifier (dashes and dots to underscores)."""
    return name.replace("-", "_").replace(".", "_")


def convert(value: Any, current: Any) -> Any:
    """Convert a string value to the type of the property's current value.

    Only bool, int and float targets are converted; anything else is
    returned unchanged.

    Args:
        value: The new value, usually text from the document
        current: The property's current value

    Returns:
        The converted value

    Raises:
        ValueError: If the text cannot be converted
    """
    if not isinstance(value, str) or current is None:
        return value
    # bool first: bool is a subclass of int
    if isinstance(current, bool):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"Invalid boolean value: '{value}'")
    if isinstance(current, int):
        return int(value.strip())
    if isinstance(current, float):
        return float(value.strip())
    return value


def find_method(target: Any, name: str) -> Callable[..., Any] | None:
    """Find a callable attribute by XML or Python name."""
    for candidate in (name, python_name(name)):
        method = getattr(target, candidate, None)
        if callable(method):
            return method
    return None


def has_property(target: Any, name: str) -> bool:
    """Check if a property can be set on the target."""
    if find_method(target, f"set_{python_name(name)}") is not None:
        return True
    if isinstance(target, MutableMapping):
        return True
    return hasattr(target, python_name(name))


def set_property(target: Any, name: str, value: Any, ignore_missing: bool = False) -> bool:
    """Set a property on a target object.

    Args:
        target: Object to modify
        name: Property name as written in the document
        value: New value
        ignore_missing: Return False instead of raising for unknown properties

    Returns:
        True if the property was set

    Raises:
        PropertyError: If the property does not exist (and is not ignored)
            or the value cannot be converted
    """
    attr = python_name(name)

    setter = find_method(target, f"set_{attr}")
    if setter is not None:
        setter(value)
        return True

    if isinstance(target, MutableMapping):
        target[name] = value
        return True

    if not hasattr(target, attr):
        if ignore_missing:
            return False
        raise PropertyError(target, name)

    try:
        setattr(target, attr, convert(value, getattr(target, attr)))
    except (ValueError, AttributeError) as e:
        raise PropertyError(target, name, str(e)) from e
    return True
