"""Exception family raised by the digester."""

from __future__ import annotations


class DigesterError(Exception):
    """Base class for all digester errors."""


class InvalidRuleError(DigesterError):
    """Raised when a rule or pattern cannot be registered."""

    def __init__(self, pattern: str, reason: str) -> None:
        """Initialize the error.

        Args:
            pattern: The offending pattern
            reason: Why the registration was rejected
        """
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Cannot register rule for pattern '{pattern}': {reason}")


class EmptyStackError(DigesterError, IndexError):
    """Raised when popping or peeking beyond the bottom of a stack."""

    def __init__(self, stack_name: str, offset: int = 0) -> None:
        self.stack_name = stack_name
        self.offset = offset
        if offset:
            msg = f"{stack_name} stack has no entry at offset {offset}"
        else:
            msg = f"{stack_name} stack is empty"
        super().__init__(msg)


class ParseError(DigesterError):
    """Raised when a parse fails.

    Carries the match path of the element being processed and, when the
    event source provides it, the line and column in the input.
    """

    def __init__(
        self,
        message: str,
        path: str = "",
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Description of the failure
            path: Match path at the time of failure (e.g., "a/b/c")
            line: Line number in the input, if known
            column: Column number in the input, if known
        """
        self.message = message
        self.path = path
        self.line = line
        self.column = column

        msg = message
        if path:
            msg = f"{msg} at <{path}>"
        if line is not None:
            location = f"line {line}"
            if column is not None:
                location = f"{location} column {column}"
            msg = f"{msg} ({location})"
        super().__init__(msg)


class ExpansionError(DigesterError, ValueError):
    """Raised when a variable expression cannot be expanded."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Cannot expand '{text}': {reason}")


class PropertyError(DigesterError, AttributeError):
    """Raised when a property cannot be set on a target object."""

    def __init__(self, target: object, name: str, reason: str = "no such property") -> None:
        self.target = target
        self.name = name
        super().__init__(
            f"Cannot set property '{name}' on {type(target).__name__}: {reason}"
        )


class ClassResolutionError(DigesterError):
    """Raised when a class name cannot be resolved to a factory."""

    def __init__(self, class_name: str, reason: str = "") -> None:
        self.class_name = class_name
        msg = f"Unable to resolve class [{class_name}]"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class PluginError(DigesterError):
    """Base class for plugin errors."""


class PluginInvalidInputError(PluginError):
    """Raised when the document refers to a plugin incorrectly.

    Examples are a missing mandatory attribute on a declaration or a
    reference to an undeclared plugin id.
    """


class PluginConfigurationError(PluginError):
    """Raised when the plugin setup itself is wrong.

    Examples are a plugin class that does not derive from the expected base
    class or a rule loader that registers rules outside its mount point.
    """


class MethodNotFoundError(DigesterError, AttributeError):
    """Raised when a rule cannot find the method it is configured to call."""

    def __init__(self, target: object, method_name: str) -> None:
        self.target = target
        self.method_name = method_name
        super().__init__(
            f"No method '{method_name}' on {type(target).__name__}"
        )
