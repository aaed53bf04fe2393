"""
Logging configuration for the digester

Includes IndentLogger for tree-style visualisation of the element nesting
seen during a parse.
"""

import io
import logging
import sys
from contextlib import contextmanager


class TreeIndent:
    """Indentation and tree state for hierarchical logging.

    Each IndentLogger owns one instance, so concurrent parses on separate
    digesters never share indentation.
    """

    _tree_chars_single = {
        "pipe": "│",
        "branch": "├──",
        "leaf": "└──",
        "space": " " * 3,
    }
    _tree_chars_double = {
        "pipe": "║",
        "branch": "║──",
        "leaf": "╚══",
        "space": " " * 3,
    }

    def __init__(self) -> None:
        self.level = 0
        self._active_branches: set[int] = set()
        self._double_lines: set[int] = set()

    def increase(self, double_line: bool = False) -> None:
        """Increase indentation level"""
        self.level += 1
        self._active_branches.add(self.level - 1)
        if double_line:
            self._double_lines.add(self.level - 1)

    def decrease(self) -> None:
        """Decrease indentation level"""
        if self.level > 0:
            # No longer active - will show end corner
            self._active_branches.discard(self.level - 1)
            self._double_lines.discard(self.level - 1)
            self.level -= 1

    def reset(self) -> None:
        """Reset indentation state"""
        self.level = 0
        self._active_branches = set()
        self._double_lines = set()

    def get_indent(self) -> str:
        """Get current indentation string with tree characters"""
        if self.level == 0:
            return ""

        parts = []
        # For all levels except current, show pipe only if level is still active
        for i in range(self.level - 1):
            if i in self._active_branches:
                chars = (
                    self._tree_chars_double
                    if i in self._double_lines
                    else self._tree_chars_single
                )
                parts.append(f"{chars['pipe']}   ")
            else:
                parts.append("    ")

        # For current level, use leaf if not active (end of block)
        chars = (
            self._tree_chars_double
            if (self.level - 1) in self._double_lines
            else self._tree_chars_single
        )
        is_end = (self.level - 1) not in self._active_branches
        parts.append(chars["leaf"] if is_end else chars["branch"])
        return "".join(parts)


class IndentLogger:
    """Logger wrapper that handles indentation using its own tree state"""

    def __init__(self, base_logger: logging.Logger) -> None:
        self._logger = base_logger
        self.tree = TreeIndent()

    @property
    def name(self) -> str:
        return self._logger.name

    def is_debug_enabled(self) -> bool:
        return self._logger.isEnabledFor(logging.DEBUG)

    def debug(self, msg: str, *args, **kwargs) -> None:
        """Log debug message with indentation"""
        self._logger.debug(f"{self.indent}{msg}", *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        """Log info message with indentation"""
        self._logger.info(f"{self.indent}{msg}", *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        """Log warning message with indentation"""
        self._logger.warning(f"{self.indent}{msg}", *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        """Log error message with indentation"""
        self._logger.error(f"{self.indent}{msg}", *args, **kwargs)

    @property
    def indent(self) -> str:
        """Get current indentation string"""
        return self.tree.get_indent()

    @contextmanager
    def indent_block(
        self, initial_message: str | None = None, double_line: bool = False
    ):
        """
        Context manager for handling indentation blocks

        Args:
            initial_message: Optional message to log at block start
            double_line: Use double-line characters for emphasis
        """
        if initial_message:
            self.debug(initial_message)
        self.tree.increase(double_line)
        try:
            yield
        finally:
            self.tree.decrease()


def get_logger(name: str = "digester") -> IndentLogger:
    """Create a fresh IndentLogger for the named stdlib logger.

    Args:
        name: Logger name (default: "digester")

    Returns:
        IndentLogger with its own indentation state
    """
    return IndentLogger(logging.getLogger(name))


def setup_logging(level=logging.INFO):
    """
    Configure logging for the digester

    Args:
        level: Logging level (default: INFO)

    Returns:
        IndentLogger: Configured logger with indentation support
    """
    # Create logger
    base_logger = logging.getLogger("digester")
    base_logger.setLevel(level)

    # Remove existing handlers
    base_logger.handlers = []

    # Create console handler with UTF-8 encoding (fixes Windows cp1252 issues)
    stream = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)

    # Create formatter (simple format for tree-style output)
    formatter = logging.Formatter("%(levelname)8s %(message)s")
    handler.setFormatter(formatter)

    # Add handler to logger
    base_logger.addHandler(handler)

    return IndentLogger(base_logger)
