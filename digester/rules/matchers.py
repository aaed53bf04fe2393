"""Pattern matching strategies for the rule registry."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache


@lru_cache(maxsize=1024)
def compile_wildcard(pattern: str) -> re.Pattern[str]:
    """Translate a wildcard pattern into an anchored regular expression."""
    parts: list[str] = []
    rest = pattern
    if rest.startswith("*/"):
        parts.append("(?:.*/)?")
        rest = rest[2:]

    for char in rest:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts))


@lru_cache(maxsize=1024)
def compile_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


@dataclass
class ExactMatcher:
    """Default strategy: the path must equal the pattern exactly."""

    def matches(self, path: str, pattern: str) -> bool:
        """Check whether a pattern applies to the current path."""
        return path == pattern


@dataclass
class WildcardMatcher:
    """Strategy supporting ``*`` and ``?`` wildcards.

    - ``*`` matches any sequence of characters, including slashes
    - a leading ``*/`` also matches zero leading segments, so ``*/b/c``
      matches ``b/c`` as well as ``a/b/c`` and ``x/y/b/c``
    - ``?`` matches exactly one character within a segment

    Every matching pattern fires. There is no specificity ranking: the
    registry orders matches by registration only.
    """

    def matches(self, path: str, pattern: str) -> bool:
        """Check whether a pattern applies to the current path."""
        if "*" not in pattern and "?" not in pattern:
            return path == pattern
        return compile_wildcard(pattern).fullmatch(path) is not None


@dataclass
class RegexMatcher:
    """Strategy treating each pattern as a regular expression.

    The expression must match the whole path, e.g. ``book/(title|isbn)``
    or ``.*/chapter/\\d+``. Compiled expressions are cached per process.
    """

    def validate(self, pattern: str) -> None:
        """Check that a pattern compiles.

        Raises:
            ValueError: If the pattern is not a valid regular expression
        """
        try:
            compile_regex(pattern)
        except re.error as e:
            raise ValueError(f"Invalid regular expression '{pattern}': {e}") from e

    def matches(self, path: str, pattern: str) -> bool:
        return compile_regex(pattern).fullmatch(path) is not None
