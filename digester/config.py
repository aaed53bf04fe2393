"""Shared configuration for the digester package."""

import re

# HTTP timeout in seconds for parse_url
HTTP_TIMEOUT = 10

# Attributes carrying the plugin class name and declaration id
PLUGIN_CLASS_ATTR = "class"
PLUGIN_ID_ATTR = "id"

# Declaration properties consulted by the rule finders
RULE_CLASS_PROPERTY = "ruleclass"
RULE_METHOD_PROPERTY = "method"
SET_PROPERTIES_PROPERTY = "setprops"

# Conventional rule-loading hooks looked up on plugin classes
DEFAULT_RULES_METHOD = "add_rules"
DEFAULT_RULE_INFO_SUFFIX = "RuleInfo"

# Marker for variable expansion, e.g. "${name}"
DEFAULT_VARIABLE_MARKER = "$"

# A pattern segment: element name, optionally containing * and ? wildcards
PATTERN_SEGMENT = re.compile(r"^[^/\s]+$")

# XML attribute names (optionally prefixed)
ATTRIBUTE_NAME = re.compile(r"^[A-Za-z_][\w.\-]*(:[A-Za-z_][\w.\-]*)?$")


def validate_pattern(pattern: str) -> str:
    """Validate and normalise a rule pattern.

    A single leading and trailing slash are stripped, so "/a/b/" becomes
    "a/b".

    Args:
        pattern: The slash-delimited pattern to validate

    Returns:
        The normalised pattern

    Raises:
        ValueError: If the pattern is empty or contains empty segments
    """
    if not isinstance(pattern, str):
        raise ValueError(f"Invalid pattern: {pattern!r}. Expected a string")

    normalised = pattern
    if normalised.startswith("/"):
        normalised = normalised[1:]
    if normalised.endswith("/"):
        normalised = normalised[:-1]

    if not normalised:
        raise ValueError(f"Invalid pattern: '{pattern}'. Pattern must not be empty")

    for segment in normalised.split("/"):
        if not PATTERN_SEGMENT.match(segment):
            raise ValueError(
                f"Invalid pattern: '{pattern}'. Expected slash-separated element "
                "names (e.g., 'address-book/person')"
            )
    return normalised


def validate_attribute_name(name: str) -> None:
    """Validate an XML attribute name used in rule configuration.

    Args:
        name: The attribute name to validate

    Raises:
        ValueError: If the name is not a valid XML attribute name
    """
    if not name or not ATTRIBUTE_NAME.match(name):
        raise ValueError(
            f"Invalid attribute name: '{name}'. Expected an XML name (e.g., 'class')"
        )
