"""Specialized checks evaluated by the lint rules.

Every check is a pure function over a single document node; rules decide
where to apply them and how to report the result.
"""

import re
from typing import Any

VERSION_PATTERN = re.compile(r"^(\d+\.\d+\.\d+)(?:-(rc|beta)\.\d+)?$")
PATH_VARIABLE_PATTERN = re.compile(r"\{[^}]+\}")
KEBAB_SEGMENT_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def schema_types(node: dict[str, Any]) -> set[str]:
    """Declared ``type`` values of a schema (a string or an OpenAPI 3.1 list)."""
    declared = node.get("type")
    if isinstance(declared, str):
        return {declared}
    if isinstance(declared, list):
        return {t for t in declared if isinstance(t, str)}
    return set()


def is_blank(value: Any) -> bool:
    """True if value is missing or carries no visible content."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, dict):
        return all(is_blank(v) for v in value.values())
    if isinstance(value, list):
        return all(is_blank(v) for v in value)
    return False


def is_valid_version(value: Any) -> bool:
    """MAJOR.MINOR.PATCH with an optional ``-rc.N`` or ``-beta.N`` suffix."""
    if not isinstance(value, str):
        return False
    return VERSION_PATTERN.match(value.strip()) is not None


def is_https_url(url: str) -> bool:
    return url.strip().strip("'\"").startswith("https://")


def is_kebab_case_path(path: str) -> bool:
    """Every literal segment of path, ignoring ``{variables}``, is kebab-case."""
    literal = PATH_VARIABLE_PATTERN.sub("", path)
    segments = [segment for segment in literal.split("/") if segment]
    return all(KEBAB_SEGMENT_PATTERN.match(segment) for segment in segments)


def missing_string_constraint(node: dict[str, Any], constraint: str) -> bool:
    """A non-enum string schema that does not declare constraint."""
    return "string" in schema_types(node) and "enum" not in node and constraint not in node


def forbidden_enum_constraint(node: dict[str, Any], constraint: str) -> bool:
    """An enum schema that declares constraint."""
    return "enum" in node and constraint in node


def missing_max_items(node: dict[str, Any]) -> bool:
    return "array" in schema_types(node) and "maxItems" not in node


def undeclared_required(node: dict[str, Any]) -> list[str]:
    """Names listed in ``required`` of an object schema but absent from ``properties``."""
    if "object" not in schema_types(node):
        return []
    required = node.get("required")
    if not isinstance(required, list):
        return []
    properties = node.get("properties")
    declared = set(properties) if isinstance(properties, dict) else set()
    return [str(name) for name in required if name not in declared]


def pattern_matches(node: dict[str, Any], forbidden: re.Pattern[str]) -> bool:
    """The schema's ``pattern`` text contains a match for forbidden."""
    pattern = node.get("pattern")
    return isinstance(pattern, str) and forbidden.search(pattern) is not None


def has_padded_pattern(node: dict[str, Any]) -> bool:
    """A non-enum string schema whose pattern has leading or trailing whitespace."""
    if "enum" in node or "string" not in schema_types(node):
        return False
    pattern = node.get("pattern")
    return isinstance(pattern, str) and pattern != "" and pattern.strip() != pattern
