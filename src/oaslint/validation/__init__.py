"""Rule validation engine for OpenAPI documents.

Rules are looked up by identifier in a registry, applied to their document
scope (document, path, operation or component schema), and their violations
are gated into a single pass/warn/fail outcome.
"""

from .framework import (
    LintRule,
    Outcome,
    RuleEngine,
    RuleRegistry,
    RuleScope,
    ValidationResult,
    ValidationSession,
    Violation,
    decide,
    default_registry,
    register_rule,
)
from .rules import (
    ArrayMaxItemsRule,
    EnumConstraintRule,
    ForbiddenPatternTextRule,
    ForbiddenPropertyRule,
    HttpsServersRule,
    InfoFieldRule,
    InfoVersionRule,
    KebabCasePathsRule,
    OperationFieldRule,
    PatternWhitespaceRule,
    RequiredPropertiesRule,
    SecuritySchemesRule,
    StringConstraintRule,
    TagsRule,
)
from .walker import SchemaWalker

__all__ = [
    "LintRule",
    "Outcome",
    "RuleEngine",
    "RuleRegistry",
    "RuleScope",
    "SchemaWalker",
    "ValidationResult",
    "ValidationSession",
    "Violation",
    "decide",
    "default_registry",
    "register_rule",
    "ArrayMaxItemsRule",
    "EnumConstraintRule",
    "ForbiddenPatternTextRule",
    "ForbiddenPropertyRule",
    "HttpsServersRule",
    "InfoFieldRule",
    "InfoVersionRule",
    "KebabCasePathsRule",
    "OperationFieldRule",
    "PatternWhitespaceRule",
    "RequiredPropertiesRule",
    "SecuritySchemesRule",
    "StringConstraintRule",
    "TagsRule",
]
