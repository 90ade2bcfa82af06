"""Lint rules for OpenAPI documents.

Each rule class implements one kind of check and is registered under the
catalog identifiers that select it, with the options that specialize it.
"""

import re
from typing import Any

from ..config import RuleRecord
from ..document.index import DocumentIndex, Operation
from . import checks
from .framework import (
    DocumentRule,
    OperationRule,
    PathRule,
    SchemaRule,
    ValidationSession,
    register_rule,
)


def _compile_option(rule_id: str, pattern: Any) -> re.Pattern[str]:
    if not isinstance(pattern, str):
        raise ValueError(f"Rule {rule_id}: 'forbidden' must be a regular expression string")
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Rule {rule_id}: invalid regular expression '{pattern}': {e}")


@register_rule("enforce-security")
class SecuritySchemesRule(DocumentRule):
    """The document declares at least one security scheme."""

    def check_document(self, index: DocumentIndex, session: ValidationSession) -> None:
        if not index.has_security_schemes:
            session.report(self.record)


@register_rule("openapi-tags")
class TagsRule(DocumentRule):
    """The document declares at least one root tag."""

    def check_document(self, index: DocumentIndex, session: ValidationSession) -> None:
        if index.tag_count == 0:
            session.report(self.record, field_path="tags")


@register_rule("info-title", field="title")
@register_rule("info-description", field="description")
@register_rule("require-contact-info", field="contact")
class InfoFieldRule(DocumentRule):
    """A field of the info object is present and not blank."""

    def check_document(self, index: DocumentIndex, session: ValidationSession) -> None:
        field = self.option("field")
        if checks.is_blank(index.info.get(field)):
            session.report(self.record, field_path=f"info/{field}")


@register_rule("info-version")
class InfoVersionRule(DocumentRule):
    """info.version follows MAJOR.MINOR.PATCH with an optional rc/beta suffix."""

    def check_document(self, index: DocumentIndex, session: ValidationSession) -> None:
        if not checks.is_valid_version(index.info.get("version")):
            session.report(self.record, field_path="info/version")


@register_rule("only-https")
class HttpsServersRule(DocumentRule):
    """Every declared server uses https."""

    def check_document(self, index: DocumentIndex, session: ValidationSession) -> None:
        for i, server in enumerate(index.servers):
            if not checks.is_https_url(server.url):
                session.report(self.record, field_path=f"servers/{i}/url")


@register_rule("paths-kebab-case")
class KebabCasePathsRule(PathRule):
    """Literal path segments are lowercase kebab-case."""

    def check_path(self, path: str, item: dict[str, Any], session: ValidationSession) -> None:
        if not checks.is_kebab_case_path(path):
            session.report(self.record, field_path=path)


@register_rule("operation-operationId", field="operationId")
@register_rule("operation-tags", field="tags")
class OperationFieldRule(OperationRule):
    """Every operation carries a non-blank value for a field."""

    def check_operation(self, operation: Operation, session: ValidationSession) -> None:
        field = self.option("field")
        if checks.is_blank(operation.node.get(field)):
            session.report(self.record, field_path=f"{operation.label}/{field}")


@register_rule("pattern-found-NA", forbidden=r"\bNA\b")
@register_rule("pattern-found-texto", forbidden=r"\\w*\\W*")
class ForbiddenPatternTextRule(SchemaRule):
    """Schema ``pattern`` values must not contain forbidden text."""

    def __init__(self, record: RuleRecord, **options: Any):
        super().__init__(record, **options)
        self.forbidden = _compile_option(record.id, self.option("forbidden"))

    def check_node(self, node: dict[str, Any], path: str, session: ValidationSession) -> None:
        if checks.pattern_matches(node, self.forbidden):
            session.report(self.record, field_path=path)


@register_rule("transaction-found-last", schema="TransactionsLinks", property="last")
class ForbiddenPropertyRule(DocumentRule):
    """A named component schema must not declare a given property."""

    def check_document(self, index: DocumentIndex, session: ValidationSession) -> None:
        forbidden = self.option("property")
        for name, schema in index.component_schemas.items():
            if name.rsplit("/", 1)[-1] != self.option("schema"):
                continue
            properties = schema.get("properties")
            if isinstance(properties, dict) and forbidden in properties:
                session.report(self.record, field_path=f"{name}/{forbidden}")


@register_rule("no-leading-trailing-spaces")
class PatternWhitespaceRule(SchemaRule):
    """String patterns carry no leading or trailing whitespace."""

    def check_node(self, node: dict[str, Any], path: str, session: ValidationSession) -> None:
        if checks.has_padded_pattern(node):
            session.report(self.record, field_path=path)


@register_rule(
    "objects-required-in-request-should-has-properties-request",
    "objects-required-in-request-should-has-properties-response",
)
class RequiredPropertiesRule(SchemaRule):
    """Every required name of an object schema is a declared property."""

    def check_node(self, node: dict[str, Any], path: str, session: ValidationSession) -> None:
        for name in checks.undeclared_required(node):
            session.report(self.record, field_path=f"{path}/{name}")


@register_rule("string-should-has-maxLength", constraint="maxLength")
@register_rule("string-should-has-minLength", constraint="minLength")
@register_rule("string-should-has-pattern", constraint="pattern")
class StringConstraintRule(SchemaRule):
    """Non-enum string schemas declare a constraint."""

    def check_node(self, node: dict[str, Any], path: str, session: ValidationSession) -> None:
        if checks.missing_string_constraint(node, self.option("constraint")):
            session.report(self.record, field_path=path)


@register_rule("no-maxLength-for-enum", "no-maxLentgh-for-enum", constraint="maxLength")
@register_rule("no-minLength-for-enum", constraint="minLength")
class EnumConstraintRule(SchemaRule):
    """Enum schemas do not declare a length constraint."""

    def check_node(self, node: dict[str, Any], path: str, session: ValidationSession) -> None:
        if checks.forbidden_enum_constraint(node, self.option("constraint")):
            session.report(self.record, field_path=path)


@register_rule("array-objects-max-items")
class ArrayMaxItemsRule(SchemaRule):
    """Array schemas declare maxItems."""

    def check_node(self, node: dict[str, Any], path: str, session: ValidationSession) -> None:
        if checks.missing_max_items(node):
            session.report(self.record, field_path=path)
