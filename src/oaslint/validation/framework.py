"""Core rule engine for oaslint.

Maps rule identifiers from a catalog to registered rule strategies, applies
each one to its document scope, and gates the collected violations into a
pass/warn/fail outcome suitable for CI pipelines.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import LintConfig, RuleCatalog, RuleRecord, Severity
from ..document.index import DocumentIndex, Operation
from .walker import SchemaWalker

logger = logging.getLogger(__name__)

REFERENCE_INTEGRITY_RULE = "reference-integrity"


class Outcome(str, Enum):
    """Gate decision for a complete violation set."""
    PASS = "pass"
    PASS_WITH_WARNINGS = "warn"
    FAIL = "fail"


class RuleScope(str, Enum):
    """Part of the document a rule is applied to."""
    DOCUMENT = "document"
    PATH = "path"
    OPERATION = "operation"
    SCHEMA = "schema"


@dataclass(frozen=True)
class Violation:
    """A single rule failure."""
    rule: str
    severity: Severity
    message: str
    field_path: str | None = None

    def __str__(self) -> str:
        location = f" at {self.field_path}" if self.field_path else ""
        return f"[{self.severity.value.upper()}] {self.rule}: {self.message}{location}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "fieldPath": self.field_path,
        }


def decide(violations: Iterable[Violation]) -> Outcome:
    """Gate a violation set: any error fails, anything else only warns."""
    seen = False
    for violation in violations:
        if violation.severity == Severity.ERROR:
            return Outcome.FAIL
        seen = True
    return Outcome.PASS_WITH_WARNINGS if seen else Outcome.PASS


@dataclass
class ValidationResult:
    """Ordered violations and counters of a single document run."""
    violations: list[Violation] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=dict)
    document: str | None = None

    @property
    def outcome(self) -> Outcome:
        return decide(self.violations)

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = pass/warn, 1 = fail."""
        return 1 if self.outcome == Outcome.FAIL else 0

    def count(self, severity: Severity) -> int:
        return sum(1 for violation in self.violations if violation.severity == severity)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "document": self.document,
            "outcome": self.outcome.value,
            "exit_code": self.exit_code,
            "counters": self.counters,
            "violations": [violation.to_dict() for violation in self.violations],
        }


class ValidationSession:
    """Owns the violation accumulator for one engine run."""

    def __init__(self, document: str | None = None):
        self.document = document
        self._violations: list[Violation] = []
        self._counters: dict[str, int] = {}

    def report(self, record: RuleRecord, field_path: str | None = None, message: str | None = None) -> None:
        """Record a violation of record, tagged with its configured severity."""
        self._violations.append(
            Violation(record.id, record.severity, message or record.description, field_path)
        )

    def add(self, violation: Violation) -> None:
        self._violations.append(violation)

    def increment_counter(self, name: str, value: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + value

    @property
    def violations(self) -> tuple[Violation, ...]:
        return tuple(self._violations)

    def result(self) -> ValidationResult:
        return ValidationResult(list(self._violations), dict(self._counters), self.document)


class LintRule(ABC):
    """Base class for lint rules.

    A rule is built from its catalog record plus registered default options;
    catalog parameters override the defaults. Subclasses implement the check
    hook matching their ``scope``.
    """

    scope: RuleScope

    def __init__(self, record: RuleRecord, **options: Any):
        self.record = record
        self.options = {**options, **record.parameters}

    @property
    def name(self) -> str:
        return self.record.id

    def option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)


class DocumentRule(LintRule):
    """Rule evaluated once against the whole document."""

    scope = RuleScope.DOCUMENT

    @abstractmethod
    def check_document(self, index: DocumentIndex, session: ValidationSession) -> None:
        pass


class PathRule(LintRule):
    """Rule evaluated once per declared path."""

    scope = RuleScope.PATH

    @abstractmethod
    def check_path(self, path: str, item: dict[str, Any], session: ValidationSession) -> None:
        pass


class OperationRule(LintRule):
    """Rule evaluated once per operation."""

    scope = RuleScope.OPERATION

    @abstractmethod
    def check_operation(self, operation: Operation, session: ValidationSession) -> None:
        pass


class SchemaRule(LintRule):
    """Rule evaluated at every node of every component schema."""

    scope = RuleScope.SCHEMA

    def check_component(self, name: str, schema: dict[str, Any], walker: SchemaWalker,
                        session: ValidationSession) -> None:
        walker.walk(schema, name, lambda node, path: self.check_node(node, path, session))

    @abstractmethod
    def check_node(self, node: dict[str, Any], path: str, session: ValidationSession) -> None:
        pass


class RuleRegistry:
    """Mapping from rule identifier to rule class and default options.

    An id registered with ``alias_of`` selects the same check as the id it
    names; the engine builds at most one rule per check.
    """

    def __init__(self):
        self._entries: dict[str, tuple[type[LintRule], dict[str, Any]]] = {}
        self._aliases: dict[str, str] = {}

    def register(self, rule_id: str, rule_class: type[LintRule], alias_of: str | None = None,
                 **defaults: Any) -> None:
        if rule_id in self._entries:
            raise ValueError(f"Rule already registered: {rule_id}")
        if alias_of is not None:
            if alias_of not in self._entries:
                raise ValueError(f"Cannot alias {rule_id} to unregistered rule: {alias_of}")
            self._aliases[rule_id] = self.canonical_id(alias_of)
        self._entries[rule_id] = (rule_class, defaults)

    def canonical_id(self, rule_id: str) -> str:
        """Identifier of the check rule_id selects."""
        return self._aliases.get(rule_id, rule_id)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def ids(self) -> list[str]:
        return list(self._entries)

    def rule_class(self, rule_id: str) -> type[LintRule]:
        return self._entries[rule_id][0]

    def create(self, record: RuleRecord) -> LintRule | None:
        """Instantiate the rule for record, or None if the id is not registered."""
        entry = self._entries.get(record.id)
        if entry is None:
            return None
        rule_class, defaults = entry
        return rule_class(record, **defaults)


default_registry = RuleRegistry()


def register_rule(*rule_ids: str, registry: RuleRegistry | None = None, **defaults: Any):
    """Class decorator registering a rule class under one or more ids.

    Ids after the first are aliases of it and share its options.
    """
    def decorator(cls: type[LintRule]) -> type[LintRule]:
        target = registry if registry is not None else default_registry
        primary, *aliases = rule_ids
        target.register(primary, cls, **defaults)
        for alias in aliases:
            target.register(alias, cls, alias_of=primary, **defaults)
        return cls
    return decorator


class RuleEngine:
    """Applies a rule catalog to indexed documents."""

    def __init__(self, catalog: RuleCatalog, registry: RuleRegistry | None = None,
                 config: LintConfig | None = None):
        """Build the rules for catalog.

        Rules are instantiated eagerly so invalid rule options surface as
        configuration errors before any document is traversed. A catalog id
        aliasing a check that is already built is skipped.

        Raises:
            ValueError: If a rule's options are invalid
        """
        if registry is None:
            from . import rules  # noqa: F401  (populates default_registry)
            registry = default_registry

        self.catalog = catalog
        self.registry = registry
        self.config = config or LintConfig()
        self.walker = SchemaWalker(self.config.walker.max_depth)
        self.rules: list[LintRule] = []
        self.skipped: list[str] = []
        built: dict[str, str] = {}

        for record in catalog:
            if not record.enabled:
                logger.debug(f"Rule {record.id} is turned off")
                self.skipped.append(record.id)
                continue
            rule = registry.create(record)
            if rule is None:
                logger.debug(f"No implementation for rule {record.id}, ignoring")
                self.skipped.append(record.id)
                continue
            canonical = registry.canonical_id(record.id)
            if canonical in built:
                logger.debug(f"Rule {record.id} selects the same check as {built[canonical]}, ignoring")
                self.skipped.append(record.id)
                continue
            built[canonical] = record.id
            self.rules.append(rule)

    def validate(self, index: DocumentIndex, document: str | None = None) -> ValidationResult:
        """Run every configured rule against index.

        Args:
            index: Indexed document to lint
            document: Optional document name for reporting

        Returns:
            ValidationResult with violations in traversal order
        """
        session = ValidationSession(document)

        logger.info(f"Linting {document or 'document'} with {len(self.rules)} rules")

        reference_severity = self.config.references.severity
        if reference_severity != Severity.OFF:
            for broken in index.reference_errors:
                session.add(Violation(REFERENCE_INTEGRITY_RULE, reference_severity, broken.message, broken.location))

        for rule in self.rules:
            logger.debug(f"Executing rule: {rule.name}")
            try:
                self._apply(rule, index, session)
            except Exception as e:
                logger.error(f"Rule {rule.name} failed with error: {e}")
                session.add(Violation(rule.name, Severity.ERROR, f"Rule execution failed: {e}"))
            session.increment_counter("rules_applied")

        session.increment_counter("rules_skipped", len(self.skipped))
        session.increment_counter("operations", len(index.operations))
        session.increment_counter("component_schemas", len(index.component_schemas))

        result = session.result()
        logger.info(f"Lint completed with outcome: {result.outcome.value}")
        logger.info(f"Found {len(result.violations)} violations")
        return result

    def _apply(self, rule: LintRule, index: DocumentIndex, session: ValidationSession) -> None:
        if isinstance(rule, DocumentRule):
            rule.check_document(index, session)
        elif isinstance(rule, PathRule):
            for path, item in index.paths.items():
                rule.check_path(path, item, session)
        elif isinstance(rule, OperationRule):
            for operation in index.operations:
                rule.check_operation(operation, session)
        elif isinstance(rule, SchemaRule):
            for name, schema in index.component_schemas.items():
                rule.check_component(name, schema, self.walker, session)
        else:
            raise TypeError(f"Unsupported rule type: {type(rule).__name__}")
