"""Tests for the registered lint rules."""

import pytest

from oaslint.config import RuleCatalog, RuleRecord, Severity
from oaslint.document import DocumentIndex
from oaslint.validation import RuleEngine, RuleScope, default_registry
from oaslint.validation.rules import (
    ArrayMaxItemsRule,
    EnumConstraintRule,
    InfoFieldRule,
    StringConstraintRule,
)


def run_rule(rule_id, document, severity="warn", **parameters):
    """Run a single rule and return (rule violations, field paths)."""
    record = RuleRecord(id=rule_id, severity=severity, description=f"{rule_id} violated",
                        parameters=parameters)
    result = RuleEngine(RuleCatalog(rules=[record])).validate(DocumentIndex.from_document(document))
    violations = [v for v in result.violations if v.rule == rule_id]
    return violations, [v.field_path for v in violations]


def run_catalog(rule_ids, document):
    """Run several warn-level rules together and return their field paths."""
    catalog = RuleCatalog(rules=[
        RuleRecord(id=rule_id, severity="warn", description=f"{rule_id} violated") for rule_id in rule_ids
    ])
    engine = RuleEngine(catalog)
    result = engine.validate(DocumentIndex.from_document(document))
    return engine, [v.field_path for v in result.violations]


def with_schemas(**schemas):
    return {"openapi": "3.0.3", "info": {"title": "T", "version": "1.0.0"}, "components": {"schemas": schemas}}


@pytest.fixture
def complete_document():
    """A document satisfying every document-level and path-level rule."""
    return {
        "openapi": "3.0.3",
        "info": {
            "title": "Pet Store",
            "description": "Manage pets",
            "version": "2.3.4-rc.1",
            "contact": {"name": "API team", "email": "api@example.com"},
        },
        "servers": [{"url": "https://api.example.com/v1"}],
        "tags": [{"name": "pets"}],
        "paths": {
            "/user-accounts/{id}/orders": {
                "get": {"operationId": "listOrders", "tags": ["orders"]},
                "parameters": [{"name": "id", "in": "path"}],
            },
        },
        "components": {
            "securitySchemes": {"bearer": {"type": "http", "scheme": "bearer"}},
        },
    }


class TestRegistry:
    """Test the built-in rule registrations."""

    def test_all_rule_ids_registered(self):
        expected = {
            "enforce-security", "openapi-tags", "require-contact-info", "info-title",
            "info-description", "info-version", "only-https", "paths-kebab-case",
            "operation-operationId", "operation-tags", "pattern-found-NA", "pattern-found-texto",
            "transaction-found-last", "no-leading-trailing-spaces",
            "objects-required-in-request-should-has-properties-request",
            "objects-required-in-request-should-has-properties-response",
            "string-should-has-maxLength", "string-should-has-minLength", "string-should-has-pattern",
            "no-maxLength-for-enum", "no-maxLentgh-for-enum", "no-minLength-for-enum",
            "array-objects-max-items",
        }
        assert expected <= set(default_registry.ids)

    def test_rule_classes(self):
        assert default_registry.rule_class("info-title") is InfoFieldRule
        assert default_registry.rule_class("no-maxLentgh-for-enum") is EnumConstraintRule
        assert default_registry.rule_class("string-should-has-pattern") is StringConstraintRule
        assert default_registry.rule_class("array-objects-max-items") is ArrayMaxItemsRule


class TestRuleAliases:
    """Test ids that select the same check."""

    def test_required_properties_request_and_response_report_once(self):
        document = with_schemas(Req={"type": "object", "required": ["id"], "properties": {}})
        engine, paths = run_catalog([
            "objects-required-in-request-should-has-properties-request",
            "objects-required-in-request-should-has-properties-response",
        ], document)

        assert paths == ["#/components/schemas/Req/id"]
        assert engine.skipped == ["objects-required-in-request-should-has-properties-response"]

    def test_response_id_alone_still_checks(self):
        document = with_schemas(Req={"type": "object", "required": ["id"], "properties": {}})
        _, paths = run_rule("objects-required-in-request-should-has-properties-response", document)
        assert paths == ["#/components/schemas/Req/id"]

    @pytest.mark.parametrize("rule_ids", [
        ["no-maxLength-for-enum", "no-maxLentgh-for-enum"],
        ["no-maxLentgh-for-enum", "no-maxLength-for-enum"],
    ])
    def test_misspelled_enum_id_reports_once(self, rule_ids):
        document = with_schemas(E={"type": "string", "enum": ["a"], "maxLength": 3})
        engine, paths = run_catalog(rule_ids, document)

        assert paths == ["#/components/schemas/E"]
        assert engine.skipped == rule_ids[1:]

    def test_distinct_options_are_not_aliases(self):
        document = with_schemas(E={"type": "string", "enum": ["a"], "maxLength": 3, "minLength": 1})
        _, paths = run_catalog(["no-maxLength-for-enum", "no-minLength-for-enum"], document)
        assert paths == ["#/components/schemas/E", "#/components/schemas/E"]


class TestDocumentRules:
    """Test document-scope rules."""

    @pytest.mark.parametrize("rule_id", [
        "enforce-security", "openapi-tags", "require-contact-info", "info-title",
        "info-description", "info-version", "only-https", "paths-kebab-case",
        "operation-operationId", "operation-tags",
    ])
    def test_complete_document_passes(self, complete_document, rule_id):
        violations, _ = run_rule(rule_id, complete_document)
        assert violations == []

    def test_missing_security_schemes(self, complete_document):
        del complete_document["components"]["securitySchemes"]
        violations, paths = run_rule("enforce-security", complete_document, severity="error")

        assert len(violations) == 1
        assert violations[0].severity == Severity.ERROR
        assert violations[0].message == "enforce-security violated"
        assert paths == [None]

    def test_swagger_security_definitions(self):
        document = {"swagger": "2.0", "securityDefinitions": {"key": {"type": "apiKey"}}}
        violations, _ = run_rule("enforce-security", document)
        assert violations == []

    def test_no_tags(self, complete_document):
        complete_document["tags"] = []
        _, paths = run_rule("openapi-tags", complete_document)
        assert paths == ["tags"]

    @pytest.mark.parametrize("rule_id,field", [
        ("info-title", "title"),
        ("info-description", "description"),
        ("require-contact-info", "contact"),
    ])
    def test_blank_info_fields(self, complete_document, rule_id, field):
        complete_document["info"][field] = "   "
        _, paths = run_rule(rule_id, complete_document)
        assert paths == [f"info/{field}"]

    def test_missing_info_object(self):
        _, paths = run_rule("info-title", {"openapi": "3.0.3"})
        assert paths == ["info/title"]

    def test_empty_contact_mapping(self, complete_document):
        complete_document["info"]["contact"] = {"name": ""}
        _, paths = run_rule("require-contact-info", complete_document)
        assert paths == ["info/contact"]

    @pytest.mark.parametrize("version", ["1.0.0", "2.3.4-rc.1", "1.0.0-beta.12"])
    def test_valid_versions(self, complete_document, version):
        complete_document["info"]["version"] = version
        violations, _ = run_rule("info-version", complete_document)
        assert violations == []

    @pytest.mark.parametrize("version", ["1.0", "v1.0.0", ""])
    def test_invalid_versions(self, complete_document, version):
        complete_document["info"]["version"] = version
        _, paths = run_rule("info-version", complete_document)
        assert paths == ["info/version"]

    def test_one_violation_per_plain_http_server(self, complete_document):
        complete_document["servers"] = [
            {"url": "http://a.example.com"},
            {"url": "https://b.example.com"},
            {"url": "/relative"},
        ]
        _, paths = run_rule("only-https", complete_document)
        assert paths == ["servers/0/url", "servers/2/url"]

    def test_swagger_schemes(self):
        document = {"swagger": "2.0", "host": "api.example.com", "basePath": "/v1", "schemes": ["http", "https"]}
        _, paths = run_rule("only-https", document)
        assert paths == ["servers/0/url"]


class TestPathRules:
    """Test path and operation scope rules."""

    def test_kebab_case(self, complete_document):
        complete_document["paths"]["/userAccounts/{id}"] = {"get": {"operationId": "get", "tags": ["a"]}}
        _, paths = run_rule("paths-kebab-case", complete_document)
        assert paths == ["/userAccounts/{id}"]

    def test_operation_without_operation_id(self, complete_document):
        complete_document["paths"]["/pets"] = {
            "get": {"tags": ["pets"]},
            "post": {"operationId": "  ", "tags": ["pets"]},
            "put": {"operationId": "updatePet", "tags": ["pets"]},
        }
        _, paths = run_rule("operation-operationId", complete_document)
        assert paths == ["GET /pets/operationId", "POST /pets/operationId"]

    def test_operation_with_empty_tags(self, complete_document):
        complete_document["paths"]["/pets"] = {"delete": {"operationId": "deletePet", "tags": []}}
        _, paths = run_rule("operation-tags", complete_document)
        assert paths == ["DELETE /pets/tags"]


class TestSchemaRules:
    """Test schema scope rules."""

    def test_array_without_max_items_at_any_depth(self):
        document = with_schemas(
            Order={
                "type": "object",
                "properties": {
                    "lines": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "codes": {"type": "array", "maxItems": 5, "items": {"type": "array"}},
                            },
                        },
                    },
                },
            },
        )
        _, paths = run_rule("array-objects-max-items", document)
        assert paths == [
            "#/components/schemas/Order/lines",
            "#/components/schemas/Order/lines/object/codes/array",
        ]

    def test_string_constraint_presence(self):
        document = with_schemas(
            Pet={
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "code": {"type": "string", "maxLength": 5},
                    "kind": {"type": "string", "enum": ["cat", "dog"]},
                },
            },
        )
        _, paths = run_rule("string-should-has-maxLength", document)
        assert paths == ["#/components/schemas/Pet/name"]

    @pytest.mark.parametrize("rule_id,constraint", [
        ("string-should-has-minLength", "minLength"),
        ("string-should-has-pattern", "pattern"),
    ])
    def test_other_string_constraints(self, rule_id, constraint):
        document = with_schemas(Code={"type": "string", constraint: "x" if constraint == "pattern" else 1},
                                Name={"type": "string"})
        _, paths = run_rule(rule_id, document)
        assert paths == ["#/components/schemas/Name"]

    @pytest.mark.parametrize("rule_id", ["no-maxLength-for-enum", "no-maxLentgh-for-enum"])
    def test_enum_with_max_length(self, rule_id):
        document = with_schemas(
            Status={"type": "string", "enum": ["A", "B"], "maxLength": 1, "minLength": 1},
            Plain={"type": "string", "maxLength": 3},
        )
        _, paths = run_rule(rule_id, document)
        assert paths == ["#/components/schemas/Status"]

    def test_enum_nodes_never_trigger_presence_check(self):
        document = with_schemas(Status={"type": "string", "enum": ["A", "B"]})
        min_violations, _ = run_rule("string-should-has-minLength", document)
        enum_violations, _ = run_rule("no-minLength-for-enum", document)
        assert min_violations == []
        assert enum_violations == []

    def test_required_properties_consistency(self):
        document = with_schemas(
            Pet={
                "type": "object",
                "required": ["id", "name", "owner"],
                "properties": {
                    "id": {"type": "string"},
                    "owner": {
                        "type": "object",
                        "required": ["email"],
                        "properties": {"phone": {"type": "string"}},
                    },
                },
            },
        )
        _, paths = run_rule("objects-required-in-request-should-has-properties-request", document)
        assert paths == [
            "#/components/schemas/Pet/name",
            "#/components/schemas/Pet/owner/email",
        ]

    def test_pattern_found_na(self):
        document = with_schemas(
            Code={"type": "string", "pattern": "^(NA|[A-Z]{2})$"},
            Name={"type": "string", "pattern": "^NAME$"},
        )
        _, paths = run_rule("pattern-found-NA", document)
        assert paths == ["#/components/schemas/Code"]

    def test_pattern_forbidden_text_override(self):
        document = with_schemas(Code={"type": "string", "pattern": "^.*$"})
        _, paths = run_rule("pattern-found-NA", document, forbidden=r"\.\*")
        assert paths == ["#/components/schemas/Code"]

    def test_pattern_found_texto(self):
        document = with_schemas(
            Loose={"type": "string", "pattern": "\\\\abc"},
            Strict={"type": "string", "pattern": "^[a-z]+$"},
        )
        _, paths = run_rule("pattern-found-texto", document)
        assert paths == ["#/components/schemas/Loose"]

    def test_padded_pattern(self):
        document = with_schemas(
            Pet={
                "type": "object",
                "properties": {
                    "code": {"type": "string", "pattern": "^[A-Z]+$ "},
                    "kind": {"type": "string", "enum": ["a"], "pattern": " a"},
                    "name": {"type": "string", "pattern": "^[a-z]+$"},
                },
            },
        )
        _, paths = run_rule("no-leading-trailing-spaces", document)
        assert paths == ["#/components/schemas/Pet/code"]

    def test_transactions_links_last(self):
        document = with_schemas(
            TransactionsLinks={"type": "object", "properties": {"self": {}, "last": {}}},
            AccountsLinks={"type": "object", "properties": {"last": {}}},
        )
        _, paths = run_rule("transaction-found-last", document)
        assert paths == ["#/components/schemas/TransactionsLinks/last"]

    def test_transaction_rule_is_document_scoped(self):
        assert default_registry.rule_class("transaction-found-last").scope == RuleScope.DOCUMENT

    def test_shared_schema_reported_at_every_location(self):
        shared = {"type": "array", "items": {"type": "string"}}
        document = with_schemas(Pet={"type": "object", "properties": {"tags": shared, "labels": shared}})
        _, paths = run_rule("array-objects-max-items", document)
        assert paths == ["#/components/schemas/Pet/tags", "#/components/schemas/Pet/labels"]

    def test_swagger_definitions(self):
        document = {"swagger": "2.0", "definitions": {"Pet": {"type": "array"}}}
        _, paths = run_rule("array-objects-max-items", document)
        assert paths == ["#/definitions/Pet"]
