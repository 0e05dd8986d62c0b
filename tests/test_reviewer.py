from pathlib import Path

import pytest

from aip_reviewer.config import ReviewConfig
from aip_reviewer.models import ReviewResult, Severity
from aip_reviewer.reviewer import REVIEWER_VERSION, Reviewer, check_method, review_spec, summarize
from aip_reviewer.rules.base import OperationRule, SpecRule
from aip_reviewer.rules.registry import RuleRegistry
from aip_reviewer.spec.loader import load_spec

FIXTURES = Path(__file__).parent / "fixtures"


class _ExplodingRule(OperationRule):
    id = "custom/explodes"
    name = "Explodes"
    aip = "AIP-131"
    severity = Severity.SUGGESTION
    description = "Fails on every GET"
    methods = ("GET",)

    def check_operation(self, method, operation, path, document, ctx):
        raise KeyError("boom")


class _TitleRule(SpecRule):
    id = "custom/title"
    name = "Has Title"
    description = "The info block names the API"

    def check_spec(self, document, ctx):
        if document.get("info", {}).get("title"):
            return []
        return [ctx.create_finding("info", "API has no title")]


@pytest.fixture
def bookstore() -> dict:
    return load_spec(FIXTURES / "bookstore.yaml")


def _ids(result: ReviewResult) -> list[str]:
    return [f.rule_id for f in result.findings]


class TestReview:
    def test_bookstore_summary(self, bookstore):
        result = Reviewer().review(bookstore, spec_path="bookstore.yaml")
        assert result.summary.errors == 0
        assert result.summary.warnings == 3
        assert result.summary.suggestions == 7
        assert result.spec_title == "Bookstore API"
        assert result.spec_version == "1.0.0"
        assert result.spec_path == "bookstore.yaml"

    def test_bookstore_findings(self, bookstore):
        result = Reviewer().review(bookstore)
        warnings = sorted(f.rule_id for f in result.findings if f.severity is Severity.WARNING)
        assert warnings == ["aip122/plural-resources", "aip158/list-paginated", "aip193/schema-defined"]
        plural = next(f for f in result.findings if f.rule_id == "aip122/plural-resources")
        assert plural.path == "/v1/author"
        assert plural.context["affected_paths"] == ["/v1/author", "/v1/author/{id}"]
        assert len(result.fixable()) == 9

    def test_clean_spec_has_no_findings(self):
        result = Reviewer().review(load_spec(FIXTURES / "clean.yaml"))
        assert result.findings == []
        assert result.summary.by_category == {}

    def test_spec_rules_come_first(self, bookstore):
        result = Reviewer().review(bookstore)
        assert result.findings[0].rule_id == "aip193/schema-defined"

    def test_deterministic(self, bookstore):
        first = Reviewer().review(bookstore)
        second = Reviewer().review(bookstore)
        assert first.findings == second.findings
        assert first.summary == second.summary

    def test_document_not_modified(self, bookstore):
        before = load_spec(FIXTURES / "bookstore.yaml")
        Reviewer().review(bookstore)
        assert bookstore == before

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            Reviewer().review(["not", "a", "spec"])

    def test_tolerates_odd_path_items(self):
        result = Reviewer().review({"paths": {"/users": None, "/orders": "nonsense"}})
        assert all(not f.context.get("internal_error") for f in result.findings)

    def test_metadata(self, bookstore):
        result = Reviewer().review(bookstore)
        assert result.metadata.reviewer_version == REVIEWER_VERSION
        assert result.metadata.reviewed_at
        registry_ids = RuleRegistry.default().ids
        assert result.metadata.rules_applied == [i for i in registry_ids if i in result.metadata.rules_applied]
        assert "aip140/field-names" in result.metadata.rules_applied

    def test_rules_without_targets_not_listed(self):
        result = Reviewer().review({"openapi": "3.0.3", "paths": {}})
        assert "aip140/field-names" not in result.metadata.rules_applied
        assert "aip193/schema-defined" in result.metadata.rules_applied


class TestConfig:
    def test_strict_counts_warnings_as_errors(self, bookstore):
        result = Reviewer(ReviewConfig(strict=True)).review(bookstore)
        assert result.summary.errors == 3
        assert result.summary.warnings == 0
        assert result.summary.strict is True
        # Findings keep their own severity.
        assert {f.severity for f in result.findings} == {Severity.WARNING, Severity.SUGGESTION}

    def test_category_filter(self, bookstore):
        result = Reviewer(ReviewConfig(categories=("naming",))).review(bookstore)
        assert {f.category for f in result.findings} == {"naming"}
        assert all(i.startswith("aip122/") or i == "aip140/field-names" for i in result.metadata.rules_applied)

    def test_skip_rules(self, bookstore):
        result = Reviewer(ReviewConfig(skip_rules=("aip140/field-names",))).review(bookstore)
        assert "aip140/field-names" not in _ids(result)
        assert "aip140/field-names" not in result.metadata.rules_applied

    def test_custom_rules(self):
        config = ReviewConfig(custom_rules=(_TitleRule(),))
        result = Reviewer(config, registry=RuleRegistry()).review({"info": {}})
        assert _ids(result) == ["custom/title"]
        assert result.findings[0].category == "naming"

    def test_review_spec_shortcut(self, bookstore):
        result = review_spec(bookstore, "bookstore.yaml", strict=True, categories=["pagination"])
        assert _ids(result) == ["aip158/list-paginated"]
        assert result.summary.errors == 1


class TestRuleFailures:
    def test_failing_rule_becomes_finding(self, bookstore, caplog):
        registry = RuleRegistry.default().with_rules([_ExplodingRule()])
        result = Reviewer(registry=registry).review(bookstore)

        internal = [f for f in result.findings if f.rule_id == "custom/explodes"]
        gets = [f for f in result.findings if f.rule_id == "aip132/has-filtering"]
        assert len(internal) == 4
        assert all(f.severity is Severity.ERROR for f in internal)
        assert all(f.context == {"internal_error": True} for f in internal)
        assert "KeyError" in internal[0].message
        assert internal[0].path == "GET /v1/books"
        # Other rules still ran.
        assert len(gets) == 1
        assert "custom/explodes failed" in caplog.text

    def test_failure_counts_in_summary(self, bookstore):
        registry = RuleRegistry([_ExplodingRule()])
        result = Reviewer(registry=registry).review(bookstore)
        assert result.summary.errors == 4


class TestHelpers:
    def test_check_method_matches_kind(self):
        rule = _TitleRule()
        assert check_method(rule) == rule.check_spec

    def test_summarize(self, bookstore):
        findings = Reviewer().review(bookstore).findings
        summary = summarize(findings)
        assert summary.warnings == 3
        assert sum(summary.by_category.values()) == len(findings)
        assert summarize(findings, strict=True).errors == 3
