"""Review orchestration: walk the document once and dispatch every rule."""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable

from aip_reviewer.config import ReviewConfig
from aip_reviewer.models import Finding, ReviewMetadata, ReviewResult, ReviewSummary, Severity
from aip_reviewer.rules.base import Rule, RuleContext, RuleKind
from aip_reviewer.rules.paths import operation_label
from aip_reviewer.rules.registry import RuleRegistry
from aip_reviewer.spec.model import effective_parameters, get_paths, get_schemas, iter_methods

logger = logging.getLogger(__name__)

REVIEWER_VERSION = "0.1.0"

_CHECK_METHODS = {
    RuleKind.SPEC: "check_spec",
    RuleKind.PATH: "check_path",
    RuleKind.OPERATION: "check_operation",
    RuleKind.PARAMETER: "check_parameter",
    RuleKind.SCHEMA: "check_schema",
    RuleKind.PROPERTY: "check_property",
}


def check_method(rule: Rule) -> Callable[..., list[Finding]]:
    """The bound check entry point for the rule's kind."""
    try:
        name = _CHECK_METHODS[rule.kind]
    except KeyError:
        raise ValueError(f"Rule {rule.id!r} has unknown kind {rule.kind!r}") from None
    return getattr(rule, name)


def summarize(findings: list[Finding], strict: bool = False) -> ReviewSummary:
    """Count findings by severity and category. Strict counts warnings as errors."""
    severities: Counter[Severity] = Counter()
    by_category: Counter[str] = Counter()
    for finding in findings:
        severity = finding.severity
        if strict and severity is Severity.WARNING:
            severity = Severity.ERROR
        severities[severity] += 1
        by_category[finding.category] += 1
    return ReviewSummary(
        errors=severities[Severity.ERROR],
        warnings=severities[Severity.WARNING],
        suggestions=severities[Severity.SUGGESTION],
        by_category=dict(by_category),
        strict=strict,
    )


class Reviewer:
    """Reviews API descriptions against a rule registry."""

    def __init__(self, config: ReviewConfig | None = None, registry: RuleRegistry | None = None):
        self.config = config or ReviewConfig()
        base = registry if registry is not None else RuleRegistry.default()
        self.registry = base.with_rules(self.config.custom_rules).select(
            self.config.categories, self.config.skip_rules
        )

    def review(self, document: dict, spec_path: str = "<inline>") -> ReviewResult:
        if not isinstance(document, dict):
            raise TypeError(f"Expected the API description as a mapping, got {type(document).__name__}")

        logger.debug("Reviewing %s with %d rules", spec_path, len(self.registry))
        run = _ReviewRun(document, self.registry)
        findings = run.execute()

        info = document.get("info") if isinstance(document.get("info"), dict) else {}
        applied = [rule_id for rule_id in self.registry.ids if rule_id in run.called]
        return ReviewResult(
            spec_path=spec_path,
            spec_title=_text(info.get("title")),
            spec_version=_text(info.get("version")),
            findings=findings,
            summary=summarize(findings, self.config.strict),
            metadata=ReviewMetadata(
                reviewed_at=datetime.now(timezone.utc).isoformat(),
                reviewer_version=REVIEWER_VERSION,
                rules_applied=applied,
            ),
        )


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


class _ReviewRun:
    """State of one pass: the findings so far and which rules were called."""

    def __init__(self, document: dict, registry: RuleRegistry):
        self.document = document
        self.rules = {kind: registry.by_kind(kind) for kind in RuleKind}
        self.findings: list[Finding] = []
        self.called: set[str] = set()

    def execute(self) -> list[Finding]:
        for rule in self.rules[RuleKind.SPEC]:
            self._run(rule, "spec")

        for path, path_item in get_paths(self.document).items():
            if path_item is None:
                path_item = {}
            if not isinstance(path_item, dict):
                logger.debug("Skipping %s: path item is not a mapping", path)
                continue
            self._walk_path(path, path_item)

        for name, schema in get_schemas(self.document).items():
            if isinstance(schema, dict):
                self._walk_schema(name, schema)
        return self.findings

    def _walk_path(self, path: str, path_item: dict) -> None:
        for rule in self.rules[RuleKind.PATH]:
            self._run(rule, path, path, path_item)

        for method, operation in iter_methods(path_item):
            label = operation_label(method, path)
            for rule in self.rules[RuleKind.OPERATION]:
                if rule.applies_to(method):
                    self._run(rule, label, method, operation, path)

            for parameter in effective_parameters(path_item, operation):
                for rule in self.rules[RuleKind.PARAMETER]:
                    if rule.applies_to(parameter):
                        self._run(rule, label, parameter, method, path)

    def _walk_schema(self, name: str, schema: dict) -> None:
        location = f"components.schemas.{name}"
        for rule in self.rules[RuleKind.SCHEMA]:
            self._run(rule, location, name, schema)

        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return
        for prop_name, prop in properties.items():
            for rule in self.rules[RuleKind.PROPERTY]:
                self._run(rule, location, prop_name, prop, name)

    def _run(self, rule: Rule, location: str, *args: Any) -> None:
        check = check_method(rule)
        self.called.add(rule.id)
        ctx = RuleContext(self.document, rule)
        try:
            found = check(*args, self.document, ctx)
        except Exception as e:
            logger.warning("Rule %s failed at %s", rule.id, location, exc_info=True)
            self.findings.append(Finding(
                rule_id=rule.id,
                severity=Severity.ERROR,
                category=rule.category,
                aip=rule.aip,
                path=location,
                message=f"Rule raised {type(e).__name__}: {e}",
                context={"internal_error": True},
            ))
            return
        self.findings.extend(found or [])


def review_spec(document: dict, spec_path: str = "<inline>", **config: Any) -> ReviewResult:
    """One-shot review, e.g. ``review_spec(doc, strict=True, categories=["naming"])``."""
    return Reviewer(ReviewConfig(**config)).review(document, spec_path)
