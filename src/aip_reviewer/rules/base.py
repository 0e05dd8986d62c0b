"""Rule variants.

Every rule is a subclass of exactly one of the six variants below. The
variant fixes the check method the reviewer calls and the granularity of
the document it is handed; ``kind`` is the tag the reviewer dispatches on.

A custom rule only needs the metadata attributes and its check method::

    class NoTrailingSlash(PathRule):
        id = "custom/no-trailing-slash"
        name = "No Trailing Slash"
        severity = Severity.WARNING
        description = "Paths must not end with '/'"

        def check_path(self, path, path_item, document, ctx):
            if path != "/" and path.endswith("/"):
                return [ctx.create_finding(path, "Trailing slash")]
            return []
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from aip_reviewer.models import Category, Finding, Severity


class RuleKind(str, Enum):
    SPEC = "spec"
    PATH = "path"
    OPERATION = "operation"
    PARAMETER = "parameter"
    SCHEMA = "schema"
    PROPERTY = "property"


AIP_CATEGORIES: dict[int, str] = {
    122: Category.NAMING.value,
    123: Category.NAMING.value,
    131: Category.STANDARD_METHODS.value,
    132: Category.STANDARD_METHODS.value,
    133: Category.STANDARD_METHODS.value,
    134: Category.STANDARD_METHODS.value,
    135: Category.STANDARD_METHODS.value,
    136: Category.STANDARD_METHODS.value,
    155: Category.IDEMPOTENCY.value,
    158: Category.PAGINATION.value,
    160: Category.FILTERING.value,
    193: Category.ERRORS.value,
    194: Category.ERRORS.value,
}

_AIP_NUMBER_RE = re.compile(r"(\d+)")


def category_for_aip(aip: str | None) -> str:
    """Map an ``AIP-NNN`` reference to its rule category (naming when unknown)."""
    if aip:
        match = _AIP_NUMBER_RE.search(aip)
        if match:
            return AIP_CATEGORIES.get(int(match.group(1)), Category.NAMING.value)
    return Category.NAMING.value


class Rule:
    """Shared metadata. Subclass one of the variants, not this class."""

    kind: ClassVar[RuleKind]

    id: str = ""
    name: str = ""
    severity: Severity = Severity.WARNING
    description: str = ""
    aip: str | None = None
    category: str | None = None

    def __init__(self):
        if self.category is None:
            self.category = category_for_aip(self.aip)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class SpecRule(Rule):
    kind = RuleKind.SPEC

    def check_spec(self, document: dict, ctx: "RuleContext") -> list[Finding]:
        raise NotImplementedError


class PathRule(Rule):
    kind = RuleKind.PATH

    def check_path(self, path: str, path_item: dict, document: dict, ctx: "RuleContext") -> list[Finding]:
        raise NotImplementedError


class OperationRule(Rule):
    kind = RuleKind.OPERATION

    # Upper-case HTTP methods this rule cares about; None means all.
    methods: tuple[str, ...] | None = None

    def applies_to(self, method: str) -> bool:
        return self.methods is None or method.upper() in self.methods

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: "RuleContext"
    ) -> list[Finding]:
        raise NotImplementedError


class ParameterRule(Rule):
    kind = RuleKind.PARAMETER

    # Parameter ``in`` values this rule cares about; None means all.
    locations: tuple[str, ...] | None = None

    def applies_to(self, parameter: dict) -> bool:
        return self.locations is None or parameter.get("in") in self.locations

    def check_parameter(
        self, parameter: dict, method: str, path: str, document: dict, ctx: "RuleContext"
    ) -> list[Finding]:
        raise NotImplementedError


class SchemaRule(Rule):
    kind = RuleKind.SCHEMA

    def check_schema(self, name: str, schema: dict, document: dict, ctx: "RuleContext") -> list[Finding]:
        raise NotImplementedError


class PropertyRule(Rule):
    kind = RuleKind.PROPERTY

    def check_property(
        self, name: str, prop: Any, schema_name: str, document: dict, ctx: "RuleContext"
    ) -> list[Finding]:
        raise NotImplementedError


@dataclass(frozen=True)
class RuleContext:
    """Handed to every check call."""

    document: dict
    rule: Rule

    def create_finding(self, path: str, message: str, **extra: Any) -> Finding:
        """Build a finding stamped with this rule's id, severity, category and AIP."""
        return Finding(
            rule_id=self.rule.id,
            severity=self.rule.severity,
            category=self.rule.category,
            aip=self.rule.aip,
            path=path,
            message=message,
            **extra,
        )
