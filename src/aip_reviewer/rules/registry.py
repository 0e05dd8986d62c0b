"""The rule catalog.

A :class:`RuleRegistry` is an immutable, ordered collection of rule
instances. The reviewer receives one explicitly; nothing here is global
mutable state.
"""

from typing import Iterable, Iterator

from aip_reviewer.rules.aip122 import ConsistentCasingRule, NestedOwnershipRule, NoVerbsRule, PluralResourcesRule
from aip_reviewer.rules.aip131 import GetNoBodyRule
from aip_reviewer.rules.aip132 import HasFilteringRule, HasOrderingRule
from aip_reviewer.rules.aip133 import PostReturnsCreatedRule
from aip_reviewer.rules.aip134 import PatchOverPutRule
from aip_reviewer.rules.aip135 import DeleteIdempotentRule
from aip_reviewer.rules.aip140 import FieldNamesRule
from aip_reviewer.rules.aip155 import IdempotencyKeyRule
from aip_reviewer.rules.aip158 import ListPaginatedRule, MaxPageSizeRule, ResponseNextTokenRule
from aip_reviewer.rules.aip193 import (
    ErrorResponsesDocumentedRule,
    ErrorSchemaDefinedRule,
    ErrorSchemaFieldsRule,
    StandardErrorCodesRule,
)
from aip_reviewer.rules.base import Rule, RuleKind

BUILTIN_RULES = (
    PluralResourcesRule,
    NoVerbsRule,
    ConsistentCasingRule,
    NestedOwnershipRule,
    GetNoBodyRule,
    HasFilteringRule,
    HasOrderingRule,
    PostReturnsCreatedRule,
    PatchOverPutRule,
    DeleteIdempotentRule,
    FieldNamesRule,
    IdempotencyKeyRule,
    ListPaginatedRule,
    MaxPageSizeRule,
    ResponseNextTokenRule,
    ErrorSchemaDefinedRule,
    ErrorSchemaFieldsRule,
    ErrorResponsesDocumentedRule,
    StandardErrorCodesRule,
)


class RuleRegistry:
    """Ordered, immutable set of rules with unique ids."""

    def __init__(self, rules: Iterable[Rule] = ()):
        rules = tuple(rules)
        seen: set[str] = set()
        for rule in rules:
            if not isinstance(rule, Rule) or not isinstance(getattr(rule, "kind", None), RuleKind):
                raise TypeError(f"{rule!r} is not a rule of a known kind")
            if not rule.id:
                raise ValueError(f"{rule!r} has no id")
            if rule.id in seen:
                raise ValueError(f"Duplicate rule id {rule.id!r}")
            seen.add(rule.id)
        self._rules = rules

    @classmethod
    def default(cls) -> "RuleRegistry":
        return cls(rule_class() for rule_class in BUILTIN_RULES)

    def with_rules(self, rules: Iterable[Rule]) -> "RuleRegistry":
        """A new registry with ``rules`` appended."""
        return RuleRegistry(self._rules + tuple(rules))

    def select(self, categories: Iterable[str] = (), skip_rules: Iterable[str] = ()) -> "RuleRegistry":
        """Keep rules in ``categories`` (all when empty), minus ``skip_rules``.

        Unknown categories and ids simply match nothing.
        """
        wanted = set(categories)
        skipped = set(skip_rules)
        return RuleRegistry(
            r for r in self._rules
            if (not wanted or r.category in wanted) and r.id not in skipped
        )

    def get(self, rule_id: str) -> Rule | None:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def by_category(self, category: str) -> list[Rule]:
        return [r for r in self._rules if r.category == category]

    def by_kind(self, kind: RuleKind) -> list[Rule]:
        return [r for r in self._rules if r.kind is kind]

    @property
    def ids(self) -> list[str]:
        return [r.id for r in self._rules]

    @property
    def categories(self) -> list[str]:
        return sorted({r.category for r in self._rules})

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return any(r.id == rule_id for r in self._rules)
