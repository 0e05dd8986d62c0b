"""AIP-122: resource names.

https://google.aip.dev/122
"""

import copy
from collections import Counter

from aip_reviewer.models import Category, ChangeOperation, Fix, Finding, FixType, Severity, SpecChange
from aip_reviewer.rules.base import PathRule, RuleContext, SpecRule
from aip_reviewer.rules.naming import is_singular, looks_like_verb, pluralize, singularize, split_words, strip_verb_prefix
from aip_reviewer.rules.paths import (
    LOWERCASE,
    convert_casing,
    detect_casing_style,
    find_singletons,
    is_custom_method,
    is_parameter,
    is_resource_segment,
    is_singleton_prefix,
    is_version_prefix,
    parameter_name,
    rename_segment,
    split_path,
)
from aip_reviewer.rules.spec_utils import resolve_ref
from aip_reviewer.spec.model import get_paths, iter_methods, parameter_key
from aip_reviewer.spec.pointer import PATHS, parameters_pointer, path_pointer


def _paths_with_prefix(document: dict, prefix: list[str]) -> list[str]:
    size = len(prefix)
    return [p for p in get_paths(document) if split_path(p)[:size] == prefix]


def _rename_path_change(old: str, new: str) -> SpecChange:
    return SpecChange(operation=ChangeOperation.RENAME_KEY, path=PATHS, from_=old, to=new)


class PluralResourcesRule(PathRule):
    id = "aip122/plural-resources"
    name = "Plural Resource Names"
    aip = "AIP-122"
    severity = Severity.WARNING
    description = "Resource names should be plural nouns (except singletons per AIP-156)"

    def check_path(self, path: str, path_item: dict, document: dict, ctx: RuleContext) -> list[Finding]:
        findings = []
        singletons = find_singletons(document)
        segments = split_path(path)

        for index, segment in enumerate(segments):
            if not is_resource_segment(segment) or is_version_prefix(segment):
                continue
            if is_custom_method(segment, segments[:index], singletons):
                continue
            prefix = segments[: index + 1]
            if is_singleton_prefix(prefix, singletons) or not is_singular(segment):
                continue

            # Report each resource once, on the first path that carries it.
            affected = _paths_with_prefix(document, prefix)
            if affected[0] != path:
                continue

            plural = pluralize(segment)
            findings.append(ctx.create_finding(
                path,
                f"Resource name '{segment}' appears singular. Use plural form.",
                suggestion=f"Rename to '{plural}' or appropriate plural",
                json_path=str(path_pointer(path)),
                context={"segment": segment, "suggested_fix": plural, "affected_paths": affected},
                fix=Fix(
                    type=FixType.RENAME_PATH_SEGMENT,
                    json_path=str(path_pointer(path)),
                    target={"segment": segment, "segment_index": index},
                    replacement=plural,
                    spec_changes=[
                        _rename_path_change(p, rename_segment(p, index, plural)) for p in affected
                    ],
                ),
            ))
        return findings


class NoVerbsRule(PathRule):
    id = "aip122/no-verbs"
    name = "No Verbs in Path"
    aip = "AIP-131"
    category = Category.NAMING.value
    severity = Severity.ERROR
    description = "Paths should use nouns, not verbs. Custom methods (AIP-136) are exceptions."

    def check_path(self, path: str, path_item: dict, document: dict, ctx: RuleContext) -> list[Finding]:
        findings = []
        singletons = find_singletons(document)
        segments = split_path(path)

        for index, segment in enumerate(segments):
            if not is_resource_segment(segment) or is_version_prefix(segment):
                continue
            if is_custom_method(segment, segments[:index], singletons):
                continue
            if looks_like_verb(segment):
                findings.append(ctx.create_finding(
                    path,
                    f"Path contains verb '{segment}'. Use nouns for resources.",
                    suggestion=f"Extract the noun (e.g., '{strip_verb_prefix(segment)}')",
                    json_path=str(path_pointer(path)),
                    context={"segment": segment},
                ))
        return findings


class ConsistentCasingRule(SpecRule):
    id = "aip122/consistent-casing"
    name = "Consistent Casing"
    aip = "AIP-122"
    severity = Severity.WARNING
    description = "All path segments should use consistent casing style"

    def check_spec(self, document: dict, ctx: RuleContext) -> list[Finding]:
        paths = list(get_paths(document))
        counts: Counter[str] = Counter()
        for path in paths:
            for segment in split_path(path):
                if is_resource_segment(segment):
                    style = detect_casing_style(segment)
                    if style != LOWERCASE:
                        counts[style] += 1

        if len(counts) < 2:
            return []
        # Counter keeps first-seen order, so ties go to the earliest style.
        dominant = max(counts, key=lambda style: counts[style])

        findings = []
        for path in paths:
            new_path = path
            offending = []
            for index, segment in enumerate(split_path(path)):
                if not is_resource_segment(segment):
                    continue
                style = detect_casing_style(segment)
                if style in (LOWERCASE, dominant):
                    continue
                offending.append(segment)
                new_path = rename_segment(new_path, index, convert_casing(segment, dominant))
            if not offending:
                continue

            findings.append(ctx.create_finding(
                path,
                f"Inconsistent casing: {', '.join(repr(s) for s in offending)} "
                f"not in {dominant}, which the API predominantly uses",
                suggestion=f"Convert to {dominant} for consistency",
                json_path=str(path_pointer(path)),
                context={"segments": offending, "dominant_style": dominant},
                fix=Fix(
                    type=FixType.RENAME_PATH_SEGMENT,
                    json_path=str(path_pointer(path)),
                    target={"segments": offending, "dominant_style": dominant},
                    replacement=new_path,
                    spec_changes=[_rename_path_change(path, new_path)],
                ),
            ))
        return findings


def _ownership_pairs(segments: list[str]) -> int:
    """Count ``resource/{param}`` pairs, ignoring version prefixes."""
    relevant = [s for s in segments if not is_version_prefix(s)]
    return sum(
        1
        for previous, current in zip(relevant, relevant[1:])
        if is_parameter(current) and is_resource_segment(previous)
    )


class NestedOwnershipRule(PathRule):
    id = "aip122/nested-ownership"
    name = "Nested Resource Ownership"
    aip = "AIP-122"
    severity = Severity.SUGGESTION
    description = "Nested resource parameters should reflect parent ownership"

    def check_path(self, path: str, path_item: dict, document: dict, ctx: RuleContext) -> list[Finding]:
        segments = split_path(path)
        if len(segments) < 2 or segments[-1] != "{id}":
            return []
        parent = segments[-2]
        if not is_resource_segment(parent) or _ownership_pairs(segments) < 2:
            return []

        words = split_words(singularize(parent))
        other_params = [parameter_name(s) for s in segments[:-1] if is_parameter(s)]
        if any("_" in p for p in other_params):
            new_name = "_".join(words + ["id"])
        else:
            new_name = words[0] + "".join(w.capitalize() for w in words[1:]) + "Id"
        new_path = rename_segment(path, len(segments) - 1, "{" + new_name + "}")

        changes = [_rename_path_change(path, new_path)]
        containers = [(path_item, parameters_pointer(new_path))]
        containers += [(op, parameters_pointer(new_path, m)) for m, op in iter_methods(path_item)]
        for container, pointer in containers:
            for index, parameter in enumerate(container.get("parameters") or []):
                resolved = resolve_ref(document, parameter)
                if not isinstance(resolved, dict) or parameter_key(resolved) != ("id", "path"):
                    continue
                # Set the element itself so a shared $ref target stays untouched.
                changes.append(SpecChange(
                    operation=ChangeOperation.SET,
                    path=pointer.child(index),
                    value={**copy.deepcopy(resolved), "name": new_name},
                ))

        return [ctx.create_finding(
            path,
            f"Generic '{{id}}' in nested path. Use descriptive name like '{{{new_name}}}'",
            suggestion=f"Rename to {{{new_name}}} to clarify ownership",
            json_path=str(path_pointer(path)),
            context={"param_name": "id", "parent_resource": parent, "suggested_name": new_name},
            fix=Fix(
                type=FixType.RENAME_PARAMETER,
                json_path=str(path_pointer(path)),
                target={"param_name": "id"},
                replacement=new_name,
                spec_changes=changes,
            ),
        )]
