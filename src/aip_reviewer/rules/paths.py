"""Path classification: version prefixes, resources, singletons, custom methods."""

import re

from aip_reviewer.rules.naming import (
    CUSTOM_METHOD_VERBS,
    is_plural,
    is_uncountable,
    looks_like_verb,
    split_words,
)
from aip_reviewer.spec.model import get_paths

VERSION_PATTERNS = (
    re.compile(r"^v\d+$"),
    re.compile(r"^v\d+\.\d+$"),
    re.compile(r"^api$"),
)

# System endpoints that never return collections.
SINGLETON_ENDPOINTS = frozenset({
    "health", "healthz", "ready", "readyz", "live", "livez", "status", "info",
    "version", "config", "configuration", "settings", "me", "self", "current",
    "auth", "login", "logout", "register", "verify", "refresh", "token",
    "callback", "webhook", "webhooks", "metrics", "stats", "statistics",
    "analytics", "ping", "echo", "debug", "swagger", "openapi", "docs", "graphql",
})

SNAKE_CASE = "snake_case"
KEBAB_CASE = "kebab-case"
CAMEL_CASE = "camelCase"
PASCAL_CASE = "PascalCase"
LOWERCASE = "lowercase"


def split_path(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def join_path(segments: list[str], trailing_slash: bool = False) -> str:
    joined = "/" + "/".join(segments)
    if trailing_slash and segments:
        joined += "/"
    return joined


def is_parameter(segment: str) -> bool:
    return segment.startswith("{") and segment.endswith("}")


def parameter_name(segment: str) -> str:
    return segment[1:-1] if is_parameter(segment) else segment


def is_version_prefix(segment: str) -> bool:
    lower = segment.lower()
    return any(pattern.match(lower) for pattern in VERSION_PATTERNS)


def is_resource_segment(segment: str) -> bool:
    """Not a ``{param}``, not carrying a ``:customMethod`` suffix."""
    return bool(segment) and not segment.startswith("{") and ":" not in segment


def resource_segments(path: str) -> list[str]:
    return [s for s in split_path(path) if is_resource_segment(s)]


def rename_segment(path: str, index: int, replacement: str) -> str:
    """Replace the raw segment at ``index`` (as returned by :func:`split_path`)."""
    segments = split_path(path)
    segments[index] = replacement
    return join_path(segments, trailing_slash=path.endswith("/"))


def _base(segment: str) -> str:
    # "users:batchGet" -> "users", "{id}:cancel" -> "{id}"
    return segment.split(":", 1)[0]


def find_singletons(document: dict) -> frozenset[str]:
    """Resource prefixes that no path in the document continues with ``/{param}``.

    ``/v1/database/backup`` without any ``/v1/database/{id}`` makes both
    ``/v1/database`` and ``/v1/database/backup`` singletons.
    """
    candidates: set[str] = set()
    continued: set[str] = set()
    for path in get_paths(document):
        bases = [_base(s) for s in split_path(path)]
        for i, segment in enumerate(bases):
            if not segment:
                continue
            if is_parameter(segment):
                continued.add(join_path(bases[:i]))
            elif not is_version_prefix(segment):
                candidates.add(join_path(bases[: i + 1]))
    return frozenset(candidates - continued)


def is_singleton_prefix(segments: list[str], singletons: frozenset[str]) -> bool:
    """True when the prefix, or any resource prefix above it, is a singleton."""
    bases = [_base(s) for s in segments]
    for i in range(len(bases)):
        if join_path(bases[: i + 1]) in singletons:
            return True
    return False


def is_custom_method(segment: str, parent: list[str], singletons: frozenset[str]) -> bool:
    """Whether ``segment`` is an AIP-136 action rather than a resource name.

    ``parent`` holds the raw segments preceding it.
    """
    if ":" in segment:
        return True
    lower = segment.lower()
    if "-" in lower and lower.split("-", 1)[0] in CUSTOM_METHOD_VERBS:
        return True
    if lower in CUSTOM_METHOD_VERBS and parent:
        if is_parameter(_base(parent[-1])):
            return True
        return is_singleton_prefix(parent, singletons)
    return False


def is_collection_endpoint(path: str) -> bool:
    """Whether the last segment names a plural collection (a list endpoint)."""
    segments = split_path(path)
    if not segments:
        return False
    last = segments[-1]
    if not is_resource_segment(last) or is_version_prefix(last):
        return False
    lower = last.lower()
    if lower in SINGLETON_ENDPOINTS or is_uncountable(lower):
        return False
    if looks_like_verb(last):
        return False
    return is_plural(lower)


def detect_casing_style(word: str) -> str:
    if "_" in word:
        return SNAKE_CASE
    if "-" in word:
        return KEBAB_CASE
    if word[:1].islower() and any(c.isupper() for c in word):
        return CAMEL_CASE
    if word[:1].isupper():
        return PASCAL_CASE
    return LOWERCASE


def convert_casing(segment: str, style: str) -> str:
    words = split_words(segment)
    if style == KEBAB_CASE:
        return "-".join(words)
    if style == SNAKE_CASE:
        return "_".join(words)
    if style == CAMEL_CASE:
        return words[0] + "".join(w.capitalize() for w in words[1:]) if words else segment
    if style == PASCAL_CASE:
        return "".join(w.capitalize() for w in words)
    return segment


def operation_label(method: str, path: str) -> str:
    return f"{method.upper()} {path}"
