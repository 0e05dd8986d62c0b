"""English word heuristics for resource names.

These are deliberately simple: plural/singular by suffix with an irregular
table, and verb detection by prefix or by a short list of words that are
rarely nouns. Words that are commonly both (``search``, ``backup``,
``report``, ``download``) are treated as nouns.
"""

import re
from functools import lru_cache

UNCOUNTABLES = frozenset({
    "data", "metadata", "auth", "config", "configuration", "settings",
    "api", "graphql", "oauth", "jwt", "cors",
    "software", "hardware", "firmware", "middleware",
    "status", "health", "metrics", "info", "information",
    "news", "feedback", "equipment", "analytics", "series", "species",
})

IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "tooth": "teeth",
    "foot": "feet",
    "mouse": "mice",
    "goose": "geese",
    "leaf": "leaves",
    "life": "lives",
    "knife": "knives",
    "wife": "wives",
    "shelf": "shelves",
    "half": "halves",
    "index": "indices",
    "vertex": "vertices",
    "matrix": "matrices",
    "appendix": "appendices",
    "crisis": "crises",
    "analysis": "analyses",
    "basis": "bases",
    "thesis": "theses",
    "diagnosis": "diagnoses",
    "hypothesis": "hypotheses",
    "criterion": "criteria",
    "phenomenon": "phenomena",
    "medium": "media",
    "curriculum": "curricula",
}

IRREGULAR_SINGULARS = {plural: singular for singular, plural in IRREGULAR_PLURALS.items()}

# Action verbs accepted as custom methods (AIP-136).
CUSTOM_METHOD_VERBS = frozenset({
    "validate", "verify", "check", "test", "export", "import",
    "download", "upload", "clear", "reset", "restore", "backup",
    "start", "stop", "pause", "resume", "enable", "disable", "toggle",
    "send", "publish", "notify", "archive", "unarchive", "approve",
    "reject", "cancel", "encrypt", "decrypt", "hash", "sync",
    "refresh", "reload", "train", "predict",
})

# Bare words that read as verbs and almost never as resource nouns.
PURE_VERBS = frozenset({
    "get", "fetch", "create", "add", "update", "delete", "remove", "retrieve",
    "find", "execute", "modify", "insert", "destroy", "generate", "compute",
    "calculate", "submit", "perform", "invoke", "validate", "verify", "clear",
    "restore", "enable", "disable", "send", "publish", "notify", "unarchive",
    "approve", "reject", "cancel", "encrypt", "decrypt", "reload", "predict",
    "toggle",
})

# A verb prefix glued to a following word: getUsers, create-order, list_items.
VERB_PREFIX_RE = re.compile(
    r"^(?i:get|fetch|create|add|update|edit|delete|remove|list|find|search|retrieve)"
    r"(?=[A-Z]|[-_][A-Za-z])"
)

_VOWELS = "aeiou"


def _match_case(original: str, replacement: str) -> str:
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def is_uncountable(word: str) -> bool:
    return word.lower() in UNCOUNTABLES


@lru_cache(maxsize=1024)
def singularize(word: str) -> str:
    lower = word.lower()
    if not lower or lower in UNCOUNTABLES or lower in IRREGULAR_PLURALS:
        return word
    if lower in IRREGULAR_SINGULARS:
        return _match_case(word, IRREGULAR_SINGULARS[lower])
    if lower.endswith("ies") and len(lower) > 4:
        return word[:-3] + "y"
    if lower.endswith(("sses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith(("ss", "us", "is")):
        return word[:-1]
    return word


@lru_cache(maxsize=1024)
def pluralize(word: str) -> str:
    lower = word.lower()
    if not lower or lower in UNCOUNTABLES or lower in IRREGULAR_SINGULARS:
        return word
    if lower in IRREGULAR_PLURALS:
        return _match_case(word, IRREGULAR_PLURALS[lower])
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def is_plural(word: str) -> bool:
    return singularize(word).lower() != word.lower()


def is_singular(word: str) -> bool:
    return not is_uncountable(word) and not is_plural(word)


def looks_like_verb(word: str) -> bool:
    """True for ``getUsers``-style compounds and bare action verbs."""
    if VERB_PREFIX_RE.match(word):
        return True
    return word.lower() in PURE_VERBS


def strip_verb_prefix(word: str) -> str:
    """``getUsers`` -> ``users``; used to suggest the noun behind a verb path."""
    stripped = re.sub(
        r"^(?i:get|fetch|create|add|update|edit|delete|remove|list|find|search|retrieve)[-_]?",
        "",
        word,
    )
    return stripped.lower() or "resource"


def split_words(segment: str) -> list[str]:
    """Split ``userProfile``, ``user-profile`` or ``user_profile`` into lower-case words."""
    spaced = re.sub(r"[-_]", " ", segment)
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", spaced)
    return [w for w in spaced.lower().split(" ") if w]
