"""Findings, fixes and results exchanged between rules, the reviewer and the fixer.

Everything here is a pydantic model so a ``ReviewResult`` can be written to
JSON and read back for re-formatting without loss.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aip_reviewer.spec.pointer import Pointer, Segment, as_pointer


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class Category(str, Enum):
    NAMING = "naming"
    STANDARD_METHODS = "standard-methods"
    ERRORS = "errors"
    PAGINATION = "pagination"
    FILTERING = "filtering"
    LRO = "lro"
    IDEMPOTENCY = "idempotency"
    VERSIONING = "versioning"
    SECURITY = "security"


class FixType(str, Enum):
    RENAME_PATH_SEGMENT = "rename-path-segment"
    RENAME_PARAMETER = "rename-parameter"
    ADD_PARAMETER = "add-parameter"
    ADD_PARAMETERS = "add-parameters"
    REMOVE_REQUEST_BODY = "remove-request-body"
    CHANGE_STATUS_CODE = "change-status-code"
    ADD_OPERATION = "add-operation"
    ADD_SCHEMA = "add-schema"
    ADD_SCHEMA_PROPERTY = "add-schema-property"
    ADD_RESPONSE = "add-response"
    SET_SCHEMA_CONSTRAINT = "set-schema-constraint"


class ChangeOperation(str, Enum):
    RENAME_KEY = "rename-key"
    SET = "set"
    ADD = "add"
    REMOVE = "remove"
    MERGE = "merge"


class SpecChange(BaseModel):
    """One atomic edit the fixer executes against the document.

    ``path`` is stored as a tuple of segments (``str`` keys, ``int``
    indices). A JSONPath-like string or a :class:`Pointer` is accepted and
    parsed once.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    operation: ChangeOperation
    path: tuple[Segment, ...]
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    value: Any = None

    @field_validator("path", mode="before")
    @classmethod
    def _parse_path(cls, value: Any) -> Any:
        if isinstance(value, (str, Pointer)):
            return as_pointer(value).segments
        return value

    @property
    def pointer(self) -> Pointer:
        return Pointer(self.path)

    def describe(self) -> str:
        where = self.pointer.format()
        if self.operation is ChangeOperation.RENAME_KEY:
            return f"rename-key {where}: {self.from_!r} -> {self.to!r}"
        if self.operation is ChangeOperation.ADD and self.to is not None:
            return f"add {where}[{self.to!r}]"
        return f"{self.operation.value} {where}"


class Fix(BaseModel):
    """A machine-applicable remedy. It does nothing until handed to the fixer."""

    model_config = ConfigDict(frozen=True)

    type: FixType
    json_path: str
    target: Any = None
    replacement: Any = None
    spec_changes: list[SpecChange] = []


class Finding(BaseModel):
    """One detected rule violation at one location."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    severity: Severity
    category: str
    path: str  # e.g. "GET /users/{id}"
    message: str
    aip: str | None = None
    suggestion: str | None = None
    json_path: str | None = None
    context: dict[str, Any] | None = None
    fix: Fix | None = None


class ReviewSummary(BaseModel):
    errors: int = 0
    warnings: int = 0
    suggestions: int = 0
    by_category: dict[str, int] = {}
    strict: bool = False


class ReviewMetadata(BaseModel):
    reviewed_at: str
    reviewer_version: str
    rules_applied: list[str] = []


class ReviewResult(BaseModel):
    """Outcome of one review pass. Derived from ``findings``; never edited in place."""

    model_config = ConfigDict(frozen=True)

    spec_path: str
    spec_title: str | None = None
    spec_version: str | None = None
    findings: list[Finding]
    summary: ReviewSummary
    metadata: ReviewMetadata

    def effective_severity(self, finding: Finding) -> Severity:
        """Severity after strict-mode escalation."""
        if self.summary.strict and finding.severity is Severity.WARNING:
            return Severity.ERROR
        return finding.severity

    def fixable(self) -> list[Finding]:
        return [f for f in self.findings if f.fix is not None]

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(indent=indent, by_alias=True)

    @classmethod
    def from_json(cls, text: str) -> "ReviewResult":
        return cls.model_validate_json(text)


class ChangeResult(BaseModel):
    change: SpecChange
    applied: bool
    skipped: bool = False
    error: str | None = None


class FixResult(BaseModel):
    rule_id: str
    fix_type: FixType | None = None
    applied: bool
    changes: list[ChangeResult] = []


class FixSummary(BaseModel):
    total: int = 0
    applied: int = 0
    failed: int = 0
    changes: int = 0
