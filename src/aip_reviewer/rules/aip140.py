"""AIP-140: field names.

https://google.aip.dev/140
"""

import re
from typing import Any

from aip_reviewer.models import Finding, Severity
from aip_reviewer.rules.base import PropertyRule, RuleContext
from aip_reviewer.rules.paths import SNAKE_CASE, convert_casing
from aip_reviewer.spec.pointer import schema_property_pointer

LOWER_SNAKE_RE = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$")


class FieldNamesRule(PropertyRule):
    id = "aip140/field-names"
    name = "Field Names Use lower_snake_case"
    aip = "AIP-140"
    severity = Severity.SUGGESTION
    description = "Schema field names should be lower_snake_case"

    def check_property(
        self, name: str, prop: Any, schema_name: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        # "$schema", "@type" and friends are annotations, not fields.
        if not name[:1].isalpha() or LOWER_SNAKE_RE.match(name):
            return []
        suggested = convert_casing(name, SNAKE_CASE)
        return [ctx.create_finding(
            f"components.schemas.{schema_name}",
            f"Field '{name}' in schema '{schema_name}' is not lower_snake_case",
            suggestion=f"Rename to '{suggested}'",
            json_path=str(schema_property_pointer(schema_name, name)),
            context={"field": name, "suggested_name": suggested},
        )]
