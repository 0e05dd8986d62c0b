"""AIP-155: request identification.

https://google.aip.dev/155
"""

from aip_reviewer.models import Finding, Severity
from aip_reviewer.rules.aip132 import add_parameter_fix
from aip_reviewer.rules.base import OperationRule, RuleContext
from aip_reviewer.rules.paths import operation_label
from aip_reviewer.rules.spec_utils import parameters_of
from aip_reviewer.spec.model import get_paths
from aip_reviewer.spec.pointer import parameters_pointer

IDEMPOTENCY_HEADERS = ("idempotency-key", "idempotency_key", "x-idempotency-key")

IDEMPOTENCY_KEY_PARAMETER = {
    "name": "Idempotency-Key",
    "in": "header",
    "required": False,
    "schema": {"type": "string"},
    "description": "Unique key for idempotent requests",
}


class IdempotencyKeyRule(OperationRule):
    id = "aip155/idempotency-key"
    name = "POST Supports Idempotency Key"
    aip = "AIP-155"
    severity = Severity.SUGGESTION
    description = "POST endpoints should accept an Idempotency-Key header for safe retries"
    methods = ("POST",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        # Custom methods and search endpoints are not creates.
        if ":" in path or "search" in path:
            return []
        parameters = parameters_of(document, operation) + parameters_of(document, get_paths(document).get(path))
        for parameter in parameters:
            name = parameter.get("name")
            if parameter.get("in") == "header" and isinstance(name, str) and name.lower() in IDEMPOTENCY_HEADERS:
                return []

        return [ctx.create_finding(
            operation_label(method, path),
            "POST endpoint missing Idempotency-Key header",
            suggestion="Add optional Idempotency-Key header parameter for safe retries",
            json_path=str(parameters_pointer(path, method)),
            fix=add_parameter_fix(path, method, IDEMPOTENCY_KEY_PARAMETER),
        )]
