"""AIP-135: standard Delete method.

https://google.aip.dev/135
"""

from aip_reviewer.models import Finding, Severity
from aip_reviewer.rules.aip131 import remove_request_body_fix
from aip_reviewer.rules.base import OperationRule, RuleContext
from aip_reviewer.rules.paths import operation_label
from aip_reviewer.rules.spec_utils import response_codes
from aip_reviewer.spec.pointer import request_body_pointer, responses_pointer

EXPECTED_SUCCESS_CODES = ("200", "202", "204")


class DeleteIdempotentRule(OperationRule):
    id = "aip135/delete-idempotent"
    name = "DELETE Is Idempotent"
    aip = "AIP-135"
    severity = Severity.WARNING
    description = "DELETE should be idempotent and not have a request body"
    methods = ("DELETE",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        findings = []
        label = operation_label(method, path)

        if operation.get("requestBody"):
            findings.append(ctx.create_finding(
                label,
                "DELETE should not have a request body",
                suggestion="Move any required data to path or query parameters",
                json_path=str(request_body_pointer(path, method)),
                fix=remove_request_body_fix(path, method),
            ))

        codes = response_codes(operation)
        if "201" in codes:
            findings.append(ctx.create_finding(
                label,
                "DELETE returns 201 Created, which implies non-idempotent behavior",
                suggestion="Use 200 OK, 204 No Content, or 202 Accepted instead",
                json_path=str(responses_pointer(path, method)),
            ))

        success = [c for c in codes if c.startswith("2") and c != "201"]
        if success and not any(c in EXPECTED_SUCCESS_CODES for c in success):
            findings.append(ctx.create_finding(
                label,
                f"DELETE uses unusual success code(s): {', '.join(success)}",
                suggestion="Use 200 OK (with body), 204 No Content, or 202 Accepted",
                json_path=str(responses_pointer(path, method)),
            ))
        return findings
