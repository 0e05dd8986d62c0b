"""AIP-131: standard Get method.

https://google.aip.dev/131
"""

from aip_reviewer.models import ChangeOperation, Fix, Finding, FixType, Severity, SpecChange
from aip_reviewer.rules.base import OperationRule, RuleContext
from aip_reviewer.rules.paths import operation_label
from aip_reviewer.spec.pointer import operation_pointer, request_body_pointer


def remove_request_body_fix(path: str, method: str) -> Fix:
    return Fix(
        type=FixType.REMOVE_REQUEST_BODY,
        json_path=str(operation_pointer(path, method)),
        spec_changes=[
            SpecChange(operation=ChangeOperation.REMOVE, path=request_body_pointer(path, method)),
        ],
    )


class GetNoBodyRule(OperationRule):
    id = "aip131/get-no-body"
    name = "GET No Request Body"
    aip = "AIP-131"
    severity = Severity.ERROR
    description = "GET requests must not have a request body"
    methods = ("GET",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        if not operation.get("requestBody"):
            return []
        return [ctx.create_finding(
            operation_label(method, path),
            "GET requests should not have a request body",
            suggestion="Move body parameters to query parameters, or use POST for complex queries",
            json_path=str(request_body_pointer(path, method)),
            fix=remove_request_body_fix(path, method),
        )]
