"""AIP-133: standard Create method.

https://google.aip.dev/133
"""

from aip_reviewer.models import ChangeOperation, Fix, Finding, FixType, Severity, SpecChange
from aip_reviewer.rules.base import OperationRule, RuleContext
from aip_reviewer.rules.paths import operation_label
from aip_reviewer.rules.spec_utils import response_codes
from aip_reviewer.spec.pointer import responses_pointer


class PostReturnsCreatedRule(OperationRule):
    id = "aip133/post-returns-201"
    name = "POST Returns 201 or 202"
    aip = "AIP-133"
    severity = Severity.SUGGESTION
    description = "POST for resource creation should return 201 Created or 202 Accepted"
    methods = ("POST",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        # Custom methods (":cancel") are not creates.
        if ":" in path:
            return []
        codes = response_codes(operation)
        if "201" in codes or "202" in codes or "200" not in codes:
            return []

        pointer = responses_pointer(path, method)
        return [ctx.create_finding(
            operation_label(method, path),
            "POST returns 200. Consider 201 (Created) for sync or 202 (Accepted) for async.",
            suggestion="Use 201 when resource is created immediately, 202 for async creation",
            json_path=str(pointer),
            fix=Fix(
                type=FixType.CHANGE_STATUS_CODE,
                json_path=str(pointer),
                target={"current_code": "200", "suggested_code": "201"},
                replacement="201",
                spec_changes=[
                    SpecChange(operation=ChangeOperation.RENAME_KEY, path=pointer, from_="200", to="201"),
                ],
            ),
        )]
