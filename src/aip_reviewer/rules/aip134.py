"""AIP-134: standard Update method.

https://google.aip.dev/134
"""

import copy

from aip_reviewer.models import ChangeOperation, Fix, Finding, FixType, Severity, SpecChange
from aip_reviewer.rules.base import PathRule, RuleContext
from aip_reviewer.spec.pointer import path_pointer

UPDATE_MASK_PARAMETER = {
    "name": "update_mask",
    "in": "query",
    "required": False,
    "schema": {"type": "string"},
    "description": "Field mask specifying which fields to update",
}


def patch_operation_from(put: dict) -> dict:
    """A PATCH operation template reusing the PUT body and responses."""
    operation = {
        "summary": "Partially update resource",
        "description": "Update resource fields using field mask (AIP-134)",
        "parameters": [dict(UPDATE_MASK_PARAMETER)],
    }
    if "requestBody" in put:
        operation["requestBody"] = copy.deepcopy(put["requestBody"])
    operation["responses"] = copy.deepcopy(put.get("responses") or {"200": {"description": "Updated resource"}})
    return operation


class PatchOverPutRule(PathRule):
    id = "aip134/patch-over-put"
    name = "PATCH for Partial Updates"
    aip = "AIP-134"
    severity = Severity.SUGGESTION
    description = "Prefer PATCH for partial updates over PUT"

    def check_path(self, path: str, path_item: dict, document: dict, ctx: RuleContext) -> list[Finding]:
        # Only resource paths (with an id parameter) are updated.
        if "{" not in path:
            return []
        put = path_item.get("put")
        if not isinstance(put, dict) or "patch" in path_item:
            return []

        pointer = path_pointer(path)
        patch = patch_operation_from(put)
        return [ctx.create_finding(
            f"PUT {path}",
            "Using PUT without PATCH. Consider adding PATCH for partial updates.",
            suggestion="Add PATCH endpoint with field mask support for partial updates",
            json_path=str(pointer),
            fix=Fix(
                type=FixType.ADD_OPERATION,
                json_path=str(pointer),
                target={"method": "patch", "based_on": "put"},
                replacement=patch,
                spec_changes=[
                    SpecChange(operation=ChangeOperation.ADD, path=pointer, to="patch", value=patch),
                ],
            ),
        )]
