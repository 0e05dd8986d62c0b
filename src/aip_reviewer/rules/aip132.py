"""AIP-132: standard List method, filtering and ordering.

https://google.aip.dev/132
https://google.aip.dev/160
"""

from aip_reviewer.models import Category, ChangeOperation, Fix, Finding, FixType, Severity, SpecChange
from aip_reviewer.rules.base import OperationRule, RuleContext
from aip_reviewer.rules.paths import is_collection_endpoint, operation_label
from aip_reviewer.rules.spec_utils import parameters_of
from aip_reviewer.spec.model import get_paths
from aip_reviewer.spec.pointer import parameters_pointer

FILTER_PARAMETERS = ("filter", "q", "query", "search")
ORDER_PARAMETERS = ("order_by", "orderBy", "sort", "sort_by", "sortBy", "order")
# Query parameters that control paging or ordering, not which items match.
NON_FILTER_PARAMETERS = ("page_size", "page_token", "pageSize", "pageToken", "limit", "offset", "cursor", "order_by")

FILTER_PARAMETER = {
    "name": "filter",
    "in": "query",
    "required": False,
    "schema": {"type": "string"},
    "description": "Filter expression (AIP-160), e.g. 'status = \"ACTIVE\"'",
}

ORDER_BY_PARAMETER = {
    "name": "order_by",
    "in": "query",
    "required": False,
    "schema": {"type": "string"},
    "description": "Sort order, e.g. 'created_at desc, name asc'",
}


def add_parameter_fix(path: str, method: str, parameter: dict) -> Fix:
    pointer = parameters_pointer(path, method)
    return Fix(
        type=FixType.ADD_PARAMETER,
        json_path=str(pointer),
        target={"name": parameter["name"], "in": parameter["in"]},
        replacement=parameter,
        spec_changes=[SpecChange(operation=ChangeOperation.ADD, path=pointer, value=parameter)],
    )


def _query_parameters(document: dict, operation: dict, path: str) -> list[dict]:
    path_item = get_paths(document).get(path)
    parameters = parameters_of(document, operation) + parameters_of(document, path_item)
    return [p for p in parameters if p.get("in") == "query" and isinstance(p.get("name"), str)]


class HasFilteringRule(OperationRule):
    id = "aip132/has-filtering"
    name = "List Endpoints Document Filtering"
    aip = "AIP-160"
    severity = Severity.SUGGESTION
    description = "List endpoints should document available filters or filter parameter"
    methods = ("GET",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        if not is_collection_endpoint(path):
            return []
        names = [p["name"] for p in _query_parameters(document, operation, path)]
        if any(n.lower() in FILTER_PARAMETERS for n in names):
            return []
        # Field-specific filters such as ?status= or ?created_after= count too.
        if any(n not in NON_FILTER_PARAMETERS for n in names):
            return []

        return [ctx.create_finding(
            operation_label(method, path),
            "List endpoint has no filter parameters",
            suggestion="Add filter parameter or field-specific filters (e.g., status, created_after)",
            json_path=str(parameters_pointer(path, method)),
            fix=add_parameter_fix(path, method, FILTER_PARAMETER),
        )]


class HasOrderingRule(OperationRule):
    id = "aip132/has-ordering"
    name = "List Endpoints Support Ordering"
    aip = "AIP-132"
    category = Category.FILTERING.value
    severity = Severity.SUGGESTION
    description = "List endpoints should support ordering/sorting"
    methods = ("GET",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        if not is_collection_endpoint(path):
            return []
        if any(p["name"] in ORDER_PARAMETERS for p in _query_parameters(document, operation, path)):
            return []

        return [ctx.create_finding(
            operation_label(method, path),
            "List endpoint missing ordering parameter",
            suggestion='Add order_by query parameter (e.g., "created_at desc, name asc")',
            json_path=str(parameters_pointer(path, method)),
            fix=add_parameter_fix(path, method, ORDER_BY_PARAMETER),
        )]
