"""AIP-158: pagination.

https://google.aip.dev/158
"""

from aip_reviewer.models import ChangeOperation, Fix, Finding, FixType, Severity, SpecChange
from aip_reviewer.rules.base import OperationRule, ParameterRule, RuleContext
from aip_reviewer.rules.paths import is_collection_endpoint, operation_label
from aip_reviewer.rules.spec_utils import has_any_parameter, locate_parameter, locate_response_schema
from aip_reviewer.spec.model import get_paths
from aip_reviewer.spec.pointer import parameters_pointer

PAGE_SIZE_NAMES = ("page_size", "pageSize", "limit")
PAGE_TOKEN_NAMES = ("page_token", "pageToken", "cursor", "offset")
NEXT_TOKEN_FIELDS = ("next_page_token", "nextPageToken", "next_cursor", "nextCursor", "cursor")
MAX_PAGE_SIZE = 100

PAGINATION_PARAMETERS = [
    {
        "name": "page_size",
        "in": "query",
        "required": False,
        "schema": {"type": "integer", "minimum": 1, "maximum": MAX_PAGE_SIZE},
        "description": "Maximum number of items to return per page",
    },
    {
        "name": "page_token",
        "in": "query",
        "required": False,
        "schema": {"type": "string"},
        "description": "Token for fetching the next page of results",
    },
]


class ListPaginatedRule(OperationRule):
    id = "aip158/list-paginated"
    name = "List Endpoints Have Pagination"
    aip = "AIP-158"
    severity = Severity.WARNING
    description = "List endpoints should support pagination"
    methods = ("GET",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        if not is_collection_endpoint(path):
            return []
        path_item = get_paths(document).get(path)
        names = PAGE_SIZE_NAMES + PAGE_TOKEN_NAMES
        if has_any_parameter(document, operation, names, path_item=path_item):
            return []

        pointer = parameters_pointer(path, method)
        return [ctx.create_finding(
            operation_label(method, path),
            "List endpoint missing pagination parameters",
            suggestion="Add page_size and page_token query parameters",
            json_path=str(pointer),
            context={"suggested_params": [p["name"] for p in PAGINATION_PARAMETERS]},
            fix=Fix(
                type=FixType.ADD_PARAMETERS,
                json_path=str(pointer),
                replacement=PAGINATION_PARAMETERS,
                spec_changes=[
                    SpecChange(operation=ChangeOperation.ADD, path=pointer, value=p)
                    for p in PAGINATION_PARAMETERS
                ],
            ),
        )]


class MaxPageSizeRule(ParameterRule):
    id = "aip158/max-page-size"
    name = "Pagination Has Maximum"
    aip = "AIP-158"
    severity = Severity.SUGGESTION
    description = "Page size parameter should have a maximum value"
    locations = ("query",)

    def check_parameter(
        self, parameter: dict, method: str, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        name = parameter.get("name")
        if name not in PAGE_SIZE_NAMES or method != "GET":
            return []
        schema = parameter.get("schema")
        if not isinstance(schema, dict) or "maximum" in schema:
            return []

        fix = None
        location = locate_parameter(document, path, method, parameter)
        if location is not None:
            schema_pointer = location.child("schema")
            fix = Fix(
                type=FixType.SET_SCHEMA_CONSTRAINT,
                json_path=str(schema_pointer),
                target={"param_name": name, "constraint": "maximum"},
                replacement=MAX_PAGE_SIZE,
                spec_changes=[
                    SpecChange(operation=ChangeOperation.SET, path=schema_pointer.child("maximum"), value=MAX_PAGE_SIZE),
                ],
            )
        return [ctx.create_finding(
            operation_label(method, path),
            f"Parameter '{name}' has no maximum value",
            suggestion=f"Add maximum: {MAX_PAGE_SIZE} (or appropriate limit) to schema",
            json_path=str(location) if location is not None else None,
            fix=fix,
        )]


class ResponseNextTokenRule(OperationRule):
    id = "aip158/response-next-token"
    name = "Response Has Next Page Token"
    aip = "AIP-158"
    severity = Severity.WARNING
    description = "Paginated list responses should include next_page_token"
    methods = ("GET",)

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        if not is_collection_endpoint(path):
            return []
        path_item = get_paths(document).get(path)
        names = PAGE_SIZE_NAMES + ("page_token", "pageToken", "cursor")
        if not has_any_parameter(document, operation, names, path_item=path_item):
            return []

        located = locate_response_schema(document, operation, path, method, "200")
        if located is None:
            return []
        schema, schema_pointer = located
        properties = schema.get("properties")
        if isinstance(properties, dict) and any(f in properties for f in NEXT_TOKEN_FIELDS):
            return []

        fix = None
        if schema.get("type", "object") == "object":
            field = {"type": "string", "nullable": True}
            fix = Fix(
                type=FixType.ADD_SCHEMA_PROPERTY,
                json_path=str(schema_pointer),
                target={"property": "next_page_token"},
                replacement=field,
                spec_changes=[
                    SpecChange(
                        operation=ChangeOperation.ADD,
                        path=schema_pointer.child("properties"),
                        to="next_page_token",
                        value=field,
                    ),
                ],
            )
        return [ctx.create_finding(
            operation_label(method, path),
            "Paginated response missing next_page_token field",
            suggestion="Add next_page_token (string, nullable) to response schema",
            json_path=str(schema_pointer),
            context={"suggested_field": {"next_page_token": {"type": "string", "nullable": True}}},
            fix=fix,
        )]
