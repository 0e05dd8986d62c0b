"""AIP-193: errors.

https://google.aip.dev/193
"""

from aip_reviewer.models import ChangeOperation, Fix, Finding, FixType, Severity, SpecChange
from aip_reviewer.rules.base import OperationRule, RuleContext, SchemaRule, SpecRule
from aip_reviewer.rules.paths import operation_label
from aip_reviewer.rules.spec_utils import response_codes
from aip_reviewer.spec.model import get_schemas
from aip_reviewer.spec.pointer import SCHEMAS, responses_pointer, schema_pointer

STANDARD_CLIENT_ERRORS = ("400", "401", "403", "404", "405", "409", "412", "422", "429")
STANDARD_SERVER_ERRORS = ("500", "501", "502", "503", "504")
STANDARD_ERROR_CODES = STANDARD_CLIENT_ERRORS + STANDARD_SERVER_ERRORS

REQUIRED_ERROR_FIELDS = {
    "code": {"type": "string", "description": "Error code"},
    "message": {"type": "string", "description": "Human-readable error message"},
}

ERROR_SCHEMA = {
    "type": "object",
    "required": ["error"],
    "properties": {
        "error": {
            "type": "object",
            "required": ["code", "message"],
            "properties": {
                "code": {"type": "string", "description": "Error code"},
                "message": {"type": "string", "description": "Human-readable error message"},
                "details": {"type": "array", "description": "Additional error details"},
                "request_id": {"type": "string", "description": "Request identifier for debugging"},
            },
        },
    },
}


def error_schema_names(document: dict) -> list[str]:
    return [name for name in get_schemas(document) if "error" in name.lower()]


class ErrorSchemaDefinedRule(SpecRule):
    id = "aip193/schema-defined"
    name = "Error Schema Defined"
    aip = "AIP-193"
    severity = Severity.WARNING
    description = "API should define a consistent error response schema"

    def check_spec(self, document: dict, ctx: RuleContext) -> list[Finding]:
        if error_schema_names(document):
            return []
        return [ctx.create_finding(
            "components/schemas",
            "No error schema defined",
            suggestion="Define an Error schema with code, message, and details fields",
            json_path=str(SCHEMAS),
            fix=Fix(
                type=FixType.ADD_SCHEMA,
                json_path=str(SCHEMAS),
                target={"schema_name": "Error"},
                replacement=ERROR_SCHEMA,
                spec_changes=[
                    SpecChange(operation=ChangeOperation.ADD, path=SCHEMAS, to="Error", value=ERROR_SCHEMA),
                ],
            ),
        )]


class ErrorSchemaFieldsRule(SchemaRule):
    id = "aip193/error-schema-fields"
    name = "Error Schema Has Code and Message"
    aip = "AIP-193"
    severity = Severity.SUGGESTION
    description = "Error schemas should carry at least a code and a message"

    def check_schema(self, name: str, schema: dict, document: dict, ctx: RuleContext) -> list[Finding]:
        if "error" not in name.lower():
            return []
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return []

        # Either {code, message} at the top or wrapped as {error: {code, message}}.
        pointer = schema_pointer(name).child("properties")
        wrapped = properties.get("error")
        if isinstance(wrapped, dict) and isinstance(wrapped.get("properties"), dict):
            properties = wrapped["properties"]
            pointer = pointer.child("error", "properties")

        missing = [f for f in REQUIRED_ERROR_FIELDS if f not in properties]
        if not missing:
            return []
        return [ctx.create_finding(
            f"components.schemas.{name}",
            f"Error schema '{name}' is missing {', '.join(missing)}",
            suggestion="Error payloads should expose a machine-readable code and a human-readable message",
            json_path=str(pointer),
            context={"missing_fields": missing},
            fix=Fix(
                type=FixType.ADD_SCHEMA_PROPERTY,
                json_path=str(pointer),
                target={"schema_name": name, "properties": missing},
                replacement={f: REQUIRED_ERROR_FIELDS[f] for f in missing},
                spec_changes=[
                    SpecChange(operation=ChangeOperation.ADD, path=pointer, to=f, value=REQUIRED_ERROR_FIELDS[f])
                    for f in missing
                ],
            ),
        )]


class ErrorResponsesDocumentedRule(OperationRule):
    id = "aip193/responses-documented"
    name = "Error Responses Documented"
    aip = "AIP-193"
    severity = Severity.SUGGESTION
    description = "Operations should document error responses"

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        codes = response_codes(operation)
        if "default" in codes or any(c[:1] in ("4", "5") for c in codes):
            return []

        existing = error_schema_names(document)
        schema_name = existing[0] if existing else "Error"
        response = {
            "description": "Error response",
            "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{schema_name}"}}},
        }
        pointer = responses_pointer(path, method)
        return [ctx.create_finding(
            operation_label(method, path),
            "No error responses documented",
            suggestion="Add 4xx/5xx responses or a default error response",
            json_path=str(pointer),
            fix=Fix(
                type=FixType.ADD_RESPONSE,
                json_path=str(pointer),
                target={"status_code": "default"},
                replacement=response,
                spec_changes=[
                    SpecChange(operation=ChangeOperation.ADD, path=pointer, to="default", value=response),
                ],
            ),
        )]


class StandardErrorCodesRule(OperationRule):
    id = "aip193/standard-codes"
    name = "Standard Error Codes"
    aip = "AIP-193"
    severity = Severity.SUGGESTION
    description = "Use standard HTTP error status codes"

    def check_operation(
        self, method: str, operation: dict, path: str, document: dict, ctx: RuleContext
    ) -> list[Finding]:
        findings = []
        for code in response_codes(operation):
            if code == "default" or code[:1] in ("1", "2", "3") or code in STANDARD_ERROR_CODES:
                continue
            # OpenAPI ranges such as 4XX are fine.
            if code.upper().endswith("XX"):
                continue
            findings.append(ctx.create_finding(
                operation_label(method, path),
                f"Non-standard error code {code}",
                suggestion="Use standard codes: 400, 401, 403, 404, 409, 422, 429 (client) or 500, 503 (server)",
                json_path=str(responses_pointer(path, method).child(code)),
                context={"code": code},
            ))
        return findings
