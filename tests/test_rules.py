from aip_reviewer.models import ChangeOperation, FixType, Severity
from aip_reviewer.reviewer import Reviewer
from aip_reviewer.rules.aip122 import ConsistentCasingRule, NestedOwnershipRule, NoVerbsRule, PluralResourcesRule
from aip_reviewer.rules.aip131 import GetNoBodyRule
from aip_reviewer.rules.aip132 import HasFilteringRule, HasOrderingRule
from aip_reviewer.rules.aip133 import PostReturnsCreatedRule
from aip_reviewer.rules.aip134 import PatchOverPutRule
from aip_reviewer.rules.aip135 import DeleteIdempotentRule
from aip_reviewer.rules.aip140 import FieldNamesRule
from aip_reviewer.rules.aip155 import IdempotencyKeyRule
from aip_reviewer.rules.aip158 import ListPaginatedRule, MaxPageSizeRule, ResponseNextTokenRule
from aip_reviewer.rules.aip193 import (
    ErrorResponsesDocumentedRule,
    ErrorSchemaDefinedRule,
    ErrorSchemaFieldsRule,
    StandardErrorCodesRule,
)
from aip_reviewer.rules.registry import RuleRegistry


def _findings(rule_class, document: dict):
    reviewer = Reviewer(registry=RuleRegistry([rule_class()]))
    return reviewer.review(document).findings


def _op(**extra) -> dict:
    operation = {"responses": {"200": {"description": "OK"}}}
    operation.update(extra)
    return operation


def _query(name: str, **schema) -> dict:
    return {"name": name, "in": "query", "schema": schema or {"type": "string"}}


class TestPluralResources:
    def test_plural_collections_pass(self):
        assert _findings(PluralResourcesRule, {"paths": {"/users": {}, "/orders": {}}}) == []

    def test_singular_resource_reported_once(self):
        findings = _findings(PluralResourcesRule, {"paths": {"/user": {}, "/user/{id}": {}}})
        assert len(findings) == 1
        assert "'user'" in findings[0].message
        assert findings[0].path == "/user"
        assert findings[0].severity is Severity.WARNING

    def test_fix_renames_every_path_with_the_resource(self):
        finding = _findings(PluralResourcesRule, {"paths": {"/user": {}, "/user/{id}": {}}})[0]
        changes = finding.fix.spec_changes
        assert finding.fix.type is FixType.RENAME_PATH_SEGMENT
        assert [(c.from_, c.to) for c in changes] == [("/user", "/users"), ("/user/{id}", "/users/{id}")]
        assert all(c.operation is ChangeOperation.RENAME_KEY and c.path == ("paths",) for c in changes)

    def test_version_segments_ignored(self):
        findings = _findings(PluralResourcesRule, {"paths": {"/v1/user": {}, "/v1/user/{id}": {}}})
        assert len(findings) == 1
        assert not any("v1" in f.message for f in findings)

    def test_singleton_exemption(self):
        doc = {"paths": {"/v1/database/backup": {}, "/v1/database/restore": {}}}
        assert _findings(PluralResourcesRule, doc) == []
        assert _findings(NoVerbsRule, doc) == []

    def test_custom_method_not_flagged(self):
        doc = {"paths": {"/models": {}, "/models/{id}": {}, "/models/{id}/train": {}}}
        assert _findings(PluralResourcesRule, doc) == []


class TestNoVerbs:
    def test_verb_prefix_flagged(self):
        findings = _findings(NoVerbsRule, {"paths": {"/getUsers": {}}})
        assert len(findings) == 1
        assert findings[0].severity is Severity.ERROR
        assert findings[0].category == "naming"
        assert "'users'" in findings[0].suggestion

    def test_bare_verb_under_collection_flagged(self):
        doc = {"paths": {"/users": {}, "/users/{id}": {}, "/users/delete": {}}}
        findings = _findings(NoVerbsRule, doc)
        assert [f.context["segment"] for f in findings] == ["delete"]

    def test_noun_verbs_pass(self):
        doc = {"paths": {"/search": {}, "/reports": {}, "/users/{id}/downloads": {}}}
        assert _findings(NoVerbsRule, doc) == []

    def test_custom_methods_pass(self):
        doc = {"paths": {"/users/{id}:cancel": {}, "/files/{id}/validate-hash": {}, "/models/{id}/train": {}}}
        assert _findings(NoVerbsRule, doc) == []


class TestConsistentCasing:
    def test_single_style_passes(self):
        doc = {"paths": {"/user-profiles": {}, "/order-items": {}, "/users": {}}}
        assert _findings(ConsistentCasingRule, doc) == []

    def test_minority_style_flagged_with_fix(self):
        doc = {"paths": {"/user-profiles": {}, "/order-items": {}, "/line_items/{id}": {}}}
        findings = _findings(ConsistentCasingRule, doc)
        assert len(findings) == 1
        finding = findings[0]
        assert finding.path == "/line_items/{id}"
        assert finding.context["dominant_style"] == "kebab-case"
        change = finding.fix.spec_changes[0]
        assert (change.from_, change.to) == ("/line_items/{id}", "/line-items/{id}")

    def test_one_finding_per_path(self):
        doc = {"paths": {"/a-b": {}, "/c-d": {}, "/e-f": {}, "/g_h/i_j": {}}}
        findings = _findings(ConsistentCasingRule, doc)
        assert len(findings) == 1
        assert findings[0].fix.spec_changes[0].to == "/g-h/i-j"


class TestNestedOwnership:
    def test_nested_generic_id_flagged(self):
        doc = {"paths": {"/publishers/{publisherId}/books/{id}": {}}}
        findings = _findings(NestedOwnershipRule, doc)
        assert len(findings) == 1
        assert findings[0].context["suggested_name"] == "bookId"
        assert findings[0].severity is Severity.SUGGESTION

    def test_single_pair_passes(self):
        assert _findings(NestedOwnershipRule, {"paths": {"/v1/books/{id}": {}}}) == []

    def test_snake_case_params_give_snake_case_name(self):
        doc = {"paths": {"/publishers/{publisher_id}/books/{id}": {}}}
        assert _findings(NestedOwnershipRule, doc)[0].context["suggested_name"] == "book_id"

    def test_fix_renames_path_and_parameter(self):
        doc = {"paths": {"/publishers/{publisherId}/books/{id}": {
            "get": {"parameters": [
                {"name": "publisherId", "in": "path"},
                {"name": "id", "in": "path"},
            ]},
        }}}
        changes = _findings(NestedOwnershipRule, doc)[0].fix.spec_changes
        assert changes[0].to == "/publishers/{publisherId}/books/{bookId}"
        assert changes[1].path == ("paths", "/publishers/{publisherId}/books/{bookId}", "get", "parameters", 1)
        assert changes[1].value == {"name": "bookId", "in": "path"}


class TestStandardMethods:
    def test_get_with_body(self):
        doc = {"paths": {"/users": {"get": _op(requestBody={"content": {}}), "post": _op(requestBody={"content": {}})}}}
        findings = _findings(GetNoBodyRule, doc)
        assert [f.path for f in findings] == ["GET /users"]
        assert findings[0].fix.spec_changes[0].path == ("paths", "/users", "get", "requestBody")

    def test_post_returning_200(self):
        doc = {"paths": {"/users": {"post": _op()}, "/users:import": {"post": _op()}}}
        findings = _findings(PostReturnsCreatedRule, doc)
        assert [f.path for f in findings] == ["POST /users"]
        change = findings[0].fix.spec_changes[0]
        assert (change.from_, change.to) == ("200", "201")

    def test_post_returning_201_passes(self):
        doc = {"paths": {"/users": {"post": {"responses": {"201": {"description": "Created"}}}}}}
        assert _findings(PostReturnsCreatedRule, doc) == []

    def test_put_without_patch(self):
        doc = {"paths": {"/users/{id}": {"put": _op(requestBody={"content": {}})}, "/settings": {"put": _op()}}}
        findings = _findings(PatchOverPutRule, doc)
        assert [f.path for f in findings] == ["PUT /users/{id}"]
        change = findings[0].fix.spec_changes[0]
        assert change.to == "patch"
        assert change.value["parameters"][0]["name"] == "update_mask"
        assert change.value["requestBody"] == {"content": {}}

    def test_delete_checks(self):
        doc = {"paths": {
            "/a/{id}": {"delete": {"requestBody": {"content": {}}, "responses": {"204": {}}}},
            "/b/{id}": {"delete": {"responses": {"201": {}}}},
            "/c/{id}": {"delete": {"responses": {"206": {}}}},
            "/d/{id}": {"delete": {"responses": {"204": {}, "404": {}}}},
        }}
        findings = _findings(DeleteIdempotentRule, doc)
        assert [f.path for f in findings] == ["DELETE /a/{id}", "DELETE /b/{id}", "DELETE /c/{id}"]
        assert findings[0].fix.type is FixType.REMOVE_REQUEST_BODY
        assert findings[1].fix is None


class TestFilteringAndOrdering:
    def test_collection_without_filters(self):
        doc = {"paths": {"/users": {"get": _op()}}}
        filtering = _findings(HasFilteringRule, doc)
        ordering = _findings(HasOrderingRule, doc)
        assert len(filtering) == 1 and len(ordering) == 1
        assert filtering[0].category == "filtering"
        assert ordering[0].category == "filtering"
        assert filtering[0].fix.spec_changes[0].value["name"] == "filter"
        assert ordering[0].fix.spec_changes[0].value["name"] == "order_by"

    def test_field_filter_counts(self):
        doc = {"paths": {"/users": {"get": _op(parameters=[_query("status"), _query("page_size")])}}}
        assert _findings(HasFilteringRule, doc) == []

    def test_pagination_params_are_not_filters(self):
        doc = {"paths": {"/users": {"get": _op(parameters=[_query("page_size"), _query("page_token")])}}}
        assert len(_findings(HasFilteringRule, doc)) == 1

    def test_sort_param_counts_as_ordering(self):
        doc = {"paths": {"/users": {"get": _op(parameters=[_query("sort")])}}}
        assert _findings(HasOrderingRule, doc) == []

    def test_item_endpoints_skipped(self):
        doc = {"paths": {"/users/{id}": {"get": _op()}}}
        assert _findings(HasFilteringRule, doc) == []
        assert _findings(HasOrderingRule, doc) == []


class TestFieldNames:
    def test_camel_case_field(self):
        doc = {"components": {"schemas": {"Book": {"type": "object", "properties": {
            "title": {}, "publishedAt": {}, "page_count": {}, "$schema": {},
        }}}}}
        findings = _findings(FieldNamesRule, doc)
        assert len(findings) == 1
        assert findings[0].context["suggested_name"] == "published_at"
        assert findings[0].json_path == "$.components.schemas.Book.properties.publishedAt"


class TestIdempotencyKey:
    def test_post_without_header(self):
        doc = {"paths": {"/orders": {"post": _op()}}}
        findings = _findings(IdempotencyKeyRule, doc)
        assert len(findings) == 1
        assert findings[0].category == "idempotency"
        assert findings[0].fix.spec_changes[0].value["name"] == "Idempotency-Key"

    def test_header_present_case_insensitive(self):
        header = {"name": "X-Idempotency-Key", "in": "header"}
        doc = {"paths": {"/orders": {"post": _op(parameters=[header])}}}
        assert _findings(IdempotencyKeyRule, doc) == []

    def test_search_and_custom_methods_skipped(self):
        doc = {"paths": {"/orders:search": {"post": _op()}, "/search/orders": {"post": _op()}}}
        assert _findings(IdempotencyKeyRule, doc) == []


class TestPagination:
    def test_list_without_pagination(self):
        doc = {"paths": {"/users": {"get": _op()}}}
        findings = _findings(ListPaginatedRule, doc)
        assert len(findings) == 1
        assert findings[0].severity is Severity.WARNING
        names = [c.value["name"] for c in findings[0].fix.spec_changes]
        assert names == ["page_size", "page_token"]

    def test_adding_page_size_clears_finding(self):
        doc = {"paths": {"/users": {"get": _op(parameters=[_query("page_size", type="integer")])}}}
        assert _findings(ListPaginatedRule, doc) == []

    def test_path_level_parameters_count(self):
        doc = {"paths": {"/users": {"parameters": [_query("limit")], "get": _op()}}}
        assert _findings(ListPaginatedRule, doc) == []

    def test_non_collections_skipped(self):
        doc = {"paths": {"/users/{id}": {"get": _op()}, "/health": {"get": _op()}}}
        assert _findings(ListPaginatedRule, doc) == []

    def test_max_page_size(self):
        doc = {"paths": {"/users": {"get": _op(parameters=[_query("page_token"), _query("page_size", type="integer")])}}}
        findings = _findings(MaxPageSizeRule, doc)
        assert len(findings) == 1
        change = findings[0].fix.spec_changes[0]
        assert change.path == ("paths", "/users", "get", "parameters", 1, "schema", "maximum")
        assert change.value == 100

    def test_max_page_size_present(self):
        doc = {"paths": {"/users": {"get": _op(parameters=[_query("limit", type="integer", maximum=50)])}}}
        assert _findings(MaxPageSizeRule, doc) == []

    def test_max_page_size_only_for_get(self):
        doc = {"paths": {"/users": {"post": _op(parameters=[_query("page_size", type="integer")])}}}
        assert _findings(MaxPageSizeRule, doc) == []

    def _paged_doc(self, schema: dict) -> dict:
        return {
            "paths": {"/users": {"get": {
                "parameters": [_query("page_size", type="integer", maximum=100)],
                "responses": {"200": {"content": {"application/json": {"schema": schema}}}},
            }}},
            "components": {"schemas": {"UserList": {"type": "object", "properties": {"users": {"type": "array"}}}}},
        }

    def test_response_missing_next_token(self):
        doc = self._paged_doc({"$ref": "#/components/schemas/UserList"})
        findings = _findings(ResponseNextTokenRule, doc)
        assert len(findings) == 1
        change = findings[0].fix.spec_changes[0]
        assert change.path[-1] == "properties"
        assert change.to == "next_page_token"

    def test_response_with_next_token(self):
        doc = self._paged_doc({"type": "object", "properties": {"nextPageToken": {"type": "string"}}})
        assert _findings(ResponseNextTokenRule, doc) == []

    def test_unpaginated_list_not_checked(self):
        doc = self._paged_doc({"type": "object", "properties": {}})
        doc["paths"]["/users"]["get"]["parameters"] = []
        assert _findings(ResponseNextTokenRule, doc) == []


class TestErrors:
    def test_no_error_schema(self):
        findings = _findings(ErrorSchemaDefinedRule, {"paths": {}})
        assert len(findings) == 1
        change = findings[0].fix.spec_changes[0]
        assert change.path == ("components", "schemas")
        assert change.to == "Error"

    def test_error_schema_present(self):
        doc = {"components": {"schemas": {"ApiError": {"type": "object"}}}}
        assert _findings(ErrorSchemaDefinedRule, doc) == []

    def test_error_schema_missing_fields(self):
        doc = {"components": {"schemas": {"Error": {"type": "object", "properties": {"message": {"type": "string"}}}}}}
        findings = _findings(ErrorSchemaFieldsRule, doc)
        assert len(findings) == 1
        assert findings[0].context["missing_fields"] == ["code"]
        assert findings[0].fix.spec_changes[0].path == ("components", "schemas", "Error", "properties")

    def test_wrapped_error_schema(self):
        doc = {"components": {"schemas": {"Error": {"type": "object", "properties": {
            "error": {"type": "object", "properties": {"code": {}, "message": {}}},
        }}}}}
        assert _findings(ErrorSchemaFieldsRule, doc) == []

    def test_responses_documented(self):
        doc = {
            "paths": {"/users": {"get": _op(), "post": {"responses": {"201": {}, "400": {}}}}},
            "components": {"schemas": {"ApiError": {"type": "object"}}},
        }
        findings = _findings(ErrorResponsesDocumentedRule, doc)
        assert [f.path for f in findings] == ["GET /users"]
        value = findings[0].fix.spec_changes[0].value
        assert value["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/ApiError"}

    def test_default_response_counts(self):
        doc = {"paths": {"/users": {"get": {"responses": {"200": {}, "default": {}}}}}}
        assert _findings(ErrorResponsesDocumentedRule, doc) == []

    def test_standard_codes(self):
        doc = {"paths": {"/users": {"get": {"responses": {"200": {}, "404": {}, "418": {}, "4XX": {}, "default": {}}}}}}
        findings = _findings(StandardErrorCodesRule, doc)
        assert [f.context["code"] for f in findings] == ["418"]
