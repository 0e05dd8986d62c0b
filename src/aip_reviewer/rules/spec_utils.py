"""Lookups rules share: parameters, local references, response schemas."""

from typing import Any

from aip_reviewer.errors import PointerError
from aip_reviewer.spec.model import NodeKind, get_paths, node_kind, parameter_key
from aip_reviewer.spec.pointer import (
    Pointer,
    follow_ref,
    mapping_key,
    parameters_pointer,
    response_pointer,
)

PREFERRED_MEDIA_TYPES = ("application/json", "*/*")


def resolve_ref(document: dict, node: Any) -> Any:
    """Follow a local ``#/...`` reference; other nodes are returned as-is.

    Remote or broken references resolve to None.
    """
    if node_kind(node) is not NodeKind.REF:
        return node
    try:
        return follow_ref(document, node)
    except PointerError:
        return None


def parameters_of(document: dict, container: Any) -> list[dict]:
    if not isinstance(container, dict):
        return []
    resolved = (resolve_ref(document, p) for p in container.get("parameters") or [])
    return [p for p in resolved if isinstance(p, dict)]


def has_parameter(
    document: dict, operation: dict, name: str, location: str | None = None, path_item: Any = None
) -> bool:
    """Whether the operation (or its path item) declares parameter ``name``."""
    candidates = parameters_of(document, operation) + parameters_of(document, path_item)
    for parameter in candidates:
        if parameter.get("name") != name:
            continue
        if location is None or parameter.get("in") == location:
            return True
    return False


def has_any_parameter(
    document: dict, operation: dict, names: tuple[str, ...], location: str | None = None, path_item: Any = None
) -> bool:
    return any(has_parameter(document, operation, n, location, path_item) for n in names)


def locate_parameter(document: dict, path: str, method: str, parameter: dict) -> Pointer | None:
    """Pointer to ``parameter`` in the operation's list, else the path-level list."""
    key = parameter_key(parameter)
    path_item = get_paths(document).get(path)
    if key is None or not isinstance(path_item, dict):
        return None
    operation = path_item.get(method.lower())
    for container, pointer in ((operation, parameters_pointer(path, method)), (path_item, parameters_pointer(path))):
        if not isinstance(container, dict):
            continue
        for index, candidate in enumerate(container.get("parameters") or []):
            if parameter_key(resolve_ref(document, candidate)) == key:
                return pointer.child(index)
    return None


def response_codes(operation: dict) -> list[str]:
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return []
    return [str(code) for code in responses]


def _pick_media_type(content: dict) -> str | None:
    for media_type in PREFERRED_MEDIA_TYPES:
        if media_type in content:
            return media_type
    return next(iter(content), None)


def _response_schema(document: dict, operation: dict, status: str) -> tuple[dict, str] | None:
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return None
    key = mapping_key(responses, status)
    response = resolve_ref(document, responses.get(key)) if key is not None else None
    if not isinstance(response, dict):
        return None
    content = response.get("content")
    if not isinstance(content, dict) or not content:
        return None
    media_type = _pick_media_type(content)
    media = content.get(media_type)
    if not isinstance(media, dict):
        return None
    schema = resolve_ref(document, media.get("schema"))
    if not isinstance(schema, dict):
        return None
    return schema, media_type


def locate_response_schema(
    document: dict, operation: dict, path: str, method: str, status: str = "200"
) -> tuple[dict, Pointer] | None:
    """The response body schema for ``status`` and where it lives.

    JSON media types win over ``*/*`` which wins over whatever comes first.

    The pointer runs through the operation, so it stays valid whether or not
    the response or schema is a ``$ref`` in the stored document.
    """
    found = _response_schema(document, operation, status)
    if found is None:
        return None
    schema, media_type = found
    return schema, response_pointer(path, method, status).child("content", media_type, "schema")
