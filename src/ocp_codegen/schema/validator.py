"""Structural validation of OCP documents.

Checks run in a fixed order and all of them run, so one pass reports every
defect:
  - $ocp marker: type, version, known protocol kind
  - meta section: name, base_url
  - protocol-specific structure of the endpoints section

Only a document with no violations is coerced into a SchemaModel. Coercion
failures (malformed type declarations, wrong value types) are reported as
violations in the same "<location>: <problem>" format.
"""

import logging
from typing import Any

import pydantic

from ocp_codegen.errors import ValidationError
from ocp_codegen.generator.naming import extract_path_params
from ocp_codegen.schema.base import (
    GRAPHQL_OPERATIONS,
    HTTP_METHODS,
    ArrayType,
    Endpoint,
    EndpointGroup,
    FieldType,
    Meta,
    ObjectType,
    PrimitiveType,
    ProtocolKind,
    RefType,
    SchemaModel,
)

logger = logging.getLogger(__name__)

PROTOCOL_KINDS = tuple(k.value for k in ProtocolKind)

# Keys that make an entry of an endpoint group an endpoint, per protocol kind
_MARKERS: dict[str, tuple[str, ...]] = {
    "rest": ("method", "path"),
    "rpc": ("method",),
    "graphql": ("operation",),
    "websocket": ("channel",),
}


def validate(document: Any) -> tuple[SchemaModel | None, list[str]]:
    """Validate a parsed document.

    Returns (model, []) for a valid document and (None, violations) otherwise.
    """
    if not isinstance(document, dict):
        return None, ["Document root must be an object"]

    violations: list[str] = []
    violations.extend(_check_marker(document))
    violations.extend(_check_meta(document))
    violations.extend(_check_endpoints(document))
    violations.extend(_check_type_names(document))
    if violations:
        return None, violations

    violations = []
    model = _coerce(document, violations)
    if violations:
        return None, violations
    return model, []


def validate_document(document: Any) -> list[str]:
    """Return the violation list for a document (empty when valid)."""
    return validate(document)[1]


def build_model(document: Any) -> SchemaModel:
    """Return the SchemaModel for a document or raise ValidationError."""
    model, violations = validate(document)
    if model is None:
        logger.debug("Schema rejected with %d violations", len(violations))
        raise ValidationError(violations)
    return model


# -- structural checks -----------------------------------------------------


def _check_marker(document: dict) -> list[str]:
    marker = document.get("$ocp")
    if marker is None:
        return ["Missing $ocp marker"]
    if not isinstance(marker, dict):
        return ["Invalid $ocp marker: expected an object"]

    errors = []
    kind = marker.get("type")
    if not kind:
        errors.append("Missing $ocp.type")
    if not marker.get("version"):
        errors.append("Missing $ocp.version")
    if kind and kind not in PROTOCOL_KINDS:
        errors.append(f"Invalid $ocp.type: {kind}")
    return errors


def _check_meta(document: dict) -> list[str]:
    meta = document.get("meta")
    if meta is None:
        return ["Missing meta section"]
    if not isinstance(meta, dict):
        return ["Invalid meta section: expected an object"]

    errors = []
    if not meta.get("name"):
        errors.append("Missing meta.name")
    if not meta.get("base_url"):
        errors.append("Missing meta.base_url")
    return errors


def _protocol_kind(document: dict) -> str | None:
    marker = document.get("$ocp")
    if isinstance(marker, dict) and marker.get("type") in PROTOCOL_KINDS:
        return marker["type"]
    return None


def _check_endpoints(document: dict) -> list[str]:
    kind = _protocol_kind(document)
    if kind is None:
        return []

    groups = document.get("endpoints")
    if groups is None:
        return ["Missing endpoints section"] if kind == "rest" else []
    if not isinstance(groups, dict):
        return ["Invalid endpoints section: expected an object"]

    errors = []
    for group_name, group in groups.items():
        if not isinstance(group_name, str):
            errors.append(f"{group_name}: Invalid name")
            continue
        if not isinstance(group, dict):
            errors.append(f"{group_name}: Invalid endpoint group")
            continue
        for endpoint_name, entry in group.items():
            if not isinstance(endpoint_name, str):
                errors.append(f"{group_name}.{endpoint_name}: Invalid name")
            elif isinstance(entry, dict):
                errors.extend(_check_entry(kind, f"{group_name}.{endpoint_name}", entry))
    return errors


def _check_type_names(document: dict) -> list[str]:
    types = document.get("types")
    if not isinstance(types, dict):
        return []
    return [f"types.{name}: Invalid name" for name in types if not isinstance(name, str)]


def _check_entry(kind: str, location: str, entry: dict) -> list[str]:
    errors = []
    if kind == "rest":
        method = entry.get("method")
        if method:
            if not entry.get("path"):
                errors.append(f"{location}: Missing path")
            if method not in HTTP_METHODS:
                errors.append(f"{location}: Invalid method {method}")
        path = entry.get("path")
        if path and not isinstance(path, str):
            errors.append(f"{location}: Invalid path {path}")
    elif kind == "rpc":
        if "method" in entry and not _is_name(entry["method"]):
            errors.append(f"{location}: Invalid method {entry['method']}")
    elif kind == "graphql":
        if "operation" in entry and entry["operation"] not in GRAPHQL_OPERATIONS:
            errors.append(f"{location}: Invalid operation {entry['operation']}")
    elif kind == "websocket":
        if "channel" in entry and not _is_name(entry["channel"]):
            errors.append(f"{location}: Invalid channel {entry['channel']}")
    return errors


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


# -- coercion into the typed model -----------------------------------------


def _pydantic_violations(location: str, exc: pydantic.ValidationError) -> list[str]:
    result = []
    for err in exc.errors():
        parts = [location, *(str(p) for p in err["loc"])]
        result.append(f"{'.'.join(p for p in parts if p)}: {err['msg']}")
    return result


def _coerce(document: dict, violations: list[str]) -> SchemaModel | None:
    marker = document["$ocp"]
    kind = marker["type"]

    try:
        meta = Meta.model_validate(document["meta"])
    except pydantic.ValidationError as e:
        violations.extend(_pydantic_violations("meta", e))
        meta = None

    types = _coerce_types(document.get("types") or {}, violations)

    groups: dict[str, EndpointGroup] = {}
    for group_name, group in (document.get("endpoints") or {}).items():
        endpoints: dict[str, Endpoint] = {}
        for endpoint_name, entry in group.items():
            if not _is_endpoint(kind, entry):
                logger.debug("Skipping annotation %s.%s", group_name, endpoint_name)
                continue
            location = f"{group_name}.{endpoint_name}"
            endpoint = _coerce_endpoint(kind, endpoint_name, location, entry, violations)
            if endpoint is not None:
                endpoints[endpoint_name] = endpoint
        groups[group_name] = EndpointGroup(name=group_name, endpoints=endpoints)

    if violations or meta is None:
        return None
    try:
        return SchemaModel(
            protocol_kind=ProtocolKind(kind),
            protocol_version=str(marker["version"]),
            meta=meta,
            endpoint_groups=groups,
            types=types,
        )
    except pydantic.ValidationError as e:
        violations.extend(_pydantic_violations("", e))
        return None


def _is_endpoint(kind: str, entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    return any(entry.get(key) for key in _MARKERS[kind])


def _coerce_types(raw: Any, violations: list[str]) -> dict[str, ObjectType]:
    if not isinstance(raw, dict):
        violations.append("types: Shared types must be a mapping")
        return {}

    types: dict[str, ObjectType] = {}
    for name, declaration in raw.items():
        location = f"types.{name}"
        field = parse_field_type(declaration, location, violations)
        if field is None:
            continue
        if not isinstance(field, ObjectType):
            violations.append(f"{location}: Shared types must be objects")
            continue
        types[name] = field.model_copy(update={"name": name})
    return types


def _coerce_endpoint(
    kind: str, name: str, location: str, entry: dict, violations: list[str],
) -> Endpoint | None:
    before = len(violations)
    fields: dict[str, Any] = {"name": name, "description": _text(entry.get("description"))}

    if kind == "rest":
        path = entry["path"]
        fields["method"] = entry.get("method") or "GET"
        fields["path"] = path
        fields["path_params"] = _coerce_path_params(path, entry.get("params"), location, violations)
        fields["query"] = _coerce_mapping(entry.get("query"), f"{location}.query", violations)
        fields["body"] = _optional_field(entry, "body", location, violations)
        fields["response"] = _optional_field(entry, "response", location, violations)
    elif kind == "rpc":
        fields["method"] = entry["method"]
        fields["body"] = _coerce_params(entry.get("params"), f"{location}.params", violations)
        fields["response"] = _optional_field(entry, "result", location, violations)
    elif kind == "graphql":
        fields["method"] = entry["operation"]
        fields["path"] = entry.get("field") or name
        fields["query"] = _coerce_mapping(entry.get("variables"), f"{location}.variables", violations)
        fields["response"] = _optional_field(entry, "response", location, violations)
    else:
        fields["path"] = entry["channel"]
        fields["body"] = _optional_field(entry, "send", location, violations)
        fields["response"] = _optional_field(entry, "receive", location, violations)

    if len(violations) > before:
        return None
    try:
        return Endpoint(**fields)
    except pydantic.ValidationError as e:
        violations.extend(_pydantic_violations(location, e))
        return None


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _optional_field(entry: dict, key: str, location: str, violations: list[str]) -> FieldType | None:
    if entry.get(key) is None:
        return None
    return parse_field_type(entry[key], f"{location}.{key}", violations)


def _coerce_path_params(
    path: str, raw: Any, location: str, violations: list[str],
) -> dict[str, FieldType]:
    declared = _coerce_mapping(raw, f"{location}.params", violations)
    tokens = extract_path_params(path)
    for name in declared:
        if name not in tokens:
            violations.append(f"{location}.params.{name}: Not a path parameter")
    return {token: declared.get(token, PrimitiveType(name="string")) for token in tokens}


def _coerce_mapping(raw: Any, location: str, violations: list[str]) -> dict[str, FieldType]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        violations.append(f"{location}: Expected a mapping of names to types")
        return {}
    result: dict[str, FieldType] = {}
    for name, declaration in raw.items():
        field = parse_field_type(declaration, f"{location}.{name}", violations)
        if field is not None:
            result[name] = field
    return result


def _coerce_params(raw: Any, location: str, violations: list[str]) -> FieldType | None:
    """RPC params: either a FieldType or a bare mapping of named fields."""
    if raw is None:
        return None
    if isinstance(raw, dict) and "type" not in raw and "$ref" not in raw:
        properties = _coerce_mapping(raw, location, violations)
        return ObjectType(properties=properties)
    return parse_field_type(raw, location, violations)


def parse_field_type(raw: Any, location: str, violations: list[str]) -> FieldType | None:
    """Turn a document type declaration into a FieldType.

    Appends to violations and returns None when the declaration is malformed.
    """
    if isinstance(raw, str):
        return PrimitiveType(name=raw)
    if not isinstance(raw, dict):
        violations.append(f"{location}: Invalid type declaration")
        return None

    common = {
        "optional": raw.get("optional", False),
        "default": raw.get("default"),
        "description": _text(raw.get("description")),
    }
    type_tag = raw.get("type")

    try:
        if "$ref" in raw:
            return RefType(name=raw["$ref"], **common)
        if type_tag == "array":
            if "items" not in raw:
                violations.append(f"{location}: Array type missing items")
                return None
            items = parse_field_type(raw["items"], f"{location}.items", violations)
            return None if items is None else ArrayType(items=items, **common)
        if type_tag == "object" or "properties" in raw:
            properties = _coerce_mapping(raw.get("properties", {}), f"{location}.properties", violations)
            return ObjectType(name=raw.get("name") or None, properties=properties, **common)
        if isinstance(type_tag, str):
            return PrimitiveType(name=type_tag, **common)
    except pydantic.ValidationError as e:
        violations.extend(_pydantic_violations(location, e))
        return None

    violations.append(f"{location}: Invalid type declaration")
    return None
