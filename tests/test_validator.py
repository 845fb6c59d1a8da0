from pathlib import Path

import pytest

from ocp_codegen.errors import ValidationError
from ocp_codegen.schema.base import PrimitiveType
from ocp_codegen.schema.loader import load_document
from ocp_codegen.schema.validator import build_model, validate, validate_document

FIXTURES = Path(__file__).parent / "fixtures"


def _doc(kind="rest", endpoints=None, **overrides):
    doc = {
        "$ocp": {"type": kind, "version": "1.0"},
        "meta": {"name": "Api", "base_url": "https://api.example.com"},
        "endpoints": endpoints if endpoints is not None else {
            "users": {"get": {"method": "GET", "path": "/users/{id}"}},
        },
    }
    doc.update(overrides)
    return doc


class TestMarkerChecks:
    def test_valid_document_has_no_violations(self):
        assert validate_document(_doc()) == []

    def test_missing_marker(self):
        doc = _doc()
        del doc["$ocp"]
        assert validate_document(doc) == ["Missing $ocp marker"]

    def test_invalid_protocol_kind(self):
        doc = _doc(kind="soap")
        assert validate_document(doc) == ["Invalid $ocp.type: soap"]

    def test_every_missing_field_reported_once_in_order(self):
        doc = {"$ocp": {}, "meta": {}}
        assert validate_document(doc) == [
            "Missing $ocp.type",
            "Missing $ocp.version",
            "Missing meta.name",
            "Missing meta.base_url",
        ]

    def test_root_must_be_object(self):
        assert validate_document(["not", "a", "schema"]) == ["Document root must be an object"]


class TestMetaChecks:
    def test_missing_meta_section(self):
        doc = _doc()
        del doc["meta"]
        assert validate_document(doc) == ["Missing meta section"]

    def test_meta_must_be_object(self):
        assert validate_document(_doc(meta="api")) == ["Invalid meta section: expected an object"]

    def test_empty_base_url(self):
        doc = _doc(meta={"name": "Api", "base_url": ""})
        assert validate_document(doc) == ["Missing meta.base_url"]


class TestRestChecks:
    def test_missing_endpoints_section(self):
        doc = _doc()
        del doc["endpoints"]
        assert validate_document(doc) == ["Missing endpoints section"]

    def test_invalid_method(self):
        doc = _doc(endpoints={"users": {"trace": {"method": "TRACE", "path": "/users"}}})
        assert validate_document(doc) == ["users.trace: Invalid method TRACE"]

    def test_method_without_path(self):
        doc = _doc(endpoints={"users": {"get": {"method": "GET"}}})
        assert validate_document(doc) == ["users.get: Missing path"]

    def test_missing_path_and_invalid_method_are_distinct(self):
        doc = _doc(endpoints={"users": {"trace": {"method": "TRACE"}}})
        assert validate_document(doc) == [
            "users.trace: Missing path",
            "users.trace: Invalid method TRACE",
        ]

    def test_annotations_are_skipped(self):
        doc = _doc(endpoints={
            "users": {
                "$comment": "internal only",
                "notes": {"description": "not an endpoint"},
                "get": {"method": "GET", "path": "/users/{id}"},
            },
        })
        assert validate_document(doc) == []
        model = build_model(doc)
        assert list(model.endpoint_groups["users"].endpoints) == ["get"]

    def test_group_must_be_object(self):
        doc = _doc(endpoints={"users": "everything"})
        assert validate_document(doc) == ["users: Invalid endpoint group"]

    def test_checks_run_in_fixed_order(self):
        doc = {
            "$ocp": {"type": "rest"},
            "meta": {"name": "Api"},
            "endpoints": {"users": {"get": {"method": "FETCH"}}},
        }
        assert validate_document(doc) == [
            "Missing $ocp.version",
            "Missing meta.base_url",
            "users.get: Missing path",
            "users.get: Invalid method FETCH",
        ]


class TestOtherProtocolChecks:
    def test_endpoints_optional_outside_rest(self):
        doc = _doc(kind="rpc")
        del doc["endpoints"]
        assert validate_document(doc) == []

    def test_rpc_method_must_be_a_name(self):
        doc = _doc(kind="rpc", endpoints={"accounts": {"get": {"method": 42}}})
        assert validate_document(doc) == ["accounts.get: Invalid method 42"]

    def test_graphql_operation(self):
        doc = _doc(kind="graphql", endpoints={"posts": {"watch": {"operation": "subscribe"}}})
        assert validate_document(doc) == ["posts.watch: Invalid operation subscribe"]

    def test_websocket_channel(self):
        doc = _doc(kind="websocket", endpoints={"rooms": {"join": {"channel": 5}}})
        assert validate_document(doc) == ["rooms.join: Invalid channel 5"]


class TestCoercion:
    def test_declaration_order_is_kept(self):
        doc = _doc(endpoints={
            "zebras": {"b": {"method": "GET", "path": "/b"}, "a": {"method": "GET", "path": "/a"}},
            "apples": {"c": {"method": "GET", "path": "/c"}},
        })
        model = build_model(doc)
        assert list(model.endpoint_groups) == ["zebras", "apples"]
        assert list(model.endpoint_groups["zebras"].endpoints) == ["b", "a"]

    def test_path_params_default_to_string(self):
        model = build_model(_doc())
        endpoint = model.endpoint_groups["users"].endpoints["get"]
        assert list(endpoint.path_params) == ["id"]
        assert endpoint.path_params["id"] == PrimitiveType(name="string")

    def test_path_param_types(self):
        doc = _doc(endpoints={"users": {"get": {"method": "GET", "path": "/users/{id}", "params": {"id": "integer"}}}})
        endpoint = build_model(doc).endpoint_groups["users"].endpoints["get"]
        assert endpoint.path_params["id"].name == "integer"

    def test_params_must_match_path_tokens(self):
        doc = _doc(endpoints={"users": {"get": {"method": "GET", "path": "/users", "params": {"id": "string"}}}})
        assert validate_document(doc) == ["users.get.params.id: Not a path parameter"]

    def test_path_without_method_is_get(self):
        doc = _doc(endpoints={"system": {"health": {"path": "/health"}}})
        endpoint = build_model(doc).endpoint_groups["system"].endpoints["health"]
        assert endpoint.method == "GET"

    def test_malformed_type_declaration(self):
        doc = _doc(endpoints={"users": {"get": {"method": "GET", "path": "/users", "response": 42}}})
        assert validate_document(doc) == ["users.get.response: Invalid type declaration"]

    def test_array_without_items(self):
        doc = _doc(endpoints={"users": {"get": {"method": "GET", "path": "/users", "response": {"type": "array"}}}})
        assert validate_document(doc) == ["users.get.response: Array type missing items"]

    def test_unknown_primitive_survives_validation(self):
        doc = _doc(endpoints={"users": {"get": {"method": "GET", "path": "/users", "response": "uuid"}}})
        endpoint = build_model(doc).endpoint_groups["users"].endpoints["get"]
        assert endpoint.response == PrimitiveType(name="uuid")

    def test_invalid_auth_type(self):
        doc = _doc(meta={"name": "Api", "base_url": "https://x", "auth": {"type": "oauth"}})
        violations = validate_document(doc)
        assert len(violations) == 1
        assert violations[0].startswith("meta.auth.type: ")

    def test_shared_types_must_be_objects(self):
        doc = _doc(types={"Id": "string"})
        assert validate_document(doc) == ["types.Id: Shared types must be objects"]

    def test_shared_types_take_their_key_as_name(self):
        doc = _doc(types={"User": {"type": "object", "properties": {"id": "string"}}})
        assert build_model(doc).types["User"].name == "User"

    def test_graphql_field_defaults_to_endpoint_name(self):
        doc = _doc(kind="graphql", endpoints={"posts": {"latest": {"operation": "query"}}})
        endpoint = build_model(doc).endpoint_groups["posts"].endpoints["latest"]
        assert endpoint.method == "query"
        assert endpoint.path == "latest"


class TestNames:
    def test_yaml_numeric_group_and_endpoint_names(self):
        document = load_document(FIXTURES / "numeric_group.yaml")
        assert validate_document(document) == ["404: Invalid name", "pages.200: Invalid name"]

    def test_yaml_numeric_type_name(self):
        document = load_document(FIXTURES / "numeric_type.yaml")
        assert validate_document(document) == ["types.7: Invalid name"]

    def test_numeric_property_name_is_a_violation(self):
        doc = _doc(types={"User": {"type": "object", "properties": {1: "string"}}})
        model, violations = validate(doc)
        assert model is None
        assert violations and violations[0].startswith("types.User")


class TestBuildModel:
    def test_model_or_violations_never_both(self):
        model, violations = validate(_doc())
        assert model is not None and violations == []

        model, violations = validate(_doc(kind="soap"))
        assert model is None and violations

    def test_raises_with_all_violations(self):
        with pytest.raises(ValidationError) as exc_info:
            build_model({"$ocp": {}, "meta": {}})
        assert len(exc_info.value.violations) == 4
