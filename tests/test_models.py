import pydantic
import pytest

from ocp_codegen.schema.base import (
    ArrayType,
    Endpoint,
    Meta,
    ObjectType,
    PrimitiveType,
    ProtocolKind,
    RefType,
    SchemaModel,
)


class TestFieldTypes:
    def test_primitive_defaults(self):
        field = PrimitiveType(name="string")
        assert field.kind == "primitive"
        assert field.optional is False
        assert field.default is None
        assert field.description == ""

    def test_discriminated_union_from_dict(self):
        ep = Endpoint(
            name="list",
            body={"kind": "array", "items": {"kind": "ref", "name": "User"}},
        )
        assert isinstance(ep.body, ArrayType)
        assert ep.body.items == RefType(name="User")

    def test_object_without_name_is_inline(self):
        obj = ObjectType(properties={"id": PrimitiveType(name="integer")})
        assert obj.name is None
        assert list(obj.properties) == ["id"]


class TestSchemaModel:
    def test_create_minimal_model(self):
        model = SchemaModel(
            protocol_kind="rest",
            protocol_version="1.0",
            meta=Meta(name="Api", base_url="https://x"),
        )
        assert model.protocol_kind is ProtocolKind.REST
        assert model.endpoint_groups == {}
        assert model.types == {}
        assert model.meta.auth is None

    def test_models_are_frozen(self):
        meta = Meta(name="Api", base_url="https://x")
        with pytest.raises(pydantic.ValidationError):
            meta.name = "Other"

    def test_endpoint_defaults(self):
        ep = Endpoint(name="ping")
        assert ep.method is None
        assert ep.path_params == {}
        assert ep.query == {}
        assert ep.body is None
        assert ep.response is None
