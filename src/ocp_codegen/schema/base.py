"""Typed model of a validated OCP schema document.

The validator is the only producer of these objects. Emitters read them and
never mutate them; every model is frozen.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ProtocolKind(str, Enum):
    REST = "rest"
    RPC = "rpc"
    GRAPHQL = "graphql"
    WEBSOCKET = "websocket"


HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
GRAPHQL_OPERATIONS = ("query", "mutation", "subscription")
PRIMITIVE_TAGS = ("string", "number", "integer", "boolean")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class _FieldBase(_Frozen):
    optional: bool = False
    default: Any = None
    description: str = ""


class PrimitiveType(_FieldBase):
    kind: Literal["primitive"] = "primitive"
    name: str  # string / number / integer / boolean


class ArrayType(_FieldBase):
    kind: Literal["array"] = "array"
    items: "FieldType"


class ObjectType(_FieldBase):
    """An object shape. A name makes it a reusable, registered type."""

    kind: Literal["object"] = "object"
    name: str | None = None
    properties: dict[str, "FieldType"] = {}


class RefType(_FieldBase):
    kind: Literal["ref"] = "ref"
    name: str


FieldType = Annotated[
    Union[PrimitiveType, ArrayType, ObjectType, RefType],
    Field(discriminator="kind"),
]

ArrayType.model_rebuild()
ObjectType.model_rebuild()


class Auth(_Frozen):
    type: Literal["bearer", "api_key", "basic"]
    header: str = "X-Api-Key"


class Meta(_Frozen):
    name: str
    base_url: str
    description: str = ""
    version: str = ""
    auth: Auth | None = None


class Endpoint(_Frozen):
    """A single operation.

    method is the HTTP verb for rest, the call identifier for rpc and the
    operation type for graphql. path is the URL template for rest, the root
    field for graphql and the channel for websocket.
    """

    name: str
    method: str | None = None
    path: str | None = None
    description: str = ""
    path_params: dict[str, FieldType] = {}
    query: dict[str, FieldType] = {}
    body: FieldType | None = None
    response: FieldType | None = None


class EndpointGroup(_Frozen):
    name: str
    endpoints: dict[str, Endpoint]


class SchemaModel(_Frozen):
    protocol_kind: ProtocolKind
    protocol_version: str
    meta: Meta
    endpoint_groups: dict[str, EndpointGroup] = {}
    types: dict[str, ObjectType] = {}
