"""JSON-RPC emitter.

Each operation becomes a method that posts a JSON-RPC 2.0 call. Object
params are spread into keyword arguments; any other params shape is passed
through as a single argument.
"""

from ocp_codegen.generator.base import Emitter, Method, Param, render_http_base, signature
from ocp_codegen.generator.naming import docstring, literal, to_param, to_snake
from ocp_codegen.generator.types import TypeMapper, is_optional
from ocp_codegen.schema.base import Endpoint, ObjectType, ProtocolKind, SchemaModel

_BASE_METHODS = [
    "",
    "    def call(self, method: str, params: Any = None) -> Any:",
    "        self._next_id += 1",
    '        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": self._next_id, "method": method}',
    "        if params is not None:",
    '            payload["params"] = params',
    "        response = self.session.post(self.base_url, json=payload, timeout=self.timeout)",
    "        self._check(response)",
    "        data = response.json()",
    '        error = data.get("error")',
    "        if error:",
    '            raise ApiError(error.get("code", response.status_code), error.get("message", ""))',
    '        return data.get("result")',
]


class RpcEmitter(Emitter):
    kind = ProtocolKind.RPC

    def render_endpoint(self, endpoint: Endpoint, mapper: TypeMapper, context: str, refs: set[str]) -> list[Method]:
        name = to_snake(endpoint.name)
        returns = self.annotate(endpoint.response, mapper, f"{context}.result", refs)
        params: list[Param] = []
        keyword: list[Param] = []
        payload = None

        if endpoint.body is not None:
            # Registers named params types even when they are spread
            self.annotate(endpoint.body, mapper, f"{context}.params", refs)
            shape = mapper.resolve(endpoint.body, f"{context}.params")
            if isinstance(shape, ObjectType):
                for key, field in shape.properties.items():
                    param = self.field_param(key, field, mapper, f"{context}.params.{key}", refs)
                    (keyword if is_optional(field) else params).append(param)
                pairs = ", ".join(f"{literal(key)}: {to_param(key)}" for key in shape.properties)
                payload = f"{{{pairs}}}"
            else:
                whole = self.field_param("params", endpoint.body, mapper, f"{context}.params", refs)
                params.append(Param("params", whole.annotation, whole.default))
                payload = "params"

        lines = [signature(name, params, keyword, returns)]
        lines.extend(docstring(endpoint.description or f"Call {endpoint.method}.", "        "))
        if payload is None:
            lines.append(f"        return self._client.call({literal(endpoint.method)})")
        elif payload == "params":
            lines.append(f"        return self._client.call({literal(endpoint.method)}, params)")
        else:
            lines.append(f"        params = {payload}")
            lines.append(
                f"        return self._client.call({literal(endpoint.method)}, "
                "{key: value for key, value in params.items() if value is not None})"
            )
        return [(name, lines)]

    def render_base(self, model: SchemaModel) -> list[str]:
        lines = render_http_base(model, _BASE_METHODS)
        init = lines.index("        self.session = session or requests.Session()")
        lines.insert(init + 1, "        self._next_id = 0")
        return lines
