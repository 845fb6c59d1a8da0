"""GraphQL emitter.

Each declared operation becomes a typed wrapper around a pre-rendered
operation document, for example:

  query GetUser($id: String!) { user(id: $id) { id name } }
"""

import re

from ocp_codegen.errors import GenerationError
from ocp_codegen.generator.base import Emitter, Method, Param, render_http_base, signature
from ocp_codegen.generator.naming import docstring, literal, to_param, to_pascal, to_snake
from ocp_codegen.generator.types import TypeMapper, is_optional
from ocp_codegen.schema.base import Endpoint, ProtocolKind, SchemaModel

_GRAPHQL_NAME = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")

_BASE_METHODS = [
    "",
    "    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:",
    "        response = self.session.post(",
    "            self.base_url,",
    '            json={"query": query, "variables": variables or {}},',
    "            timeout=self.timeout,",
    "        )",
    "        self._check(response)",
    "        payload = response.json()",
    '        if payload.get("errors"):',
    '            messages = "; ".join(error.get("message", "") for error in payload["errors"])',
    "            raise ApiError(response.status_code, messages)",
    '        return payload.get("data") or {}',
]


class GraphQLEmitter(Emitter):
    kind = ProtocolKind.GRAPHQL

    def render_endpoint(self, endpoint: Endpoint, mapper: TypeMapper, context: str, refs: set[str]) -> list[Method]:
        name = to_snake(endpoint.name)
        field_name = endpoint.path or endpoint.name
        for graphql_name in (field_name, *endpoint.query):
            if not _GRAPHQL_NAME.match(graphql_name):
                raise GenerationError(f"{context}: '{graphql_name}' is not a valid GraphQL name")

        returns = self.annotate(endpoint.response, mapper, f"{context}.response", refs)
        params: list[Param] = []
        keyword: list[Param] = []
        definitions = []
        for key, field in endpoint.query.items():
            param = self.field_param(key, field, mapper, f"{context}.variables.{key}", refs)
            (keyword if is_optional(field) else params).append(param)
            definitions.append(f"${key}: {mapper.map_graphql_type(field, f'{context}.variables.{key}')}")

        document = f"{endpoint.method} {to_pascal(endpoint.name)}"
        if definitions:
            document += f"({', '.join(definitions)})"
        document += " { " + field_name
        if endpoint.query:
            document += f"({', '.join(f'{key}: ${key}' for key in endpoint.query)})"
        if endpoint.response is not None:
            selection = mapper.selection_set(endpoint.response, f"{context}.response")
            if selection:
                document += f" {selection}"
        document += " }"

        variables = ", ".join(f"{literal(key)}: {to_param(key)}" for key in endpoint.query)
        lines = [signature(name, params, keyword, returns)]
        lines.extend(docstring(endpoint.description or f"Run the {field_name} {endpoint.method}.", "        "))
        lines.append("        data = self._client.execute(")
        lines.append(f"            {literal(document)},")
        lines.append(f"            {{{variables}}},")
        lines.append("        )")
        lines.append(f"        return data.get({literal(field_name)})")
        return [(name, lines)]

    def render_base(self, model: SchemaModel) -> list[str]:
        return render_http_base(model, _BASE_METHODS)
