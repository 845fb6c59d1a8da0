"""REST emitter: one namespace class per group, one method per endpoint."""

from ocp_codegen.generator.base import Emitter, Method, Param, render_http_base, signature
from ocp_codegen.generator.naming import docstring, literal, path_args, path_template, to_param, to_snake
from ocp_codegen.generator.types import TypeMapper
from ocp_codegen.schema.base import Endpoint, ProtocolKind, SchemaModel

_BASE_METHODS = [
    "",
    "    def build_path(self, template: str, *args: Any) -> str:",
    '        return template.format(*(quote(str(arg), safe="") for arg in args))',
    "",
    "    def request(",
    "        self,",
    "        method: str,",
    "        path: str,",
    "        params: dict[str, Any] | None = None,",
    "        json: Any = None,",
    "    ) -> Any:",
    "        if params is not None:",
    "            params = {key: value for key, value in params.items() if value is not None}",
    "        response = self.session.request(",
    "            method,",
    '            f"{self.base_url}{path}",',
    "            params=params,",
    "            json=json,",
    "            timeout=self.timeout,",
    "        )",
    "        self._check(response)",
    "        if not response.content:",
    "            return None",
    "        return response.json()",
]


class RestEmitter(Emitter):
    kind = ProtocolKind.REST

    def render_endpoint(self, endpoint: Endpoint, mapper: TypeMapper, context: str, refs: set[str]) -> list[Method]:
        name = to_snake(endpoint.name)

        params = [
            Param(to_param(token), self.annotate(field, mapper, f"{context}.params.{token}", refs))
            for token, field in endpoint.path_params.items()
        ]
        if endpoint.body is not None:
            body = self.field_param("body", endpoint.body, mapper, f"{context}.body", refs)
            params.append(Param("body", body.annotation, body.default))
        query = [
            self.field_param(key, field, mapper, f"{context}.query.{key}", refs)
            for key, field in endpoint.query.items()
        ]
        returns = self.annotate(endpoint.response, mapper, f"{context}.response", refs)

        lines = [signature(name, params, query, returns)]
        lines.extend(docstring(endpoint.description or f"{endpoint.method} {endpoint.path}", "        "))
        lines.append("        return self._client.request(")
        lines.append(f"            {literal(endpoint.method)},")
        tokens = path_args(endpoint.path)
        if tokens:
            args = ", ".join(to_param(t) for t in tokens)
            lines.append(f"            self._client.build_path({literal(path_template(endpoint.path))}, {args}),")
        else:
            lines.append(f"            {literal(endpoint.path)},")
        if query:
            pairs = ", ".join(f"{literal(key)}: {to_param(key)}" for key in endpoint.query)
            lines.append(f"            params={{{pairs}}},")
        if endpoint.body is not None:
            lines.append("            json=body,")
        lines.append("        )")
        return [(name, lines)]

    def render_base(self, model: SchemaModel) -> list[str]:
        return render_http_base(model, _BASE_METHODS, imports=("from urllib.parse import quote",))
