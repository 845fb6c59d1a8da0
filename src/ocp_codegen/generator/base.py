"""Shared emitter machinery.

Every protocol emitter produces the same package layout:

  <pkg>/<group>_api.py   one namespace class per endpoint group, in schema order
  <pkg>/types.py         TypedDicts for named objects
  <pkg>/base.py          protocol base client
  <pkg>/__init__.py      facade client exposing one attribute per group
  <pkg>/requirements.txt

Subclasses only decide how one endpoint becomes methods and how the base
client talks to the server.
"""

import logging
from dataclasses import dataclass

from ocp_codegen.config import GeneratorOptions
from ocp_codegen.errors import GenerationError
from ocp_codegen.generator.naming import docstring, literal, package_name, to_param, to_pascal, to_snake
from ocp_codegen.generator.types import TypeMapper, is_optional
from ocp_codegen.schema.base import Auth, Endpoint, EndpointGroup, FieldType, ProtocolKind, SchemaModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedArtifact:
    """One output file: a POSIX path relative to the output root, and its text."""

    path: str
    content: str


@dataclass
class Param:
    """A parameter of a generated method."""

    name: str
    annotation: str
    default: str | None = None

    def render(self) -> str:
        if self.default is None:
            return f"{self.name}: {self.annotation}"
        return f"{self.name}: {self.annotation} = {self.default}"


# A generated method: its name and its source lines (indented for a class body)
Method = tuple[str, list[str]]


class Emitter:
    """Base class of the protocol emitters."""

    kind: ProtocolKind
    requirements: tuple[str, ...] = ("requests>=2.28",)
    group_imports: tuple[str, ...] = ("from typing import Any",)

    def __init__(self, options: GeneratorOptions | None = None):
        self.options = options or GeneratorOptions()

    # -- hooks -----------------------------------------------------------------

    def render_endpoint(self, endpoint: Endpoint, mapper: TypeMapper, context: str, refs: set[str]) -> list[Method]:
        raise NotImplementedError

    def render_base(self, model: SchemaModel) -> list[str]:
        raise NotImplementedError

    # -- orchestration ---------------------------------------------------------

    def emit(self, model: SchemaModel, mapper: TypeMapper) -> list[GeneratedArtifact]:
        """Walk the model and return the artifacts in their fixed order."""
        pkg = self.package(model)
        mapper.declare(model.types)

        artifacts: list[GeneratedArtifact] = []
        modules: dict[str, str] = {}
        for group in model.endpoint_groups.values():
            module, class_name = group_module(group.name), group_class(group.name)
            if module in modules:
                raise GenerationError(
                    f"{group.name}: Group name collides with '{modules[module]}' after normalization"
                )
            if to_snake(group.name) == "transport":
                raise GenerationError(f"{group.name}: Group name is reserved by the generated client")
            modules[module] = group.name
            content = self.render_group(model, group, mapper)
            artifacts.append(GeneratedArtifact(f"{pkg}/{module}.py", content))
            logger.debug("Emitted %s with %d endpoints", class_name, len(group.endpoints))

        generated = {group_class(name) for name in model.endpoint_groups} | {client_class(model)}
        clashes = sorted(generated & set(mapper.class_names()))
        if clashes:
            raise GenerationError(f"Type names collide with generated classes: {', '.join(clashes)}")

        artifacts.extend(self.support_artifacts(model, mapper, pkg))
        logger.info("Emitted %d artifacts for %s", len(artifacts), model.meta.name)
        return artifacts

    def package(self, model: SchemaModel) -> str:
        name = self.options.package_name or package_name(model.meta.name)
        if not name.isidentifier():
            raise GenerationError(f"Invalid package name '{name}'")
        return name

    def render_group(self, model: SchemaModel, group: EndpointGroup, mapper: TypeMapper) -> str:
        refs: set[str] = set()
        methods: list[Method] = []
        seen: dict[str, str] = {}
        for endpoint in group.endpoints.values():
            context = f"{group.name}.{endpoint.name}"
            for method_name, lines in self.render_endpoint(endpoint, mapper, context, refs):
                if method_name in seen:
                    raise GenerationError(
                        f"{context}: Method name '{method_name}' already used by {group.name}.{seen[method_name]}"
                    )
                seen[method_name] = endpoint.name
                methods.append((method_name, lines))

        lines = header(model)
        # Method names such as "list" would shadow builtins in later annotations
        lines.append("from __future__ import annotations")
        lines.append("")
        lines.extend(self.group_imports)
        lines.append("")
        lines.append("from .base import BaseClient")
        if refs:
            lines.append(f"from .types import {', '.join(sorted(refs))}")
        lines.extend(["", ""])
        lines.append(f"class {group_class(group.name)}:")
        lines.extend(docstring(f"Endpoints of the {group.name} group.", "    "))
        lines.append("")
        lines.append("    def __init__(self, client: BaseClient):")
        lines.append("        self._client = client")
        for _, method_lines in methods:
            lines.append("")
            lines.extend(method_lines)
        return "\n".join(lines) + "\n"

    # -- support artifacts -----------------------------------------------------

    def support_artifacts(self, model: SchemaModel, mapper: TypeMapper, pkg: str) -> list[GeneratedArtifact]:
        return [
            GeneratedArtifact(f"{pkg}/types.py", render_types(model, mapper)),
            GeneratedArtifact(f"{pkg}/base.py", "\n".join(header(model) + self.render_base(model)) + "\n"),
            GeneratedArtifact(f"{pkg}/__init__.py", render_facade(model)),
            GeneratedArtifact(f"{pkg}/requirements.txt", "\n".join(self.requirements) + "\n"),
        ]

    # -- helpers for subclasses ------------------------------------------------

    def annotate(self, field: FieldType | None, mapper: TypeMapper, context: str, refs: set[str]) -> str:
        if field is None:
            return "Any"
        expr = mapper.annotation(field, context)
        refs.update(expr.refs)
        return expr.text

    def field_param(self, name: str, field: FieldType, mapper: TypeMapper, context: str, refs: set[str]) -> Param:
        annotation = self.annotate(field, mapper, context, refs)
        default = mapper.map_default(field, context) if is_optional(field) else None
        return Param(to_param(name), annotation, default)


def group_module(name: str) -> str:
    return f"{to_snake(name)}_api"


def group_class(name: str) -> str:
    return f"{to_pascal(name)}Api"


def header(model: SchemaModel) -> list[str]:
    name = " ".join(model.meta.name.split())
    version = " ".join(model.protocol_version.split())
    return [
        f"# Generated by ocp-codegen from the {name} schema "
        f"({model.protocol_kind.value} {version}).",
        "# Do not edit by hand; re-run the generator instead.",
        "",
    ]


def signature(name: str, params: list[Param], keyword_only: list[Param], returns: str) -> str:
    """Render a def line; required params come before defaulted ones."""
    ordered = [p for p in params if p.default is None] + [p for p in params if p.default is not None]
    parts = ["self"] + [p.render() for p in ordered]
    if keyword_only:
        parts.append("*")
        parts.extend(p.render() for p in keyword_only)
    names = [p.name for p in ordered + keyword_only]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise GenerationError(f"{name}: Duplicate parameter names {', '.join(duplicates)}")
    return f"    def {name}({', '.join(parts)}) -> {returns}:"


def render_types(model: SchemaModel, mapper: TypeMapper) -> str:
    lines = header(model)
    lines.append("from __future__ import annotations")
    lines.append("")
    lines.append("from typing import Any, NotRequired, TypedDict")
    for definition in mapper.definitions():
        lines.extend(["", ""])
        lines.extend(definition)
    return "\n".join(lines) + "\n"


def client_class(model: SchemaModel) -> str:
    return f"{to_pascal(model.meta.name)}Client"


def render_facade(model: SchemaModel) -> str:
    client_name = client_class(model)
    lines = header(model)
    if model.meta.description:
        lines.extend(docstring(model.meta.description, ""))
        lines.append("")
    lines.append("from typing import Any")
    lines.append("")
    lines.append("from .base import BASE_URL, BaseClient")
    for group_name in model.endpoint_groups:
        lines.append(f"from .{group_module(group_name)} import {group_class(group_name)}")
    lines.extend(["", ""])
    lines.append(f"class {client_name}:")
    lines.extend(docstring(f"Client for {model.meta.name}.", "    "))
    lines.append("")
    lines.append("    def __init__(self, base_url: str = BASE_URL, **kwargs: Any):")
    lines.append("        self.transport = BaseClient(base_url, **kwargs)")
    for group_name in model.endpoint_groups:
        lines.append(f"        self.{to_snake(group_name)} = {group_class(group_name)}(self.transport)")
    lines.extend(["", ""])
    exported = [client_name, "BaseClient"] + [group_class(g) for g in model.endpoint_groups]
    lines.append(f"__all__ = [{', '.join(literal(e) for e in exported)}]")
    return "\n".join(lines) + "\n"


# -- base client scaffolding ---------------------------------------------------


def auth_params(auth: Auth | None) -> list[str]:
    if auth is None:
        return []
    if auth.type == "bearer":
        return ["token: str | None = None"]
    if auth.type == "api_key":
        return ["api_key: str | None = None"]
    return ["username: str | None = None", "password: str | None = None"]


def http_auth_lines(auth: Auth | None) -> list[str]:
    """Statements that apply meta.auth to a requests session."""
    if auth is None:
        return []
    if auth.type == "bearer":
        return [
            "        if token:",
            '            self.session.headers["Authorization"] = f"Bearer {token}"',
        ]
    if auth.type == "api_key":
        return [
            "        if api_key:",
            f"            self.session.headers[{literal(auth.header)}] = api_key",
        ]
    return [
        "        if username is not None:",
        '            self.session.auth = (username, password or "")',
    ]


def render_http_base(model: SchemaModel, methods: list[str], imports: tuple[str, ...] = ()) -> list[str]:
    """A requests-based BaseClient followed by the protocol-specific methods."""
    params = ", ".join(
        ["self", "base_url: str = BASE_URL"]
        + auth_params(model.meta.auth)
        + ["timeout: float = 30.0", "session: requests.Session | None = None"]
    )
    lines = [
        "from typing import Any",
        *imports,
        "",
        "import requests",
        "",
        f"BASE_URL = {literal(model.meta.base_url)}",
        "",
        "",
        "class ApiError(Exception):",
        '    """Raised when the server answers with an error."""',
        "",
        "    def __init__(self, status_code: int, message: str):",
        "        self.status_code = status_code",
        "        self.message = message",
        '        super().__init__(f"{status_code}: {message}")',
        "",
        "",
        "class BaseClient:",
        "    def __init__(" + params + "):",
        '        self.base_url = base_url.rstrip("/")',
        "        self.timeout = timeout",
        "        self.session = session or requests.Session()",
    ]
    lines.extend(http_auth_lines(model.meta.auth))
    lines.extend([
        "",
        "    def _check(self, response: requests.Response) -> None:",
        "        if response.status_code >= 400:",
        "            raise ApiError(response.status_code, response.text)",
    ])
    lines.extend(methods)
    return lines
