"""WebSocket emitter.

Every channel gets a send/subscribe pair. Messages travel in a JSON
envelope {"channel": ..., "data": ...}; the base client routes incoming
envelopes to the handlers registered for their channel.
"""

from ocp_codegen.generator.base import Emitter, Method, Param, auth_params, signature
from ocp_codegen.generator.naming import docstring, literal, to_snake
from ocp_codegen.generator.types import TypeMapper
from ocp_codegen.schema.base import Auth, Endpoint, ProtocolKind, SchemaModel


def _auth_header_lines(auth: Auth | None) -> list[str]:
    if auth is None:
        return []
    if auth.type == "bearer":
        return [
            "        if token:",
            '            self.headers.append(f"Authorization: Bearer {token}")',
        ]
    if auth.type == "api_key":
        return [
            "        if api_key:",
            f"            self.headers.append({literal(auth.header + ': ')} + api_key)",
        ]
    return [
        "        if username is not None:",
        '            credentials = base64.b64encode(f"{username}:{password or \'\'}".encode()).decode()',
        '            self.headers.append(f"Authorization: Basic {credentials}")',
    ]


class WebSocketEmitter(Emitter):
    kind = ProtocolKind.WEBSOCKET
    requirements = ("websocket-client>=1.6",)
    group_imports = ("from collections.abc import Callable", "from typing import Any")

    def render_endpoint(self, endpoint: Endpoint, mapper: TypeMapper, context: str, refs: set[str]) -> list[Method]:
        name = to_snake(endpoint.name)
        channel = literal(endpoint.path)
        outgoing = self.annotate(endpoint.body, mapper, f"{context}.send", refs)
        incoming = self.annotate(endpoint.response, mapper, f"{context}.receive", refs)

        send_name = f"send_{name}"
        send = [signature(send_name, [Param("payload", outgoing)], [], "None")]
        send.extend(docstring(endpoint.description or f"Send a message on {endpoint.path}.", "        "))
        send.append(f"        self._client.send({channel}, payload)")

        on_name = f"on_{name}"
        on = [signature(on_name, [Param("handler", f"Callable[[{incoming}], None]")], [], "None")]
        on.extend(docstring(f"Register a handler for messages on {endpoint.path}.", "        "))
        on.append(f"        self._client.subscribe({channel}, handler)")
        return [(send_name, send), (on_name, on)]

    def render_base(self, model: SchemaModel) -> list[str]:
        params = ", ".join(
            ["self", "base_url: str = BASE_URL"] + auth_params(model.meta.auth) + ["timeout: float = 30.0"]
        )
        lines = [
            "import base64",
            "import json",
            "from collections.abc import Callable",
            "from typing import Any",
            "",
            "import websocket",
            "",
            f"BASE_URL = {literal(model.meta.base_url)}",
            "",
            "",
            "class BaseClient:",
            '    """A single WebSocket connection multiplexing every channel."""',
            "",
            "    def __init__(" + params + "):",
            "        self.base_url = base_url",
            "        self.timeout = timeout",
            "        self.headers: list[str] = []",
            "        self._handlers: dict[str, list[Callable[[Any], None]]] = {}",
            "        self._socket: websocket.WebSocket | None = None",
        ]
        lines.extend(_auth_header_lines(model.meta.auth))
        lines.extend([
            "",
            "    def connect(self) -> None:",
            "        self._socket = websocket.create_connection(",
            "            self.base_url, header=self.headers, timeout=self.timeout",
            "        )",
            "",
            "    def close(self) -> None:",
            "        if self._socket is not None:",
            "            self._socket.close()",
            "            self._socket = None",
            "",
            "    def send(self, channel: str, payload: Any) -> None:",
            "        if self._socket is None:",
            "            self.connect()",
            '        self._socket.send(json.dumps({"channel": channel, "data": payload}))',
            "",
            "    def subscribe(self, channel: str, handler: Callable[[Any], None]) -> None:",
            "        self._handlers.setdefault(channel, []).append(handler)",
            "",
            "    def dispatch(self, message: str) -> None:",
            "        envelope = json.loads(message)",
            '        for handler in self._handlers.get(envelope.get("channel"), []):',
            '            handler(envelope.get("data"))',
            "",
            "    def run_forever(self) -> None:",
            "        if self._socket is None:",
            "            self.connect()",
            "        while self._socket is not None:",
            "            message = self._socket.recv()",
            "            if not message:",
            "                break",
            "            self.dispatch(message)",
        ])
        return lines
