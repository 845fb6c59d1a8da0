"""Pick the emitter for a protocol kind."""

from ocp_codegen.config import GeneratorOptions
from ocp_codegen.errors import GenerationError
from ocp_codegen.generator.base import Emitter
from ocp_codegen.generator.graphql import GraphQLEmitter
from ocp_codegen.generator.rest import RestEmitter
from ocp_codegen.generator.rpc import RpcEmitter
from ocp_codegen.generator.websocket import WebSocketEmitter
from ocp_codegen.schema.base import ProtocolKind

EMITTERS: dict[ProtocolKind, type[Emitter]] = {
    ProtocolKind.REST: RestEmitter,
    ProtocolKind.RPC: RpcEmitter,
    ProtocolKind.GRAPHQL: GraphQLEmitter,
    ProtocolKind.WEBSOCKET: WebSocketEmitter,
}


def select(protocol_kind: ProtocolKind | str, options: GeneratorOptions | None = None) -> Emitter:
    """Return the emitter for protocol_kind.

    The validator already rejects unknown kinds; a model built some other
    way still gets a GenerationError instead of a KeyError.
    """
    try:
        kind = ProtocolKind(protocol_kind)
    except ValueError as e:
        raise GenerationError(f"Unsupported protocol kind: {protocol_kind}") from e
    return EMITTERS[kind](options)
