"""The generation engine.

generate() is a pure function from a parsed document to artifacts; it never
touches the filesystem. run() adds loading and writing around it.
"""

import logging
from pathlib import Path
from typing import Any

from ocp_codegen.config import GeneratorOptions
from ocp_codegen.generator.base import GeneratedArtifact
from ocp_codegen.generator.checks import check_artifacts
from ocp_codegen.generator.dispatch import select
from ocp_codegen.generator.types import TypeMapper
from ocp_codegen.generator.writer import ArtifactWriter
from ocp_codegen.schema.base import SchemaModel
from ocp_codegen.schema.loader import load_document
from ocp_codegen.schema.validator import build_model

logger = logging.getLogger(__name__)


def generate(document: Any, options: GeneratorOptions | None = None) -> list[GeneratedArtifact]:
    """Validate a document and produce every artifact in memory.

    Raises ValidationError for an invalid document and GenerationError when
    the emitter cannot handle the model.
    """
    return emit_model(build_model(document), options)


def emit_model(model: SchemaModel, options: GeneratorOptions | None = None) -> list[GeneratedArtifact]:
    """Run the emitter for a validated model and check its output."""
    emitter = select(model.protocol_kind, options)
    logger.debug("Selected %s for %s", type(emitter).__name__, model.protocol_kind.value)
    artifacts = emitter.emit(model, TypeMapper())
    check_artifacts(artifacts)
    return artifacts


def run(schema_path: Path, output_root: Path, options: GeneratorOptions | None = None) -> list[Path]:
    """Load, generate and write. Returns the written file paths."""
    options = options or GeneratorOptions()
    document = load_document(schema_path)
    artifacts = generate(document, options)
    return ArtifactWriter(output_root, prune=options.prune).write(artifacts)
