"""Sanity checks on emitted artifacts before anything touches the disk."""

import ast
import logging

from ocp_codegen.errors import GenerationError
from ocp_codegen.generator.base import GeneratedArtifact

logger = logging.getLogger(__name__)


def compile_problem(artifact: GeneratedArtifact) -> str | None:
    """Return why a Python artifact would not compile, or None."""
    try:
        ast.parse(artifact.content, filename=artifact.path)
    except SyntaxError as e:
        return f"SyntaxError: {e.msg} (line {e.lineno})"
    except UnicodeEncodeError as e:
        # Schema strings may carry lone surrogates, which source text cannot hold
        return f"cannot encode source as UTF-8 ({e.reason})"
    except ValueError as e:
        return f"ValueError: {e}"
    return None


def check_artifacts(artifacts: list[GeneratedArtifact]) -> None:
    """Raise GenerationError for duplicate paths or Python modules that do not compile."""
    seen: set[str] = set()
    problems = []
    for artifact in artifacts:
        if artifact.path in seen:
            raise GenerationError(f"Two artifacts share the path {artifact.path}")
        seen.add(artifact.path)
        if artifact.path.endswith(".py"):
            problem = compile_problem(artifact)
            if problem:
                problems.append(f"{artifact.path}: {problem}")

    if problems:
        raise GenerationError(f"Generated code does not parse: {'; '.join(problems)}")
    logger.debug("Checked %d artifacts", len(artifacts))
