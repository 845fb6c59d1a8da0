"""Read an OCP schema document from disk.

JSON is the canonical format. YAML files (.yaml / .yml) are accepted too
and parsed with safe_load. Both keep key order, which generation relies on.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ocp_codegen.errors import SchemaNotFound, SchemaParseError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(file_path: Path) -> Any:
    """Load and parse a schema document.

    Raises SchemaNotFound when the path does not exist and SchemaParseError
    when the content is not well-formed.
    """
    if not file_path.is_file():
        raise SchemaNotFound(file_path)

    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaParseError(file_path, str(e)) from e

    if file_path.suffix.lower() in YAML_SUFFIXES:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SchemaParseError(file_path, str(e)) from e
    else:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaParseError(file_path, f"{e.msg} (line {e.lineno}, column {e.colno})") from e

    logger.debug("Loaded schema document %s", file_path)
    return document
