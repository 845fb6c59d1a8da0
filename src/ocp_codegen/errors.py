"""Error kinds raised by the code generation engine.

Library code raises these; only the CLI turns them into messages and exit codes.
"""

from pathlib import Path


class CodegenError(Exception):
    """Base class for every error the engine reports to its caller."""


class SchemaNotFound(CodegenError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Schema file not found: {path}")


class SchemaParseError(CodegenError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not parse {path}: {reason}")


class ValidationError(CodegenError):
    """One or more structural violations, in the order they were found."""

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        noun = "violation" if len(self.violations) == 1 else "violations"
        super().__init__(f"Schema has {len(self.violations)} {noun}")


class GenerationError(CodegenError):
    """A valid schema contains something the selected emitter cannot produce."""


class FileSystemError(CodegenError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Cannot write {path}: {reason}")
