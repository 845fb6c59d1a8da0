"""Materialize artifacts under an output root.

Writes are sequential and not transactional: if one fails, the files
written before it stay on disk. The engine only calls the writer after
every artifact has been generated and checked, so a failure here is
always an environment problem.

The written paths are recorded in a manifest at the root. With prune
enabled, files named in the previous manifest that the current run no
longer produces are removed.
"""

import logging
from pathlib import Path, PurePosixPath

from ocp_codegen.errors import FileSystemError
from ocp_codegen.generator.base import GeneratedArtifact

logger = logging.getLogger(__name__)

MANIFEST_NAME = ".ocp-manifest"


class ArtifactWriter:
    def __init__(self, root: Path, prune: bool = False):
        self.root = root
        self.prune = prune

    def write(self, artifacts: list[GeneratedArtifact]) -> list[Path]:
        """Write every artifact in order. Returns the written file paths."""
        self._ensure_dir(self.root)
        previous = self._read_manifest() if self.prune else []

        written = []
        for artifact in artifacts:
            target = self._target(artifact.path)
            self._ensure_dir(target.parent)
            try:
                target.write_text(artifact.content, encoding="utf-8", newline="\n")
            except OSError as e:
                raise FileSystemError(target, e.strerror or str(e)) from e
            logger.debug("Wrote %s", target)
            written.append(target)

        current = [artifact.path for artifact in artifacts]
        if self.prune:
            self._prune(previous, current)
        self._write_manifest(current)
        return written

    def _target(self, relative: str) -> Path:
        rel = PurePosixPath(relative)
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise FileSystemError(self.root / relative, "path escapes the output root")
        return self.root.joinpath(*rel.parts)

    def _ensure_dir(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(directory, e.strerror or str(e)) from e

    def _read_manifest(self) -> list[str]:
        manifest = self.root / MANIFEST_NAME
        if not manifest.is_file():
            return []
        try:
            text = manifest.read_text(encoding="utf-8")
        except OSError as e:
            raise FileSystemError(manifest, e.strerror or str(e)) from e
        return [line for line in text.splitlines() if line.strip()]

    def _write_manifest(self, paths: list[str]) -> None:
        manifest = self.root / MANIFEST_NAME
        try:
            manifest.write_text("".join(f"{p}\n" for p in paths), encoding="utf-8", newline="\n")
        except OSError as e:
            raise FileSystemError(manifest, e.strerror or str(e)) from e

    def _prune(self, previous: list[str], current: list[str]) -> None:
        keep = set(current)
        for relative in previous:
            if relative in keep:
                continue
            try:
                target = self._target(relative)
            except FileSystemError:
                logger.warning("Ignoring unsafe manifest entry %s", relative)
                continue
            if not target.is_file():
                continue
            try:
                target.unlink()
                self._remove_empty_parents(target.parent)
            except OSError as e:
                raise FileSystemError(target, e.strerror or str(e)) from e
            logger.info("Pruned stale file %s", target)

    def _remove_empty_parents(self, directory: Path) -> None:
        root = self.root.resolve()
        while directory.resolve() != root and not any(directory.iterdir()):
            directory.rmdir()
            directory = directory.parent
