"""
Files handed over by the generator.

A batch holds two lists: source files (written wholesale, or created once)
and mapper files (always reconciled with what is on disk). Each artifact is a
plain dataclass; the writer dispatches on the concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..utils import artifact_path
from .base import InvalidUpstreamArtifacts


@dataclass(frozen=True)
class GeneratedSourceFile:
    """A generated source file.

    Attributes:
        target_root: Source root the file belongs to (e.g. "src/main/java")
        target_package: Dot- or slash-delimited package
        file_name: File name including extension
        content: Formatted file content
        overwrite: Replace an existing file; otherwise the file is only created once
    """

    target_root: str
    target_package: str
    file_name: str
    content: str
    overwrite: bool = False

    @property
    def path(self) -> str:
        return artifact_path(self.target_root, self.target_package, self.file_name)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> GeneratedSourceFile:
        overwrite = d.get("overwrite", False)
        if not isinstance(overwrite, bool):
            raise InvalidUpstreamArtifacts(f"overwrite must be true or false, got {overwrite!r} for {d.get('file_name')!r}")
        return GeneratedSourceFile(
            target_root=d.get("target_root", ""),
            target_package=d.get("target_package", ""),
            file_name=d["file_name"],
            content=d.get("content", ""),
            overwrite=overwrite,
        )


@dataclass(frozen=True)
class GeneratedMapperFile:
    """A generated mapper document (statements keyed by id)."""

    target_root: str
    target_package: str
    file_name: str
    content: str

    @property
    def path(self) -> str:
        return artifact_path(self.target_root, self.target_package, self.file_name)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> GeneratedMapperFile:
        return GeneratedMapperFile(
            target_root=d.get("target_root", ""),
            target_package=d.get("target_package", ""),
            file_name=d["file_name"],
            content=d.get("content", ""),
        )


GeneratedArtifact = GeneratedSourceFile | GeneratedMapperFile


@dataclass
class GeneratedBatch:
    """Everything one generator run produced.

    A list set to None means the generator did not report that kind of file
    at all, which is different from reporting an empty list.
    """

    source_files: list[GeneratedSourceFile] | None = field(default_factory=list)
    mapper_files: list[GeneratedMapperFile] | None = field(default_factory=list)

    def validate(self) -> None:
        """Check that both lists were produced.

        Raises:
            InvalidUpstreamArtifacts: If either list is missing
        """
        if self.source_files is None:
            raise InvalidUpstreamArtifacts("No source files generated.")
        if self.mapper_files is None:
            raise InvalidUpstreamArtifacts("No mapper files generated.")

    def artifacts(self) -> list[GeneratedArtifact]:
        """All artifacts in write order: source files first, then mappers."""
        self.validate()
        return [*self.source_files, *self.mapper_files]

    @staticmethod
    def from_dict(d: dict[str, Any]) -> GeneratedBatch:
        """Create a batch from a generator manifest."""
        source_files = d.get("source_files")
        mapper_files = d.get("mapper_files")
        return GeneratedBatch(
            source_files=None if source_files is None else [GeneratedSourceFile.from_dict(f) for f in source_files],
            mapper_files=None if mapper_files is None else [GeneratedMapperFile.from_dict(f) for f in mapper_files],
        )
