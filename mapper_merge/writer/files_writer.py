"""
Write files produced by the generator into a project.

Source files are written wholesale or created once, depending on their
overwrite flag. Mapper files are always written, after being reconciled with
the mapper already on disk so that hand-written statements survive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .artifacts import GeneratedArtifact, GeneratedBatch, GeneratedMapperFile, GeneratedSourceFile
from .config import WriterConfig
from .project import Project
from .reconciler import Fallback, MapperMerger

logger = logging.getLogger(__name__)


@dataclass
class WriteReport:
    """What a run of MapperFilesWriter did.

    Attributes:
        written: Paths written, in order
        skipped: Create-once source files left untouched because they exist
        fallbacks: (path, reason) for every mapper that could not be merged
    """

    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    fallbacks: list[tuple[str, str]] = field(default_factory=list)


class MapperFilesWriter:
    """Writes a generated batch into a project."""

    def __init__(self, project: Project, batch: GeneratedBatch, config: WriterConfig | None = None):
        """Initialize the writer.

        Args:
            project: Where files are read from and written to
            batch: Files produced by the generator
            config: Writer configuration

        Raises:
            InvalidUpstreamArtifacts: If the batch lacks its source or mapper list
        """
        if project is None:
            raise ValueError("project must not be None.")
        batch.validate()
        self.project = project
        self.batch = batch
        self.config = config or WriterConfig()
        self.merger = MapperMerger(self.config)

    def _write_file(self, path: str, content: str, overwrite: bool, report: WriteReport) -> None:
        if not overwrite and self.project.exists(path):
            logger.debug("Keeping existing %s", path)
            report.skipped.append(path)
            return
        self.project.create_and_write(path, content)
        report.written.append(path)

    def _read_existing(self, path: str) -> bytes | None:
        if not self.project.exists(path):
            return None
        with self.project.open_for_read(path) as stream:
            return stream.read()

    def write_source_file(self, source_file: GeneratedSourceFile, report: WriteReport) -> None:
        logger.debug("Writing source file %s (overwrite=%s)", source_file.path, source_file.overwrite)
        self._write_file(source_file.path, source_file.content, source_file.overwrite, report)

    def write_mapper_file(self, mapper_file: GeneratedMapperFile, report: WriteReport) -> None:
        path = mapper_file.path
        existing = self._read_existing(path)
        outcome = self.merger.reconcile_text(existing, mapper_file.content)
        if isinstance(outcome, Fallback):
            logger.warning("Could not merge %s, writing generated mapper: %s", path, outcome.reason)
            report.fallbacks.append((path, outcome.reason))
        else:
            logger.debug("Merged %s (%s)", path, "existing" if existing is not None else "new")
        # The merge protects hand-written statements, so mappers are always overwritten
        self._write_file(path, outcome.text, True, report)

    def write_artifact(self, artifact: GeneratedArtifact, report: WriteReport) -> None:
        if isinstance(artifact, GeneratedSourceFile):
            self.write_source_file(artifact, report)
        elif isinstance(artifact, GeneratedMapperFile):
            self.write_mapper_file(artifact, report)
        else:
            raise TypeError(f"Unsupported artifact: {type(artifact).__name__}")

    def write_all(self) -> WriteReport:
        """Write every artifact of the batch, source files first.

        Errors reading or writing a file propagate and stop the run; files
        written before the failure stay written.
        """
        report = WriteReport()
        for artifact in self.batch.artifacts():
            self.write_artifact(artifact, report)
        logger.info("Files have been generated, happy coding.")
        return report
