"""
Writer module.

Reconciles generated mapper documents with the versions already on disk,
preserving hand-written statements, and writes generated files into a project.
"""

from __future__ import annotations

from .artifacts import GeneratedArtifact, GeneratedBatch, GeneratedMapperFile, GeneratedSourceFile
from .base import InvalidUpstreamArtifacts, MalformedDocument, MapperMergeError
from .config import WriterConfig
from .document import (
    MYBATIS_MAPPER_DOCTYPE,
    Doctype,
    MappingDocument,
    Statement,
    from_empty,
    parse_document,
    serialize_document,
)
from .files_writer import MapperFilesWriter, WriteReport
from .project import DryRunProject, InMemoryProject, LocalProject, Project
from .reconciler import Fallback, MapperMerger, Merged, ReconciliationOutcome, reconcile

__all__ = [
    "GeneratedArtifact",
    "GeneratedBatch",
    "GeneratedMapperFile",
    "GeneratedSourceFile",
    "InvalidUpstreamArtifacts",
    "MalformedDocument",
    "MapperMergeError",
    "WriterConfig",
    "MYBATIS_MAPPER_DOCTYPE",
    "Doctype",
    "MappingDocument",
    "Statement",
    "from_empty",
    "parse_document",
    "serialize_document",
    "MapperFilesWriter",
    "WriteReport",
    "DryRunProject",
    "InMemoryProject",
    "LocalProject",
    "Project",
    "Fallback",
    "MapperMerger",
    "Merged",
    "ReconciliationOutcome",
    "reconcile",
]
