"""MyBatis Files Writer

A Python package for writing files produced by a MyBatis code generator into
a project. Generated mapper XML files are merged with the mappers already on
disk so that hand-written statements are never lost.
"""

__version__ = "1.0.1"

from .writer import (
    GeneratedBatch,
    GeneratedMapperFile,
    GeneratedSourceFile,
    InvalidUpstreamArtifacts,
    LocalProject,
    MalformedDocument,
    MapperFilesWriter,
    MapperMerger,
    WriterConfig,
    reconcile,
)

__all__ = [
    "MapperFilesWriter",
    "MapperMerger",
    "WriterConfig",
    "GeneratedBatch",
    "GeneratedMapperFile",
    "GeneratedSourceFile",
    "LocalProject",
    "InvalidUpstreamArtifacts",
    "MalformedDocument",
    "reconcile",
]
