"""
Errors raised while reconciling and writing generated files.
"""

from __future__ import annotations


class MapperMergeError(Exception):
    """Base class for errors raised by mapper_merge."""

    pass


class MalformedDocument(MapperMergeError):
    """Raised when a mapper document cannot be parsed.

    This can happen when:
    - The text is not well-formed XML
    - Two statements share an identifier
    """

    pass


class InvalidUpstreamArtifacts(MapperMergeError):
    """Raised when the generator handed over no source file or no mapper list."""

    pass
