"""
Reconciliation of a generated mapper with the mapper already on disk.

The merge is two-way: generated statements always win, statements that only
exist on disk (written by hand) are kept where they are, and statements new
to this generation run are appended in generator order.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass

from .base import MalformedDocument
from .config import WriterConfig
from .document import MappingDocument, parse_document, serialize_document


@dataclass(frozen=True)
class Merged:
    """Reconciliation succeeded; text is the document to write."""

    text: str


@dataclass(frozen=True)
class Fallback:
    """Reconciliation was abandoned; text is what gets written instead."""

    text: str
    reason: str


ReconciliationOutcome = Merged | Fallback


def reconcile(existing: MappingDocument | None, incoming: MappingDocument) -> MappingDocument:
    """Merge an existing mapper with a freshly generated one.

    Args:
        existing: The mapper on disk, or None on first generation
        incoming: The mapper the generator just produced

    Returns:
        incoming itself when there is no existing mapper, otherwise a new
        document holding the union of both statement sets, with the
        generated body winning for every shared id and document metadata
        taken from incoming
    """
    if existing is None:
        return incoming

    statements = OrderedDict(existing.statements)
    for statement_id, statement in incoming.statements.items():
        # Assigning to an existing key keeps its position
        statements[statement_id] = statement

    return MappingDocument(
        root_tag=incoming.root_tag,
        attributes=dict(incoming.attributes),
        doctype=incoming.doctype,
        statements=statements,
        namespaces=_merged_namespaces(existing, incoming),
    )


def _merged_namespaces(existing: MappingDocument, incoming: MappingDocument) -> dict[str, str]:
    """Root declarations of incoming, plus prefixes only the existing mapper declares.

    Kept statements may use those prefixes. The default namespace always
    comes from incoming.
    """
    namespaces = dict(incoming.namespaces)
    for prefix, uri in existing.namespaces.items():
        if prefix:
            namespaces.setdefault(prefix, uri)
    return namespaces


class MapperMerger:
    """Parses, merges and renders mapper text."""

    def __init__(self, config: WriterConfig | None = None):
        self.config = config or WriterConfig()

    def parse(self, text: str | bytes) -> MappingDocument:
        """Parse mapper text.

        Raises:
            MalformedDocument: If the text cannot be parsed
        """
        return parse_document(text, self.config)

    def serialize(self, document: MappingDocument) -> str:
        return serialize_document(document, self.config)

    def merge_files(self, generated_text: str | bytes, existing_text: str | bytes | None) -> str:
        """High-level merge operation.

        Args:
            generated_text: The newly generated mapper
            existing_text: The mapper on disk, or None if there is none

        Returns:
            Canonical text of the merged mapper

        Raises:
            MalformedDocument: If either text cannot be parsed
        """
        incoming = self.parse(generated_text)
        existing = None if existing_text is None else self.parse(existing_text)
        return self.serialize(reconcile(existing, incoming))

    def reconcile_text(self, existing_text: str | bytes | None, incoming_text: str) -> ReconciliationOutcome:
        """Reconcile two texts without ever raising a merge error.

        - A generated mapper that cannot be parsed is passed through verbatim.
        - An existing mapper that cannot be parsed or merged, for any reason,
          is replaced by the canonical generated mapper.
        """
        try:
            incoming = self.parse(incoming_text)
            generated = self.serialize(incoming)
        except Exception as e:
            return Fallback(text=incoming_text, reason=_failure_reason("generated", e))

        if existing_text is None:
            return Merged(text=generated)

        try:
            existing = self.parse(existing_text)
            return Merged(text=self.serialize(reconcile(existing, incoming)))
        except Exception as e:
            return Fallback(text=generated, reason=_failure_reason("existing", e))


def _failure_reason(which: str, error: Exception) -> str:
    if isinstance(error, MalformedDocument):
        return f"{which} mapper is malformed: {error}"
    return f"{which} mapper could not be merged: {type(error).__name__}: {error}"
