"""
In-memory model of a mapper document.

A mapper is a root element (usually <mapper namespace="...">) whose children
are statements, each identified by its id attribute. Everything inside a
statement is opaque: the model keeps its canonical XML text and never looks at
the SQL.

Parsing and serialization are inverse of each other on canonical text, so
parse(serialize(doc)) == doc for any parsed or merged document.
"""

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from collections import OrderedDict
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from xml.sax.saxutils import quoteattr

import jinja2

from .base import MalformedDocument
from .config import WriterConfig

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

# Bound to the "xml" prefix by definition, never declared
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


@dataclass(frozen=True)
class Doctype:
    """A <!DOCTYPE ...> declaration."""

    name: str
    public_id: str | None = None
    system_id: str | None = None

    def declaration(self) -> str:
        if self.public_id is not None:
            return f"<!DOCTYPE {self.name} PUBLIC {_quote_literal(self.public_id)} {_quote_literal(self.system_id or '')}>"
        if self.system_id is not None:
            return f"<!DOCTYPE {self.name} SYSTEM {_quote_literal(self.system_id)}>"
        return f"<!DOCTYPE {self.name}>"


MYBATIS_MAPPER_DOCTYPE = Doctype(
    name="mapper",
    public_id="-//mybatis.org//DTD Mapper 3.0//EN",
    system_id="http://mybatis.org/dtd/mybatis-3-mapper.dtd",
)


@dataclass(frozen=True)
class Statement:
    """One statement of a mapper.

    Attributes:
        id: Identifier, unique within the document
        tag: Element name (select, insert, resultMap, sql, ...)
        body: Canonical XML text of the whole element, attributes included
    """

    id: str
    tag: str
    body: str


@dataclass
class MappingDocument:
    """A mapper: document metadata plus statements in document order.

    Statements are held in an OrderedDict so that two documents only compare
    equal when their statements appear in the same order. Namespaced root
    names are kept in {uri}local form; namespaces maps each prefix declared on
    the root ("" for the default namespace) to its URI.
    """

    root_tag: str = "mapper"
    attributes: dict[str, str] = field(default_factory=dict)
    doctype: Doctype | None = None
    statements: OrderedDict[str, Statement] = field(default_factory=OrderedDict)
    namespaces: dict[str, str] = field(default_factory=dict)

    @property
    def namespace(self) -> str | None:
        return self.attributes.get("namespace")

    @property
    def ids(self) -> list[str]:
        return list(self.statements)

    def bodies(self) -> dict[str, str]:
        """Map each statement id to its body."""
        return {statement_id: statement.body for statement_id, statement in self.statements.items()}


class _MapperTreeBuilder(ET.TreeBuilder):
    """Tree builder that keeps comments, records the DOCTYPE and the root's namespace declarations."""

    def __init__(self):
        super().__init__(insert_comments=True)
        self.doctype_declaration: Doctype | None = None
        self.root_namespaces: dict[str, str] = {}
        self._root_started = False

    def doctype(self, name, pubid, system):
        self.doctype_declaration = Doctype(name=name, public_id=pubid, system_id=system)

    def start_ns(self, prefix, uri):
        # Declarations reported before the first start tag belong to the root
        if not self._root_started:
            self.root_namespaces[prefix or ""] = uri or ""

    def start(self, tag, attrs):
        self._root_started = True
        return super().start(tag, attrs)


class _QualifiedNames:
    """Turns {uri}local names back into prefix:local using declared prefixes."""

    def __init__(self, namespaces: dict[str, str]):
        self.element_prefixes = {XML_NAMESPACE: "xml"}
        self.attribute_prefixes = {XML_NAMESPACE: "xml"}
        for prefix, uri in namespaces.items():
            self.element_prefixes.setdefault(uri, prefix)
            # Unprefixed attributes never take the default namespace
            if prefix:
                self.attribute_prefixes.setdefault(uri, prefix)

    def qualify(self, name: str, attribute: bool = False) -> str:
        """Qualified name for name, or name unchanged when its URI has no prefix."""
        if not name.startswith("{"):
            return name
        uri, local = name[1:].split("}", 1)
        prefix = (self.attribute_prefixes if attribute else self.element_prefixes).get(uri)
        if prefix is None:
            return name
        return f"{prefix}:{local}" if prefix else local

    def qualify_tree(self, element: ET.Element) -> None:
        for node in element.iter():
            if not isinstance(node.tag, str):
                continue
            node.tag = self.qualify(node.tag)
            attributes = [(self.qualify(key, attribute=True), value) for key, value in node.attrib.items()]
            node.attrib.clear()
            node.attrib.update(attributes)


def _quote_literal(value: str) -> str:
    return f"'{value}'" if '"' in value else f'"{value}"'


def _statement_id(element: ET.Element, id_attribute: str, qnames: _QualifiedNames) -> str:
    # Elements without an id (<cache/>, <cache-ref/>) are keyed by their tag.
    statement_id = element.get(id_attribute)
    if statement_id is None:
        return f"<{qnames.qualify(element.tag)}>"
    return statement_id


def _canonical_body(element: ET.Element, indent: str, qnames: _QualifiedNames) -> str:
    """Serialize one statement independently of where it sat in its document.

    Whitespace-only text is re-indented for nesting level 1, any other text
    (the SQL) is kept verbatim. Names in a namespace declared on the root are
    written with the root's prefixes, so the body needs no declarations of
    its own.
    """
    element = copy.deepcopy(element)
    element.tail = None
    qnames.qualify_tree(element)
    ET.indent(element, space=indent, level=1)
    return ET.tostring(element, encoding="unicode")


def parse_document(text: str | bytes, config: WriterConfig | None = None) -> MappingDocument:
    """Parse mapper text into a MappingDocument.

    Args:
        text: Document text; bytes are decoded per the XML declaration
        config: Writer configuration (id attribute, indentation)

    Returns:
        The parsed document

    Raises:
        MalformedDocument: If the text is not well-formed XML or two
            statements share an id
    """
    config = config or WriterConfig()
    builder = _MapperTreeBuilder()
    parser = ET.XMLParser(target=builder)
    try:
        parser.feed(text)
        root = parser.close()
    except ET.ParseError as e:
        raise MalformedDocument(f"Mapper is not well-formed XML: {e}") from e

    document = MappingDocument(
        root_tag=root.tag,
        attributes=dict(root.attrib),
        doctype=builder.doctype_declaration,
        namespaces=dict(builder.root_namespaces),
    )
    qnames = _QualifiedNames(document.namespaces)
    for child in root:
        if not isinstance(child.tag, str):
            # Top-level comments are not statements
            continue
        statement_id = _statement_id(child, config.id_attribute, qnames)
        if statement_id in document.statements:
            raise MalformedDocument(f"Duplicate statement id {statement_id!r} in <{qnames.qualify(root.tag)}>")
        document.statements[statement_id] = Statement(
            id=statement_id,
            tag=qnames.qualify(child.tag),
            body=_canonical_body(child, config.indent, qnames),
        )
    return document


@lru_cache(maxsize=1)
def _mapper_template() -> jinja2.Template:
    jinja_env = jinja2.Environment(lstrip_blocks=True, trim_blocks=True, keep_trailing_newline=True)
    return jinja_env.from_string((TEMPLATES_DIR / "mapper.xml.jinja2").read_text(encoding="utf-8"))


def _root_attributes(document: MappingDocument, qnames: _QualifiedNames) -> list[tuple[str, str]]:
    """Namespace declarations first, then the root's own attributes, values quoted."""
    attributes = [(f"xmlns:{prefix}" if prefix else "xmlns", quoteattr(uri)) for prefix, uri in document.namespaces.items()]
    attributes.extend((qnames.qualify(name, attribute=True), quoteattr(value)) for name, value in document.attributes.items())
    return attributes


def serialize_document(document: MappingDocument, config: WriterConfig | None = None) -> str:
    """Render a MappingDocument as canonical mapper text.

    The same document always renders to the same text: statements in
    document order, one per line block, indented by config.indent.
    """
    config = config or WriterConfig()
    qnames = _QualifiedNames(document.namespaces)
    return _mapper_template().render(
        encoding=config.encoding,
        doctype=document.doctype.declaration() if document.doctype else None,
        root_tag=qnames.qualify(document.root_tag),
        attributes=_root_attributes(document, qnames),
        indent=config.indent,
        statements=[statement.body for statement in document.statements.values()],
    )


def from_empty(namespace: str, doctype: Doctype | None = MYBATIS_MAPPER_DOCTYPE) -> MappingDocument:
    """Create a mapper with no statements."""
    return MappingDocument(attributes={"namespace": namespace}, doctype=doctype)
