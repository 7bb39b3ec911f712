"""Namespace-tolerant XML parser producing a parse event stream.

Standard namespace-aware parsers reject an element such as ``<sfa:chart/>``
when ``sfa`` is not declared. Flexipage sources are internally authored and
omit those declarations, so this parser runs the SAX reader with namespace
processing off and resolves prefixes itself through a per-document
:class:`~flexipage_xml.parsing.namespaces.NamespaceContext`, synthesizing a
URI for any unbound prefix.

External general and parameter entities are never resolved, and entity
declarations are rejected (defusedxml), regardless of configuration.
"""

import io
import time
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, TextIO, Tuple, Union
from xml.sax import SAXException, SAXParseException
from xml.sax.handler import (
    ContentHandler,
    feature_external_ges,
    feature_external_pes,
    feature_namespaces,
)

import defusedxml.sax
from defusedxml import DefusedXmlException

from flexipage_xml.shared import ParseError, ParsingConfig, get_logger

from .events import Attribute, EventType, ParseEvent, ParseEventStream, QualifiedName
from .namespaces import NamespaceContext, split_qname

DocumentSource = Union[bytes, str, BinaryIO, TextIO]

MS_PER_SECOND = 1000


class _EventCollector(ContentHandler):
    """SAX content handler that resolves names and records parse events."""

    def __init__(self, context: NamespaceContext, max_depth: int) -> None:
        super().__init__()
        self.events: List[ParseEvent] = []
        self._context = context
        self._max_depth = max_depth
        self._locator = None
        self._text_parts: List[str] = []
        self._text_position = (1, 1)

    def setDocumentLocator(self, locator) -> None:
        self._locator = locator

    def position(self) -> Tuple[int, int]:
        """Current 1-based line and column."""
        if self._locator is None:
            return 1, 1
        line = self._locator.getLineNumber() or 1
        column = self._locator.getColumnNumber()
        return line, (column or 0) + 1

    def _flush_text(self) -> None:
        if not self._text_parts:
            return
        line, column = self._text_position
        self.events.append(ParseEvent(
            EventType.TEXT, line, column, text="".join(self._text_parts)
        ))
        self._text_parts = []

    def _element_name(self, qname: str) -> QualifiedName:
        prefix, local = split_qname(qname)
        return QualifiedName(local, self._context.resolve(prefix), prefix)

    def _attribute_name(self, qname: str) -> QualifiedName:
        prefix, local = split_qname(qname)
        if prefix is None:
            return QualifiedName(local)
        return QualifiedName(local, self._context.resolve(prefix), prefix)

    def startElement(self, name: str, attrs) -> None:
        self._flush_text()
        line, column = self.position()

        declarations: Dict[Optional[str], str] = {}
        plain: List[Tuple[str, str]] = []
        for qname in attrs.getNames():
            value = attrs.getValue(qname)
            if qname == "xmlns":
                declarations[None] = value
            elif qname.startswith("xmlns:"):
                declarations[qname[len("xmlns:"):]] = value
            else:
                plain.append((qname, value))

        self._context.push(declarations)
        if self._context.depth > self._max_depth:
            raise ParseError(
                f"Element nesting exceeds maximum depth of {self._max_depth}",
                line,
                column,
            )

        known = self._context.synthesized
        element_name = self._element_name(name)
        attributes = tuple(
            Attribute(self._attribute_name(qname), value) for qname, value in plain
        )
        seen: Dict[str, str] = {}
        for attr in attributes:
            clark = attr.name.clark
            if clark in seen:
                raise ParseError(
                    f"Attributes {seen[clark]} and {attr.name.qname} on "
                    f"{element_name.qname} resolve to the same name {clark}",
                    line,
                    column,
                )
            seen[clark] = attr.name.qname
        introduced = [
            (prefix, uri) for prefix, uri in declarations.items() if uri
        ]
        introduced.extend(
            (prefix, uri)
            for prefix, uri in self._context.synthesized.items()
            if prefix not in known
        )

        self.events.append(ParseEvent(
            EventType.START_ELEMENT,
            line,
            column,
            name=element_name,
            attributes=attributes,
            namespaces=tuple(introduced),
        ))

    def endElement(self, name: str) -> None:
        self._flush_text()
        line, column = self.position()
        element_name = self._element_name(name)
        self._context.pop()
        self.events.append(ParseEvent(
            EventType.END_ELEMENT, line, column, name=element_name
        ))

    def characters(self, content: str) -> None:
        if not self._text_parts:
            self._text_position = self.position()
        self._text_parts.append(content)


class NamespaceTolerantParser:
    """Parses XML into a :class:`ParseEventStream`, tolerating unbound prefixes.

    Examples:
        >>> stream = NamespaceTolerantParser().parse(b'<region><sfa:chart/></region>')
        >>> [e.name.clark for e in stream if e.name][:2]
        ['region', '{urn:salesforce:sfa}chart']
    """

    def __init__(self, config: Optional[ParsingConfig] = None,
                 correlation_id: Optional[str] = None) -> None:
        self.config = config or ParsingConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "parser")

    def _make_reader(self):
        reader = defusedxml.sax.make_parser()
        reader.setFeature(feature_namespaces, False)
        reader.setFeature(feature_external_ges, False)
        reader.setFeature(feature_external_pes, False)
        return reader

    def parse(self, source: DocumentSource) -> ParseEventStream:
        """Parse a complete document.

        Args:
            source: XML as bytes, text, or a readable binary/text stream

        Returns:
            ParseEventStream with every event in document order

        Raises:
            ParseError: The document is not well-formed, nests too deeply, or
                uses a forbidden entity construct
        """
        start_time = time.perf_counter()
        if isinstance(source, bytes):
            stream = io.BytesIO(source)
        elif isinstance(source, str):
            stream = io.StringIO(source)
        else:
            stream = source

        context = NamespaceContext(self.config.namespace_authority)
        collector = _EventCollector(context, self.config.max_element_depth)
        reader = self._make_reader()
        reader.setContentHandler(collector)

        try:
            reader.parse(stream)
        except SAXParseException as e:
            line, column = e.getLineNumber(), (e.getColumnNumber() or 0) + 1
            self.logger.warning(
                "Document is not well-formed",
                extra={"line": line, "column": column, "reason": e.getMessage()},
            )
            raise ParseError(e.getMessage(), line, column) from e
        except DefusedXmlException as e:
            line, column = collector.position()
            self.logger.warning(
                "Forbidden XML construct rejected",
                extra={"line": line, "construct": type(e).__name__},
            )
            raise ParseError(f"Forbidden construct: {e}", line, column) from e
        except SAXException as e:
            raise ParseError(e.getMessage()) from e

        processing_time = (time.perf_counter() - start_time) * MS_PER_SECOND
        synthesized = context.synthesized
        if synthesized:
            self.logger.debug(
                "Synthesized namespace bindings for undeclared prefixes",
                extra={"prefixes": sorted(synthesized)},
            )
        self.logger.info(
            "Document parsed",
            extra={
                "event_count": len(collector.events),
                "processing_time_ms": processing_time,
            },
        )
        return ParseEventStream(
            tuple(collector.events), synthesized, processing_time
        )

    def parse_file(self, path: Union[str, Path]) -> ParseEventStream:
        """Parse a file, opening it only for the duration of the parse."""
        with Path(path).open("rb") as stream:
            return self.parse(stream)


def parse_events(source: DocumentSource, config: Optional[ParsingConfig] = None,
                 correlation_id: Optional[str] = None) -> ParseEventStream:
    """Parse ``source`` with a default-configured parser."""
    return NamespaceTolerantParser(config, correlation_id).parse(source)
