"""Tree building from parse event streams.

This module assembles a :class:`~flexipage_xml.parsing.events.ParseEventStream`
into an lxml element tree that the schema validator and the binder consume.
Source line numbers are carried onto each element so validator messages point
back into the original document; lines beyond what lxml can store are returned
alongside the tree in a :class:`LocatedTree`.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from lxml import etree

from flexipage_xml.parsing.events import EventType, ParseEvent, ParseEventStream
from flexipage_xml.parsing.namespaces import XML_NAMESPACE
from flexipage_xml.shared import ParseError, get_logger

# lxml stores source lines as an unsigned short
MAX_SOURCELINE = 65535


@dataclass(frozen=True)
class LocatedTree:
    """Element tree plus the source lines lxml cannot store.

    ``late_lines`` maps the lxml path (:meth:`etree._ElementTree.getpath`) of
    every element starting after :data:`MAX_SOURCELINE` to its line.
    """

    tree: "etree._ElementTree"
    late_lines: Dict[str, int] = field(default_factory=dict)


class EventTreeBuilder:
    """Builds an lxml tree from a parse event stream.

    The stream must describe exactly one balanced root element; anything else
    raises :class:`ParseError`.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

    def build(self, stream: ParseEventStream) -> "etree._ElementTree":
        """Build the element tree, dropping lines lxml cannot store."""
        return self.build_located(stream).tree

    def build_located(self, stream: ParseEventStream) -> LocatedTree:
        """Build the element tree and keep every source line.

        Raises:
            ParseError: Mismatched end tags, unclosed elements, content outside
                the root element, or an empty stream
        """
        builder = etree.TreeBuilder()
        open_names: List[ParseEvent] = []
        late_elements: List[Tuple["etree._Element", int]] = []
        root_closed = False
        element_count = 0

        for event in stream:
            if event.type is EventType.START_ELEMENT:
                if root_closed:
                    raise ParseError(
                        "Content after the root element", event.line, event.column
                    )
                element = builder.start(
                    event.name.clark,
                    {attr.name.clark: attr.value for attr in event.attributes},
                    self._nsmap(event),
                )
                if event.line <= MAX_SOURCELINE:
                    element.sourceline = event.line
                else:
                    late_elements.append((element, event.line))
                open_names.append(event)
                element_count += 1

            elif event.type is EventType.END_ELEMENT:
                if not open_names:
                    raise ParseError(
                        f"Unexpected end tag {event.name.qname}", event.line, event.column
                    )
                opened = open_names.pop()
                if opened.name != event.name:
                    raise ParseError(
                        f"Mismatched end tag {event.name.qname}, expected "
                        f"{opened.name.qname} opened at line {opened.line}",
                        event.line,
                        event.column,
                    )
                builder.end(event.name.clark)
                if not open_names:
                    root_closed = True

            elif event.type is EventType.TEXT:
                if open_names:
                    builder.data(event.text or "")
                elif event.text and event.text.strip():
                    raise ParseError(
                        "Text outside the root element", event.line, event.column
                    )

        if open_names:
            unclosed = open_names[-1]
            raise ParseError(
                f"Element {unclosed.name.qname} is never closed",
                unclosed.line,
                unclosed.column,
            )
        if not root_closed:
            raise ParseError("Document has no root element", 1, 1)

        tree = etree.ElementTree(builder.close())
        late_lines = {tree.getpath(element): line for element, line in late_elements}
        self.logger.debug(
            "Element tree built",
            extra={"element_count": element_count, "late_line_count": len(late_lines)},
        )
        return LocatedTree(tree, late_lines)

    @staticmethod
    def _nsmap(event: ParseEvent):
        # lxml rejects empty URIs and manages the xml prefix itself
        return {
            prefix: uri
            for prefix, uri in event.namespaces
            if uri and uri != XML_NAMESPACE and prefix != "xml"
        }


def build_tree(stream: ParseEventStream, correlation_id: Optional[str] = None) -> "etree._ElementTree":
    """Build an lxml element tree from ``stream``."""
    return EventTreeBuilder(correlation_id).build(stream)
