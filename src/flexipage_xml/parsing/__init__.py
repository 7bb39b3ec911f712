"""Namespace-tolerant XML parsing.

Key Components:
    NamespaceTolerantParser: parses XML into a ParseEventStream
    NamespaceContext: per-document prefix resolution with synthesized URIs
    ParseEvent: single start/end/text event with resolved names
"""

from .events import Attribute, EventType, ParseEvent, ParseEventStream, QualifiedName
from .namespaces import XML_NAMESPACE, NamespaceContext, split_qname
from .parser import NamespaceTolerantParser, parse_events

__all__ = [
    "Attribute",
    "EventType",
    "ParseEvent",
    "ParseEventStream",
    "QualifiedName",
    "XML_NAMESPACE",
    "NamespaceContext",
    "split_qname",
    "NamespaceTolerantParser",
    "parse_events",
]
