"""Validating deserializer: parse events -> validation events + typed tree.

Validation is advisory. Every schema event, whatever its severity, is
appended to an accumulator that is returned next to a best-effort
:class:`~flexipage_xml.binding.model.Document`; only structural problems in
the event stream raise :class:`~flexipage_xml.shared.errors.ParseError`.
"""

import time
from typing import Dict, List, Optional

from lxml import etree

from flexipage_xml.parsing.events import ParseEventStream
from flexipage_xml.schema import CompiledSchema
from flexipage_xml.shared import (
    DeserializationResult,
    ValidationConfig,
    ValidationEvent,
    ValidationSeverity,
    get_logger,
)
from flexipage_xml.tree import EventTreeBuilder, LocatedTree

from .mapping import ROOT_ELEMENT, bind_element, binding_for_root
from .model import Document

MS_PER_SECOND = 1000


class ValidatingDeserializer:
    """Maps a parse event stream onto the typed model, collecting schema events.

    Args:
        schema: Compiled schema to validate against; ``None`` skips validation
        config: Validation settings
        correlation_id: Optional correlation ID for request tracking
    """

    def __init__(
        self,
        schema: Optional[CompiledSchema] = None,
        config: Optional[ValidationConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.schema = schema
        self.config = config or ValidationConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "deserializer")
        self._tree_builder = EventTreeBuilder(correlation_id)

    def deserialize(self, stream: ParseEventStream) -> DeserializationResult:
        """Validate and bind a parsed document.

        Raises:
            ParseError: The event stream is not a single balanced element tree
        """
        start_time = time.perf_counter()
        located = self._tree_builder.build_located(stream)
        events: List[ValidationEvent] = []

        if self.schema is not None and self.config.enabled:
            self._collect_schema_events(located, stream, events)

        document = self._bind(located.tree.getroot(), stream, events)
        processing_time = (time.perf_counter() - start_time) * MS_PER_SECOND

        if events:
            self.logger.warning(
                "Document deserialized with validation events",
                extra={"event_count": len(events), "processing_time_ms": processing_time},
            )
        else:
            self.logger.info(
                "Document deserialized",
                extra={
                    "property_count": document.property_count,
                    "processing_time_ms": processing_time,
                },
            )
        return DeserializationResult(document, tuple(events), processing_time)

    def _collect_schema_events(
        self,
        located: LocatedTree,
        stream: ParseEventStream,
        events: List[ValidationEvent],
    ) -> None:
        columns: Dict[int, int] = stream.element_columns()
        for event in self.schema.validate(located.tree, located.late_lines):
            if event.column == 0 and event.line in columns:
                event = ValidationEvent(
                    event.line, columns[event.line], event.message, event.severity
                )
            events.append(event)

    def _bind(
        self,
        root: "etree._Element",
        stream: ParseEventStream,
        events: List[ValidationEvent],
    ) -> Document:
        binding = binding_for_root(root.tag)
        if binding is None:
            root_event = stream.root
            events.append(ValidationEvent(
                line=root_event.line if root_event else 0,
                column=root_event.column if root_event else 0,
                message=f"Unexpected root element {root.tag}, expected {ROOT_ELEMENT}",
                severity=ValidationSeverity.ERROR,
            ))
            return Document()
        return bind_element(root, binding)


def deserialize_stream(
    stream: ParseEventStream,
    schema: Optional[CompiledSchema] = None,
    correlation_id: Optional[str] = None,
) -> DeserializationResult:
    """Deserialize ``stream`` with a default-configured deserializer."""
    return ValidatingDeserializer(schema, correlation_id=correlation_id).deserialize(stream)
