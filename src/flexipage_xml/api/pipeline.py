"""Pipeline API with progressive disclosure for flexipage XML round-trips.

Level 1 is a set of module functions (``load_schema``, ``parse``,
``deserialize``, ``serialize``, ``round_trip``); level 2 is the configured
:class:`RoundTripPipeline` class that holds a compiled schema for reuse.
"""

import io
from contextlib import contextmanager
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, TextIO, Tuple, Union

from flexipage_xml.binding import Document, Serializer, ValidatingDeserializer
from flexipage_xml.parsing import NamespaceTolerantParser, ParseEventStream
from flexipage_xml.schema import CompiledSchema
from flexipage_xml.schema import load_schema as _load_schema
from flexipage_xml.shared import (
    DeserializationResult,
    PipelineConfig,
    StageTimings,
    ValidationEvent,
    get_logger,
    stage_timer,
)

Source = Union[bytes, str, BinaryIO, TextIO, Path]

SCHEMA_RESOURCE = "schema.xsd"
SAMPLE_RESOURCE = "sample.xml"


@contextmanager
def bundled_resource(name: str) -> Iterator[BinaryIO]:
    """Open a resource shipped in the package's ``resources`` directory."""
    resource = resources.files("flexipage_xml") / "resources" / name
    with resource.open("rb") as stream:
        yield stream


@contextmanager
def _open_source(source: Source) -> Iterator[Union[BinaryIO, TextIO]]:
    """Yield a readable stream for ``source``, closing it if opened here.

    ``bytes`` and ``str`` are inline XML, as for
    :meth:`NamespaceTolerantParser.parse`; only a :class:`~pathlib.Path` is
    opened as a file.
    """
    if isinstance(source, Path):
        with source.open("rb") as stream:
            yield stream
    elif isinstance(source, bytes):
        yield io.BytesIO(source)
    elif isinstance(source, str):
        yield io.StringIO(source)
    else:
        yield source


def format_event(event: ValidationEvent) -> str:
    """Render a validation event as a ``[line:column] message`` line."""
    return event.format()


@dataclass
class PipelineResult:
    """Outcome of a full round-trip."""

    document: Document
    events: Tuple[ValidationEvent, ...]
    output: bytes
    timings: StageTimings = field(default_factory=StageTimings)

    @property
    def has_events(self) -> bool:
        return bool(self.events)

    def validation_report(self) -> str:
        """Report lines for collected events, empty when there are none."""
        return "\n".join(format_event(event) for event in self.events)


class RoundTripPipeline:
    """Configured parse -> validate -> map -> render pipeline.

    Examples:
        >>> pipeline = RoundTripPipeline()
        >>> schema = pipeline.use_bundled_schema()
        >>> result = pipeline.deserialize(b'<Flexipage/>')
        >>> result.is_valid
        True
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        schema: Optional[CompiledSchema] = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.schema = schema
        correlation_id = self.config.global_.correlation_id
        self.logger = get_logger(__name__, correlation_id, "pipeline")
        self.parser = NamespaceTolerantParser(self.config.parsing, correlation_id)
        self.serializer = Serializer(self.config.serialization, correlation_id)

    @property
    def correlation_id(self) -> Optional[str]:
        return self.config.global_.correlation_id

    def load_schema(self, source: Source) -> CompiledSchema:
        """Compile ``source`` and keep it for subsequent deserializations."""
        with _open_source(source) as stream:
            base_url = None
            if isinstance(source, Path):
                base_url = source.resolve().as_uri()
            self.schema = _load_schema(stream.read(), base_url, self.correlation_id)
        return self.schema

    def use_bundled_schema(self) -> CompiledSchema:
        with bundled_resource(SCHEMA_RESOURCE) as stream:
            self.schema = _load_schema(stream.read(), correlation_id=self.correlation_id)
        return self.schema

    def parse(self, source: Source) -> ParseEventStream:
        with _open_source(source) as stream:
            return self.parser.parse(stream)

    def deserialize(self, source: Union[Source, ParseEventStream]) -> DeserializationResult:
        """Parse (unless given a stream) and deserialize a document."""
        stream = source if isinstance(source, ParseEventStream) else self.parse(source)
        deserializer = ValidatingDeserializer(
            self.schema, self.config.validation, self.correlation_id
        )
        return deserializer.deserialize(stream)

    def serialize(self, document: Document, sink: Optional[BinaryIO] = None) -> bytes:
        """Render ``document``; also write it to ``sink`` when given."""
        payload = self.serializer.to_bytes(document)
        if sink is not None:
            self.serializer.emit(payload, sink)
        return payload

    def round_trip(
        self,
        document_source: Source,
        schema_source: Optional[Source] = None,
        sink: Optional[BinaryIO] = None,
    ) -> PipelineResult:
        """Run the whole pipeline on one document.

        Args:
            document_source: XML document
            schema_source: XSD to compile first; the held schema is used if None
            sink: Optional binary sink for the rendered XML

        Raises:
            SchemaCompileError: The schema is malformed
            ParseError: The document is malformed
            SerializationError: The sink failed
        """
        timings = StageTimings()
        if schema_source is not None:
            with stage_timer(self.logger, "schema") as timing:
                self.load_schema(schema_source)
            timings.schema_ms = timing["elapsed_ms"]

        with stage_timer(self.logger, "parse") as timing:
            stream = self.parse(document_source)
        timings.parse_ms = timing["elapsed_ms"]

        with stage_timer(self.logger, "deserialize") as timing:
            result = self.deserialize(stream)
        timings.deserialize_ms = timing["elapsed_ms"]

        with stage_timer(self.logger, "serialize") as timing:
            output = self.serialize(result.document, sink)
        timings.serialize_ms = timing["elapsed_ms"]

        self.logger.info(
            "Round-trip finished",
            extra={"event_count": len(result.events), "total_ms": timings.total_ms},
        )
        return PipelineResult(result.document, result.events, output, timings)


def load_schema(source: Source) -> CompiledSchema:
    """Compile an XSD from bytes, text, a stream or a :class:`~pathlib.Path`."""
    return RoundTripPipeline().load_schema(source)


def parse(source: Source, config: Optional[PipelineConfig] = None) -> ParseEventStream:
    """Parse XML bytes, text, a stream or a :class:`~pathlib.Path` into parse events."""
    return RoundTripPipeline(config).parse(source)


def parse_file(path: Union[str, Path], config: Optional[PipelineConfig] = None) -> ParseEventStream:
    """Parse the file at ``path``; unlike :func:`parse`, a ``str`` is a path."""
    return RoundTripPipeline(config).parse(Path(path))


def deserialize(
    source: Union[Source, ParseEventStream],
    schema: Optional[CompiledSchema] = None,
    config: Optional[PipelineConfig] = None,
) -> DeserializationResult:
    """Deserialize a document, validating it against ``schema`` when given.

    Examples:
        >>> result = deserialize(b'<Flexipage><pageProperties>'
        ...                      b'<pageProperty name="x" value="1"/>'
        ...                      b'</pageProperties></Flexipage>')
        >>> [(p.name, p.value) for p in result.document.property_group]
        [('x', '1')]
    """
    return RoundTripPipeline(config, schema).deserialize(source)


def serialize(
    document: Document,
    sink: Optional[BinaryIO] = None,
    config: Optional[PipelineConfig] = None,
) -> bytes:
    """Render ``document`` to XML bytes, optionally writing them to ``sink``."""
    return RoundTripPipeline(config).serialize(document, sink)


def round_trip(
    document_source: Optional[Source] = None,
    schema_source: Optional[Source] = None,
    sink: Optional[BinaryIO] = None,
    config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    """Round-trip a document; defaults to the bundled sample and schema."""
    pipeline = RoundTripPipeline(config)
    if schema_source is None:
        pipeline.use_bundled_schema()
    if document_source is None:
        with bundled_resource(SAMPLE_RESOURCE) as stream:
            return pipeline.round_trip(stream.read(), schema_source, sink)
    return pipeline.round_trip(document_source, schema_source, sink)
