"""Public pipeline API."""

from .pipeline import (
    PipelineResult,
    RoundTripPipeline,
    bundled_resource,
    deserialize,
    format_event,
    load_schema,
    parse,
    parse_file,
    round_trip,
    serialize,
)

__all__ = [
    "PipelineResult",
    "RoundTripPipeline",
    "bundled_resource",
    "deserialize",
    "format_event",
    "load_schema",
    "parse",
    "parse_file",
    "round_trip",
    "serialize",
]
