"""Flexipage XML.

Loads flexipage XML documents whose component prefixes may be undeclared,
validates them against an XSD without ever aborting on schema mismatches,
maps them onto a typed object tree, and renders that tree back to XML.

Progressive API Disclosure:
- Level 1: Simple functions - load_schema(), deserialize(), serialize(), round_trip()
- Level 2: Configured pipeline - RoundTripPipeline class with PipelineConfig
"""

__version__ = "0.1.0"
__author__ = "Flexipage XML Team"

from .api import (
    PipelineResult,
    RoundTripPipeline,
    deserialize,
    load_schema,
    parse,
    round_trip,
    serialize,
)
from .binding import Document, Property, PropertyGroup
from .shared import (
    DeserializationResult,
    FlexipageXMLError,
    ParseError,
    PipelineConfig,
    SchemaCompileError,
    SerializationError,
    ValidationEvent,
    ValidationSeverity,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple pipeline functions
    "load_schema",
    "parse",
    "deserialize",
    "serialize",
    "round_trip",

    # Level 2: Configured pipeline
    "RoundTripPipeline",
    "PipelineConfig",

    # Typed model and results
    "Document",
    "Property",
    "PropertyGroup",
    "DeserializationResult",
    "PipelineResult",
    "ValidationEvent",
    "ValidationSeverity",

    # Errors
    "FlexipageXMLError",
    "ParseError",
    "SchemaCompileError",
    "SerializationError",
]
