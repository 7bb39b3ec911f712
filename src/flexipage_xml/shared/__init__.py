"""Shared utilities for flexipage XML processing.

This module provides the error hierarchy, configuration objects, result types
and logging helpers used across all pipeline stages.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParsingConfig,
    PipelineConfig,
    SerializationConfig,
    ValidationConfig,
)
from .errors import (
    FlexipageXMLError,
    ParseError,
    SchemaCompileError,
    SerializationError,
)
from .logging import (
    CorrelationAdapter,
    configure_logging,
    get_logger,
    stage_timer,
)
from .result import (
    DeserializationResult,
    StageTimings,
    ValidationEvent,
    ValidationSeverity,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "ParsingConfig",
    "PipelineConfig",
    "SerializationConfig",
    "ValidationConfig",
    "FlexipageXMLError",
    "ParseError",
    "SchemaCompileError",
    "SerializationError",
    "CorrelationAdapter",
    "configure_logging",
    "get_logger",
    "stage_timer",
    "DeserializationResult",
    "StageTimings",
    "ValidationEvent",
    "ValidationSeverity",
]
