"""Structured logging utilities for flexipage XML processing.

Every pipeline stage logs through a correlation-aware adapter so records
carry the stage (``component``) and an optional ``correlation_id`` that ties
the schema, parse, deserialize and serialize records of one run together.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple

LOG_FORMAT = "%(asctime)s %(levelname)s [%(component)s] %(name)s: %(message)s"


class CorrelationAdapter(logging.LoggerAdapter):
    """Logger adapter that merges correlation info into each record's extra."""

    def __init__(
        self,
        logger: logging.Logger,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None,
    ) -> None:
        super().__init__(logger, {
            "component": component or logger.name.split(".")[-1],
            "correlation_id": correlation_id,
        })

    @property
    def component(self) -> str:
        return self.extra["component"]

    @property
    def correlation_id(self) -> Optional[str]:
        return self.extra["correlation_id"]

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        combined: Dict[str, Any] = dict(self.extra)
        if kwargs.get("extra"):
            combined.update(kwargs["extra"])
        kwargs["extra"] = combined
        return msg, kwargs

    def bind(self, component: str) -> "CorrelationAdapter":
        """Return an adapter for another component sharing this correlation ID."""
        return CorrelationAdapter(self.logger, self.correlation_id, component)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None,
) -> CorrelationAdapter:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for request tracking
        component: Component name for structured logging

    Returns:
        CorrelationAdapter wrapping the named logger
    """
    return CorrelationAdapter(logging.getLogger(name), correlation_id, component)


class _ComponentDefaults(logging.Filter):
    """Supply ``component`` for records logged outside an adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name.split(".")[-1]
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_ComponentDefaults())
    logging.basicConfig(level=getattr(logging, level), handlers=[handler], force=True)


@contextmanager
def stage_timer(logger: CorrelationAdapter, stage: str) -> Iterator[Dict[str, float]]:
    """Time a pipeline stage and log its duration.

    Yields a dict whose ``elapsed_ms`` key is filled in when the block exits,
    including when it exits with an exception.
    """
    timing = {"elapsed_ms": 0.0}
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing["elapsed_ms"] = (time.perf_counter() - start) * 1000
        logger.debug(
            "Stage finished",
            extra={"stage": stage, "processing_time_ms": timing["elapsed_ms"]},
        )
