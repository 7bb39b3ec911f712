"""Result objects and validation diagnostics for flexipage deserialization.

Validation is advisory: schema mismatches are reported as
:class:`ValidationEvent` entries bundled with the best-effort document in a
:class:`DeserializationResult`, never raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from flexipage_xml.binding.model import Document


class ValidationSeverity(Enum):
    """Severity levels reported by the schema validator."""

    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass(frozen=True)
class ValidationEvent:
    """Single recorded deviation from the schema."""

    line: int
    column: int
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR

    def __post_init__(self) -> None:
        """Validate event fields."""
        if not self.message:
            raise ValueError("Validation event message cannot be empty")
        if self.line < 0 or self.column < 0:
            raise ValueError("Validation event position must be >= 0")

    def format(self) -> str:
        """Render the event as a ``[line:column] message`` report line."""
        return f"[{self.line}:{self.column}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class DeserializationResult:
    """Best-effort document bundled with the collected validation events.

    A non-empty ``events`` tuple does not mean the call failed; callers must
    inspect it to decide whether to trust ``document``.
    """

    document: "Document"
    events: Tuple[ValidationEvent, ...] = ()
    processing_time_ms: float = 0.0

    @property
    def has_events(self) -> bool:
        """Whether any validation event was collected."""
        return bool(self.events)

    @property
    def is_valid(self) -> bool:
        """Whether the input matched the schema without any event."""
        return not self.events

    def events_by_severity(self, severity: ValidationSeverity) -> List[ValidationEvent]:
        return [event for event in self.events if event.severity is severity]

    def format_events(self) -> str:
        """Render all events, one report line each."""
        return "\n".join(event.format() for event in self.events)

    def summary(self) -> Dict[str, Any]:
        """Summarize the result for reporting."""
        counts = {
            severity.value: len(self.events_by_severity(severity))
            for severity in ValidationSeverity
        }
        return {
            "valid": self.is_valid,
            "event_count": len(self.events),
            "events_by_severity": counts,
            "property_count": self.document.property_count,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class StageTimings:
    """Wall-clock duration of each pipeline stage in milliseconds."""

    schema_ms: Optional[float] = None
    parse_ms: float = 0.0
    deserialize_ms: float = 0.0
    serialize_ms: float = 0.0
    extra: Dict[str, float] = field(default_factory=dict)

    @property
    def total_ms(self) -> float:
        return (
            (self.schema_ms or 0.0)
            + self.parse_ms
            + self.deserialize_ms
            + self.serialize_ms
            + sum(self.extra.values())
        )
