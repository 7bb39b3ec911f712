"""Parse events produced by the namespace-tolerant parser."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, Optional, Tuple


class EventType(Enum):
    """Kinds of parse events."""

    START_ELEMENT = auto()
    END_ELEMENT = auto()
    TEXT = auto()


@dataclass(frozen=True)
class QualifiedName:
    """Namespace-resolved element or attribute name.

    ``namespace`` is ``""`` for names in no namespace.
    """

    local: str
    namespace: str = ""
    prefix: Optional[str] = None

    @property
    def clark(self) -> str:
        """Name in ``{namespace}local`` notation as used by lxml."""
        if self.namespace:
            return f"{{{self.namespace}}}{self.local}"
        return self.local

    @property
    def qname(self) -> str:
        """Name as written in the source."""
        if self.prefix:
            return f"{self.prefix}:{self.local}"
        return self.local

    def __str__(self) -> str:
        return self.clark


@dataclass(frozen=True)
class Attribute:
    name: QualifiedName
    value: str


@dataclass(frozen=True)
class ParseEvent:
    """Single event of the parse stream; positions are 1-based."""

    type: EventType
    line: int
    column: int
    name: Optional[QualifiedName] = None
    attributes: Tuple[Attribute, ...] = ()
    # Prefix bindings that come into scope at this element, declared or synthesized
    namespaces: Tuple[Tuple[Optional[str], str], ...] = ()
    text: Optional[str] = None

    def attribute(self, clark: str) -> Optional[str]:
        for attr in self.attributes:
            if attr.name.clark == clark:
                return attr.value
        return None


@dataclass(frozen=True)
class ParseEventStream:
    """Complete, ordered event stream for one document."""

    events: Tuple[ParseEvent, ...]
    synthesized_namespaces: Dict[str, str] = field(default_factory=dict)
    processing_time_ms: float = 0.0

    def __iter__(self) -> Iterator[ParseEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    @property
    def root(self) -> Optional[ParseEvent]:
        """The first START_ELEMENT event, if any."""
        for event in self.events:
            if event.type is EventType.START_ELEMENT:
                return event
        return None

    def element_columns(self) -> Dict[int, int]:
        """Map each line to the column of the first element starting on it."""
        columns: Dict[int, int] = {}
        for event in self.events:
            if event.type is EventType.START_ELEMENT:
                columns.setdefault(event.line, event.column)
        return columns
