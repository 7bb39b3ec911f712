"""Typed object tree for flexipage documents.

All types are frozen: a document is built once by the deserializer and handed
unchanged to the serializer. Text that XML cannot carry is rejected on
construction, so every document can be rendered.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

# Anything outside the XML 1.0 Char production
_NON_XML_CHAR = re.compile("[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


@dataclass(frozen=True)
class Property:
    """A ``<pageProperty>``; ``None`` means the attribute was absent."""

    name: Optional[str] = None
    value: Optional[str] = None

    def __post_init__(self) -> None:
        """Reject text that cannot appear in an XML attribute."""
        for field_name in ("name", "value"):
            text = getattr(self, field_name)
            if text is None:
                continue
            match = _NON_XML_CHAR.search(text)
            if match:
                raise ValueError(
                    f"Property {field_name} contains a character not allowed in XML: "
                    f"U+{ord(match.group()):04X} at index {match.start()}"
                )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class PropertyGroup:
    """Ordered ``<pageProperties>`` container; order follows the source."""

    properties: Tuple[Property, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable but store an immutable tuple
        if not isinstance(self.properties, tuple):
            object.__setattr__(self, "properties", tuple(self.properties))

    def __iter__(self) -> Iterator[Property]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def get(self, name: str) -> Optional[Property]:
        """First property with the given name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"properties": [prop.to_dict() for prop in self.properties]}


@dataclass(frozen=True)
class Document:
    """Root ``<Flexipage>`` element."""

    property_group: Optional[PropertyGroup] = None

    @classmethod
    def of(cls, properties: Iterable[Tuple[Optional[str], Optional[str]]]) -> "Document":
        """Build a document with a property group from ``(name, value)`` pairs."""
        return cls(PropertyGroup(tuple(Property(name, value) for name, value in properties)))

    @property
    def property_count(self) -> int:
        if self.property_group is None:
            return 0
        return len(self.property_group)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property_group": (
                None if self.property_group is None else self.property_group.to_dict()
            )
        }
