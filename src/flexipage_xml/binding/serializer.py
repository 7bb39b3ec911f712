"""Serializer: typed document tree -> XML bytes.

Rendering never fails on data shape; ``None`` fields are simply omitted. Only
failures of the output sink raise
:class:`~flexipage_xml.shared.errors.SerializationError`.
"""

from pathlib import Path
from typing import BinaryIO, Optional, Union

from lxml import etree

from flexipage_xml.shared import SerializationConfig, SerializationError, get_logger

from .mapping import (
    NAME_ATTRIBUTE,
    PROPERTY_ELEMENT,
    PROPERTY_GROUP_ELEMENT,
    ROOT_ELEMENT,
    VALUE_ATTRIBUTE,
)
from .model import Document, Property


class Serializer:
    """Renders :class:`Document` objects as XML."""

    def __init__(self, config: Optional[SerializationConfig] = None,
                 correlation_id: Optional[str] = None) -> None:
        self.config = config or SerializationConfig()
        self.logger = get_logger(__name__, correlation_id, "serializer")

    def to_element(self, document: Document) -> "etree._Element":
        """Build the lxml element for ``document``."""
        root = etree.Element(ROOT_ELEMENT)
        if document.property_group is not None:
            group = etree.SubElement(root, PROPERTY_GROUP_ELEMENT)
            for prop in document.property_group:
                self._append_property(group, prop)
        return root

    @staticmethod
    def _append_property(parent: "etree._Element", prop: Property) -> None:
        element = etree.SubElement(parent, PROPERTY_ELEMENT)
        if prop.name is not None:
            element.set(NAME_ATTRIBUTE, prop.name)
        if prop.value is not None:
            element.set(VALUE_ATTRIBUTE, prop.value)

    def to_bytes(self, document: Document) -> bytes:
        """Render ``document`` to XML bytes in the configured encoding."""
        config = self.config
        options = {
            "encoding": config.encoding,
            "pretty_print": config.pretty_print,
            "xml_declaration": config.xml_declaration,
        }
        if config.standalone is not None:
            options["standalone"] = config.standalone
        return etree.tostring(etree.ElementTree(self.to_element(document)), **options)

    def write(self, document: Document, sink: BinaryIO) -> int:
        """Write rendered XML to a binary sink.

        Returns:
            Number of bytes written

        Raises:
            SerializationError: The sink failed to accept the output
        """
        return self.emit(self.to_bytes(document), sink)

    def emit(self, payload: bytes, sink: BinaryIO) -> int:
        """Write already rendered XML to a binary sink."""
        try:
            sink.write(payload)
            if hasattr(sink, "flush"):
                sink.flush()
        except (OSError, ValueError) as e:
            self.logger.error("Failed to write serialized document", extra={"size_bytes": len(payload)})
            raise SerializationError(f"Failed to write serialized document: {e}") from e
        self.logger.info("Document serialized", extra={"size_bytes": len(payload)})
        return len(payload)

    def write_file(self, document: Document, path: Union[str, Path]) -> int:
        """Write rendered XML to ``path``, closing the file on every exit path."""
        try:
            with Path(path).open("wb") as sink:
                return self.write(document, sink)
        except OSError as e:
            raise SerializationError(f"Cannot write {path}: {e}") from e


def serialize_document(document: Document, config: Optional[SerializationConfig] = None) -> bytes:
    """Render ``document`` with a default-configured serializer."""
    return Serializer(config).to_bytes(document)
