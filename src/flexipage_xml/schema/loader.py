"""Schema loader: compiles XSD source into a reusable, thread-safe schema.

The schema document is read with entity resolution, DTD loading and network
access disabled. Compilation failures surface as
:class:`~flexipage_xml.shared.errors.SchemaCompileError`.
"""

import threading
from pathlib import Path
from typing import BinaryIO, Mapping, Optional, Tuple, Union

from lxml import etree

from flexipage_xml.shared import (
    SchemaCompileError,
    ValidationEvent,
    ValidationSeverity,
    get_logger,
)

SchemaSource = Union[bytes, str, BinaryIO, Path]

_SEVERITIES = {
    etree.ErrorLevels.WARNING: ValidationSeverity.WARNING,
    etree.ErrorLevels.ERROR: ValidationSeverity.ERROR,
    etree.ErrorLevels.FATAL: ValidationSeverity.FATAL,
}


def _hardened_parser(encoding: Optional[str] = None) -> etree.XMLParser:
    return etree.XMLParser(
        encoding=encoding,
        resolve_entities=False,
        load_dtd=False,
        dtd_validation=False,
        no_network=True,
        huge_tree=False,
    )


def _entry_line(entry: "etree._LogEntry", late_lines: Mapping[str, int]) -> int:
    path = entry.path
    if late_lines and path:
        # Attribute errors point at the attribute node
        element_path = path.rsplit("/@", 1)[0]
        if element_path in late_lines:
            return late_lines[element_path]
    return max(entry.line or 0, 0)


def event_from_log_entry(
    entry: "etree._LogEntry", late_lines: Optional[Mapping[str, int]] = None
) -> ValidationEvent:
    """Convert an lxml error log entry into a validation event.

    ``late_lines`` maps element paths to source lines lxml could not store
    on the elements themselves.
    """
    return ValidationEvent(
        line=_entry_line(entry, late_lines or {}),
        column=max(entry.column or 0, 0),
        message=entry.message.strip() or "Schema validation failed",
        severity=_SEVERITIES.get(entry.level, ValidationSeverity.ERROR),
    )


class CompiledSchema:
    """Immutable compiled XSD schema, safe for concurrent read-only use.

    lxml keeps the last validation's error log on the validator object, so
    validation runs under a lock and each call returns its own events.
    """

    def __init__(self, xml_schema: etree.XMLSchema, source_name: Optional[str] = None) -> None:
        self._schema = xml_schema
        self._lock = threading.Lock()
        self.source_name = source_name

    def validate(
        self,
        tree: Union["etree._ElementTree", "etree._Element"],
        late_lines: Optional[Mapping[str, int]] = None,
    ) -> Tuple[ValidationEvent, ...]:
        """Validate a tree, returning every event in report order.

        Never raises for schema mismatches. ``late_lines`` is the
        :attr:`~flexipage_xml.tree.LocatedTree.late_lines` of ``tree``.
        """
        with self._lock:
            self._schema.validate(tree)
            entries = list(self._schema.error_log)
        return tuple(event_from_log_entry(entry, late_lines) for entry in entries)

    def __repr__(self) -> str:
        return f"CompiledSchema(source_name={self.source_name!r})"


def compile_schema(data: Union[bytes, str], base_url: Optional[str] = None,
                   correlation_id: Optional[str] = None) -> CompiledSchema:
    """Compile schema bytes into a :class:`CompiledSchema`.

    Args:
        data: Complete XSD document; text is parsed as decoded characters
        base_url: Location used to resolve relative ``xs:include``/``xs:import``
        correlation_id: Optional correlation ID for request tracking

    Raises:
        SchemaCompileError: Schema is not well-formed XML or not a valid XSD
    """
    logger = get_logger(__name__, correlation_id, "schema_loader")
    parser = _hardened_parser()
    if isinstance(data, str):
        # The declared encoding no longer applies to decoded text
        data = data.encode("utf-8")
        parser = _hardened_parser("utf-8")

    try:
        schema_doc = etree.fromstring(data, parser, base_url=base_url)
    except etree.XMLSyntaxError as e:
        line, column = e.position
        logger.warning("Schema source is not well-formed", extra={"line": line})
        raise SchemaCompileError(
            f"Schema is not well-formed: {e.msg}", line, column
        ) from e

    try:
        xml_schema = etree.XMLSchema(schema_doc)
    except etree.XMLSchemaParseError as e:
        last = e.error_log.last_error
        line = last.line if last is not None else None
        column = last.column if last is not None else None
        logger.warning("Schema grammar is invalid", extra={"line": line})
        raise SchemaCompileError(f"Invalid schema: {e}", line, column) from e

    logger.info("Schema compiled", extra={"base_url": base_url, "size_bytes": len(data)})
    return CompiledSchema(xml_schema, base_url)


def load_schema(source: SchemaSource, base_url: Optional[str] = None,
                correlation_id: Optional[str] = None) -> CompiledSchema:
    """Load and compile a schema from bytes, text, a stream or a path.

    A ``str`` is XSD text; pass a :class:`~pathlib.Path` for a file. Paths
    are opened right before reading and closed on every exit path;
    caller-supplied streams are read fully but left open.
    """
    if isinstance(source, Path):
        path = source
        with path.open("rb") as stream:
            data = stream.read()
        return compile_schema(data, base_url or path.resolve().as_uri(), correlation_id)
    if isinstance(source, (bytes, str)):
        return compile_schema(source, base_url, correlation_id)
    return compile_schema(source.read(), base_url, correlation_id)
