"""Exception hierarchy for flexipage XML processing.

Structural failures (malformed schema, malformed XML, broken output sink) are
raised as exceptions. Schema-content mismatches are never raised; they are
collected as :class:`~flexipage_xml.shared.result.ValidationEvent` values.
"""

from typing import Optional


class FlexipageXMLError(Exception):
    """Base class for all errors raised by this package."""


class LocatedError(FlexipageXMLError):
    """Error that may carry a 1-based source position."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"[{self.line}] {self.message}"
        return f"[{self.line}:{self.column}] {self.message}"


class SchemaCompileError(LocatedError):
    """Raised when schema source is not well-formed or not a valid XSD."""


class ParseError(LocatedError):
    """Raised when an XML document is not well-formed.

    Also raised for structurally invalid event streams (mismatched or
    unclosed elements) and for forbidden constructs such as entity
    declarations.
    """


class SerializationError(FlexipageXMLError):
    """Raised when rendered XML cannot be written to the output sink."""
