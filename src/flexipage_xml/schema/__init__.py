"""XSD schema compilation and validation."""

from .loader import CompiledSchema, compile_schema, event_from_log_entry, load_schema

__all__ = [
    "CompiledSchema",
    "compile_schema",
    "event_from_log_entry",
    "load_schema",
]
