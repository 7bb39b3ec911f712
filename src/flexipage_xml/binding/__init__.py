"""Typed model, declarative bindings, deserializer and serializer."""

from .deserializer import ValidatingDeserializer, deserialize_stream
from .mapping import (
    DOCUMENT_BINDING,
    ROOT_ELEMENT,
    ClassBinding,
    ElementBinding,
    bind_element,
)
from .model import Document, Property, PropertyGroup
from .serializer import Serializer, serialize_document

__all__ = [
    "ValidatingDeserializer",
    "deserialize_stream",
    "DOCUMENT_BINDING",
    "ROOT_ELEMENT",
    "ClassBinding",
    "ElementBinding",
    "bind_element",
    "Document",
    "Property",
    "PropertyGroup",
    "Serializer",
    "serialize_document",
]
