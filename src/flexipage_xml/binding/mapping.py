"""Declarative element and attribute bindings for flexipage documents.

Each table maps an XML name to the model field it populates. Tables are built
once at import time; the deserializer consults them by name, so child order
in the source does not matter and unknown names are skipped.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from lxml import etree

from flexipage_xml.shared import get_logger

from .model import Document, Property, PropertyGroup

ROOT_ELEMENT = "Flexipage"
PROPERTY_GROUP_ELEMENT = "pageProperties"
PROPERTY_ELEMENT = "pageProperty"
NAME_ATTRIBUTE = "name"
VALUE_ATTRIBUTE = "value"

logger = get_logger(__name__, component="binding")


@dataclass(frozen=True)
class ElementBinding:
    """Binds a child element name to a model field.

    ``repeated`` fields collect every occurrence, in order, into a tuple;
    single fields keep the last occurrence.
    """

    field: str
    bind: Callable[["etree._Element"], Any]
    repeated: bool = False


@dataclass(frozen=True)
class ClassBinding:
    """Element and attribute tables for one model class."""

    factory: Callable[..., Any]
    elements: Mapping[str, ElementBinding]
    attributes: Mapping[str, str]


def bind_element(element: "etree._Element", binding: ClassBinding) -> Any:
    """Populate a model object from ``element`` using its binding tables."""
    fields: Dict[str, Any] = {}
    repeated: Dict[str, List[Any]] = {
        child.field: [] for child in binding.elements.values() if child.repeated
    }

    for attr_name, field_name in binding.attributes.items():
        value = element.get(attr_name)
        if value is not None:
            fields[field_name] = value

    for child in element:
        if not isinstance(child.tag, str):
            continue
        child_binding = binding.elements.get(child.tag)
        if child_binding is None:
            logger.debug("Ignoring unrecognized element", extra={"tag": child.tag})
            continue
        value = child_binding.bind(child)
        if child_binding.repeated:
            repeated[child_binding.field].append(value)
        else:
            fields[child_binding.field] = value

    for field_name, values in repeated.items():
        fields[field_name] = tuple(values)
    return binding.factory(**fields)


def _binder(binding: ClassBinding) -> Callable[["etree._Element"], Any]:
    return lambda element: bind_element(element, binding)


PROPERTY_BINDING = ClassBinding(
    factory=Property,
    elements=MappingProxyType({}),
    attributes=MappingProxyType({
        NAME_ATTRIBUTE: "name",
        VALUE_ATTRIBUTE: "value",
    }),
)

PROPERTY_GROUP_BINDING = ClassBinding(
    factory=PropertyGroup,
    elements=MappingProxyType({
        PROPERTY_ELEMENT: ElementBinding("properties", _binder(PROPERTY_BINDING), repeated=True),
    }),
    attributes=MappingProxyType({}),
)

DOCUMENT_BINDING = ClassBinding(
    factory=Document,
    elements=MappingProxyType({
        PROPERTY_GROUP_ELEMENT: ElementBinding("property_group", _binder(PROPERTY_GROUP_BINDING)),
    }),
    attributes=MappingProxyType({}),
)

# Root element name -> binding of the object it produces
ROOT_BINDINGS: Mapping[str, ClassBinding] = MappingProxyType({
    ROOT_ELEMENT: DOCUMENT_BINDING,
})


def binding_for_root(tag: str) -> Optional[ClassBinding]:
    return ROOT_BINDINGS.get(tag)
