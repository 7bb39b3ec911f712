"""Deserialize/serialize round-trip behaviour."""

import pytest

from flexipage_xml.binding import Document, Property, PropertyGroup, Serializer, ValidatingDeserializer
from flexipage_xml.parsing import parse_events
from flexipage_xml.shared import PipelineConfig, SerializationConfig


@pytest.mark.parametrize(
    "document",
    [
        Document(),
        Document(PropertyGroup(())),
        Document.of([("masterLabel", "Account Record Page")]),
        Document.of([("a", "1"), ("b", ""), ("c", "x & <y>")]),
        Document(PropertyGroup((Property("only_name", None), Property(None, "only_value")))),
    ],
    ids=["absent-group", "empty-group", "one", "many", "partial"],
)
@pytest.mark.parametrize(
    "config",
    [SerializationConfig(), PipelineConfig.compact().serialization],
    ids=["pretty", "compact"],
)
def test_document_survives_round_trip(document, config):
    payload = Serializer(config).to_bytes(document)
    result = ValidatingDeserializer().deserialize(parse_events(payload))
    assert result.document == document


def test_source_round_trip_is_stable(scenario_xml, schema):
    compact = PipelineConfig.compact().serialization
    first = ValidatingDeserializer(schema).deserialize(parse_events(scenario_xml))
    payload = Serializer(compact).to_bytes(first.document)
    assert payload == scenario_xml
    second = ValidatingDeserializer(schema).deserialize(parse_events(payload))
    assert second.document == first.document
    assert second.events == ()
