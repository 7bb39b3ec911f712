"""Tests for the pipeline API."""

import io
import logging

import pytest

from flexipage_xml import api
from flexipage_xml.api.pipeline import SCHEMA_RESOURCE, bundled_resource
from flexipage_xml.binding import Document
from flexipage_xml.parsing import ParseEventStream
from flexipage_xml.shared import (
    ParseError,
    PipelineConfig,
    SchemaCompileError,
    SerializationError,
)

INVALID_XML = (
    b'<Flexipage>\n'
    b'  <pageProperties>\n'
    b'    <pageProperty name="1 bad" value="v"/>\n'
    b'  </pageProperties>\n'
    b'</Flexipage>'
)


class TestModuleFunctions:
    """Test the level 1 function API."""

    def test_round_trip_defaults(self):
        result = api.round_trip()
        assert not result.has_events
        assert result.document.property_count == 3
        assert result.output.startswith(b"<?xml")
        assert result.validation_report() == ""

    def test_round_trip_to_sink(self, scenario_xml):
        sink = io.BytesIO()
        result = api.round_trip(scenario_xml, sink=sink)
        assert sink.getvalue() == result.output
        assert b'name="y"' in result.output

    def test_round_trip_reports_events(self):
        result = api.round_trip(INVALID_XML)
        assert result.has_events
        assert result.validation_report().startswith("[3:")
        assert result.document.property_group.get("1 bad") is not None

    def test_round_trip_with_schema_source(self, scenario_xml):
        with bundled_resource(SCHEMA_RESOURCE) as stream:
            schema_bytes = stream.read()
        result = api.round_trip(scenario_xml, schema_source=schema_bytes)
        assert result.timings.schema_ms is not None
        assert result.timings.total_ms >= result.timings.parse_ms

    def test_round_trip_from_path(self, tmp_path, scenario_xml):
        path = tmp_path / "page.xml"
        path.write_bytes(scenario_xml)
        result = api.round_trip(path)
        assert result.document.property_count == 2

    def test_parse(self, scenario_xml):
        assert isinstance(api.parse(scenario_xml), ParseEventStream)

    def test_parse_file(self, tmp_path, scenario_xml):
        path = tmp_path / "page.xml"
        path.write_bytes(scenario_xml)
        assert api.parse_file(str(path)).root.name.local == "Flexipage"

    def test_deserialize_without_schema(self):
        result = api.deserialize(INVALID_XML)
        assert result.events == ()

    def test_deserialize_with_schema(self, schema):
        result = api.deserialize(INVALID_XML, schema)
        assert result.has_events

    def test_serialize_compact(self):
        payload = api.serialize(Document(), config=PipelineConfig.compact())
        assert payload == b"<Flexipage/>"

    def test_load_schema(self):
        with bundled_resource(SCHEMA_RESOURCE) as stream:
            assert api.load_schema(stream.read()) is not None


class TestErrorsPropagate:
    """Test that fatal problems raise instead of producing results."""

    def test_malformed_document(self):
        with pytest.raises(ParseError):
            api.round_trip(b"<Flexipage><pageProperties></Flexipage>")

    def test_malformed_schema(self, scenario_xml):
        with pytest.raises(SchemaCompileError):
            api.round_trip(scenario_xml, schema_source=b"<xs:schema")

    def test_missing_document(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            api.round_trip(tmp_path / "missing.xml")

    def test_sink_failure(self, scenario_xml):
        sink = io.BytesIO()
        sink.close()
        with pytest.raises(SerializationError):
            api.round_trip(scenario_xml, sink=sink)


class TestRoundTripPipeline:
    """Test the level 2 configured pipeline."""

    def test_schema_is_reused(self, scenario_xml):
        pipeline = api.RoundTripPipeline()
        schema = pipeline.use_bundled_schema()
        pipeline.round_trip(scenario_xml)
        assert pipeline.schema is schema

    def test_deserialize_accepts_event_stream(self, scenario_xml):
        pipeline = api.RoundTripPipeline()
        stream = pipeline.parse(scenario_xml)
        assert pipeline.deserialize(stream).document.property_count == 2

    def test_configured_authority(self):
        config = PipelineConfig().override(parsing__namespace_authority="acme")
        pipeline = api.RoundTripPipeline(config)
        stream = pipeline.parse(b"<r><sfa:a/></r>")
        assert stream.synthesized_namespaces == {"sfa": "urn:acme:sfa"}

    def test_validation_disabled(self, schema):
        config = PipelineConfig().override(validation__enabled=False)
        pipeline = api.RoundTripPipeline(config, schema)
        assert pipeline.deserialize(INVALID_XML).events == ()

    def test_correlation_id_in_records(self, caplog, scenario_xml):
        config = PipelineConfig().override(global___correlation_id="run-42")
        pipeline = api.RoundTripPipeline(config)
        with caplog.at_level(logging.DEBUG, logger="flexipage_xml"):
            pipeline.round_trip(scenario_xml)

        pipeline_records = [r for r in caplog.records if getattr(r, "component", None) == "pipeline"]
        assert pipeline_records
        assert all(r.correlation_id == "run-42" for r in pipeline_records)
        stages = {r.stage for r in pipeline_records if hasattr(r, "stage")}
        assert stages == {"parse", "deserialize", "serialize"}

    def test_concurrent_pipelines_share_schema(self, schema, scenario_xml):
        from concurrent.futures import ThreadPoolExecutor

        def run(xml):
            return api.RoundTripPipeline(schema=schema).round_trip(xml).events

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(run, [scenario_xml, INVALID_XML] * 4))
        assert [bool(events) for events in results] == [False, True] * 4


class TestSourceTypes:
    """``str`` is XML text at every level; files are passed as ``Path``."""

    def test_parse_text(self):
        stream = api.parse("<Flexipage/>")
        assert stream.root.name.local == "Flexipage"

    def test_text_matches_parser_level(self, scenario_xml):
        from flexipage_xml.parsing import parse_events

        text = scenario_xml.decode("utf-8")
        assert api.parse(text).events == parse_events(text).events

    def test_text_with_encoding_declaration(self):
        text = (
            '<?xml version="1.0" encoding="ISO-8859-1"?>'
            '<Flexipage><pageProperties><pageProperty name="l" value="café"/>'
            '</pageProperties></Flexipage>'
        )
        result = api.deserialize(text)
        assert result.document.property_group.get("l").value == "café"

    def test_round_trip_text(self, scenario_xml):
        result = api.round_trip(scenario_xml.decode("utf-8"))
        assert result.document.property_count == 2

    def test_load_schema_text(self):
        with bundled_resource(SCHEMA_RESOURCE) as stream:
            text = stream.read().decode("utf-8")
        schema = api.load_schema(text)
        assert schema.source_name is None

    def test_load_schema_path(self, tmp_path):
        path = tmp_path / "schema.xsd"
        with bundled_resource(SCHEMA_RESOURCE) as stream:
            path.write_bytes(stream.read())
        assert api.load_schema(path).source_name.startswith("file:")

    def test_parse_file_accepts_str_path(self, tmp_path, scenario_xml):
        path = tmp_path / "page.xml"
        path.write_bytes(scenario_xml)
        assert api.parse_file(str(path)).root.name.local == "Flexipage"
