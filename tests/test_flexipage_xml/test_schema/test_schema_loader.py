"""Tests for schema compilation and thread-safe validation."""

import io
from concurrent.futures import ThreadPoolExecutor

import pytest
from lxml import etree

from flexipage_xml.schema import CompiledSchema, compile_schema, load_schema
from flexipage_xml.shared import SchemaCompileError, ValidationSeverity

MINIMAL_SCHEMA = b"""<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="root" type="xs:string"/>
</xs:schema>
"""


class TestLoadSchema:
    """Test schema loading from the supported source types."""

    def test_bundled_schema_compiles(self, schema):
        assert isinstance(schema, CompiledSchema)

    def test_load_from_bytes(self):
        assert isinstance(load_schema(MINIMAL_SCHEMA), CompiledSchema)

    def test_load_from_stream(self):
        stream = io.BytesIO(MINIMAL_SCHEMA)
        assert isinstance(load_schema(stream), CompiledSchema)
        # Caller-owned streams stay open
        assert not stream.closed

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "minimal.xsd"
        path.write_bytes(MINIMAL_SCHEMA)
        compiled = load_schema(path)
        assert compiled.source_name.startswith("file:")

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_schema(tmp_path / "missing.xsd")

    def test_load_from_text(self):
        text = MINIMAL_SCHEMA.decode("ascii")
        assert isinstance(load_schema(text), CompiledSchema)

    def test_text_with_foreign_encoding_declaration(self):
        text = (
            '<?xml version="1.0" encoding="ISO-8859-1"?>\n'
            '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
            '<xs:element name="caf\u00e9" type="xs:string"/></xs:schema>'
        )
        compiled = load_schema(text)
        assert compiled.validate(etree.fromstring("<caf\u00e9>x</caf\u00e9>")) == ()


class TestSchemaCompileErrors:
    """Test that malformed schemas fail with SchemaCompileError."""

    def test_not_well_formed(self):
        with pytest.raises(SchemaCompileError, match="not well-formed") as exc_info:
            compile_schema(b'<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">')
        assert exc_info.value.line is not None

    def test_unresolved_type_reference(self):
        source = b"""<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="a" type="xs:noSuchType"/>
</xs:schema>"""
        with pytest.raises(SchemaCompileError, match="Invalid schema"):
            compile_schema(source)

    def test_not_a_schema_document(self):
        with pytest.raises(SchemaCompileError):
            compile_schema(b"<root/>")


class TestCompiledSchemaValidation:
    """Test validation through CompiledSchema."""

    def test_valid_tree_has_no_events(self, schema):
        tree = etree.ElementTree(etree.fromstring(b"<Flexipage/>"))
        assert schema.validate(tree) == ()

    def test_invalid_tree_reports_events(self, schema):
        root = etree.fromstring(
            b'<Flexipage><pageProperties><pageProperty value="v"/></pageProperties></Flexipage>'
        )
        events = schema.validate(root)
        assert len(events) >= 1
        assert all(event.severity is ValidationSeverity.ERROR for event in events)
        assert any("name" in event.message for event in events)

    def test_validation_does_not_leak_between_calls(self, schema):
        invalid = etree.fromstring(b"<Flexipage><unknown/></Flexipage>")
        valid = etree.fromstring(b"<Flexipage/>")
        assert schema.validate(invalid)
        assert schema.validate(valid) == ()

    def test_concurrent_validation(self, schema):
        """Shared schema gives consistent results across threads."""
        valid = b"<Flexipage/>"
        invalid = b"<Flexipage><unknown/></Flexipage>"

        def run(payload):
            return schema.validate(etree.fromstring(payload))

        payloads = [valid, invalid] * 20
        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(run, payloads))

        for payload, events in zip(payloads, results):
            if payload == valid:
                assert events == ()
            else:
                assert len(events) >= 1
