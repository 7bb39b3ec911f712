"""Shared fixtures for flexipage XML tests."""

import pytest

from flexipage_xml.api.pipeline import SCHEMA_RESOURCE, bundled_resource
from flexipage_xml.schema import load_schema

SCENARIO_XML = (
    b'<Flexipage><pageProperties>'
    b'<pageProperty name="x" value="1"/>'
    b'<pageProperty name="y" value="2"/>'
    b'</pageProperties></Flexipage>'
)


@pytest.fixture(scope="session")
def schema():
    """Compiled bundled flexipage schema."""
    with bundled_resource(SCHEMA_RESOURCE) as stream:
        return load_schema(stream)


@pytest.fixture
def scenario_xml() -> bytes:
    return SCENARIO_XML
