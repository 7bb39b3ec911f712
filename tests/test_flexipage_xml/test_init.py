"""Test module for flexipage_xml package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    import flexipage_xml

    assert flexipage_xml is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    import flexipage_xml

    assert isinstance(flexipage_xml.__version__, str)
    assert flexipage_xml.__version__ == "0.1.0"


def test_package_exports_pipeline_functions() -> None:
    """Test that the level 1 API is exported."""
    import flexipage_xml

    for name in ["load_schema", "parse", "deserialize", "serialize", "round_trip"]:
        assert name in flexipage_xml.__all__
        assert callable(getattr(flexipage_xml, name))


def test_package_exports_errors() -> None:
    """Test that every error type derives from the package base error."""
    import flexipage_xml

    for name in ["ParseError", "SchemaCompileError", "SerializationError"]:
        assert issubclass(getattr(flexipage_xml, name), flexipage_xml.FlexipageXMLError)
