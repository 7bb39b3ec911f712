"""Configuration classes for flexipage XML processing.

This module provides configuration objects for the parsing, validation and
serialization stages, plus the immutable :class:`PipelineConfig` that
composes them.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .errors import FlexipageXMLError

# Namespace authority used for synthesized ``urn:<authority>:<prefix>`` URIs
DEFAULT_NAMESPACE_AUTHORITY = "salesforce"

_COMPONENTS = ("parsing", "validation", "serialization", "global_")


@dataclass
class ParsingConfig:
    """Configuration for the namespace-tolerant parser."""

    namespace_authority: str = DEFAULT_NAMESPACE_AUTHORITY
    max_element_depth: int = 1000

    def __post_init__(self) -> None:
        """Validate parsing configuration."""
        if not self.namespace_authority:
            raise ValueError("namespace_authority cannot be empty")
        if any(ch.isspace() or ch == ":" for ch in self.namespace_authority):
            raise ValueError("namespace_authority cannot contain ':' or whitespace")
        if self.max_element_depth <= 0:
            raise ValueError("max_element_depth must be > 0")


@dataclass
class ValidationConfig:
    """Configuration for schema validation during deserialization."""

    # When disabled no schema events are collected even if a schema is given
    enabled: bool = True


@dataclass
class SerializationConfig:
    """Configuration for rendering documents back to XML."""

    encoding: str = "UTF-8"
    pretty_print: bool = True
    xml_declaration: bool = True
    standalone: Optional[bool] = True

    def __post_init__(self) -> None:
        """Validate serialization configuration."""
        if not self.encoding:
            raise ValueError("encoding cannot be empty")
        try:
            "".encode(self.encoding)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {self.encoding}") from e
        if self.standalone is not None and not self.xml_declaration:
            raise ValueError("standalone requires xml_declaration")


@dataclass
class GlobalConfig:
    """Settings that apply across all stages."""

    logging_level: str = "INFO"
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(FlexipageXMLError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for the whole parse/validate/map/render pipeline.

    Thread-safe due to the frozen dataclass implementation; derive variants
    with :meth:`override`.
    """

    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    serialization: SerializationConfig = field(default_factory=SerializationConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Re-validate component configurations."""
        try:
            self.parsing.__post_init__()
            self.serialization.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "PipelineConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; nested fields use ``component__field``

        Returns:
            New PipelineConfig instance with overrides applied

        Example:
            >>> config = PipelineConfig().override(
            ...     serialization__pretty_print=False,
            ...     parsing__namespace_authority="example",
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                # "global___field" belongs to the global_ component
                component = next(
                    (name for name in _COMPONENTS if key.startswith(f"{name}__")),
                    key.split("__", 1)[0],
                )
                field_name = key[len(component) + 2:]
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for component, overrides in nested_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **overrides)
            except TypeError as e:
                raise ConfigValidationError(str(e), field_name=component) from e
            except ValueError as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for component in _COMPONENTS:
            value = getattr(self, component)
            result[component] = {
                name: getattr(value, name) for name in value.__dataclass_fields__
            }
        result["name"] = self.name
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Create configuration from dictionary.

        Unknown components or fields raise :class:`ConfigValidationError`.
        """
        component_types = {
            "parsing": ParsingConfig,
            "validation": ValidationConfig,
            "serialization": SerializationConfig,
            "global_": GlobalConfig,
        }
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "name":
                kwargs["name"] = value
                continue
            target = component_types.get(key)
            if target is None:
                raise ConfigValidationError(
                    f"Unknown configuration component: {key}", field_name=key
                )
            try:
                kwargs[key] = target(**value)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=key) from e
        return cls(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> "PipelineConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "PipelineConfig":
        """Pretty-printed output with a standalone XML declaration."""
        return cls(name="default")

    @classmethod
    def compact(cls) -> "PipelineConfig":
        """Single-line output without XML declaration."""
        return cls(
            serialization=SerializationConfig(
                pretty_print=False,
                xml_declaration=False,
                standalone=None,
            ),
            name="compact",
        )
