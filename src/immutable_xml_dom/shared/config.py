"""Configuration classes for the immutable XML DOM.

This module provides configuration objects for event ingestion and event
emission, plus a frozen aggregate that can be overridden, serialized and
restored.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

_VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_COMPONENT_FIELDS = ["ingest", "emit", "global_"]


class WhitespacePolicy(Enum):
    """What to do with inter-element whitespace after ingestion."""

    PRESERVE = "preserve"  # Keep every text node as delivered
    STRIP = "strip"        # Apply remove_inter_element_whitespace to the result


class XmlVersion(Enum):
    """XML version governing namespace undeclarations."""

    XML_1_0 = "1.0"  # Only the default namespace may be undeclared
    XML_1_1 = "1.1"  # Any prefix may be undeclared


@dataclass(frozen=True)
class IngestConfig:
    """Configuration for building immutable documents from events."""

    whitespace_policy: WhitespacePolicy = WhitespacePolicy.PRESERVE
    xml_version: XmlVersion = XmlVersion.XML_1_0
    base_uri: Optional[str] = None
    merge_adjacent_text: bool = True

    def __post_init__(self) -> None:
        """Validate ingest configuration."""
        if not isinstance(self.whitespace_policy, WhitespacePolicy):
            raise ValueError("whitespace_policy must be a WhitespacePolicy")
        if not isinstance(self.xml_version, XmlVersion):
            raise ValueError("xml_version must be an XmlVersion")
        if self.base_uri is not None and not self.base_uri:
            raise ValueError("base_uri must be a non-empty string or None")


@dataclass(frozen=True)
class EmitConfig:
    """Configuration for generating events from immutable documents."""

    xml_version: XmlVersion = XmlVersion.XML_1_0
    emit_document_events: bool = True

    def __post_init__(self) -> None:
        """Validate emit configuration."""
        if not isinstance(self.xml_version, XmlVersion):
            raise ValueError("xml_version must be an XmlVersion")


@dataclass(frozen=True)
class GlobalConfig:
    """Settings that apply across all components."""

    logging_level: str = "INFO"
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in _VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {_VALID_LOGGING_LEVELS}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class DomConfig:
    """Complete configuration for ingestion and emission.

    Immutable down to its components, hence shareable between threads like
    the documents it configures the construction of.
    """

    ingest: IngestConfig = field(default_factory=IngestConfig)
    emit: EmitConfig = field(default_factory=EmitConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.ingest.__post_init__()
            self.emit.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if (
            self.ingest.xml_version is XmlVersion.XML_1_1
            and self.emit.xml_version is XmlVersion.XML_1_0
        ):
            # Prefixed undeclarations kept on ingest would be dropped on emit
            raise ConfigValidationError(
                "XML 1.1 ingestion combined with XML 1.0 emission loses "
                "prefixed namespace undeclarations",
                field_name="emit.xml_version",
                suggestions=["Set emit__xml_version=XmlVersion.XML_1_1"],
            )

    def override(self, **kwargs: Any) -> "DomConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override,
                using "component__field" notation for nested fields

        Returns:
            New DomConfig instance with overrides applied

        Example:
            >>> config = DomConfig()
            >>> new_config = config.override(
            ...     ingest__whitespace_policy=WhitespacePolicy.STRIP,
            ...     name="stripping"
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component = next(
                    (c for c in _COMPONENT_FIELDS if key.startswith(c + "__")), None
                )
                if component is None:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {key.split('__', 1)[0]}",
                        field_name=key,
                        suggestions=list(_COMPONENT_FIELDS),
                    )
                field_name = key[len(component) + 2:]
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for field_name in _COMPONENT_FIELDS:
            current_config = getattr(self, field_name)
            if field_name in nested_overrides:
                new_fields[field_name] = replace(
                    current_config, **nested_overrides[field_name]
                )
            else:
                new_fields[field_name] = current_config

        for key, value in nested_overrides.items():
            if key not in _COMPONENT_FIELDS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary representation of the configuration
        """
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomConfig":
        """Create configuration from dictionary.

        Args:
            data: Dictionary as produced by to_dict

        Returns:
            DomConfig instance created from dictionary
        """
        component_classes = {
            "ingest": IngestConfig,
            "emit": EmitConfig,
            "global_": GlobalConfig,
        }
        enum_fields = {
            "whitespace_policy": WhitespacePolicy,
            "xml_version": XmlVersion,
        }

        def _component_from_dict(values: Dict[str, Any], target_class: type) -> Any:
            field_values: Dict[str, Any] = {}
            for field_name in target_class.__dataclass_fields__:
                if field_name not in values:
                    continue
                value = values[field_name]
                enum_class = enum_fields.get(field_name)
                if enum_class is not None and isinstance(value, str):
                    value = enum_class[value]
                field_values[field_name] = value
            return target_class(**field_values)

        try:
            field_values: Dict[str, Any] = {}
            for key, value in data.items():
                if key in component_classes:
                    field_values[key] = _component_from_dict(value, component_classes[key])
                elif key in cls.__dataclass_fields__:
                    field_values[key] = value
            return cls(**field_values)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigValidationError(f"Failed to deserialize DomConfig: {e}") from e

    @classmethod
    def from_json(cls, json_str: str) -> "DomConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def strict_xml_1_0(cls) -> "DomConfig":
        """Preset that keeps text as delivered and only allows XML 1.0 undeclarations."""
        return cls(
            ingest=IngestConfig(xml_version=XmlVersion.XML_1_0),
            emit=EmitConfig(xml_version=XmlVersion.XML_1_0),
            name="strict_xml_1_0",
            description="XML 1.0 namespace rules, whitespace preserved",
        )

    @classmethod
    def xml_1_1(cls) -> "DomConfig":
        """Preset honouring prefixed namespace undeclarations in both directions."""
        return cls(
            ingest=IngestConfig(xml_version=XmlVersion.XML_1_1),
            emit=EmitConfig(xml_version=XmlVersion.XML_1_1),
            name="xml_1_1",
            description="XML 1.1 namespace rules, prefixed undeclarations kept",
        )

    @classmethod
    def whitespace_stripping(cls) -> "DomConfig":
        """Preset removing inter-element whitespace after ingestion."""
        return cls(
            ingest=IngestConfig(whitespace_policy=WhitespacePolicy.STRIP),
            name="whitespace_stripping",
            description="Inter-element whitespace removed after ingestion",
        )
