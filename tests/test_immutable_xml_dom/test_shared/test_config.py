"""Tests for the configuration system."""

import json
from dataclasses import FrozenInstanceError

import pytest

from immutable_xml_dom.shared.config import (
    ConfigError,
    ConfigValidationError,
    DomConfig,
    EmitConfig,
    GlobalConfig,
    IngestConfig,
    WhitespacePolicy,
    XmlVersion,
)


class TestIngestConfig:
    """Test suite for IngestConfig."""

    def test_default_configuration(self) -> None:
        """Test default ingest configuration values."""
        config = IngestConfig()

        assert config.whitespace_policy is WhitespacePolicy.PRESERVE
        assert config.xml_version is XmlVersion.XML_1_0
        assert config.base_uri is None
        assert config.merge_adjacent_text is True

    def test_validation_failures(self) -> None:
        """Test ingest configuration validation failures."""
        with pytest.raises(ValueError, match="whitespace_policy must be a WhitespacePolicy"):
            IngestConfig(whitespace_policy="strip")  # type: ignore[arg-type]

        with pytest.raises(ValueError, match="xml_version must be an XmlVersion"):
            IngestConfig(xml_version="1.0")  # type: ignore[arg-type]

        with pytest.raises(ValueError, match="base_uri must be a non-empty string or None"):
            IngestConfig(base_uri="")


class TestEmitAndGlobalConfig:
    """Test suite for EmitConfig and GlobalConfig."""

    def test_defaults(self) -> None:
        """Test default emit and global values."""
        assert EmitConfig().xml_version is XmlVersion.XML_1_0
        assert EmitConfig().emit_document_events is True
        assert GlobalConfig().logging_level == "INFO"

    def test_invalid_logging_level(self) -> None:
        """Test that an unknown logging level is rejected."""
        with pytest.raises(ValueError, match="logging_level must be one of"):
            GlobalConfig(logging_level="VERBOSE")


class TestDomConfig:
    """Test suite for the DomConfig aggregate."""

    def test_default_configuration_is_frozen(self) -> None:
        """Test that the aggregate cannot be mutated."""
        config = DomConfig()

        with pytest.raises(AttributeError):
            config.version = "2.0.0"  # type: ignore[misc]

    @pytest.mark.parametrize("component,field_name,value", [
        ("ingest", "xml_version", XmlVersion.XML_1_1),
        ("emit", "emit_document_events", False),
        ("global_", "logging_level", "DEBUG"),
    ])
    def test_components_are_frozen(self, component, field_name, value) -> None:
        """Test that nested configuration objects cannot be mutated either."""
        config = DomConfig()

        with pytest.raises(FrozenInstanceError):
            setattr(getattr(config, component), field_name, value)

        assert DomConfig().to_dict() == config.to_dict()

    def test_override_global_component(self) -> None:
        """Test overriding fields of the global_ component."""
        config = DomConfig().override(
            global___logging_level="DEBUG",
            global___enable_correlation_tracking=False,
        )

        assert config.global_.logging_level == "DEBUG"
        assert config.global_.enable_correlation_tracking is False
        assert DomConfig().global_.logging_level == "INFO"

    def test_incompatible_versions_rejected(self) -> None:
        """Test that XML 1.1 ingestion with XML 1.0 emission is rejected."""
        with pytest.raises(ConfigValidationError, match="XML 1.1 ingestion") as exc_info:
            DomConfig(ingest=IngestConfig(xml_version=XmlVersion.XML_1_1))

        assert exc_info.value.field_name == "emit.xml_version"
        assert exc_info.value.suggestions
        assert isinstance(exc_info.value, ConfigError)

    def test_override_nested_field(self) -> None:
        """Test overriding nested fields with component__field notation."""
        config = DomConfig().override(
            ingest__whitespace_policy=WhitespacePolicy.STRIP,
            name="custom",
        )

        assert config.ingest.whitespace_policy is WhitespacePolicy.STRIP
        assert config.name == "custom"
        assert DomConfig().ingest.whitespace_policy is WhitespacePolicy.PRESERVE

    def test_override_unknown_component(self) -> None:
        """Test that overriding an unknown component fails."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration component"):
            DomConfig().override(parser__strict=True)

    def test_to_dict_uses_enum_names(self) -> None:
        """Test dictionary serialization of enums."""
        data = DomConfig.xml_1_1().to_dict()

        assert data["ingest"]["xml_version"] == "XML_1_1"
        assert data["emit"]["xml_version"] == "XML_1_1"
        assert data["ingest"]["whitespace_policy"] == "PRESERVE"
        assert data["name"] == "xml_1_1"

    def test_json_round_trip(self) -> None:
        """Test that JSON serialization restores an equal configuration."""
        config = DomConfig.whitespace_stripping().override(ingest__base_uri="http://ex/doc.xml")

        restored = DomConfig.from_json(config.to_json())

        assert restored == config
        assert json.loads(config.to_json())["ingest"]["base_uri"] == "http://ex/doc.xml"

    def test_from_dict_with_bad_enum_name(self) -> None:
        """Test that unknown enum names fail deserialization."""
        with pytest.raises(ConfigValidationError, match="Failed to deserialize"):
            DomConfig.from_dict({"ingest": {"xml_version": "XML_2_0"}})

    @pytest.mark.parametrize(
        "factory,ingest_version,emit_version,policy",
        [
            (DomConfig.strict_xml_1_0, XmlVersion.XML_1_0, XmlVersion.XML_1_0, WhitespacePolicy.PRESERVE),
            (DomConfig.xml_1_1, XmlVersion.XML_1_1, XmlVersion.XML_1_1, WhitespacePolicy.PRESERVE),
            (DomConfig.whitespace_stripping, XmlVersion.XML_1_0, XmlVersion.XML_1_0, WhitespacePolicy.STRIP),
        ],
    )
    def test_presets(self, factory, ingest_version, emit_version, policy) -> None:
        """Test preset factory methods."""
        config = factory()

        assert config.ingest.xml_version is ingest_version
        assert config.emit.xml_version is emit_version
        assert config.ingest.whitespace_policy is policy
        assert config.name is not None
