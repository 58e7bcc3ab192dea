"""Tests for the error taxonomy, metrics and structured logging."""

import logging

import pytest

from immutable_xml_dom.shared import (
    EmptyNamespaceValueError,
    IngestMetrics,
    InvalidNameError,
    InvalidPrefixError,
    MalformedQNameError,
    ParserFaultError,
    PathOutOfRangeError,
    ReservedPrefixMisuseError,
    UnboundPrefixError,
    XmlDomError,
    configure_logging,
    get_logger,
)


class TestErrorTaxonomy:
    """Test the exception hierarchy and carried values."""

    @pytest.mark.parametrize(
        "error_class",
        [
            InvalidNameError,
            InvalidPrefixError,
            ReservedPrefixMisuseError,
            EmptyNamespaceValueError,
            UnboundPrefixError,
            MalformedQNameError,
        ],
    )
    def test_value_shaped_errors(self, error_class) -> None:
        """Test that value errors are both XmlDomError and ValueError."""
        error = error_class("bad value")

        assert isinstance(error, XmlDomError)
        assert isinstance(error, ValueError)
        assert str(error) == "bad value"

    def test_path_out_of_range_error(self) -> None:
        """Test that path errors carry the path and are IndexErrors."""
        error = PathOutOfRangeError("no such child", path=[0, 3], depth=1)

        assert isinstance(error, IndexError)
        assert error.path == (0, 3)
        assert error.depth == 1

    def test_carried_attributes(self) -> None:
        """Test the offending values kept on the errors."""
        assert UnboundPrefixError("x", prefix="p").prefix == "p"
        assert InvalidNameError("x", name="a:b").name == "a:b"
        assert MalformedQNameError("x", syntactic_name="a:b:c").syntactic_name == "a:b:c"
        assert ReservedPrefixMisuseError("x", namespace="urn:x").namespace == "urn:x"

    def test_parser_fault_error_details(self) -> None:
        """Test that parser faults keep their details."""
        cause = RuntimeError("boom")
        error = ParserFaultError("fault", details=cause)

        assert error.details is cause
        assert not isinstance(error, ValueError)


class TestIngestMetrics:
    """Test metric helpers."""

    def test_events_per_second(self) -> None:
        """Test throughput computation."""
        assert IngestMetrics().events_per_second == 0.0
        assert IngestMetrics(processing_time_ms=500.0, events_processed=100).events_per_second == 200.0


class TestCorrelationLogger:
    """Test structured logging."""

    def test_extra_contains_component_and_correlation_id(self, caplog) -> None:
        """Test that log records carry the correlation info."""
        logger = get_logger("immutable_xml_dom.test", "corr-1", "ingest")

        with caplog.at_level(logging.INFO, logger="immutable_xml_dom.test"):
            logger.info("hello", extra={"elements_built": 3})

        record = caplog.records[-1]
        assert record.component == "ingest"
        assert record.correlation_id == "corr-1"
        assert record.elements_built == 3

    def test_default_component_from_name(self) -> None:
        """Test that the component defaults to the last name segment."""
        assert get_logger("immutable_xml_dom.interop.emit").component == "emit"

    def test_for_component_keeps_correlation_id(self) -> None:
        """Test deriving a sub-component logger."""
        logger = get_logger("immutable_xml_dom.test", "corr-2").for_component("sax")

        assert logger.component == "sax"
        assert logger.correlation_id == "corr-2"

    def test_configure_logging(self) -> None:
        """Test setting the package log level."""
        configure_logging("DEBUG")
        try:
            assert get_logger("immutable_xml_dom.anything").is_debug_enabled()
        finally:
            configure_logging("NOTSET")
