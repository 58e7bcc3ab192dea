"""Parsing and serialization entry points.

Module-level functions cover the common cases; DomParser keeps a
configuration and statistics for repeated use.

Parsing goes through the standard library SAX parser feeding a
DomProducingEventHandler. Serialization goes through lxml.
"""

import time
from pathlib import Path
from typing import IO, Any, Dict, Optional, Union

from immutable_xml_dom.interop.emit import EventGenerator
from immutable_xml_dom.interop.events import EventHandler
from immutable_xml_dom.interop.ingest import DomProducingEventHandler
from immutable_xml_dom.interop.lxml_bridge import LxmlBridge
from immutable_xml_dom.interop.sax import sax_parse
from immutable_xml_dom.shared.config import DomConfig
from immutable_xml_dom.shared.logging import configure_logging, get_logger
from immutable_xml_dom.shared.result import EmitMetrics
from immutable_xml_dom.tree.nodes import Document, Element

InputType = Union[str, bytes, IO[bytes], IO[str], Path]

PREVIEW_LENGTH = 100  # Max length for content preview in logs


def parse(
    input_data: InputType,
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from various input sources with automatic type detection.

    Args:
        input_data: XML content as string, bytes, file-like object, or Path
        config: Optional configuration, defaults to DomConfig()
        correlation_id: Optional correlation ID for request tracking

    Returns:
        The parsed Document

    Raises:
        ParserFaultError: If the XML is not well-formed
        TypeError: If the input type is not supported

    Examples:
        >>> parse('<root>value</root>').document_element.text()
        'value'
        >>> parse(b'<?xml version="1.0"?><root/>').document_element.name
        QName('', 'root')
    """
    logger = get_logger(__name__, correlation_id, "parse")
    logger.info(
        "Starting universal parse operation",
        extra={"input_type": type(input_data).__name__},
    )

    if isinstance(input_data, str):
        return parse_string(input_data, config=config, correlation_id=correlation_id)
    if isinstance(input_data, bytes):
        return parse_bytes(input_data, config=config, correlation_id=correlation_id)
    if isinstance(input_data, Path):
        return parse_file(input_data, config=config, correlation_id=correlation_id)
    if hasattr(input_data, "read"):
        base_uri = (config or DomConfig()).ingest.base_uri
        return _parse_source(input_data, config, base_uri, correlation_id)
    raise TypeError(f"Unsupported input type: {type(input_data).__name__}")


def parse_string(
    xml_string: str,
    base_uri: Optional[str] = None,
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from a string.

    Examples:
        >>> root = parse_string('<a:root xmlns:a="urn:a"/>').document_element
        >>> root.name.clark_name
        '{urn:a}root'
    """
    logger = get_logger(__name__, correlation_id, "parse_string")
    logger.info(
        "Starting string parse operation",
        extra={
            "content_length": len(xml_string),
            "preview": (
                xml_string[:PREVIEW_LENGTH] + "..."
                if len(xml_string) > PREVIEW_LENGTH else xml_string
            ),
        },
    )
    return _parse_source(xml_string, config, base_uri, correlation_id)


def parse_bytes(
    xml_bytes: bytes,
    base_uri: Optional[str] = None,
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from bytes, honouring the encoding in the XML declaration."""
    logger = get_logger(__name__, correlation_id, "parse_bytes")
    logger.info("Starting bytes parse operation", extra={"content_length": len(xml_bytes)})
    return _parse_source(xml_bytes, config, base_uri, correlation_id)


def parse_file(
    file_path: Union[str, Path],
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse an XML file. The document URI is the file's URI.

    Raises:
        FileNotFoundError: If the file does not exist
        ParserFaultError: If the XML is not well-formed
    """
    logger = get_logger(__name__, correlation_id, "parse_file")
    path_obj = Path(file_path)
    logger.info("Starting file parse operation", extra={"file_path": str(path_obj)})

    base_uri = path_obj.resolve().as_uri()
    with path_obj.open("rb") as stream:
        return _parse_source(stream, config, base_uri, correlation_id)


def emit_document(
    document: Document,
    handler: EventHandler,
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None
) -> EmitMetrics:
    """Report a document to an event handler.

    Returns:
        Metrics of the emission
    """
    generator = EventGenerator(handler, config, correlation_id)
    generator.process_document(document)
    return generator.metrics


def round_trip(
    document: Document,
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Emit a document into a fresh DomProducingEventHandler and return the rebuilt copy.

    For XML 1.1 configurations, and for XML 1.0 trees without prefixed
    undeclarations, the result equals the input.
    """
    handler = DomProducingEventHandler(config, correlation_id)
    emit_document(document, handler, config, correlation_id)
    return handler.document


def to_xml_string(
    node: Union[Document, Element],
    pretty_print: bool = False,
    correlation_id: Optional[str] = None
) -> str:
    """Serialize a document or element to XML text (requires lxml)."""
    return LxmlBridge(correlation_id=correlation_id).to_string(node, pretty_print=pretty_print)


def to_xml_bytes(
    node: Union[Document, Element],
    encoding: str = "UTF-8",
    pretty_print: bool = False,
    correlation_id: Optional[str] = None
) -> bytes:
    """Serialize a document or element to encoded XML with declaration (requires lxml)."""
    return LxmlBridge(correlation_id=correlation_id).to_bytes(
        node, encoding=encoding, pretty_print=pretty_print
    )


def _parse_source(
    source: Any,
    config: Optional[DomConfig],
    base_uri: Optional[str],
    correlation_id: Optional[str]
) -> Document:
    handler = DomProducingEventHandler(config, correlation_id)
    effective_base_uri = base_uri or handler.config.ingest.base_uri
    sax_parse(source, handler, effective_base_uri, correlation_id)
    return handler.document


class DomParser:
    """Configured parser for repeated use.

    The global part of the configuration applies on construction and on
    reconfigure: it sets the package log level, and without correlation
    tracking no correlation ID is attached to log records.

    Attributes:
        config: Configuration used for every parse
        correlation_id: Correlation ID for request tracking, None when
            tracking is disabled

    Examples:
        >>> parser = DomParser(DomConfig.whitespace_stripping())
        >>> len(parser.parse('<root>\\n  <a/>\\n</root>').document_element.children)
        1
    """

    def __init__(
        self,
        config: Optional[DomConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self._requested_correlation_id = correlation_id
        self._apply_config(config or DomConfig())

        self._parse_count = 0
        self._failed_parses = 0
        self._total_processing_time = 0.0
        self._last_handler: Optional[DomProducingEventHandler] = None

    def parse(self, input_data: InputType, base_uri: Optional[str] = None) -> Document:
        """Parse XML with this parser's configuration.

        Raises:
            ParserFaultError: If the XML is not well-formed
        """
        start_time = time.perf_counter()
        self._parse_count += 1
        self.logger.info(
            "Starting configured parse operation",
            extra={"input_type": type(input_data).__name__, "parse_count": self._parse_count},
        )

        handler = DomProducingEventHandler(self.config, self.correlation_id)
        self._last_handler = handler
        if isinstance(input_data, Path):
            base_uri = base_uri or input_data.resolve().as_uri()
        effective_base_uri = base_uri or self.config.ingest.base_uri
        try:
            if isinstance(input_data, Path):
                with input_data.open("rb") as stream:
                    sax_parse(stream, handler, effective_base_uri, self.correlation_id)
            else:
                sax_parse(input_data, handler, effective_base_uri, self.correlation_id)
        except Exception:
            self._failed_parses += 1
            raise
        finally:
            self._total_processing_time += (time.perf_counter() - start_time) * 1000
        return handler.document

    def reconfigure(self, config: DomConfig) -> None:
        """Replace the configuration used by subsequent parses."""
        self._apply_config(config)
        self.logger.info("Parser reconfigured", extra={"config_name": config.name})

    def _apply_config(self, config: DomConfig) -> None:
        self.config = config
        configure_logging(config.global_.logging_level)
        self.correlation_id = (
            self._requested_correlation_id if config.global_.enable_correlation_tracking else None
        )
        self.logger = get_logger(__name__, self.correlation_id, "dom_parser")

    @property
    def statistics(self) -> Dict[str, Any]:
        """Parse counts, timings and the metrics of the last parse."""
        successful = self._parse_count - self._failed_parses
        return {
            "total_parses": self._parse_count,
            "successful_parses": successful,
            "failed_parses": self._failed_parses,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count if self._parse_count else 0.0
            ),
            "last_metrics": self._last_handler.metrics if self._last_handler else None,
        }

    def reset_statistics(self) -> None:
        self._parse_count = 0
        self._failed_parses = 0
        self._total_processing_time = 0.0
        self._last_handler = None
