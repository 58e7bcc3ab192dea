"""Parsing XML with the standard library SAX parser.

The expat based reader runs namespace aware, with a lexical handler for
comments and CDATA sections. Its events are translated into the event
protocol of this package and fed to an EventHandler, normally a
DomProducingEventHandler.

Expat does not report the prefix of element names, so the adapter keeps its
own namespace scope stack and recovers element prefixes from it. Attribute
prefixes come from the qualified names expat does report.
"""

import io
import xml.sax
from typing import IO, Dict, List, Optional, Union
from xml.sax.handler import (
    ContentHandler,
    ErrorHandler,
    feature_external_ges,
    feature_namespaces,
    property_lexical_handler,
)
from xml.sax.xmlreader import InputSource

from immutable_xml_dom.core.namespace_scope import EMPTY_SCOPE, NamespaceScope
from immutable_xml_dom.interop.events import AttributeEvent, EventHandler
from immutable_xml_dom.shared.errors import ParserFaultError
from immutable_xml_dom.shared.logging import get_logger

SaxSource = Union[str, bytes, IO[bytes], IO[str], InputSource]


class SaxEventAdapter(ContentHandler, ErrorHandler):
    """SAX content, lexical and error handler forwarding to an EventHandler."""

    def __init__(
        self,
        handler: EventHandler,
        base_uri: Optional[str] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        super().__init__()
        self.handler = handler
        self.base_uri = base_uri
        self.logger = get_logger(__name__, correlation_id, "sax")
        self._scopes: List[NamespaceScope] = [EMPTY_SCOPE]
        self._pending: Dict[str, str] = {}
        self._in_cdata = False

    # ContentHandler

    def startDocument(self) -> None:
        self.handler.start_document(self.base_uri)

    def endDocument(self) -> None:
        self.handler.end_document()

    def startPrefixMapping(self, prefix: Optional[str], uri: Optional[str]) -> None:
        prefix = prefix or ""
        uri = uri or ""
        self._pending[prefix] = uri
        self.handler.start_prefix_mapping(prefix, uri)

    def endPrefixMapping(self, prefix: Optional[str]) -> None:
        self.handler.end_prefix_mapping(prefix or "")

    def startElementNS(self, name, qname, attrs) -> None:  # type: ignore[no-untyped-def]
        namespace_uri, local_name = name
        namespace_uri = namespace_uri or ""

        scope = self._scopes[-1].resolve(self._pending)
        self._pending = {}
        self._scopes.append(scope)

        prefix = _prefix_of_qname(qname) if qname else self._recover_prefix(scope, namespace_uri)

        attributes = []
        for (attr_namespace, attr_local_name), value in attrs.items():
            attr_qname = attrs.getQNameByName((attr_namespace, attr_local_name))
            attributes.append(
                AttributeEvent(
                    attr_namespace or "",
                    attr_local_name,
                    _prefix_of_qname(attr_qname) if attr_namespace else "",
                    value,
                )
            )
        self.handler.start_element(namespace_uri, local_name, prefix, attributes)

    def endElementNS(self, name, qname) -> None:  # type: ignore[no-untyped-def]
        namespace_uri, local_name = name
        scope = self._scopes.pop()
        prefix = _prefix_of_qname(qname) if qname else self._recover_prefix(scope, namespace_uri or "")
        self.handler.end_element(namespace_uri or "", local_name, prefix)

    def characters(self, content: str) -> None:
        self.handler.characters(content, self._in_cdata)

    def ignorableWhitespace(self, whitespace: str) -> None:
        self.handler.characters(whitespace, False)

    def processingInstruction(self, target: str, data: str) -> None:
        self.handler.processing_instruction(target, data or "")

    # LexicalHandler

    def comment(self, content: str) -> None:
        self.handler.comment(content)

    def startCDATA(self) -> None:
        self._in_cdata = True

    def endCDATA(self) -> None:
        self._in_cdata = False

    def startDTD(self, name: str, public_id: Optional[str], system_id: Optional[str]) -> None:
        self.logger.debug("Document type declaration skipped", extra={"doctype": name})

    def endDTD(self) -> None:
        pass

    # ErrorHandler

    def error(self, exception: BaseException) -> None:
        self.fatalError(exception)

    def fatalError(self, exception: BaseException) -> None:
        self.handler.fatal_error(exception)
        # Handlers that do not raise themselves must still stop the parse
        raise ParserFaultError(f"XML parsing failed: {exception}", details=exception) from exception

    def warning(self, exception: BaseException) -> None:
        self.logger.warning("SAX parser warning", extra={"error": str(exception)})

    @staticmethod
    def _recover_prefix(scope: NamespaceScope, namespace_uri: str) -> str:
        if not namespace_uri or scope.default_namespace() == namespace_uri:
            return ""
        prefixes = scope.prefixes_of_namespace(namespace_uri)
        return prefixes[0] if prefixes else ""


def _prefix_of_qname(qname: Optional[str]) -> str:
    if not qname or ":" not in qname:
        return ""
    return qname.split(":", 1)[0]


def _to_input_source(source: SaxSource, base_uri: Optional[str]) -> Union[str, InputSource]:
    if isinstance(source, InputSource):
        return source
    input_source = InputSource(base_uri)
    if isinstance(source, bytes):
        input_source.setByteStream(io.BytesIO(source))
    elif isinstance(source, str):
        input_source.setCharacterStream(io.StringIO(source))
    elif isinstance(source.read(0), str):
        input_source.setCharacterStream(source)
    else:
        input_source.setByteStream(source)
    return input_source


def sax_parse(
    source: SaxSource,
    handler: EventHandler,
    base_uri: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> None:
    """Parse XML with the standard library SAX parser, feeding the handler.

    Args:
        source: XML text, XML bytes, a readable file object or an InputSource
        handler: Receiver of the events
        base_uri: Document URI reported with the start document event
        correlation_id: Optional correlation ID for logging

    Raises:
        ParserFaultError: If the XML is not well-formed
    """
    adapter = SaxEventAdapter(handler, base_uri, correlation_id)
    parser = xml.sax.make_parser()
    parser.setFeature(feature_namespaces, True)
    parser.setFeature(feature_external_ges, False)
    parser.setProperty(property_lexical_handler, adapter)
    parser.setContentHandler(adapter)
    parser.setErrorHandler(adapter)

    try:
        parser.parse(_to_input_source(source, base_uri))
    except xml.sax.SAXException as e:
        adapter.logger.warning("SAX parsing failed", extra={"error": str(e)})
        raise ParserFaultError(f"XML parsing failed: {e}", details=e) from e


def sax_parse_file(
    path: str,
    handler: EventHandler,
    base_uri: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> None:
    """Parse an XML file with the standard library SAX parser."""
    with open(path, "rb") as stream:
        sax_parse(stream, handler, base_uri, correlation_id)
