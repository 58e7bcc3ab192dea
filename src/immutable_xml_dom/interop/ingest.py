"""Building immutable documents from XML events.

DomProducingEventHandler keeps a stack of open element frames. An element
node is only created when its end event arrives, once all of its children are
known. The namespace scope of each element is the parent scope resolved with
the prefix mappings reported just before it, plus any binding its own name or
attribute names need.

A handler instance serves one event stream at a time and is not thread safe;
the documents it produces are.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from immutable_xml_dom.core.namespace_scope import EMPTY_SCOPE, NamespaceScope
from immutable_xml_dom.core.qname import QName
from immutable_xml_dom.core.whitespace import is_xml_whitespace
from immutable_xml_dom.interop.events import AttributeEvent, EventHandler
from immutable_xml_dom.shared.config import DomConfig, WhitespacePolicy, XmlVersion
from immutable_xml_dom.shared.errors import ParserFaultError
from immutable_xml_dom.shared.logging import get_logger
from immutable_xml_dom.shared.result import IngestMetrics
from immutable_xml_dom.tree.nodes import (
    CanBeDocumentChild,
    Comment,
    Document,
    Element,
    Node,
    ProcessingInstruction,
    Text,
)


@dataclass
class _ElementFrame:
    """Mutable state of an element whose end event has not arrived yet."""

    name: QName
    attributes: Dict[QName, str]
    namespace_scope: NamespaceScope
    children: List[Node] = field(default_factory=list)
    text_parts: List[str] = field(default_factory=list)
    text_is_cdata: bool = False


class DomProducingEventHandler(EventHandler):
    """Event handler producing an immutable Document.

    Example:
        >>> handler = DomProducingEventHandler()
        >>> handler.start_document()
        >>> handler.start_element("", "root", "")
        >>> handler.end_element("", "root", "")
        >>> handler.end_document()
        >>> handler.document.document_element.name
        QName('', 'root')
    """

    def __init__(
        self,
        config: Optional[DomConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or DomConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "ingest")
        self.metrics = IngestMetrics()
        self._reset(self.config.ingest.base_uri)

    def _reset(self, base_uri: Optional[str]) -> None:
        self._base_uri = base_uri
        self._pending_declarations: Dict[str, str] = {}
        self._stack: List[_ElementFrame] = []
        self._document_children: List[CanBeDocumentChild] = []
        self._root_element: Optional[Element] = None
        self._document: Optional[Document] = None
        self._start_time = time.perf_counter()

    @property
    def document(self) -> Document:
        """The produced document, available after end_document."""
        if self._document is None:
            raise ParserFaultError("No complete document has been produced")
        return self._document

    @property
    def document_element(self) -> Element:
        """The root element, available as soon as its end event arrived."""
        if self._root_element is None:
            raise ParserFaultError("No complete document element has been produced")
        return self._root_element

    @property
    def depth(self) -> int:
        return len(self._stack)

    def start_document(self, base_uri: Optional[str] = None) -> None:
        self._reset(base_uri or self.config.ingest.base_uri)
        self.metrics = IngestMetrics()
        self.metrics.events_processed += 1
        self.logger.debug("Document ingestion started", extra={"base_uri": self._base_uri})

    def end_document(self) -> None:
        self.metrics.events_processed += 1
        if self._stack:
            raise ParserFaultError(
                f"Document ended with {len(self._stack)} unclosed element(s)",
                details={"open_element": str(self._stack[-1].name)},
            )
        if self._root_element is None:
            raise ParserFaultError("Document ended without a document element")

        document = Document(self._base_uri, tuple(self._document_children))
        if self.config.ingest.whitespace_policy is WhitespacePolicy.STRIP:
            document = document.remove_inter_element_whitespace()
        self._document = document

        self.metrics.processing_time_ms = (time.perf_counter() - self._start_time) * 1000
        self.logger.debug(
            "Document ingestion completed",
            extra={
                "elements_built": self.metrics.elements_built,
                "events_processed": self.metrics.events_processed,
                "processing_time_ms": self.metrics.processing_time_ms,
            },
        )

    def start_prefix_mapping(self, prefix: str, namespace_uri: str) -> None:
        self.metrics.events_processed += 1
        self.metrics.prefix_mappings_seen += 1
        self._pending_declarations[prefix or ""] = namespace_uri or ""

    def end_prefix_mapping(self, prefix: str) -> None:
        # Scopes are popped together with their element frames
        self.metrics.events_processed += 1

    def start_element(
        self,
        namespace_uri: str,
        local_name: str,
        prefix: str,
        attributes: Sequence[AttributeEvent] = ()
    ) -> None:
        self.metrics.events_processed += 1
        if not self._stack and self._root_element is not None:
            raise ParserFaultError(
                f"Second document element {local_name!r} after the first one was closed"
            )

        if self._stack:
            self._flush_text(self._stack[-1])
            parent_scope = self._stack[-1].namespace_scope
        else:
            parent_scope = EMPTY_SCOPE

        declarations = self._pending_declarations
        self._pending_declarations = {}
        if self.config.ingest.xml_version is XmlVersion.XML_1_0:
            sanitized = NamespaceScope.without_prefixed_namespace_undeclarations(declarations)
            if len(sanitized) != len(declarations) and self.logger.is_debug_enabled():
                self.logger.debug(
                    "Prefixed namespace undeclarations dropped",
                    extra={
                        "element": local_name,
                        "prefixes": sorted(p for p in declarations if p not in sanitized),
                    },
                )
            declarations = sanitized
        scope = parent_scope.resolve(declarations)

        name = QName(namespace_uri or "", local_name, prefix or "")
        scope = bind_element_name(scope, name)

        attribute_map: Dict[QName, str] = {}
        for attribute in attributes:
            attribute_name = QName(
                attribute.namespace_uri or "", attribute.local_name, attribute.prefix or ""
            )
            attribute_name, scope = bind_attribute_name(scope, attribute_name)
            attribute_map[attribute_name] = attribute.value

        self._stack.append(_ElementFrame(name, attribute_map, scope))
        self.metrics.max_depth = max(self.metrics.max_depth, len(self._stack))

    def end_element(self, namespace_uri: str, local_name: str, prefix: str) -> None:
        self.metrics.events_processed += 1
        if not self._stack:
            raise ParserFaultError(f"End of element {local_name!r} without matching start")
        frame = self._stack.pop()
        if frame.name != QName(namespace_uri or "", local_name):
            raise ParserFaultError(
                f"End of element {local_name!r} does not match start of {frame.name}",
                details={"expected": str(frame.name)},
            )
        self._flush_text(frame)

        element = Element(frame.name, frame.attributes, frame.namespace_scope, tuple(frame.children))
        self.metrics.elements_built += 1

        if self._stack:
            self._stack[-1].children.append(element)
        else:
            self._root_element = element
            self._document_children.append(element)

    def characters(self, text: str, is_cdata: bool = False) -> None:
        self.metrics.events_processed += 1
        if not self._stack:
            if not is_xml_whitespace(text):
                raise ParserFaultError(
                    "Non-whitespace text outside the document element",
                    details={"text": text[:40]},
                )
            return

        frame = self._stack[-1]
        if frame.text_parts and (
            frame.text_is_cdata != is_cdata or not self.config.ingest.merge_adjacent_text
        ):
            self._flush_text(frame)
        frame.text_parts.append(text)
        frame.text_is_cdata = is_cdata

    def comment(self, text: str) -> None:
        self.metrics.events_processed += 1
        self._append_child(Comment(text))

    def processing_instruction(self, target: str, data: str) -> None:
        self.metrics.events_processed += 1
        self._append_child(ProcessingInstruction(target, data or ""))

    def fatal_error(self, exception: BaseException) -> None:
        self.logger.error(
            "Event source reported a fatal error",
            extra={"depth": len(self._stack), "error": str(exception)},
            exc_info=False,
        )
        raise ParserFaultError(f"Event source fault: {exception}", details=exception) from exception

    def _append_child(self, node: CanBeDocumentChild) -> None:
        if self._stack:
            frame = self._stack[-1]
            self._flush_text(frame)
            frame.children.append(node)
        else:
            self._document_children.append(node)

    def _flush_text(self, frame: _ElementFrame) -> None:
        if frame.text_parts:
            frame.children.append(Text("".join(frame.text_parts), frame.text_is_cdata))
            frame.text_parts = []
            self.metrics.text_nodes_built += 1


def bind_element_name(scope: NamespaceScope, name: QName) -> NamespaceScope:
    """Make sure the scope allows the element name."""
    if not name.namespace_uri:
        return scope.without_default_namespace()
    if scope.find_namespace_of_prefix(name.prefix) != name.namespace_uri:
        return scope.resolve_binding(name.prefix, name.namespace_uri)
    return scope


def bind_attribute_name(scope: NamespaceScope, name: QName) -> Tuple[QName, NamespaceScope]:
    """Make sure the scope allows the attribute name, inventing a prefix if needed."""
    if not name.namespace_uri or scope.allows_attribute_name(name):
        return name, scope
    if name.prefix:
        return name, scope.resolve_binding(name.prefix, name.namespace_uri)

    bound_prefixes = [p for p in scope.prefixes_of_namespace(name.namespace_uri) if p]
    if bound_prefixes:
        return name.with_prefix(bound_prefixes[0]), scope

    index = 0
    while scope.find_namespace_of_prefix(f"ns{index}") is not None:
        index += 1
    prefix = f"ns{index}"
    return name.with_prefix(prefix), scope.resolve_binding(prefix, name.namespace_uri)
