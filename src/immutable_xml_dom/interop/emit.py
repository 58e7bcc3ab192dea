"""Generating XML events from immutable documents and elements.

At each element boundary the generator relativizes the element's scope
against its parent's, reports the resulting (un)declarations as prefix
mappings before the start element event, and mirrors them after the end
element event. For XML 1.0 output, prefixed undeclarations are dropped.
"""

import time
from typing import Iterator, List, Optional, Tuple

from immutable_xml_dom.core.namespace_scope import EMPTY_SCOPE, NamespaceScope
from immutable_xml_dom.interop.events import AttributeEvent, EventHandler
from immutable_xml_dom.shared.config import DomConfig, XmlVersion
from immutable_xml_dom.shared.logging import get_logger
from immutable_xml_dom.shared.result import EmitMetrics
from immutable_xml_dom.tree.nodes import (
    Comment,
    Document,
    Element,
    Node,
    ProcessingInstruction,
    Text,
)


class EventGenerator:
    """Walks immutable nodes and reports them to an EventHandler."""

    def __init__(
        self,
        handler: EventHandler,
        config: Optional[DomConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.handler = handler
        self.config = config or DomConfig()
        self.logger = get_logger(__name__, correlation_id, "emit")
        self.metrics = EmitMetrics()

    def process_document(self, document: Document) -> None:
        """Emit a whole document, including the document events when configured."""
        start_time = time.perf_counter()
        emit_document_events = self.config.emit.emit_document_events

        if emit_document_events:
            self.handler.start_document(document.uri)
        for child in document.children:
            if isinstance(child, Element):
                self.process_element(child, EMPTY_SCOPE)
            elif isinstance(child, Comment):
                self.handler.comment(child.value)
            elif isinstance(child, ProcessingInstruction):
                self.handler.processing_instruction(child.target, child.data)
        if emit_document_events:
            self.handler.end_document()

        self.metrics.processing_time_ms = (time.perf_counter() - start_time) * 1000
        self.logger.debug(
            "Document emitted",
            extra={
                "elements_emitted": self.metrics.elements_emitted,
                "undeclarations_dropped": self.metrics.undeclarations_dropped,
            },
        )

    def process_element(self, element: Element, parent_scope: NamespaceScope = EMPTY_SCOPE) -> None:
        """Emit an element subtree as if its parent had the given scope.

        Open elements are kept on an explicit stack, together with the
        prefixes they declared and an iterator over their remaining children.
        """
        stack: List[Tuple[Element, Iterator[Node], List[str]]] = [
            self._start_element(element, parent_scope)
        ]
        while stack:
            current, remaining, declared_prefixes = stack[-1]
            for child in remaining:
                if isinstance(child, Element):
                    stack.append(self._start_element(child, current.namespace_scope))
                    break
                if isinstance(child, Text):
                    self.handler.characters(child.value, child.is_cdata)
                elif isinstance(child, Comment):
                    self.handler.comment(child.value)
                elif isinstance(child, ProcessingInstruction):
                    self.handler.processing_instruction(child.target, child.data)
            else:
                stack.pop()
                name = current.name
                self.handler.end_element(name.namespace_uri, name.local_name, name.prefix)
                for prefix in reversed(declared_prefixes):
                    self.handler.end_prefix_mapping(prefix)

    def _start_element(
        self, element: Element, parent_scope: NamespaceScope
    ) -> Tuple[Element, Iterator[Node], List[str]]:
        declarations = parent_scope.relativize(element.namespace_scope)
        if self.config.emit.xml_version is XmlVersion.XML_1_0:
            sanitized = NamespaceScope.without_prefixed_namespace_undeclarations(declarations)
            self.metrics.undeclarations_dropped += len(declarations) - len(sanitized)
            declarations = sanitized

        declared_prefixes: List[str] = []
        for prefix, namespace in declarations.items():
            self.handler.start_prefix_mapping(prefix, namespace)
            declared_prefixes.append(prefix)
        self.metrics.namespace_declarations_emitted += len(declared_prefixes)

        name = element.name
        attributes = [
            AttributeEvent(attr.namespace_uri, attr.local_name, attr.prefix, value)
            for attr, value in element.attributes.items()
        ]
        self.handler.start_element(name.namespace_uri, name.local_name, name.prefix, attributes)
        self.metrics.elements_emitted += 1
        return element, iter(element.children), declared_prefixes
