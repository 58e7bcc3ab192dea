"""Conversion between lxml trees and immutable documents.

lxml is imported lazily, so the rest of the package works without it. Export
builds lxml elements whose nsmap holds the namespace declarations of each
element relative to its parent; import reads the in-scope namespaces lxml
reports for every element. Both directions preserve the Clark projection.

libxml2 cannot express the undeclaration of a default namespace through an
nsmap. Trees that need one are exported with the default namespace replaced
by a generated prefix, which changes prefixes but not the Clark projection.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from immutable_xml_dom.core.namespace_scope import EMPTY_SCOPE, NamespaceScope
from immutable_xml_dom.core.qname import XML_NAMESPACE, QName
from immutable_xml_dom.interop.ingest import bind_attribute_name
from immutable_xml_dom.shared.config import DomConfig, WhitespacePolicy
from immutable_xml_dom.shared.errors import ParserFaultError
from immutable_xml_dom.shared.logging import get_logger
from immutable_xml_dom.tree.nodes import (
    CanBeDocumentChild,
    Comment,
    Document,
    Element,
    Node,
    ProcessingInstruction,
    Text,
)


class LxmlBridge:
    """Bidirectional conversion between lxml.etree and immutable nodes."""

    def __init__(
        self,
        config: Optional[DomConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or DomConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "lxml_bridge")

    def is_available(self) -> bool:
        """Check if lxml is available."""
        try:
            import lxml.etree  # noqa: F401
            return True
        except ImportError:
            return False

    # Export

    def to_lxml_element(self, element: Element, parent_scope: NamespaceScope = EMPTY_SCOPE) -> Any:
        """Convert an element to an lxml element.

        Args:
            element: Element to convert
            parent_scope: Scope the element is declared against

        Returns:
            lxml.etree._Element
        """
        import lxml.etree as ET

        start_time = time.perf_counter()
        if _needs_default_namespace_undeclaration(element, parent_scope):
            element = _prefix_default_namespaces(element)
            parent_scope = parent_scope.without_default_namespace()
            self.logger.debug("Default namespace replaced by prefix for export")

        lxml_root = self._export_element(ET, element, parent_scope, None)
        self.logger.debug(
            "Converted element to lxml",
            extra={"processing_time_ms": (time.perf_counter() - start_time) * 1000},
        )
        return lxml_root

    def to_lxml_document(self, document: Document) -> Any:
        """Convert a document to an lxml ElementTree, keeping top-level comments and PIs."""
        import lxml.etree as ET

        lxml_root = self.to_lxml_element(document.document_element)
        root_index = next(
            index for index, child in enumerate(document.children) if isinstance(child, Element)
        )
        for child in document.children[:root_index]:
            lxml_root.addprevious(self._export_leaf(ET, child))
        for child in reversed(document.children[root_index + 1:]):
            lxml_root.addnext(self._export_leaf(ET, child))

        tree = lxml_root.getroottree()
        if document.uri:
            tree.docinfo.URL = document.uri
        return tree

    def to_bytes(
        self,
        node: Union[Document, Element],
        encoding: str = "UTF-8",
        xml_declaration: bool = True,
        pretty_print: bool = False
    ) -> bytes:
        """Serialize a document or element through lxml."""
        import lxml.etree as ET

        target = self.to_lxml_document(node) if isinstance(node, Document) else self.to_lxml_element(node)
        return ET.tostring(
            target, encoding=encoding, xml_declaration=xml_declaration, pretty_print=pretty_print
        )

    def to_string(self, node: Union[Document, Element], pretty_print: bool = False) -> str:
        """Serialize a document or element to text, without XML declaration."""
        import lxml.etree as ET

        target = self.to_lxml_document(node) if isinstance(node, Document) else self.to_lxml_element(node)
        return ET.tostring(target, encoding="unicode", pretty_print=pretty_print)

    def _export_element(
        self,
        ET: Any,
        element: Element,
        parent_scope: NamespaceScope,
        lxml_parent: Optional[Any]
    ) -> Any:
        lxml_root = self._open_lxml_element(ET, element, parent_scope, lxml_parent)
        stack: List[Tuple[Element, Any, Iterator[Node]]] = [(element, lxml_root, iter(element.children))]
        while stack:
            current, lxml_element, remaining = stack[-1]
            for child in remaining:
                if isinstance(child, Element):
                    lxml_child = self._open_lxml_element(ET, child, current.namespace_scope, lxml_element)
                    stack.append((child, lxml_child, iter(child.children)))
                    break
                if isinstance(child, Text):
                    _append_text(ET, lxml_element, child)
                else:
                    lxml_element.append(self._export_leaf(ET, child))
            else:
                stack.pop()
        return lxml_root

    @staticmethod
    def _open_lxml_element(
        ET: Any,
        element: Element,
        parent_scope: NamespaceScope,
        lxml_parent: Optional[Any]
    ) -> Any:
        declarations = NamespaceScope.without_prefixed_namespace_undeclarations(
            parent_scope.relativize(element.namespace_scope)
        )
        nsmap = _ordered_nsmap(declarations, element.name)
        tag = element.name.clark_name
        attrib = {name.clark_name: value for name, value in element.attributes.items()}

        if lxml_parent is None:
            return ET.Element(tag, attrib, nsmap=nsmap)
        return ET.SubElement(lxml_parent, tag, attrib, nsmap=nsmap)

    @staticmethod
    def _export_leaf(ET: Any, node: CanBeDocumentChild) -> Any:
        if isinstance(node, Comment):
            return ET.Comment(node.value)
        if isinstance(node, ProcessingInstruction):
            return ET.ProcessingInstruction(node.target, node.data or None)
        raise TypeError(f"Not a comment or processing instruction: {node!r}")

    # Import

    def from_lxml_element(self, lxml_element: Any) -> Element:
        """Convert an lxml element (and its descendants) to an immutable element."""
        import lxml.etree as ET

        if not isinstance(lxml_element.tag, str):
            raise TypeError(f"Not an lxml element: {lxml_element!r}")
        start_time = time.perf_counter()
        element = self._import_element(ET, lxml_element)
        self.logger.debug(
            "Converted lxml element",
            extra={"processing_time_ms": (time.perf_counter() - start_time) * 1000},
        )
        return element

    def from_lxml_document(self, lxml_tree: Any, uri: Optional[str] = None) -> Document:
        """Convert an lxml ElementTree to a Document.

        Args:
            lxml_tree: lxml.etree._ElementTree
            uri: Document URI, defaulting to the tree's docinfo URL

        Returns:
            Document, with comments and PIs around the root element
        """
        import lxml.etree as ET

        lxml_root = lxml_tree.getroot()
        children: List[CanBeDocumentChild] = []
        preceding = list(lxml_root.itersiblings(preceding=True))
        for sibling in reversed(preceding):
            children.extend(self._import_leaf(ET, sibling))
        children.append(self.from_lxml_element(lxml_root))
        for sibling in lxml_root.itersiblings():
            children.extend(self._import_leaf(ET, sibling))

        document = Document(uri or lxml_tree.docinfo.URL, tuple(children))
        if self.config.ingest.whitespace_policy is WhitespacePolicy.STRIP:
            document = document.remove_inter_element_whitespace()
        return document

    def parse(self, source: Union[str, bytes], base_uri: Optional[str] = None) -> Document:
        """Parse XML with lxml, without resolving entities or touching the network.

        Raises:
            ParserFaultError: If the XML is not well-formed
        """
        import lxml.etree as ET

        parser = ET.XMLParser(resolve_entities=False, no_network=True, strip_cdata=False)
        data = source.encode("utf-8") if isinstance(source, str) else source
        try:
            lxml_root = ET.fromstring(data, parser, base_url=base_uri)
        except ET.XMLSyntaxError as e:
            self.logger.warning("lxml parsing failed", extra={"error": str(e)})
            raise ParserFaultError(f"XML parsing failed: {e}", details=e) from e
        return self.from_lxml_document(lxml_root.getroottree(), base_uri)

    def _import_element(self, ET: Any, lxml_element: Any) -> Element:
        stack = [self._open_import_frame(ET, lxml_element)]
        while True:
            frame = stack[-1]
            child_frame = None
            for lxml_child in frame.remaining:
                if isinstance(lxml_child.tag, str):
                    child_frame = self._open_import_frame(ET, lxml_child)
                    break
                frame.children.extend(self._import_leaf(ET, lxml_child))
                if lxml_child.tail:
                    frame.children.append(Text(lxml_child.tail))
            if child_frame is not None:
                stack.append(child_frame)
                continue

            stack.pop()
            element = Element(frame.name, frame.attributes, frame.scope, tuple(frame.children))
            if not stack:
                return element
            parent = stack[-1]
            parent.children.append(element)
            if frame.lxml_element.tail:
                parent.children.append(Text(frame.lxml_element.tail))

    @staticmethod
    def _open_import_frame(ET: Any, lxml_element: Any) -> "_ImportFrame":
        scope = NamespaceScope.from_mapping(
            {(prefix or ""): namespace for prefix, namespace in lxml_element.nsmap.items() if namespace}
        )
        lxml_qname = ET.QName(lxml_element)
        name = QName(lxml_qname.namespace or "", lxml_qname.localname, lxml_element.prefix or "")

        attributes = {}
        for key, value in lxml_element.attrib.items():
            attribute_name = QName.from_clark(key)
            if attribute_name.namespace_uri == XML_NAMESPACE:
                attribute_name = attribute_name.with_prefix("xml")
            attribute_name, scope = bind_attribute_name(scope, attribute_name)
            attributes[attribute_name] = value

        frame = _ImportFrame(lxml_element, name, attributes, scope, iter(lxml_element))
        if lxml_element.text:
            frame.children.append(Text(lxml_element.text))
        return frame

    def _import_leaf(self, ET: Any, lxml_node: Any) -> Iterable[CanBeDocumentChild]:
        if lxml_node.tag is ET.Comment:
            return (Comment(lxml_node.text or ""),)
        if lxml_node.tag is ET.ProcessingInstruction:
            return (ProcessingInstruction(lxml_node.target, lxml_node.text or ""),)
        self.logger.debug("Skipped unsupported lxml node", extra={"node": repr(lxml_node)})
        return ()


@dataclass
class _ImportFrame:
    """An lxml element whose immutable counterpart is still being built."""

    lxml_element: Any
    name: QName
    attributes: Dict[QName, str]
    scope: NamespaceScope
    remaining: Iterator[Any]
    children: List[Node] = field(default_factory=list)


def _append_text(ET: Any, lxml_element: Any, text: Text) -> None:
    """Append text after the last child, or as element text when there is none."""
    if len(lxml_element):
        last_child = lxml_element[-1]
        last_child.tail = (last_child.tail or "") + text.value
        return
    existing = lxml_element.text or ""
    if text.is_cdata and not existing:
        lxml_element.text = ET.CDATA(text.value)
    else:
        lxml_element.text = existing + text.value


def _ordered_nsmap(declarations: dict, element_name: QName) -> dict:
    """Build an lxml nsmap, putting the element name's own binding last.

    lxml uses the last matching declaration for the element's prefix.
    """
    items: List[Tuple[Optional[str], str]] = []
    own: List[Tuple[Optional[str], str]] = []
    for prefix, namespace in declarations.items():
        if not namespace:
            continue
        entry = (prefix or None, namespace)
        if prefix == element_name.prefix and namespace == element_name.namespace_uri:
            own.append(entry)
        else:
            items.append(entry)
    return dict(items + own)


def _needs_default_namespace_undeclaration(element: Element, parent_scope: NamespaceScope) -> bool:
    stack = [(element, parent_scope)]
    while stack:
        current, scope = stack.pop()
        if scope.default_namespace() is not None and current.namespace_scope.default_namespace() is None:
            return True
        for child in current.child_element_stream():
            stack.append((child, current.namespace_scope))
    return False


def _prefix_default_namespaces(element: Element) -> Element:
    """Replace every default namespace binding by a prefixed one."""
    def _rewrite(current: Element) -> Element:
        scope = current.namespace_scope
        default_namespace = scope.default_namespace()
        if default_namespace is None:
            return current
        prefixes = [p for p in scope.prefixes_of_namespace(default_namespace) if p]
        if prefixes:
            prefix = prefixes[0]
        else:
            index = 0
            while scope.find_namespace_of_prefix(f"ns{index}") is not None:
                index += 1
            prefix = f"ns{index}"
        new_scope = scope.without_default_namespace().resolve_binding(prefix, default_namespace)
        name = current.name
        if name.namespace_uri == default_namespace and not name.prefix:
            name = name.with_prefix(prefix)
        return Element(name, current.attributes, new_scope, current.children)

    return element.transform_descendant_elements_or_self(_rewrite)
