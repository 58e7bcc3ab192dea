"""Ancestry-aware view of an immutable element tree.

The tree is indexed once, at construction, by navigation path. An
ancestry-aware element is a (tree, path) pair: parents are found by dropping
the last path entry, so no parent pointers or cycles are stored. Two
ancestry-aware elements are equal when they belong to the same tree object
and have the same path.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import urljoin

from immutable_xml_dom.core.namespace_scope import NamespaceScope
from immutable_xml_dom.core.navigation_path import NavigationPath
from immutable_xml_dom.core.qname import XML_NAMESPACE, QName
from immutable_xml_dom.query.api import (
    AncestryAwareElementQueryApi,
    AncestryAwareElementQueryMixin,
)
from immutable_xml_dom.shared.errors import PathOutOfRangeError
from immutable_xml_dom.tree.nodes import Document, Element, Node, Text

XML_BASE = QName(XML_NAMESPACE, "base", "xml")


class ElementTree:
    """Path index over an immutable root element.

    Attributes:
        doc_uri: Optional URI of the containing document
        root: Underlying root element
    """

    __slots__ = ("_root", "_doc_uri", "_elements")

    def __init__(self, root: Element, doc_uri: Optional[str] = None) -> None:
        self._root = root
        self._doc_uri = doc_uri
        self._elements: Mapping[NavigationPath, Element] = MappingProxyType(_index_elements(root))

    @property
    def root(self) -> Element:
        return self._root

    @property
    def doc_uri(self) -> Optional[str]:
        return self._doc_uri

    def __len__(self) -> int:
        return len(self._elements)

    def __repr__(self) -> str:
        return f"ElementTree(root={self.root.name}, doc_uri={self.doc_uri!r}, elements={len(self)})"

    def element_at(self, path: NavigationPath) -> Element:
        return self._elements[path]

    def contains_path(self, path: NavigationPath) -> bool:
        return path in self._elements

    def root_element(self) -> "AncestryAwareElement":
        return AncestryAwareElement(self, NavigationPath.empty())

    def element(self, path: NavigationPath) -> "AncestryAwareElement":
        """Return the ancestry-aware element at the given path.

        Raises:
            PathOutOfRangeError: If the path does not resolve
        """
        if path not in self._elements:
            raise PathOutOfRangeError(
                f"Navigation path {path} does not resolve in {self!r}", path=path.entries
            )
        return AncestryAwareElement(self, path)


def _index_elements(root: Element) -> Dict[NavigationPath, Element]:
    index: Dict[NavigationPath, Element] = {}
    stack: List[Tuple[Element, NavigationPath]] = [(root, NavigationPath.empty())]
    while stack:
        element, path = stack.pop()
        index[path] = element
        for child_index, child in enumerate(element.child_element_stream()):
            stack.append((child, path.append_entry(child_index)))
    return index


@dataclass(frozen=True, eq=False)
class AncestryAwareElement(AncestryAwareElementQueryMixin):
    """Element that knows its ancestors through its tree and path.

    Non-element children are the underlying (immutable) text, comment and
    processing instruction nodes.
    """

    tree: ElementTree
    navigation_path: NavigationPath = field(default_factory=NavigationPath.empty)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AncestryAwareElement):
            return NotImplemented
        return self.tree is other.tree and self.navigation_path == other.navigation_path

    def __hash__(self) -> int:
        return hash((id(self.tree), self.navigation_path))

    def __repr__(self) -> str:
        return f"AncestryAwareElement({self.name}, path={self.navigation_path})"

    @staticmethod
    def create(doc_uri: Optional[str], root: Element) -> "AncestryAwareElement":
        """Create the ancestry-aware root element of a new tree."""
        return ElementTree(root, doc_uri).root_element()

    @property
    def underlying_element(self) -> Element:
        return self.tree.element_at(self.navigation_path)

    @property
    def name(self) -> QName:
        return self.underlying_element.name

    @property
    def attributes(self) -> Mapping[QName, str]:
        return self.underlying_element.attributes

    @property
    def namespace_scope(self) -> NamespaceScope:
        return self.underlying_element.namespace_scope

    @property
    def doc_uri(self) -> Optional[str]:
        return self.tree.doc_uri

    def root_element(self) -> "AncestryAwareElement":
        return self.tree.root_element()

    def base_uri_option(self) -> Optional[str]:
        """Compute the effective base URI.

        Starting from the document URI, the xml:base attributes of the
        ancestor-or-self elements are resolved outermost first.
        """
        xml_bases = [
            element.attributes[XML_BASE]
            for element in self.ancestor_element_or_self_stream()
            if XML_BASE in element.attributes
        ]
        base_uri = self.doc_uri
        for xml_base in reversed(xml_bases):
            base_uri = urljoin(base_uri, xml_base) if base_uri else xml_base
        return base_uri

    def base_uri(self) -> str:
        base_uri = self.base_uri_option()
        if base_uri is None:
            raise LookupError(f"No base URI known for element {self.name}")
        return base_uri


class AncestryAwareElementQueryApiImpl(AncestryAwareElementQueryApi[AncestryAwareElement]):
    """Query capability of ancestry-aware elements."""

    def element_name(self, element: AncestryAwareElement) -> QName:
        return element.underlying_element.name

    def attributes(self, element: AncestryAwareElement) -> Mapping[QName, str]:
        return element.underlying_element.attributes

    def child_node_stream(self, element: AncestryAwareElement) -> Iterable[Any]:
        return _ChildNodeIterator(element)

    def is_element_node(self, node: Any) -> bool:
        return isinstance(node, AncestryAwareElement)

    def is_text_node(self, node: Any) -> bool:
        return isinstance(node, Text)

    def parent_element_option(self, element: AncestryAwareElement) -> Optional[AncestryAwareElement]:
        parent_path = element.navigation_path.without_last_entry_option()
        if parent_path is None:
            return None
        return AncestryAwareElement(element.tree, parent_path)


class _ChildNodeIterator:
    """Child nodes, wrapping element children with their paths."""

    def __init__(self, element: AncestryAwareElement) -> None:
        self._tree = element.tree
        self._path = element.navigation_path
        self._children = iter(element.underlying_element.children)
        self._element_index = 0

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        child = next(self._children)
        if isinstance(child, Element):
            wrapped = AncestryAwareElement(self._tree, self._path.append_entry(self._element_index))
            self._element_index += 1
            return wrapped
        return child


AncestryAwareElement.query_api = AncestryAwareElementQueryApiImpl()


class AncestryAwareDocument:
    """Document whose document element is ancestry aware."""

    def __init__(self, uri: Optional[str], document: Document) -> None:
        self.uri = uri
        self.underlying_document = document
        self.element_tree = ElementTree(document.document_element, uri)

    @classmethod
    def from_document(cls, document: Document) -> "AncestryAwareDocument":
        return cls(document.uri, document)

    def __repr__(self) -> str:
        return f"AncestryAwareDocument(uri={self.uri!r}, root={self.element_tree.root.name})"

    @property
    def document_element(self) -> AncestryAwareElement:
        return self.element_tree.root_element()

    @property
    def children(self) -> Tuple[Node, ...]:
        """Document children, with the document element wrapped."""
        return tuple(
            self.document_element if isinstance(child, Element) else child
            for child in self.underlying_document.children
        )

