"""Immutable, namespace-aware XML node model.

Every element carries its own namespace scope, so any subtree can be taken
out of its document and still knows how its prefixes are bound. All node
types are frozen dataclasses over tuples and read-only mappings, and can be
shared between threads without coordination.

Element equality ignores prefixes and scopes: two elements are equal when
their Clark projections are equal.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from immutable_xml_dom.clark.nodes import (
    ClarkComment,
    ClarkDocument,
    ClarkElement,
    ClarkProcessingInstruction,
    ClarkText,
)
from immutable_xml_dom.core.namespace_scope import EMPTY_SCOPE, NamespaceScope
from immutable_xml_dom.core.qname import XMLNS_PREFIX, QName
from immutable_xml_dom.query.api import ElementQueryApi, ElementQueryMixin, element_trees_equal
from immutable_xml_dom.shared.errors import InvalidNameError, UnboundPrefixError
from immutable_xml_dom.transform.api import TransformableElementMixin, rebuild_bottom_up


class Node:
    """Marker base class of all nodes."""

    def to_clark_node(self) -> Any:
        raise NotImplementedError


class CanBeDocumentChild(Node):
    """Marker for nodes allowed as document children: elements, comments, PIs."""


@dataclass(frozen=True)
class Text(Node):
    """Text node.

    The CDATA flag only records how the text was written and takes no part
    in equality.
    """

    value: str
    is_cdata: bool = field(default=False, compare=False)

    def to_clark_node(self) -> ClarkText:
        return ClarkText(self.value, self.is_cdata)


@dataclass(frozen=True)
class Comment(CanBeDocumentChild):
    value: str

    def to_clark_node(self) -> ClarkComment:
        return ClarkComment(self.value)


@dataclass(frozen=True)
class ProcessingInstruction(CanBeDocumentChild):
    target: str
    data: str = ""

    def to_clark_node(self) -> ClarkProcessingInstruction:
        return ClarkProcessingInstruction(self.target, self.data)


@dataclass(frozen=True, eq=False)
class Element(ElementQueryMixin, TransformableElementMixin, CanBeDocumentChild):
    """Immutable element with its own namespace scope.

    Attributes:
        name: Element name, consistent with the scope
        attributes: Read-only attribute mapping, never holding namespace
            declarations
        namespace_scope: In-scope namespaces of this element
        children: Element, text, comment and processing instruction children

    Raises:
        UnboundPrefixError: If the name or an attribute name disagrees with
            the scope
        TypeError: If a child is not an element, text, comment or PI node
    """

    name: QName
    attributes: Mapping[QName, str] = field(default_factory=dict)
    namespace_scope: NamespaceScope = EMPTY_SCOPE
    children: Tuple[Node, ...] = ()
    _hash: int = field(default=0, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Check namespace consistency and freeze collections."""
        if not isinstance(self.name, QName):
            raise TypeError(f"Element name must be a QName, got {type(self.name).__name__}")

        scope = self.namespace_scope
        if not isinstance(scope, NamespaceScope):
            scope = NamespaceScope.from_mapping(scope)
            object.__setattr__(self, "namespace_scope", scope)

        if not scope.allows_element_name(self.name):
            raise UnboundPrefixError(
                f"Element name {self.name.syntactic_name!r} ({self.name}) "
                f"is not allowed by {scope!r}",
                prefix=self.name.prefix,
            )

        attributes = self.attributes
        if not isinstance(attributes, MappingProxyType):
            attributes = MappingProxyType(dict(attributes))
            object.__setattr__(self, "attributes", attributes)
        for attribute_name in attributes:
            if not isinstance(attribute_name, QName):
                raise TypeError(f"Attribute name must be a QName, got {attribute_name!r}")
            if not attribute_name.namespace_uri and attribute_name.local_name == XMLNS_PREFIX:
                raise InvalidNameError(
                    "Namespace declarations are not attributes", name=attribute_name.local_name
                )
            if not scope.allows_attribute_name(attribute_name):
                raise UnboundPrefixError(
                    f"Attribute name {attribute_name.syntactic_name!r} ({attribute_name}) "
                    f"is not allowed by {scope!r}",
                    prefix=attribute_name.prefix,
                )

        children = self.children
        if not isinstance(children, tuple):
            children = tuple(children)
            object.__setattr__(self, "children", children)
        for child in children:
            if not isinstance(child, (Element, Text, Comment, ProcessingInstruction)):
                raise TypeError(f"Not an element child node: {child!r}")

        object.__setattr__(
            self, "_hash", hash((self.name, frozenset(attributes.items()), children))
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return element_trees_equal(self, other)

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return (
            f"Element({self.name.syntactic_name!r}, {self.name}, "
            f"attributes={len(self.attributes)}, children={len(self.children)})"
        )

    def _new_text_node(self, value: str, is_cdata: bool = False) -> Text:
        return Text(value, is_cdata)

    def namespace_scope_option(self) -> Optional[NamespaceScope]:
        return self.namespace_scope

    def with_namespace_scope(self, namespace_scope: NamespaceScope) -> "Element":
        """Replace the scope; the name and attribute names must still agree with it."""
        return replace(self, namespace_scope=namespace_scope)

    def plus_namespace_binding(self, prefix: str, namespace: str) -> "Element":
        """Add one binding to this element's scope only.

        Descendants do not get the binding, so prefer not_undeclaring_prefixes
        when the prefix is used further down.
        """
        return self.with_namespace_scope(self.namespace_scope.resolve_binding(prefix, namespace))

    def not_undeclaring_prefixes(self, parent_scope: NamespaceScope) -> "Element":
        """Add parent bindings so that no descendant undeclares a prefix.

        The new scope of each element is the parent scope, without its default
        namespace, resolved with the element's own bindings. The element's own
        bindings win, and the default namespace is never introduced, so the
        Clark projection is unchanged.

        Args:
            parent_scope: Scope taken as starting point

        Returns:
            Element tree without prefixed namespace undeclarations relative
            to the parent scope
        """
        def _enter(element: Element, scope: NamespaceScope) -> NamespaceScope:
            return scope.without_default_namespace().resolve(element.namespace_scope.bindings)

        def _rebuild(element: Element, children: List[Node], scope: NamespaceScope) -> Element:
            if scope == element.namespace_scope:
                return element._with_children_if_changed(children)
            return replace(element, namespace_scope=scope, children=tuple(children))

        return rebuild_bottom_up(
            self,
            _is_element,
            _rebuild,
            enter=_enter,
            root_state=_enter(self, parent_scope),
        )

    def with_parent_attribute_scope(self, parent_scope: NamespaceScope) -> "Element":
        """Alias of not_undeclaring_prefixes."""
        return self.not_undeclaring_prefixes(parent_scope)

    def to_clark_node(self) -> ClarkElement:
        """Project to the Clark view, dropping scopes and prefixes."""
        return rebuild_bottom_up(
            self,
            _is_element,
            lambda element, children, _: ClarkElement(element.name, element.attributes, tuple(children)),
            leaf=lambda node: node.to_clark_node(),
        )


def _is_element(node: Any) -> bool:
    return isinstance(node, Element)


class NativeElementQueryApi(ElementQueryApi[Element]):
    """Query capability of native elements."""

    def element_name(self, element: Element) -> QName:
        return element.name

    def attributes(self, element: Element) -> Mapping[QName, str]:
        return element.attributes

    def child_node_stream(self, element: Element) -> Iterable[Node]:
        return element.children

    def is_element_node(self, node: Any) -> bool:
        return isinstance(node, Element)

    def is_text_node(self, node: Any) -> bool:
        return isinstance(node, Text)


Element.query_api = NativeElementQueryApi()


@dataclass(frozen=True)
class Document:
    """XML document: an optional URI and the document children.

    Exactly one child is an element; comments and processing instructions
    before and after it keep their positions.
    """

    uri: Optional[str]
    children: Tuple[CanBeDocumentChild, ...]

    def __post_init__(self) -> None:
        """Validate the document children."""
        children = tuple(self.children)
        for child in children:
            if not isinstance(child, (Element, Comment, ProcessingInstruction)):
                raise TypeError(f"Not a document child node: {child!r}")
        element_count = sum(1 for child in children if isinstance(child, Element))
        if element_count != 1:
            raise ValueError(
                f"A document must have exactly one document element, found {element_count}"
            )
        object.__setattr__(self, "children", children)

    @classmethod
    def of(cls, document_element: Element, uri: Optional[str] = None) -> "Document":
        return cls(uri, (document_element,))

    @property
    def document_element(self) -> Element:
        for child in self.children:
            if isinstance(child, Element):
                return child
        raise ValueError("Document without document element")

    @property
    def uri_option(self) -> Optional[str]:
        return self.uri

    def with_uri(self, uri: Optional[str]) -> "Document":
        return replace(self, uri=uri)

    def with_document_element(self, document_element: Element) -> "Document":
        """Replace the document element, keeping its position."""
        return replace(
            self,
            children=tuple(
                document_element if isinstance(child, Element) else child
                for child in self.children
            ),
        )

    def transform_document_element(self, f: Callable[[Element], Element]) -> "Document":
        return self.with_document_element(f(self.document_element))

    def remove_inter_element_whitespace(self) -> "Document":
        return self.transform_document_element(Element.remove_inter_element_whitespace)

    def to_clark_node(self) -> ClarkDocument:
        return ClarkDocument(self.uri, tuple(child.to_clark_node() for child in self.children))
