"""Clark view: element trees without prefixes or namespace scopes.

Names are compared as (namespace URI, local name) only, which makes Clark
trees the canonical form for prefix-insensitive comparison. Clark nodes are
hashable; an element's hash is computed once, at construction.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from immutable_xml_dom.core.qname import QName
from immutable_xml_dom.query.api import ElementQueryApi, ElementQueryMixin, element_trees_equal
from immutable_xml_dom.transform.api import TransformableElementMixin


class ClarkNode:
    """Marker base class of all Clark nodes."""


class ClarkCanBeDocumentChild(ClarkNode):
    """Marker for Clark nodes allowed as document children."""


@dataclass(frozen=True)
class ClarkText(ClarkNode):
    value: str
    is_cdata: bool = field(default=False, compare=False)


@dataclass(frozen=True)
class ClarkComment(ClarkCanBeDocumentChild):
    value: str


@dataclass(frozen=True)
class ClarkProcessingInstruction(ClarkCanBeDocumentChild):
    target: str
    data: str = ""


_CLARK_CHILD_TYPES = (ClarkText, ClarkComment, ClarkProcessingInstruction)


@dataclass(frozen=True, eq=False)
class ClarkElement(ElementQueryMixin, TransformableElementMixin, ClarkCanBeDocumentChild):
    """Element carrying only a name, attributes and children.

    Attributes:
        name: Element name; any prefix hint is dropped
        attributes: Read-only attribute mapping; prefix hints are dropped
        children: Child nodes
    """

    name: QName
    attributes: Mapping[QName, str] = field(default_factory=dict)
    children: Tuple[ClarkNode, ...] = ()
    _hash: int = field(default=0, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Drop prefixes, freeze collections and compute the hash."""
        if not isinstance(self.name, QName):
            raise TypeError(f"Element name must be a QName, got {type(self.name).__name__}")
        object.__setattr__(self, "name", self.name.without_prefix())

        attributes = {}
        for attribute_name, value in self.attributes.items():
            if not isinstance(attribute_name, QName):
                raise TypeError(f"Attribute name must be a QName, got {attribute_name!r}")
            attributes[attribute_name.without_prefix()] = value
        object.__setattr__(self, "attributes", MappingProxyType(attributes))

        children = tuple(self.children)
        for child in children:
            if not isinstance(child, (ClarkElement,) + _CLARK_CHILD_TYPES):
                raise TypeError(f"Not a Clark child node: {child!r}")
        object.__setattr__(self, "children", children)

        object.__setattr__(
            self, "_hash", hash((self.name, frozenset(attributes.items()), children))
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClarkElement):
            return NotImplemented
        return element_trees_equal(self, other)

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return f"ClarkElement({self.name}, attributes={dict(self.attributes)!r}, children={len(self.children)})"

    def _new_text_node(self, value: str, is_cdata: bool = False) -> ClarkText:
        return ClarkText(value, is_cdata)


class ClarkElementQueryApi(ElementQueryApi[ClarkElement]):
    """Query capability of Clark elements."""

    def element_name(self, element: ClarkElement) -> QName:
        return element.name

    def attributes(self, element: ClarkElement) -> Mapping[QName, str]:
        return element.attributes

    def child_node_stream(self, element: ClarkElement) -> Iterable[ClarkNode]:
        return element.children

    def is_element_node(self, node: Any) -> bool:
        return isinstance(node, ClarkElement)

    def is_text_node(self, node: Any) -> bool:
        return isinstance(node, ClarkText)


ClarkElement.query_api = ClarkElementQueryApi()


@dataclass(frozen=True)
class ClarkDocument:
    """Clark projection of a document."""

    uri: Optional[str]
    children: Tuple[ClarkCanBeDocumentChild, ...]

    def __post_init__(self) -> None:
        children = tuple(self.children)
        if sum(1 for child in children if isinstance(child, ClarkElement)) != 1:
            raise ValueError("A document must have exactly one document element")
        object.__setattr__(self, "children", children)

    @property
    def document_element(self) -> ClarkElement:
        return next(child for child in self.children if isinstance(child, ClarkElement))


def clark_elem(
    name: Union[QName, str],
    attributes: Optional[Mapping[Union[QName, str], str]] = None,
    children: Iterable[ClarkNode] = ()
) -> ClarkElement:
    """Build a Clark element, accepting Clark notation strings for names.

    Example:
        >>> clark_elem("{http://ex}a", children=[clark_elem("{http://ex}b")])
    """
    element_name = name if isinstance(name, QName) else QName.from_clark(name)
    attribute_map = {
        (n if isinstance(n, QName) else QName.from_clark(n)): v
        for n, v in (attributes or {}).items()
    }
    return ClarkElement(element_name, attribute_map, tuple(children))
