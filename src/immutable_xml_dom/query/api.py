"""Element query capability and its axes.

ElementQueryApi is implemented once per element kind (native, Clark, ancestry
aware). Implementations only supply the element name, the attributes and the
child nodes; every axis is written once, here, in terms of those.

Each axis returns a fresh lazy iterator per call. Descendant axes walk the tree
in document pre-order using an explicit stack of child iterators, so deep
trees do not hit the recursion limit.
"""

from abc import ABC, abstractmethod
from typing import (
    Any,
    Callable,
    ClassVar,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)

from immutable_xml_dom.core.qname import QName

E = TypeVar("E")

ElementPredicateFunction = Callable[[Any], bool]


def _accept_all(element: Any) -> bool:
    return True


class DescendantElementIterator(Generic[E]):
    """Pre-order walk over descendant (or descendant-or-self) elements.

    The stack holds one child element iterator per open level. After an
    element is taken from the top iterator, the iterator over its own child
    elements is pushed, so its subtree is exhausted before its next sibling.
    """

    def __init__(
        self,
        api: "ElementQueryApi[E]",
        root: E,
        predicate: ElementPredicateFunction,
        include_self: bool
    ) -> None:
        self._api = api
        self._predicate = predicate
        if include_self:
            self._stack: List[Iterator[E]] = [iter((root,))]
        else:
            self._stack = [api.child_element_stream(root)]

    def __iter__(self) -> "DescendantElementIterator[E]":
        return self

    def __next__(self) -> E:
        while self._stack:
            element = next(self._stack[-1], None)
            if element is None:
                self._stack.pop()
                continue
            self._stack.append(self._api.child_element_stream(element))
            if self._predicate(element):
                return element
        raise StopIteration


class TopmostElementIterator(Generic[E]):
    """Pre-order walk that does not descend into matching elements.

    The result is the maximal antichain of matching elements: no returned
    element is a descendant of another returned element.
    """

    def __init__(
        self,
        api: "ElementQueryApi[E]",
        root: E,
        predicate: ElementPredicateFunction,
        include_self: bool
    ) -> None:
        self._api = api
        self._predicate = predicate
        if include_self:
            self._stack: List[Iterator[E]] = [iter((root,))]
        else:
            self._stack = [api.child_element_stream(root)]

    def __iter__(self) -> "TopmostElementIterator[E]":
        return self

    def __next__(self) -> E:
        while self._stack:
            element = next(self._stack[-1], None)
            if element is None:
                self._stack.pop()
                continue
            if self._predicate(element):
                return element
            self._stack.append(self._api.child_element_stream(element))
        raise StopIteration


class AncestorElementIterator(Generic[E]):
    """Walk up the parent chain, nearest ancestor first."""

    def __init__(
        self,
        api: "AncestryAwareElementQueryApi[E]",
        start: Optional[E],
        predicate: ElementPredicateFunction
    ) -> None:
        self._api = api
        self._current = start
        self._predicate = predicate

    def __iter__(self) -> "AncestorElementIterator[E]":
        return self

    def __next__(self) -> E:
        while self._current is not None:
            element = self._current
            self._current = self._api.parent_element_option(element)
            if self._predicate(element):
                return element
        raise StopIteration


def element_trees_equal(first: Any, second: Any) -> bool:
    """Compare two element trees by names, attributes and children.

    Both trees are walked side by side with an explicit stack. Elements must
    carry ``name``, ``attributes``, ``children`` and the cached ``_hash``;
    other nodes are compared with ``==``.
    """
    is_element = type(first).query_api.is_element_node
    pending: List[Tuple[Any, Any]] = [(first, second)]
    while pending:
        left, right = pending.pop()
        if left is right:
            continue
        if is_element(left):
            if not is_element(right):
                return False
            if (
                left._hash != right._hash
                or left.name != right.name
                or len(left.children) != len(right.children)
                or dict(left.attributes) != dict(right.attributes)
            ):
                return False
            pending.extend(zip(left.children, right.children))
        elif is_element(right) or left != right:
            return False
    return True


class ElementQueryApi(ABC, Generic[E]):
    """Query capability over an element type E."""

    @abstractmethod
    def element_name(self, element: E) -> QName:
        """Return the name of the element."""

    @abstractmethod
    def attributes(self, element: E) -> Mapping[QName, str]:
        """Return the attributes of the element."""

    @abstractmethod
    def child_node_stream(self, element: E) -> Iterable[Any]:
        """Return all child nodes of the element, in document order."""

    @abstractmethod
    def is_element_node(self, node: Any) -> bool:
        """Check whether a child node is an element of kind E."""

    @abstractmethod
    def is_text_node(self, node: Any) -> bool:
        """Check whether a child node is a text node."""

    def attribute_option(self, element: E, attribute_name: QName) -> Optional[str]:
        return self.attributes(element).get(attribute_name)

    def attribute(self, element: E, attribute_name: QName) -> str:
        value = self.attribute_option(element, attribute_name)
        if value is None:
            raise KeyError(f"No attribute {attribute_name} on element {self.element_name(element)}")
        return value

    def text(self, element: E) -> str:
        """Concatenate the values of the text children."""
        return "".join(
            node.value for node in self.child_node_stream(element) if self.is_text_node(node)
        )

    def has_only_text_children(self, element: E) -> bool:
        return all(self.is_text_node(node) for node in self.child_node_stream(element))

    def self_element_stream(
        self, element: E, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[E]:
        if predicate is None or predicate(element):
            return iter((element,))
        return iter(())

    def child_element_stream(
        self, element: E, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[E]:
        check = predicate or _accept_all
        return (
            node for node in self.child_node_stream(element)
            if self.is_element_node(node) and check(node)
        )

    def descendant_element_or_self_stream(
        self, element: E, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[E]:
        return DescendantElementIterator(self, element, predicate or _accept_all, True)

    def descendant_element_stream(
        self, element: E, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[E]:
        return DescendantElementIterator(self, element, predicate or _accept_all, False)

    def topmost_descendant_element_or_self_stream(
        self, element: E, predicate: ElementPredicateFunction
    ) -> Iterator[E]:
        return TopmostElementIterator(self, element, predicate, True)

    def topmost_descendant_element_stream(
        self, element: E, predicate: ElementPredicateFunction
    ) -> Iterator[E]:
        return TopmostElementIterator(self, element, predicate, False)

    # Aliases

    def element_stream(
        self, element: E, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[E]:
        return self.descendant_element_or_self_stream(element, predicate)

    def topmost_element_stream(self, element: E, predicate: ElementPredicateFunction) -> Iterator[E]:
        return self.topmost_descendant_element_or_self_stream(element, predicate)


class AncestryAwareElementQueryApi(ElementQueryApi[E]):
    """Query capability for element types that know their parent."""

    @abstractmethod
    def parent_element_option(self, element: E) -> Optional[E]:
        """Return the parent element, or None for the root element."""

    def parent_element(self, element: E) -> E:
        parent = self.parent_element_option(element)
        if parent is None:
            raise LookupError(f"Element {self.element_name(element)} has no parent element")
        return parent

    def ancestor_element_or_self_stream(
        self, element: E, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[E]:
        return AncestorElementIterator(self, element, predicate or _accept_all)

    def ancestor_element_stream(
        self, element: E, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[E]:
        return AncestorElementIterator(
            self, self.parent_element_option(element), predicate or _accept_all
        )


class ElementQueryMixin:
    """Method-style access to the query axes of an element kind.

    Element classes set ``query_api`` to the ElementQueryApi of their kind.
    """

    query_api: ClassVar[ElementQueryApi[Any]]

    def element_name(self) -> QName:
        return self.query_api.element_name(self)

    def attribute_option(self, attribute_name: QName) -> Optional[str]:
        return self.query_api.attribute_option(self, attribute_name)

    def attribute(self, attribute_name: QName) -> str:
        return self.query_api.attribute(self, attribute_name)

    def text(self) -> str:
        return self.query_api.text(self)

    def child_node_stream(self) -> Iterator[Any]:
        return iter(self.query_api.child_node_stream(self))

    def self_element_stream(self, predicate: Optional[ElementPredicateFunction] = None) -> Iterator[Any]:
        return self.query_api.self_element_stream(self, predicate)

    def child_element_stream(self, predicate: Optional[ElementPredicateFunction] = None) -> Iterator[Any]:
        return self.query_api.child_element_stream(self, predicate)

    def descendant_element_or_self_stream(
        self, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[Any]:
        return self.query_api.descendant_element_or_self_stream(self, predicate)

    def descendant_element_stream(
        self, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[Any]:
        return self.query_api.descendant_element_stream(self, predicate)

    def topmost_descendant_element_or_self_stream(
        self, predicate: ElementPredicateFunction
    ) -> Iterator[Any]:
        return self.query_api.topmost_descendant_element_or_self_stream(self, predicate)

    def topmost_descendant_element_stream(self, predicate: ElementPredicateFunction) -> Iterator[Any]:
        return self.query_api.topmost_descendant_element_stream(self, predicate)

    def element_stream(self, predicate: Optional[ElementPredicateFunction] = None) -> Iterator[Any]:
        return self.query_api.element_stream(self, predicate)

    def topmost_element_stream(self, predicate: ElementPredicateFunction) -> Iterator[Any]:
        return self.query_api.topmost_element_stream(self, predicate)

    def select(self, step: Callable[[Any], Iterator[Any]]) -> Iterator[Any]:
        """Apply an element step to this element."""
        return step(self)


class AncestryAwareElementQueryMixin(ElementQueryMixin):
    """Method-style access to the ancestor axes."""

    query_api: ClassVar[AncestryAwareElementQueryApi[Any]]

    def parent_element_option(self) -> Optional[Any]:
        return self.query_api.parent_element_option(self)

    def parent_element(self) -> Any:
        return self.query_api.parent_element(self)

    def ancestor_element_or_self_stream(
        self, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[Any]:
        return self.query_api.ancestor_element_or_self_stream(self, predicate)

    def ancestor_element_stream(
        self, predicate: Optional[ElementPredicateFunction] = None
    ) -> Iterator[Any]:
        return self.query_api.ancestor_element_stream(self, predicate)
