"""Composable element predicates.

Predicates are built from an ElementQueryApi, so the same factory code serves
every element kind. They combine with ``&``, ``|`` and ``~``.
"""

from typing import Any, Callable, Generic, Optional, Tuple, TypeVar, Union

from immutable_xml_dom.core.qname import QName
from immutable_xml_dom.core.whitespace import strip_xml_whitespace
from immutable_xml_dom.query.api import ElementQueryApi

E = TypeVar("E")

StringPredicate = Callable[[str], bool]
ValueCondition = Union[str, StringPredicate, None]


def _value_matcher(condition: ValueCondition) -> StringPredicate:
    if condition is None:
        return lambda value: True
    if isinstance(condition, str):
        return lambda value: value == condition
    return condition


class ElementPredicate(Generic[E]):
    """Callable element predicate supporting boolean composition."""

    def __init__(self, function: Callable[[E], bool], description: str = "predicate") -> None:
        self._function = function
        self.description = description

    def __call__(self, element: E) -> bool:
        return bool(self._function(element))

    def __and__(self, other: Callable[[E], bool]) -> "ElementPredicate[E]":
        return ElementPredicate(
            lambda e: self(e) and other(e),
            f"({self.description} and {_describe(other)})",
        )

    def __or__(self, other: Callable[[E], bool]) -> "ElementPredicate[E]":
        return ElementPredicate(
            lambda e: self(e) or other(e),
            f"({self.description} or {_describe(other)})",
        )

    def __invert__(self) -> "ElementPredicate[E]":
        return ElementPredicate(lambda e: not self(e), f"not {self.description}")

    def __repr__(self) -> str:
        return f"ElementPredicate({self.description})"


def _describe(predicate: Any) -> str:
    return getattr(predicate, "description", getattr(predicate, "__name__", "predicate"))


class ElementPredicateFactory(Generic[E]):
    """Factory of element predicates for one element kind.

    Example:
        >>> predicates = ElementPredicateFactory(Element.query_api)
        >>> is_book = predicates.has_name("http://books", "Book")
        >>> books = list(root.descendant_element_stream(is_book))
    """

    def __init__(self, api: ElementQueryApi[E]) -> None:
        self._api = api

    def always(self) -> ElementPredicate[E]:
        return ElementPredicate(lambda e: True, "always")

    def has_name_matching(self, name_predicate: Callable[[QName], bool]) -> ElementPredicate[E]:
        return ElementPredicate(
            lambda e: name_predicate(self._api.element_name(e)), "name matching"
        )

    def has_name(self, name: Union[QName, str], local_name: Optional[str] = None) -> ElementPredicate[E]:
        """Match the element name.

        Args:
            name: A QName, a namespace URI (when local_name is given), or a
                local name of an element in no namespace
            local_name: Local name, when name is a namespace URI

        Returns:
            Predicate comparing (namespace URI, local name), ignoring prefixes
        """
        expected = _to_qname(name, local_name)
        return ElementPredicate(
            lambda e: self._api.element_name(e) == expected, f"name == {expected}"
        )

    def has_local_name(self, local_name: str) -> ElementPredicate[E]:
        """Match the local name in any namespace."""
        return ElementPredicate(
            lambda e: self._api.element_name(e).local_name == local_name,
            f"local name == {local_name}",
        )

    def has_attribute_matching(
        self, attribute_predicate: Callable[[Tuple[QName, str]], bool]
    ) -> ElementPredicate[E]:
        """Match when some (name, value) attribute pair satisfies the predicate."""
        return ElementPredicate(
            lambda e: any(attribute_predicate(item) for item in self._api.attributes(e).items()),
            "attribute matching",
        )

    def has_attribute(self, name: Union[QName, str], value: ValueCondition = None) -> ElementPredicate[E]:
        """Match attribute presence, or its value.

        Args:
            name: Attribute QName, or local name of a no-namespace attribute
            value: Expected value, value predicate, or None for mere presence

        Returns:
            Element predicate
        """
        attribute_name = _to_qname(name, None)
        matches = _value_matcher(value)

        def _check(element: E) -> bool:
            actual = self._api.attributes(element).get(attribute_name)
            return actual is not None and matches(actual)

        return ElementPredicate(_check, f"has attribute {attribute_name}")

    def has_attribute_with_namespace(
        self, namespace_uri: str, local_name: str, value: ValueCondition = None
    ) -> ElementPredicate[E]:
        return self.has_attribute(QName(namespace_uri, local_name), value)

    def has_only_text(self, text: Union[str, StringPredicate]) -> ElementPredicate[E]:
        """Match elements whose children are all text, with matching concatenated text."""
        matches = _value_matcher(text)
        return ElementPredicate(
            lambda e: self._api.has_only_text_children(e) and matches(self._api.text(e)),
            "has only text",
        )

    def has_only_stripped_text(self, text: str) -> ElementPredicate[E]:
        """Like has_only_text, comparing the text after stripping XML whitespace."""
        return self.has_only_text(lambda value: strip_xml_whitespace(value) == text)


def _to_qname(name: Union[QName, str], local_name: Optional[str]) -> QName:
    if isinstance(name, QName):
        return name
    if local_name is None:
        return QName("", name)
    return QName(name, local_name)
