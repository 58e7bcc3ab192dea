"""Node equality comparisons.

The default comparison ignores prefixes, namespace scopes and CDATA flags,
which makes it equivalent to comparing Clark projections. Other comparisons
can be layered on top, like the one ignoring surrounding whitespace in text.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from immutable_xml_dom.core.whitespace import is_xml_whitespace, strip_xml_whitespace
from immutable_xml_dom.tree.nodes import Comment, Element, Node, ProcessingInstruction, Text


class NodeEqualityComparison(ABC):
    """Strategy deciding whether two nodes are equal."""

    @abstractmethod
    def equal(self, first: Node, second: Node) -> bool:
        """Compare two nodes."""

    def __call__(self, first: Node, second: Node) -> bool:
        return self.equal(first, second)


class DefaultEqualityComparison(NodeEqualityComparison):
    """Structural equality ignoring prefixes, scopes and CDATA flags.

    Walks both trees side by side with an explicit stack.
    """

    def equal(self, first: Node, second: Node) -> bool:
        pending: List[Tuple[Any, Any]] = [(first, second)]
        while pending:
            left, right = pending.pop()
            if isinstance(left, Element):
                if not isinstance(right, Element):
                    return False
                if left.name != right.name or dict(left.attributes) != dict(right.attributes):
                    return False
                left_children = self.normalize_children(left)
                right_children = self.normalize_children(right)
                if len(left_children) != len(right_children):
                    return False
                pending.extend(zip(left_children, right_children))
            elif isinstance(left, Text):
                if not isinstance(right, Text) or not self.text_equal(left.value, right.value):
                    return False
            elif isinstance(left, (Comment, ProcessingInstruction)):
                if left != right:
                    return False
            else:
                raise TypeError(f"Cannot compare node {left!r}")
        return True

    def normalize_children(self, element: Element) -> Tuple[Node, ...]:
        return element.children

    def text_equal(self, first: str, second: str) -> bool:
        return first == second


class StrippedTextEqualityComparison(DefaultEqualityComparison):
    """Like the default comparison, but strips XML whitespace from text first.

    Whitespace-only text nodes are ignored altogether, so indentation does
    not matter.
    """

    def normalize_children(self, element: Element) -> Tuple[Node, ...]:
        return tuple(
            child for child in element.children
            if not (isinstance(child, Text) and is_xml_whitespace(child.value))
        )

    def text_equal(self, first: str, second: str) -> bool:
        return strip_xml_whitespace(first) == strip_xml_whitespace(second)


_DEFAULT_EQUALITY = DefaultEqualityComparison()


def default_equality() -> NodeEqualityComparison:
    return _DEFAULT_EQUALITY


def stripped_text_equality() -> NodeEqualityComparison:
    return StrippedTextEqualityComparison()
