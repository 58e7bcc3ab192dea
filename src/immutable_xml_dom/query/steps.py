"""Element steps: reusable, composable axis selections.

A step maps an element to a lazy sequence of elements. Steps are syntactic
sugar over the query axes and compose with ``then``:

    >>> step = child_elements(has_book).then(descendant_elements(has_title))
    >>> titles = list(root.select(step))
"""

from typing import Any, Callable, Iterator, Optional

ElementPredicateFunction = Callable[[Any], bool]


class ElementStep:
    """Function from an element to an iterator of elements."""

    def __init__(self, function: Callable[[Any], Iterator[Any]], description: str = "step") -> None:
        self._function = function
        self.description = description

    def __call__(self, element: Any) -> Iterator[Any]:
        return iter(self._function(element))

    def then(self, next_step: "ElementStep") -> "ElementStep":
        """Apply this step, then the next step to every result, flattening."""
        def _composed(element: Any) -> Iterator[Any]:
            for intermediate in self(element):
                yield from next_step(intermediate)

        return ElementStep(_composed, f"{self.description}/{next_step.description}")

    def __repr__(self) -> str:
        return f"ElementStep({self.description})"


def self_elements(predicate: Optional[ElementPredicateFunction] = None) -> ElementStep:
    return ElementStep(lambda e: e.self_element_stream(predicate), "self")


def child_elements(predicate: Optional[ElementPredicateFunction] = None) -> ElementStep:
    return ElementStep(lambda e: e.child_element_stream(predicate), "child")


def descendant_elements_or_self(predicate: Optional[ElementPredicateFunction] = None) -> ElementStep:
    return ElementStep(
        lambda e: e.descendant_element_or_self_stream(predicate), "descendant-or-self"
    )


def descendant_elements(predicate: Optional[ElementPredicateFunction] = None) -> ElementStep:
    return ElementStep(lambda e: e.descendant_element_stream(predicate), "descendant")


def topmost_descendant_elements_or_self(predicate: ElementPredicateFunction) -> ElementStep:
    return ElementStep(
        lambda e: e.topmost_descendant_element_or_self_stream(predicate),
        "topmost-descendant-or-self",
    )


def topmost_descendant_elements(predicate: ElementPredicateFunction) -> ElementStep:
    return ElementStep(
        lambda e: e.topmost_descendant_element_stream(predicate), "topmost-descendant"
    )


def parent_element(predicate: Optional[ElementPredicateFunction] = None) -> ElementStep:
    """Parent step, for ancestry-aware elements only."""
    def _parent(element: Any) -> Iterator[Any]:
        parent = element.parent_element_option()
        if parent is not None and (predicate is None or predicate(parent)):
            yield parent

    return ElementStep(_parent, "parent")


def ancestor_elements_or_self(predicate: Optional[ElementPredicateFunction] = None) -> ElementStep:
    """Ancestor-or-self step, for ancestry-aware elements only."""
    return ElementStep(lambda e: e.ancestor_element_or_self_stream(predicate), "ancestor-or-self")


def ancestor_elements(predicate: Optional[ElementPredicateFunction] = None) -> ElementStep:
    """Ancestor step, for ancestry-aware elements only."""
    return ElementStep(lambda e: e.ancestor_element_stream(predicate), "ancestor")
