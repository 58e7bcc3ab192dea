"""Query layer: element query capability, lazy axes, predicates and steps."""

from .api import (
    AncestorElementIterator,
    AncestryAwareElementQueryApi,
    AncestryAwareElementQueryMixin,
    DescendantElementIterator,
    ElementQueryApi,
    ElementQueryMixin,
    TopmostElementIterator,
)
from .predicates import ElementPredicate, ElementPredicateFactory
from .steps import (
    ElementStep,
    ancestor_elements,
    ancestor_elements_or_self,
    child_elements,
    descendant_elements,
    descendant_elements_or_self,
    parent_element,
    self_elements,
    topmost_descendant_elements,
    topmost_descendant_elements_or_self,
)

__all__ = [
    "AncestorElementIterator",
    "AncestryAwareElementQueryApi",
    "AncestryAwareElementQueryMixin",
    "DescendantElementIterator",
    "ElementQueryApi",
    "ElementQueryMixin",
    "TopmostElementIterator",
    "ElementPredicate",
    "ElementPredicateFactory",
    "ElementStep",
    "ancestor_elements",
    "ancestor_elements_or_self",
    "child_elements",
    "descendant_elements",
    "descendant_elements_or_self",
    "parent_element",
    "self_elements",
    "topmost_descendant_elements",
    "topmost_descendant_elements_or_self",
]
