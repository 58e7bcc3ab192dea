"""Ancestry-aware view: elements that know their parents and base URI."""

from .nodes import (
    XML_BASE,
    AncestryAwareDocument,
    AncestryAwareElement,
    AncestryAwareElementQueryApiImpl,
    ElementTree,
)

__all__ = [
    "XML_BASE",
    "AncestryAwareDocument",
    "AncestryAwareElement",
    "AncestryAwareElementQueryApiImpl",
    "ElementTree",
]
