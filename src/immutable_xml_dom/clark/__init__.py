"""Clark view: prefix-free, scope-free element trees."""

from .nodes import (
    ClarkCanBeDocumentChild,
    ClarkComment,
    ClarkDocument,
    ClarkElement,
    ClarkElementQueryApi,
    ClarkNode,
    ClarkProcessingInstruction,
    ClarkText,
    clark_elem,
)

__all__ = [
    "ClarkCanBeDocumentChild",
    "ClarkComment",
    "ClarkDocument",
    "ClarkElement",
    "ClarkElementQueryApi",
    "ClarkNode",
    "ClarkProcessingInstruction",
    "ClarkText",
    "clark_elem",
]
