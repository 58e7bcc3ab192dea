"""Node model: elements, text, comments, processing instructions and documents."""

from .builder import ConciseNodeBuilder, NodeBuilder, comment, doc, elem, pi, text
from .comparison import (
    DefaultEqualityComparison,
    NodeEqualityComparison,
    StrippedTextEqualityComparison,
    default_equality,
    stripped_text_equality,
)
from .nodes import (
    CanBeDocumentChild,
    Comment,
    Document,
    Element,
    NativeElementQueryApi,
    Node,
    ProcessingInstruction,
    Text,
)

__all__ = [
    "ConciseNodeBuilder",
    "NodeBuilder",
    "comment",
    "doc",
    "elem",
    "pi",
    "text",
    "DefaultEqualityComparison",
    "NodeEqualityComparison",
    "StrippedTextEqualityComparison",
    "default_equality",
    "stripped_text_equality",
    "CanBeDocumentChild",
    "Comment",
    "Document",
    "Element",
    "NativeElementQueryApi",
    "Node",
    "ProcessingInstruction",
    "Text",
]
