"""Immutable XML DOM.

Thread-safe, immutable XML element trees with a namespace model that keeps
prefixes and in-scope namespaces on every element.

Layers:
- core: qualified names, namespace scopes, navigation paths
- tree: native elements and documents, builders, equality comparisons
- query / transform: axes, predicates, steps and functional updates
- clark: the prefix-free view of a tree
- ancestry: elements that know their parents and base URI
- interop / api: event protocol, SAX and lxml bridges, parse and serialize
"""

__version__ = "0.1.0"
__author__ = "Immutable XML DOM Team"

# Level 1: Simple functions
from .api import (
    DomParser,
    emit_document,
    parse,
    parse_bytes,
    parse_file,
    parse_string,
    round_trip,
    to_xml_bytes,
    to_xml_string,
)
from .ancestry import AncestryAwareDocument, AncestryAwareElement
from .clark import ClarkDocument, ClarkElement, clark_elem

# Core value types
from .core import EMPTY_SCOPE, NamespaceScope, NavigationPath, QName
from .shared.config import DomConfig, WhitespacePolicy, XmlVersion
from .shared.errors import (
    EmptyNamespaceValueError,
    InvalidNameError,
    InvalidPrefixError,
    MalformedQNameError,
    ParserFaultError,
    PathOutOfRangeError,
    ReservedPrefixMisuseError,
    UnboundPrefixError,
    XmlDomError,
)
from .tree import (
    Comment,
    Document,
    Element,
    NodeBuilder,
    ProcessingInstruction,
    Text,
    doc,
    elem,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Parsing and serialization
    "DomParser",
    "emit_document",
    "parse",
    "parse_bytes",
    "parse_file",
    "parse_string",
    "round_trip",
    "to_xml_bytes",
    "to_xml_string",

    # Node model
    "Comment",
    "Document",
    "Element",
    "NodeBuilder",
    "ProcessingInstruction",
    "Text",
    "doc",
    "elem",
    "ClarkDocument",
    "ClarkElement",
    "clark_elem",
    "AncestryAwareDocument",
    "AncestryAwareElement",

    # Core value types
    "EMPTY_SCOPE",
    "NamespaceScope",
    "NavigationPath",
    "QName",

    # Configuration
    "DomConfig",
    "WhitespacePolicy",
    "XmlVersion",

    # Errors
    "EmptyNamespaceValueError",
    "InvalidNameError",
    "InvalidPrefixError",
    "MalformedQNameError",
    "ParserFaultError",
    "PathOutOfRangeError",
    "ReservedPrefixMisuseError",
    "UnboundPrefixError",
    "XmlDomError",
]
