"""Core value types: qualified names, namespace scopes and navigation paths."""

from .namespace_scope import EMPTY_SCOPE, NamespaceScope
from .navigation_path import NavigationPath, find_navigation_path, navigation_paths
from .qname import XML_NAMESPACE, XML_PREFIX, XMLNS_NAMESPACE, XMLNS_PREFIX, QName
from .whitespace import XML_WHITESPACE, is_xml_whitespace, strip_xml_whitespace

__all__ = [
    "EMPTY_SCOPE",
    "NamespaceScope",
    "NavigationPath",
    "find_navigation_path",
    "navigation_paths",
    "XML_NAMESPACE",
    "XML_PREFIX",
    "XMLNS_NAMESPACE",
    "XMLNS_PREFIX",
    "QName",
    "XML_WHITESPACE",
    "is_xml_whitespace",
    "strip_xml_whitespace",
]
