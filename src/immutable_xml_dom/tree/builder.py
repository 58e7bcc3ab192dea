"""Node construction helpers.

NodeBuilder threads a namespace scope through element creation, so that all
elements it builds share one scope. ConciseNodeBuilder does the same with
syntactic names such as "p:local", resolved against that scope.
"""

from typing import Iterable, Mapping, Optional, Union

from immutable_xml_dom.core.namespace_scope import EMPTY_SCOPE, NamespaceScope
from immutable_xml_dom.core.qname import QName
from immutable_xml_dom.tree.nodes import (
    CanBeDocumentChild,
    Comment,
    Document,
    Element,
    Node,
    ProcessingInstruction,
    Text,
)


class NodeBuilder:
    """Builds nodes whose elements all use the builder's scope.

    Example:
        >>> builder = NodeBuilder(NamespaceScope({"b": "http://books"}))
        >>> title = builder.text_element(QName("http://books", "Title", "b"), "Dune")
    """

    def __init__(self, namespace_scope: NamespaceScope = EMPTY_SCOPE) -> None:
        self.namespace_scope = namespace_scope

    @classmethod
    def empty(cls) -> "NodeBuilder":
        return cls(EMPTY_SCOPE)

    def resolve(self, mapping: Mapping[str, str]) -> "NodeBuilder":
        """Return a builder whose scope is resolved with the given (un)declarations."""
        return NodeBuilder(self.namespace_scope.resolve(mapping))

    def resolve_binding(self, prefix: str, namespace: str) -> "NodeBuilder":
        return NodeBuilder(self.namespace_scope.resolve_binding(prefix, namespace))

    def element(
        self,
        name: QName,
        attributes: Optional[Mapping[QName, str]] = None,
        children: Iterable[Node] = ()
    ) -> Element:
        return Element(name, attributes or {}, self.namespace_scope, tuple(children))

    def text_element(
        self,
        name: QName,
        text_value: str,
        attributes: Optional[Mapping[QName, str]] = None
    ) -> Element:
        return self.element(name, attributes, (Text(text_value),))

    def text(self, value: str, is_cdata: bool = False) -> Text:
        return Text(value, is_cdata)

    def comment(self, value: str) -> Comment:
        return Comment(value)

    def processing_instruction(self, target: str, data: str = "") -> ProcessingInstruction:
        return ProcessingInstruction(target, data)


class ConciseNodeBuilder(NodeBuilder):
    """NodeBuilder taking syntactic element and attribute names.

    Element names take the default namespace; unprefixed attribute names
    never do.
    """

    @classmethod
    def empty(cls) -> "ConciseNodeBuilder":
        return cls(EMPTY_SCOPE)

    def resolve(self, mapping: Mapping[str, str]) -> "ConciseNodeBuilder":
        return ConciseNodeBuilder(self.namespace_scope.resolve(mapping))

    def resolve_binding(self, prefix: str, namespace: str) -> "ConciseNodeBuilder":
        return ConciseNodeBuilder(self.namespace_scope.resolve_binding(prefix, namespace))

    def element(  # type: ignore[override]
        self,
        name: Union[str, QName],
        attributes: Optional[Mapping[Union[str, QName], str]] = None,
        children: Iterable[Node] = ()
    ) -> Element:
        element_name = self._element_name(name)
        attribute_map = {
            self._attribute_name(attribute_name): value
            for attribute_name, value in (attributes or {}).items()
        }
        return Element(element_name, attribute_map, self.namespace_scope, tuple(children))

    def text_element(  # type: ignore[override]
        self,
        name: Union[str, QName],
        text_value: str,
        attributes: Optional[Mapping[Union[str, QName], str]] = None
    ) -> Element:
        return self.element(name, attributes, (Text(text_value),))

    def _element_name(self, name: Union[str, QName]) -> QName:
        if isinstance(name, QName):
            return name
        return self.namespace_scope.resolve_element_syntactic_qname(name)

    def _attribute_name(self, name: Union[str, QName]) -> QName:
        if isinstance(name, QName):
            return name
        return self.namespace_scope.resolve_attribute_syntactic_qname(name)


# Factory functions

def doc(*children: CanBeDocumentChild, uri: Optional[str] = None) -> Document:
    """Create a document from its children, one of which must be an element."""
    return Document(uri, children)


def elem(name: Union[QName, str], parent_scope: NamespaceScope = EMPTY_SCOPE) -> Element:
    """Create an empty element, binding its prefix if needed.

    A string name is a local name in no namespace. For a namespaced name, the
    scope is the parent scope resolved with the name's own prefix binding,
    which may replace a default namespace of the parent.
    """
    element_name = name if isinstance(name, QName) else QName("", name)
    if element_name.namespace_uri:
        scope = parent_scope.resolve_binding(element_name.prefix, element_name.namespace_uri)
    else:
        scope = parent_scope.without_default_namespace()
    return Element(element_name, {}, scope, ())


def text(value: str, is_cdata: bool = False) -> Text:
    return Text(value, is_cdata)


def comment(value: str) -> Comment:
    return Comment(value)


def pi(target: str, data: str = "") -> ProcessingInstruction:
    return ProcessingInstruction(target, data)
