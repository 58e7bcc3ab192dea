"""Tests for the immutable node model."""

import pytest

from immutable_xml_dom.clark import clark_elem
from immutable_xml_dom.core import EMPTY_SCOPE, XML_NAMESPACE, NamespaceScope, QName
from immutable_xml_dom.shared.errors import InvalidNameError, UnboundPrefixError
from immutable_xml_dom.tree import (
    Comment,
    Document,
    Element,
    ProcessingInstruction,
    Text,
    elem,
)

EX = "http://ex"
P_NS = "http://p"


class TestElementConstruction:
    """Test element invariants."""

    def test_default_namespace_element(self) -> None:
        """Test an element tree in a default namespace projects to Clark names."""
        scope = NamespaceScope({"": EX})
        child = Element(QName(EX, "b"), {}, scope)
        root = Element(QName(EX, "a"), {}, scope, (child,))

        assert root.to_clark_node() == clark_elem(f"{{{EX}}}a", children=[clark_elem(f"{{{EX}}}b")])

    def test_unbound_element_prefix(self) -> None:
        """Test that a prefixed name needs its prefix bound."""
        with pytest.raises(UnboundPrefixError, match="is not allowed by") as exc_info:
            Element(QName(P_NS, "a", "p"))
        assert exc_info.value.prefix == "p"

    def test_no_namespace_element_under_default_namespace(self) -> None:
        """Test that a no-namespace name is inconsistent with a default namespace."""
        with pytest.raises(UnboundPrefixError):
            Element(QName("", "a"), {}, NamespaceScope({"": EX}))

    def test_unbound_attribute_prefix(self) -> None:
        """Test that namespaced attributes need a bound prefix."""
        with pytest.raises(UnboundPrefixError):
            Element(QName("", "a"), {QName(P_NS, "x", "p"): "1"})

        with pytest.raises(UnboundPrefixError):
            Element(QName(EX, "a"), {QName(EX, "x"): "1"}, NamespaceScope({"": EX}))

    def test_xml_attribute_needs_no_binding(self) -> None:
        """Test that the xml prefix is always bound."""
        element = Element(QName("", "a"), {QName(XML_NAMESPACE, "lang", "xml"): "en"})

        assert element.attribute(QName(XML_NAMESPACE, "lang")) == "en"

    def test_namespace_declaration_attribute_rejected(self) -> None:
        """Test that xmlns is not an attribute."""
        with pytest.raises(InvalidNameError, match="Namespace declarations are not attributes"):
            Element(QName("", "a"), {QName("", "xmlns"): "http://x"})

    def test_invalid_child_rejected(self) -> None:
        """Test that children must be element, text, comment or PI nodes."""
        with pytest.raises(TypeError, match="Not an element child node"):
            Element(QName("", "a"), children=("plain string",))  # type: ignore[arg-type]

    def test_scope_from_mapping(self) -> None:
        """Test that a plain mapping is accepted as scope."""
        element = Element(QName(P_NS, "a", "p"), {}, {"p": P_NS, "xml": XML_NAMESPACE})

        assert element.namespace_scope == NamespaceScope({"p": P_NS})

    def test_collections_are_immutable(self) -> None:
        """Test that attributes and children cannot be mutated."""
        attributes = {QName("", "id"): "1"}
        element = Element(QName("", "a"), attributes, EMPTY_SCOPE, [Text("x")])  # type: ignore[arg-type]
        attributes[QName("", "other")] = "2"

        assert isinstance(element.children, tuple)
        assert QName("", "other") not in element.attributes
        with pytest.raises(TypeError):
            element.attributes[QName("", "id")] = "3"  # type: ignore[index]
        with pytest.raises(AttributeError):
            element.name = QName("", "b")  # type: ignore[misc]


class TestElementEquality:
    """Test that equality is Clark equality."""

    def test_prefix_and_scope_ignored(self) -> None:
        """Test equality of differently prefixed elements."""
        prefixed = Element(QName(EX, "a", "e"), {}, NamespaceScope({"e": EX, "x": "http://x"}))
        defaulted = Element(QName(EX, "a"), {}, NamespaceScope({"": EX}))

        assert prefixed == defaulted
        assert hash(prefixed) == hash(defaulted)

    def test_cdata_flag_ignored(self) -> None:
        """Test that CDATA sections equal plain text."""
        assert Text("x", is_cdata=True) == Text("x")
        assert elem("a").plus_child(Text("x", True)) == elem("a").plus_child(Text("x"))

    def test_structural_difference(self) -> None:
        """Test inequality for different children or attributes."""
        base = elem("a").plus_attribute(QName("", "id"), "1")

        assert base != base.plus_attribute(QName("", "id"), "2")
        assert base != base.plus_child(Comment("c"))
        assert base == elem("a").plus_attribute(QName("", "id"), "1")


class TestElementQueries:
    """Test the basic element accessors."""

    def test_attribute_lookup(self) -> None:
        """Test attribute and attribute_option."""
        element = elem("a").plus_attribute(QName("", "id"), "1")

        assert element.attribute(QName("", "id")) == "1"
        assert element.attribute_option(QName("", "missing")) is None
        with pytest.raises(KeyError):
            element.attribute(QName("", "missing"))

    def test_text_concatenates_text_children(self) -> None:
        """Test text() over mixed content."""
        element = elem("a").with_children([Text("x"), elem("b").with_text("ignored"), Text("y", True)])

        assert element.text() == "xy"
        assert element.element_name() == QName("", "a")
        assert len(list(element.child_node_stream())) == 3


class TestNotUndeclaringPrefixes:
    """Test pushing parent bindings down a tree."""

    def test_child_gets_parent_prefix(self) -> None:
        """Test that a child no longer undeclares a parent prefix."""
        child = Element(QName("", "c"))
        root = Element(QName(P_NS, "r", "p"), {}, NamespaceScope({"p": P_NS}), (child,))

        result = root.not_undeclaring_prefixes(EMPTY_SCOPE)

        assert result.children[0].namespace_scope == NamespaceScope({"p": P_NS})
        assert result == root
        assert result.to_clark_node() == root.to_clark_node()

    def test_default_namespace_not_introduced(self) -> None:
        """Test that the default namespace of the start scope is not pushed down."""
        element = Element(QName(P_NS, "r", "p"), {}, NamespaceScope({"p": P_NS}), (elem("c"),))

        result = element.not_undeclaring_prefixes(NamespaceScope({"": EX, "q": "http://q"}))

        assert result.namespace_scope == NamespaceScope({"p": P_NS, "q": "http://q"})
        assert result.children[0].namespace_scope.default_namespace() is None
        assert result.to_clark_node() == element.to_clark_node()

    def test_own_bindings_win(self) -> None:
        """Test that an element's own binding overrides the start scope."""
        element = Element(QName(P_NS, "r", "p"), {}, NamespaceScope({"p": P_NS}))

        result = element.with_parent_attribute_scope(NamespaceScope({"p": "http://other"}))

        assert result.namespace_scope.find_namespace_of_prefix("p") == P_NS

    def test_plus_namespace_binding(self) -> None:
        """Test adding a binding to one element's scope."""
        element = elem("a").plus_namespace_binding("p", P_NS)

        assert element.namespace_scope == NamespaceScope({"p": P_NS})
        assert element.namespace_scope_option() == element.namespace_scope


class TestDocument:
    """Test the document wrapper."""

    def test_exactly_one_document_element(self) -> None:
        """Test the document element invariant."""
        with pytest.raises(ValueError, match="exactly one document element, found 0"):
            Document(None, (Comment("c"),))
        with pytest.raises(ValueError, match="found 2"):
            Document(None, (elem("a"), elem("b")))

    def test_text_is_not_a_document_child(self) -> None:
        """Test that text nodes cannot be document children."""
        with pytest.raises(TypeError, match="Not a document child node"):
            Document(None, (Text("x"), elem("a")))  # type: ignore[arg-type]

    def test_document_element_position_kept(self) -> None:
        """Test replacing the document element between comments and PIs."""
        document = Document("http://ex/doc.xml", (Comment("before"), elem("a"), ProcessingInstruction("pi", "d")))

        replaced = document.with_document_element(elem("b"))

        assert replaced.document_element == elem("b")
        assert replaced.children[0] == Comment("before")
        assert replaced.children[2] == ProcessingInstruction("pi", "d")
        assert replaced.uri == "http://ex/doc.xml"

    def test_uri_and_transformations(self) -> None:
        """Test URI replacement and document element transformation."""
        document = Document.of(elem("a")).with_uri("http://ex/d.xml")

        transformed = document.transform_document_element(lambda e: e.plus_child(elem("b")))

        assert document.uri_option == "http://ex/d.xml"
        assert len(transformed.document_element.children) == 1
        assert len(document.document_element.children) == 0

    def test_to_clark_node(self) -> None:
        """Test the Clark projection of a document."""
        clark_document = Document("u", (Comment("c"), elem("a"))).to_clark_node()

        assert clark_document.uri == "u"
        assert clark_document.document_element == clark_elem("a")
        assert len(clark_document.children) == 2
