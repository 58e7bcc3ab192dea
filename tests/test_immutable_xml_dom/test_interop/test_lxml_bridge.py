"""Tests for the lxml bridge."""

import pytest

from immutable_xml_dom.api import parse_string
from immutable_xml_dom.core import EMPTY_SCOPE, NamespaceScope, QName
from immutable_xml_dom.core.qname import XML_NAMESPACE
from immutable_xml_dom.interop import LxmlBridge
from immutable_xml_dom.shared.config import DomConfig
from immutable_xml_dom.shared.errors import ParserFaultError
from immutable_xml_dom.tree import Comment, Element, ProcessingInstruction, Text, doc, elem

etree = pytest.importorskip("lxml.etree")

EX = "http://ex"
P = "http://p"

SAMPLE = (
    f'<root xmlns="{EX}" xmlns:p="{P}" p:id="1" xml:lang="en">'
    "lead<p:item>one</p:item>tail<!--note--><?pi data?>"
    "<item><![CDATA[<raw>]]></item>"
    "</root>"
)


@pytest.fixture
def bridge() -> LxmlBridge:
    return LxmlBridge()


def _default_undeclaring_element() -> Element:
    child = Element(QName("", "c"), {}, EMPTY_SCOPE, (Text("x"),))
    return Element(QName(EX, "r"), {}, NamespaceScope({"": EX}), (child,))


class TestExport:
    """Test conversion to lxml and serialization."""

    def test_is_available(self, bridge) -> None:
        """Test lxml detection."""
        assert bridge.is_available()

    def test_simple_serialization(self, bridge) -> None:
        """Test text and tails."""
        element = elem("r").with_children([Text("a"), elem("b"), Text("c")])

        assert bridge.to_string(element) == "<r>a<b/>c</r>"

    def test_namespace_declarations(self, bridge) -> None:
        """Test that declarations appear where scopes change."""
        child = Element(QName(P, "c", "p"), {}, NamespaceScope({"": EX, "p": P}))
        root = Element(QName(EX, "root"), {}, NamespaceScope({"": EX}), (child,))

        assert bridge.to_string(root) == f'<root xmlns="{EX}"><p:c xmlns:p="{P}"/></root>'

    def test_cdata_export(self, bridge) -> None:
        """Test that CDATA text is written as a CDATA section."""
        element = elem("r").plus_child(Text("<a>", True))

        assert bridge.to_string(element) == "<r><![CDATA[<a>]]></r>"

    def test_to_bytes_declaration(self, bridge) -> None:
        """Test the XML declaration of byte output."""
        data = bridge.to_bytes(elem("r"))

        assert data.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
        assert data.rstrip().endswith(b"<r/>")

    def test_default_namespace_undeclaration(self, bridge) -> None:
        """Test exporting xmlns="" by prefixing the default namespace."""
        element = _default_undeclaring_element()

        lxml_element = bridge.to_lxml_element(element)

        assert lxml_element.tag == f"{{{EX}}}r"
        assert lxml_element[0].tag == "c"
        assert bridge.from_lxml_element(lxml_element) == element
        assert "ns0:r" in bridge.to_string(element)

    def test_document_siblings(self, bridge) -> None:
        """Test comments and processing instructions around the root."""
        document = doc(Comment("before"), elem("r"), ProcessingInstruction("after", "x"), uri="file:///d.xml")

        tree = bridge.to_lxml_document(document)

        assert tree.docinfo.URL == "file:///d.xml"
        assert bridge.to_string(document).replace("\n", "") == "<!--before--><r/><?after x?>"
        assert bridge.from_lxml_document(tree) == document


class TestImport:
    """Test conversion from lxml."""

    def test_round_trip_keeps_clark_view(self, bridge) -> None:
        """Test export followed by import."""
        element = parse_string(SAMPLE).document_element

        restored = bridge.from_lxml_element(bridge.to_lxml_element(element))

        assert restored == element
        assert restored.to_clark_node() == element.to_clark_node()
        assert restored.namespace_scope == element.namespace_scope

    def test_prefixes_and_attributes(self, bridge) -> None:
        """Test names, prefixes and special attributes."""
        root = bridge.from_lxml_element(etree.fromstring(SAMPLE))

        assert root.name == QName(EX, "root")
        assert root.attribute(QName(P, "id")) == "1"
        assert root.attribute(QName(XML_NAMESPACE, "lang")) == "en"
        item = next(root.child_element_stream())
        assert item.name.prefix == "p"
        assert root.children[0] == Text("lead")
        assert root.children[2] == Text("tail")
        assert root.children[3] == Comment("note")
        assert root.children[4] == ProcessingInstruction("pi", "data")

    def test_not_an_element(self, bridge) -> None:
        """Test that comments are not accepted as elements."""
        with pytest.raises(TypeError, match="Not an lxml element"):
            bridge.from_lxml_element(etree.Comment("c"))

    def test_strip_policy(self) -> None:
        """Test whitespace stripping on document import."""
        bridge = LxmlBridge(DomConfig.whitespace_stripping())

        document = bridge.from_lxml_document(etree.fromstring("<r>\n  <a/>\n</r>").getroottree())

        assert document.document_element.children == (elem("a"),)


class TestLxmlParse:
    """Test parsing through lxml."""

    def test_agrees_with_sax_parsing(self, bridge) -> None:
        """Test that both parsers build equal trees."""
        assert bridge.parse(SAMPLE).document_element == parse_string(SAMPLE).document_element

    def test_base_uri(self, bridge) -> None:
        """Test the document URI of parsed documents."""
        assert bridge.parse("<r/>", base_uri="file:///r.xml").uri == "file:///r.xml"

    def test_malformed(self, bridge) -> None:
        """Test that syntax errors become ParserFaultError."""
        with pytest.raises(ParserFaultError, match="XML parsing failed"):
            bridge.parse("<r><a></r>")
