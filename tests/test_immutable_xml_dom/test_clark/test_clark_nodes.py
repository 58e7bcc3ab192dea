"""Tests for the Clark view."""

import pytest

from immutable_xml_dom.clark import (
    ClarkComment,
    ClarkDocument,
    ClarkElement,
    ClarkProcessingInstruction,
    ClarkText,
    clark_elem,
)
from immutable_xml_dom.core import NamespaceScope, QName
from immutable_xml_dom.tree import Comment, Element, Text, doc, elem, pi

EX = "http://ex"


class TestClarkElement:
    """Test Clark element construction and equality."""

    def test_prefixes_dropped(self) -> None:
        """Test that prefix hints are not kept."""
        element = ClarkElement(QName(EX, "a", "p"), {QName(EX, "id", "p"): "1"})

        assert element.name.prefix == ""
        assert all(name.prefix == "" for name in element.attributes)
        assert element.attribute(QName(EX, "id")) == "1"

    def test_equal_elements_hash_equal(self) -> None:
        """Test hashing agrees with equality."""
        first = clark_elem(f"{{{EX}}}a", {"id": "1"}, [ClarkText("x")])
        second = ClarkElement(QName(EX, "a", "q"), {QName("", "id"): "1"}, (ClarkText("x", True),))

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    @pytest.mark.parametrize("other", [
        clark_elem("{http://ex}b"),
        clark_elem("a"),
        clark_elem("{http://ex}a", {"id": "2"}),
        clark_elem("{http://ex}a", children=[ClarkText("y")]),
    ])
    def test_differences_detected(self, other) -> None:
        """Test that name, namespace, attributes and children all count."""
        assert clark_elem(f"{{{EX}}}a", {"id": "1"}, [ClarkText("x")]) != other

    def test_invalid_child(self) -> None:
        """Test that native nodes are not Clark children."""
        with pytest.raises(TypeError, match="Not a Clark child node"):
            ClarkElement(QName("", "a"), {}, (Text("x"),))

    def test_attributes_read_only(self) -> None:
        """Test that the attribute mapping cannot be changed."""
        element = clark_elem("a", {"id": "1"})

        with pytest.raises(TypeError):
            element.attributes[QName("", "id")] = "2"  # type: ignore[index]


class TestProjection:
    """Test projecting native trees to the Clark view."""

    def test_prefix_variants_project_equally(self) -> None:
        """Test that differently prefixed trees have equal projections."""
        first = Element(QName(EX, "a", ""), {}, NamespaceScope({"": EX}), (Text("t"),))
        second = Element(QName(EX, "a", "p"), {}, NamespaceScope({"p": EX}), (Text("t"),))

        assert first.to_clark_node() == second.to_clark_node()
        assert first.to_clark_node() == clark_elem(f"{{{EX}}}a", children=[ClarkText("t")])

    def test_leaf_nodes_project(self) -> None:
        """Test comment and processing instruction projections."""
        root = elem("r").with_children([Comment("c"), pi("t", "d")])

        assert root.to_clark_node().children == (ClarkComment("c"), ClarkProcessingInstruction("t", "d"))

    def test_document_projection(self) -> None:
        """Test that document projections keep the URI and siblings."""
        document = doc(Comment("before"), elem("root"), uri="file:///x.xml")

        clark = document.to_clark_node()

        assert clark.uri == "file:///x.xml"
        assert clark.children[0] == ClarkComment("before")
        assert clark.document_element == clark_elem("root")


class TestClarkDocument:
    """Test Clark document validation."""

    def test_requires_one_element(self) -> None:
        """Test the document element count check."""
        with pytest.raises(ValueError, match="exactly one document element"):
            ClarkDocument(None, (ClarkComment("c"),))
        with pytest.raises(ValueError, match="exactly one document element"):
            ClarkDocument(None, (clark_elem("a"), clark_elem("b")))


class TestClarkElemFactory:
    """Test the Clark notation factory."""

    def test_clark_notation_names(self) -> None:
        """Test names given in Clark notation."""
        element = clark_elem(f"{{{EX}}}a", {f"{{{EX}}}id": "1", "plain": "2"})

        assert element.name == QName(EX, "a")
        assert element.attribute(QName(EX, "id")) == "1"
        assert element.attribute(QName("", "plain")) == "2"

    def test_qname_accepted(self) -> None:
        """Test that QNames are accepted directly."""
        assert clark_elem(QName(EX, "a")) == clark_elem(f"{{{EX}}}a")
