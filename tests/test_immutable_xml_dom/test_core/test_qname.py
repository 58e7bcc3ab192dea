"""Tests for qualified names."""

import pytest

from immutable_xml_dom.core.qname import XML_NAMESPACE, QName
from immutable_xml_dom.shared.errors import InvalidNameError


class TestQName:
    """Test QName construction, equality and rendering."""

    def test_equality_ignores_prefix(self) -> None:
        """Test that prefixes are hints only."""
        first = QName("http://ex", "a", "p")
        second = QName("http://ex", "a", "q")

        assert first == second
        assert hash(first) == hash(second)
        assert first != QName("http://other", "a", "p")

    def test_none_namespace_is_empty(self) -> None:
        """Test that a None namespace means no namespace."""
        assert QName(None, "a") == QName("", "a")  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "namespace,local_name,prefix,message",
        [
            ("", "", "", "Local name cannot be empty"),
            ("http://ex", "a:b", "", "must not contain a colon"),
            ("http://ex", "a", "p:q", "Prefix must not contain a colon"),
            ("", "a", "p", "requires a namespace URI"),
        ],
    )
    def test_invalid_names(self, namespace, local_name, prefix, message) -> None:
        """Test construction failures."""
        with pytest.raises(InvalidNameError, match=message):
            QName(namespace, local_name, prefix)

    def test_syntactic_and_clark_names(self) -> None:
        """Test the two renderings of a name."""
        name = QName("http://ex", "a", "p")

        assert name.syntactic_name == "p:a"
        assert name.clark_name == "{http://ex}a"
        assert str(name) == "{http://ex}a"
        assert QName("", "a").clark_name == "a"
        assert QName("http://ex", "a").syntactic_name == "a"

    def test_from_clark(self) -> None:
        """Test parsing Clark notation."""
        assert QName.from_clark("{http://ex}a") == QName("http://ex", "a")
        assert QName.from_clark("a") == QName("", "a")
        assert QName.from_clark("{http://ex}a").prefix == ""

        with pytest.raises(InvalidNameError, match="Unterminated namespace"):
            QName.from_clark("{http://ex")

    def test_prefix_helpers(self) -> None:
        """Test replacing and dropping the prefix hint."""
        name = QName(XML_NAMESPACE, "lang", "xml")

        assert name.without_prefix().prefix == ""
        assert name.without_prefix() == name
        assert name.with_prefix("xml") is name
        assert name.with_prefix("x").syntactic_name == "x:lang"

    def test_repr(self) -> None:
        """Test the debugging representation."""
        assert repr(QName("", "root")) == "QName('', 'root')"
        assert repr(QName("urn:a", "b", "a")) == "QName('urn:a', 'b', 'a')"
