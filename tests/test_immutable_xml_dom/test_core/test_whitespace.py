"""Tests for XML whitespace helpers."""

import pytest

from immutable_xml_dom.core import is_xml_whitespace, strip_xml_whitespace


class TestXmlWhitespace:
    """Test the XML definition of whitespace."""

    @pytest.mark.parametrize("value", ["", " ", "\t", "\r\n", " \n\t \r"])
    def test_xml_whitespace(self, value) -> None:
        """Test strings made of space, tab, CR and LF only."""
        assert is_xml_whitespace(value)

    @pytest.mark.parametrize("value", ["\u00a0", "\u2028", "\u0085", "\x0b", "\x0c", " x "])
    def test_not_xml_whitespace(self, value) -> None:
        """Test that other characters, including Unicode spaces, are content."""
        assert not is_xml_whitespace(value)

    def test_strip_xml_whitespace(self) -> None:
        """Test stripping only XML whitespace from both ends."""
        assert strip_xml_whitespace("\n\t a b \r\n") == "a b"
        assert strip_xml_whitespace("\u00a0a\u00a0") == "\u00a0a\u00a0"
