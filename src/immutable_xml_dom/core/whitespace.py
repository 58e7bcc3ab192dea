"""XML whitespace.

Only space, tab, carriage return and line feed are whitespace in XML. Other
Unicode spaces, like the no-break space, are content.
"""

XML_WHITESPACE = " \t\r\n"


def is_xml_whitespace(value: str) -> bool:
    """Check if a string is empty or consists of XML whitespace only."""
    return not value.strip(XML_WHITESPACE)


def strip_xml_whitespace(value: str) -> str:
    return value.strip(XML_WHITESPACE)
