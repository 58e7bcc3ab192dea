"""Public parsing and serialization API."""

from .parser import (
    DomParser,
    InputType,
    emit_document,
    parse,
    parse_bytes,
    parse_file,
    parse_string,
    round_trip,
    to_xml_bytes,
    to_xml_string,
)

__all__ = [
    "DomParser",
    "InputType",
    "emit_document",
    "parse",
    "parse_bytes",
    "parse_file",
    "parse_string",
    "round_trip",
    "to_xml_bytes",
    "to_xml_string",
]
