"""Interoperability: the XML event protocol, ingestion, emission and parser bridges."""

from .emit import EventGenerator
from .events import AttributeEvent, EventHandler, RecordingEventHandler
from .ingest import DomProducingEventHandler, bind_attribute_name, bind_element_name
from .lxml_bridge import LxmlBridge
from .sax import SaxEventAdapter, sax_parse, sax_parse_file

__all__ = [
    "EventGenerator",
    "AttributeEvent",
    "EventHandler",
    "RecordingEventHandler",
    "DomProducingEventHandler",
    "bind_attribute_name",
    "bind_element_name",
    "LxmlBridge",
    "SaxEventAdapter",
    "sax_parse",
    "sax_parse_file",
]
