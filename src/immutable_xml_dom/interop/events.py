"""XML event protocol between parsers and the immutable DOM.

A parser reports a document as a sequence of events; the event handler turns
them into something else. Every element is preceded by the prefix mappings
it declares (or, with an empty namespace, undeclares) and followed by the
matching end events.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from immutable_xml_dom.core.qname import QName


@dataclass(frozen=True)
class AttributeEvent:
    """Attribute as reported with a start element event."""

    namespace_uri: str
    local_name: str
    prefix: str
    value: str

    @property
    def name(self) -> QName:
        return QName(self.namespace_uri, self.local_name, self.prefix)


class EventHandler:
    """Receiver of XML events.

    All methods do nothing by default, so subclasses only override the events
    they care about.
    """

    def start_document(self, base_uri: Optional[str] = None) -> None:
        pass

    def end_document(self) -> None:
        pass

    def start_prefix_mapping(self, prefix: str, namespace_uri: str) -> None:
        pass

    def end_prefix_mapping(self, prefix: str) -> None:
        pass

    def start_element(
        self,
        namespace_uri: str,
        local_name: str,
        prefix: str,
        attributes: Sequence[AttributeEvent] = ()
    ) -> None:
        pass

    def end_element(self, namespace_uri: str, local_name: str, prefix: str) -> None:
        pass

    def characters(self, text: str, is_cdata: bool = False) -> None:
        pass

    def comment(self, text: str) -> None:
        pass

    def processing_instruction(self, target: str, data: str) -> None:
        pass

    def fatal_error(self, exception: BaseException) -> None:
        """Report a fault of the event source; handlers decide how to fail."""


class RecordingEventHandler(EventHandler):
    """Handler that records every event as a (name, arguments) tuple.

    Useful for inspecting emitted event streams and for replaying them into
    another handler.
    """

    def __init__(self) -> None:
        self.events: List[Tuple[str, Tuple[Any, ...]]] = []

    def start_document(self, base_uri: Optional[str] = None) -> None:
        self.events.append(("start_document", (base_uri,)))

    def end_document(self) -> None:
        self.events.append(("end_document", ()))

    def start_prefix_mapping(self, prefix: str, namespace_uri: str) -> None:
        self.events.append(("start_prefix_mapping", (prefix, namespace_uri)))

    def end_prefix_mapping(self, prefix: str) -> None:
        self.events.append(("end_prefix_mapping", (prefix,)))

    def start_element(
        self,
        namespace_uri: str,
        local_name: str,
        prefix: str,
        attributes: Sequence[AttributeEvent] = ()
    ) -> None:
        self.events.append(("start_element", (namespace_uri, local_name, prefix, tuple(attributes))))

    def end_element(self, namespace_uri: str, local_name: str, prefix: str) -> None:
        self.events.append(("end_element", (namespace_uri, local_name, prefix)))

    def characters(self, text: str, is_cdata: bool = False) -> None:
        self.events.append(("characters", (text, is_cdata)))

    def comment(self, text: str) -> None:
        self.events.append(("comment", (text,)))

    def processing_instruction(self, target: str, data: str) -> None:
        self.events.append(("processing_instruction", (target, data)))

    def event_names(self) -> List[str]:
        return [name for name, _ in self.events]

    def replay(self, handler: EventHandler) -> None:
        """Send the recorded events, in order, to another handler."""
        for name, arguments in self.events:
            getattr(handler, name)(*arguments)
