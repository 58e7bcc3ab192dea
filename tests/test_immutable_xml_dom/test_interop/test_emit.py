"""Tests for generating XML events from immutable nodes."""

from immutable_xml_dom.core import EMPTY_SCOPE, NamespaceScope, QName
from immutable_xml_dom.interop import (
    AttributeEvent,
    DomProducingEventHandler,
    EventGenerator,
    RecordingEventHandler,
)
from immutable_xml_dom.shared.config import DomConfig
from immutable_xml_dom.tree import Comment, Element, ProcessingInstruction, Text, doc, elem

EX = "http://ex"
P = "http://p"


def _namespaced_document():
    root_scope = NamespaceScope({"": EX})
    child_scope = NamespaceScope({"": EX, "p": P})
    child = Element(QName(P, "c", "p"), {QName(P, "id", "p"): "1"}, child_scope, (Text("t"),))
    root = Element(QName(EX, "root"), {}, root_scope, (child,))
    return doc(Comment("c"), root, ProcessingInstruction("pi", "data"), uri="file:///x.xml")


def _undeclaring_element() -> Element:
    child = Element(QName("", "c"), {}, EMPTY_SCOPE)
    return Element(QName("", "r"), {}, NamespaceScope({"p": P}), (child,))


class TestEventOrder:
    """Test the emitted event sequence."""

    def test_document_events(self) -> None:
        """Test the full event order of a namespaced document."""
        recorder = RecordingEventHandler()

        EventGenerator(recorder).process_document(_namespaced_document())

        assert recorder.event_names() == [
            "start_document",
            "comment",
            "start_prefix_mapping",
            "start_element",
            "start_prefix_mapping",
            "start_element",
            "characters",
            "end_element",
            "end_prefix_mapping",
            "end_element",
            "end_prefix_mapping",
            "processing_instruction",
            "end_document",
        ]
        assert recorder.events[0] == ("start_document", ("file:///x.xml",))

    def test_only_changed_bindings_declared(self) -> None:
        """Test that a child declares only what its parent lacks."""
        recorder = RecordingEventHandler()

        EventGenerator(recorder).process_document(_namespaced_document())

        mappings = [args for name, args in recorder.events if name == "start_prefix_mapping"]
        assert mappings == [("", EX), ("p", P)]
        start = next(args for name, args in recorder.events if name == "start_element" and args[1] == "c")
        assert start == (P, "c", "p", (AttributeEvent(P, "id", "p", "1"),))

    def test_document_events_optional(self) -> None:
        """Test suppressing start and end document events."""
        recorder = RecordingEventHandler()
        config = DomConfig().override(emit__emit_document_events=False)

        EventGenerator(recorder, config).process_document(doc(elem("r")))

        assert recorder.event_names() == ["start_element", "end_element"]

    def test_cdata_flag_reported(self) -> None:
        """Test that text events carry the CDATA flag."""
        recorder = RecordingEventHandler()

        EventGenerator(recorder).process_element(elem("r").plus_child(Text("<x>", True)))

        assert ("characters", ("<x>", True)) in recorder.events


class TestUndeclarations:
    """Test namespace undeclaration handling per XML version."""

    def test_prefixed_undeclaration_dropped_for_xml_1_0(self) -> None:
        """Test that XML 1.0 output drops prefixed undeclarations."""
        recorder = RecordingEventHandler()
        generator = EventGenerator(recorder, DomConfig.strict_xml_1_0())

        generator.process_element(_undeclaring_element())

        assert ("start_prefix_mapping", ("p", "")) not in recorder.events
        assert generator.metrics.undeclarations_dropped == 1

    def test_prefixed_undeclaration_kept_for_xml_1_1(self) -> None:
        """Test that XML 1.1 output reports prefixed undeclarations."""
        recorder = RecordingEventHandler()
        generator = EventGenerator(recorder, DomConfig.xml_1_1())

        generator.process_element(_undeclaring_element())

        assert ("start_prefix_mapping", ("p", "")) in recorder.events
        assert generator.metrics.undeclarations_dropped == 0

    def test_default_undeclaration_always_kept(self) -> None:
        """Test that xmlns="" is reported for XML 1.0 too."""
        child = Element(QName("", "c"), {}, EMPTY_SCOPE)
        root = Element(QName(EX, "r"), {}, NamespaceScope({"": EX}), (child,))
        recorder = RecordingEventHandler()

        EventGenerator(recorder).process_element(root)

        assert ("start_prefix_mapping", ("", "")) in recorder.events

    def test_parent_scope_argument(self) -> None:
        """Test emitting a subtree relative to a given parent scope."""
        recorder = RecordingEventHandler()
        element = elem(QName(P, "c", "p"))

        EventGenerator(recorder).process_element(element, NamespaceScope({"p": P}))

        assert "start_prefix_mapping" not in recorder.event_names()


class TestEmitThenIngest:
    """Test feeding emitted events back into the DOM builder."""

    def test_replay_rebuilds_equal_document(self) -> None:
        """Test emit followed by ingest."""
        document = _namespaced_document()
        recorder = RecordingEventHandler()
        EventGenerator(recorder).process_document(document)

        builder = DomProducingEventHandler()
        recorder.replay(builder)

        rebuilt = builder.document
        assert rebuilt == document
        assert rebuilt.document_element.children[0].namespace_scope == NamespaceScope({"": EX, "p": P})

    def test_metrics(self) -> None:
        """Test emit counters."""
        generator = EventGenerator(RecordingEventHandler())

        generator.process_document(_namespaced_document())

        assert generator.metrics.elements_emitted == 2
        assert generator.metrics.namespace_declarations_emitted == 2
