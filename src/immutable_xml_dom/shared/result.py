"""Metrics collected while ingesting or emitting event streams."""

from dataclasses import dataclass


@dataclass
class IngestMetrics:
    """Counters for one ingestion run.

    Owned by a single event handler, which is used by one thread at a time.
    """

    processing_time_ms: float = 0.0
    events_processed: int = 0
    elements_built: int = 0
    text_nodes_built: int = 0
    prefix_mappings_seen: int = 0
    max_depth: int = 0

    @property
    def events_per_second(self) -> float:
        """Calculate events processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * 1000.0) / self.processing_time_ms


@dataclass
class EmitMetrics:
    """Counters for one emission run."""

    processing_time_ms: float = 0.0
    elements_emitted: int = 0
    namespace_declarations_emitted: int = 0
    undeclarations_dropped: int = 0
