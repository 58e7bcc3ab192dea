"""Shared utilities for the immutable XML DOM.

This module provides the error taxonomy, configuration objects, metrics and
logging helpers used across all layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    DomConfig,
    EmitConfig,
    GlobalConfig,
    IngestConfig,
    WhitespacePolicy,
    XmlVersion,
)
from .errors import (
    EmptyNamespaceValueError,
    InvalidNameError,
    InvalidPrefixError,
    MalformedQNameError,
    ParserFaultError,
    PathOutOfRangeError,
    ReservedPrefixMisuseError,
    UnboundPrefixError,
    XmlDomError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import EmitMetrics, IngestMetrics

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "DomConfig",
    "EmitConfig",
    "GlobalConfig",
    "IngestConfig",
    "WhitespacePolicy",
    "XmlVersion",
    "EmptyNamespaceValueError",
    "InvalidNameError",
    "InvalidPrefixError",
    "MalformedQNameError",
    "ParserFaultError",
    "PathOutOfRangeError",
    "ReservedPrefixMisuseError",
    "UnboundPrefixError",
    "XmlDomError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "EmitMetrics",
    "IngestMetrics",
]
