"""Exception taxonomy for the immutable XML DOM.

The taxonomy is small and static. Every error is raised at the point where the
offending value is detected and is never recovered inside the library; errors
raised by caller-supplied transformation callbacks propagate unchanged.
"""

from typing import Any, Optional, Sequence


class XmlDomError(Exception):
    """Base exception for all errors raised by this package."""


class InvalidNameError(XmlDomError, ValueError):
    """Raised for a malformed QName or local name."""

    def __init__(self, message: str, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.name = name


class InvalidPrefixError(XmlDomError, ValueError):
    """Raised when binding the reserved "xmlns" prefix or a malformed prefix."""

    def __init__(self, message: str, prefix: Optional[str] = None) -> None:
        super().__init__(message)
        self.prefix = prefix


class ReservedPrefixMisuseError(XmlDomError, ValueError):
    """Raised when the "xml" prefix is bound to anything but the XML namespace."""

    def __init__(self, message: str, namespace: Optional[str] = None) -> None:
        super().__init__(message)
        self.namespace = namespace


class EmptyNamespaceValueError(XmlDomError, ValueError):
    """Raised when a namespace scope is constructed with an empty namespace."""

    def __init__(self, message: str, prefix: Optional[str] = None) -> None:
        super().__init__(message)
        self.prefix = prefix


class UnboundPrefixError(XmlDomError, ValueError):
    """Raised when a non-reserved prefix is not bound in the namespace scope."""

    def __init__(self, message: str, prefix: Optional[str] = None) -> None:
        super().__init__(message)
        self.prefix = prefix


class MalformedQNameError(XmlDomError, ValueError):
    """Raised for an empty syntactic QName or one with more than one colon."""

    def __init__(self, message: str, syntactic_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.syntactic_name = syntactic_name


class PathOutOfRangeError(XmlDomError, IndexError):
    """Raised when a navigation path exceeds the child element count."""

    def __init__(
        self,
        message: str,
        path: Optional[Sequence[int]] = None,
        depth: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.path = tuple(path) if path is not None else None
        self.depth = depth


class ParserFaultError(XmlDomError):
    """Raised when the external event source reports a fault.

    Also raised when the event sequence itself violates the ingestion
    protocol (unbalanced elements, text outside the document element).
    """

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.details = details
