"""Namespace scopes and their algebra.

A NamespaceScope maps prefixes to namespace URIs. The empty prefix stands for
the default namespace. The "xml" prefix is implicitly and immutably bound to
the XML namespace and never appears as a key; "xmlns" is never legal.

Mappings passed to resolve() and returned by relativize() may contain
undeclarations: entries whose namespace is the empty string.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from immutable_xml_dom.core.qname import XML_NAMESPACE, XML_PREFIX, XMLNS_PREFIX, QName
from immutable_xml_dom.shared.errors import (
    EmptyNamespaceValueError,
    InvalidPrefixError,
    MalformedQNameError,
    ReservedPrefixMisuseError,
    UnboundPrefixError,
)

DEFAULT_PREFIX = ""


def _check_prefix(prefix: str) -> None:
    if prefix == XMLNS_PREFIX:
        raise InvalidPrefixError("The 'xmlns' prefix cannot be bound", prefix=prefix)
    if ":" in prefix:
        raise InvalidPrefixError(f"Prefix must not contain a colon: {prefix!r}", prefix=prefix)


def _split_syntactic_qname(syntactic_name: str) -> Tuple[str, str]:
    """Split "p:local" into ("p", "local") and "local" into ("", "local")."""
    if not syntactic_name:
        raise MalformedQNameError("Syntactic QName cannot be empty", syntactic_name=syntactic_name)
    parts = syntactic_name.split(":")
    if len(parts) > 2:
        raise MalformedQNameError(
            f"Syntactic QName has more than one colon: {syntactic_name!r}",
            syntactic_name=syntactic_name,
        )
    if len(parts) == 1:
        return DEFAULT_PREFIX, parts[0]
    prefix, local_name = parts
    if not prefix or not local_name:
        raise MalformedQNameError(
            f"Syntactic QName has an empty prefix or local part: {syntactic_name!r}",
            syntactic_name=syntactic_name,
        )
    return prefix, local_name


@dataclass(frozen=True, eq=False)
class NamespaceScope:
    """Immutable mapping from prefix to namespace URI.

    Attributes:
        bindings: Read-only prefix to namespace mapping without undeclarations
    """

    bindings: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate bindings and freeze them."""
        for prefix, namespace in self.bindings.items():
            if prefix == XML_PREFIX:
                raise ReservedPrefixMisuseError(
                    "The 'xml' prefix is implicit and cannot be a scope entry",
                    namespace=namespace,
                )
            _check_prefix(prefix)
            if not namespace:
                raise EmptyNamespaceValueError(
                    f"Prefix {prefix!r} is bound to an empty namespace", prefix=prefix
                )
        if not isinstance(self.bindings, MappingProxyType):
            object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    @staticmethod
    def empty() -> "NamespaceScope":
        """Return the canonical empty scope."""
        return EMPTY_SCOPE

    @staticmethod
    def from_mapping(mapping: Mapping[str, str]) -> "NamespaceScope":
        """Build a scope, accepting and stripping an explicit "xml" binding.

        Args:
            mapping: Prefix to namespace mapping without undeclarations

        Returns:
            NamespaceScope with the same bindings
        """
        bindings: Dict[str, str] = {}
        for prefix, namespace in mapping.items():
            if prefix == XML_PREFIX:
                if namespace != XML_NAMESPACE:
                    raise ReservedPrefixMisuseError(
                        f"The 'xml' prefix cannot be bound to {namespace!r}",
                        namespace=namespace,
                    )
                continue
            bindings[prefix] = namespace
        if not bindings:
            return EMPTY_SCOPE
        return NamespaceScope(bindings)

    @staticmethod
    def without_prefixed_namespace_undeclarations(mapping: Mapping[str, str]) -> Dict[str, str]:
        """Drop prefixed undeclarations, which XML 1.0 does not allow.

        The undeclaration of the default namespace is kept.
        """
        return {
            prefix: namespace
            for prefix, namespace in mapping.items()
            if namespace or not prefix
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamespaceScope):
            return NotImplemented
        return self is other or dict(self.bindings) == dict(other.bindings)

    def __hash__(self) -> int:
        return hash(frozenset(self.bindings.items()))

    def __repr__(self) -> str:
        return f"NamespaceScope({dict(self.bindings)!r})"

    def __len__(self) -> int:
        return len(self.bindings)

    def is_empty(self) -> bool:
        return not self.bindings

    def default_namespace(self) -> Optional[str]:
        """Return the default namespace, if any."""
        return self.bindings.get(DEFAULT_PREFIX)

    def find_namespace_of_prefix(self, prefix: str) -> Optional[str]:
        """Return the namespace bound to a prefix; "xml" is always bound."""
        if prefix == XML_PREFIX:
            return XML_NAMESPACE
        return self.bindings.get(prefix)

    def prefixes_of_namespace(self, namespace: str) -> List[str]:
        """Return all prefixes bound to the namespace, in binding order."""
        if namespace == XML_NAMESPACE:
            return [XML_PREFIX]
        return [prefix for prefix, ns in self.bindings.items() if ns == namespace]

    def resolve_binding(self, prefix: str, namespace: str) -> "NamespaceScope":
        """Add, replace or (with an empty namespace) remove one binding.

        Undeclarations of non-empty prefixes are accepted here although XML 1.0
        forbids them; emitters drop them before serialization.

        Args:
            prefix: Prefix, empty for the default namespace
            namespace: Namespace URI, empty to undeclare the prefix

        Returns:
            The resulting scope, which is this scope itself when nothing changes
        """
        if prefix == XML_PREFIX:
            if namespace != XML_NAMESPACE:
                raise ReservedPrefixMisuseError(
                    f"The 'xml' prefix cannot be bound to {namespace!r}",
                    namespace=namespace,
                )
            return self
        _check_prefix(prefix)

        if not namespace:
            if prefix not in self.bindings:
                return self
            return self.without_prefix(prefix)

        if self.bindings.get(prefix) == namespace:
            return self
        bindings = dict(self.bindings)
        bindings[prefix] = namespace
        return NamespaceScope(bindings)

    def resolve(self, mapping: Mapping[str, str]) -> "NamespaceScope":
        """Apply a mapping of (un)declarations, one binding at a time."""
        scope = self
        for prefix, namespace in mapping.items():
            scope = scope.resolve_binding(prefix, namespace)
        return scope

    def without_default_namespace(self) -> "NamespaceScope":
        """Drop the default namespace binding, if present."""
        return self.without_prefix(DEFAULT_PREFIX)

    def without_prefix(self, prefix: str) -> "NamespaceScope":
        """Drop the binding of the given prefix, if present."""
        if prefix not in self.bindings:
            return self
        bindings = {p: ns for p, ns in self.bindings.items() if p != prefix}
        if not bindings:
            return EMPTY_SCOPE
        return NamespaceScope(bindings)

    def relativize(self, other: "NamespaceScope") -> Dict[str, str]:
        """Compute the (un)declarations turning this scope into the other one.

        The result satisfies ``self.resolve(self.relativize(other)) == other``.

        Args:
            other: Target scope

        Returns:
            Mapping where an empty namespace marks an undeclaration
        """
        declarations: Dict[str, str] = {}
        for prefix in self.bindings:
            if prefix not in other.bindings:
                declarations[prefix] = ""
        for prefix, namespace in other.bindings.items():
            if self.bindings.get(prefix) != namespace:
                declarations[prefix] = namespace
        return declarations

    def sub_scope_of(self, other: "NamespaceScope") -> bool:
        """Check that every binding of this scope also occurs in the other."""
        return all(
            other.bindings.get(prefix) == namespace
            for prefix, namespace in self.bindings.items()
        )

    def super_scope_of(self, other: "NamespaceScope") -> bool:
        return other.sub_scope_of(self)

    def allows_element_name(self, name: QName) -> bool:
        """Check that an element name agrees with this scope."""
        if not name.namespace_uri:
            return self.default_namespace() is None
        return self.find_namespace_of_prefix(name.prefix) == name.namespace_uri

    def allows_attribute_name(self, name: QName) -> bool:
        """Check that an attribute name agrees with this scope.

        Unprefixed attributes are never in the default namespace.
        """
        if not name.namespace_uri:
            return True
        return bool(name.prefix) and self.find_namespace_of_prefix(name.prefix) == name.namespace_uri

    def _resolve_prefixed(self, prefix: str, local_name: str) -> QName:
        namespace = self.find_namespace_of_prefix(prefix)
        if namespace is None:
            raise UnboundPrefixError(f"Prefix {prefix!r} is not bound", prefix=prefix)
        return QName(namespace, local_name, prefix)

    def resolve_element_syntactic_qname(self, syntactic_name: str) -> QName:
        """Resolve an element name such as "p:local" or "local".

        An unprefixed element name is in the default namespace, if any.
        """
        prefix, local_name = _split_syntactic_qname(syntactic_name)
        if prefix:
            return self._resolve_prefixed(prefix, local_name)
        return QName(self.default_namespace() or "", local_name)

    def resolve_attribute_syntactic_qname(self, syntactic_name: str) -> QName:
        """Resolve an attribute name; unprefixed names have no namespace."""
        prefix, local_name = _split_syntactic_qname(syntactic_name)
        if prefix:
            return self._resolve_prefixed(prefix, local_name)
        return QName("", local_name)

    def resolve_syntactic_qname_in_content(self, syntactic_name: str) -> QName:
        """Resolve a QName occurring in text or attribute values.

        Follows the element name rules, so the default namespace applies.
        """
        return self.resolve_element_syntactic_qname(syntactic_name)


EMPTY_SCOPE = NamespaceScope()
