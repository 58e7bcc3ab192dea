"""Qualified names.

A QName is a (namespace URI, local name) pair. The prefix is only a hint used
when the name is written out again and takes no part in equality or hashing.
"""

from dataclasses import dataclass, field

from immutable_xml_dom.shared.errors import InvalidNameError

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XMLNS_NAMESPACE = "http://www.w3.org/2000/xmlns/"
XML_PREFIX = "xml"
XMLNS_PREFIX = "xmlns"


@dataclass(frozen=True)
class QName:
    """Namespace-qualified name with an advisory prefix.

    Attributes:
        namespace_uri: Namespace URI, or the empty string for no namespace
        local_name: Non-empty local part without colons
        prefix: Prefix hint, empty for the default namespace or no namespace
    """

    namespace_uri: str
    local_name: str
    prefix: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        """Validate the name parts."""
        if self.namespace_uri is None:
            object.__setattr__(self, "namespace_uri", "")
        if self.prefix is None:
            object.__setattr__(self, "prefix", "")
        if not self.local_name:
            raise InvalidNameError("Local name cannot be empty", name=self.local_name)
        if ":" in self.local_name:
            raise InvalidNameError(
                f"Local name must not contain a colon: {self.local_name!r}",
                name=self.local_name,
            )
        if ":" in self.prefix:
            raise InvalidNameError(
                f"Prefix must not contain a colon: {self.prefix!r}",
                name=self.local_name,
            )
        if self.prefix and not self.namespace_uri:
            raise InvalidNameError(
                f"Prefix {self.prefix!r} requires a namespace URI",
                name=self.local_name,
            )

    @property
    def syntactic_name(self) -> str:
        """Name as written in XML: "local" or "prefix:local"."""
        if self.prefix:
            return f"{self.prefix}:{self.local_name}"
        return self.local_name

    @property
    def clark_name(self) -> str:
        """Name in Clark notation: "{ns}local", or "local" without namespace."""
        if self.namespace_uri:
            return f"{{{self.namespace_uri}}}{self.local_name}"
        return self.local_name

    def without_prefix(self) -> "QName":
        """Return the same name with the prefix hint removed."""
        if not self.prefix:
            return self
        return QName(self.namespace_uri, self.local_name)

    def with_prefix(self, prefix: str) -> "QName":
        """Return the same name with another prefix hint."""
        if prefix == self.prefix:
            return self
        return QName(self.namespace_uri, self.local_name, prefix)

    @classmethod
    def from_clark(cls, clark_name: str) -> "QName":
        """Parse a name in Clark notation.

        Args:
            clark_name: Name such as "{http://ex}a" or "a"

        Returns:
            QName without prefix hint
        """
        if clark_name.startswith("{"):
            end = clark_name.find("}")
            if end < 0:
                raise InvalidNameError(
                    f"Unterminated namespace in Clark name: {clark_name!r}",
                    name=clark_name,
                )
            return cls(clark_name[1:end], clark_name[end + 1:])
        return cls("", clark_name)

    def __str__(self) -> str:
        return self.clark_name

    def __repr__(self) -> str:
        if self.prefix:
            return f"QName({self.namespace_uri!r}, {self.local_name!r}, {self.prefix!r})"
        return f"QName({self.namespace_uri!r}, {self.local_name!r})"
