"""Element navigation paths.

A navigation path addresses an element relative to a root element. Each entry
is the zero-based index of a child element; text, comment and processing
instruction siblings are not counted. The empty path addresses the root.

Paths stay valid under functional updates that replace single elements by
single elements, whatever happens to the element names.
"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Iterable, Iterator, Optional, Tuple

from immutable_xml_dom.shared.errors import PathOutOfRangeError


@total_ordering
@dataclass(frozen=True)
class NavigationPath:
    """Immutable sequence of child element indices."""

    entries: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate and freeze entries."""
        entries = tuple(self.entries)
        for entry in entries:
            if not isinstance(entry, int) or entry < 0:
                raise ValueError(f"Navigation path entries must be non-negative ints: {entry!r}")
        object.__setattr__(self, "entries", entries)

    @classmethod
    def empty(cls) -> "NavigationPath":
        return cls(())

    @classmethod
    def of(cls, *entries: int) -> "NavigationPath":
        return cls(entries)

    @classmethod
    def parse(cls, text: str) -> "NavigationPath":
        """Parse the "/0/2" rendering produced by str()."""
        if text in ("", "/"):
            return cls.empty()
        if not text.startswith("/"):
            raise ValueError(f"Navigation path must start with '/': {text!r}")
        return cls(tuple(int(part) for part in text[1:].split("/")))

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self.entries)

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, NavigationPath):
            return NotImplemented
        return self.entries < other.entries

    def __str__(self) -> str:
        return "/" + "/".join(str(entry) for entry in self.entries)

    def entry(self, index: int) -> int:
        return self.entries[index]

    def append_entry(self, child_element_index: int) -> "NavigationPath":
        return NavigationPath(self.entries + (child_element_index,))

    def prepend_entry(self, child_element_index: int) -> "NavigationPath":
        return NavigationPath((child_element_index,) + self.entries)

    def without_first_entry_option(self) -> Optional["NavigationPath"]:
        if not self.entries:
            return None
        return NavigationPath(self.entries[1:])

    def without_first_entry(self) -> "NavigationPath":
        """Drop the first entry; the path must not be empty."""
        result = self.without_first_entry_option()
        if result is None:
            raise PathOutOfRangeError("Empty navigation path has no first entry", path=())
        return result

    def without_last_entry_option(self) -> Optional["NavigationPath"]:
        if not self.entries:
            return None
        return NavigationPath(self.entries[:-1])

    def without_last_entry(self) -> "NavigationPath":
        """Drop the last entry (the parent path); the path must not be empty."""
        result = self.without_last_entry_option()
        if result is None:
            raise PathOutOfRangeError("Empty navigation path has no last entry", path=())
        return result

    def is_ancestor_or_self_of(self, other: "NavigationPath") -> bool:
        return other.entries[:len(self.entries)] == self.entries

    def resolve_option(self, root: Any) -> Optional[Any]:
        """Resolve against a root element, or return None when out of range.

        Works for every element kind exposing child_element_stream().
        """
        current = root
        for entry in self.entries:
            current = _nth_child_element(current, entry)
            if current is None:
                return None
        return current

    def resolve(self, root: Any) -> Any:
        """Resolve against a root element.

        Raises:
            PathOutOfRangeError: If an index exceeds the child element count
        """
        current = root
        for depth, entry in enumerate(self.entries):
            child = _nth_child_element(current, entry)
            if child is None:
                raise PathOutOfRangeError(
                    f"Navigation path {self} does not resolve: no child element "
                    f"{entry} at depth {depth}",
                    path=self.entries,
                    depth=depth,
                )
            current = child
        return current


def _nth_child_element(element: Any, index: int) -> Optional[Any]:
    for position, child in enumerate(element.child_element_stream()):
        if position == index:
            return child
    return None


def find_navigation_path(root: Any, target: Any) -> Optional[NavigationPath]:
    """Find the path of a target element within a root element.

    The target is looked up by identity, in document order, so the first
    occurrence of a shared subtree wins.

    Args:
        root: Root element
        target: Element that occurs (by identity) in the root's tree

    Returns:
        NavigationPath of the target, or None when it does not occur
    """
    stack = [(root, NavigationPath.empty())]
    while stack:
        element, path = stack.pop()
        if element is target:
            return path
        children = list(element.child_element_stream())
        for index in range(len(children) - 1, -1, -1):
            stack.append((children[index], path.append_entry(index)))
    return None


def navigation_paths(root: Any) -> Iterable[NavigationPath]:
    """Yield the paths of all descendant-or-self elements, in document order."""
    stack = [(root, NavigationPath.empty())]
    while stack:
        element, path = stack.pop()
        yield path
        children = list(element.child_element_stream())
        for index in range(len(children) - 1, -1, -1):
            stack.append((children[index], path.append_entry(index)))
