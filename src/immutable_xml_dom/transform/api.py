"""Functional transformations shared by all transformable element kinds.

Every method returns a new element and leaves the receiver untouched.
Untransformed children, attribute maps and scopes are shared with the original.
Exceptions raised by caller-supplied functions propagate unchanged.

Bottom-up rebuilds use an explicit stack of frames instead of recursion, so
deep trees do not hit the interpreter's recursion limit.
"""

from dataclasses import replace
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
)

from immutable_xml_dom.core.navigation_path import NavigationPath
from immutable_xml_dom.core.qname import QName
from immutable_xml_dom.core.whitespace import is_xml_whitespace

PathUpdate = Callable[[NavigationPath, Any], Any]


def _identity(node: Any) -> Any:
    return node


def _children(element: Any) -> Iterable[Any]:
    return element.children


class _RebuildFrame:
    __slots__ = ("element", "remaining", "new_children", "state")

    def __init__(self, element: Any, children: Iterable[Any], state: Any) -> None:
        self.element = element
        self.remaining: Iterator[Any] = iter(children)
        self.new_children: List[Any] = []
        self.state = state


def rebuild_bottom_up(
    root: Any,
    is_element: Callable[[Any], bool],
    rebuild: Callable[[Any, List[Any], Any], Any],
    leaf: Callable[[Any], Any] = _identity,
    children_of: Callable[[Any], Iterable[Any]] = _children,
    enter: Optional[Callable[[Any, Any], Any]] = None,
    root_state: Any = None
) -> Any:
    """Rebuild an element tree from its leaves up, without recursion.

    Each element is rebuilt once all of its children are, in document order,
    so a shared subtree occurring twice is simply processed twice.

    Args:
        root: Element to rebuild
        is_element: Tells element children apart from other nodes
        rebuild: Called as ``rebuild(element, new_children, state)``
        leaf: Maps each child that is not descended into
        children_of: Children to process for an element
        enter: Called as ``enter(child_element, parent_state)``; returns the
            state of the child, or None to keep the child via ``leaf``.
            Without it every element child is descended into.
        root_state: State of the root element

    Returns:
        Result of ``rebuild`` for the root
    """
    frames = [_RebuildFrame(root, children_of(root), root_state)]
    while True:
        frame = frames[-1]
        child_frame = None
        for child in frame.remaining:
            if is_element(child):
                if enter is None:
                    child_frame = _RebuildFrame(child, children_of(child), None)
                    break
                child_state = enter(child, frame.state)
                if child_state is not None:
                    child_frame = _RebuildFrame(child, children_of(child), child_state)
                    break
            frame.new_children.append(leaf(child))
        if child_frame is not None:
            frames.append(child_frame)
            continue

        frames.pop()
        result = rebuild(frame.element, frame.new_children, frame.state)
        if not frames:
            return result
        frames[-1].new_children.append(result)


class _PathSelection:
    """Node of the trie of navigation paths passed to update_element."""

    __slots__ = ("path", "selected", "children", "_next_element_index")

    def __init__(self, path: NavigationPath) -> None:
        self.path = path
        self.selected = False
        self.children: Dict[int, "_PathSelection"] = {}
        self._next_element_index = 0

    @classmethod
    def of(cls, paths: Iterable[NavigationPath]) -> "_PathSelection":
        root = cls(NavigationPath.empty())
        for path in paths:
            node = root
            for entry in path:
                child = node.children.get(entry)
                if child is None:
                    child = node.children[entry] = cls(node.path.append_entry(entry))
                node = child
            node.selected = True
        return root

    def enter_child_element(self) -> Optional["_PathSelection"]:
        index = self._next_element_index
        self._next_element_index += 1
        return self.children.get(index)



class TransformableElementMixin:
    """Transformation methods for frozen element dataclasses.

    The host class must be a dataclass with ``name``, ``attributes`` and
    ``children`` fields, and a ``query_api`` class attribute telling element
    and text children apart.
    """

    # Node creation hook, overridden per element kind
    def _new_text_node(self, value: str, is_cdata: bool = False) -> Any:
        raise NotImplementedError

    def _is_element_child(self, node: Any) -> bool:
        return self.query_api.is_element_node(node)  # type: ignore[attr-defined]

    def _is_text_child(self, node: Any) -> bool:
        return self.query_api.is_text_node(node)  # type: ignore[attr-defined]

    def with_name(self, name: QName) -> Any:
        """Replace the element name.

        The new name must agree with the element's scope.
        """
        return replace(self, name=name)

    def with_children(self, children: Iterable[Any]) -> Any:
        return replace(self, children=tuple(children))

    def _with_children_if_changed(self, children: Iterable[Any]) -> Any:
        new_children = tuple(children)
        old_children = self.children  # type: ignore[attr-defined]
        if len(new_children) == len(old_children) and all(
            new is old for new, old in zip(new_children, old_children)
        ):
            return self
        return replace(self, children=new_children)

    def with_attributes(self, attributes: Mapping[QName, str]) -> Any:
        return replace(self, attributes=attributes)

    def plus_child(self, child: Any) -> Any:
        return self.with_children(self.children + (child,))  # type: ignore[attr-defined]

    def plus_child_option(self, child: Optional[Any]) -> Any:
        if child is None:
            return self
        return self.plus_child(child)

    def plus_children(self, children: Iterable[Any]) -> Any:
        return self.with_children(self.children + tuple(children))  # type: ignore[attr-defined]

    def plus_attribute(self, name: QName, value: str) -> Any:
        """Add or replace one attribute."""
        attributes = dict(self.attributes)  # type: ignore[attr-defined]
        attributes[name] = value
        return self.with_attributes(attributes)

    def plus_attribute_option(self, name: QName, value: Optional[str]) -> Any:
        if value is None:
            return self
        return self.plus_attribute(name, value)

    def minus_attribute(self, name: QName) -> Any:
        if name not in self.attributes:  # type: ignore[attr-defined]
            return self
        return self.with_attributes(
            {n: v for n, v in self.attributes.items() if n != name}  # type: ignore[attr-defined]
        )

    def with_text(self, value: str) -> Any:
        """Make a single text node the only child."""
        return self.with_children((self._new_text_node(value),))

    def plus_text(self, value: str) -> Any:
        return self.plus_child(self._new_text_node(value))

    def transform_children_to_node_lists(self, f: Callable[[Any], Iterable[Any]]) -> Any:
        """Replace each child node by the nodes returned for it."""
        new_children: List[Any] = []
        for child in self.children:  # type: ignore[attr-defined]
            new_children.extend(f(child))
        return self.with_children(new_children)

    def transform_child_elements_to_node_lists(self, f: Callable[[Any], Iterable[Any]]) -> Any:
        """Replace each child element by the nodes returned for it.

        Non-element children are kept as they are.
        """
        return self.transform_children_to_node_lists(
            lambda child: f(child) if self._is_element_child(child) else (child,)
        )

    def transform_child_elements(self, f: Callable[[Any], Any]) -> Any:
        """Replace each child element by one element; the child count is unchanged."""
        return self._with_children_if_changed(
            f(child) if self._is_element_child(child) else child
            for child in self.children  # type: ignore[attr-defined]
        )

    def transform_descendant_elements_or_self(self, f: Callable[[Any], Any]) -> Any:
        """Bottom-up transformation of all descendant-or-self elements.

        Children are transformed before their parent, so ``f`` sees an
        element whose descendants have already been transformed.
        """
        return rebuild_bottom_up(
            self,
            self._is_element_child,
            lambda element, children, _: f(element._with_children_if_changed(children)),
        )

    def transform_descendant_elements(self, f: Callable[[Any], Any]) -> Any:
        """Bottom-up transformation of all descendant elements, not this one."""
        return self.transform_child_elements(
            lambda child: child.transform_descendant_elements_or_self(f)
        )

    def transform_self(self, f: Callable[[Any], Any]) -> Any:
        return f(self)

    def update_element(self, paths: Iterable[NavigationPath], f: PathUpdate) -> Any:
        """Apply ``f(path, element)`` at each of the given navigation paths.

        Deeper elements are updated before their ancestors, so updates never
        invalidate the paths still to be processed.

        Args:
            paths: Navigation paths relative to this element
            f: Function receiving the path and the (already updated) element

        Returns:
            Updated element

        Raises:
            PathOutOfRangeError: If any path does not resolve against this element
        """
        path_set = {
            path if isinstance(path, NavigationPath) else NavigationPath(tuple(path))
            for path in paths
        }
        for path in path_set:
            path.resolve(self)
        return self._update_resolved_paths(path_set, f)

    def update_element_at(self, path: NavigationPath, f: Callable[[Any], Any]) -> Any:
        """Apply ``f`` to the single element at the given path."""
        return self.update_element({path}, lambda _, element: f(element))

    def _update_resolved_paths(self, paths: Set[NavigationPath], f: PathUpdate) -> Any:
        def _rebuild(element: Any, children: List[Any], selection: _PathSelection) -> Any:
            result = element._with_children_if_changed(children)
            if selection.selected:
                result = f(selection.path, result)
            return result

        return rebuild_bottom_up(
            self,
            self._is_element_child,
            _rebuild,
            enter=lambda _, selection: selection.enter_child_element(),
            root_state=_PathSelection.of(paths),
        )

    def remove_inter_element_whitespace(self) -> Any:
        """Remove whitespace-only text between elements, recursively.

        Where an element has at least one element child and all its text
        children are whitespace-only, those text children are removed.
        The ``xml:space`` attribute is not taken into account.
        """
        return rebuild_bottom_up(
            self,
            self._is_element_child,
            lambda element, children, _: element._with_children_if_changed(children),
            children_of=self._children_without_blank_text,
        )

    def _children_without_blank_text(self, element: Any) -> Iterable[Any]:
        children = element.children
        has_element_child = any(self._is_element_child(child) for child in children)
        only_blank_text = has_element_child and all(
            not self._is_text_child(child) or is_xml_whitespace(child.value) for child in children
        )
        if only_blank_text:
            return tuple(child for child in children if not self._is_text_child(child))
        return children
