"""References to element nodes, with selection, serialization and text access."""

from __future__ import annotations

from typing import Iterator, Protocol, runtime_checkable

from .node import CaseSensitivity, Element, NodeRef, Text
from .selector import Selector
from .serialize import serialize


@runtime_checkable
class Selectable(Protocol):
    """Anything a CSS selector can be applied to, yielding matching elements."""

    def select(self, selector: Selector) -> Iterator[ElementRef]:
        """Iterate over the elements matching the selector."""
        ...


class ElementRef:
    """A reference to a tree node that holds an element.

    Attributes not defined here, such as ``parent`` or ``children``, are
    looked up on the underlying node.
    """

    __slots__ = ("node",)

    def __init__(self, node: NodeRef) -> None:
        if not isinstance(node.value, Element):
            raise TypeError("node does not hold an element")
        self.node = node

    @staticmethod
    def wrap(node: NodeRef) -> ElementRef | None:
        """Wrap the node if it holds an element, else return None."""
        return ElementRef(node) if isinstance(node.value, Element) else None

    def value(self) -> Element:
        """Return the referenced element."""
        return self.node.value  # type: ignore[return-value]

    def select(self, selector: Selector) -> Iterator[ElementRef]:
        """Iterate over descendent elements matching the selector, in document order.

        This element acts as the ``:scope`` element and is never itself yielded.
        """
        for node in self.node.descendants():
            if node is self.node or not isinstance(node.value, Element):
                continue
            element = ElementRef(node)
            if selector.matches_with_scope(element, self):
                yield element

    def html(self) -> str:
        """Return the HTML of this element."""
        return serialize(self.node, include_node=True)

    def inner_html(self) -> str:
        """Return the HTML of this element's children."""
        return serialize(self.node, include_node=False)

    def attr(self, name: str) -> str | None:
        """Return the value of an attribute."""
        return self.value().attr(name)

    def text(self) -> Iterator[str]:
        """Iterate over the contents of descendent text nodes."""
        return (
            node.value.text
            for node in self.node.descendants()
            if isinstance(node.value, Text)
        )

    def child_elements(self) -> Iterator[ElementRef]:
        """Iterate over child nodes that are elements."""
        return (ElementRef(child) for child in self.node.children if isinstance(child.value, Element))

    def descendent_elements(self) -> Iterator[ElementRef]:
        """Iterate over this element and its descendants that are elements."""
        return (
            ElementRef(node)
            for node in self.node.descendants()
            if isinstance(node.value, Element)
        )

    def has_id(self, id: str, case_sensitivity: CaseSensitivity) -> bool:
        """Return True if the element's id equals the given one."""
        value = self.value().id()
        return value is not None and case_sensitivity.eq(id, value)

    def has_class(self, name: str, case_sensitivity: CaseSensitivity) -> bool:
        """Return True if the element has the class."""
        return self.value().has_class(name, case_sensitivity)

    def is_link(self) -> bool:
        """Return True if the element is a ``link`` element."""
        return self.value().name() == "link"

    def __getattr__(self, name: str):
        if name == "node":
            raise AttributeError(name)
        return getattr(self.node, name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementRef):
            return NotImplemented
        return self.node is other.node

    def __hash__(self) -> int:
        return id(self.node)

    def __repr__(self) -> str:
        return repr(self.value())