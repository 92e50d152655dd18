"""HTML nodes and the tree that holds them."""

from __future__ import annotations

import enum
import functools
import re
import string
from dataclasses import dataclass
from typing import Iterable, Iterator, NamedTuple

from .errors import _quote

HTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
SVG_NAMESPACE = "http://www.w3.org/2000/svg"
MATHML_NAMESPACE = "http://www.w3.org/1998/Math/MathML"
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XMLNS_NAMESPACE = "http://www.w3.org/2000/xmlns/"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_ASCII_WORD = re.compile(r"[^\t\n\f\r ]+")


class CaseSensitivity(enum.Enum):
    """How strings are compared when matching ids and classes."""

    CASE_SENSITIVE = "case-sensitive"
    ASCII_CASE_INSENSITIVE = "ascii-case-insensitive"

    def eq(self, a: str, b: str) -> bool:
        """Compare two strings under this sensitivity."""
        if self is CaseSensitivity.CASE_SENSITIVE:
            return a == b
        return a.translate(_ASCII_LOWER) == b.translate(_ASCII_LOWER)


@functools.total_ordering
@dataclass(frozen=True)
class QualName:
    """A namespace-qualified name."""

    local: str
    ns: str = ""
    prefix: str | None = None

    def _key(self) -> tuple:
        return (self.prefix is not None, self.prefix or "", self.ns, self.local)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, QualName):
            return NotImplemented
        return self._key() < other._key()


@dataclass(frozen=True)
class Document:
    """The document root."""

    def __repr__(self) -> str:
        return "Document"


@dataclass(frozen=True)
class Fragment:
    """The fragment root."""

    def __repr__(self) -> str:
        return "Fragment"


@dataclass
class Doctype:
    """A doctype."""

    name: str
    public_id: str = ""
    system_id: str = ""

    def __repr__(self) -> str:
        return (
            f"<!DOCTYPE {self.name} PUBLIC "
            f"{_quote(self.public_id)} {_quote(self.system_id)}>"
        )


@dataclass
class Comment:
    """An HTML comment."""

    comment: str

    def __str__(self) -> str:
        return self.comment

    def __repr__(self) -> str:
        return f"<!-- {_quote(self.comment)} -->"


@dataclass
class Text:
    """A run of text."""

    text: str

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return _quote(self.text)


@dataclass
class ProcessingInstruction:
    """A processing instruction."""

    target: str
    data: str

    def __str__(self) -> str:
        return self.data


_UNSET = object()


class Element:
    """An HTML element with its attributes, sorted by qualified name."""

    def __init__(
        self, qualname: QualName, attributes: Iterable[tuple[QualName, str]] = ()
    ) -> None:
        self.qualname = qualname
        self.attributes: list[tuple[QualName, str]] = sorted(
            attributes, key=lambda item: item[0]
        )
        self._id: object = _UNSET
        self._classes: tuple[str, ...] | None = None

    def name(self) -> str:
        """Return the local name of the element."""
        return self.qualname.local

    def id(self) -> str | None:
        """Return the element's id, if it has one."""
        if self._id is _UNSET:
            self._id = next(
                (value for key, value in self.attributes if key.local == "id"), None
            )
        return self._id  # type: ignore[return-value]

    def classes(self) -> Iterator[str]:
        """Iterate over the element's distinct classes in sorted order."""
        if self._classes is None:
            found = {
                word
                for key, value in self.attributes
                if key.local == "class"
                for word in _ASCII_WORD.findall(value)
            }
            self._classes = tuple(sorted(found))
        return iter(self._classes)

    def has_class(self, name: str, case_sensitivity: CaseSensitivity) -> bool:
        """Return True if the element has the class."""
        return any(case_sensitivity.eq(cls, name) for cls in self.classes())

    def attr(self, name: str) -> str | None:
        """Return the value of an attribute with no namespace."""
        wanted = QualName(name)
        return next((value for key, value in self.attributes if key == wanted), None)

    def attrs(self) -> Iterator[tuple[str, str]]:
        """Iterate over (local name, value) pairs of the attributes."""
        return ((key.local, value) for key, value in self.attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self.qualname == other.qualname and self.attributes == other.attributes

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        attrs = "".join(f" {key}={_quote(value)}" for key, value in self.attrs())
        return f"<{self.name()}{attrs}>"


class Edge(NamedTuple):
    """An opening or closing step of a tree traversal."""

    node: NodeRef
    is_open: bool


class NodeRef:
    """A node of the tree: a value with a parent and ordered children."""

    def __init__(self, value: object) -> None:
        self.value = value
        self._parent: NodeRef | None = None
        self._children: list[NodeRef] = []

    @property
    def parent(self) -> NodeRef | None:
        return self._parent

    @property
    def children(self) -> tuple[NodeRef, ...]:
        return tuple(self._children)

    def _index(self) -> int:
        assert self._parent is not None
        return next(
            i for i, sibling in enumerate(self._parent._children) if sibling is self
        )

    def _check_insertable(self, node: NodeRef, anchor: NodeRef) -> None:
        if node is anchor or any(a is node for a in anchor.ancestors()):
            raise ValueError("cannot insert a node into its own subtree")

    @staticmethod
    def _wrap(child: object) -> NodeRef:
        return child if isinstance(child, NodeRef) else NodeRef(child)

    def append(self, child: object) -> NodeRef:
        """Append a node or a value as the last child and return its node."""
        node = self._wrap(child)
        self._check_insertable(node, self)
        node.detach()
        node._parent = self
        self._children.append(node)
        return node

    def insert_before(self, new_node: object) -> NodeRef:
        """Insert a node or a value as the previous sibling and return its node."""
        if self._parent is None:
            raise ValueError("node has no parent")
        node = self._wrap(new_node)
        self._check_insertable(node, self)
        node.detach()
        parent = self._parent
        parent._children.insert(self._index(), node)
        node._parent = parent
        return node

    def detach(self) -> None:
        """Remove this node from its parent."""
        if self._parent is not None:
            del self._parent._children[self._index()]
            self._parent = None

    def reparent_children_to(self, new_parent: NodeRef) -> None:
        """Move all children of this node to the end of new_parent."""
        if new_parent is self or any(a is self for a in new_parent.ancestors()):
            raise ValueError("cannot reparent children into their own subtree")
        moved, self._children = self._children, []
        for child in moved:
            child._parent = new_parent
        new_parent._children.extend(moved)

    def prev_sibling(self) -> NodeRef | None:
        if self._parent is None:
            return None
        index = self._index()
        return self._parent._children[index - 1] if index > 0 else None

    def next_sibling(self) -> NodeRef | None:
        if self._parent is None:
            return None
        siblings = self._parent._children
        index = self._index() + 1
        return siblings[index] if index < len(siblings) else None

    def last_child(self) -> NodeRef | None:
        return self._children[-1] if self._children else None

    def prev_siblings(self) -> Iterator[NodeRef]:
        """Iterate over previous siblings, nearest first."""
        if self._parent is None:
            return iter(())
        return reversed(self._parent._children[: self._index()])

    def next_siblings(self) -> Iterator[NodeRef]:
        """Iterate over following siblings, nearest first."""
        if self._parent is None:
            return iter(())
        return iter(self._parent._children[self._index() + 1 :])

    def ancestors(self) -> Iterator[NodeRef]:
        """Iterate over the ancestors, parent first."""
        node = self._parent
        while node is not None:
            yield node
            node = node._parent

    def traverse(self) -> Iterator[Edge]:
        """Walk the subtree, yielding an opening and a closing edge per node."""
        stack: list[tuple[NodeRef, bool]] = [(self, True)]
        while stack:
            node, opening = stack.pop()
            if not opening:
                yield Edge(node, False)
                continue
            yield Edge(node, True)
            stack.append((node, False))
            stack.extend((child, True) for child in reversed(node._children))

    def descendants(self) -> Iterator[NodeRef]:
        """Iterate over this node and its descendants in document order."""
        return (edge.node for edge in self.traverse() if edge.is_open)

    def __repr__(self) -> str:
        if isinstance(self.value, (Document, Fragment)):
            return repr(self.value)
        return f"{type(self.value).__name__}({self.value!r})"