"""HTML documents and fragments, parsed into a node tree."""

from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

import html5lib
from html5lib.constants import E as _ERROR_MESSAGES
from html5lib.treebuilders import base as _base

from .element_ref import ElementRef
from .node import (
    HTML_NAMESPACE,
    Comment,
    Doctype,
    Document,
    Element,
    Fragment,
    NodeRef,
    QualName,
    Text,
)
from .selector import Selector
from .serialize import serialize


class QuirksMode(enum.Enum):
    """The quirks mode a document was parsed in."""

    NO_QUIRKS = "no quirks"
    QUIRKS = "quirks"
    LIMITED_QUIRKS = "limited quirks"


# ------------------------------------------------------------ parse sink


class _SinkNode(_base.Node):
    """A node of the intermediate tree the parser builds."""

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name)

    def _position(self, child: _SinkNode) -> int:
        return next(i for i, node in enumerate(self.childNodes) if node is child)

    def appendChild(self, node: _SinkNode) -> None:
        if node.parent is not None:
            node.parent.removeChild(node)
        node.parent = self
        self.childNodes.append(node)

    def insertText(self, data: str, insertBefore: _SinkNode | None = None) -> None:
        if insertBefore is None:
            last = self.childNodes[-1] if self.childNodes else None
            if isinstance(last, _TextNode):
                last.data += data
            else:
                self.appendChild(_TextNode(data))
            return
        index = self._position(insertBefore)
        previous = self.childNodes[index - 1] if index > 0 else None
        if isinstance(previous, _TextNode):
            previous.data += data
        else:
            self.insertBefore(_TextNode(data), insertBefore)

    def insertBefore(self, node: _SinkNode, refNode: _SinkNode) -> None:
        if node.parent is not None:
            node.parent.removeChild(node)
        self.childNodes.insert(self._position(refNode), node)
        node.parent = self

    def removeChild(self, node: _SinkNode) -> None:
        del self.childNodes[self._position(node)]
        node.parent = None

    def reparentChildren(self, newParent: _SinkNode) -> None:
        moved, self.childNodes = self.childNodes, []
        for child in moved:
            child.parent = newParent
        newParent.childNodes.extend(moved)

    def hasContent(self) -> bool:
        return bool(self.childNodes)

    def cloneNode(self) -> _SinkNode:
        return type(self)()

    def to_value(self) -> object:
        raise TypeError("root nodes carry no value of their own")


class _RootNode(_SinkNode):
    pass


class _TextNode(_SinkNode):
    def __init__(self, data: str) -> None:
        super().__init__(None)
        self.data = data

    def cloneNode(self) -> _TextNode:
        return _TextNode(self.data)

    def to_value(self) -> Text:
        return Text(self.data)


class _CommentNode(_SinkNode):
    def __init__(self, data: str) -> None:
        super().__init__(None)
        self.data = data

    def cloneNode(self) -> _CommentNode:
        return _CommentNode(self.data)

    def to_value(self) -> Comment:
        return Comment(self.data)


class _DoctypeNode(_SinkNode):
    def __init__(self, name: str | None, publicId: str | None, systemId: str | None) -> None:
        super().__init__(name)
        self.public_id = publicId or ""
        self.system_id = systemId or ""

    def cloneNode(self) -> _DoctypeNode:
        return _DoctypeNode(self.name, self.public_id, self.system_id)

    def to_value(self) -> Doctype:
        return Doctype(self.name or "", self.public_id, self.system_id)


def _attribute_name(key: object) -> QualName:
    if isinstance(key, tuple):
        prefix, local, namespace = key
        return QualName(local, namespace or "", prefix)
    return QualName(str(key))


class _ElementNode(_SinkNode):
    def __init__(self, name: str, namespace: str | None = None) -> None:
        super().__init__(name)
        self.namespace = namespace

    @property
    def nameTuple(self) -> tuple[str, str]:
        return (self.namespace or HTML_NAMESPACE, self.name)

    def cloneNode(self) -> _ElementNode:
        clone = _ElementNode(self.name, self.namespace)
        clone.attributes = dict(self.attributes)
        return clone

    def is_template(self) -> bool:
        return self.nameTuple == (HTML_NAMESPACE, "template")

    def to_value(self) -> Element:
        return Element(
            QualName(self.name, self.namespace or ""),
            [(_attribute_name(key), value) for key, value in self.attributes.items()],
        )


class _TreeBuilder(_base.TreeBuilder):
    documentClass = _RootNode
    elementClass = _ElementNode
    commentClass = _CommentNode
    doctypeClass = _DoctypeNode
    fragmentClass = _RootNode


def _build(source: _SinkNode, target: NodeRef) -> None:
    """Copy the children of an intermediate node under a tree node."""
    stack = [(source, target)]
    while stack:
        wrapper, node = stack.pop()
        for child in wrapper.childNodes:
            converted = node.append(child.to_value())
            if isinstance(child, _ElementNode) and child.is_template():
                # Template contents live under a fragment of their own.
                converted = converted.append(Fragment())
            stack.append((child, converted))


def _error_messages(parser: html5lib.HTMLParser) -> list[str]:
    messages = []
    for _position, code, datavars in parser.errors:
        template = _ERROR_MESSAGES.get(code, code)
        try:
            messages.append(template % (datavars or {}))
        except (KeyError, TypeError, ValueError):
            messages.append(template)
    return messages


# --------------------------------------------------------------- selection


class _Select:
    """Iterator over matching elements that can also be consumed from the end."""

    def __init__(self, root: NodeRef, selector: Selector) -> None:
        self._nodes = deque(root.descendants())
        self._selector = selector

    def _accept(self, node: NodeRef) -> ElementRef | None:
        element = ElementRef.wrap(node)
        if (
            element is not None
            and node.parent is not None
            and self._selector.matches_with_scope(element, None)
        ):
            return element
        return None

    def __iter__(self) -> _Select:
        return self

    def __next__(self) -> ElementRef:
        while self._nodes:
            element = self._accept(self._nodes.popleft())
            if element is not None:
                return element
        raise StopIteration

    def __reversed__(self) -> Iterator[ElementRef]:
        while self._nodes:
            element = self._accept(self._nodes.pop())
            if element is not None:
                yield element

    def __length_hint__(self) -> int:
        return len(self._nodes)


# -------------------------------------------------------------------- Html


@dataclass(eq=False)
class Html:
    """A parsed HTML tree.

    Parsing never fails: errors are collected in ``errors`` and the tree is
    built as well as possible.
    """

    tree: NodeRef
    errors: list[str] = field(default_factory=list)
    quirks_mode: QuirksMode = QuirksMode.NO_QUIRKS

    @classmethod
    def new_document(cls) -> Html:
        """Create an empty document."""
        return cls(NodeRef(Document()))

    @classmethod
    def new_fragment(cls) -> Html:
        """Create an empty fragment."""
        return cls(NodeRef(Fragment()))

    @classmethod
    def parse_document(cls, document: str) -> Html:
        """Parse a string of HTML as a document."""
        parser = html5lib.HTMLParser(tree=_TreeBuilder)
        parsed = parser.parse(document)
        html = cls.new_document()
        _build(parsed, html.tree)
        html.errors = _error_messages(parser)
        html.quirks_mode = QuirksMode(parser.compatMode)
        return html

    @classmethod
    def parse_fragment(cls, fragment: str) -> Html:
        """Parse a string of HTML as a fragment in the context of ``<body>``."""
        parser = html5lib.HTMLParser(tree=_TreeBuilder)
        parsed = parser.parseFragment(fragment, container="body")
        html = cls.new_fragment()
        root = html.tree.append(Element(QualName("html", HTML_NAMESPACE)))
        _build(parsed, root)
        html.errors = _error_messages(parser)
        html.quirks_mode = QuirksMode(parser.compatMode)
        return html

    def select(self, selector: Selector) -> _Select:
        """Iterate over the elements matching a selector, in document order."""
        return _Select(self.tree, selector)

    def root_element(self) -> ElementRef:
        """Return the root ``<html>`` element."""
        for child in self.tree.children:
            element = ElementRef.wrap(child)
            if element is not None:
                return element
        raise ValueError("html node missing")

    def html(self) -> str:
        """Serialize the whole tree to HTML."""
        return serialize(self.tree, include_node=True)