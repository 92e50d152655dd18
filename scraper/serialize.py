"""HTML serialization of node subtrees."""

from __future__ import annotations

from dataclasses import dataclass

from .node import (
    Comment,
    Doctype,
    Element,
    HTML_NAMESPACE,
    NodeRef,
    QualName,
    Text,
    XLINK_NAMESPACE,
    XML_NAMESPACE,
    XMLNS_NAMESPACE,
)

_VOID_ELEMENTS = frozenset(
    {
        "area", "base", "basefont", "bgsound", "br", "col", "embed", "frame",
        "hr", "img", "input", "keygen", "link", "meta", "param", "source",
        "track", "wbr",
    }
)

# Scripting is disabled, so <noscript> content is escaped like any other.
_RAW_TEXT_ELEMENTS = frozenset(
    {"style", "script", "xmp", "iframe", "noembed", "noframes", "plaintext"}
)


@dataclass
class _Frame:
    html_name: str | None
    ignore_children: bool


def _escape(text: str, attr_mode: bool) -> str:
    text = text.replace("&", "&amp;").replace("\u00a0", "&nbsp;")
    if attr_mode:
        return text.replace('"', "&quot;")
    return text.replace("<", "&lt;").replace(">", "&gt;")


def _attr_name(name: QualName) -> str:
    if name.ns == "":
        return name.local
    if name.ns == XML_NAMESPACE:
        return "xml:" + name.local
    if name.ns == XMLNS_NAMESPACE:
        return name.local if name.local == "xmlns" else "xmlns:" + name.local
    if name.ns == XLINK_NAMESPACE:
        return "xlink:" + name.local
    return "unknown_namespace:" + name.local


def serialize(node: NodeRef, include_node: bool = True) -> str:
    """Serialize a subtree to HTML, with or without the node itself."""
    out: list[str] = []
    stack = [_Frame(None, False)]
    for edge in node.traverse():
        current = edge.node
        if current is node and not include_node:
            continue
        value = current.value
        if edge.is_open:
            if isinstance(value, Doctype):
                out.append(f"<!DOCTYPE {value.name}>")
            elif isinstance(value, Comment):
                out.append(f"<!--{value.comment}-->")
            elif isinstance(value, Text):
                raw = stack[-1].html_name in _RAW_TEXT_ELEMENTS
                out.append(value.text if raw else _escape(value.text, False))
            elif isinstance(value, Element):
                name = value.qualname
                html_name = name.local if name.ns == HTML_NAMESPACE else None
                if stack[-1].ignore_children:
                    stack.append(_Frame(html_name, True))
                    continue
                out.append("<" + name.local)
                for key, attr_value in value.attributes:
                    out.append(f' {_attr_name(key)}="{_escape(attr_value, True)}"')
                out.append(">")
                stack.append(_Frame(html_name, html_name in _VOID_ELEMENTS))
        elif isinstance(value, Element):
            frame = stack.pop()
            if not frame.ignore_children:
                out.append(f"</{value.qualname.local}>")
    return "".join(out)