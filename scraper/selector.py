"""CSS selector parsing and matching against element nodes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from .errors import SelectorError, SelectorErrorKind
from .node import (
    HTML_NAMESPACE,
    CaseSensitivity,
    Document,
    Element,
    NodeRef,
    Text,
)

_WS = " \t\n\r\f"
_HEX = "0123456789abcdefABCDEF"
_ASCII_WS_SPLIT = re.compile(r"[\t\n\f\r ]+")
_NTH_ARG = re.compile(r"([^()]*?)(\)|(?<=\s)of(?=\s))", re.IGNORECASE)
_NTH_AN_B = re.compile(r"([+-]?)(\d*)n(?:\s*([+-])\s*(\d+))?")

# Attribute names whose values compare ASCII case-insensitively on HTML elements.
_CASE_INSENSITIVE_ATTRS = frozenset(
    """accept accept-charset align alink axis bgcolor charset checked clear
    codetype color compact declare defer dir direction disabled enctype face
    frame hreflang http-equiv lang language link media method multiple nohref
    noresize noshade nowrap readonly rel rev rules scope scrolling selected
    shape target text type valign valuetype vlink""".split()
)


def _lower(text: str) -> str:
    return "".join(c.lower() if "A" <= c <= "Z" else c for c in text)


def _is_html(element: Element) -> bool:
    return element.qualname.ns == HTML_NAMESPACE


def _serialize_ident(name: str) -> str:
    out = []
    for index, ch in enumerate(name):
        if ch.isascii() and (ch.isalnum() or ch in "_-") or not ch.isascii():
            if index == 0 and ch.isdigit():
                out.append(f"\\{ord(ch):x} ")
            else:
                out.append(ch)
        else:
            out.append("\\" + ch)
    return "".join(out)


def _serialize_string(value: str) -> str:
    out = ['"']
    for ch in value:
        if ch in '"\\':
            out.append("\\" + ch)
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\{ord(ch):x} ")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


@dataclass
class _Context:
    scope: NodeRef | None


def _element_siblings(nodes: Iterator[NodeRef]) -> Iterator[NodeRef]:
    return (node for node in nodes if isinstance(node.value, Element))


# ---------------------------------------------------------------- components


@dataclass(frozen=True)
class _Namespace:
    url: str

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        return node.value.qualname.ns == self.url

    def to_css(self) -> str:
        return "|"


@dataclass(frozen=True)
class _Type:
    name: str
    lower: str

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        element = node.value
        wanted = self.lower if _is_html(element) else self.name
        return element.qualname.local == wanted

    def to_css(self) -> str:
        return _serialize_ident(self.name)


@dataclass(frozen=True)
class _Id:
    name: str

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        value = node.value.id()
        return value is not None and CaseSensitivity.CASE_SENSITIVE.eq(self.name, value)

    def to_css(self) -> str:
        return "#" + _serialize_ident(self.name)


@dataclass(frozen=True)
class _Class:
    name: str

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        return node.value.has_class(self.name, CaseSensitivity.CASE_SENSITIVE)

    def to_css(self) -> str:
        return "." + _serialize_ident(self.name)


@dataclass(frozen=True)
class _Attr:
    name: str
    lower: str
    op: str | None
    value: str | None
    namespace: str | None
    flag: str | None

    def _sensitivity(self, element: Element) -> CaseSensitivity:
        if self.flag == "i":
            return CaseSensitivity.ASCII_CASE_INSENSITIVE
        if self.flag is None and self.lower in _CASE_INSENSITIVE_ATTRS and _is_html(element):
            return CaseSensitivity.ASCII_CASE_INSENSITIVE
        return CaseSensitivity.CASE_SENSITIVE

    def _eval(self, actual: str, element: Element) -> bool:
        wanted = self.value or ""
        sensitivity = self._sensitivity(element)
        if sensitivity is CaseSensitivity.ASCII_CASE_INSENSITIVE:
            actual, wanted = _lower(actual), _lower(wanted)
        match self.op:
            case "=":
                return actual == wanted
            case "~=":
                if not wanted or any(c in _WS for c in wanted):
                    return False
                return wanted in _ASCII_WS_SPLIT.split(actual)
            case "|=":
                return actual == wanted or actual.startswith(wanted + "-")
            case "^=":
                return bool(wanted) and actual.startswith(wanted)
            case "$=":
                return bool(wanted) and actual.endswith(wanted)
            case "*=":
                return bool(wanted) and wanted in actual
        return False

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        element = node.value
        wanted = self.lower if _is_html(element) else self.name
        for key, value in element.attributes:
            if self.namespace is not None and key.ns != self.namespace:
                continue
            if key.local != wanted:
                continue
            if self.op is None or self._eval(value, element):
                return True
        return False

    def to_css(self) -> str:
        prefix = "*|" if self.namespace is None else ""
        out = "[" + prefix + _serialize_ident(self.name)
        if self.op is not None:
            out += self.op + _serialize_string(self.value or "")
            if self.flag:
                out += " " + self.flag
        return out + "]"


def _nth_index(node: NodeRef, of_type: bool, from_end: bool, of: tuple | None, ctx: _Context) -> int:
    element = node.value
    siblings = node.next_siblings() if from_end else node.prev_siblings()
    count = 1
    for sibling in _element_siblings(siblings):
        if of_type and sibling.value.qualname != element.qualname:
            continue
        if of is not None and not _matches_any(of, sibling, ctx):
            continue
        count += 1
    return count


def _fits(a: int, b: int, index: int) -> bool:
    if a == 0:
        return index == b
    diff = index - b
    return diff % a == 0 and diff // a >= 0


def _format_an_b(a: int, b: int) -> str:
    if a == 0:
        return str(b)
    head = {1: "n", -1: "-n"}.get(a, f"{a}n")
    if b > 0:
        return f"{head}+{b}"
    if b < 0:
        return f"{head}-{-b}"
    return head


@dataclass(frozen=True)
class _Nth:
    name: str
    a: int
    b: int
    of_type: bool
    from_end: bool
    of: tuple | None

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        if self.of is not None and not _matches_any(self.of, node, ctx):
            return False
        index = _nth_index(node, self.of_type, self.from_end, self.of, ctx)
        return _fits(self.a, self.b, index)

    def to_css(self) -> str:
        inner = _format_an_b(self.a, self.b)
        if self.of is not None:
            inner += " of " + _list_css(self.of)
        return f":{self.name}({inner})"


_SIMPLE_PSEUDOS = frozenset(
    {
        "root", "empty", "scope", "first-child", "last-child", "only-child",
        "first-of-type", "last-of-type", "only-of-type",
    }
)


@dataclass(frozen=True)
class _Pseudo:
    kind: str

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        match self.kind:
            case "root":
                return _is_root(node)
            case "empty":
                return not any(
                    isinstance(child.value, (Element, Text)) for child in node.children
                )
            case "scope":
                return node is ctx.scope if ctx.scope is not None else _is_root(node)
        of_type = self.kind.endswith("of-type")
        first = _nth_index(node, of_type, False, None, ctx) == 1
        last = _nth_index(node, of_type, True, None, ctx) == 1
        if self.kind.startswith("first"):
            return first
        if self.kind.startswith("last"):
            return last
        return first and last

    def to_css(self) -> str:
        return ":" + self.kind


def _is_root(node: NodeRef) -> bool:
    parent = node.parent
    return parent is not None and isinstance(parent.value, Document)


@dataclass(frozen=True)
class _Logical:
    name: str
    selectors: tuple

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        found = _matches_any(self.selectors, node, ctx)
        return not found if self.name == "not" else found

    def to_css(self) -> str:
        return f":{self.name}({_list_css(self.selectors)})"


@dataclass(frozen=True)
class _Has:
    selectors: tuple

    def matches(self, node: NodeRef, ctx: _Context) -> bool:
        return any(self._matches_relative(parts, node, ctx) for parts in self.selectors)

    @staticmethod
    def _matches_relative(parts: tuple, anchor: NodeRef, ctx: _Context) -> bool:
        leading = parts[0][0]
        if leading in (" ", ">"):
            candidates = (n for n in anchor.descendants() if n is not anchor)
        else:
            candidates = (
                n for sibling in anchor.next_siblings() for n in sibling.descendants()
            )
        last = len(parts) - 1
        return any(
            _match_from(parts, last, candidate, ctx, anchor)
            for candidate in candidates
            if isinstance(candidate.value, Element)
        )

    def to_css(self) -> str:
        return f":has({_list_css(self.selectors)})"


# ------------------------------------------------------------------ matching


def _candidates(node: NodeRef, combinator: str) -> Iterator[NodeRef]:
    match combinator:
        case " ":
            return _element_siblings(node.ancestors())
        case ">":
            parent = node.parent
            return iter([parent] if parent is not None and isinstance(parent.value, Element) else [])
        case "+":
            return iter(list(_element_siblings(node.prev_siblings()))[:1])
        case _:
            return _element_siblings(node.prev_siblings())


def _match_from(parts: tuple, index: int, node: NodeRef, ctx: _Context, anchor: NodeRef | None) -> bool:
    combinator, compound = parts[index]
    if not all(component.matches(node, ctx) for component in compound):
        return False
    if combinator is None:
        return True
    for candidate in _candidates(node, combinator):
        if index == 0:
            if candidate is anchor:
                return True
        elif _match_from(parts, index - 1, candidate, ctx, anchor):
            return True
    return False


def _matches_any(selectors: tuple, node: NodeRef, ctx: _Context) -> bool:
    return any(_match_from(parts, len(parts) - 1, node, ctx, None) for parts in selectors)


def _compound_css(compound: tuple) -> str:
    if not compound:
        return "*"
    text = "".join(component.to_css() for component in compound)
    if isinstance(compound[0], _Namespace) and (
        len(compound) == 1 or not isinstance(compound[1], _Type)
    ):
        text = "|*" + text[1:]
    return text


def _complex_css(parts: tuple) -> str:
    out = []
    for position, (combinator, compound) in enumerate(parts):
        if combinator is not None:
            if position == 0:
                out.append("" if combinator == " " else f"{combinator} ")
            else:
                out.append(" " if combinator == " " else f" {combinator} ")
        out.append(_compound_css(compound))
    return "".join(out)


def _list_css(selectors: tuple) -> str:
    return ", ".join(_complex_css(parts) for parts in selectors)


# ------------------------------------------------------------------- parsing


def _custom(detail: str) -> SelectorError:
    return SelectorError(SelectorErrorKind.UNEXPECTED_SELECTOR_PARSE_ERROR, detail)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_ws(self) -> bool:
        start = self.pos
        while not self.at_end():
            if self.text[self.pos] in _WS:
                self.pos += 1
            elif self.text.startswith("/*", self.pos):
                end = self.text.find("*/", self.pos + 2)
                self.pos = len(self.text) if end < 0 else end + 2
            else:
                break
        return self.pos != start

    def _is_name_start(self, ch: str) -> bool:
        return bool(ch) and (ch.isascii() and (ch.isalpha() or ch == "_") or not ch.isascii())

    def _is_escape(self, offset: int) -> bool:
        return self.peek(offset) == "\\" and self.peek(offset + 1) not in ("\n", "")

    def ident_start(self) -> bool:
        ch = self.peek()
        if ch == "-":
            nxt = self.peek(1)
            return nxt == "-" or self._is_name_start(nxt) or self._is_escape(1)
        return self._is_name_start(ch) or self._is_escape(0)

    def _read_escape(self) -> str:
        self.pos += 1
        if self.at_end():
            return "\ufffd"
        digits = ""
        while len(digits) < 6 and self.peek() and self.peek() in _HEX:
            digits += self.peek()
            self.pos += 1
        if not digits:
            ch = self.peek()
            self.pos += 1
            return ch
        if self.peek() and self.peek() in _WS:
            self.pos += 1
        code = int(digits, 16)
        if code == 0 or 0xD800 <= code <= 0xDFFF or code > 0x10FFFF:
            return "\ufffd"
        return chr(code)

    def read_ident(self) -> str:
        if not self.ident_start():
            raise self.unexpected()
        out = []
        while not self.at_end():
            ch = self.peek()
            if self._is_escape(0):
                out.append(self._read_escape())
            elif self._is_name_start(ch) or ch == "-" or ch.isdigit():
                out.append(ch)
                self.pos += 1
            else:
                break
        return "".join(out)

    def read_name(self) -> str:
        out = []
        while not self.at_end():
            ch = self.peek()
            if self._is_escape(0):
                out.append(self._read_escape())
            elif self._is_name_start(ch) or ch == "-" or ch.isdigit():
                out.append(ch)
                self.pos += 1
            else:
                break
        if not out:
            raise self.unexpected()
        return "".join(out)

    def read_string(self) -> str:
        quote = self.peek()
        self.pos += 1
        out = []
        while True:
            ch = self.peek()
            if ch == "":
                return "".join(out)
            if ch == quote:
                self.pos += 1
                return "".join(out)
            if ch == "\n":
                raise SelectorError(SelectorErrorKind.UNEXPECTED_TOKEN, "BadString")
            if ch == "\\":
                if self.peek(1) == "\n":
                    self.pos += 2
                    continue
                out.append(self._read_escape())
                continue
            out.append(ch)
            self.pos += 1

    def token_text(self) -> str:
        start = self.pos
        if self.ident_start():
            text = self.read_ident()
            self.pos = start
            return text
        match = re.match(r"\d+", self.text[self.pos :])
        return match.group(0) if match else self.peek()

    def unexpected(self) -> SelectorError:
        if self.at_end():
            return SelectorError(SelectorErrorKind.END_OF_LINE)
        return SelectorError(SelectorErrorKind.UNEXPECTED_TOKEN, self.token_text())

    def expect(self, ch: str) -> None:
        if self.peek() != ch:
            raise self.unexpected()
        self.pos += 1

    # -- grammar

    def parse_list(self, nested: bool, relative: bool = False) -> tuple:
        items = []
        while True:
            self.skip_ws()
            items.append(self.parse_complex(relative))
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
                continue
            break
        if not nested and not self.at_end():
            raise self.unexpected()
        return tuple(items)

    def _at_boundary(self) -> bool:
        return self.at_end() or self.peek() in ",)"

    def parse_complex(self, relative: bool) -> tuple:
        combinator: str | None = None
        if relative:
            ch = self.peek()
            if ch and ch in ">+~":
                combinator = ch
                self.pos += 1
                self.skip_ws()
            else:
                combinator = " "
        compound = self.parse_compound()
        if compound is None:
            if not self._at_boundary():
                raise self.unexpected()
            raise _custom("DanglingCombinator" if relative and combinator != " " else "EmptySelector")
        parts = [(combinator, compound)]
        while True:
            had_ws = self.skip_ws()
            ch = self.peek()
            if ch and ch in ">+~":
                self.pos += 1
                self.skip_ws()
                combinator = ch
            elif had_ws and not self._at_boundary():
                combinator = " "
            else:
                break
            compound = self.parse_compound()
            if compound is None:
                if self._at_boundary():
                    raise _custom("DanglingCombinator")
                raise self.unexpected()
            parts.append((combinator, compound))
        return tuple(parts)

    def parse_compound(self) -> tuple | None:
        start = self.pos
        components: list = []
        if self.peek() in ("*", "|") and self.peek() or self.ident_start():
            self.parse_type(components)
        while True:
            ch = self.peek()
            if ch == "#":
                self.pos += 1
                components.append(_Id(self.read_name()))
            elif ch == ".":
                self.pos += 1
                components.append(_Class(self.read_ident()))
            elif ch == "[":
                components.append(self.parse_attr())
            elif ch == ":":
                components.append(self.parse_pseudo())
            else:
                break
        if self.pos == start:
            return None
        return tuple(components)

    def parse_type(self, components: list) -> None:
        name: str | None
        if self.peek() == "*":
            self.pos += 1
            name = "*"
        elif self.peek() == "|":
            name = None
        else:
            name = self.read_ident()
        if self.peek() == "|" and self.peek(1) != "=":
            self.pos += 1
            if name is None:
                components.append(_Namespace(""))
            elif name != "*":
                raise _custom(f"ExpectedNamespace({name!r})")
            if self.peek() == "*":
                self.pos += 1
                name = "*"
            else:
                name = self.read_ident()
        elif name is None:
            raise self.unexpected()
        if name != "*":
            components.append(_Type(name, _lower(name)))

    def parse_attr(self) -> _Attr:
        self.pos += 1
        self.skip_ws()
        namespace: str | None = ""
        name: str | None = None
        if self.peek() == "*" and self.peek(1) == "|":
            self.pos += 2
            namespace = None
        elif self.peek() == "|" and self.peek(1) != "=":
            self.pos += 1
        else:
            name = self.read_ident()
            if self.peek() == "|" and self.peek(1) != "=":
                raise _custom(f"ExpectedNamespace({name!r})")
        if name is None:
            name = self.read_ident()
        self.skip_ws()
        if self.peek() == "]":
            self.pos += 1
            return _Attr(name, _lower(name), None, None, namespace, None)
        two = self.peek() + self.peek(1)
        if two in ("~=", "|=", "^=", "$=", "*="):
            op = two
            self.pos += 2
        elif self.peek() == "=":
            op = "="
            self.pos += 1
        else:
            raise self.unexpected()
        self.skip_ws()
        if self.peek() in ('"', "'") and self.peek():
            value = self.read_string()
        elif self.ident_start():
            value = self.read_ident()
        else:
            raise self.unexpected()
        self.skip_ws()
        flag = None
        if self.ident_start():
            word = _lower(self.token_text())
            if word not in ("i", "s"):
                raise self.unexpected()
            self.read_ident()
            flag = word
            self.skip_ws()
        self.expect("]")
        return _Attr(name, _lower(name), op, value, namespace, flag)

    def parse_pseudo(self):
        self.pos += 1
        if self.peek() == ":":
            self.pos += 1
            if not self.ident_start():
                if self.at_end():
                    raise SelectorError(SelectorErrorKind.END_OF_LINE)
                raise SelectorError(
                    SelectorErrorKind.EXPECTED_IDENTITY_ON_PSEUDO_ELEMENT, self.token_text()
                )
            name = self.read_ident()
            raise _custom(f"UnsupportedPseudoClassOrElement({name!r})")
        name = self.read_ident()
        lname = _lower(name)
        if self.peek() == "(":
            self.pos += 1
            return self.parse_function(lname, name)
        if lname in _SIMPLE_PSEUDOS:
            return _Pseudo(lname)
        raise _custom(f"UnsupportedPseudoClassOrElement({name!r})")

    def parse_function(self, lname: str, name: str):
        if lname in ("not", "is", "where", "has"):
            selectors = self.parse_list(nested=True, relative=lname == "has")
            self.skip_ws()
            self.expect(")")
            return _Has(selectors) if lname == "has" else _Logical(lname, selectors)
        if lname in ("nth-child", "nth-last-child", "nth-of-type", "nth-last-of-type"):
            return self.parse_nth(lname)
        raise _custom(f"UnsupportedPseudoClassOrElement({name!r})")

    def parse_nth(self, lname: str) -> _Nth:
        match = _NTH_ARG.match(self.text, self.pos)
        if match is None:
            self.pos = len(self.text)
            raise SelectorError(SelectorErrorKind.END_OF_LINE)
        a, b = self._an_b(match.group(1))
        self.pos = match.end()
        of = None
        if match.group(2) != ")":
            if lname not in ("nth-child", "nth-last-child"):
                raise SelectorError(SelectorErrorKind.UNEXPECTED_TOKEN, "of")
            of = self.parse_list(nested=True)
            self.skip_ws()
            self.expect(")")
        return _Nth(lname, a, b, "of-type" in lname, "-last-" in lname, of)

    @staticmethod
    def _an_b(raw: str) -> tuple[int, int]:
        text = _lower(raw.strip())
        if text == "odd":
            return 2, 1
        if text == "even":
            return 2, 0
        if re.fullmatch(r"[+-]?\d+", text):
            return 0, int(text)
        match = _NTH_AN_B.fullmatch(text)
        if match is None:
            if not text:
                raise SelectorError(SelectorErrorKind.END_OF_LINE)
            raise SelectorError(SelectorErrorKind.UNEXPECTED_TOKEN, text)
        a = int(match.group(2) or 1) * (-1 if match.group(1) == "-" else 1)
        b = 0
        if match.group(3):
            b = int(match.group(4)) * (-1 if match.group(3) == "-" else 1)
        return a, b


def _node_of(element: object) -> NodeRef:
    return element if isinstance(element, NodeRef) else getattr(element, "node")


class Selector:
    """A parsed group of comma-separated CSS selectors."""

    __slots__ = ("_selectors",)

    def __init__(self, selectors: tuple) -> None:
        self._selectors = selectors

    @classmethod
    def parse(cls, selectors: str) -> Selector:
        """Parse a selector group, raising SelectorError when it is invalid."""
        return cls(_Parser(selectors).parse_list(nested=False))

    def matches(self, element: object) -> bool:
        """Return True if the element matches; :scope matches the root element."""
        return self.matches_with_scope(element, None)

    def matches_with_scope(self, element: object, scope: object | None) -> bool:
        """Return True if the element matches, with scope as the :scope element."""
        node = _node_of(element)
        if not isinstance(node.value, Element):
            return False
        context = _Context(None if scope is None else _node_of(scope))
        return _matches_any(self._selectors, node, context)

    def to_css(self) -> str:
        """Serialize the selector group back to CSS."""
        return _list_css(self._selectors)

    def __str__(self) -> str:
        return self.to_css()

    def __repr__(self) -> str:
        return f"Selector({self.to_css()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selector):
            return NotImplemented
        return self._selectors == other._selectors

    def __hash__(self) -> int:
        return hash(self._selectors)