"""Command-line tool that prints the elements of HTML input matching a CSS selector."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Iterable, TextIO

from .element_ref import ElementRef
from .errors import SelectorError
from .html import Html
from .selector import Selector

_KINDS = frozenset({"html", "inner-html", "attr", "classes", "id", "name", "text"})


@dataclass(frozen=True)
class Output:
    """What to print for each matching element.

    ``kind`` is one of ``html``, ``inner-html``, ``attr``, ``classes``, ``id``,
    ``name`` or ``text``; ``attr`` names the attribute for the ``attr`` kind.
    """

    kind: str = "html"
    attr: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"unknown output kind: {self.kind!r}")
        if (self.kind == "attr") != (self.attr is not None):
            raise ValueError("an attribute name goes with the 'attr' kind only")


def _render(output: Output, element: ElementRef) -> str:
    value = element.value()
    match output.kind:
        case "html":
            return element.html()
        case "inner-html":
            return element.inner_html()
        case "attr":
            return value.attr(output.attr or "") or ""
        case "classes":
            return " ".join(value.classes())
        case "id":
            return value.id() or ""
        case "name":
            return value.name()
        case _:
            return "".join(element.text())


def query(
    source: TextIO,
    fragment: bool,
    output: Output,
    selector: Selector,
    out: TextIO,
) -> bool:
    """Parse the whole of ``source`` and write one line per matching element.

    Returns True if any element matched.
    """
    text = source.read()
    html = Html.parse_fragment(text) if fragment else Html.parse_document(text)
    matched = False
    for element in html.select(selector):
        print(_render(output, element), file=out)
        matched = True
    return matched


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scraper",
        usage="scraper [options] SELECTOR [FILE ...]",
        description="Print the HTML elements that match a CSS selector.",
    )
    parser.add_argument("-H", "--html", action="store_true", help="output HTML of elements")
    parser.add_argument(
        "-I", "--inner-html", action="store_true", help="output inner HTML of elements"
    )
    parser.add_argument(
        "-a", "--attr", metavar="ATTR", help="output attribute value of elements"
    )
    parser.add_argument("-c", "--classes", action="store_true", help="output classes of elements")
    parser.add_argument(
        "-d", "--document", action="store_true", help="parse input as HTML documents"
    )
    parser.add_argument(
        "-f", "--fragment", action="store_true", help="parse input as HTML fragments"
    )
    parser.add_argument("-i", "--id", action="store_true", help="output ID of elements")
    parser.add_argument("-n", "--name", action="store_true", help="output name of elements")
    parser.add_argument("-t", "--text", action="store_true", help="output text of elements")
    parser.add_argument("selector", metavar="SELECTOR")
    parser.add_argument("files", metavar="FILE", nargs="*")
    return parser


def _choose_output(args: argparse.Namespace) -> Output:
    if args.inner_html:
        return Output("inner-html")
    if args.attr is not None:
        return Output("attr", args.attr)
    if args.classes:
        return Output("classes")
    if args.id:
        return Output("id")
    if args.name:
        return Output("name")
    if args.text:
        return Output("text")
    return Output("html")


def _query_files(
    paths: Iterable[str], fragment: bool, output: Output, selector: Selector
) -> bool:
    # Stops at the first file with a match; later files are not read.
    for path in paths:
        with open(path, encoding="utf-8") as source:
            if query(source, fragment, output, selector, sys.stdout):
                return True
    return False


def main(argv: list[str] | None = None) -> int:
    """Run the command; return 0 if any element matched, else 1."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    output = _choose_output(args)
    try:
        selector = Selector.parse(args.selector)
    except SelectorError as err:
        parser.error(f"invalid selector: {err}")
    if args.files:
        try:
            matched = _query_files(args.files, args.fragment, output, selector)
        except OSError as err:
            print(f"scraper: {err}", file=sys.stderr)
            return 2
    else:
        matched = query(sys.stdin, args.fragment, output, selector, sys.stdout)
    return 0 if matched else 1


if __name__ == "__main__":
    sys.exit(main())