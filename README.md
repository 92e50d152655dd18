# scraper

HTML parsing and querying with CSS selectors.

`scraper` parses HTML documents and fragments into a node tree with the
HTML5 parsing algorithm (through `html5lib`), lets you query that tree with
CSS selectors, read element names, attributes, classes and text, and
serialize elements back to HTML.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Library usage

### Parsing a document or a fragment

```python
from scraper.html import Html

document = Html.parse_document("""
    <!DOCTYPE html>
    <meta charset="utf-8">
    <title>Hello, world!</title>
    <h1 class="foo">Hello, <i>world!</i></h1>
""")

fragment = Html.parse_fragment("<h1>Hello, <i>world!</i></h1>")
```

Parsing never fails hard: malformed markup is repaired the way a browser
would repair it. The parse error messages are kept in `Html.errors`, and the
document's `QuirksMode` in `Html.quirks_mode`. A fragment is parsed in the
context of `<body>` and placed under a single `<html>` element.

`Html.new_document()` and `Html.new_fragment()` create empty trees. The tree
itself is `Html.tree`, a `scraper.node.NodeRef` whose `value` is a
`Document` or `Fragment`; its descendants hold `Element`, `Text`, `Comment`,
`Doctype` and `ProcessingInstruction` values. The contents of a `<template>`
element are kept under a `Fragment` node that is its child.

### Parsing a selector

```python
from scraper.selector import Selector

selector = Selector.parse("h1.foo")
print(selector.to_css())  # h1.foo
```

An invalid selector raises `scraper.errors.SelectorError` (a `ValueError`),
whose `kind` is a `SelectorErrorKind` and whose `description()` gives a short
explanation.

Supported are type, universal, id, class and attribute selectors (with the
`=`, `~=`, `|=`, `^=`, `$=` and `*=` operators, the `i` and `s` flags, and
namespace prefixes `|` and `*|`), the descendant, `>`, `+` and `~`
combinators, `:not()`, `:is()`, `:where()`, `:has()`, `:scope`, `:root`,
`:empty`, `:first-child`, `:last-child`, `:only-child`, `:first-of-type`,
`:last-of-type`, `:only-of-type`, and `:nth-child()`, `:nth-last-child()`
(both with an optional `of S`), `:nth-of-type()` and `:nth-last-of-type()`.
Other pseudo-classes and all pseudo-elements are rejected as errors.

### Selecting elements

```python
from scraper.html import Html
from scraper.selector import Selector

fragment = Html.parse_fragment("""
    <ul>
        <li>Foo</li>
        <li>Bar</li>
        <li>Baz</li>
    </ul>
""")

for element in fragment.select(Selector.parse("li")):
    assert element.value().name() == "li"
```

`Html.select` yields `scraper.element_ref.ElementRef` objects in document
order; `reversed(...)` on its result yields the remaining matches from the
end. Selections can be nested: calling `select` on an element searches only
its descendants, and `:scope` refers to that element.

```python
ul = next(fragment.select(Selector.parse("ul")))
items = list(ul.select(Selector.parse(":scope > li")))
```

Both `Html` and `ElementRef` satisfy the `scraper.element_ref.Selectable`
protocol, so helpers can accept either.

### Attributes, HTML and text

```python
from scraper.html import Html
from scraper.selector import Selector

fragment = Html.parse_fragment('<input name="foo" value="bar">')
field = next(fragment.select(Selector.parse('input[name="foo"]')))
assert field.value().attr("value") == "bar"

fragment = Html.parse_fragment("<h1>Hello, <i>world!</i></h1>")
h1 = next(fragment.select(Selector.parse("h1")))

assert h1.html() == "<h1>Hello, <i>world!</i></h1>"
assert h1.inner_html() == "Hello, <i>world!</i>"
assert list(h1.text()) == ["Hello, ", "world!"]
```

An `Element` also offers `name()`, `id()`, `classes()` (distinct, sorted),
`has_class()` and `attrs()`. `ElementRef` adds `child_elements()`,
`descendent_elements()`, `has_id()`, `has_class()` and `is_link()`.
`Html.root_element()` returns the root `<html>` element, and `Html.html()`
serializes the whole tree.

## Command line

The `scraper` command applies a selector to HTML read from files, or from
standard input when no file is given:

```
scraper [options] SELECTOR [FILE ...]
```

By default the outer HTML of every matching element is printed, one per
line. Options choose what is printed instead:

| Option | Output |
| --- | --- |
| `-H`, `--html` | HTML of elements (default) |
| `-I`, `--inner-html` | inner HTML of elements |
| `-a ATTR`, `--attr ATTR` | value of an attribute |
| `-c`, `--classes` | classes, separated by spaces |
| `-i`, `--id` | element ID |
| `-n`, `--name` | element name |
| `-t`, `--text` | text content |

Input is parsed as a full document unless `-f` / `--fragment` is given
(`-d` / `--document` selects the default explicitly). `-h` / `--help` prints
usage. When several files are given they are read in order, and reading
stops after the first file that has a match.

The command exits with status 0 if any element matched and 1 otherwise, so
it can be used in shell conditions:

```
scraper -t 'title' page.html
```

An invalid selector, bad options or a file that cannot be opened end the
command with status 2.

## Limitations

- The command does not install a manual page; `--help` is its only
  documentation.
- Selectors cannot be loaded from or saved to configuration formats;
  `Selector.to_css()` gives the text form.
- Matching has no notion of user-action state: there is no `:hover`,
  `:active`, `:link` or similar.