import operator

import pytest

from scraper.element_ref import ElementRef, Selectable
from scraper.html import Html, QuirksMode
from scraper.node import (
    CaseSensitivity,
    Doctype,
    Document,
    Fragment,
    QualName,
    Text,
    XLINK_NAMESPACE,
)
from scraper.selector import Selector


def first(selectable, css):
    return next(iter(selectable.select(Selector.parse(css))))


# ------------------------------------------------------------ source cases


def test_tag_with_newline():
    document = Html.parse_fragment(
        """
        <a
                            href="https://github.com/causal-agent/scraper">

                            </a>
        """
    )
    a = first(document, "a")
    assert a.value().attr("href") == "https://github.com/causal-agent/scraper"


def test_has_selector():
    document = Html.parse_fragment(
        """
        <div>
            <div id="foo">
                Hi There!
            </div>
        </div>
        <ul>
            <li>first</li>
            <li>second</li>
            <li>third</li>
        </ul>
        """
    )
    li = first(document, "div:has(div#foo) + ul > li:nth-child(2)")
    assert li.inner_html() == "second"


def test_root_element_fragment():
    html = Html.parse_fragment('<a href="http://github.com">1</a>')
    href = first(html.root_element(), "a")
    assert href.inner_html() == "1"
    assert href.value().attr("href") == "http://github.com"


def test_root_element_document_doctype():
    html = Html.parse_document("<!DOCTYPE html>\n<title>abc</title>")
    title = first(html.root_element(), "title")
    assert title.inner_html() == "abc"


def test_root_element_document_comment():
    html = Html.parse_document("<!-- comment --><title>abc</title>")
    title = first(html.root_element(), "title")
    assert title.inner_html() == "abc"


def test_select_is_reversible():
    html = Html.parse_document("<p>element1</p><p>element2</p><p>element3</p>")
    result = [e.inner_html() for e in reversed(html.select(Selector.parse("p")))]
    assert result == ["element3", "element2", "element1"]


def test_select_has_a_length_hint():
    html = Html.parse_document("<p>element1</p><p>element2</p><p>element3</p>")
    assert operator.length_hint(html.select(Selector.parse("p"))) == 10


def test_serialize_document():
    src = (
        '<!DOCTYPE html><html lang="en"><head><meta charset="utf-8"></head>'
        "<body><p>Hello world!</p></body></html>"
    )
    assert Html.parse_document(src).html() == src


def test_scope():
    html = """
        <div>
            <b>1</b>
            <span>
                <span><b>2</b></span>
                <b>3</b>
            </span>
        </div>
    """
    fragment = Html.parse_fragment(html)
    element1 = first(fragment, "div > span")
    element2 = first(element1, ":scope > b")
    assert element2.inner_html() == "3"


def test_child_elements():
    fragment = Html.parse_fragment("foo<span>bar</span><a>baz</a>qux")
    names = [e.value().name() for e in fragment.root_element().child_elements()]
    assert names == ["span", "a"]


def test_descendent_elements():
    fragment = Html.parse_fragment("foo<span><b>bar</b></span><a><i>baz</i></a>qux")
    names = [e.value().name() for e in fragment.root_element().descendent_elements()]
    assert names == ["html", "span", "b", "a", "i"]


def test_has_id():
    element = first(Html.parse_fragment("<p id='link_id_456'>hey there</p>"), "p")
    assert element.has_id("link_id_456", CaseSensitivity.CASE_SENSITIVE)
    element = first(Html.parse_fragment("<p>hey there</p>"), "p")
    assert not element.has_id("any_link_id", CaseSensitivity.CASE_SENSITIVE)


def test_is_link():
    element = first(Html.parse_fragment("<link href='https://www.example.com'>"), "link")
    assert element.is_link()
    element = first(Html.parse_fragment("<p>hey there</p>"), "p")
    assert not element.is_link()


def test_has_class():
    element = first(Html.parse_fragment("<p class='my_class'>hey there</p>"), "p")
    assert element.has_class("my_class", CaseSensitivity.CASE_SENSITIVE)
    element = first(Html.parse_fragment("<p>hey there</p>"), "p")
    assert not element.has_class("my_class", CaseSensitivity.CASE_SENSITIVE)


def test_html_and_element_ref_are_selectable():
    fragment = Html.parse_fragment(
        '<select class="foo"><option value="bar">foobar</option></select>'
    )
    assert isinstance(fragment, Selectable)
    element = first(fragment, "select.foo")
    assert isinstance(element, Selectable)
    option = first(element, "select.foo option[value='bar']")
    assert option.inner_html() == "foobar"


def test_selecting_elements():
    fragment = Html.parse_fragment("<ul><li>Foo</li><li>Bar</li><li>Baz</li></ul>")
    names = [e.value().name() for e in fragment.select(Selector.parse("li"))]
    assert names == ["li", "li", "li"]


def test_selecting_descendent_elements():
    fragment = Html.parse_fragment("<ul><li>Foo</li><li>Bar</li><li>Baz</li></ul>")
    ul = first(fragment, "ul")
    texts = [e.inner_html() for e in ul.select(Selector.parse("li"))]
    assert texts == ["Foo", "Bar", "Baz"]


def test_accessing_attributes():
    fragment = Html.parse_fragment('<input name="foo" value="bar">')
    element = first(fragment, 'input[name="foo"]')
    assert element.value().attr("value") == "bar"


def test_html_and_inner_html():
    h1 = first(Html.parse_fragment("<h1>Hello, <i>world!</i></h1>"), "h1")
    assert h1.html() == "<h1>Hello, <i>world!</i></h1>"
    assert h1.inner_html() == "Hello, <i>world!</i>"


def test_descendent_text():
    h1 = first(Html.parse_fragment("<h1>Hello, <i>world!</i></h1>"), "h1")
    assert list(h1.text()) == ["Hello, ", "world!"]


# ------------------------------------------------------------- more cases


def test_new_document_is_empty():
    html = Html.new_document()
    assert html.tree.value == Document()
    assert html.tree.children == ()
    assert html.quirks_mode is QuirksMode.NO_QUIRKS
    with pytest.raises(ValueError):
        html.root_element()


def test_new_fragment_root():
    html = Html.new_fragment()
    assert html.tree.value == Fragment()
    assert html.errors == []


def test_fragment_has_html_root():
    html = Html.parse_fragment("<p>x</p>")
    assert html.tree.value == Fragment()
    assert html.root_element().value().name() == "html"
    assert html.html() == "<html><p>x</p></html>"


def test_document_doctype_node():
    html = Html.parse_document("<!DOCTYPE html>\n<title>abc</title>")
    assert html.tree.children[0].value == Doctype("html", "", "")
    assert html.quirks_mode is QuirksMode.NO_QUIRKS


def test_missing_doctype_is_quirks_with_error():
    html = Html.parse_document("<title>abc</title>")
    assert html.quirks_mode is QuirksMode.QUIRKS
    assert any("Expected DOCTYPE" in message for message in html.errors)


def test_adjacent_text_is_merged():
    html = Html.parse_fragment("foo&amp;bar")
    children = html.root_element().node.children
    assert [child.value for child in children] == [Text("foo&bar")]


def test_foster_parented_text():
    html = Html.parse_fragment("<table>x<tr><td>y</td></tr></table>")
    assert (
        html.root_element().inner_html()
        == "x<table><tbody><tr><td>y</td></tr></tbody></table>"
    )


def test_repeated_html_tag_adds_missing_attributes():
    html = Html.parse_document("<html a='1'><body><html b='2' a='3'>")
    root = html.root_element()
    assert root.attr("a") == "1"
    assert root.attr("b") == "2"


def test_foreign_attribute_namespace():
    html = Html.parse_fragment('<svg><use xlink:href="#a"></use></svg>')
    use = first(html, "use")
    assert use.value().attributes[0][0] == QualName("href", XLINK_NAMESPACE, "xlink")
    assert 'xlink:href="#a"' in use.html()


def test_select_yields_element_refs_in_document_order():
    html = Html.parse_document("<div><p>1</p></div><p>2</p>")
    found = list(html.select(Selector.parse("p")))
    assert all(isinstance(e, ElementRef) for e in found)
    assert [e.inner_html() for e in found] == ["1", "2"]


def test_select_without_matches():
    html = Html.parse_document("<p>x</p>")
    assert list(html.select(Selector.parse("span"))) == []