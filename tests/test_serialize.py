from scraper.node import (
    Comment,
    Doctype,
    Document,
    Element,
    HTML_NAMESPACE,
    NodeRef,
    ProcessingInstruction,
    QualName,
    Text,
    XLINK_NAMESPACE,
)
from scraper.serialize import serialize


def el(name, attrs=None, *children):
    node = NodeRef(
        Element(
            QualName(name, HTML_NAMESPACE),
            [(QualName(k), v) for k, v in (attrs or {}).items()],
        )
    )
    for child in children:
        node.append(child)
    return node


def text(value):
    return NodeRef(Text(value))


def test_element_with_escaped_text():
    p = el("p", {"class": "x"}, text("a & b"))
    assert serialize(p) == '<p class="x">a &amp; b</p>'


def test_children_only_is_concatenation_of_children():
    first = el("b", None, text("one"))
    second = text("two")
    div = el("div", None, first, second)
    inner = serialize(div, include_node=False)
    assert inner == serialize(first) + serialize(second)
    outer = serialize(div)
    assert outer.startswith("<div>")
    assert outer.endswith("</div>")
    assert inner in outer


def test_void_element_ignores_children():
    br = el("br", None, el("span"))
    assert serialize(br) == "<br>"


def test_attribute_quotes_escaped():
    a = el("a", {"title": 'say "hi"'})
    out = serialize(a)
    assert "&quot;" in out
    assert '"hi"' not in out


def test_text_escapes_angle_brackets_and_nbsp():
    p = el("p", None, text("<b>\u00a0"))
    out = serialize(p, include_node=False)
    assert "<" not in out
    assert ">" not in out
    assert "&nbsp;" in out


def test_raw_text_in_script_is_not_escaped():
    script = el("script", None, text("a<b&c"))
    out = serialize(script)
    assert "a<b&c" in out
    assert out.endswith("</script>")


def test_noscript_is_escaped():
    noscript = el("noscript", None, text("a<b"))
    assert "a<b" not in serialize(noscript)


def test_comment_and_doctype():
    root = NodeRef(Document())
    root.append(Doctype("html"))
    root.append(Comment("hi"))
    out = serialize(root)
    assert out.startswith("<!DOCTYPE html>")
    assert out.endswith("-->")
    assert "hi" in out


def test_document_root_emits_only_children():
    root = NodeRef(Document())
    html = root.append(el("html", {"lang": "en"}, el("body")))
    assert serialize(root) == serialize(html)
    assert serialize(root, include_node=False) == serialize(root)


def test_processing_instruction_is_skipped():
    with_pi = el("div", None, NodeRef(ProcessingInstruction("xml", "v")))
    without = el("div")
    assert serialize(with_pi) == serialize(without)


def test_namespaced_attribute_gets_prefix():
    node = NodeRef(
        Element(
            QualName("use", HTML_NAMESPACE),
            [(QualName("href", XLINK_NAMESPACE, "xlink"), "#a")],
        )
    )
    assert "xlink:href=" in serialize(node)


def test_element_html_of_child_is_substring_of_document():
    root = NodeRef(Document())
    child = el("i", None, text("world!"))
    root.append(el("h1", None, text("Hello, "), child))
    assert serialize(child) in serialize(root)