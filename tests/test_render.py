"""Unit tests for the composition engine in ``oeuvre.render``.

These tests feed small XML templates, pages, and snippets through
:func:`oeuvre.render.render` and compare the serialized output. They cover the
slot and include resolution rules, their fallbacks, fragment unwrapping,
reserved-attribute filtering, and the non-fatal handling of malformed markers
and self-referencing expansions.

Usage
-----
Run ``pytest tests/test_render.py -v``.
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import pytest

from oeuvre._constants import RESERVED_PREFIX
from oeuvre.library import Snippet
from oeuvre.markup import Element, Text, parse_string, serialize
from oeuvre.pages import build_page
from oeuvre.render import MAX_DEPTH, Marker, render

if typ.TYPE_CHECKING:
    import collections.abc as cabc

SLOT_TEMPLATE = (
    '<div oeuvre-name="t"><oeuvre-slot oeuvre-name="x">fallback</oeuvre-slot></div>'
)


def _snippets(*sources: str) -> dict[str, Snippet]:
    """Parse snippet documents into a name-keyed library."""
    library: dict[str, Snippet] = {}
    for source in sources:
        element = parse_string(source)
        name = element.attr("oeuvre-name")
        assert name is not None, "snippet fixtures must declare oeuvre-name"
        library[name] = Snippet(name=name, element=element)
    return library


def _slots(page_source: str) -> dict[str, Element]:
    """Return the slot map of a page document."""
    return build_page(parse_string(page_source), Path("page.xml")).slots


def _render(
    template: str,
    *,
    page: str | None = None,
    snippets: cabc.Mapping[str, Snippet] | None = None,
) -> str:
    """Render ``template`` with the slots of ``page`` and return the markup."""
    slots = _slots(page) if page else {}
    return serialize(render(parse_string(template), slots, snippets or {}))


def test_unfilled_slot_renders_fallback() -> None:
    """A slot without a page value renders its own content."""
    actual = _render(SLOT_TEMPLATE, page='<page oeuvre-template="t"/>')
    assert actual == "<div>fallback</div>", f"unexpected output {actual!r}"


def test_filled_slot_renders_page_value() -> None:
    """A slot with a page value renders that element without its marker."""
    actual = _render(
        SLOT_TEMPLATE, page='<page oeuvre-template="t"><p oeuvre-slot="x">hi</p></page>'
    )
    assert actual == "<div><p>hi</p></div>", f"unexpected output {actual!r}"


def test_missing_snippet_unwraps_include_fallback() -> None:
    """An include naming an unknown snippet renders its children unwrapped."""
    actual = _render(
        '<div oeuvre-name="t"><oeuvre-include oeuvre-snippet="missing">'
        "<span>fb</span></oeuvre-include></div>"
    )
    assert actual == "<div><span>fb</span></div>", f"unexpected output {actual!r}"


def test_include_unwraps_snippet_root() -> None:
    """A resolved include splices the snippet root's children, not the root."""
    snippets = _snippets(
        '<nav oeuvre-name="menu" class="menu"><a href="/">Home</a> <a>About</a></nav>'
    )
    actual = _render(
        '<header oeuvre-name="t"><oeuvre-include oeuvre-snippet="menu">'
        "<span>fb</span></oeuvre-include></header>",
        snippets=snippets,
    )
    assert actual == '<header><a href="/">Home</a> <a>About</a></header>', (
        f"unexpected output {actual!r}"
    )


def test_fragment_slot_value_is_unwrapped() -> None:
    """A fragment slot value contributes its children without the wrapper."""
    actual = _render(
        SLOT_TEMPLATE,
        page=(
            '<page oeuvre-template="t"><oeuvre-fragment oeuvre-slot="x">'
            "<p>a</p>text<p>b</p></oeuvre-fragment></page>"
        ),
    )
    assert actual == "<div><p>a</p>text<p>b</p></div>", f"unexpected output {actual!r}"


def test_fragment_unwrap_matches_rendering_each_child() -> None:
    """Rendering a fragment equals concatenating each child's rendering."""
    fragment = parse_string(
        '<oeuvre-fragment oeuvre-slot="x"><p class="a" oeuvre-slot="y">a</p>'
        '<!-- c --><em oeuvre-note="n">b</em></oeuvre-fragment>'
    )
    template = parse_string(SLOT_TEMPLATE)
    whole = render(template, {"x": fragment}, {})

    pieces: list[object] = []
    for child in fragment.children:
        if isinstance(child, Element):
            wrapper = Element(name="div", children=(child,))
            pieces.extend(render(wrapper, {}, {}).children)
        else:
            pieces.append(child)
    assert list(whole.children) == pieces, "fragment unwrap should be child-wise"


def test_unfilled_slot_equals_rendering_its_children() -> None:
    """The fallback law: an unfilled slot renders exactly its own children."""
    template = parse_string(
        '<div oeuvre-name="t"><oeuvre-slot oeuvre-name="x">a<b oeuvre-k="v">b</b>'
        '<oeuvre-include oeuvre-snippet="none">c</oeuvre-include></oeuvre-slot></div>'
    )
    marker = next(template.elements())
    direct = render(Element(name="div", children=marker.children), {}, {})
    assert render(template, {}, {}) == direct, "fallback should render children"


def test_reserved_attributes_never_reach_output() -> None:
    """No oeuvre-* attribute survives rendering, at any depth."""
    snippets = _snippets(
        '<s oeuvre-name="snip"><i oeuvre-x="1" title="t">snippet</i></s>'
    )
    rendered = render(
        parse_string(
            '<html oeuvre-name="t" lang="en"><body oeuvre-flag="y">'
            '<oeuvre-slot oeuvre-name="x"/><oeuvre-include oeuvre-snippet="snip"/>'
            "</body></html>"
        ),
        _slots('<page oeuvre-template="t"><p oeuvre-slot="x" id="p">hi</p></page>'),
        snippets,
    )
    leaked = [
        (element.name, key)
        for element in rendered.iter()
        for key in element.attributes
        if key.startswith(RESERVED_PREFIX)
    ]
    assert leaked == [], f"reserved attributes leaked into output: {leaked}"
    assert rendered.attributes == {"lang": "en"}, "ordinary attributes are kept"


def test_slot_value_shared_by_several_names() -> None:
    """A child declaring two slot names fills both slots."""
    actual = _render(
        '<div oeuvre-name="t"><oeuvre-slot oeuvre-name="a"/>'
        '<oeuvre-slot oeuvre-name="b"/></div>',
        page='<page oeuvre-template="t"><b oeuvre-slot="a, b">x</b></page>',
    )
    assert actual == "<div><b>x</b><b>x</b></div>", f"unexpected output {actual!r}"


def test_markers_inside_snippets_are_resolved() -> None:
    """Slots and includes directly under a snippet root are expanded."""
    snippets = _snippets(
        '<s oeuvre-name="outer"><oeuvre-slot oeuvre-name="x">default</oeuvre-slot>'
        '<oeuvre-include oeuvre-snippet="inner"/></s>',
        '<s oeuvre-name="inner"><hr/></s>',
    )
    actual = _render(
        '<div oeuvre-name="t"><oeuvre-include oeuvre-snippet="outer"/></div>',
        page='<page oeuvre-template="t"><em oeuvre-slot="x">page</em></page>',
        snippets=snippets,
    )
    assert actual == "<div><em>page</em><hr/></div>", f"unexpected output {actual!r}"


def test_text_and_comments_are_preserved() -> None:
    """Text and comment children pass through unchanged."""
    actual = _render('<p oeuvre-name="t">one <!-- two --> three</p>')
    assert actual == "<p>one <!-- two --> three</p>", f"unexpected output {actual!r}"


@pytest.mark.parametrize(
    ("marker", "expected_message"),
    [
        ("<oeuvre-include>x</oeuvre-include>", "oeuvre-snippet"),
        ("<oeuvre-slot>x</oeuvre-slot>", "oeuvre-name"),
        ("<oeuvre-loop>x</oeuvre-loop>", "oeuvre-loop"),
        ("<oeuvre-fragment>x</oeuvre-fragment>", "oeuvre-fragment"),
    ],
)
def test_invalid_markers_render_nothing(
    marker: str, expected_message: str, caplog: pytest.LogCaptureFixture
) -> None:
    """Malformed or unknown markers are logged and skipped; siblings survive."""
    with caplog.at_level(logging.ERROR, logger="oeuvre.render"):
        actual = _render(f'<div oeuvre-name="t"><a/>{marker}<b/></div>')
    assert actual == "<div><a/><b/></div>", f"unexpected output {actual!r}"
    assert any(expected_message in record.getMessage() for record in caplog.records), (
        f"expected an error mentioning {expected_message!r}"
    )


def test_self_including_snippet_stops_recursing(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A snippet that includes itself renders once and reports the cycle."""
    snippets = _snippets(
        '<s oeuvre-name="loop">x<oeuvre-include oeuvre-snippet="loop">fb</oeuvre-include></s>'
    )
    with caplog.at_level(logging.ERROR, logger="oeuvre.render"):
        actual = _render(
            '<div oeuvre-name="t"><oeuvre-include oeuvre-snippet="loop"/></div>',
            snippets=snippets,
        )
    assert actual == "<div>x</div>", f"unexpected output {actual!r}"
    assert any("loop" in record.getMessage() for record in caplog.records), (
        "expected the cycle to be reported"
    )


def test_mutually_including_snippets_terminate() -> None:
    """Two snippets including each other expand each once."""
    snippets = _snippets(
        '<s oeuvre-name="a">A<oeuvre-include oeuvre-snippet="b"/></s>',
        '<s oeuvre-name="b">B<oeuvre-include oeuvre-snippet="a"/></s>',
    )
    actual = _render(
        '<div oeuvre-name="t"><oeuvre-include oeuvre-snippet="a"/></div>',
        snippets=snippets,
    )
    assert actual == "<div>AB</div>", f"unexpected output {actual!r}"


def test_slot_value_referencing_its_own_slot_terminates() -> None:
    """A slot value that contains its own slot renders the inner slot empty."""
    actual = _render(
        SLOT_TEMPLATE,
        page=(
            '<page oeuvre-template="t"><p oeuvre-slot="x">'
            '<oeuvre-slot oeuvre-name="x">again</oeuvre-slot></p></page>'
        ),
    )
    assert actual == "<div><p/></div>", f"unexpected output {actual!r}"


def test_render_does_not_modify_inputs() -> None:
    """Rendering twice yields equal output and leaves the template intact."""
    source = '<div oeuvre-name="t"><oeuvre-slot oeuvre-name="x"/></div>'
    template = parse_string(source)
    slots = _slots('<page oeuvre-template="t"><p oeuvre-slot="x">hi</p></page>')
    first = render(template, slots, {})
    second = render(template, slots, {})
    assert first == second, "rendering should be deterministic"
    assert template == parse_string(source), "template should be unchanged"
    assert first is not template, "render must build a new tree"


def test_namespaced_documents_keep_their_namespace() -> None:
    """Markers are recognized by local name inside a default namespace."""
    xhtml = "http://www.w3.org/1999/xhtml"
    actual = _render(
        f'<html xmlns="{xhtml}" oeuvre-name="t"><body>'
        '<oeuvre-slot oeuvre-name="x"/></body></html>',
        page=f'<page xmlns="{xhtml}" oeuvre-template="t"><p oeuvre-slot="x">hi</p></page>',
    )
    assert actual == f'<html xmlns="{xhtml}"><body><p>hi</p></body></html>', (
        f"unexpected output {actual!r}"
    )



def _snippet_chain(count: int, levels: int) -> dict[str, Snippet]:
    """Return snippets where ``s{i}`` nests ``levels`` elements around ``s{i+1}``."""
    sources = []
    for index in range(count):
        include = f'<oeuvre-include oeuvre-snippet="s{index + 1}"/>'
        body = "<d>" * levels + include + "</d>" * levels
        sources.append(f'<s oeuvre-name="s{index}">{body}</s>')
    return _snippets(*sources)


def _depth(element: Element) -> int:
    """Return the number of element levels in the tree rooted at ``element``."""
    depth = 0
    level = [element]
    while level:
        depth += 1
        level = [child for node in level for child in node.elements()]
    return depth


def test_snippet_chain_within_depth_limit_renders_fully(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Acyclic includes nest as deep as the snippets describe."""
    template = parse_string(
        '<div oeuvre-name="t"><oeuvre-include oeuvre-snippet="s0"/><end/></div>'
    )
    with caplog.at_level(logging.ERROR, logger="oeuvre.render"):
        rendered = render(template, {}, _snippet_chain(3, 10))
    assert _depth(rendered) == 31, "three snippets of ten levels under the root"
    assert caplog.records == [], "a shallow chain reports nothing"


def test_deep_snippet_chain_is_cut_at_depth_limit(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Nesting past the depth limit is logged and dropped instead of overflowing."""
    template = parse_string(
        '<div oeuvre-name="t"><oeuvre-include oeuvre-snippet="s0"/><end/></div>'
    )
    with caplog.at_level(logging.ERROR, logger="oeuvre.render"):
        rendered = render(template, {}, _snippet_chain(8, 60))
    assert 100 < _depth(rendered) <= MAX_DEPTH + 1, (
        f"unexpected depth {_depth(rendered)}"
    )
    assert [child.name for child in rendered.elements()] == ["d", "end"], (
        "siblings of the deep include still render"
    )
    assert any("levels below the template root" in r.getMessage() for r in caplog.records)
    assert "<end/>" in serialize(rendered)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("oeuvre-include", Marker.INCLUDE),
        ("oeuvre-slot", Marker.SLOT),
        ("oeuvre-fragment", Marker.FRAGMENT),
        ("oeuvre-other", Marker.UNKNOWN),
        ("div", None),
    ],
)
def test_marker_classification(name: str, expected: Marker | None) -> None:
    """Element names map onto the reserved marker enumeration."""
    assert Marker.classify(Element(name=name, children=(Text("x"),))) is expected
