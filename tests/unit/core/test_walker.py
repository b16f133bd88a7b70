"""Unit tests for core/walker.py"""

import pytest

from blockmd.core.assets import Asset, MemoryAssetResolver
from blockmd.core.mdast import (
    Blockquote,
    Code,
    Heading,
    Image,
    List,
    ListItem,
    Paragraph,
    Table,
    Text,
    ThematicBreak,
)
from blockmd.errors import AssetError


def _texts(node) -> list:
    return [c.value for c in node.children if isinstance(c, Text)]


# --- lists ---

def test_consecutive_items_share_one_list(walk, page, item):
    """Same-parent, same-signature list items merge into one list, in order."""
    ast = walk(page(item("a"), item("b"), item("c"))).ast
    assert len(ast.children) == 1
    lst = ast.children[0]
    assert isinstance(lst, List) and lst.ordered is False
    assert [_texts(li.children[0]) for li in lst.children] == [["a"], ["b"], ["c"]]


def test_signature_switch_starts_new_list(walk, page, item):
    """Each maximal same-signature run becomes its own list."""
    ast = walk(page(
        item("a"), item("b"),
        item("1", type="numbered"), item("2", type="numbered"),
        item("c"),
    )).ast
    assert [type(n) for n in ast.children] == [List, List, List]
    assert [n.ordered for n in ast.children] == [False, True, False]
    assert [len(n.children) for n in ast.children] == [2, 2, 1]


def test_todo_then_bulleted_splits(walk, page, item):
    """Switching from todo to non-todo starts a new list."""
    ast = walk(page(item("t", type="todo", checked=True), item("b"))).ast
    assert len(ast.children) == 2
    assert ast.children[0].children[0].checked is True
    assert ast.children[1].children[0].checked is None


def test_todo_items_with_mixed_checked_merge(walk, page, item):
    """Checked and unchecked todos share a list; only todo-ness is compared."""
    ast = walk(page(item("a", type="todo", checked=True), item("b", type="todo", checked=False))).ast
    assert len(ast.children) == 1
    assert [li.checked for li in ast.children[0].children] == [True, False]


def test_paragraph_between_items_splits_list(walk, page, item, para):
    """A non-list sibling closes the open list."""
    ast = walk(page(item("a"), para("p"), item("b"))).ast
    assert [type(n) for n in ast.children] == [List, Paragraph, List]


def test_nested_items_build_nested_list(walk, page, item):
    """List children of a list item become a list inside that item."""
    ast = walk(page(item("a", item("a1"), item("a2")), item("b"))).ast
    assert len(ast.children) == 1
    outer = ast.children[0]
    assert len(outer.children) == 2
    first = outer.children[0]
    assert isinstance(first, ListItem)
    assert isinstance(first.children[1], List)
    assert len(first.children[1].children) == 2


def test_lists_under_different_parents_do_not_merge(walk, make_block, item):
    """Items from sibling notes land in separate lists."""
    root = make_block("page", make_block("note", item("a")), make_block("note", item("b")))
    ast = walk(root).ast
    assert [type(n) for n in ast.children] == [List, List]


# --- paragraphs ---

@pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
def test_heading_depth(walk, page, para, level):
    """h<N> produces a heading of depth N."""
    ast = walk(page(para("t", type=f"h{level}"))).ast
    (heading,) = ast.children
    assert isinstance(heading, Heading) and heading.depth == level


def test_unknown_paragraph_type_produces_nothing(walk, page, para):
    """Paragraph subtypes outside h1..h6/text/quote emit no node."""
    ast = walk(page(para("x", type="callout"), para("after"))).ast
    assert len(ast.children) == 1
    assert _texts(ast.children[0]) == ["after"]


def test_quote_wraps_paragraph(walk, page, para):
    """quote emits blockquote > paragraph."""
    (quote,) = walk(page(para("q", type="quote"))).ast.children
    assert isinstance(quote, Blockquote)
    assert _texts(quote.children[0]) == ["q"]


def test_nested_paragraphs_accumulate_indent(walk, page, para):
    """Each paragraph ancestor adds four spaces to text and heading children."""
    ast = walk(page(para("a", para("b", para("c"), para("h", type="h2"))), para("d"))).ast
    a, b, c, h, d = ast.children
    assert _texts(a) == ["a"]
    assert _texts(b) == [" " * 4, "b"]
    assert _texts(c) == [" " * 8, "c"]
    assert isinstance(h, Heading) and _texts(h) == [" " * 8, "h"]
    assert _texts(d) == ["d"]


def test_nested_quote_is_not_indented(walk, page, para):
    """Quotes ignore paragraph depth."""
    ast = walk(page(para("a", para("q", type="quote")))).ast
    quote = ast.children[1]
    assert _texts(quote.children[0]) == ["q"]


# --- leaves ---

def test_code_block(walk, page, make_block, text):
    """Code blocks capture language and the joined run text."""
    ast = walk(page(make_block("code", language="python", text=text("x", ("=1", {"bold": True}))))).ast
    assert ast.children == [Code(lang="python", value="x=1")]


def test_code_children_are_not_rendered_inside(walk, page, make_block, text, para):
    """Code is a leaf; any children follow it as siblings."""
    ast = walk(page(make_block("code", para("child"), text=text("v")))).ast
    assert isinstance(ast.children[0], Code) and ast.children[0].lang is None
    assert isinstance(ast.children[1], Paragraph)


def test_divider(walk, page, make_block):
    """divider emits a thematic break."""
    assert walk(page(make_block("divider"))).ast.children == [ThematicBreak()]


def test_page_title_paragraph(walk, page, para):
    """A titled page emits its title as the first paragraph; untitled pages emit nothing."""
    assert _texts(walk(page(para("body"), title="Title")).ast.children[0]) == ["Title"]
    assert len(walk(page(para("body"))).ast.children) == 1


# --- images ---

def test_image_without_resolver_is_dropped(walk, page, make_block, para):
    """No resolver: the image yields no node and no asset id."""
    result = walk(page(make_block("image", sourceId="img"), para("after")))
    assert result.asset_ids == []
    assert [type(n) for n in result.ast.children] == [Paragraph]


def test_image_not_found_is_dropped(walk, page, make_block, para):
    """A resolver miss drops only the image block."""
    result = walk(page(make_block("image", sourceId="img"), para("after")), MemoryAssetResolver())
    assert result.asset_ids == []
    assert _texts(result.ast.children[0]) == ["after"]


def test_image_resolved(walk, page, make_block):
    """A resolved image becomes paragraph > image and records every occurrence."""
    assets = MemoryAssetResolver({"img": Asset(data=b"\x89PNG", name="photo.png", content_type="image/png")})
    result = walk(page(make_block("image", sourceId="img"), make_block("image", sourceId="img")), assets)
    assert result.asset_ids == ["img", "img"]
    image = result.ast.children[0].children[0]
    assert image == Image(url="assets/photo.png", alt="photo.png")


def test_image_asset_error_is_contained(walk, page, make_block, para, log_messages):
    """A resolver raising AssetError degrades the image and keeps walking."""
    class Broken:
        async def resolve(self, ref):
            raise AssetError("disk gone")

    result = walk(page(make_block("image", sourceId="img"), para("after")), Broken())
    assert result.asset_ids == []
    assert len(result.ast.children) == 1
    assert any("disk gone" in m for m in log_messages)


# --- database ---

def test_database_emits_table_and_skips_children(walk, page, make_block, para, text):
    """Database rows feed the table and are not walked as paragraphs."""
    db = make_block(
        "database",
        para("Row 1", id="r1"),
        columns=[{"id": "c1", "name": "Title", "type": "title"}],
        cells={},
    )
    ast = walk(page(db)).ast
    (table,) = ast.children
    assert isinstance(table, Table)
    assert len(table.children) == 2


# --- robustness ---

def test_unknown_flavour_walks_children(walk, page, make_block, para, log_messages):
    """Unknown flavours are a logged no-op; their children still render."""
    ast = walk(page(make_block("affine:callout", para("inside")))).ast
    assert _texts(ast.children[0]) == ["inside"]
    assert any("affine:callout" in m for m in log_messages)


def test_malformed_block_is_skipped(walk, page, make_block, para, log_messages):
    """A block with invalid props produces nothing and the walk continues."""
    bad = make_block("paragraph", type=["not", "a", "string"])
    ast = walk(page(bad, para("after"))).ast
    assert len(ast.children) == 1
    assert any("Malformed" in m for m in log_messages)


def test_missing_text_defaults_to_empty(walk, page, make_block):
    """A paragraph without a text prop renders as an empty paragraph."""
    ast = walk(page(make_block("paragraph", type="text"))).ast
    assert ast.children == [Paragraph()]


def test_walks_are_independent(walk, page, item, para):
    """State from one walk does not leak into the next."""
    doc = page(para("a", para("b")), item("x"))
    first = walk(doc).ast
    second = walk(doc).ast
    assert first == second
