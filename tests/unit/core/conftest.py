"""Shared fixtures for core unit tests: block builders and a synchronous walk helper"""

import asyncio
from itertools import count

import pytest

from blockmd.core.mdast import Root
from blockmd.core.models import BlockSnapshot
from blockmd.core.walker import traverse_snapshot


def _text(*runs):
    """Build a snapshot text envelope; each run is a str or a (str, attributes) pair."""
    delta = []
    for run in runs:
        if isinstance(run, tuple):
            insert, attributes = run
            delta.append({"insert": insert, "attributes": attributes})
        else:
            delta.append({"insert": run})
    return {"$blocksuite:internal:text$": True, "delta": delta}


@pytest.fixture(name="text")
def text_fixture():
    return _text


@pytest.fixture(name="make_block")
def make_block_fixture():
    ids = count(1)

    def make(flavour: str, *children: BlockSnapshot, id: str = None, **props) -> BlockSnapshot:
        return BlockSnapshot(
            id=id or f"b{next(ids)}",
            flavour=flavour if ":" in flavour else f"affine:{flavour}",
            props=props,
            children=list(children),
        )

    return make


@pytest.fixture(name="para")
def para_fixture(make_block):
    def para(value: str, *children, type: str = "text", **kw):
        return make_block("paragraph", *children, type=type, text=_text(value) if value else _text(), **kw)
    return para


@pytest.fixture(name="item")
def item_fixture(make_block):
    def item(value: str, *children, type: str = "bulleted", **kw):
        return make_block("list", *children, type=type, text=_text(value), **kw)
    return item


@pytest.fixture(name="page")
def page_fixture(make_block):
    """Wrap blocks in page > note, the shape editors produce."""
    def page(*blocks, title: str = ""):
        note = make_block("note", *blocks)
        return make_block("page", note, id="page", title=_text(title) if title else _text())
    return page


@pytest.fixture(name="walk")
def walk_fixture():
    def walk(snapshot: BlockSnapshot, assets=None):
        return asyncio.run(traverse_snapshot(snapshot, Root(), assets))
    return walk
