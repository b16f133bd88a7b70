"""Inline run rendering: delta sequences to nested phrasing nodes"""

from blockmd.core.mdast import Delete, Emphasis, InlineCode, Link, PhrasingContent, Strong, Text
from blockmd.core.models import Delta


INDENT = " " * 4


def _delta_to_node(delta: Delta) -> PhrasingContent:
    """Render one run; wraps apply innermost to outermost: code, emphasis, strong, delete, link."""
    attrs = delta.attributes
    node: PhrasingContent = Text(value=f"<u>{delta.insert}</u>" if attrs.underline else delta.insert)
    if attrs.code:
        node = InlineCode(value=delta.insert)
    if attrs.italic:
        node = Emphasis(children=[node])
    if attrs.bold:
        node = Strong(children=[node])
    if attrs.strike:
        node = Delete(children=[node])
    if attrs.link:
        if delta.insert == "":
            node = Text(value=attrs.link)
        elif delta.insert != attrs.link:
            node = Link(url=attrs.link, children=[node])
    return node


def delta_to_mdast(deltas: list[Delta], depth: int = 0) -> list[PhrasingContent]:
    """Convert runs to phrasing nodes, led by a 4*depth space run when depth > 0."""
    runs = list(deltas)
    if depth > 0:
        runs.insert(0, Delta(insert=INDENT * depth))
    return [_delta_to_node(d) for d in runs]


def plain_text(deltas: list[Delta], sep: str = "") -> str:
    """Join the raw text of runs, discarding styling."""
    return sep.join(d.insert for d in deltas)
