"""Markdown-AST to Markdown text (CommonMark + GFM tables and strikethrough)"""

import re
from dataclasses import dataclass
from typing import Optional

from blockmd.core.mdast import (
    Blockquote,
    Code,
    Delete,
    Emphasis,
    Heading,
    Image,
    InlineCode,
    Link,
    List,
    ListItem,
    MdNode,
    Paragraph,
    Root,
    Strong,
    Table,
    Text,
    ThematicBreak,
)
from blockmd.errors import SerializeError


ESCAPE_RE = re.compile(r"([\\`*_\[\]])")
BLOCK_START_RE = re.compile(r"^( {0,3})([#>]|[-+](?= |$))", re.MULTILINE)
ORDERED_START_RE = re.compile(r"^( {0,3}\d{1,9})([.)])(?= |$)", re.MULTILINE)
# setext underlines and "---" rules; "***" and "___" are already escaped as text
UNDERLINE_RE = re.compile(r"^( {0,3})(=+|-{2,})(?=[ \t]*$)", re.MULTILINE)
BACKTICK_RUN_RE = re.compile(r"`+")
ENCODED_SPACE = "&#x20;"


@dataclass(frozen=True)
class MarkdownOptions:
    bullet:   str = "-"
    emphasis: str = "_"
    rule:     str = "---"

    @property
    def bullet_other(self) -> str:
        """Marker for a list that directly follows another unordered list."""
        return "*" if self.bullet != "*" else "-"


def _escape(value: Optional[str]) -> str:
    return ESCAPE_RE.sub(r"\\\1", value or "")


def _fence_for(value: str, minimum: int) -> str:
    longest = max((len(m) for m in BACKTICK_RUN_RE.findall(value)), default=0)
    return "`" * max(minimum, longest + 1)


def _link_destination(url: str) -> str:
    if not url or re.search(r"[\s<>]", url) or url.count("(") != url.count(")"):
        return f"<{url.replace('>', '%3E')}>"
    return url


def _interrupts(node: MdNode) -> bool:
    """True for a list that may start right after a paragraph line (CommonMark: ordered lists must start at 1)."""
    return isinstance(node, List) and bool(node.children) and (not node.ordered or node.start in (None, 1))


class MarkdownSerializer:
    def __init__(self, options: MarkdownOptions = None):
        self.options = options or MarkdownOptions()

    # --- phrasing ---

    def phrasing(self, nodes: list, before: str = "", after: str = "") -> str:
        """Render inline siblings; before/after are the characters just outside them ("" for a line edge).

        Delimited nodes are rendered a second time once their neighbours are
        known, since the emphasis marker depends on them.
        """
        rendered = [self.inline(n) for n in nodes]
        last = before
        for i, node in enumerate(nodes):
            if isinstance(node, (Strong, Emphasis, Delete)):
                following = next((r[0] for r in rendered[i + 1:] if r), after[:1])
                rendered[i] = self.inline(node, last, following)
            if rendered[i]:
                last = rendered[i][-1]
        return "".join(rendered)

    def _delimited(self, node: MdNode, marker: str, before: str, after: str) -> str:
        """Wrap phrasing in marker, keeping edge whitespace outside so the delimiters still flank."""
        inner = self.phrasing(node.children, before, after)
        core = inner.strip()
        if not core:
            return inner
        lead = inner[:len(inner) - len(inner.lstrip())]
        trail = inner[len(inner.rstrip()):]
        if marker == "_":
            outside = (lead[-1:] or before[-1:]) + (trail[:1] or after[:1])
            if any(c.isalnum() for c in outside):
                marker = "*"
        return f"{lead}{marker}{core}{marker}{trail}"

    def inline(self, node: MdNode, before: str = "", after: str = "") -> str:
        if isinstance(node, Text):
            return _escape(node.value)
        if isinstance(node, InlineCode):
            fence = _fence_for(node.value, 1)
            pad = " " if node.value.startswith("`") or node.value.endswith("`") else ""
            return f"{fence}{pad}{node.value}{pad}{fence}"
        if isinstance(node, Strong):
            return self._delimited(node, "**", before, after)
        if isinstance(node, Emphasis):
            return self._delimited(node, self.options.emphasis, before, after)
        if isinstance(node, Delete):
            return self._delimited(node, "~~", before, after)
        if isinstance(node, Link):
            title = f' "{node.title}"' if node.title else ""
            return f"[{self.phrasing(node.children, '[', ']')}]({_link_destination(node.url)}{title})"
        if isinstance(node, Image):
            title = f' "{node.title}"' if node.title else ""
            return f"![{_escape(node.alt)}]({_link_destination(node.url)}{title})"
        raise SerializeError(f"Cannot serialize {getattr(node, 'type', type(node).__name__)!r} as phrasing content")

    def _text_block(self, nodes: list) -> str:
        """Phrasing for a paragraph or heading, with line-edge spaces encoded so they survive."""
        text = BLOCK_START_RE.sub(r"\1\\\2", self.phrasing(nodes))
        text = ORDERED_START_RE.sub(r"\1\\\2", text)
        text = UNDERLINE_RE.sub(r"\1\\\2", text)
        lines = []
        for line in text.split("\n"):
            if line.startswith(" "):
                line = ENCODED_SPACE + line[1:]
            if line.endswith(" "):
                line = line[:-1] + ENCODED_SPACE
            lines.append(line)
        return "\n".join(lines)

    # --- flow ---

    def flow(self, node: MdNode, bullet: Optional[str] = None) -> str:
        if isinstance(node, Paragraph):
            return self._text_block(node.children)
        if isinstance(node, Heading):
            content = self._text_block(node.children).replace("\n", " ")
            return "#" * node.depth + (f" {content}" if content else "")
        if isinstance(node, Code):
            fence = _fence_for(node.value, 3)
            info = (node.lang or "") + (f" {node.meta}" if node.meta else "")
            body = f"{node.value}\n" if node.value else ""
            return f"{fence}{info}\n{body}{fence}"
        if isinstance(node, ThematicBreak):
            return self.options.rule
        if isinstance(node, Blockquote):
            inner = self.join_flow(node.children)
            return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
        if isinstance(node, List):
            return self._list(node, bullet or self.options.bullet)
        if isinstance(node, Table):
            return self._table(node)
        raise SerializeError(f"Cannot serialize {getattr(node, 'type', type(node).__name__)!r} as flow content")

    def join_flow(self, nodes: list, tight: bool = False) -> str:
        """Render sibling blocks, alternating list markers so adjacent lists stay separate.

        Blocks are blank-line separated. In a tight list item only a list that can
        interrupt the block before it goes on the next line; anything else after a
        paragraph would read as continuation text or a setext underline.
        """
        out = ""
        prev = None
        bullet = self.options.bullet
        for node in nodes:
            if isinstance(node, List) and isinstance(prev, List) and node.ordered == prev.ordered:
                bullet = self.options.bullet_other if bullet == self.options.bullet else self.options.bullet
            else:
                bullet = self.options.bullet
            rendered = self.flow(node, bullet)
            prev = node
            if not rendered:
                continue
            if out:
                out += "\n" if tight and _interrupts(node) else "\n\n"
            out += rendered
        return out

    def _list(self, node: List, bullet: str) -> str:
        # ordered lists alternate between "." and ")" the same way bullets do
        delimiter = ")" if bullet != self.options.bullet else "."
        start = node.start if node.start is not None else 1
        items = []
        for i, item in enumerate(node.children):
            marker = f"{start + i}{delimiter}" if node.ordered else bullet
            items.append(self._list_item(item, marker))
        return ("\n\n" if node.spread else "\n").join(items)

    def _list_item(self, item: ListItem, marker: str) -> str:
        if not isinstance(item, ListItem):
            raise SerializeError(f"List children must be listItem, got {getattr(item, 'type', item)!r}")
        content = self.join_flow(item.children, tight=not item.spread)
        if item.checked is not None:
            content = ("[x] " if item.checked else "[ ] ") + content
        if not content:
            return marker
        indent = " " * (len(marker) + 1)
        lines = content.split("\n")
        rest = [f"{indent}{line}" if line else "" for line in lines[1:]]
        return "\n".join([f"{marker} {lines[0]}", *rest])

    def _cell(self, cell) -> str:
        if getattr(cell, "type", None) != "tableCell":
            raise SerializeError(f"Table rows must hold tableCell nodes, got {getattr(cell, 'type', cell)!r}")
        return self.phrasing(cell.children).replace("|", "\\|").replace("\n", " ").strip()

    def _table(self, node: Table) -> str:
        rows = []
        for row in node.children:
            if getattr(row, "type", None) != "tableRow":
                raise SerializeError(f"Table children must be tableRow, got {getattr(row, 'type', row)!r}")
            rows.append([self._cell(c) for c in row.children])
        width = max((len(r) for r in rows), default=0)
        if width == 0:
            return ""

        def line(cells: list[str]) -> str:
            cells = cells + [""] * (width - len(cells))
            return "| " + " | ".join(cells) + " |"

        align = (node.align or []) + [None] * width
        delimiter = []
        for a in align[:width]:
            delimiter.append({"left": ":--", "right": "--:", "center": ":-:"}.get(a, "---"))
        return "\n".join([line(rows[0]), line(delimiter), *(line(r) for r in rows[1:])])

    def serialize(self, root: Root) -> str:
        if not isinstance(root, Root):
            raise SerializeError(f"Expected a root node, got {getattr(root, 'type', root)!r}")
        body = self.join_flow(root.children)
        return body + "\n" if body else ""


def mdast_to_markdown(ast: Root, options: MarkdownOptions = None) -> str:
    """Serialize a Markdown-AST root, normalizing encoded or non-breaking spaces before newlines."""
    text = MarkdownSerializer(options).serialize(ast)
    return text.replace(f"{ENCODED_SPACE}\n", " \n").replace("\u00a0\n", " \n")
