"""Legacy string renderer: blocks straight to Markdown text without an AST.

Kept for documents published with the older reader, whose output differs
from the AST path: list items use ``*`` and ``1.`` markers, nested blocks are
padded two spaces per level (reset by page, frame and note containers), and
images link straight to blob storage, switching to an HTML ``<img>`` tag when
the block carries a width or height.
"""

from typing import Optional

from loguru import logger

from blockmd.core.deltas import delta_to_mdast, plain_text
from blockmd.core.models import (
    CONTAINER_FLAVOURS,
    BlockSnapshot,
    CodeProps,
    EmbedProps,
    Flavour,
    ListProps,
    ParagraphProps,
    read_props,
)
from blockmd.core.serialize import MarkdownOptions, MarkdownSerializer
from blockmd.errors import BlockmdError


PADDING = "  "
PREFIXES = {
    "h1": "# ", "h2": "## ", "h3": "### ", "h4": "#### ", "h5": "##### ", "h6": "###### ",
    "quote": "> ",
}
DEFAULT_BLOB_URL = "assets/{blob_id}"


def _dimension(value: Optional[float]) -> str:
    if value is None:
        return "auto"
    return str(int(value)) if float(value).is_integer() else str(value)


class LegacyRenderer:
    def __init__(self, blob_url_template: str = DEFAULT_BLOB_URL, options: MarkdownOptions = None):
        self.blob_url_template = blob_url_template
        self.serializer = MarkdownSerializer(options)

    def blob_url(self, blob_id: str) -> str:
        return self.blob_url_template.format(blob_id=blob_id)

    def _inline(self, deltas) -> str:
        return self.serializer.phrasing(delta_to_mdast(deltas)) + "\n"

    def _image(self, props: EmbedProps) -> str:
        url = self.blob_url(props.source_id)
        if props.width or props.height:
            return (f'\n<img src="{url}" width="{_dimension(props.width)}" '
                    f'height="{_dimension(props.height)}" />\n\n')
        return f"\n![{props.source_id}]({url})\n\n"

    def _content(self, block: BlockSnapshot, flavour: Flavour) -> tuple[str, bool]:
        """Return (content, reset_padding) for a single block, children excluded."""
        if flavour is Flavour.paragraph:
            props = read_props(block, ParagraphProps)
            return PREFIXES.get(props.type, "") + self._inline(props.text), False
        if flavour is Flavour.divider:
            return "\n---\n\n", False
        if flavour is Flavour.list:
            props = read_props(block, ListProps)
            marker = "* " if props.type == "bulleted" else "1. "
            return marker + self._inline(props.text), False
        if flavour is Flavour.code:
            props = read_props(block, CodeProps)
            lang = (props.language or "").lower()
            return f"```{lang}\n{plain_text(props.text)}\n```\n\n", False
        if flavour in (Flavour.embed, Flavour.image):
            props = read_props(block, EmbedProps)
            if flavour is Flavour.image or props.type == "image":
                return self._image(props), False
            return "", False
        if flavour is Flavour.page or flavour in CONTAINER_FLAVOURS:
            return "", True
        logger.warning(f"Unknown flavour {block.flavour!r} (block {block.id!r})")
        return "", False

    def block_to_md(self, block: BlockSnapshot, pad_left: str = "") -> str:
        """Render block and its descendants; a failing block renders as an empty string."""
        try:
            content, reset = self._content(block, Flavour.of(block.flavour))
        except BlockmdError as e:
            logger.error(f"Error converting block to md: {e}")
            return ""
        child_pad = "" if reset else pad_left + PADDING
        content += "".join(self.block_to_md(child, child_pad) for child in block.children)
        return pad_left + content
