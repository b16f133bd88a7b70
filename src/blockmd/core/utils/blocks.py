"""Block predicates shared by callers that pre-filter block lists"""

from blockmd.core.deltas import plain_text
from blockmd.core.models import CONTAINER_FLAVOURS, BlockSnapshot, Flavour, read_deltas


def is_empty_block(block: BlockSnapshot) -> bool:
    """True for a childless text paragraph whose text is blank."""
    if Flavour.of(block.flavour) is not Flavour.paragraph or block.children:
        return False
    if block.props.get("type", "text") != "text":
        return False
    return not plain_text(read_deltas(block.props.get("text"))).strip()


def skip_empty_blocks(blocks: list[BlockSnapshot], start: int = 0) -> list[BlockSnapshot]:
    """Return blocks[start:] with leading empty paragraphs dropped."""
    i = start
    while i < len(blocks) and is_empty_block(blocks[i]):
        i += 1
    return blocks[i:]


def trim_empty_blocks(block: BlockSnapshot) -> BlockSnapshot:
    """Copy of a page tree with leading empty paragraphs dropped from the page and its containers."""
    if Flavour.of(block.flavour) is not Flavour.page and Flavour.of(block.flavour) not in CONTAINER_FLAVOURS:
        return block
    children = [trim_empty_blocks(child) for child in skip_empty_blocks(block.children)]
    return block.model_copy(update={"children": children})
