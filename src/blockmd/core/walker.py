"""Block-tree walker: pre-order traversal producing a Markdown-AST and asset ids.

Each block gets one enter step, then its children (unless the step skips
them), then an optional leave step. Two pieces of state cross block
boundaries:

* the global paragraph depth, incremented while inside a paragraph-family
  block so nested headings and text paragraphs get a 4-space indent per level;
* the list a parent is currently building, stored in the open list node's
  local scope as the id of the parent that started it. A list block whose
  parent and signature match joins that list; anything else closes it.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from loguru import logger

from blockmd.core.assets import AssetResolver, asset_url
from blockmd.core.context import WalkContext
from blockmd.core.deltas import delta_to_mdast, plain_text
from blockmd.core.lists import (
    LIST_PARENT_KEY,
    checked_of,
    should_continue_list,
    signature_of,
    signature_of_node,
)
from blockmd.core.mdast import (
    Blockquote,
    Code,
    Heading,
    Image,
    List,
    ListItem,
    Paragraph,
    Root,
    ThematicBreak,
)
from blockmd.core.models import (
    CONTAINER_FLAVOURS,
    BlockSnapshot,
    CodeProps,
    DatabaseProps,
    Flavour,
    ImageProps,
    ListProps,
    PageProps,
    ParagraphProps,
    read_props,
)
from blockmd.core.tables import database_to_table
from blockmd.errors import AssetError, MalformedBlock


PARAGRAPH_DEPTH_KEY = "affine:paragraph:depth"
HEADING_TYPES = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}


@dataclass
class Step:
    """Outcome of an enter hook: whether to walk children and what to undo on leave."""
    walk_children: bool = True
    leave: Optional[Callable[[], None]] = None


@dataclass
class WalkResult:
    ast: Root
    asset_ids: list[str] = field(default_factory=list)


class SnapshotWalker:
    """Single-use walker; create one per document."""

    def __init__(self, root: Root, assets: Optional[AssetResolver] = None):
        self.context = WalkContext(root)
        self.assets = assets
        self.asset_ids: list[str] = []
        self._enter: dict[Flavour, Callable[[BlockSnapshot, Optional[str]], Awaitable[Step]]] = {
            Flavour.code:      self._enter_code,
            Flavour.paragraph: self._enter_paragraph,
            Flavour.list:      self._enter_list,
            Flavour.divider:   self._enter_divider,
            Flavour.image:     self._enter_image,
            Flavour.page:      self._enter_page,
            Flavour.database:  self._enter_database,
        }

    async def walk(self, snapshot: BlockSnapshot) -> WalkResult:
        await self._visit(snapshot, None)
        return WalkResult(ast=self.context.root, asset_ids=self.asset_ids)

    async def _visit(self, block: BlockSnapshot, parent_id: Optional[str]) -> None:
        flavour = Flavour.of(block.flavour)
        if flavour is not Flavour.list:
            self._close_list(parent_id)

        handler = self._enter.get(flavour, self._enter_other)
        try:
            step = await handler(block, parent_id)
        except MalformedBlock as e:
            logger.warning(f"{e}; skipping block")
            step = Step()
        except AssetError as e:
            logger.warning(f"Image block {block.id!r} dropped: {e}")
            step = Step()

        try:
            if step.walk_children:
                for child in block.children:
                    await self._visit(child, block.id)
                self._close_list(block.id)
        finally:
            if step.leave is not None:
                step.leave()

    def _close_list(self, parent_id: Optional[str]) -> None:
        """Close the list left open by parent_id's previous list children, if any."""
        ctx = self.context
        if isinstance(ctx.current_node(), List) and ctx.get_node_context(LIST_PARENT_KEY) == parent_id:
            ctx.close_node()

    # --- enter hooks ---

    async def _enter_other(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        if Flavour.of(block.flavour) not in CONTAINER_FLAVOURS:
            logger.debug(f"No Markdown for flavour {block.flavour!r} (block {block.id!r})")
        return Step()

    async def _enter_code(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        props = read_props(block, CodeProps)
        self.context.append(Code(lang=props.language, value=plain_text(props.text)))
        return Step()

    async def _enter_paragraph(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        ctx = self.context
        props = read_props(block, ParagraphProps)
        depth = ctx.get_global(PARAGRAPH_DEPTH_KEY, 0)

        if props.type in HEADING_TYPES:
            ctx.append(Heading(depth=HEADING_TYPES[props.type], children=delta_to_mdast(props.text, depth)))
        elif props.type == "text":
            ctx.append(Paragraph(children=delta_to_mdast(props.text, depth)))
        elif props.type == "quote":
            with ctx.opened(Blockquote()):
                ctx.append(Paragraph(children=delta_to_mdast(props.text)))
        else:
            logger.debug(f"No Markdown for paragraph type {props.type!r} (block {block.id!r})")

        ctx.set_global(PARAGRAPH_DEPTH_KEY, depth + 1)
        return Step(leave=lambda: ctx.set_global(PARAGRAPH_DEPTH_KEY, ctx.get_global(PARAGRAPH_DEPTH_KEY) - 1))

    async def _enter_list(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        ctx = self.context
        props = read_props(block, ListProps)
        candidate = signature_of(props)

        current = ctx.current_node()
        owner_id = ctx.get_node_context(LIST_PARENT_KEY) if isinstance(current, List) else None
        if not should_continue_list(parent_id, owner_id, signature_of_node(current), candidate):
            self._close_list(parent_id)
            ctx.open_node(List(ordered=candidate.ordered))
            ctx.set_node_context(LIST_PARENT_KEY, parent_id)

        ctx.open_node(ListItem(checked=checked_of(props)))
        ctx.append(Paragraph(children=delta_to_mdast(props.text)))
        return Step(leave=ctx.close_node)

    async def _enter_divider(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        self.context.append(ThematicBreak())
        return Step()

    async def _enter_image(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        if self.assets is None:
            return Step()
        props = read_props(block, ImageProps)
        asset = await self.assets.resolve(props.source_id)
        if asset is None:
            logger.warning(f"Image block {block.id!r}: asset {props.source_id!r} not found")
            return Step()

        self.asset_ids.append(props.source_id)
        with self.context.opened(Paragraph()):
            self.context.append(Image(url=asset_url(props.source_id, asset), alt=asset.name))
        return Step()

    async def _enter_page(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        props = read_props(block, PageProps)
        if props.title:
            self.context.append(Paragraph(children=delta_to_mdast(props.title, 0)))
        return Step()

    async def _enter_database(self, block: BlockSnapshot, parent_id: Optional[str]) -> Step:
        props = read_props(block, DatabaseProps)
        self.context.append(database_to_table(block, props))
        return Step(walk_children=False)


async def traverse_snapshot(
    snapshot: BlockSnapshot,
    root: Optional[Root] = None,
    assets: Optional[AssetResolver] = None,
    ) -> WalkResult:
    """Walk a block tree into a Markdown-AST, collecting the asset id of every rendered image."""
    walker = SnapshotWalker(root if root is not None else Root(), assets)
    return await walker.walk(snapshot)
