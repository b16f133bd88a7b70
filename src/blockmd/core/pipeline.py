"""Pipeline step functions: load snapshots, convert to Markdown, and write output"""

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from blockmd.config import Settings
from blockmd.core.assets import AssetResolver, DirectoryAssetResolver, write_assets
from blockmd.core.deltas import plain_text
from blockmd.core.legacy import LegacyRenderer
from blockmd.core.mdast import Root
from blockmd.core.models import BlockSnapshot, read_deltas
from blockmd.core.serialize import MarkdownOptions, mdast_to_markdown
from blockmd.core.utils.blocks import trim_empty_blocks
from blockmd.core.utils.slug import slugify, unique_slug
from blockmd.core.walker import traverse_snapshot
from blockmd.errors import SnapshotError


SNAPSHOT_EXTENSIONS = {'.json'}


@dataclass
class ConvertResult:
    markdown:  str
    asset_ids: list[str] = field(default_factory=list)


def options_from(settings: Settings) -> MarkdownOptions:
    return MarkdownOptions(bullet=settings.bullet, emphasis=settings.emphasis, rule=settings.rule)


def parse_snapshot(data) -> BlockSnapshot:
    """Accept a block snapshot or a page snapshot envelope ({"type": "page", "blocks": {...}})."""
    if isinstance(data, dict) and data.get("type") == "page":
        data = data.get("blocks")
    if not isinstance(data, dict):
        raise SnapshotError(f"Expected a block object, got {type(data).__name__}")
    try:
        return BlockSnapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid block tree: {e.error_count()} error(s)") from e


def load_snapshot(path: Path) -> BlockSnapshot:
    """Read and validate a JSON snapshot file."""
    try:
        data = json.loads(Path(path).read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e
    try:
        return parse_snapshot(data)
    except SnapshotError as e:
        raise SnapshotError(f"{path}: {e}") from e


def discover_snapshots(path: Path) -> list[Path]:
    """Return sorted .json files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in SNAPSHOT_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in SNAPSHOT_EXTENSIONS)


def page_title(snapshot: BlockSnapshot) -> str:
    return plain_text(read_deltas(snapshot.props.get("title"))).strip()


async def page_to_markdown(
    snapshot: BlockSnapshot,
    assets: Optional[AssetResolver] = None,
    options: MarkdownOptions = None,
    ) -> ConvertResult:
    """Walk the block tree into a Markdown-AST and serialize it."""
    result = await traverse_snapshot(snapshot, Root(), assets)
    return ConvertResult(markdown=mdast_to_markdown(result.ast, options), asset_ids=result.asset_ids)


def page_to_legacy_markdown(snapshot: BlockSnapshot, blob_url_template: str, options: MarkdownOptions = None) -> ConvertResult:
    """Render with the legacy string renderer; blob ids are collected from image blocks."""
    renderer = LegacyRenderer(blob_url_template, options)
    return ConvertResult(markdown=renderer.block_to_md(snapshot), asset_ids=_legacy_blob_ids(snapshot))


def _legacy_blob_ids(block: BlockSnapshot) -> list[str]:
    ids = []
    if block.flavour == "affine:image" or (block.flavour == "affine:embed" and block.props.get("type") == "image"):
        source_id = block.props.get("sourceId")
        if isinstance(source_id, str) and source_id:
            ids.append(source_id)
    for child in block.children:
        ids.extend(_legacy_blob_ids(child))
    return ids


async def convert_file(path: Path, settings: Settings, assets: Optional[AssetResolver] = None) -> tuple[str, ConvertResult]:
    """Convert one snapshot file. Returns (slug, result)."""
    snapshot = load_snapshot(path)
    if settings.skip_empty:
        snapshot = trim_empty_blocks(snapshot)
    if settings.profile == "legacy":
        result = page_to_legacy_markdown(snapshot, settings.blob_url_template, options_from(settings))
    else:
        result = await page_to_markdown(snapshot, assets, options_from(settings))
    slug = slugify(page_title(snapshot)) or slugify(path.stem) or snapshot.id
    return slug, result


async def _convert_all(files: list[Path], output_dir: Path, settings: Settings) -> list[tuple[Path, Path, int]]:
    assets = DirectoryAssetResolver(Path(settings.assets_dir)) if settings.assets_dir else None
    results = []
    taken: set[str] = set()
    for p in files:
        slug, result = await convert_file(p, settings, assets)
        md_path = output_dir / f"{unique_slug(slug, taken)}.md"
        md_path.write_text(result.markdown, encoding='utf-8')
        written = await write_assets(assets, result.asset_ids, output_dir) if assets else []
        logger.info(f"{p} -> {md_path} ({len(written)} asset(s))")
        results.append((p, md_path, len(written)))
    return results


def run_convert(path: str, settings: Settings) -> list[tuple[Path, Path, int]]:
    """Convert every snapshot under path into settings.output_dir.

    Returns (source_path, markdown_path, asset_count) triples.
    """
    output_dir = Path(settings.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    return asyncio.run(_convert_all(discover_snapshots(Path(path)), output_dir, settings))
