"""CLI command implementations"""

import asyncio
import json
from collections import Counter
from pathlib import Path
from typing import Annotated, Optional

import typer
from markdown_it import MarkdownIt

from blockmd.config import Settings, load_config
from blockmd.core.assets import DirectoryAssetResolver
from blockmd.core.mdast import Root
from blockmd.core.pipeline import convert_file, load_snapshot, run_convert
from blockmd.core.utils.blocks import trim_empty_blocks
from blockmd.core.utils.logs import configure_logging
from blockmd.core.walker import traverse_snapshot
from blockmd.errors import BlockmdError


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def convert_cmd(
    path: Annotated[str, typer.Argument(help="Snapshot file or directory of snapshots")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    assets: Annotated[Optional[str], typer.Option("--assets-dir", help="Directory of blobs named by asset id")] = None,
    profile: Annotated[Optional[str], typer.Option("--profile", help="mdast or legacy")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level")] = None,
    ):
    """Convert snapshots to Markdown files, copying referenced assets."""
    settings = _settings(overrides={
        "output_dir": out, "assets_dir": assets, "profile": profile, "log_level": log_level,
    })
    if not Path(path).exists():
        _fail(f"No such file or directory: {path}")
    try:
        results = run_convert(path, settings)
    except BlockmdError as e:
        _fail("Conversion failed", e)
    for src, md_path, n_assets in results:
        suffix = f" (+{n_assets} asset(s))" if n_assets else ""
        typer.echo(f"  {src} -> {md_path}{suffix}")
    typer.echo(f"Converted {len(results)} document(s) to {settings.output_dir}/")


def ast_cmd(
    path: Annotated[str, typer.Argument(help="Snapshot file")],
    assets: Annotated[Optional[str], typer.Option("--assets-dir", help="Directory of blobs named by asset id")] = None,
    ):
    """Print the Markdown-AST of a snapshot as JSON."""
    settings = _settings(overrides={"assets_dir": assets})
    resolver = DirectoryAssetResolver(Path(settings.assets_dir)) if settings.assets_dir else None
    try:
        snapshot = load_snapshot(Path(path))
        if settings.skip_empty:
            snapshot = trim_empty_blocks(snapshot)
        result = asyncio.run(traverse_snapshot(snapshot, Root(), resolver))
    except (BlockmdError, OSError) as e:
        _fail(f"Cannot read {path}", e)
    typer.echo(json.dumps({
        "ast": result.ast.model_dump(exclude_none=True),
        "asset_ids": result.asset_ids,
    }, indent=2, ensure_ascii=False))


def check_cmd(
    path: Annotated[str, typer.Argument(help="Snapshot file")],
    profile: Annotated[Optional[str], typer.Option("--profile", help="mdast or legacy")] = None,
    ):
    """Convert a snapshot and re-parse the Markdown with a GFM parser, counting block tokens."""
    settings = _settings(overrides={"profile": profile})
    try:
        _, result = asyncio.run(convert_file(Path(path), settings))
    except (BlockmdError, OSError) as e:
        _fail(f"Cannot read {path}", e)
    tokens = MarkdownIt("gfm-like", options_update={"linkify": False}).parse(result.markdown)
    counts = Counter(t.type.removesuffix("_open") for t in tokens if t.nesting == 1 or t.type in ("fence", "hr"))
    for kind, n in sorted(counts.items()):
        typer.echo(f"  {kind}: {n}")
    typer.echo(f"{len(result.markdown.splitlines())} line(s), {len(result.asset_ids)} asset reference(s)")
