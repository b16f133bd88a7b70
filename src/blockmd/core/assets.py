"""Asset resolution for image blocks and the assets/<name> naming scheme"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from blockmd.errors import AssetError


ASSETS_DIRNAME = "assets"


@dataclass(frozen=True)
class Asset:
    data:         bytes
    name:         Optional[str] = None   # display name, e.g. the uploaded file name
    content_type: str = ""


class AssetResolver(Protocol):
    async def resolve(self, ref: str) -> Optional[Asset]:
        """Return the asset for ref, or None when it does not exist."""
        ...


def asset_name(ref: str, asset: Asset) -> str:
    """Deterministic file name for an asset: display-name stem (or ref) plus extension."""
    name = asset.name
    if name is not None and "." in name:
        ext = name.rsplit(".", 1)[-1]
    elif asset.content_type:
        ext = asset.content_type.split("/")[-1]
    else:
        ext = "blob"
    stem = name.split(".", 1)[0] if name is not None else ref
    return f"{stem}.{ext}"


def asset_url(ref: str, asset: Asset) -> str:
    return f"{ASSETS_DIRNAME}/{asset_name(ref, asset)}"


class MemoryAssetResolver:
    """Resolve assets from an in-memory mapping of ref -> Asset."""

    def __init__(self, assets: dict[str, Asset] = None):
        self.assets = dict(assets or {})

    async def resolve(self, ref: str) -> Optional[Asset]:
        return self.assets.get(ref)


class DirectoryAssetResolver:
    """Resolve assets from files named <ref> or <ref>.<ext> under a directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._cache: dict[str, Asset] = {}

    def _find(self, ref: str) -> Optional[Path]:
        if not ref or "/" in ref or "\\" in ref or ref in (".", ".."):
            return None
        exact = self.root / ref
        if exact.is_file():
            return exact
        matches = sorted(p for p in self.root.glob(f"{ref}.*") if p.is_file())
        return matches[0] if matches else None

    async def resolve(self, ref: str) -> Optional[Asset]:
        if ref in self._cache:
            return self._cache[ref]
        path = self._find(ref)
        if path is None:
            logger.debug(f"Asset {ref!r} not found under {self.root}")
            return None
        try:
            data = path.read_bytes()
        except OSError as e:
            raise AssetError(f"Cannot read asset {ref!r} at {path}: {e}") from e
        content_type = mimetypes.guess_type(path.name)[0] or ""
        name = path.name if path.name != ref else None
        asset = Asset(data=data, name=name, content_type=content_type)
        self._cache[ref] = asset
        return asset


async def write_assets(resolver: AssetResolver, refs: list[str], dest: Path) -> list[Path]:
    """Copy each distinct resolved asset to dest/assets/<asset_name>. Returns written paths."""
    target = dest / ASSETS_DIRNAME
    written = []
    for ref in dict.fromkeys(refs):
        asset = await resolver.resolve(ref)
        if asset is None:
            continue
        target.mkdir(parents=True, exist_ok=True)
        path = target / asset_name(ref, asset)
        path.write_bytes(asset.data)
        written.append(path)
    return written
