"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    output_dir:  str = Field(default="dist", description="Directory for converted Markdown and assets")
    assets_dir:  Optional[str] = Field(default=None, description="Directory holding blobs named by asset id")
    profile:     str = Field(default="mdast", pattern="^(mdast|legacy)$", description="mdast or legacy renderer")
    bullet:      str = Field(default="-", pattern=r"^[-*+]$", description="Unordered list marker")
    emphasis:    str = Field(default="_", pattern=r"^[_*]$", description="Emphasis marker")
    rule:        str = Field(default="---", pattern=r"^(---|\*\*\*|___)$", description="Thematic break")
    blob_url_template: str = Field(default="assets/{blob_id}", description="Image URL for the legacy profile")
    skip_empty:  bool = Field(default=True, description="Drop leading empty paragraphs of the page and its notes")
    log_level:   str = Field(default="WARNING", description="loguru level for the stderr sink")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOCKMD_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"BLOCKMD_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
