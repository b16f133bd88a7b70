"""Unit tests for config.py"""

import pytest
from pydantic import ValidationError

from blockmd.config import Settings, load_config


def test_load_config_defaults():
    """Settings defaults apply when no config.yaml, env var, or CLI override exists."""
    settings = load_config()
    assert settings.output_dir == "dist"
    assert settings.profile == "mdast"
    assert settings.assets_dir is None
    assert (settings.bullet, settings.emphasis, settings.rule) == ("-", "_", "---")


def test_load_config_reads_config_yaml(tmp_path):
    """Values in config.yaml are applied."""
    (tmp_path / "config.yaml").write_text("profile: legacy\nbullet: '*'\n")
    settings = load_config()
    assert settings.profile == "legacy"
    assert settings.bullet == "*"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """BLOCKMD_OUTPUT_DIR takes precedence over config.yaml output_dir."""
    (tmp_path / "config.yaml").write_text("output_dir: site\n")
    monkeypatch.setenv("BLOCKMD_OUTPUT_DIR", "public")
    assert load_config().output_dir == "public"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("BLOCKMD_PROFILE", "legacy")
    assert load_config(overrides={"profile": "mdast"}).profile == "mdast"
    assert load_config(overrides={"profile": None}).profile == "legacy"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path):
    """A config.yaml holding a list is rejected."""
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


def test_load_config_empty_yaml(tmp_path):
    """An empty config.yaml falls back to defaults."""
    (tmp_path / "config.yaml").write_text("")
    assert load_config().profile == "mdast"


@pytest.mark.parametrize("field, value", [
    ("profile", "html"),
    ("bullet", "x"),
    ("emphasis", "~"),
    ("rule", "--"),
])
def test_load_config_rejects_bad_markers(field, value):
    """Unknown profiles and markers fail validation."""
    with pytest.raises(ValidationError):
        load_config(overrides={field: value})


def test_load_config_env_skip_empty(monkeypatch):
    """BLOCKMD_SKIP_EMPTY is coerced to a bool."""
    monkeypatch.setenv("BLOCKMD_SKIP_EMPTY", "false")
    assert load_config().skip_empty is False


def test_settings_fields_are_all_read():
    """Settings carries only fields the converter reads."""
    assert set(Settings.model_fields) == {
        "output_dir", "assets_dir", "profile", "bullet", "emphasis", "rule",
        "blob_url_template", "skip_empty", "log_level",
    }
