"""Tests for config.py - loading, validation and saving."""

from pathlib import Path

import pytest

from lazycloud.config import LazyCloudConfig, config_dir, load_config, save_config
from lazycloud.exceptions import ConfigError, ConfigNotFoundError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temp dir and clear LAZYCLOUD_* variables."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for var in ("LAZYCLOUD_CONFIG", "LAZYCLOUD_LOG_LEVEL", "LAZYCLOUD_THEME"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nope.toml")

        assert config.ui.tick_interval_ms == 100
        assert config.theme.name == "mocha"
        assert config.contexts == []
        assert config.discover_gcloud

    def test_missing_required_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "nope.toml", required=True)

    def test_reads_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            """
[ui]
tick_interval_ms = 250

[theme]
name = "Latte"

[keys.global]
quit = ["ctrl+q"]

[[contexts]]
name = "prod"
project = "prod-123"
"""
        )

        config = load_config(path)

        assert config.ui.tick_interval_ms == 250
        assert config.theme.name == "latte"
        assert config.keys.global_.quit == ["ctrl+q"]
        assert config.contexts[0].name == "prod"
        assert config.contexts[0].provider == "gcp"
        assert config.config_path == path

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAZYCLOUD_LOG_LEVEL", "debug")
        monkeypatch.setenv("LAZYCLOUD_THEME", "frappe")

        config = load_config(tmp_path / "nope.toml")

        assert config.logging.level == "DEBUG"
        assert config.theme.name == "frappe"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "custom.toml"
        path.write_text("last_context = \"dev\"\n")
        monkeypatch.setenv("LAZYCLOUD_CONFIG", str(path))

        assert load_config().last_context == "dev"

    @pytest.mark.parametrize("tick", [10, 5000])
    def test_invalid_tick(self, tmp_path: Path, tick: int) -> None:
        path = tmp_path / "config.toml"
        path.write_text(f"[ui]\ntick_interval_ms = {tick}\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_unknown_theme(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[theme]\nname = "neon"\n')
        with pytest.raises(ConfigError):
            load_config(path)

    def test_malformed_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[ui\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestSaveConfig:
    """Tests for save_config."""

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "config.toml"
        config = LazyCloudConfig()
        config.theme.name = "latte"
        config.last_context = "dev"

        save_config(config, path)
        loaded = load_config(path)

        assert loaded.theme.name == "latte"
        assert loaded.last_context == "dev"
        assert loaded.keys.global_.quit == ["q", "ctrl+c"]
        assert not path.with_suffix(".tmp").exists()

    def test_saves_to_loaded_path(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        config = load_config(path)
        config.last_context = "prod"

        assert save_config(config) == path
        assert 'last_context = "prod"' in path.read_text()


class TestPaths:
    """Tests for config_dir and log_path."""

    def test_config_dir_uses_xdg(self, isolated_env: Path) -> None:
        assert config_dir() == isolated_env / "xdg" / "lazycloud"

    def test_default_log_path(self, isolated_env: Path) -> None:
        assert LazyCloudConfig().log_path == isolated_env / "xdg" / "lazycloud" / "lazycloud.log"

    def test_custom_log_path(self, tmp_path: Path) -> None:
        config = LazyCloudConfig.model_validate({"logging": {"file": str(tmp_path / "x.log")}})
        assert config.log_path == tmp_path / "x.log"
