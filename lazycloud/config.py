"""lazycloud configuration: Pydantic model, load, and save."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from lazycloud.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILENAME,
    DEFAULT_TICK_INTERVAL_MS,
    LOG_FILENAME,
    MAX_TICK_INTERVAL_MS,
    MIN_TICK_INTERVAL_MS,
)
from lazycloud.exceptions import ConfigError, ConfigNotFoundError
from lazycloud.keymap import KeymapConfig
from lazycloud.theme import DEFAULT_THEME, THEMES

logger = logging.getLogger(__name__)


def config_dir() -> Path:
    """Return the lazycloud config directory ($XDG_CONFIG_HOME/lazycloud)."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / CONFIG_DIR_NAME


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class UIConfig(BaseModel):
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS

    @field_validator("tick_interval_ms")
    @classmethod
    def validate_tick(cls, v: int) -> int:
        if not (MIN_TICK_INTERVAL_MS <= v <= MAX_TICK_INTERVAL_MS):
            raise ValueError(
                f"tick_interval_ms must be between {MIN_TICK_INTERVAL_MS} and {MAX_TICK_INTERVAL_MS}"
            )
        return v


class ThemeConfig(BaseModel):
    name: str = DEFAULT_THEME

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if v.lower() not in THEMES:
            raise ValueError(f"Unknown theme {v!r}. Available: {', '.join(THEMES)}")
        return v.lower()


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: str = ""  # empty → use default

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()


class ContextConfig(BaseModel):
    """A context declared by hand in ``[[contexts]]``."""

    name: str = Field(min_length=1)
    provider: str = "gcp"
    project: str | None = None
    account: str | None = None
    region: str | None = None


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class LazyCloudConfig(BaseModel):
    """Root lazycloud configuration model."""

    ui: UIConfig = Field(default_factory=UIConfig)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    keys: KeymapConfig = Field(default_factory=KeymapConfig)
    contexts: list[ContextConfig] = Field(default_factory=list)
    discover_gcloud: bool = True
    last_context: str | None = None

    # Computed paths (not stored in config file)
    _config_path: Path | None = None

    @property
    def config_path(self) -> Path:
        return self._config_path or _config_file_path()

    @property
    def log_path(self) -> Path:
        if self.logging.file:
            return Path(self.logging.file).expanduser()
        return config_dir() / LOG_FILENAME

    def to_toml_data(self) -> dict[str, Any]:
        """Serializable form; TOML has no null so unset values are dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("LAZYCLOUD_CONFIG"):
        return Path(env_path).expanduser()
    return config_dir() / CONFIG_FILENAME


def load_config(path: Path | None = None, *, required: bool = False) -> LazyCloudConfig:
    """
    Load LazyCloudConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (LAZYCLOUD_*)
      2. Config file (~/.config/lazycloud/config.toml)
      3. Built-in defaults

    A missing file yields the defaults unless ``required`` is set, which
    is how an explicit ``--config`` path is treated.
    """
    import tomllib

    cfg_path = path or _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except Exception as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc
    elif required:
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")
    else:
        logger.debug("No config at %s, using defaults", cfg_path)

    _apply_env_overrides(data)

    try:
        config = LazyCloudConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return config


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay LAZYCLOUD_* environment variables onto the parsed TOML data."""
    if level := os.environ.get("LAZYCLOUD_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level
    if theme := os.environ.get("LAZYCLOUD_THEME"):
        data.setdefault("theme", {})["name"] = theme


def save_config(config: LazyCloudConfig, path: Path | None = None) -> Path:
    """Write the config to its TOML file atomically."""
    import tomli_w

    cfg_path = path or config.config_path
    cfg_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config.to_toml_data(), f)
        tmp_path.replace(cfg_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    logger.debug("Saved config to %s", cfg_path)
    return cfg_path
