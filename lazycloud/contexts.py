"""
Context discovery.

gcloud keeps one INI file per named configuration under
``<config dir>/configurations/config_<name>``.  Each becomes a ``gcp``
context.  Contexts declared in config.toml are added on top; on a name
clash the declared one wins.
"""

from __future__ import annotations

import configparser
import logging
import os
from pathlib import Path

from lazycloud.config import ContextConfig, LazyCloudConfig
from lazycloud.constants import GCLOUD_CONFIG_DIR
from lazycloud.core.registry import Context

logger = logging.getLogger(__name__)


def gcloud_config_dir() -> Path:
    """gcloud's config directory, honouring ``CLOUDSDK_CONFIG``."""
    if env_path := os.environ.get("CLOUDSDK_CONFIG"):
        return Path(env_path).expanduser()
    return Path.home() / ".config" / GCLOUD_CONFIG_DIR


def discover_gcloud_contexts(config_dir: Path | None = None) -> list[Context]:
    """One context per gcloud named configuration, sorted by name."""
    root = (config_dir or gcloud_config_dir()) / "configurations"
    if not root.is_dir():
        logger.debug("No gcloud configurations in %s", root)
        return []

    contexts = []
    for path in sorted(root.glob("config_*")):
        name = path.name.removeprefix("config_")
        if not name:
            continue
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(path, encoding="utf-8")
        except configparser.Error as exc:
            logger.warning("Skipping unreadable gcloud configuration %s: %s", path, exc)
            continue
        contexts.append(
            Context(
                provider="gcp",
                name=name,
                project=parser.get("core", "project", fallback=None),
                account=parser.get("core", "account", fallback=None),
                region=parser.get("compute", "region", fallback=None),
            )
        )
    logger.info("Discovered %d gcloud configuration(s)", len(contexts))
    return contexts


def from_config(entry: ContextConfig) -> Context:
    return Context(
        provider=entry.provider,
        name=entry.name,
        project=entry.project,
        account=entry.account,
        region=entry.region,
    )


def load_contexts(config: LazyCloudConfig, gcloud_dir: Path | None = None) -> list[Context]:
    """Declared contexts merged with discovered ones, unique by name."""
    merged: dict[str, Context] = {}
    if config.discover_gcloud:
        for context in discover_gcloud_contexts(gcloud_dir):
            merged[context.name] = context
    for entry in config.contexts:
        merged[entry.name] = from_config(entry)
    return sorted(merged.values(), key=lambda c: c.name)
