"""Tests for contexts.py - gcloud discovery and declared contexts."""

from pathlib import Path

import pytest

from lazycloud.config import ContextConfig, LazyCloudConfig
from lazycloud.contexts import discover_gcloud_contexts, gcloud_config_dir, load_contexts
from lazycloud.core.registry import Context


@pytest.fixture
def gcloud_dir(tmp_path: Path) -> Path:
    """A gcloud config dir with two named configurations."""
    root = tmp_path / "gcloud"
    configurations = root / "configurations"
    configurations.mkdir(parents=True)
    (configurations / "config_default").write_text(
        "[core]\nproject = proj-a\naccount = dev@example.com\n\n[compute]\nregion = europe-west1\n"
    )
    (configurations / "config_staging").write_text("[core]\nproject = proj-staging\n")
    (root / "active_config").write_text("default")
    return root


class TestDiscoverGcloudContexts:
    """Tests for discover_gcloud_contexts."""

    def test_reads_configurations(self, gcloud_dir: Path) -> None:
        contexts = discover_gcloud_contexts(gcloud_dir)

        assert contexts == [
            Context("gcp", "default", "proj-a", "dev@example.com", "europe-west1"),
            Context("gcp", "staging", "proj-staging"),
        ]

    def test_missing_dir(self, tmp_path: Path) -> None:
        assert discover_gcloud_contexts(tmp_path / "missing") == []

    def test_percent_signs_are_literal(self, gcloud_dir: Path) -> None:
        (gcloud_dir / "configurations" / "config_odd").write_text("[core]\nproject = p%x\n")
        contexts = {c.name: c for c in discover_gcloud_contexts(gcloud_dir)}
        assert contexts["odd"].project == "p%x"

    def test_cloudsdk_config_env(self, gcloud_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUDSDK_CONFIG", str(gcloud_dir))
        assert gcloud_config_dir() == gcloud_dir
        assert len(discover_gcloud_contexts()) == 2


class TestLoadContexts:
    """Tests for load_contexts."""

    def test_declared_override_discovered(self, gcloud_dir: Path) -> None:
        config = LazyCloudConfig(
            contexts=[
                ContextConfig(name="staging", project="override"),
                ContextConfig(name="aws-dev", provider="aws", region="eu-west-1"),
            ]
        )

        contexts = load_contexts(config, gcloud_dir)

        assert [c.name for c in contexts] == ["aws-dev", "default", "staging"]
        assert contexts[2].project == "override"

    def test_discovery_disabled(self, gcloud_dir: Path) -> None:
        config = LazyCloudConfig(discover_gcloud=False, contexts=[ContextConfig(name="only")])
        assert [c.name for c in load_contexts(config, gcloud_dir)] == ["only"]
