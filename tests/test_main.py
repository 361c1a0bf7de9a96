"""Tests for __main__.py and logging_config.py."""

import logging
from pathlib import Path

import pytest

from lazycloud import logging_config
from lazycloud.__main__ import build_parser, main
from lazycloud.constants import ExitCode
from lazycloud.logging_config import setup_logging


class TestMain:
    """Tests for the command line entry point (paths that exit before the UI)."""

    def test_parser(self) -> None:
        args = build_parser().parse_args(["--context", "dev", "--service", "gcp:secret-manager"])
        assert args.context == "dev"
        assert args.service == "gcp:secret-manager"
        assert args.config is None

    def test_service_requires_context(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--service", "secret-manager"]) == ExitCode.ERROR
        assert "--service requires --context" in capsys.readouterr().err

    def test_missing_explicit_config(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["--config", str(tmp_path / "missing.toml")]) == ExitCode.CONFIG_ERROR
        assert "Config file not found" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[ui]\ntick_interval_ms = 1\n")
        assert main(["--config", str(path)]) == ExitCode.CONFIG_ERROR


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture
    def root(self, monkeypatch: pytest.MonkeyPatch):
        """Root logger with setup_logging reset; added handlers removed afterwards."""
        monkeypatch.setattr(logging_config, "_configured", False)
        root = logging.getLogger()
        before, level = set(root.handlers), root.level
        yield root
        for handler in set(root.handlers) - before:
            root.removeHandler(handler)
            handler.close()
        root.setLevel(level)

    def added(self, root: logging.Logger, kind: type) -> list[logging.Handler]:
        return [h for h in root.handlers if type(h) is kind]

    def test_file_handler(self, root: logging.Logger, tmp_path: Path) -> None:
        logfile = tmp_path / "logs" / "lazycloud.log"

        setup_logging("debug", logfile)
        logging.getLogger("lazycloud.test").debug("hello")
        for handler in self.added(root, logging.FileHandler):
            handler.flush()

        assert root.level == logging.DEBUG
        assert "hello" in logfile.read_text()

    def test_only_once(self, root: logging.Logger, tmp_path: Path) -> None:
        setup_logging("INFO", tmp_path / "a.log")
        setup_logging("DEBUG", tmp_path / "b.log")

        assert len(self.added(root, logging.FileHandler)) == 1
        assert root.level == logging.INFO
        assert not (tmp_path / "b.log").exists()

    def test_no_file(self, root: logging.Logger) -> None:
        setup_logging("INFO")
        assert len(self.added(root, logging.NullHandler)) >= 1
