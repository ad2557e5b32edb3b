"""
Tests for logging setup.
"""

import logging

from fleetdrop.core.observability.logging_config import (
    configure_cli_logging,
    resolve_level,
    setup_logging,
)


class TestResolveLevel:
    def test_flags(self):
        assert resolve_level(debug=True) == "DEBUG"
        assert resolve_level(verbose=True) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("FLEETDROP_LOG_LEVEL", "INFO")
        assert resolve_level() == "INFO"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("FLEETDROP_LOG_LEVEL", raising=False)
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_file_handler_lowers_root_level(self, tmp_path):
        log_file = tmp_path / "fleetdrop.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("fleetdrop.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text()

    def test_unknown_level_falls_back(self):
        setup_logging(level="NOPE")
        assert logging.getLogger().level == logging.WARNING

    def test_cli_logging_reads_file_env(self, tmp_path, monkeypatch):
        log_file = tmp_path / "cli.log"
        monkeypatch.setenv("FLEETDROP_LOG_FILE", str(log_file))
        monkeypatch.setenv("FLEETDROP_LOG_FILE_LEVEL", "INFO")
        configure_cli_logging(quiet=True)
        root = logging.getLogger()
        assert root.level == logging.INFO
        logging.getLogger("fleetdrop.test").info("from the cli")
        for handler in root.handlers:
            handler.flush()
        assert "from the cli" in log_file.read_text()
