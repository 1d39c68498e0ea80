"""Tests for subrelay.utils.logging module."""

import logging

import pytest

import subrelay.utils.logging as logging_module


@pytest.fixture
def fresh_logger(monkeypatch):
    """Reset the cached logger and restore it afterwards."""
    monkeypatch.setattr(logging_module, "_logger", None)
    yield
    logger = logging.getLogger("subrelay")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())


class TestLogging:
    """Tests for logging functionality."""

    def test_disabled_uses_null_handler(self, fresh_logger, monkeypatch):
        monkeypatch.setattr(logging_module, "LOG_ENABLED", False)

        logger = logging_module.setup_logging()

        assert logger.name == "subrelay"
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_enabled_writes_to_file(self, fresh_logger, monkeypatch, tmp_path):
        log_file = tmp_path / "logs" / "subrelay.log"
        monkeypatch.setattr(logging_module, "LOG_ENABLED", True)
        monkeypatch.setattr(logging_module, "LOG_FILE", log_file)

        logging_module.log_message("deployed translator")
        logging_module.log_command("git rev-parse", 128)
        for handler in logging.getLogger("subrelay").handlers:
            handler.flush()

        content = log_file.read_text()
        assert "deployed translator" in content
        assert "COMMAND: git rev-parse | EXIT_CODE: 128" in content

    def test_setup_is_cached(self, fresh_logger, monkeypatch):
        monkeypatch.setattr(logging_module, "LOG_ENABLED", False)

        assert logging_module.setup_logging() is logging_module.get_logger()
