"""Unit tests for logging infrastructure."""
import pytest
import logging
from pathlib import Path
from yoga.infrastructure.logging import setup_logging


def test_setup_logging_creates_log_file(tmp_path):
    """Test that setup_logging writes .yoga.log into the library root."""
    logger = setup_logging(tmp_path, debug=False)

    assert isinstance(logger, logging.Logger)
    assert (tmp_path / ".yoga.log").exists()


def test_setup_logging_debug_mode(tmp_path):
    logger = setup_logging(tmp_path, debug=True)
    assert logger.getEffectiveLevel() == logging.DEBUG


def test_setup_logging_normal_mode(tmp_path):
    logger = setup_logging(tmp_path, debug=False)
    assert logger.getEffectiveLevel() == logging.INFO


def test_setup_logging_custom_path(tmp_path):
    """Test that an explicit log path wins and its directory is created."""
    log_path = tmp_path / "logs" / "nested" / "yoga.log"

    logger = setup_logging(tmp_path, log_path=log_path)
    logger.info("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_path.exists()
    assert "hello from test" in log_path.read_text()
    assert not (tmp_path / ".yoga.log").exists()


def test_setup_logging_format(tmp_path):
    setup_logging(tmp_path)
    logging.getLogger("yoga.test").warning("formatted message")
    for handler in logging.getLogger().handlers:
        handler.flush()

    line = (tmp_path / ".yoga.log").read_text().splitlines()[-1]
    assert " - WARNING - formatted message" in line
