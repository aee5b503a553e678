"""Tests for logging utilities."""

import pytest
from loguru import logger

from scenetq.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(lambda msg: None, level="DEBUG")


def test_console_level(capsys):
    """Test messages below the level are dropped."""
    setup_logging("WARNING")
    logger.info("hidden message")
    logger.warning("shown message")
    err = capsys.readouterr().err
    assert "hidden message" not in err
    assert "shown message" in err
    assert "WARNING" in err


def test_log_file(tmp_path, capsys):
    """Test a log file sink is added when requested."""
    log_file = tmp_path / "scenetq.log"
    setup_logging("DEBUG", log_file)
    logger.debug("to the file")
    logger.remove()
    assert "to the file" in log_file.read_text()


def test_setup_replaces_handlers(capsys):
    """Test repeated setup does not duplicate output."""
    setup_logging("INFO")
    setup_logging("INFO")
    logger.info("once")
    assert capsys.readouterr().err.count("once") == 1
