"""Tests for logging setup."""

import logging

import pytest

from pykill.config import Settings
from pykill.log_setup import setup_logging, teardown_logging


@pytest.fixture(autouse=True)
def clean_logging():
    """Detach the file handler after each test."""
    yield
    teardown_logging()
    logging.getLogger("pykill").setLevel(logging.NOTSET)


def test_logs_to_file(tmp_path):
    """Test records from pykill modules end up in the log file."""
    log_file = tmp_path / "logs" / "pykill.log"
    handler = setup_logging(Settings(log_file=log_file, log_level="INFO"))

    logging.getLogger("pykill.signals").info("Sent SIGTERM to 42")
    handler.flush()

    content = log_file.read_text()
    assert "Sent SIGTERM to 42" in content
    assert "pykill.signals" in content


def test_level_filters(tmp_path):
    """Test records below the configured level are dropped."""
    log_file = tmp_path / "pykill.log"
    handler = setup_logging(Settings(log_file=log_file, log_level="WARNING"))

    logging.getLogger("pykill.procfs").debug("Could not read stat of 7")
    handler.flush()

    assert "stat of 7" not in log_file.read_text()


def test_setup_once(tmp_path):
    """Test repeated setup does not add a second handler."""
    settings = Settings(log_file=tmp_path / "pykill.log")
    first = setup_logging(settings)
    second = setup_logging(settings)

    assert first is second
    assert logging.getLogger("pykill").handlers.count(first) == 1
