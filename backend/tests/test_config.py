"""Tests for settings and logging configuration."""

import logging

import pytest

from pricebook.core.config import Settings, configure_logging


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def test_default_settings():
    settings = Settings()
    assert settings.DEFAULT_CURRENCY == "THB"
    assert settings.SUGGESTION_THRESHOLD == 0.5
    assert settings.SUGGESTION_LIMIT == 50


def test_log_level_applied(restore_root_level):
    configure_logging("DEBUG")
    logger = logging.getLogger("pricebook.services.import_session")
    assert logger.isEnabledFor(logging.INFO)
    assert logger.isEnabledFor(logging.DEBUG)


def test_log_level_filters(restore_root_level):
    configure_logging("warning")
    logger = logging.getLogger("pricebook.services.import_session")
    assert not logger.isEnabledFor(logging.INFO)
    assert logger.isEnabledFor(logging.WARNING)
