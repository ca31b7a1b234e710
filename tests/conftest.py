"""Shared pytest configuration for sugarbit tests."""

import logging

import pytest

from sugarbit.core.config import clear_config_cache
from sugarbit.core.logging import set_tick_context
from tests.fixtures import *  # noqa: F401,F403


@pytest.fixture(autouse=True)
def _fresh_config():
    """Keep cached config from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo whatever setup_logging did during a test."""
    root_level = logging.getLogger().level
    yield
    logger = logging.getLogger("sugarbit")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logging.getLogger().setLevel(root_level)
    set_tick_context(None)
