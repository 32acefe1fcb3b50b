from __future__ import annotations

import logging

import pytest

from safepath.core.config import get_settings


@pytest.fixture(autouse=True)
def _reset_runtime_state():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

    logger = logging.getLogger("safepath")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
