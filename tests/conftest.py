# conftest.py
# SPDX-License-Identifier: MIT
import logging

import pytest

from sliderule.core.log import PACKAGE_LOGGER_NAME
from sliderule.core.platform import PlatformInfo


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """CLI runs attach handlers and turn off propagation; undo that per test."""
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def posix():
    return PlatformInfo.for_os("Linux")


@pytest.fixture
def windows():
    return PlatformInfo.for_os("Windows")
