# test_log_and_naming.py
# SPDX-License-Identifier: MIT
import io
import logging

import pytest

from sliderule.core.config import LoggingConfig
from sliderule.core.log import configure_logging, get_logger
from sliderule.core.naming import ComponentNameError, component_name_from_url, validate_component_name


def test_configure_logging_sets_logger_level():
    logger = logging.getLogger("sliderule")
    logger.setLevel(logging.WARNING)

    configure_logging(level="DEBUG")

    assert logger.level == logging.DEBUG


def test_configure_logging_writes_to_stream():
    stream = io.StringIO()
    logger = configure_logging(level="INFO", stream=stream, logger_name="sliderule.test.stream")

    get_logger("sliderule.test.stream").info("hello %s", "there")

    assert "INFO sliderule.test.stream: hello there" in stream.getvalue()
    assert logger.propagate is True


def test_logging_config_apply():
    LoggingConfig(level="ERROR", propagate=False, logger_name="sliderule.test.apply").apply()

    logger = logging.getLogger("sliderule.test.apply")
    assert logger.level == logging.ERROR
    assert logger.propagate is False


@pytest.mark.parametrize("name", ["blink", "  led-driver ", "board_v2.1", "Power Supply"])
def test_validate_component_name_accepts(name):
    assert validate_component_name(name) == name.strip()


@pytest.mark.parametrize(
    "name",
    ["", "   ", None, ".", "..", "a/b", "a\\b", "what?", "tab\there", "trailing.", "CON", "lpt1.txt"],
)
def test_validate_component_name_rejects(name):
    with pytest.raises(ComponentNameError):
        validate_component_name(name)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://github.com/someone/blink.git", "blink"),
        ("https://github.com/someone/blink", "blink"),
        ("https://github.com/someone/blink/", "blink"),
        ("git@github.com:someone/led-driver.git", "led-driver"),
        ("someone/power", "power"),
    ],
)
def test_component_name_from_url(url, expected):
    assert component_name_from_url(url) == expected


def test_component_name_from_url_without_name():
    with pytest.raises(ComponentNameError):
        component_name_from_url("https://github.com/")
