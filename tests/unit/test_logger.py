from __future__ import annotations

import logging

from app.core.logger import LOGGER_NAME, configure_logging


def test_configure_logging_attaches_handler_once() -> None:
    first = configure_logging("debug")
    second = configure_logging("warning")

    assert first is second
    assert first.name == LOGGER_NAME
    assert len(first.handlers) == 1
    assert first.level == logging.WARNING
    assert first.propagate is False

    configure_logging("info")
