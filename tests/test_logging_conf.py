"""Tests for logging setup."""

import logging

from bcv_rates.logging_conf import setup_logging


def test_setup_logging_sets_root_and_quiets_urllib3() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging(logging.DEBUG)

        assert root.level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.INFO

        setup_logging(logging.WARNING)

        assert root.level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root.setLevel(previous)
