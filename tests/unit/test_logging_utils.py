#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_logging_utils.py
"""Unit tests for logging configuration."""

import logging

import pytest
from rich.logging import RichHandler

from fb2md.logging_utils import CONSOLE_FORMAT, PACKAGE_LOGGER_NAME, configure_logging, resolve_log_level


@pytest.fixture
def restore_package_logger():
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    root = logging.getLogger()
    saved = list(package_logger.handlers), package_logger.level, package_logger.propagate
    root_handlers = list(root.handlers)
    yield package_logger
    for handler in package_logger.handlers:
        if handler not in saved[0]:
            handler.close()
    package_logger.handlers[:] = saved[0]
    package_logger.setLevel(saved[1])
    package_logger.propagate = saved[2]
    assert root.handlers == root_handlers


@pytest.mark.unit
class TestResolveLogLevel:
    """Tests for combining the level flags."""

    @pytest.mark.parametrize(
        "log_level,verbose,trace,expected",
        [
            ("WARNING", False, False, logging.WARNING),
            ("info", False, False, logging.INFO),
            ("WARNING", True, False, logging.DEBUG),
            ("ERROR", True, False, logging.ERROR),
            ("ERROR", False, True, logging.DEBUG),
            (logging.CRITICAL, False, False, logging.CRITICAL),
            ("loud", False, False, logging.WARNING),
        ],
    )
    def test_levels(self, log_level, verbose, trace, expected):
        assert resolve_log_level(log_level, verbose=verbose, trace=trace) == expected


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_handlers_go_on_package_logger(self, restore_package_logger):
        package_logger = configure_logging("info")
        assert package_logger is restore_package_logger
        assert package_logger.level == logging.INFO
        assert package_logger.propagate is False
        assert type(package_logger.handlers[-1]) is logging.StreamHandler

    def test_second_call_replaces_handlers(self, restore_package_logger):
        before = len(restore_package_logger.handlers)
        configure_logging(logging.DEBUG)
        configure_logging(logging.ERROR)
        assert len(restore_package_logger.handlers) == before + 1
        assert restore_package_logger.handlers[-1].level == logging.ERROR

    def test_console_format(self, restore_package_logger):
        package_logger = configure_logging(logging.WARNING)
        assert package_logger.handlers[-1].formatter._fmt == CONSOLE_FORMAT

    def test_trace_format(self, restore_package_logger):
        package_logger = configure_logging(logging.DEBUG, trace_mode=True)
        assert "%(asctime)s" in package_logger.handlers[-1].formatter._fmt

    def test_rich_console_handler(self, restore_package_logger):
        package_logger = configure_logging(logging.INFO, use_rich=True)
        assert isinstance(package_logger.handlers[-1], RichHandler)

    def test_log_file(self, restore_package_logger, tmp_path):
        log_file = tmp_path / "fb2md.log"
        package_logger = configure_logging(logging.INFO, log_file=str(log_file))
        logging.getLogger("fb2md.test").info("hello from test")
        for handler in package_logger.handlers:
            handler.flush()
        assert "hello from test" in log_file.read_text(encoding="utf-8")
        assert "fb2md.test" in log_file.read_text(encoding="utf-8")

    def test_unwritable_log_file_keeps_console(self, restore_package_logger, tmp_path):
        package_logger = configure_logging(logging.INFO, log_file=str(tmp_path / "missing" / "fb2md.log"))
        assert not any(isinstance(h, logging.FileHandler) for h in package_logger.handlers)
        assert len(package_logger.handlers) >= 1
