"""Tests for logging setup and tool-call logging helpers."""

import logging
import sys

import pytest

from ergomcp.utils.logging_utils import ROOT_LOGGER_NAME, log_tool_call, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield
    for handler in logger.handlers:
        handler.close()
    logger.handlers, logger.level, logger.propagate = saved[0], saved[1], saved[2]


def test_setup_logging_writes_file_and_keeps_stdout_clean(tmp_path):
    logger = setup_logging(level="DEBUG", log_dir=tmp_path / "logs")

    assert logger.name == ROOT_LOGGER_NAME
    assert logger.propagate is False
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    stream_handlers = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert stream_handlers[0].stream is sys.stderr
    # Console only carries warnings when a log file is written
    assert stream_handlers[0].level == logging.WARNING
    assert list((tmp_path / "logs").glob("ergomcp_*.log"))


def test_setup_logging_without_file(tmp_path):
    logger = setup_logging(level="info", log_dir=None)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.INFO


def test_log_tool_call_masks_password(caplog):
    logger = logging.getLogger("test.tool_calls")

    with caplog.at_level(logging.DEBUG, logger="test.tool_calls"):
        log_tool_call(logger, "deploy_ergo_node", {"version": "latest", "api_key_password": "hunter2"})

    assert "deploy_ergo_node" in caplog.text
    assert "latest" in caplog.text
    assert "hunter2" not in caplog.text
