"""Tests for contextual logging and secret masking."""

import logging
import uuid

import pytest

from mcp_xray.logging_config import (
    ContextualLogger,
    LoggingContextManager,
    log_operation,
    setup_logger,
)
from mcp_xray.utils.logging import mask_sensitive


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def contextual_logger():
    logger = ContextualLogger(f"test-{uuid.uuid4().hex[:8]}")
    handler = ListHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger, handler


def test_records_without_context(contextual_logger):
    logger, handler = contextual_logger

    logger.info("hello")

    assert handler.records[0].context == "no-context"


def test_records_carry_context(contextual_logger):
    logger, handler = contextual_logger
    logger.set_context(project="DEMO", test="DEMO-1")

    logger.info("hello")

    assert handler.records[0].context == "project=DEMO,test=DEMO-1"
    logger.clear_context()
    logger.info("again")
    assert handler.records[1].context == "no-context"


def test_log_operation_restores_context(contextual_logger):
    logger, handler = contextual_logger
    logger.set_context(outer="yes")

    with log_operation(logger, "new_test", trace_id="abc", project="DEMO"):
        logger.info("inside")

    logger.info("after")
    inside = [r for r in handler.records if r.getMessage() == "inside"][0]
    assert "operation=new_test" in inside.context
    assert "trace_id=abc" in inside.context
    assert "project=DEMO" in inside.context
    assert handler.records[-1].context == "outer=yes"


def test_log_operation_logs_start_and_completion(contextual_logger):
    logger, handler = contextual_logger

    with log_operation(logger, "resolve_folder"):
        pass

    messages = [(r.levelno, r.getMessage()) for r in handler.records]
    assert messages[0] == (logging.INFO, "Operation started: resolve_folder")
    assert messages[1][0] == logging.DEBUG
    assert messages[1][1].startswith("Operation completed: resolve_folder in ")


def test_log_operation_logs_failure_and_reraises(contextual_logger):
    logger, handler = contextual_logger

    with pytest.raises(RuntimeError, match="boom"):
        with log_operation(logger, "update_test"):
            raise RuntimeError("boom")

    failure = handler.records[-1]
    assert failure.levelno == logging.ERROR
    assert "Operation failed: update_test" in failure.getMessage()
    assert failure.getMessage().endswith("boom")


def test_log_operation_accepts_plain_logger():
    logger = logging.getLogger(f"plain-{uuid.uuid4().hex[:8]}")

    with log_operation(logger, "plain") as operation:
        pass

    assert isinstance(operation, LoggingContextManager)
    assert len(operation.trace_id) == 8


def test_setup_logger_does_not_stack_handlers():
    name = f"setup-{uuid.uuid4().hex[:8]}"

    setup_logger(name, level="DEBUG")
    logger = setup_logger(name, level="WARNING")

    assert isinstance(logger, ContextualLogger)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    assert logger.propagate is False


def test_setup_logger_writes_file(tmp_path):
    name = f"file-{uuid.uuid4().hex[:8]}"

    logger = setup_logger(name, level="INFO", log_to_file=True, log_dir=str(tmp_path))
    logger.info("written to disk")
    for handler in logger.handlers:
        handler.flush()

    assert len(logger.handlers) == 2
    content = (tmp_path / f"{name}.log").read_text()
    assert "written to disk" in content
    assert "[no-context]" in content
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "Not Provided"),
        ("", "Not Provided"),
        ("short", "*****"),
        ("abcdefghijkl", "abcd********"),
    ],
)
def test_mask_sensitive(value, expected):
    assert mask_sensitive(value) == expected
