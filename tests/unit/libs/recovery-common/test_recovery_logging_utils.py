# tests/unit/libs/recovery-common/test_recovery_logging_utils.py
import logging

from pythonjsonlogger import jsonlogger

from recovery_common.logging_utils import (
    CorrelationIdFilter,
    correlation_id_var,
    generate_correlation_id,
    setup_logging,
)


def test_generate_correlation_id_uses_prefix():
    correlation_id = generate_correlation_id("RCV")

    prefix, _, suffix = correlation_id.partition(":")
    assert prefix == "RCV"
    assert len(suffix) == 36


def test_filter_injects_context_ids():
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
    token = correlation_id_var.set("RCV:abc")
    try:
        assert CorrelationIdFilter().filter(record) is True
    finally:
        correlation_id_var.reset(token)

    assert record.correlation_id == "RCV:abc"
    assert record.request_id == "<not-set>"
    assert record.trace_id == "<not-set>"
    assert record.service
    assert record.environment


def test_setup_logging_installs_single_json_handler():
    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    original_level = root_logger.level
    try:
        setup_logging("DEBUG")
        setup_logging("DEBUG")

        assert len(root_logger.handlers) == 1
        handler = root_logger.handlers[0]
        assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
        assert any(isinstance(f, CorrelationIdFilter) for f in handler.filters)
        assert root_logger.level == logging.DEBUG
    finally:
        root_logger.handlers = original_handlers
        root_logger.setLevel(original_level)
