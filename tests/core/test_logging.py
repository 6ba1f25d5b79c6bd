"""
日志配置测试
"""
import json
import logging

import structlog

from core.config import LoggingSettings
from logging_config import get_logger, setup_logging
from logging_config.logging import NOISY_LOGGERS


def marked_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, "_molview_handler", None)]


class TestSetupLogging:
    """日志配置测试"""

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(settings=LoggingSettings(format="console"))
        setup_logging(settings=LoggingSettings(format="console"))
        assert len(marked_handlers()) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "molview.log"
        setup_logging(log_format="json", log_file=str(log_file))
        get_logger("tests.logging").info("molecule_created", molecule_id=7)
        for handler in marked_handlers():
            handler.flush()

        event = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert event["event"] == "molecule_created"
        assert event["molecule_id"] == 7
        assert event["service"] == "molview"
        assert event["level"] == "info"

        setup_logging(settings=LoggingSettings(format="console"))

    def test_third_party_loggers_quieted(self):
        setup_logging(level="DEBUG", log_format="console")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_request_id_is_merged(self, tmp_path):
        log_file = tmp_path / "request.log"
        setup_logging(log_format="json", log_file=str(log_file))
        structlog.contextvars.bind_contextvars(request_id="req_123")
        try:
            get_logger("tests.logging").info("chat_created")
        finally:
            structlog.contextvars.clear_contextvars()
        for handler in marked_handlers():
            handler.flush()

        event = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert event["request_id"] == "req_123"

        setup_logging(settings=LoggingSettings(format="console"))
