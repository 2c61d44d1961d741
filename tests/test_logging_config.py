"""
Test suite for logging_config module
"""

import json
import logging

import pytest

from minibank.logging_config import (
    JSONFormatter, TextFormatter, setup_logging, get_logger, log_action
)


class TestLogging:
    """Test structured logging helpers"""

    def _record(self, message="Deposit posted", **fields):
        record = logging.LogRecord("minibank.ledger", logging.INFO, __file__, 1, message, (), None)
        for key, value in fields.items():
            setattr(record, key, value)
        return record

    def test_json_formatter(self):
        """Test JSON output includes structured fields and drops empty ones"""
        record = self._record(action="deposit", resource="account:1", extra={"amount": "500.00"})

        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["message"] == "Deposit posted"
        assert entry["action"] == "deposit"
        assert entry["resource"] == "account:1"
        assert entry["extra"] == {"amount": "500.00"}
        assert "timestamp" in entry

        bare = json.loads(JSONFormatter().format(self._record()))
        assert "action" not in bare

    def test_json_formatter_keeps_unicode(self):
        """Test owner names are not escaped"""
        line = JSONFormatter().format(self._record("Account created for Ayşe"))
        assert "Ayşe" in line

    def test_text_formatter(self):
        """Test text output appends action and resource"""
        line = TextFormatter().format(self._record(action="withdraw", resource="account:2"))
        assert "Deposit posted" in line
        assert line.endswith("action=withdraw resource=account:2")

    def test_setup_logging(self):
        """Test handler installation is idempotent"""
        logger = setup_logging("DEBUG", logger_name="minibank.test_setup")
        logger = setup_logging("WARNING", logger_name="minibank.test_setup", fmt="text")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, TextFormatter)
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert get_logger("minibank.test_setup") is logger

    def test_setup_logging_rejects_unknown_format(self):
        """Test only json and text formats exist"""
        with pytest.raises(ValueError, match="Unknown log format"):
            setup_logging(fmt="xml")

    def test_log_action(self, caplog):
        """Test log_action attaches structured fields to the record"""
        logger = logging.getLogger("minibank.test_log_action")
        logger.setLevel(logging.INFO)

        with caplog.at_level(logging.INFO, logger="minibank.test_log_action"):
            log_action(
                logger, "info", "Transfer posted",
                action="transfer", resource="account:1", extra={"amount": "300.00"}
            )

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.getMessage() == "Transfer posted"
        assert record.action == "transfer"
        assert record.resource == "account:1"
        assert record.extra == {"amount": "300.00"}

    def test_log_action_respects_level(self, caplog):
        """Test records below the logger level are skipped"""
        logger = logging.getLogger("minibank.test_log_level")
        logger.setLevel(logging.WARNING)

        with caplog.at_level(logging.WARNING, logger="minibank.test_log_level"):
            log_action(logger, "info", "Ignored")

        assert caplog.records == []
