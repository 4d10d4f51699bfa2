"""
Tests for configuration and structured logging
"""

import json
import logging

from vending_machine.config import VendingConfig, reload_config, get_config
from vending_machine.logging_config import JSONFormatter, get_logger, log_action, setup_logging


class TestVendingConfig:
    """Test environment-driven settings"""

    def test_defaults(self):
        config = VendingConfig()

        assert config.currency_code == "THB"
        assert config.default_cash_quantities[1] == 1000
        assert config.default_cancel_reason == "Cancelled by customer"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("VENDING_DATABASE_URL", "memory://")
        monkeypatch.setenv("VENDING_API_PORT", "9000")
        monkeypatch.setenv("VENDING_SEED_ON_STARTUP", "false")

        config = reload_config()

        assert config is get_config()
        assert config.database_url == "memory://"
        assert config.api_port == 9000
        assert config.seed_on_startup is False

        monkeypatch.undo()
        reload_config()


class TestStructuredLogging:
    """Test JSON log formatting"""

    def test_json_formatter(self):
        record = logging.LogRecord("vending.orders", logging.INFO, __file__, 1, "Order created", None, None)
        record.action = "create_order"
        record.resource = "order:1"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "vending.orders"
        assert entry["action"] == "create_order"
        assert "correlation_id" not in entry

    def test_log_action_attaches_fields(self, caplog):
        logger = get_logger("vending.test")

        with caplog.at_level(logging.INFO, logger="vending.test"):
            log_action(logger, "info", "Stock adjusted", action="adjust", extra={"delta_qty": 2})

        record = caplog.records[-1]
        assert record.action == "adjust"
        assert record.extra == {"delta_qty": 2}

    def test_setup_logging_replaces_handlers(self):
        logger = setup_logging("DEBUG", "text", logger_name="vending.setup_test")
        setup_logging("DEBUG", "json", logger_name="vending.setup_test")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.DEBUG
