"""
Tests for log formatting and logging setup
"""
import json
import sys
import logging

import pytest

from config.logging_config import ContextFormatter, JSONFormatter, setup_logging


def _record(msg="Order created", exc_info=None, **extra):
    record = logging.LogRecord("orders.service", logging.INFO, __file__, 10, msg, None, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestFormatters:
    def test_json_includes_context(self):
        line = JSONFormatter().format(_record(retailer_id="r1", order_id="o1", unrelated="x"))
        data = json.loads(line)
        assert data["message"] == "Order created"
        assert data["level"] == "INFO"
        assert data["retailer_id"] == "r1"
        assert data["order_id"] == "o1"
        assert "unrelated" not in data

    def test_json_includes_exception(self):
        try:
            raise ValueError("bad row")
        except ValueError:
            record = _record(exc_info=sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad row" in data["exception"]

    def test_text_appends_context_pairs(self):
        line = ContextFormatter().format(_record(retailer_id="r1", status_code=201))
        assert line.endswith("Order created [retailer_id=r1 status_code=201]")

    def test_text_without_context_is_plain(self):
        line = ContextFormatter().format(_record())
        assert line.endswith(" - orders.service - INFO - Order created")


class TestSetupLogging:
    def test_file_handler_writes_json(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "app.log"
        setup_logging(level="DEBUG", json_format=False, log_file=str(log_file))

        logging.getLogger("retailer.router").info("Theme changed", extra={"retailer_id": "r9"})
        for handler in restore_root_logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "Theme changed"
        assert entry["retailer_id"] == "r9"
        assert restore_root_logger.level == logging.DEBUG

    def test_quiets_sqlalchemy(self, restore_root_logger):
        setup_logging(level="INFO", json_format=True)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)
