"""
Test suite for log formatting and context propagation.

Run with: pytest test_logging_config.py -v
"""

import json
import logging

from logging_config import DevelopmentFormatter, JSONFormatter, get_logger


def make_record(msg: str = "Round starting", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("room", level, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_context_fields_included(self):
        line = JSONFormatter().format(make_record(table_code="ABC123", player_id="p1"))
        data = json.loads(line)
        assert data["message"] == "Round starting"
        assert data["table_code"] == "ABC123"
        assert data["player_id"] == "p1"
        assert "source" not in data

    def test_suits_stay_readable(self):
        line = JSONFormatter().format(make_record("Dealt 10♠"))
        assert "10♠" in line

    def test_errors_carry_source(self):
        data = json.loads(JSONFormatter().format(make_record(level=logging.ERROR)))
        assert data["source"].endswith(":10")


class TestDevelopmentFormatter:

    def test_context_tag(self):
        line = DevelopmentFormatter().format(make_record(table_code="ABC123", player_id="0123456789"))
        assert "[table=ABC123, player=01234567]" in line

    def test_no_context(self):
        line = DevelopmentFormatter().format(make_record())
        assert "table=" not in line
        assert line.endswith("room - Round starting")


class TestContextLogger:

    def test_context_and_per_call_extra_merge(self, caplog):
        log = get_logger("room").with_context(table_code="ABC123")
        with caplog.at_level(logging.INFO, logger="room"):
            log.info("Actor seated", extra={"player_id": "p1"})

        record = caplog.records[-1]
        assert record.table_code == "ABC123"
        assert record.player_id == "p1"
