"""Tests for logging configuration."""

import json
import logging

import pytest
import structlog

from paramiyonet.log import configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


def test_json_events_go_to_stderr(capsys):
    configure_logging(level="INFO", fmt="json")

    structlog.get_logger().info("card_payment_recorded", amount="600")

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "card_payment_recorded"
    assert event["amount"] == "600"
    assert event["level"] == "info"


def test_level_filters_events(capsys):
    configure_logging(level="WARNING")

    structlog.get_logger().info("quiet_event")
    structlog.get_logger().warning("loud_event")

    err = capsys.readouterr().err
    assert "quiet_event" not in err
    assert "loud_event" in err
