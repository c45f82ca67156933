"""Tests for structlog configuration."""

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from insight_core.config import LoggingConfig
from insight_core.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()


def test_json_renderer(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="INFO", format="json"))
    structlog.get_logger("insight_core.tests").info("snapshot_finished", patterns=2)

    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["event"] == "snapshot_finished"
    assert payload["patterns"] == 2
    assert payload["level"] == "info"
    assert payload["logger"] == "insight_core.tests"


def test_level_filters_records(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="ERROR", format="console"))
    assert logging.getLogger().level == logging.ERROR

    structlog.get_logger("insight_core.tests").info("meal_parsed")
    assert "meal_parsed" not in capsys.readouterr().out
