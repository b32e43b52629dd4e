import json
import logging
from pathlib import Path

import pytest
import structlog

from eventhub.config import RegistryConfig
from eventhub.events import EventRegistry
from eventhub.logging_config import configure_logging, get_logger


def test_defaults():
    config = RegistryConfig()
    assert config.check_types is True
    assert config.log_level == "INFO"
    assert config.json_logs is False
    assert config.log_file is None


def test_log_level_is_normalized_and_validated():
    assert RegistryConfig(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValueError):
        RegistryConfig(log_level="chatty")


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("EVENTHUB_CHECK_TYPES", "off")
    monkeypatch.setenv("EVENTHUB_LOG_LEVEL", "warning")
    monkeypatch.setenv("EVENTHUB_JSON_LOGS", "1")
    monkeypatch.setenv("EVENTHUB_LOG_FILE", str(tmp_path / "hub.log"))
    config = RegistryConfig.from_env()
    assert config.check_types is False
    assert config.log_level == "WARNING"
    assert config.json_logs is True
    assert config.log_file == Path(tmp_path / "hub.log")


def test_from_env_rejects_bad_flag(monkeypatch):
    monkeypatch.setenv("EVENTHUB_CHECK_TYPES", "maybe")
    with pytest.raises(ValueError):
        RegistryConfig.from_env()


@pytest.fixture
def restore_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()


def test_json_logs_written_to_file(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "hub.log"
    configure_logging(RegistryConfig(log_level="DEBUG", json_logs=True, log_file=log_file))
    get_logger("tests.config").info("config_applied", source="test")
    assert log_file.exists()


def test_registry_operations_log_at_debug(tmp_path, restore_logging):
    log_file = tmp_path / "hub.log"
    config = RegistryConfig(log_level="DEBUG", json_logs=True, log_file=log_file)
    configure_logging(config)
    registry = EventRegistry(config)
    seen = []

    def log(msg: str):
        seen.append(msg)

    registry.subscribe("Error", log)
    assert registry.publish("Error", ["disk full"]) == 1
    assert registry.unsubscribe("Error", log) is True
    registry.subscribe("Warning", log)
    registry.clear()
    assert registry.publish("Warning", ["ignored"]) == 0
    assert seen == ["disk full"]

    for handler in logging.getLogger().handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    lines = [json.loads(line) for line in text.splitlines() if line.startswith("{")]
    events = [line["event"] for line in lines]
    assert "event_subscribed" in events
    assert "event_unsubscribed" in events
    assert "event_handlers_cleared" in events
    subscribed = next(line for line in lines if line["event"] == "event_subscribed")
    assert subscribed["event_name"] == "Error"
    assert subscribed["level"] == "debug"
