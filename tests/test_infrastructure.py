"""
Tests for configuration, logging, metrics and the CLI.
"""

import json
import logging

import pytest
from typer.testing import CliRunner

from chat_relay.cli import app as cli_app
from chat_relay.components.core import constants as constants_module
from chat_relay.components.core.constants import validate_websocket_origin
from chat_relay.components.core.context import sanitize_log_data
from chat_relay.components.metrics.collector import MetricsCollector
from shared.config.logging import DevelopmentFormatter, StructuredFormatter, get_logger
from shared.config.settings import Settings
from shared.infrastructure.correlation import (
    ConnectionIdFilter,
    bind_connection_id,
    get_connection_id,
    reset_connection_id,
)
from shared.utils.exceptions import DeliveryFailedError, NotNamedError


class TestSettings:

    def test_defaults(self):
        s = Settings()

        assert s.relay_port == 3000
        assert s.relay_outbox_size == 256
        assert s.allowed_origin_list == []

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RELAY_PORT", "4100")
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://chat.example, https://www.chat.example")

        s = Settings()

        assert s.relay_port == 4100
        assert s.allowed_origin_list == ["https://chat.example", "https://www.chat.example"]

    def test_development_config_is_valid(self):
        assert Settings(environment="development").validate_production_config() == []

    def test_production_requires_origins_and_no_debug(self):
        problems = Settings(environment="production", debug=True).validate_production_config()

        assert len(problems) == 2
        assert any("DEBUG" in p for p in problems)
        assert any("ALLOWED_ORIGINS" in p for p in problems)

    def test_non_positive_limits_reported(self):
        problems = Settings(relay_outbox_size=0, relay_send_timeout=0).validate_production_config()

        assert len(problems) == 2


class TestOriginValidation:

    def test_configured_origin(self):
        s = Settings(environment="production", allowed_origins="https://chat.example")

        assert validate_websocket_origin("https://chat.example", s)
        assert not validate_websocket_origin("http://localhost:5173", s)

    def test_missing_origin_only_in_development(self):
        assert validate_websocket_origin(None, Settings(environment="development"))
        assert not validate_websocket_origin(None, Settings(environment="production"))

    def test_rejection_logged_on_module_logger(self, caplog):
        s = Settings(environment="production", allowed_origins="https://chat.example")

        with caplog.at_level(logging.WARNING, logger="chat_relay.components.core.constants"):
            validate_websocket_origin("http://evil.example", s)
            validate_websocket_origin("http://evil.example", s)

        rejected = [r for r in caplog.records if r.getMessage() == "Handshake origin not allowed"]
        assert len(rejected) == 2
        assert {r.name for r in rejected} == {"chat_relay.components.core.constants"}
        assert constants_module.logger.name == "chat_relay.components.core.constants"


class TestSanitizeLogData:

    def test_strips_newlines_and_control_characters(self):
        assert sanitize_log_data("evil\nFAKE LOG\x00") == "evilFAKE LOG"

    def test_strips_direction_overrides(self):
        assert sanitize_log_data("ab\u202ecd\u200b") == "abcd"

    def test_escapes_quotes(self):
        assert sanitize_log_data('say "hi"') == 'say \\"hi\\"'

    def test_truncates(self):
        assert sanitize_log_data("a" * 500, max_length=10) == "a" * 10 + "..."

    def test_empty(self):
        assert sanitize_log_data("") == ""


class TestStructuredLogging:

    def _record(self, caplog, **context):
        logger = get_logger("tests.logging")
        with caplog.at_level(logging.INFO, logger="tests.logging"):
            logger.info("Client connected", **context)
        return caplog.records[-1]

    def test_keyword_context_becomes_extra_data(self, caplog):
        record = self._record(caplog, online=3)

        assert record.extra_data == {"online": 3}

    def test_json_formatter(self, caplog):
        record = self._record(caplog, online=3)
        record.connection_id = "abc123"

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Client connected"
        assert data["data"] == {"online": 3}
        assert data["connection_id"] == "abc123"

    def test_development_formatter(self, caplog):
        record = self._record(caplog, online=3)
        record.connection_id = "-"

        line = DevelopmentFormatter().format(record)

        assert "Client connected" in line
        assert "online=3" in line

    def test_connection_id_filter(self, caplog):
        record = self._record(caplog)
        token = bind_connection_id("conn-1")
        try:
            ConnectionIdFilter().filter(record)
            assert get_connection_id() == "conn-1"
        finally:
            reset_connection_id(token)

        assert record.connection_id == "conn-1"
        assert get_connection_id() == ""

    def test_errors_log_themselves(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="shared.utils.exceptions"):
            NotNamedError("c1")
            DeliveryFailedError("c2", "outbox full")

        levels = {r.extra_data["error_kind"]: r.levelno for r in caplog.records}
        assert levels == {"NotNamed": logging.INFO, "DeliveryFailed": logging.DEBUG}


class TestMetricsCollector:

    def test_snapshot_and_reset(self):
        metrics = MetricsCollector()
        metrics.increment_broadcast(sent=2, failed=1)
        metrics.record_rejection("NotNamed")
        metrics.record_rejection("NotNamed")

        previous = metrics.reset()

        assert previous["broadcasts_total"] == 1
        assert previous["broadcasts_with_failures"] == 1
        assert previous["rejected_NotNamed"] == 2
        assert metrics.get_snapshot()["broadcasts_total"] == 0
        assert metrics.rejections("NotNamed") == 0


class TestCli:

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_show_config(self, runner):
        result = runner.invoke(cli_app, ["show-config"])

        assert result.exit_code == 0
        assert "relay_port" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli_app, ["version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
