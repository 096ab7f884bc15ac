"""Unit tests for logging configuration."""

import json
import logging

import pytest

from userauth.logging_config import (
    HANDLER_NAME,
    REDACTED,
    ContextFilter,
    DevFormatter,
    JsonFormatter,
    configure_logging,
    request_id_var,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("userauth.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def root_logger():
    """Restore root handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestContextFilter:
    """Tests for ContextFilter."""

    def test_masks_credentials(self):
        record = _record(token="eyJ.secret.sig", new_password="pw2", user_id="u1")

        assert ContextFilter().filter(record) is True

        assert record.token == REDACTED
        assert record.new_password == REDACTED
        assert record.user_id == "u1"

    def test_stamps_request_id(self):
        reset = request_id_var.set("req-42")
        try:
            record = _record()
            ContextFilter().filter(record)
        finally:
            request_id_var.reset(reset)

        assert record.request_id == "req-42"

    def test_default_request_id(self):
        record = _record()
        ContextFilter().filter(record)

        assert record.request_id == "-"


class TestFormatters:
    """Tests for JsonFormatter and DevFormatter."""

    def test_json_includes_extras_and_request_id(self):
        record = _record(user_id="u1", request_id="req-1")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "hello world"
        assert payload["user_id"] == "u1"
        assert payload["request_id"] == "req-1"
        assert "args" not in payload

    def test_json_never_emits_credentials(self):
        record = _record(password_hash="$2b$10$abc", password="pw1")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["password_hash"] == REDACTED
        assert payload["password"] == REDACTED

    def test_json_stringifies_unserializable_values(self):
        payload = json.loads(JsonFormatter().format(_record(fields={1, 2})))

        assert isinstance(payload["fields"], str)

    def test_dev_format_appends_extras(self):
        line = DevFormatter().format(_record(user_id="u1"))

        assert "req=-" in line
        assert line.endswith("hello world user_id=u1")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_repeated_calls_install_one_handler(self, root_logger):
        configure_logging()
        configure_logging(environment="production")

        ours = [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]
        assert len(ours) == 1
        assert isinstance(ours[0].formatter, JsonFormatter)

    def test_leaves_foreign_handlers(self, root_logger):
        foreign = logging.NullHandler()
        root_logger.addHandler(foreign)

        configure_logging()

        assert foreign in root_logger.handlers

    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({"log_level": "warning"}, logging.WARNING),
            ({"log_level": "bogus"}, logging.INFO),
            ({"log_level": "ERROR", "debug": True}, logging.DEBUG),
        ],
    )
    def test_levels(self, root_logger, kwargs, expected):
        handler = configure_logging(**kwargs)

        assert root_logger.level == expected
        assert handler.level == expected
