"""Pruebas de configuración, logging y helpers de seguridad."""

import json
import logging

import pytest

from chatsync.core import security
from chatsync.core.config import ConfigurationError, Settings
from chatsync.core.logging import JSONFormatter, resolve_log_level


def test_accepts_plain_variable_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://db.supabase.test")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    monkeypatch.setenv("CHATBASE_API_KEY", "cb-key")
    monkeypatch.setenv("CHATBASE_BOT_ID", "bot-1")

    config = Settings(_env_file=None)

    assert config.missing_required() == []
    config.ensure_configured()
    assert config.supabase_service_role == "service-key"
    assert config.chatbase_page_size == 50
    assert config.interaction_type == "chatbase_summary"


def test_prefixed_values_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHATSYNC_INTERACTION_TYPE", "chatbot")
    monkeypatch.setenv("CHATSYNC_SYNC_WINDOW_MINUTES", "30")

    config = Settings(_env_file=None)

    assert config.interaction_type == "chatbot"
    assert config.sync_window_minutes == 30


def test_missing_values_are_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "CHATBASE_API_KEY", "CHATBASE_BOT_ID"):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"CHATSYNC_{name}", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE", raising=False)
    monkeypatch.delenv("CHATSYNC_SUPABASE_SERVICE_ROLE", raising=False)

    config = Settings(_env_file=None)

    with pytest.raises(ConfigurationError, match="CHATBASE_API_KEY"):
        config.ensure_configured()


@pytest.mark.parametrize(
    ("value", "expected"),
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("15", 15), ("", logging.INFO), (None, logging.INFO)],
)
def test_resolve_log_level(value, expected) -> None:
    assert resolve_log_level(value) == expected


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord("chatsync.test", logging.INFO, __file__, 1, "recorder.skipped", None, None)
    record.category = "SKIP"
    record.reason = "no_email"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "recorder.skipped"
    assert payload["level"] == "INFO"
    assert payload["category"] == "SKIP"
    assert payload["reason"] == "no_email"


def test_bearer_token_validation() -> None:
    security.verify_bearer_token("abc", "Bearer abc")
    with pytest.raises(security.TokenError):
        security.verify_bearer_token("abc", "Bearer abd")
    with pytest.raises(security.TokenError):
        security.verify_bearer_token("abc", None)


def test_mask_secret() -> None:
    assert security.mask_secret("bot-123456") == "bo***56"
    assert security.mask_secret("abc") == "***"
    assert security.mask_secret(None) is None
