import pytest

from report_config import (
    DEFAULT_TELEMETRY_API_BASE,
    ReportConfigError,
    config_from_env,
    parse_recipients,
)


_ENV_KEYS = [
    "AI_APP_ID",
    "AI_APP_KEY",
    "SENDGRID_API_KEY",
    "AzureWebJobsSendGridApiKey",
    "TELEMETRY_API_BASE",
    "TELEMETRY_TIMEOUT",
    "SENDGRID_API_URL",
    "REPORT_FROM_EMAIL",
    "REPORT_TO",
    "REPORT_TIMEZONE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_reads_secrets_and_settings(monkeypatch):
    monkeypatch.setenv("AI_APP_ID", "app-1")
    monkeypatch.setenv("AI_APP_KEY", "key-1")
    monkeypatch.setenv("SENDGRID_API_KEY", "sg-1")
    monkeypatch.setenv("TELEMETRY_API_BASE", "https://telemetry.example.test/v1/apps/")
    monkeypatch.setenv("TELEMETRY_TIMEOUT", "12.5")
    monkeypatch.setenv("REPORT_TO", "a@example.test, b@example.test,")
    monkeypatch.setenv("REPORT_TIMEZONE", "America/New_York")

    config = config_from_env()

    assert config.telemetry_app_id == "app-1"
    assert config.telemetry_api_key == "key-1"
    assert config.mail_api_key == "sg-1"
    assert config.telemetry_api_base == "https://telemetry.example.test/v1/apps"
    assert config.telemetry_timeout == 12.5
    assert config.to_addresses == ["a@example.test", "b@example.test"]
    assert config.tzinfo.key == "America/New_York"


def test_missing_secrets_are_not_fatal(caplog):
    config = config_from_env()

    assert config.telemetry_app_id == ""
    assert config.telemetry_api_base == DEFAULT_TELEMETRY_API_BASE
    assert "AI_APP_KEY is not set" in caplog.text


def test_legacy_sendgrid_key_name(monkeypatch):
    monkeypatch.setenv("AzureWebJobsSendGridApiKey", "legacy")
    assert config_from_env().mail_api_key == "legacy"


def test_bad_timeout_is_rejected(monkeypatch):
    monkeypatch.setenv("TELEMETRY_TIMEOUT", "soon")
    with pytest.raises(ReportConfigError):
        config_from_env()


def test_unknown_timezone_is_rejected(monkeypatch):
    monkeypatch.setenv("REPORT_TIMEZONE", "Nowhere/Special")
    with pytest.raises(ReportConfigError):
        config_from_env()


def test_parse_recipients():
    assert parse_recipients("") == []
    assert parse_recipients(" x@example.test ,,y@example.test") == ["x@example.test", "y@example.test"]
