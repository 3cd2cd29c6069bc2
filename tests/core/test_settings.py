from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from core.settings import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "PORTFOLIO_SESSION_ID",
        "PORTFOLIO_QUOTE_PROVIDER",
        "PORTFOLIO_REFRESH_INTERVAL_SECONDS",
        "PORTFOLIO_SESSION_STORE",
        "ALPACA_API_KEY",
        "ALPACA_API_SECRET",
        "ALPACA_DATA_FEED",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.session_id == "default"
    assert settings.quote_provider == "yahoo"
    assert settings.refresh_interval_seconds == 900
    assert settings.session_store == "memory"
    assert settings.performer_limit == 5


def test_reads_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORTFOLIO_SESSION_ID", "alice")
    monkeypatch.setenv("PORTFOLIO_SESSION_STORE", "SQL")
    monkeypatch.setenv("PORTFOLIO_REFRESH_INTERVAL_SECONDS", "60")

    settings = Settings(_env_file=None)

    assert settings.session_id == "alice"
    assert settings.session_store == "sql"
    assert settings.refresh_interval_seconds == 60


def test_rejects_unknown_provider_and_store(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORTFOLIO_QUOTE_PROVIDER", "bloomberg")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)

    monkeypatch.setenv("PORTFOLIO_QUOTE_PROVIDER", "yahoo")
    monkeypatch.setenv("PORTFOLIO_SESSION_STORE", "mongo")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_alpaca_provider_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORTFOLIO_QUOTE_PROVIDER", "alpaca")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)

    monkeypatch.setenv("ALPACA_API_KEY", "key")
    monkeypatch.setenv("ALPACA_API_SECRET", "secret")
    settings = Settings(_env_file=None)
    assert settings.api_key == "key"


def test_rejects_non_positive_refresh_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORTFOLIO_REFRESH_INTERVAL_SECONDS", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_warns_about_unknown_prefixed_env(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setenv("PORTFOLIO_REFRESH_INTERVAL", "5")

    with caplog.at_level(logging.WARNING, logger="core.settings"):
        Settings(_env_file=None)

    assert "PORTFOLIO_REFRESH_INTERVAL" in caplog.text
