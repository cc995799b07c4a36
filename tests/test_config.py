import pytest
from pydantic import ValidationError

from services.config import Settings


def test_defaults(monkeypatch):
    for name in ("PREMIUM_MAX_TOKENS", "BASIC_MAX_TOKENS", "CORS_ORIGINS", "DB_INIT_SCHEMA"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.PREMIUM_MAX_TOKENS == 10000
    assert s.BASIC_MAX_TOKENS == 4000
    assert s.cors_origins == ["*"]
    assert s.DB_INIT_SCHEMA is False


def test_environment_values_are_typed(monkeypatch):
    monkeypatch.setenv("PREMIUM_MAX_TOKENS", "8000")
    monkeypatch.setenv("INSIGHTS_TRIGGER_TIMEOUT", "30.5")
    monkeypatch.setenv("DB_INIT_SCHEMA", "true")
    monkeypatch.setenv("CORS_ORIGINS", "https://app.example, http://localhost:8081")

    s = Settings(_env_file=None)

    assert s.PREMIUM_MAX_TOKENS == 8000
    assert s.INSIGHTS_TRIGGER_TIMEOUT == 30.5
    assert s.DB_INIT_SCHEMA is True
    assert s.cors_origins == ["https://app.example", "http://localhost:8081"]


def test_invalid_value_names_the_variable(monkeypatch):
    monkeypatch.setenv("PREMIUM_MAX_TOKENS", "lots")
    with pytest.raises(ValidationError, match="PREMIUM_MAX_TOKENS"):
        Settings(_env_file=None)


def test_non_positive_budget_rejected(monkeypatch):
    monkeypatch.setenv("BASIC_MAX_TOKENS", "0")
    with pytest.raises(ValidationError, match="BASIC_MAX_TOKENS"):
        Settings(_env_file=None)
