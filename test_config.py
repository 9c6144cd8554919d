"""Configuration Tests - KioskSettings defaults, environment parsing and validation."""

import pytest

from core.config import KioskSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "KIOSK_DB_PATH", "KIOSK_MIN_REWARD", "KIOSK_MAX_REWARD",
        "KIOSK_DAILY_RETURN_CAP", "KIOSK_ENFORCE_DAILY_CAP",
        "KIOSK_RETURN_CREDIT_RATIO", "KIOSK_FULFILLMENT_MODE",
        "KIOSK_DISPENSE_SUCCESS_RATE", "KIOSK_DISPENSE_MAX_ATTEMPTS",
        "KIOSK_RECEIPT_SEPARATOR", "KIOSK_LOG_LEVEL", "KIOSK_LOG_JSON",
    ]:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults():
    settings = KioskSettings.from_env(env_path=None)
    assert settings.db_path == "kiosk.db"
    assert (settings.min_reward, settings.max_reward) == (500, 1500)
    assert settings.daily_return_cap == 5
    assert settings.enforce_daily_cap is False
    assert settings.return_credit_ratio == 0.8
    assert settings.fulfillment_mode == "direct"
    assert settings.receipt_separator == "|"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("KIOSK_DB_PATH", "/tmp/other.db")
    monkeypatch.setenv("KIOSK_MAX_REWARD", "2000")
    monkeypatch.setenv("KIOSK_ENFORCE_DAILY_CAP", "yes")
    monkeypatch.setenv("KIOSK_FULFILLMENT_MODE", "DISPENSE")
    monkeypatch.setenv("KIOSK_LOG_LEVEL", "debug")

    settings = KioskSettings.from_env(env_path=None)
    assert settings.db_path == "/tmp/other.db"
    assert settings.max_reward == 2000
    assert settings.enforce_daily_cap is True
    assert settings.fulfillment_mode == "dispense"
    assert settings.log_level == "DEBUG"


def test_dotenv_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("KIOSK_DAILY_RETURN_CAP=3\nKIOSK_RETURN_CREDIT_RATIO=0.5\n")

    settings = KioskSettings.from_env(env_path=env_file)
    assert settings.daily_return_cap == 3
    assert settings.return_credit_ratio == 0.5


def test_invalid_number_names_variable(monkeypatch):
    monkeypatch.setenv("KIOSK_MIN_REWARD", "lots")
    with pytest.raises(ValueError, match="KIOSK_MIN_REWARD"):
        KioskSettings.from_env(env_path=None)


def test_invalid_fulfillment_mode(monkeypatch):
    monkeypatch.setenv("KIOSK_FULFILLMENT_MODE", "teleport")
    with pytest.raises(ValueError):
        KioskSettings.from_env(env_path=None)


def test_inverted_reward_band():
    with pytest.raises(ValueError):
        KioskSettings(min_reward=900, max_reward=100)
