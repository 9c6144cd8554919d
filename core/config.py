"""Kiosk configuration.

Settings are read from environment variables, with a `.env` file at the
repository root loaded first if it exists.

Variables:
- KIOSK_DB_PATH: SQLite database file (default "kiosk.db")
- KIOSK_MIN_REWARD / KIOSK_MAX_REWARD: incentive band in minor units
- KIOSK_DAILY_RETURN_CAP: accepted returns per customer/item/day before warning
- KIOSK_ENFORCE_DAILY_CAP: reject returns over the cap instead of warning
- KIOSK_RETURN_CREDIT_RATIO: share of an item's savings credited on return
- KIOSK_FULFILLMENT_MODE: "direct" (default) or "dispense"
- KIOSK_DISPENSE_SUCCESS_RATE / KIOSK_DISPENSE_MAX_ATTEMPTS: dispense simulation
- KIOSK_RECEIPT_SEPARATOR: separator inside receipt return codes
- KIOSK_LOG_LEVEL / KIOSK_LOG_JSON: logging setup
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv


ENV_PATH = Path(__file__).resolve().parents[1] / ".env"

FULFILLMENT_MODES = ("direct", "dispense")

T = TypeVar("T")


def _env(name: str, default: T, parse: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except ValueError as e:
        raise ValueError(f"{name} has an invalid value {raw!r}: {e}") from e


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError("expected a boolean")


@dataclass
class KioskSettings:
    """Runtime configuration for the kiosk core and API."""
    db_path: str = "kiosk.db"
    min_reward: int = 500
    max_reward: int = 1500
    daily_return_cap: int = 5
    enforce_daily_cap: bool = False
    return_credit_ratio: float = 0.8
    fulfillment_mode: str = "direct"
    dispense_success_rate: float = 0.8
    dispense_max_attempts: int = 3
    receipt_separator: str = "|"
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self):
        if self.min_reward < 0 or self.max_reward < self.min_reward:
            raise ValueError(
                f"Reward band must satisfy 0 <= min <= max, got {self.min_reward}-{self.max_reward}"
            )
        if self.fulfillment_mode not in FULFILLMENT_MODES:
            raise ValueError(
                f"Fulfillment mode must be one of {FULFILLMENT_MODES}, got {self.fulfillment_mode!r}"
            )
        if not 0.0 <= self.dispense_success_rate <= 1.0:
            raise ValueError("Dispense success rate must be between 0 and 1")
        if self.dispense_max_attempts < 1:
            raise ValueError("Dispense max attempts must be at least 1")
        if not self.receipt_separator:
            raise ValueError("Receipt separator must not be empty")

    @classmethod
    def from_env(cls, env_path: Optional[Path] = ENV_PATH) -> "KioskSettings":
        """Build settings from the environment (and `.env` if present)."""
        if env_path is not None and Path(env_path).exists():
            load_dotenv(env_path)

        defaults = cls()
        return cls(
            db_path=_env("KIOSK_DB_PATH", defaults.db_path, str),
            min_reward=_env("KIOSK_MIN_REWARD", defaults.min_reward, int),
            max_reward=_env("KIOSK_MAX_REWARD", defaults.max_reward, int),
            daily_return_cap=_env("KIOSK_DAILY_RETURN_CAP", defaults.daily_return_cap, int),
            enforce_daily_cap=_env("KIOSK_ENFORCE_DAILY_CAP", defaults.enforce_daily_cap, _parse_bool),
            return_credit_ratio=_env("KIOSK_RETURN_CREDIT_RATIO", defaults.return_credit_ratio, float),
            fulfillment_mode=_env("KIOSK_FULFILLMENT_MODE", defaults.fulfillment_mode, str.lower),
            dispense_success_rate=_env("KIOSK_DISPENSE_SUCCESS_RATE", defaults.dispense_success_rate, float),
            dispense_max_attempts=_env("KIOSK_DISPENSE_MAX_ATTEMPTS", defaults.dispense_max_attempts, int),
            receipt_separator=_env("KIOSK_RECEIPT_SEPARATOR", defaults.receipt_separator, str),
            log_level=_env("KIOSK_LOG_LEVEL", defaults.log_level, str.upper),
            log_json=_env("KIOSK_LOG_JSON", defaults.log_json, _parse_bool),
        )
