"""Runtime settings shared by both bounded contexts.

Values come from environment variables so that the same code runs unchanged
under tests, local development and production.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    max_order_items: int = 100
    min_order_value: float = 10.0
    overdue_order_hours: int = 24
    high_value_payment_threshold: float = 1000.0
    default_payment_method: str = "BankTransfer"
    dispatch_before_commit: bool = True
    command_timeout_seconds: float = 30.0
    auto_capture_payments: bool = False
    inbox_capacity: int = 10_000
    dead_letter_capacity: int = 1_000
    log_dir: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        env = (os.getenv("ORDERFLOW_ENV") or os.getenv("PROTEAN_ENV") or "development").lower()
        return cls(
            environment=env,
            max_order_items=_env_int("MAX_ORDER_ITEMS", cls.max_order_items),
            min_order_value=_env_float("MIN_ORDER_VALUE", cls.min_order_value),
            overdue_order_hours=_env_int("OVERDUE_ORDER_HOURS", cls.overdue_order_hours),
            high_value_payment_threshold=_env_float(
                "HIGH_VALUE_PAYMENT_THRESHOLD", cls.high_value_payment_threshold
            ),
            default_payment_method=os.getenv("DEFAULT_PAYMENT_METHOD", cls.default_payment_method),
            dispatch_before_commit=_env_bool("DISPATCH_BEFORE_COMMIT", cls.dispatch_before_commit),
            command_timeout_seconds=_env_float("COMMAND_TIMEOUT_SECONDS", cls.command_timeout_seconds),
            auto_capture_payments=_env_bool("AUTO_CAPTURE_PAYMENTS", cls.auto_capture_payments),
            inbox_capacity=_env_int("INBOX_CAPACITY", cls.inbox_capacity),
            dead_letter_capacity=_env_int("DEAD_LETTER_CAPACITY", cls.dead_letter_capacity),
            log_dir=os.getenv("LOG_DIR") or None,
        )

    @property
    def is_production(self) -> bool:
        return self.environment in ("production", "staging")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, read once from the environment."""
    return Settings.from_env()


def reset_settings() -> None:
    get_settings.cache_clear()
