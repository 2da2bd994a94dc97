"""Terminal configuration from environment variables.

Environment variables:
    POS_STORE_PATH: JSON store file; empty keeps data in memory
    POS_REDEMPTION_RATE_CENTS: value of one loyalty point (default 50)
    POS_EARN_RATE_PERCENT: percent of the paid amount earned as points (default 30)
    POS_LOG_LEVEL: debug, info, warning or error (default info)
    POS_SEED: seed initial data on first start (default true)
    POS_TOP_PRODUCTS: number of best sellers on the dashboard (default 5)
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError
from .loyalty import EARN_RATE_PERCENT, REDEMPTION_RATE_CENTS
from .reports import TOP_PRODUCTS

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _int_env(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer, got {raw!r}", e) from e
    if value < minimum:
        raise ValidationError(f"{name} must be at least {minimum}, got {value}")
    return value


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    store_path: Optional[str] = None
    redemption_rate_cents: int = REDEMPTION_RATE_CENTS
    earn_rate_percent: int = EARN_RATE_PERCENT
    log_level: str = "info"
    seed: bool = True
    top_products: int = TOP_PRODUCTS

    @property
    def log_level_number(self) -> int:
        return LOG_LEVELS[self.log_level]

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        log_level = env.get("POS_LOG_LEVEL", "info").strip().lower() or "info"
        if log_level not in LOG_LEVELS:
            raise ValidationError(f"POS_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return cls(
            store_path=env.get("POS_STORE_PATH", "").strip() or None,
            redemption_rate_cents=_int_env(
                env, "POS_REDEMPTION_RATE_CENTS", REDEMPTION_RATE_CENTS, 1
            ),
            earn_rate_percent=_int_env(env, "POS_EARN_RATE_PERCENT", EARN_RATE_PERCENT, 0),
            log_level=log_level,
            seed=_bool_env(env, "POS_SEED", True),
            top_products=_int_env(env, "POS_TOP_PRODUCTS", TOP_PRODUCTS, 1),
        )
