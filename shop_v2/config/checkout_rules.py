# shop_v2/config/checkout_rules.py
from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer (got {raw!r})")


def _float_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number (got {raw!r})")


# ============================================================
# Delivery scheduling
# ============================================================

# Orders placed before this hour (shop local time) ship the next day.
CUTOFF_HOUR = _int_env("DELIVERY_CUTOFF_HOUR", 18)

MAX_FUTURE_DAYS = _int_env("DELIVERY_MAX_FUTURE_DAYS", 14)

SHOP_TIMEZONE = ZoneInfo(os.getenv("SHOP_TIMEZONE", "Africa/Accra"))

# Optional JSON file with extra holiday entries.
HOLIDAYS_PATH = os.getenv("HOLIDAYS_PATH", "").strip() or None

if not 0 <= CUTOFF_HOUR <= 23:
    raise RuntimeError("DELIVERY_CUTOFF_HOUR must be between 0 and 23")

if MAX_FUTURE_DAYS < 1:
    raise RuntimeError("DELIVERY_MAX_FUTURE_DAYS must be at least 1")


# ============================================================
# Money
# ============================================================

TAX_RATE = 0.075

CURRENCY = "GHS"
CURRENCY_SYMBOL = "GH₵"


# ============================================================
# External order API
# ============================================================

ORDER_API_BASE_URL = os.getenv(
    "ORDER_API_BASE_URL", "http://localhost:3001/api/v1"
).rstrip("/")

ORDER_API_TIMEOUT = _float_env("ORDER_API_TIMEOUT", 10.0)


# ============================================================
# Client state storage
# ============================================================

DEFAULT_STATE_DB = "shop_state.db"


def state_db_path() -> Path:
    """
    sqlite file holding device-scoped client state (cart, wishlist).

    SHOP_DB_PATH is read on every call; "~" is expanded and the result is
    absolute. A directory is a configuration error.
    """
    raw = os.getenv("SHOP_DB_PATH", "").strip() or DEFAULT_STATE_DB
    path = Path(raw).expanduser().resolve()
    if path.is_dir():
        raise RuntimeError(f"SHOP_DB_PATH points to a directory: {path}")
    return path
