# backend/wholesale/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/wholesale.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///wholesale.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Order codes look like ORD-000123
    ORDER_CODE_PREFIX = os.environ.get("ORDER_CODE_PREFIX", "ORD-")
    ORDER_CODE_PAD = int(os.environ.get("ORDER_CODE_PAD", "6"))

    # 3000 bps = 30% of shipping profit
    DEFAULT_COMMISSION_RATE_BPS = int(os.environ.get("DEFAULT_COMMISSION_RATE_BPS", "3000"))

    ONLINE_REGIONS = tuple(
        r.strip().lower()
        for r in os.environ.get("ONLINE_REGIONS", "luzon,visayas,mindanao").split(",")
        if r.strip()
    )

    # When False, staff only see orders they created (others look "not found")
    STAFF_CAN_VIEW_ALL_ORDERS = _env_bool("STAFF_CAN_VIEW_ALL_ORDERS", True)

    ORDER_LIST_MAX_LIMIT = int(os.environ.get("ORDER_LIST_MAX_LIMIT", "200"))
