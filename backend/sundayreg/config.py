# sundayreg/config.py
"""
Runtime configuration.

Everything comes from environment variables (a local `.env` is loaded
first, same as the DB layer). The object is built once and passed around
explicitly; services never read os.environ themselves.

COMMUNITIES accepts a comma list. Each item is either a bare name
("north") or "name=target" where target is the spreadsheet key used by
the sheets backend:

    COMMUNITIES=main=1AbC...,north=1XyZ...
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TZ = "America/New_York"
DEFAULT_CUTOFF_HOUR = 14
DEFAULT_COMMUNITY = "main"
DEFAULT_SESSION_LABEL = "Sunday Service"


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")


def parse_communities(raw: Optional[str], default: str) -> Dict[str, Optional[str]]:
    """Parse COMMUNITIES into {name: target}. The default community is always present."""
    table: Dict[str, Optional[str]] = {}
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        if "=" in item:
            name, target = item.split("=", 1)
            table[name.strip().lower()] = target.strip() or None
        else:
            table[item.lower()] = None
    table.setdefault(default, None)
    return table


@dataclass(frozen=True)
class Settings:
    app_name: str = "Sunday Registration"
    database_url: str = "sqlite:///./registrations.db"
    timezone: str = DEFAULT_TZ
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR
    default_community: str = DEFAULT_COMMUNITY
    communities: Dict[str, Optional[str]] = field(
        default_factory=lambda: {DEFAULT_COMMUNITY: None}
    )
    default_session_label: str = DEFAULT_SESSION_LABEL
    store_backend: str = "sql"  # "sql" | "sheets"
    google_creds_json: Optional[str] = None

    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    mail_from: str = "noreply@example.org"
    email_max_attempts: int = 1

    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not 0 <= self.cutoff_hour <= 24:
            raise ValueError(f"cutoff_hour must be within 0..24, got {self.cutoff_hour}")
        if self.store_backend not in ("sql", "sheets"):
            raise ValueError(f"Unknown store backend {self.store_backend!r}")
        if self.email_max_attempts < 1:
            raise ValueError("email_max_attempts must be at least 1")
        ZoneInfo(self.timezone)  # raises for unknown zones

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def settings_from_env() -> Settings:
    default_community = (os.getenv("DEFAULT_COMMUNITY") or DEFAULT_COMMUNITY).strip().lower()
    origins = [o.strip() for o in (os.getenv("CORS_ORIGINS") or "").split(",") if o.strip()]

    kwargs = dict(
        app_name=os.getenv("APP_NAME", "Sunday Registration"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./registrations.db"),
        timezone=os.getenv("TIMEZONE", DEFAULT_TZ),
        cutoff_hour=_env_int("CUTOFF_HOUR", DEFAULT_CUTOFF_HOUR),
        default_community=default_community,
        communities=parse_communities(os.getenv("COMMUNITIES"), default_community),
        default_session_label=os.getenv("SESSION_LABEL", DEFAULT_SESSION_LABEL),
        store_backend=os.getenv("STORE_BACKEND", "sql").strip().lower(),
        google_creds_json=os.getenv("GOOGLE_CREDS_JSON"),
        smtp_host=os.getenv("SMTP_HOST") or None,
        smtp_port=_env_int("SMTP_PORT", 587),
        smtp_user=os.getenv("SMTP_USER") or None,
        smtp_password=os.getenv("SMTP_PASSWORD") or None,
        smtp_use_tls=_env_bool("SMTP_USE_TLS", True),
        mail_from=os.getenv("MAIL_FROM", "noreply@example.org"),
        email_max_attempts=_env_int("EMAIL_MAX_ATTEMPTS", 1),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    if origins:
        kwargs["cors_origins"] = origins
    return Settings(**kwargs)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return settings_from_env()
