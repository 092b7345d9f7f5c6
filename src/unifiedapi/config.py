"""Runtime configuration loaded from environment variables.

Provides:
- Settings: immutable snapshot of the process configuration
- load_settings(): build Settings from os.environ
- parse_duration(): "90", "15m", "1h", "7d" -> seconds
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> int:
    """Parse a token lifetime into seconds.

    Accepts bare integers (seconds) or an integer followed by one of
    s, m, h, d.

    Raises:
        ValueError: If the value is not a recognised duration.
    """
    match = _DURATION_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit.lower()]


def parse_site_keys(raw: str) -> dict[str, str]:
    """Parse "site=key,site2=key2" into a mapping. Blank entries are skipped."""
    keys: dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        site, sep, key = entry.partition("=")
        if not sep or not site.strip() or not key.strip():
            raise ValueError(f"Invalid SITE_API_KEYS entry: {entry!r}")
        keys[site.strip()] = key.strip()
    return keys


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Process configuration."""

    app_env: str = "development"
    database_url: str | None = None
    db_password: str | None = None
    db_pool_min: int = 1
    db_pool_max: int = 10
    db_sslmode: str | None = None
    cors_origins: list[str] = field(default_factory=list)
    jwt_secret: str | None = None
    jwt_expires_seconds: int = 3600
    site_api_keys: dict[str, str] = field(default_factory=dict)
    geo_lookup_url: str = "https://ipapi.co/{ip}/json/"
    geo_lookup_timeout: float = 2.0
    public_dir: str = "public"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def load_settings() -> Settings:
    """Read Settings from the environment.

    Raises:
        ValueError: If a numeric or structured variable is malformed.
    """
    app_env = os.environ.get("APP_ENV", "development").strip().lower() or "development"

    pool_min = _int_env("DB_POOL_MIN", 1)
    pool_max = _int_env("DB_POOL_MAX", 10)
    if pool_min < 0 or pool_max < 1 or pool_min > pool_max:
        raise ValueError(f"Invalid DB pool bounds: min={pool_min} max={pool_max}")

    sslmode = os.environ.get("DB_SSLMODE") or ("require" if app_env == "production" else None)

    origins_raw = os.environ.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in origins_raw.split(",") if o.strip()]

    return Settings(
        app_env=app_env,
        database_url=os.environ.get("DATABASE_URL") or None,
        db_password=os.environ.get("DB_PASSWORD") or None,
        db_pool_min=pool_min,
        db_pool_max=pool_max,
        db_sslmode=sslmode,
        cors_origins=origins,
        jwt_secret=os.environ.get("JWT_SECRET") or None,
        jwt_expires_seconds=parse_duration(os.environ.get("JWT_EXPIRES", "1h")),
        site_api_keys=parse_site_keys(os.environ.get("SITE_API_KEYS", "")),
        geo_lookup_url=os.environ.get("GEO_LOOKUP_URL", "https://ipapi.co/{ip}/json/"),
        geo_lookup_timeout=_float_env("GEO_LOOKUP_TIMEOUT", 2.0),
        public_dir=os.environ.get("PUBLIC_DIR", "public"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
