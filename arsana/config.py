"""Centralized configuration for the Arsana backend.

Typed constants for the database, API, calendar and scheduler settings.
Environment variable overrides use safe defaults so the app starts without
extra env configuration.
"""

from __future__ import annotations

import os
from pathlib import Path

# --- App ---
APP_VERSION: str = "1.0.0"
ENV: str = os.getenv("ARSANA_ENV", "development")
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# --- Database ---
ARSANA_ROOT = Path(__file__).parent
DEFAULT_DB_PATH: Path = ARSANA_ROOT / "data" / "arsana.db"
DB_POOL_SIZE: int = int(os.getenv("ARSANA_DB_POOL_SIZE", "5"))
DB_POOL_TIMEOUT: float = float(os.getenv("ARSANA_DB_POOL_TIMEOUT", "5.0"))
DB_CONNECT_TIMEOUT: float = float(os.getenv("ARSANA_DB_CONNECT_TIMEOUT", "30.0"))
DB_TEMP_CONN_MAX: int = int(os.getenv("ARSANA_DB_TEMP_CONN_MAX", "10"))
DB_RETRY_MAX: int = int(os.getenv("ARSANA_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("ARSANA_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("ARSANA_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("ARSANA_DB_RETRY_JITTER", "0.1"))

# --- Calendar ---
UPCOMING_LIMIT_DEFAULT: int = 10
UPCOMING_LIMIT_MAX: int = 1000

# --- Notifications API ---
NOTIFICATIONS_PAGE_LIMIT_DEFAULT: int = 20
NOTIFICATIONS_PAGE_LIMIT_MAX: int = 100
# Keeps OFFSET inside SQLite's 64-bit INTEGER range
NOTIFICATIONS_PAGE_MAX: int = 1_000_000

# --- Scheduler ---
SCHEDULER_ENABLED: bool = os.getenv("ARSANA_SCHEDULER_ENABLED", "true").lower() == "true"
SCHEDULER_TIMEZONE: str = os.getenv("ARSANA_TIMEZONE", "UTC")
CRON_UPCOMING_EVENTS: str = os.getenv("ARSANA_CRON_UPCOMING_EVENTS", "0 9 * * *")
CRON_OVERDUE_INVITATIONS: str = os.getenv("ARSANA_CRON_OVERDUE_INVITATIONS", "0 18 * * *")
# Named weekday: APScheduler numbers weekdays from Monday=0, crontab from Sunday=0
CRON_WEEKLY_SUMMARY: str = os.getenv("ARSANA_CRON_WEEKLY_SUMMARY", "0 8 * * mon")
UPCOMING_WINDOW_DAYS: int = int(os.getenv("ARSANA_UPCOMING_WINDOW_DAYS", "1"))
OVERDUE_SCAN_LIMIT: int = int(os.getenv("ARSANA_OVERDUE_SCAN_LIMIT", "10"))
WEEKLY_SUMMARY_DAYS: int = 7

# --- CORS ---
FRONTEND_ORIGIN: str = os.getenv("ARSANA_FRONTEND_ORIGIN", "http://localhost:3000")


def is_production() -> bool:
    """Check if running in production"""
    return ENV == "production"
