"""
Timezone helper utilities for OneReserve Comercial.
The mobile app exchanges epoch milliseconds; dashboards use the office timezone.
"""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context


DEFAULT_TIMEZONE = 'Europe/Madrid'


def app_timezone():
    """Timezone configured for the application (falls back to Madrid)."""
    name = DEFAULT_TIMEZONE
    if has_app_context():
        name = current_app.config.get('TIMEZONE', DEFAULT_TIMEZONE)
    return ZoneInfo(name)


def now_local():
    """
    Get current datetime in the application timezone.

    Returns:
        datetime: Current timezone-aware datetime
    """
    return datetime.now(app_timezone())


def now_ms():
    """Current time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)
