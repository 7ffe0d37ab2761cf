"""
Timezone utility functions. Kickoffs are stored in UTC and shown in the
competition's local time.
"""

from datetime import datetime, timezone

import pytz
from flask import current_app


def get_app_timezone():
    """Get the application's configured timezone"""
    try:
        timezone_name = current_app.config.get("TIMEZONE", "UTC")
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fallback to UTC if timezone is invalid
        return pytz.UTC


def as_utc(dt):
    """Return an aware UTC datetime; naive values are taken to be UTC"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def convert_to_app_timezone(dt):
    """Convert a datetime to the application's timezone"""
    if dt is None:
        return None
    return as_utc(dt).astimezone(get_app_timezone())


def parse_timestamp(value):
    """
    Parse an ISO-8601 timestamp from a request body.

    Naive values are interpreted in the application's timezone, which is how
    administrators type kickoffs. Returns an aware UTC datetime, or None for
    an empty value. Raises ValueError for anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)

    if dt.tzinfo is None:
        dt = get_app_timezone().localize(dt)

    return dt.astimezone(timezone.utc)


def format_kickoff(dt, format_str="%a %d %b %I:%M %p"):
    """Format a kickoff in the application's timezone"""
    if dt is None:
        return "TBC"
    return convert_to_app_timezone(dt).strftime(format_str)
