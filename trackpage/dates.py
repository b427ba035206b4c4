"""
Date/time normalization.

Every timestamp the extractors find goes through normalize_datetime(), which
turns it into a UTC (date, time) pair or None. Nothing here raises on bad
input: an unparseable string is simply a miss.
"""

import logging
import warnings
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from dateutil import parser as dateutil_parser
from dateutil import tz

logger = logging.getLogger(__name__)


class DateTimePair(NamedTuple):
    """A UTC date ("YYYY-MM-DD") and time ("HH:MM")."""
    date: str
    time: str


# Zone abbreviations we resolve; anything else is read as UTC
_HOUR = 3600
TZINFOS = {
    'UTC': tz.UTC,
    'GMT': tz.UTC,
    'Z': tz.UTC,
    'EST': -5 * _HOUR,
    'EDT': -4 * _HOUR,
    'CST': -6 * _HOUR,
    'CDT': -5 * _HOUR,
    'MST': -7 * _HOUR,
    'MDT': -6 * _HOUR,
    'PST': -8 * _HOUR,
    'PDT': -7 * _HOUR,
    'AKST': -9 * _HOUR,
    'AKDT': -8 * _HOUR,
    'HST': -10 * _HOUR,
}


# Two unlike fill-in values; a field the text leaves out shows up as a difference
_DEFAULTS = (datetime(2000, 1, 1, 0, 0), datetime(2001, 2, 2, 1, 1))


def _parse(text, default):
    with warnings.catch_warnings():
        # Unknown zone names fall back to a naive (UTC) reading
        warnings.simplefilter('ignore', dateutil_parser.UnknownTimezoneWarning)
        return dateutil_parser.parse(text, default=default, tzinfos=TZINFOS)


def normalize_datetime(text) -> Optional[DateTimePair]:
    """Parse a date-time string and render it as a UTC date/time pair.

    Accepts ISO 8601 (with or without an offset) and long-form strings such
    as "Feb 12, 2026 11:30 AM". Text without an offset is taken as UTC.
    The text must name a full date and a time of day; fragments such as
    "10:30" or "Feb 2026" are rejected rather than completed from today.

    Args:
        text: Date-time string

    Returns:
        DateTimePair, or None if the text is not a complete, valid date-time
    """
    if not isinstance(text, str) or not text.strip():
        return None

    text = text.strip()
    try:
        dt = _parse(text, _DEFAULTS[0])
        check = _parse(text, _DEFAULTS[1])
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Unparseable date-time {text!r}: {e}")
        return None

    if dt != check:
        logger.debug(f"Incomplete date-time {text!r}")
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return DateTimePair(dt.date().isoformat(), dt.strftime('%H:%M'))
