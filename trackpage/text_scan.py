"""
Label-proximity text scanning.

Tracking pages vary too much in markup to parse structurally, so this module
works on the raw page text with regular expressions: find a label such as
"Scheduled Departure", then look for a timestamp just after it. Flight
number, route and aircraft type are picked up from anywhere in the text.
Each sub-extraction is independent of the others.
"""

import logging
import re

from . import config
from .dates import normalize_datetime
from .matchers import first_match, regex_matcher
from .models import FactsBuilder, FlightFacts

logger = logging.getLogger(__name__)


# ============================================================================
# TIMESTAMPS
# ============================================================================

_ISO_BODY = r'20\d{2}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?'
_ISO_IN_WINDOW = re.compile(r'\b(' + _ISO_BODY + r')\b', re.IGNORECASE)
_ISO_BARE = re.compile(r'\b(' + _ISO_BODY + r')\b')

# "Feb 12, 2026 11:30 AM" with an optional upper-case zone ("EST")
_LONG_FORM = re.compile(
    r'\b([A-Z][a-z]{2,8}\s+\d{1,2},\s*20\d{2}\s+\d{1,2}:\d{2}\s*(?:AM|PM))'
    r'(?:[ \t]*((?-i:[A-Z]{2,5})))?\b',
    re.IGNORECASE
)

# Field prefix -> label
TIME_LABELS = [
    ('scheduled_departure', re.compile(r'\b(?:SCHEDULED|FILED)\s+DEPART(?:URE)?\b', re.IGNORECASE)),
    ('scheduled_arrival', re.compile(r'\b(?:SCHEDULED|FILED)\s+ARRIV(?:AL)?\b', re.IGNORECASE)),
    ('actual_departure', re.compile(r'\bACTUAL\s+DEPART(?:URE)?\b', re.IGNORECASE)),
    ('actual_arrival', re.compile(r'\bACTUAL\s+ARRIV(?:AL)?\b', re.IGNORECASE)),
]


def _iso_timestamp(chunk):
    match = _ISO_IN_WINDOW.search(chunk)
    if not match:
        return None
    return normalize_datetime(match.group(1).upper())


def _long_form_timestamp(chunk):
    match = _LONG_FORM.search(chunk)
    if not match:
        return None
    base, zone = match.group(1), match.group(2)
    if zone:
        pair = normalize_datetime(f"{base} {zone}")
        if pair:
            return pair
    return normalize_datetime(base)


WINDOW_MATCHERS = [_iso_timestamp, _long_form_timestamp]


def extract_datetime_near_label(text, label_pattern, window=config.LABEL_WINDOW):
    """Find a timestamp within `window` characters after a label.

    Only the first occurrence of the label is considered.

    Args:
        text: Page text or HTML
        label_pattern: Compiled label regex
        window: Number of characters after the label to search

    Returns:
        DateTimePair or None
    """
    label = label_pattern.search(text)
    if not label:
        return None

    chunk = text[label.end():label.end() + window]
    return first_match(WINDOW_MATCHERS, chunk)


# ============================================================================
# TOKENS
# ============================================================================

# Loose first: 2-3 letter/digit code, optional space, 1-4 digits
FLIGHT_NUMBER_MATCHERS = [
    regex_matcher(r'\b([A-Z0-9]{2,3}\s?\d{1,4}[A-Z]?)\b'),
    regex_matcher(r'\b([A-Z]{2}\d{1,4}[A-Z]?)\b'),
]

_ROUTE_PATTERN = re.compile(r'\b([A-Z]{3,4})\s*(?:/|->|→|-| TO )\s*([A-Z]{3,4})\b')

_AIRCRAFT_PATTERN = re.compile(
    r'\b(AIRBUS\s*A\d{3}(?:-\d{3})?|BOEING\s*7\d{2}(?:-\d{3})?|A\d{3}(?:-\d{3})?|B7\d{2}(?:-\d{3})?)\b',
    re.IGNORECASE
)


def find_flight_number(uppercase_text):
    return first_match(FLIGHT_NUMBER_MATCHERS, uppercase_text)


def find_route(uppercase_text):
    """Return (origin, destination) for "RKSI / VTSP", "JFK -> LAX", "BOS TO SFO"."""
    match = _ROUTE_PATTERN.search(uppercase_text)
    if not match:
        return None
    return match.group(1), match.group(2)


def find_aircraft(uppercase_text):
    match = _AIRCRAFT_PATTERN.search(uppercase_text)
    if not match:
        return None
    return re.sub(r'\s+', ' ', match.group(1)).strip()


# ============================================================================
# MAIN SCAN
# ============================================================================

def scan_text(text, label_window=config.LABEL_WINDOW) -> FlightFacts:
    """Extract flight facts from free-form page text.

    Args:
        text: Page text (raw HTML is fine)
        label_window: Characters after each time label to search

    Returns:
        FlightFacts (possibly empty)
    """
    builder = FactsBuilder()
    if not text:
        return builder.build()

    uppercase_text = text.upper()

    # Labeled times
    for prefix, label_pattern in TIME_LABELS:
        pair = extract_datetime_near_label(text, label_pattern, label_window)
        if pair:
            logger.debug(f"  -> {prefix}: {pair.date} {pair.time}")
        builder.set_pair(prefix, pair)

    # Bare ISO timestamps stand in for unlabeled scheduled times
    if 'scheduled_departure_date' not in builder:
        stamps = [m.group(1) for m in _ISO_BARE.finditer(text)][:2]
        if stamps:
            logger.debug(f"  -> No scheduled departure label, using bare timestamps {stamps}")
        for prefix, stamp in zip(('scheduled_departure', 'scheduled_arrival'), stamps):
            builder.set_pair(prefix, normalize_datetime(stamp), default=True)

    flight_number = find_flight_number(uppercase_text)
    if flight_number:
        builder.set('flight_number', flight_number)

    route = find_route(uppercase_text)
    if route:
        builder.set('departure_iata', route[0])
        builder.set('arrival_iata', route[1])

    builder.set('aircraft_type', find_aircraft(uppercase_text))

    return builder.build()
