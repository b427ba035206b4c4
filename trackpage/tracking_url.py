"""
Flight facts from a tracking URL's path.

FlightAware history URLs spell out the flight, its departure slot and its
route: /live/flight/AAR747/history/20260206/0810Z/RKSI/VTSP. The time is
suffixed Z, so it is UTC by construction.
"""

import logging
import re
from urllib.parse import unquote

from .models import FactsBuilder

logger = logging.getLogger(__name__)

_HISTORY_PATH_PATTERN = re.compile(
    r'/live/flight/([^/]+)/history/(\d{8})/(\d{4})Z/([A-Z]{3,4})/([A-Z]{3,4})',
    re.IGNORECASE
)


def extract_from_url_pattern(track_url):
    """Parse flight facts out of a FlightAware-style history URL.

    Args:
        track_url: Tracking URL

    Returns:
        FlightFacts with times_in_utc=True, or None if the URL doesn't match
    """
    match = _HISTORY_PATH_PATTERN.search(track_url or '')
    if not match:
        return None

    flight_raw, yyyymmdd, hhmm, dep, arr = match.groups()

    builder = FactsBuilder()
    builder.set('flight_number', unquote(flight_raw))
    builder.set('departure_iata', dep)
    builder.set('arrival_iata', arr)
    builder.set('scheduled_departure_date', f"{yyyymmdd[:4]}-{yyyymmdd[4:6]}-{yyyymmdd[6:]}")
    builder.set('scheduled_departure_time', f"{hhmm[:2]}:{hhmm[2:]}")
    builder.set('times_in_utc', True)

    logger.debug(f"URL pattern matched: {flight_raw} {dep}->{arr} {yyyymmdd} {hhmm}Z")
    return builder.build()
