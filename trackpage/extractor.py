"""
Tracking page extraction: merge and orchestration.

Strategy (in order of reliability):
1. Schema.org JSON-LD embedded in the page
2. Label-proximity scanning of the page text
3. The tracking URL's own path (FlightAware history URLs)

extract_from_html() merges 1 and 2 with the logo lookup. fetch_and_extract()
fetches the page, runs the merge, and falls back to 3 when the page can't be
fetched or yields nothing.
"""

import logging

from . import config
from .fetcher import FetchError, default_headers, fetch_page
from .images import find_airline_image
from .models import FactsBuilder
from .schema_org import extract_schema_org_flight
from .text_scan import scan_text
from .tracking_url import extract_from_url_pattern

logger = logging.getLogger(__name__)

# Fields both JSON-LD and text scanning can supply; JSON-LD wins
MERGED_FIELDS = (
    'airline',
    'flight_number',
    'departure_iata',
    'arrival_iata',
    'scheduled_departure_date',
    'scheduled_departure_time',
    'scheduled_arrival_date',
    'scheduled_arrival_time',
)

# Fields only text scanning supplies
TEXT_ONLY_FIELDS = (
    'actual_departure_date',
    'actual_departure_time',
    'actual_arrival_date',
    'actual_arrival_time',
    'aircraft_type',
)


def merge_facts(primary, fallback, airline_image_url=None):
    """Merge two partial records field by field, primary first.

    Args:
        primary: FlightFacts from structured data
        fallback: FlightFacts from text scanning
        airline_image_url: Logo URL, attached as-is

    Returns:
        Merged FlightFacts (possibly empty)
    """
    builder = FactsBuilder()
    for name in MERGED_FIELDS:
        value = getattr(primary, name)
        builder.set(name, value if value else getattr(fallback, name))
    for name in TEXT_ONLY_FIELDS:
        builder.set(name, getattr(fallback, name))
    builder.set('airline_image_url', airline_image_url)
    return builder.build()


def extract_from_html(html, base_url=None, label_window=config.LABEL_WINDOW):
    """Extract flight facts from a tracking page.

    Args:
        html: Page HTML (or plain text)
        base_url: URL of the page, used to resolve relative logo paths
        label_window: Characters after each time label to search

    Returns:
        FlightFacts, or None when nothing at all was found
    """
    from_schema = extract_schema_org_flight(html)
    from_text = scan_text(html, label_window=label_window)
    airline_image = find_airline_image(html, base_url)

    logger.debug(f"JSON-LD: {from_schema.to_dict()}")
    logger.debug(f"Text scan: {from_text.to_dict()}")
    logger.debug(f"Airline image: {airline_image}")

    merged = merge_facts(from_schema, from_text, airline_image)
    if merged.is_empty():
        return None
    return merged


def _fetch_html(track_url, fetch, timeout, user_agent):
    response = fetch(track_url, timeout=timeout, headers=default_headers(user_agent))
    if not 200 <= response.status < 300:
        raise FetchError(f"HTTP {response.status}", status=response.status)
    return response.body


def fetch_and_extract(track_url, fetch=None, timeout=config.FETCH_TIMEOUT,
                      label_window=config.LABEL_WINDOW, user_agent=config.USER_AGENT):
    """Fetch a tracking page and extract flight facts from it.

    Falls back to parsing the URL itself if the fetch fails or the page
    yields nothing. The fetch error is re-raised only when that fallback
    finds nothing too.

    Args:
        track_url: Tracking page URL
        fetch: Fetch callable, fetch(url, timeout, headers) -> PageResponse.
            Defaults to fetcher.fetch_page.
        timeout: Seconds allowed for the fetch
        label_window: Characters after each time label to search
        user_agent: User-Agent header for the request

    Returns:
        FlightFacts with source_url set, or None if no flight data was found

    Raises:
        The fetch or parse error that was raised, when the URL fallback also fails
    """
    if fetch is None:
        fetch = fetch_page

    last_error = None

    try:
        html = _fetch_html(track_url, fetch, timeout, user_agent)
        facts = extract_from_html(html, base_url=track_url, label_window=label_window)
        if facts is not None:
            return facts.with_source(track_url)
        logger.debug(f"No flight data in page {track_url}, trying URL pattern")
    except Exception as e:
        logger.debug(f"Fetch/extract failed for {track_url}: {e!r}, trying URL pattern")
        last_error = e

    from_url = extract_from_url_pattern(track_url)
    if from_url is not None:
        return from_url.with_source(track_url)

    if last_error is not None:
        raise last_error
    return None
