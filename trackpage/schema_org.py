"""
Schema.org JSON-LD flight extraction.

Tracking sites often embed a schema.org Flight (or FlightReservation) record
in <script type="application/ld+json"> blocks. When present it is the most
reliable source on the page, so the merge layer lets it win over text
scanning.
"""

import json
import logging
import re

from .dates import normalize_datetime
from .models import FactsBuilder, FlightFacts

logger = logging.getLogger(__name__)

_JSON_LD_PATTERN = re.compile(
    r'<script[^>]*type=["\']application/ld\+json["\'][^>]*>(.*?)</script>',
    re.DOTALL | re.IGNORECASE
)


def _iter_json_ld_nodes(html_body):
    """Yield candidate JSON-LD objects in document order.

    Blocks that fail to parse are skipped. Within a block, a top-level array
    is walked in order and an @graph array follows its container.
    """
    for index, match in enumerate(_JSON_LD_PATTERN.finditer(html_body)):
        raw = match.group(1).strip()
        if not raw:
            continue

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping malformed JSON-LD block #{index}: {e}")
            continue

        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            yield item

            graph = item.get('@graph')
            if isinstance(graph, list):
                for node in graph:
                    if isinstance(node, dict):
                        yield node


def _is_flight_type(node):
    node_type = node.get('@type', '')
    if isinstance(node_type, list):
        node_type = ','.join(str(t) for t in node_type)
    return 'flight' in str(node_type).lower()


def _string(value):
    return value if isinstance(value, str) else None


def _nested(obj, key):
    value = obj.get(key)
    return value if isinstance(value, dict) else {}


def _parse_schema_flight(node):
    """Map a schema.org Flight/FlightReservation object onto FlightFacts."""
    builder = FactsBuilder()

    # FlightReservation wraps the flight in reservationFor
    flight = node.get('reservationFor')
    if not isinstance(flight, dict):
        flight = node

    # Airline
    airline = flight.get('airline') or flight.get('provider')
    if isinstance(airline, dict):
        builder.set('airline', _string(airline.get('name')))
    else:
        builder.set('airline', _string(airline))

    # Flight number, falling back to the generic identifier
    flight_num = flight.get('flightNumber')
    if flight_num is None:
        flight_num = flight.get('identifier')
    builder.set('flight_number', _string(flight_num))

    # Airports
    builder.set('departure_iata', _string(_nested(flight, 'departureAirport').get('iataCode')))
    builder.set('arrival_iata', _string(_nested(flight, 'arrivalAirport').get('iataCode')))

    # Scheduled times
    builder.set_pair('scheduled_departure', normalize_datetime(flight.get('departureTime')))
    builder.set_pair('scheduled_arrival', normalize_datetime(flight.get('arrivalTime')))

    return builder.build()


def extract_schema_org_flight(html_body) -> FlightFacts:
    """Extract flight facts from the first JSON-LD node typed as a flight.

    Args:
        html_body: Raw HTML

    Returns:
        FlightFacts; empty when the page has no usable flight record
    """
    if not html_body:
        return FlightFacts()

    for node in _iter_json_ld_nodes(html_body):
        if _is_flight_type(node):
            logger.debug(f"JSON-LD flight node found: @type={node.get('@type')!r}")
            return _parse_schema_flight(node)

    return FlightFacts()
