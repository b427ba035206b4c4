"""
The flight facts record produced by every extraction entry point.
"""

import logging
import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_TIME_PATTERN = re.compile(r'^(?:[01]\d|2[0-3]):[0-5]\d$')
_IATA_PATTERN = re.compile(r'^[A-Z]{3,4}$')
_WHITESPACE_PATTERN = re.compile(r'\s+')


def clean_flight_number(value):
    """Uppercase a flight number and drop all whitespace ("aar 747" -> "AAR747")."""
    return _WHITESPACE_PATTERN.sub('', value).upper()


class FlightFacts(BaseModel):
    """Flight facts recovered from a tracking page or URL.

    Every field is optional. Field names serialize to camelCase
    (flight_number -> flightNumber) through to_dict().
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
    )

    airline: Optional[str] = None
    airline_image_url: Optional[str] = None
    flight_number: Optional[str] = None
    departure_iata: Optional[str] = None
    arrival_iata: Optional[str] = None
    scheduled_departure_date: Optional[str] = None
    scheduled_departure_time: Optional[str] = None
    scheduled_arrival_date: Optional[str] = None
    scheduled_arrival_time: Optional[str] = None
    actual_departure_date: Optional[str] = None
    actual_departure_time: Optional[str] = None
    actual_arrival_date: Optional[str] = None
    actual_arrival_time: Optional[str] = None
    times_in_utc: Optional[bool] = None
    aircraft_type: Optional[str] = None
    source_url: Optional[str] = None

    @field_validator('airline', 'aircraft_type')
    @classmethod
    def _collapse_whitespace(cls, value):
        if value is None:
            return None
        value = _WHITESPACE_PATTERN.sub(' ', value).strip()
        if not value:
            raise ValueError("empty text")
        return value

    @field_validator('flight_number')
    @classmethod
    def _check_flight_number(cls, value):
        if value is None:
            return None
        value = clean_flight_number(value)
        if not value:
            raise ValueError("empty flight number")
        return value

    @field_validator('departure_iata', 'arrival_iata')
    @classmethod
    def _check_iata(cls, value):
        if value is None:
            return None
        value = value.strip().upper()
        if not _IATA_PATTERN.match(value):
            raise ValueError(f"not a 3-4 letter airport code: {value!r}")
        return value

    @field_validator('scheduled_departure_date', 'scheduled_arrival_date',
                     'actual_departure_date', 'actual_arrival_date')
    @classmethod
    def _check_date(cls, value):
        if value is None:
            return None
        if not _DATE_PATTERN.match(value):
            raise ValueError(f"date must be YYYY-MM-DD: {value!r}")
        # Rejects impossible calendar dates like 2026-02-30
        datetime.strptime(value, '%Y-%m-%d')
        return value

    @field_validator('scheduled_departure_time', 'scheduled_arrival_time',
                     'actual_departure_time', 'actual_arrival_time')
    @classmethod
    def _check_time(cls, value):
        if value is None:
            return None
        if not _TIME_PATTERN.match(value):
            raise ValueError(f"time must be 24-hour HH:MM: {value!r}")
        return value

    @field_validator('airline_image_url', 'source_url')
    @classmethod
    def _check_absolute_url(cls, value):
        if value is None:
            return None
        parsed = urlparse(value)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(f"not an absolute URL: {value!r}")
        return value

    def is_empty(self):
        """True when no field carries a value."""
        return not any(getattr(self, name) for name in type(self).model_fields)

    def to_dict(self):
        """camelCase dict of the populated fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def with_source(self, url):
        """Copy of this record with source_url set."""
        return self.model_copy(update={'source_url': url})


class FactsBuilder:
    """Accumulates FlightFacts fields one at a time.

    Values that fail FlightFacts validation are dropped (and logged), so a
    built record always satisfies the model's invariants.
    """

    def __init__(self):
        self._fields = {}

    def __contains__(self, name):
        return name in self._fields

    def get(self, name):
        return self._fields.get(name)

    def set(self, name, value):
        """Set a field, replacing any earlier value. Returns True if kept."""
        if name not in FlightFacts.model_fields:
            raise KeyError(name)
        if value is None or value == '':
            return False
        try:
            checked = FlightFacts(**{name: value})
        except ValidationError as e:
            logger.debug(f"Dropping {name}={value!r}: {e.errors()[0]['msg']}")
            return False
        self._fields[name] = getattr(checked, name)
        return True

    def set_default(self, name, value):
        """Set a field only if it has no value yet."""
        if name in self._fields:
            return False
        return self.set(name, value)

    def set_pair(self, prefix, pair, default=False):
        """Store a DateTimePair as <prefix>_date / <prefix>_time."""
        if pair is None:
            return
        setter = self.set_default if default else self.set
        setter(f"{prefix}_date", pair.date)
        setter(f"{prefix}_time", pair.time)

    def build(self):
        return FlightFacts(**self._fields)
