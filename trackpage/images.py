"""
Airline logo lookup.
"""

import logging
import re
from urllib.parse import urljoin, urlparse

from .matchers import first_match

logger = logging.getLogger(__name__)

_IMAGE_EXT = r'\.(?:png|svg|jpg|jpeg|webp)'

# Highest priority first
_ABSOLUTE_AIRLINE = re.compile(r'https?://[^"\'()\s]*airline[^"\'()\s]*' + _IMAGE_EXT, re.IGNORECASE)
_ABSOLUTE_AIRLINE_LOGO = re.compile(r'https?://[^"\'()\s]*airline_logos?[^"\'()\s]*' + _IMAGE_EXT, re.IGNORECASE)
_ABSOLUTE_LOGO = re.compile(r'https?://[^"\'()\s]*logos?[^"\'()\s]*' + _IMAGE_EXT, re.IGNORECASE)
_AIRLINE_ATTRIBUTE = re.compile(r'(?:src|href)=["\']([^"\']*airline[^"\']*' + _IMAGE_EXT + r')["\']', re.IGNORECASE)
_OG_IMAGE_PATTERNS = [
    re.compile(r'<meta[^>]+property=["\']og:image["\'][^>]+content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
    re.compile(r'<meta[^>]+content=["\']([^"\']+)["\'][^>]+property=["\']og:image["\'][^>]*>', re.IGNORECASE),
]


def _is_absolute(url):
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def resolve_image_url(raw, base_url=None):
    """Turn a matched image reference into an absolute URL.

    Absolute http(s) URLs pass through. Root-relative paths ("/img/x.png")
    and protocol-relative ones ("//cdn/x.png") are resolved against
    base_url. Anything else yields None.
    """
    raw = raw.strip()
    if _is_absolute(raw):
        return raw
    if raw.startswith('/') and base_url and _is_absolute(base_url):
        return urljoin(base_url, raw)
    return None


def _candidate(pattern, group=0):
    def matcher(html, base_url):
        match = pattern.search(html)
        if not match:
            return None
        resolved = resolve_image_url(match.group(group), base_url)
        if resolved is None:
            logger.debug(f"Unresolvable image candidate: {match.group(group)!r}")
        return resolved
    return matcher


def _og_image(html, base_url):
    for pattern in _OG_IMAGE_PATTERNS:
        match = pattern.search(html)
        if match:
            return resolve_image_url(match.group(1), base_url)
    return None


IMAGE_MATCHERS = [
    _candidate(_ABSOLUTE_AIRLINE),
    _candidate(_ABSOLUTE_AIRLINE_LOGO),
    _candidate(_ABSOLUTE_LOGO),
    _candidate(_AIRLINE_ATTRIBUTE, group=1),
    _og_image,
]


def find_airline_image(html, base_url=None):
    """Find the most likely airline logo URL in a page.

    Args:
        html: Raw HTML
        base_url: URL the page was fetched from, for resolving root-relative paths

    Returns:
        Absolute image URL or None
    """
    if not html:
        return None
    return first_match(IMAGE_MATCHERS, html, base_url)
