"""
HTTP fetching of tracking pages.

fetch_page() is the default implementation of the fetch capability that
fetch_and_extract() accepts. Any callable with the same signature can be
injected instead:

    fetch(url, timeout, headers) -> PageResponse
"""

import http.client
import logging
import socket
import time
import urllib.error
import urllib.request
from typing import Dict, NamedTuple, Optional

from . import config

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class PageResponse(NamedTuple):
    status: int
    body: str


class FetchError(Exception):
    """A tracking page could not be retrieved."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class FetchTimeout(FetchError):
    """The fetch did not finish within its deadline."""


def default_headers(user_agent=config.USER_AGENT) -> Dict[str, str]:
    return {
        'Accept': config.ACCEPT_HEADER,
        'User-Agent': user_agent,
    }


def _socket_of(response):
    # http.client keeps the connection socket under its buffered reader
    raw = getattr(getattr(response, 'fp', None), 'raw', None)
    return getattr(raw, '_sock', None)


def _read_body(response, deadline):
    sock = _socket_of(response)
    chunks = []
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FetchTimeout("Timed out reading response body")
        if sock is not None:
            sock.settimeout(remaining)
        # read1() does at most one socket read per call
        chunk = response.read1(_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b''.join(chunks)


def _decode(raw, headers):
    charset = headers.get_content_charset() if headers is not None else None
    try:
        return raw.decode(charset or 'utf-8', errors='ignore')
    except LookupError:
        return raw.decode('utf-8', errors='ignore')


def fetch_page(url, timeout=config.FETCH_TIMEOUT, headers: Optional[Dict[str, str]] = None) -> PageResponse:
    """Fetch a page with an overall deadline.

    HTTP error statuses are returned, not raised; the caller decides what
    counts as success.

    Args:
        url: Page URL
        timeout: Seconds allowed for connecting and reading the whole body
        headers: Request headers. Defaults to default_headers().

    Returns:
        PageResponse(status, body)

    Raises:
        FetchTimeout: deadline exceeded
        FetchError: connection or protocol failure
    """
    deadline = time.monotonic() + timeout
    req = urllib.request.Request(url, headers=headers or default_headers())
    logger.debug(f"GET {url} (timeout {timeout}s)")

    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            raw = _read_body(response, deadline)
            return PageResponse(response.status, _decode(raw, response.headers))

    except urllib.error.HTTPError as e:
        logger.debug(f"HTTP error {e.code} for {url}")
        try:
            raw = e.read()
        except (OSError, AttributeError):
            raw = b''
        return PageResponse(e.code, _decode(raw or b'', e.headers))

    except urllib.error.URLError as e:
        if isinstance(e.reason, (socket.timeout, TimeoutError)):
            raise FetchTimeout(f"Timed out connecting to {url}") from e
        raise FetchError(f"Could not reach {url}: {e.reason}") from e

    except (socket.timeout, TimeoutError) as e:
        raise FetchTimeout(f"Timed out fetching {url}") from e

    except (OSError, ValueError, http.client.HTTPException) as e:
        raise FetchError(f"Could not fetch {url}: {e}") from e
