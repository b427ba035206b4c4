"""Tests for tracking page fetching"""
import http.server
import io
import socket
import threading
import time
import types
import urllib.error
from email.message import Message

import pytest

from trackpage import fetcher
from trackpage.fetcher import FetchError, FetchTimeout, PageResponse, default_headers, fetch_page


def _headers(content_type="text/html; charset=utf-8"):
    msg = Message()
    msg["Content-Type"] = content_type
    return msg


class FakeResponse:
    def __init__(self, body, status=200, content_type="text/html; charset=utf-8"):
        self._stream = io.BytesIO(body)
        self.status = status
        self.headers = _headers(content_type)

    def read(self, size=-1):
        return self._stream.read(size)

    def read1(self, size=-1):
        return self._stream.read1(size)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def urlopen(monkeypatch):
    """Patch urlopen; set .result to a response or exception."""
    state = types.SimpleNamespace(result=None, requests=[])

    def fake_urlopen(req, timeout=None):
        state.requests.append((req, timeout))
        if isinstance(state.result, BaseException):
            raise state.result
        return state.result

    monkeypatch.setattr(fetcher.urllib.request, "urlopen", fake_urlopen)
    return state


class TrickleHandler(http.server.BaseHTTPRequestHandler):
    """Sends headers at once, then the body one byte every 0.2s."""

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", "50")
        self.end_headers()
        try:
            for _ in range(50):
                self.wfile.write(b"x")
                self.wfile.flush()
                time.sleep(0.2)
        except OSError:
            pass

    def log_message(self, *args):
        pass


@pytest.fixture
def trickle_server():
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), TrickleHandler)
    server.daemon_threads = True
    server.block_on_close = False
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/track"
    server.shutdown()
    server.server_close()


class TestFetchPage:
    """Test fetch_page"""

    def test_success(self, urlopen):
        urlopen.result = FakeResponse("<html>NOK531 ✈</html>".encode("utf-8"))
        response = fetch_page("https://example.com/track", timeout=7)

        assert response == PageResponse(200, "<html>NOK531 ✈</html>")
        req, timeout = urlopen.requests[0]
        assert timeout == 7
        assert req.get_header("Accept") == "text/html,application/json,text/plain,*/*"
        assert req.get_header("User-agent")

    def test_custom_headers(self, urlopen):
        urlopen.result = FakeResponse(b"ok")
        fetch_page("https://example.com/track", headers={"Accept": "text/plain"})
        req, _ = urlopen.requests[0]
        assert req.get_header("Accept") == "text/plain"

    def test_response_charset(self, urlopen):
        urlopen.result = FakeResponse("Zürich".encode("latin-1"), content_type="text/html; charset=iso-8859-1")
        assert fetch_page("https://example.com/track").body == "Zürich"

    def test_unknown_charset_falls_back_to_utf8(self, urlopen):
        urlopen.result = FakeResponse("Zürich".encode("utf-8"), content_type="text/html; charset=bogus")
        assert fetch_page("https://example.com/track").body == "Zürich"

    def test_http_error_returned_as_response(self, urlopen):
        urlopen.result = urllib.error.HTTPError(
            "https://example.com/track", 404, "Not Found", _headers(), io.BytesIO(b"missing")
        )
        assert fetch_page("https://example.com/track") == PageResponse(404, "missing")

    def test_connect_timeout(self, urlopen):
        urlopen.result = urllib.error.URLError(socket.timeout("timed out"))
        with pytest.raises(FetchTimeout):
            fetch_page("https://example.com/track")

    def test_read_timeout(self, urlopen):
        urlopen.result = socket.timeout("timed out")
        with pytest.raises(FetchTimeout):
            fetch_page("https://example.com/track")

    def test_network_error(self, urlopen):
        urlopen.result = urllib.error.URLError("Name or service not known")
        with pytest.raises(FetchError) as exc_info:
            fetch_page("https://example.com/track")
        assert not isinstance(exc_info.value, FetchTimeout)
        assert exc_info.value.status is None

    def test_overall_deadline(self, urlopen, monkeypatch):
        # Each clock read advances 5 seconds
        ticks = iter(range(0, 1000, 5))
        monkeypatch.setattr(fetcher, "time", types.SimpleNamespace(monotonic=lambda: next(ticks)))
        urlopen.result = FakeResponse(b"x" * (fetcher._CHUNK_SIZE * 4))

        with pytest.raises(FetchTimeout):
            fetch_page("https://example.com/track", timeout=12)


def test_default_headers():
    headers = default_headers("agent/1.0")
    assert headers == {
        "Accept": "text/html,application/json,text/plain,*/*",
        "User-Agent": "agent/1.0",
    }


def test_slow_body_stops_at_deadline(trickle_server, monkeypatch):
    monkeypatch.setenv("NO_PROXY", "127.0.0.1")
    started = time.monotonic()
    with pytest.raises(FetchTimeout):
        fetch_page(trickle_server, timeout=1)
    assert time.monotonic() - started < 3
