"""Tests for airline logo lookup"""
import pytest

from trackpage.images import find_airline_image, resolve_image_url

BASE_URL = "https://www.flightaware.com/live/flight/NOK531/history/20260212/1130Z/VTSP/VTBD"


class TestFindAirlineImage:
    """Test find_airline_image priority order and resolution"""

    def test_absolute_airline_url(self):
        html = '<div style="background:url(https://cdn.example.com/img/airline/NOK.png)"></div>'
        assert find_airline_image(html) == "https://cdn.example.com/img/airline/NOK.png"

    def test_airline_url_beats_generic_logo(self):
        html = '''
        <img src="https://cdn.example.com/site/logo.svg">
        <img src="https://cdn.example.com/airline_logos/NOK.webp">
        '''
        assert find_airline_image(html) == "https://cdn.example.com/airline_logos/NOK.webp"

    def test_generic_logo(self):
        html = '<img src="https://cdn.example.com/logos/carrier-NOK.jpg">'
        assert find_airline_image(html) == "https://cdn.example.com/logos/carrier-NOK.jpg"

    def test_root_relative_attribute_resolved(self):
        html = '<img class="carrier" src="/images/airline/NOK_200.png">'
        assert find_airline_image(html, BASE_URL) == "https://www.flightaware.com/images/airline/NOK_200.png"

    def test_root_relative_without_base_is_skipped(self):
        html = '<img src="/images/airline/NOK_200.png">'
        assert find_airline_image(html) is None

    def test_relative_without_slash_is_skipped(self):
        html = '<img src="images/airline/NOK_200.png">'
        assert find_airline_image(html, BASE_URL) is None

    def test_relative_candidate_falls_through_to_og_image(self):
        html = '''
        <img src="/images/airline/NOK_200.png">
        <meta property="og:image" content="https://images.example.com/share/card.jpg" />
        '''
        assert find_airline_image(html) == "https://images.example.com/share/card.jpg"

    def test_og_image(self):
        html = '<meta property="og:image" content="https://images.example.com/share/card.jpg" />'
        assert find_airline_image(html) == "https://images.example.com/share/card.jpg"

    def test_og_image_content_first(self):
        html = '<meta content="https://images.example.com/share/card.jpg" property="og:image">'
        assert find_airline_image(html) == "https://images.example.com/share/card.jpg"

    def test_relative_og_image_resolved(self):
        html = '<meta property="og:image" content="/share/card.jpg">'
        assert find_airline_image(html, BASE_URL) == "https://www.flightaware.com/share/card.jpg"
        assert find_airline_image(html) is None

    def test_nothing_found(self):
        assert find_airline_image("<html><body><p>Hello</p></body></html>", BASE_URL) is None
        assert find_airline_image("") is None


class TestResolveImageUrl:
    """Test resolve_image_url"""

    @pytest.mark.parametrize("raw, base, expected", [
        ("https://a.example.com/x.png", None, "https://a.example.com/x.png"),
        ("http://a.example.com/x.png", BASE_URL, "http://a.example.com/x.png"),
        ("/x.png", "https://b.example.com/deep/path?q=1", "https://b.example.com/x.png"),
        ("//cdn.example.com/x.png", "https://b.example.com/", "https://cdn.example.com/x.png"),
        ("/x.png", None, None),
        ("/x.png", "not a url", None),
        ("x.png", "https://b.example.com/", None),
        ("data:image/png;base64,AAAA", None, None),
    ])
    def test_resolution(self, raw, base, expected):
        assert resolve_image_url(raw, base) == expected
