"""Tests for visitor logging: UA parsing, geo lookup, API keys, the route."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from unifiedapi.domain.user_agent import parse_user_agent
from unifiedapi.services.geo import GeoLocator

from .helpers import MockCursor

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
FIREFOX_LINUX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"


class TestUserAgent:
    def test_chrome_on_windows(self):
        info = parse_user_agent(CHROME_WINDOWS)
        assert (info.browser, info.os, info.device_type) == ("Chrome", "Windows", "Desktop")

    def test_iphone_matches_mac_rule_first(self):
        info = parse_user_agent(SAFARI_IPHONE)
        assert (info.browser, info.os, info.device_type) == ("Safari", "MacOS", "Mobile")

    def test_firefox_on_linux(self):
        info = parse_user_agent(FIREFOX_LINUX)
        assert (info.browser, info.os) == ("Firefox", "Linux")

    def test_tablet(self):
        assert parse_user_agent("SomeBrowser (Tablet)").device_type == "Tablet"

    @pytest.mark.parametrize("ua", [None, ""])
    def test_missing(self, ua):
        info = parse_user_agent(ua)
        assert (info.browser, info.os, info.device_type) == ("Unknown", "Unknown", "Desktop")


class TestGeoLocator:
    def _session(self, *, json_data=None, exc=None):
        session = MagicMock()
        if exc is not None:
            session.get.side_effect = exc
        else:
            resp = MagicMock()
            resp.json.return_value = json_data
            session.get.return_value = resp
        return session

    def test_country_name(self):
        session = self._session(json_data={"country_name": "Mexico"})
        geo = GeoLocator("https://geo.example/{ip}/json/", timeout=1.5, session=session)
        assert geo.lookup_country("201.1.2.3") == "Mexico"
        session.get.assert_called_once_with("https://geo.example/201.1.2.3/json/", timeout=1.5)

    @pytest.mark.parametrize("exc", [requests.Timeout("slow"), requests.ConnectionError("down")])
    def test_transport_failure_is_unknown(self, exc):
        geo = GeoLocator(session=self._session(exc=exc))
        assert geo.lookup_country("1.2.3.4") == "Unknown"

    def test_bad_json_is_unknown(self):
        session = self._session()
        session.get.return_value.json.side_effect = ValueError("not json")
        assert GeoLocator(session=session).lookup_country("1.2.3.4") == "Unknown"

    def test_missing_country_is_unknown(self):
        geo = GeoLocator(session=self._session(json_data={"error": True, "reason": "RateLimited"}))
        assert geo.lookup_country("1.2.3.4") == "Unknown"

    def test_no_ip_skips_lookup(self):
        session = self._session()
        assert GeoLocator(session=session).lookup_country(None) == "Unknown"
        session.get.assert_not_called()


def _stored_row(query, params):
    return [(1, *params, datetime(2026, 10, 19, tzinfo=timezone.utc))], 1


@pytest.fixture
def geo_client(settings, fake_db, gate_service):
    from fastapi.testclient import TestClient

    from unifiedapi.api.factory import create_app

    geo = MagicMock(spec=GeoLocator)
    geo.lookup_country.return_value = "Mexico"
    fake_db.cursor = MockCursor(_stored_row)
    app = create_app(settings, db=fake_db, geo=geo, gate_service=gate_service)
    return TestClient(app), geo


class TestLogRoute:
    def test_unknown_site(self, geo_client):
        client, _ = geo_client
        response = client.post("/api/logs/blog", headers={"x-api-key": "whatever"})
        assert response.status_code == 400
        assert response.json() == {"error": "Unknown site"}

    def test_wrong_key(self, geo_client):
        client, _ = geo_client
        response = client.post("/api/logs/wedding", headers={"x-api-key": "nope"})
        assert response.status_code == 403
        assert response.json() == {"error": "Invalid API Key"}

    def test_missing_key(self, geo_client):
        client, _ = geo_client
        assert client.post("/api/logs/wedding").status_code == 403

    def test_records_enriched_visit(self, geo_client, fake_db):
        client, geo = geo_client
        response = client.post(
            "/api/logs/wedding",
            json={"url": "https://example.com/rsvp"},
            headers={
                "x-api-key": "wedding-key",
                "x-forwarded-for": "201.1.2.3, 10.0.0.1",
                "user-agent": CHROME_WINDOWS,
                "referer": "https://google.com",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["site_id"] == "wedding"
        assert body["message"] == "Visitor logged"
        assert body["ip"] == "201.1.2.3"
        assert body["country"] == "Mexico"
        assert (body["browser"], body["os"], body["device_type"]) == ("Chrome", "Windows", "Desktop")
        assert body["url"] == "https://example.com/rsvp"
        assert body["referrer"] == "https://google.com"
        geo.lookup_country.assert_called_once_with("201.1.2.3")
        assert fake_db.commits == 1

    def test_real_ip_header_fallback(self, geo_client):
        client, geo = geo_client
        response = client.post(
            "/api/logs/wedding",
            json={"message": "hello"},
            headers={"x-api-key": "wedding-key", "x-real-ip": "8.8.8.8"},
        )
        assert response.json()["message"] == "hello"
        geo.lookup_country.assert_called_once_with("8.8.8.8")
