"""Tests for the Flask HTTP facade."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import pytest

from bcv_rates.api import create_app
from bcv_rates.config import Settings
from bcv_rates.errors import FetchError
from bcv_rates.extractor import RateExtractor

PAGE = '<div class="view-tipo-de-cambio-oficial-del-bcv">USD 36,50 EUR 39,80</div>'


class FakeFetcher:
    def __init__(self, html: str = PAGE, error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.calls: List[str] = []

    def get(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.html


def _client(fetcher: FakeFetcher, extractor: RateExtractor | None = None):
    clock = lambda: datetime(2025, 10, 20, 12, 0, tzinfo=timezone.utc)  # noqa: E731
    app = create_app(Settings(), fetcher=fetcher, extractor=extractor or RateExtractor(clock=clock))
    return app.test_client()


def test_get_rates_returns_record() -> None:
    fetcher = FakeFetcher()
    response = _client(fetcher).get("/api/rates")

    assert response.status_code == 200
    assert response.get_json() == {
        "success": True,
        "date": "2025-10-20",
        "rates": {"USD": 36.5, "EUR": 39.8},
        "source": "https://www.bcv.org.ve/",
        "timestamp": "2025-10-20T12:00:00.000Z",
    }
    assert fetcher.calls == ["https://www.bcv.org.ve/"]


def test_get_rates_fetch_failure_is_500_envelope() -> None:
    fetcher = FakeFetcher(error=FetchError("https://www.bcv.org.ve/", None, "Failed to fetch URL (timed out)"))

    response = _client(fetcher).get("/api/rates")

    assert response.status_code == 500
    body = response.get_json()
    assert body["success"] is False
    assert body["error"] == "Failed to fetch exchange rates"
    assert "timed out" in body["message"]


def test_get_rates_parse_failure_is_500_envelope() -> None:
    response = _client(FakeFetcher(html="   ")).get("/api/rates")

    assert response.status_code == 500
    assert response.get_json()["message"] == "Document is empty"


def test_unexpected_error_hides_details() -> None:
    class BrokenExtractor(RateExtractor):
        def extract(self, html, source_url):
            raise KeyError("secret internals")

    response = _client(FakeFetcher(), extractor=BrokenExtractor()).get("/api/rates")

    assert response.status_code == 500
    body = response.get_json()
    assert body["success"] is False
    assert body["error"] == "Internal server error"
    assert "secret" not in body["message"]


def test_health() -> None:
    response = _client(FakeFetcher()).get("/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")


def test_index_describes_endpoints() -> None:
    body = _client(FakeFetcher()).get("/").get_json()

    assert "GET /api/rates" in body["endpoints"]
    assert "GET /health" in body["endpoints"]


def test_unknown_path_is_404_envelope() -> None:
    response = _client(FakeFetcher()).get("/nope")

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": "Not found", "path": "/nope"}


@pytest.mark.parametrize("path", ["/api/rates", "/nope"])
def test_cors_headers_present(path: str) -> None:
    response = _client(FakeFetcher()).get(path)

    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"


def test_preflight_options() -> None:
    fetcher = FakeFetcher()
    response = _client(fetcher).options("/api/rates")

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert fetcher.calls == []
