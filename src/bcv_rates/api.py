"""Flask application exposing the extracted rates as JSON."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException, NotFound

from bcv_rates.config import Settings
from bcv_rates.errors import ExtractionError
from bcv_rates.extractor import RateExtractor, format_timestamp
from bcv_rates.fetcher import Fetcher

logger = logging.getLogger(__name__)

API_NAME = "BCV Exchange Rate API"
API_VERSION = "0.1.0"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def build_fetcher(settings: Settings) -> Fetcher:
    headers = {"User-Agent": settings.source.user_agent} if settings.source.user_agent else None
    return Fetcher(
        timeout=settings.source.timeout_seconds,
        headers=headers,
        verify_ssl=settings.source.verify_ssl,
    )


def create_app(
    settings: Optional[Settings] = None,
    fetcher: Optional[Fetcher] = None,
    extractor: Optional[RateExtractor] = None,
) -> Flask:
    """Build the Flask app; collaborators can be swapped out for tests."""
    settings = settings or Settings()
    fetcher = fetcher or build_fetcher(settings)
    extractor = extractor or RateExtractor()
    source_url = settings.source.url

    app = Flask(__name__)
    app.json.sort_keys = False

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/")
    def index():
        return jsonify(
            {
                "name": API_NAME,
                "version": API_VERSION,
                "source": source_url,
                "endpoints": {
                    "GET /api/rates": "Current USD and EUR official rates",
                    "GET /health": "Service health check",
                },
            }
        )

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "timestamp": format_timestamp(datetime.now(timezone.utc))})

    @app.get("/api/rates")
    def get_rates():
        logger.info("GET /api/rates - source=%s", source_url)
        try:
            html = fetcher.get(source_url)
            record = extractor.extract(html, source_url)
        except ExtractionError as exc:
            logger.error("Failed to extract rates: %s", exc)
            return (
                jsonify(
                    {
                        "success": False,
                        "error": "Failed to fetch exchange rates",
                        "message": exc.message,
                    }
                ),
                500,
            )
        return jsonify(record.to_dict())

    @app.errorhandler(NotFound)
    def not_found(exc: NotFound):
        return jsonify({"success": False, "error": "Not found", "path": request.path}), 404

    @app.errorhandler(Exception)
    def internal_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        logger.error("Unexpected error handling %s", request.path, exc_info=True)
        return (
            jsonify(
                {
                    "success": False,
                    "error": "Internal server error",
                    "message": "An unexpected error occurred",
                }
            ),
            500,
        )

    return app
