"""Command-line interface for the BCV rates service."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from bcv_rates.api import build_fetcher, create_app
from bcv_rates.config import load_settings
from bcv_rates.exporter import export_record_to_json, export_records_to_csv
from bcv_rates.extractor import RateExtractor
from bcv_rates.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bcv-rates", description="Serve or fetch BCV exchange rates.")
    parser.add_argument("--settings", default=None, help="Path to settings YAML.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Override server.host.")
    serve.add_argument("--port", type=int, default=None, help="Override server.port.")

    fetch = subparsers.add_parser("fetch", help="Extract rates once and print them as JSON.")
    fetch.add_argument("--html-file", default=None, help="Read HTML from a file instead of the network.")
    fetch.add_argument("--output", default=None, help="Also write the JSON record to this path.")
    fetch.add_argument("--csv", default=None, help="Also write the rates as CSV to this path.")
    return parser


def _serve(args: argparse.Namespace, settings) -> None:
    host = args.host or settings.server.host
    port = args.port or settings.server.port
    app = create_app(settings)
    logger.info("BCV rates API listening on http://%s:%s", host, port)
    app.run(host=host, port=port)


def _fetch(args: argparse.Namespace, settings) -> None:
    source_url = settings.source.url
    if args.html_file:
        html = Path(args.html_file).read_text(encoding="utf-8")
    else:
        html = build_fetcher(settings).get(source_url)

    record = RateExtractor().extract(html, source_url)
    print(json.dumps(record.to_dict(), ensure_ascii=False, indent=2))

    if args.output:
        export_record_to_json(record, args.output)
    if args.csv:
        export_records_to_csv([record], args.csv)


def main(argv: List[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    try:
        settings = load_settings(args.settings)
        setup_logging(settings.log_level)
        if args.command == "serve":
            _serve(args, settings)
        else:
            _fetch(args, settings)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
