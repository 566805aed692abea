"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

import pytest

from bcv_rates import cli
from bcv_rates.errors import FetchError


def test_fetch_from_html_file_prints_and_exports(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    page = tmp_path / "bcv.html"
    page.write_text('<div id="dolar"><strong>36,50</strong></div>', encoding="utf-8")
    json_out = tmp_path / "out" / "latest.json"
    csv_out = tmp_path / "out" / "rates.csv"

    cli.main(["fetch", "--html-file", str(page), "--output", str(json_out), "--csv", str(csv_out)])

    printed = json.loads(capsys.readouterr().out)
    assert printed["rates"] == {"USD": 36.5}
    assert json.loads(json_out.read_text(encoding="utf-8"))["rates"] == {"USD": 36.5}
    assert ",USD,36.5," in csv_out.read_text(encoding="utf-8")


def test_fetch_uses_network_fetcher(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    requested: List[str] = []

    class DummyFetcher:
        def get(self, url: str) -> str:
            requested.append(url)
            return "<table><tr><td>EUR</td><td>39,80</td></tr></table>"

    monkeypatch.setattr(cli, "build_fetcher", lambda settings: DummyFetcher())
    monkeypatch.delenv("BCV_SOURCE_URL", raising=False)

    cli.main(["fetch"])

    assert requested == ["https://www.bcv.org.ve/"]
    assert json.loads(capsys.readouterr().out)["rates"] == {"EUR": 39.8}


def test_fetch_error_exits_with_status_1(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)

    class FailingFetcher:
        def get(self, url: str) -> str:
            raise FetchError(url, 502)

    monkeypatch.setattr(cli, "build_fetcher", lambda settings: FailingFetcher())

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["fetch"])

    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("Error: Failed to fetch URL")


def test_serve_runs_app_with_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    runs: List[Any] = []

    class DummyApp:
        def run(self, host: str, port: int) -> None:
            runs.append((host, port))

    monkeypatch.setattr(cli, "create_app", lambda settings: DummyApp())
    monkeypatch.delenv("PORT", raising=False)

    cli.main(["serve", "--port", "8081"])

    assert runs == [("0.0.0.0", 8081)]
