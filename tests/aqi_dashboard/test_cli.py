"""Tests for the Typer CLI with the WAQI client stubbed out."""

from types import SimpleNamespace

from typer.testing import CliRunner

from src.aqi_dashboard import cli
from src.aqi_dashboard.errors import SemanticError

runner = CliRunner()


def _stub_client(monkeypatch, fetch):
    captured = {}

    def _factory(cfg, token=None):
        captured["cfg"] = cfg
        captured["token"] = token
        return SimpleNamespace(fetch_snapshot=fetch)

    monkeypatch.setattr(cli, "WAQIClient", _factory)
    return captured


def test_fetch_prints_view_model(monkeypatch, snapshot):
    captured = _stub_client(monkeypatch, lambda: snapshot)

    result = runner.invoke(cli.app, ["fetch", "--token", "abc", "--station", "shanghai"])

    assert result.exit_code == 0, result.output
    assert "Moderate" in result.output
    assert "PM2.5" in result.output
    assert "Forecast: PM10" in result.output
    assert captured["cfg"].station == "shanghai"
    assert captured["token"] == "abc"


def test_fetch_series_option(monkeypatch, snapshot):
    captured = _stub_client(monkeypatch, lambda: snapshot)

    result = runner.invoke(cli.app, ["fetch", "--token", "abc", "--series", "o3"])

    assert result.exit_code == 0, result.output
    assert captured["cfg"].forecast_series == ("o3",)
    assert "Forecast: Ozone (O3)" in result.output


def test_fetch_failure_exit_code(monkeypatch):
    def _fail():
        raise SemanticError("status='error' reason='Invalid key'")

    _stub_client(monkeypatch, _fail)

    result = runner.invoke(cli.app, ["fetch", "--token", "abc"])

    assert result.exit_code == 1
    assert "Failed to load air quality data" in result.output
    assert "Invalid key" not in result.output


def test_fetch_missing_token(monkeypatch):
    def _factory(cfg, token=None):
        raise EnvironmentError("WAQI_TOKEN is missing.")

    monkeypatch.setattr(cli, "WAQIClient", _factory)
    monkeypatch.delenv("WAQI_TOKEN", raising=False)

    result = runner.invoke(cli.app, ["fetch"])

    assert result.exit_code == 2


def test_classify_command():
    result = runner.invoke(cli.app, ["classify", "301"])
    assert result.exit_code == 0
    assert "Hazardous" in result.output
