"""Operator CLI run through Typer's CliRunner against the in-memory store."""
import json

import pytest
from typer.testing import CliRunner

from travel_bff import cli
from travel_bff.core.store import InMemoryCacheStore
from tests.conftest import RecordingStore

runner = CliRunner()


@pytest.fixture
def patched_store(monkeypatch):
    store = RecordingStore()
    monkeypatch.setattr(cli, "_get_store", lambda: store)
    return store


def test_key_command():
    result = runner.invoke(cli.app, ["key", "geo_search", "tirana"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "geo_search:tirana"


def test_key_command_escapes_separator():
    result = runner.invoke(cli.app, ["key", "ns", "a:b", "c"])
    assert result.stdout.strip() == "ns:a%3Ab:c"


def test_key_command_rejects_blank_namespace():
    result = runner.invoke(cli.app, ["key", " "])
    assert result.exit_code == 2


def test_strategy_command_falls_back_to_default(patched_store: RecordingStore):
    result = runner.invoke(cli.app, ["strategy", "geolocation_search", "--region", "us"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "ttl_minutes": 60,
        "priority": 3,
        "strategy_name": "default",
        "region": None,
    }
    assert patched_store.calls[0][1][:2] == ("geolocation_search", "us")
    assert patched_store.closed


def test_strategy_command_uses_store_row(monkeypatch):
    store = InMemoryCacheStore(strategies={"flights_search": {"ttl_minutes": 15, "strategy_name": "peak"}})
    monkeypatch.setattr(cli, "_get_store", lambda: store)
    result = runner.invoke(cli.app, ["strategy", "flights_search", "-r", "eu"])
    assert json.loads(result.stdout)["ttl_minutes"] == 15


def test_stats_command(patched_store: RecordingStore):
    patched_store.data["a"] = 1
    result = runner.invoke(cli.app, ["stats"])
    assert result.exit_code == 0
    body = json.loads(result.stdout)
    assert body["performance"]["total_entries"] == 1


def test_cleanup_command(patched_store: RecordingStore):
    result = runner.invoke(cli.app, ["cleanup"])
    assert result.exit_code == 0
    assert "Cleanup completed" in result.stdout
    assert patched_store.count("cleanup") == 1


def test_cleanup_command_failure_exit_code(patched_store: RecordingStore):
    patched_store.cleanup_result = patched_store.cleanup_result.failed()
    result = runner.invoke(cli.app, ["cleanup"])
    assert result.exit_code == 1
    assert "Cleanup failed" in result.stdout
