from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from cli.app import app


class StubClient:
    def __init__(self, config, sensor_count: int = 3) -> None:
        self.config = config
        self.sensor_count = sensor_count
        self.pushed_path: Path | None = None
        self.risk_calls: List[str] = []
        self.risk_payload: Dict[str, Any] = {
            "id": "S001",
            "name": "Field 1",
            "tds": 3200.0,
            "level": "high",
            "score": 29,
            "explanation": [
                "High salinity (TDS > 3000 ppm)",
                "Rapidly increasing salinization trend",
            ],
        }
        self.closed = False

    def push_snapshot(self, path: Path) -> int:
        self.pushed_path = path
        return self.sensor_count

    def get_risk(self, sensor_id: str) -> Dict[str, Any]:
        self.risk_calls.append(sensor_id)
        payload = self.risk_payload.copy()
        payload["id"] = sensor_id
        return payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def snapshot_file(tmp_path) -> Path:
    path = tmp_path / "sensors.json"
    path.write_text(
        json.dumps(
            {
                "sensors": [
                    {"id": "S001", "tds": 2100},
                    {"id": "S002", "tds": 3200},
                    {"id": "S003", "tds": 1200},
                    {"id": "S004", "tds": 1800},
                ]
            }
        )
    )
    return path


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_score_renders_every_sensor(monkeypatch, runner: CliRunner, snapshot_file: Path) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["score", str(snapshot_file)])

    assert result.exit_code == 0
    for sensor_id in ("S001", "S002", "S003", "S004"):
        assert f"({sensor_id})" in result.stdout
    assert "score: 14" in result.stdout
    assert "Moderate salinity (1500-3000 ppm)" in result.stdout
    assert stub.closed is True


def test_score_filters_by_level(monkeypatch, runner: CliRunner, snapshot_file: Path) -> None:
    _install_stub(monkeypatch, StubClient(config=None))

    result = runner.invoke(app, ["score", str(snapshot_file), "--level", "high"])

    assert result.exit_code == 0
    assert "(S002)" in result.stdout
    assert "(S001)" not in result.stdout


def test_score_accepts_bare_list(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch, StubClient(config=None))
    path = tmp_path / "list.json"
    path.write_text(json.dumps([{"id": "A", "tds": 0}]))

    result = runner.invoke(app, ["score", str(path)])

    assert result.exit_code == 0
    assert "Insufficient data" in result.stdout


def test_score_rejects_invalid_readings(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch, StubClient(config=None))
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"sensors": [{"id": "A", "tds": -10}]}))

    result = runner.invoke(app, ["score", str(path)])

    assert result.exit_code != 0


def test_classify(monkeypatch, runner: CliRunner) -> None:
    _install_stub(monkeypatch, StubClient(config=None))

    result = runner.invoke(app, ["classify", "2100"])

    assert result.exit_code == 0
    assert "level: medium" in result.stdout
    assert "tds_factor: 28.0" in result.stdout
    assert "subsidence: 70.0%" in result.stdout


def test_push(monkeypatch, runner: CliRunner, snapshot_file: Path) -> None:
    stub = StubClient(config=None, sensor_count=4)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--base-url", "http://risk.local/", "push", str(snapshot_file)])

    assert result.exit_code == 0
    assert "Snapshot accepted. sensor_count=4" in result.stdout
    assert stub.pushed_path == snapshot_file
    assert stub.config.base_url == "http://risk.local"
    assert stub.closed is True


def test_risk_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["risk", "S009"])

    assert result.exit_code == 0
    assert stub.risk_calls == ["S009"]
    assert "Field 1 (S009)" in result.stdout
    assert "level: high" in result.stdout
    assert "Rapidly increasing salinization trend" in result.stdout


@pytest.mark.parametrize("raw", ["nan", "inf"])
def test_classify_rejects_non_finite_tds(monkeypatch, runner: CliRunner, raw: str) -> None:
    _install_stub(monkeypatch, StubClient(config=None))

    result = runner.invoke(app, ["classify", raw])

    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)
