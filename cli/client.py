from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import httpx
import typer

from cli.config import CLIConfig


def read_snapshot_file(path: Path) -> Dict[str, Any]:
    """Load a ``{"sensors": [...]}`` document, accepting a bare list too."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"File {path} is not valid JSON: {exc.msg}") from exc
    if isinstance(data, list):
        return {"sensors": data}
    if not isinstance(data, dict) or not isinstance(data.get("sensors"), list):
        raise typer.BadParameter(f"File {path} must contain a 'sensors' list.")
    return data


class ApiClient:
    """Minimal HTTP client for the risk service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def push_snapshot(self, path: Path) -> int:
        payload = read_snapshot_file(path)
        try:
            response = self._client.put("/sensors", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        count = response.json().get("sensor_count")
        if not isinstance(count, int):
            raise typer.BadParameter("Unexpected response payload when pushing sensors.")
        return count

    def get_risk(self, sensor_id: str) -> Dict[str, Any]:
        try:
            response = self._client.get(f"/sensors/{sensor_id}/risk")
            if response.status_code == 404:
                raise typer.BadParameter(f"Sensor {sensor_id} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except ValueError:
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
