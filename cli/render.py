from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_LEVEL_COLORS = {
    "low": typer.colors.GREEN,
    "medium": typer.colors.YELLOW,
    "high": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_sensor_risk(payload: Dict[str, Any]) -> None:
    level = payload.get("level")
    echo_heading(f"{payload.get('name')} ({payload.get('id')})")
    typer.secho(f"level: {level}", fg=_LEVEL_COLORS.get(level))
    echo_key_values(
        [
            ("tds", payload.get("tds")),
            ("score", payload.get("score")),
        ]
    )
    typer.echo("explanation:")
    for phrase in payload.get("explanation") or []:
        typer.echo(f"  - {phrase}")


def render_sensor_risks(payloads: Iterable[Dict[str, Any]]) -> None:
    rendered = False
    for payload in payloads:
        if rendered:
            typer.echo()
        render_sensor_risk(payload)
        rendered = True
    if not rendered:
        typer.echo("No sensors matched.")
