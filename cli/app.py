from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from app.schemas import ScoredSensorResponse, SensorSnapshotRequest
from cli.client import ApiClient, read_snapshot_file
from cli.config import CLIConfig, load_config
from cli.render import echo_key_values, render_sensor_risk, render_sensor_risks
from models.records import SensorReading
from services.risk_scorer import RiskLevel, RiskScorer
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Score groundwater sensors for salinity risk, locally or through the API.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _load_readings(path: Path) -> List[SensorReading]:
    try:
        request = SensorSnapshotRequest.model_validate(read_snapshot_file(path))
        return request.to_readings()
    except (ValidationError, ValueError) as exc:
        raise typer.BadParameter(f"Invalid sensor data in {path}: {exc}") from exc


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Risk API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds for API commands.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("score")
def score_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a JSON sensor snapshot."),
    level: Optional[List[RiskLevel]] = typer.Option(
        None,
        "--level",
        "-l",
        help="Only show sensors at this risk level (repeatable).",
    ),
) -> None:
    """Score a sensor snapshot file locally, each sensor against all others."""
    readings = _load_readings(file)
    scorer = RiskScorer(trend_window=get_settings().trend_window)
    scored = scorer.analyze_all(readings)
    if level:
        scored = [item for item in scored if item.assessment.level in set(level)]
    render_sensor_risks(
        ScoredSensorResponse.from_scored(item).model_dump(mode="json") for item in scored
    )


@app.command("classify")
def classify_command(
    tds: float = typer.Argument(..., min=0, help="Total dissolved solids, ppm."),
) -> None:
    """Show the risk tier, TDS factor and subsidence estimate for one reading."""
    try:
        reading = SensorReading(id="adhoc", tds=tds)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="TDS") from exc
    scorer = RiskScorer()
    subsidence = scorer.estimate_subsidence(reading)
    echo_key_values(
        [
            ("level", scorer.classify_level(tds).value),
            ("tds_factor", round(scorer.tds_factor(tds), 2)),
            ("subsidence", f"{subsidence.percentage:.1f}% ({subsidence.description})"),
        ]
    )


@app.command("push")
def push_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a JSON sensor snapshot."),
) -> None:
    """Replace the API's sensor snapshot with the file contents."""
    state = _get_state(ctx)
    typer.echo(f"Pushing {file} to {state.config.base_url} ...")
    count = state.client.push_snapshot(file)
    typer.secho(f"Snapshot accepted. sensor_count={count}", fg=typer.colors.GREEN)


@app.command("risk")
def risk_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Sensor identifier."),
) -> None:
    """Fetch the risk assessment of one sensor from the API."""
    state = _get_state(ctx)
    render_sensor_risk(state.client.get_risk(sensor_id))
