from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from cli.render import render_points, render_row_errors, render_windows
from datastore.series_store import SeriesStore
from logging_config import configure_logging
from models.schemas import AggregateReport, DownsampleReport
from services.aggregator import Aggregator, InvalidArgumentError
from services.csv_io import export_points, export_series, import_points
from settings import Settings, get_settings, parse_log_level

DEMO_POINTS = ((0, 10.0), (500, 20.0), (1000, 30.0))


@dataclass
class CLIState:
    settings: Settings
    store: SeriesStore
    aggregator: Aggregator


app = typer.Typer(
    help="Aggregate and downsample time series loaded from CSV files.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _load_series(state: CLIState, path: Path, series: str) -> None:
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            result = import_points(state.store, series, handle)
    except ValueError as exc:
        typer.secho(f"Could not read {path}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    if result.errors:
        typer.secho(
            f"Skipped {len(result.errors)} invalid row(s) in {path}:",
            fg=typer.colors.YELLOW,
            err=True,
        )
        render_row_errors(result.errors)


def _invalid_step(exc: InvalidArgumentError) -> typer.Exit:
    typer.secho(f"Invalid argument: {exc}", fg=typer.colors.RED, err=True)
    return typer.Exit(code=2)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    settings = get_settings()
    level = None
    if log_level is not None:
        level = parse_log_level(log_level)
        if level is None:
            raise typer.BadParameter(f"Unknown log level {log_level!r}.", param_hint="'--log-level'")
    configure_logging(level, force=level is not None)
    store = SeriesStore()
    ctx.obj = CLIState(settings=settings, store=store, aggregator=Aggregator(store))


@app.command("aggregate")
def aggregate_command(
    ctx: typer.Context,
    csv_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="CSV with ts,value rows."),
    series: Optional[str] = typer.Option(None, "--series", "-s", help="Series name to load the rows into."),
    from_ts: int = typer.Option(..., "--from", help="Range start in milliseconds (inclusive)."),
    to_ts: int = typer.Option(..., "--to", help="Range end in milliseconds (inclusive)."),
    step: Optional[int] = typer.Option(None, "--step", help="Window width in milliseconds."),
    as_json: bool = typer.Option(False, "--json", help="Emit the windows as JSON."),
) -> None:
    """Print per-window mean and count for a range."""
    state = _get_state(ctx)
    name = series or state.settings.default_series
    step_ms = step if step is not None else state.settings.default_step_ms
    _load_series(state, csv_file, name)

    try:
        windows = state.aggregator.aggregate(name, from_ts, to_ts, step_ms)
    except InvalidArgumentError as exc:
        raise _invalid_step(exc) from exc

    if as_json:
        report = AggregateReport.build(name, from_ts, to_ts, step_ms, windows)
        typer.echo(report.model_dump_json(indent=2))
        return
    render_windows(name, windows, step_ms)


@app.command("downsample")
def downsample_command(
    ctx: typer.Context,
    csv_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="CSV with ts,value rows."),
    series: Optional[str] = typer.Option(None, "--series", "-s", help="Series name to load the rows into."),
    from_ts: int = typer.Option(..., "--from", help="Range start in milliseconds (inclusive)."),
    to_ts: int = typer.Option(..., "--to", help="Range end in milliseconds (inclusive)."),
    step: Optional[int] = typer.Option(None, "--step", help="Window width in milliseconds."),
    as_json: bool = typer.Option(False, "--json", help="Emit the points as JSON."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the downsampled series to this CSV file instead of printing it.",
    ),
) -> None:
    """Reduce a range to one point per window; empty windows become 0."""
    state = _get_state(ctx)
    name = series or state.settings.default_series
    step_ms = step if step is not None else state.settings.default_step_ms
    _load_series(state, csv_file, name)

    try:
        points = state.aggregator.downsample(name, from_ts, to_ts, step_ms)
    except InvalidArgumentError as exc:
        raise _invalid_step(exc) from exc

    if output is not None:
        rows = export_points(points, output)
        typer.secho(f"Wrote {rows} point(s) to {output}", fg=typer.colors.GREEN)
        return

    if as_json:
        report = DownsampleReport.build(name, from_ts, to_ts, step_ms, points)
        typer.echo(report.model_dump_json(indent=2))
        return
    render_points(name, points)


@app.command("demo")
def demo_command(
    ctx: typer.Context,
    step: int = typer.Option(500, "--step", help="Window width in milliseconds."),
) -> None:
    """Aggregate a small built-in series over [0, 999]."""
    state = _get_state(ctx)
    name = "x"
    for timestamp, value in DEMO_POINTS:
        state.store.insert(name, timestamp, value)

    try:
        windows = state.aggregator.aggregate(name, 0, 999, step)
        points = state.aggregator.downsample(name, 0, 999, step)
    except InvalidArgumentError as exc:
        raise _invalid_step(exc) from exc

    render_windows(name, windows, step)
    typer.echo()
    render_points(name, points)


@app.command("export")
def export_command(
    ctx: typer.Context,
    csv_files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="CSV files with ts,value rows."),
    output_dir: Path = typer.Option(..., "--output-dir", "-d", file_okay=False, help="Directory for the exported CSV files."),
) -> None:
    """Load each CSV into a series named after the file and write every series back out."""
    state = _get_state(ctx)
    for path in csv_files:
        _load_series(state, path, path.stem)

    for name in state.store.series_names():
        rows = export_series(state.store, name, output_dir / f"{name}.csv")
        typer.echo(f"  {name}: {rows} point(s)")
    typer.secho(f"Exported {len(state.store)} series to {output_dir}", fg=typer.colors.GREEN)
