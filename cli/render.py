from __future__ import annotations

from typing import Iterable, Sequence

import typer

from models.records import Point, Window
from services.csv_io import RowError

EMPTY_MARKER = "-"


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_windows(series: str, windows: Sequence[Window], step_ms: int) -> None:
    echo_heading(f"Windows for {series} (step={step_ms}ms)")
    if not windows:
        typer.echo("No windows in range.")
        return
    for window in windows:
        average = EMPTY_MARKER if window.is_empty else f"{window.average:g}"
        typer.echo(
            f"  [{window.start}, {window.end(step_ms)}] "
            f"average={average} count={window.count}"
        )


def render_points(series: str, points: Sequence[Point]) -> None:
    echo_heading(f"Downsampled {series}")
    if not points:
        typer.echo("No points in range.")
        return
    for point in points:
        typer.echo(f"  ts={point.timestamp} value={point.value:g}")


def render_row_errors(errors: Iterable[RowError]) -> None:
    for error in errors:
        typer.secho(
            f"  - row {error.row_number}: {error.reason}",
            fg=typer.colors.YELLOW,
            err=True,
        )
