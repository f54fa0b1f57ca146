# file: src/tcomp/cli.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tcomp.config import load_settings
from tcomp.data.loader import load_tourism
from tcomp.data.records import SeriesCollection
from tcomp.errors import TcompError
from tcomp.forecasting.batch import run_batch
from tcomp.forecasting.evaluation import evaluate, parse_horizon_spec

app = typer.Typer(add_completion=False, help="Tourism competition accuracy evaluation")
console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(asctime)s | %(levelname)s | %(message)s")


def _load(data_dir: Optional[Path]) -> SeriesCollection:
    settings = load_settings(data_dir=str(data_dir) if data_dir else None)
    _setup_logging(settings.log_level)
    return load_tourism(settings.data_dir)


def accuracy_table(df: pd.DataFrame, title: str, decimals: int = 3) -> Table:
    """Render an accuracy or summary table (rows: metric/method)"""
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Method", style="cyan")
    for col in df.columns:
        table.add_column(str(col), justify="right", style="green")

    for (metric, method), row in df.iterrows():
        table.add_row(metric, method, *(f"{v:.{decimals}f}" if pd.notna(v) else "nan" for v in row))

    return table


def _fail(err: Exception) -> None:
    console.print(f"[bold red]FAILED[/bold red] {escape(str(err))}")
    raise typer.Exit(code=1)


@app.command()
def show(
    series_id: str,
    data_dir: Optional[Path] = typer.Option(None, help="Directory with competition CSV files"),
):
    """Describe one series."""
    collection = _load(data_dir)
    if series_id not in collection:
        console.print(f"[bold red]Unknown series:[/bold red] {series_id}")
        raise typer.Exit(code=1)

    table = Table(title=f"Series {series_id}")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for k, v in collection[series_id].summary().items():
        table.add_row(str(k), str(v))

    console.print(table)


@app.command("evaluate")
def evaluate_cmd(
    series_id: str,
    test: Optional[List[str]] = typer.Option(None, "--test", "-t", help="Horizon spec: 3, 1-4 or 1,3,5"),
    plot: Optional[Path] = typer.Option(None, help="Save a comparison plot to this PNG"),
    data_dir: Optional[Path] = typer.Option(None, help="Directory with competition CSV files"),
):
    """Score ETS, ARIMA, Theta and Naive on one series."""
    collection = _load(data_dir)
    if series_id not in collection:
        console.print(f"[bold red]Unknown series:[/bold red] {series_id}")
        raise typer.Exit(code=1)

    try:
        specs = [parse_horizon_spec(t) for t in test] if test else None
        result = evaluate(collection[series_id], specs, plot=plot is not None)
    except TcompError as e:
        _fail(e)

    if plot is not None:
        import matplotlib.pyplot as plt

        from tcomp.forecasting.plotting import save_figure

        save_figure(plt.gcf(), plot)
        console.print(f"Plot saved: {plot}")

    console.print(accuracy_table(result, f"Accuracy: {series_id}"))


@app.command()
def batch(
    frequency: str,
    test: Optional[List[str]] = typer.Option(None, "--test", "-t", help="Horizon spec: 3, 1-4 or 1,3,5"),
    max_workers: Optional[int] = typer.Option(None, help="Parallel workers (default TCOMP_MAX_WORKERS)"),
    on_error: Optional[str] = typer.Option(None, help="raise | skip (default TCOMP_ON_ERROR)"),
    output: Optional[Path] = typer.Option(None, help="Write the summary as long-form CSV"),
    data_dir: Optional[Path] = typer.Option(None, help="Directory with competition CSV files"),
):
    """Average accuracy over every series of one frequency class."""
    collection = _load(data_dir)

    try:
        specs = [parse_horizon_spec(t) for t in test] if test else None
        result = run_batch(
            collection,
            frequency,
            horizon_specs=specs,
            max_workers=max_workers,
            on_error=on_error,
        )
    except (TcompError, ValueError) as e:
        _fail(e)

    title = f"Mean accuracy: {result.frequency.value} ({result.n_series} series)"
    console.print(accuracy_table(result.summary, title, decimals=2))

    if result.failures:
        console.print(f"[yellow]Skipped {len(result.failures)} series:[/yellow]")
        for failure in result.failures:
            console.print(f"  - {failure.series_id} ({failure.method or 'horizon'}): {escape(failure.message)}")

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        result.to_frame().to_csv(output, index=False)
        console.print(f"Summary written: {output}")


if __name__ == "__main__":
    app()
