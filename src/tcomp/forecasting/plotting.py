"""
Plots for competition series and method comparisons

- plot_series: training history with the held-out segment
- plot_forecasts: one panel per method, actuals against forecast and
  80%/95% prediction intervals
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from tcomp.data.records import SeriesRecord
from tcomp.forecasting.models import ForecastResult, intervals_by_level

logger = logging.getLogger(__name__)

TRAIN_COLOR = "black"
TEST_COLOR = "tab:red"
FORECAST_COLOR = "tab:blue"
BAND_ALPHA = {80: 0.35, 95: 0.2}


def _time_axis(record: SeriesRecord) -> tuple:
    """x positions for train and test (period start dates or step numbers)"""
    n_train, n_test = len(record.train), len(record.test)
    if record.start is None:
        x = np.arange(1, n_train + n_test + 1)
    else:
        x = pd.period_range(start=record.start, periods=n_train + n_test).to_timestamp().to_numpy()
    return x[:n_train], x[n_train:]


def plot_series(record: SeriesRecord, ax=None):
    """
    Training data and held-out test data of one series.

    Returns:
        The matplotlib Figure drawn on
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))
    else:
        fig = ax.figure

    x_train, x_test = _time_axis(record)
    ax.plot(x_train, record.train, color=TRAIN_COLOR, label="train")
    ax.plot(x_test, record.test, color=TEST_COLOR, label="test")
    ax.set_title(f"{record.series_id} ({record.frequency.value}, h={record.horizon})")
    ax.legend(loc="upper left")

    return fig


def plot_forecasts(
    record: SeriesRecord,
    forecasts: Dict[str, ForecastResult],
    axes=None,
):
    """
    Compare each method's forecasts with the held-out actuals.

    Args:
        record: Series that was forecast
        forecasts: {method: ForecastResult}, as returned by forecast_all
        axes: Optional array of at least len(forecasts) axes (default 2x2 grid)

    Returns:
        The matplotlib Figure drawn on
    """
    n = len(forecasts)
    if axes is None:
        ncols = 2 if n > 1 else 1
        nrows = int(np.ceil(n / ncols))
        fig, axes = plt.subplots(nrows, ncols, figsize=(12, 3.5 * nrows), squeeze=False)
    else:
        fig = np.ravel(axes)[0].figure

    flat = np.ravel(axes)
    if len(flat) < n:
        raise ValueError(f"Need {n} axes for {n} methods, got {len(flat)}")

    x_train, x_test = _time_axis(record)

    for ax, (method, result) in zip(flat, forecasts.items()):
        for level, (lower, upper) in sorted(intervals_by_level(result).items(), reverse=True):
            ax.fill_between(
                x_test, lower, upper,
                color=FORECAST_COLOR, alpha=BAND_ALPHA[level], linewidth=0,
                label=f"{level}% interval",
            )
        ax.plot(x_train, record.train, color=TRAIN_COLOR)
        ax.plot(x_test, record.test, color=TEST_COLOR, label="actual")
        ax.plot(x_test, result.mean, color=FORECAST_COLOR, label=method)
        ax.set_title(f"{record.series_id}: {method}")

    for ax in flat[n:]:
        ax.set_visible(False)

    flat[0].legend(loc="upper left", fontsize="small")
    fig.tight_layout()

    return fig


def save_figure(fig, path: Union[str, Path], dpi: Optional[int] = 100) -> Path:
    """Write a figure to disk and close it"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved plot: %s", path)
    return path
