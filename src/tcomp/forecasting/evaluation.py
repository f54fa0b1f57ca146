# file: src/tcomp/forecasting/evaluation.py
"""
Accuracy evaluation for a single series

Runs every adapter over the full held-out window, then scores MAPE and MASE
for each requested horizon spec. A horizon spec is either one step k
(accuracy at step k only) or a set of steps averaged over.
"""

import logging
from collections.abc import Iterable as IterableABC
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from tcomp.data.records import SeriesRecord
from tcomp.errors import AdapterFailure, InvalidHorizonError
from tcomp.forecasting.models import (ForecastAdapter, ForecastResult,
                                      default_adapters, method_names)

logger = logging.getLogger(__name__)

METRICS = ("MAPE", "MASE")

HorizonSpec = Union[int, Iterable[int], str]


class AccuracyMetrics:
    """MAPE and MASE as used by the tourism competition"""

    @staticmethod
    def mape(actual: np.ndarray, forecast: np.ndarray) -> float:
        """
        Mean Absolute Percentage Error, as a fraction (0.1875, not 18.75)
        """
        return float(np.mean(np.abs(actual - forecast) / np.abs(actual)))

    @staticmethod
    def seasonal_naive_scale(y_train: np.ndarray, season_length: int = 1) -> float:
        """
        In-sample mean absolute error of the seasonal naive forecast.

        Returns NaN when the training segment has no lag-m pairs.
        """
        if len(y_train) <= season_length:
            return np.nan

        return float(np.mean(np.abs(y_train[season_length:] - y_train[:-season_length])))

    @staticmethod
    def mase(actual: np.ndarray, forecast: np.ndarray, scale: float) -> float:
        """
        Mean Absolute Scaled Error

        Returns NaN if the scale is unavailable or zero.
        """
        if not np.isfinite(scale) or scale < 1e-10:
            return np.nan

        return float(np.mean(np.abs(actual - forecast)) / scale)


def parse_horizon_spec(text: str) -> Union[int, Tuple[int, ...]]:
    """
    Parse a command-line horizon spec.

    "3" -> 3, "1-4" -> (1, 2, 3, 4), "1,3,5" -> (1, 3, 5)
    """
    raw = text.strip()
    try:
        if "," in raw:
            return tuple(int(part) for part in raw.split(",") if part.strip())
        if "-" in raw.lstrip("-"):
            lo, hi = raw.split("-", 1)
            return tuple(range(int(lo), int(hi) + 1))
        return int(raw)
    except ValueError:
        raise InvalidHorizonError(None, text) from None


def _is_step(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def normalize_horizon_spec(spec: HorizonSpec) -> Tuple[int, ...]:
    """Sorted, de-duplicated 1-based steps for any spec form"""
    if isinstance(spec, str):
        spec = parse_horizon_spec(spec)

    if _is_step(spec):
        steps = (int(spec),)
    elif isinstance(spec, IterableABC):
        items = list(spec)
        if not all(_is_step(s) for s in items):
            raise InvalidHorizonError(None, spec)
        steps = tuple(sorted({int(s) for s in items}))
    else:
        raise InvalidHorizonError(None, spec)

    if not steps or steps[0] < 1:
        raise InvalidHorizonError(None, spec)

    return steps


def horizon_label(steps: Sequence[int]) -> str:
    """Column label: "k", "a-b" for contiguous ranges, "a,b,c" otherwise"""
    if len(steps) == 1:
        return str(steps[0])
    if list(steps) == list(range(steps[0], steps[-1] + 1)):
        return f"{steps[0]}-{steps[-1]}"
    return ",".join(str(s) for s in steps)


def accuracy_index(methods: Sequence[str]) -> pd.MultiIndex:
    """Fixed row order: MAPE for each method, then MASE for each method"""
    return pd.MultiIndex.from_product([METRICS, list(methods)], names=["metric", "method"])


def resolve_horizon_specs(
    record: SeriesRecord,
    horizon_specs: Optional[Sequence[HorizonSpec]] = None,
) -> List[Tuple[int, ...]]:
    """
    Normalize specs and check them against the record's test length.

    Raises:
        InvalidHorizonError: a spec is malformed or reaches past the test segment
    """
    if horizon_specs is None:
        horizon_specs = [record.horizon]

    resolved = []
    for spec in horizon_specs:
        try:
            steps = normalize_horizon_spec(spec)
        except InvalidHorizonError:
            raise InvalidHorizonError(record.series_id, spec) from None

        if steps[-1] > record.horizon:
            raise InvalidHorizonError(record.series_id, spec, available=record.horizon)
        resolved.append(steps)

    return resolved


def forecast_all(
    record: SeriesRecord,
    adapters: Optional[Sequence[ForecastAdapter]] = None,
) -> Dict[str, ForecastResult]:
    """
    Forecast the full held-out window with every adapter, in adapter order.

    Raises:
        AdapterFailure: an adapter raised or returned unusable forecasts
    """
    if adapters is None:
        adapters = default_adapters()

    h = record.horizon
    results = {}

    for name, adapter in zip(method_names(adapters), adapters):
        try:
            result = adapter.forecast(record.train, h, season_length=record.season_length)
        except Exception as e:
            raise AdapterFailure(name, record.series_id, f"{type(e).__name__}: {e}") from e

        if result.horizon != h:
            raise AdapterFailure(
                name, record.series_id, f"returned {result.horizon} steps, expected {h}"
            )
        if not np.all(np.isfinite(result.mean)):
            raise AdapterFailure(name, record.series_id, "non-finite point forecasts")

        results[name] = result

    return results


def score_forecasts(
    record: SeriesRecord,
    forecasts: Dict[str, ForecastResult],
    steps_list: Sequence[Tuple[int, ...]],
) -> pd.DataFrame:
    """Build the AccuracyTable from already computed forecasts"""
    methods = list(forecasts)
    scale = AccuracyMetrics.seasonal_naive_scale(record.train, record.season_length)
    if not np.isfinite(scale) or scale < 1e-10:
        logger.warning(
            "Series %s: seasonal naive scale unavailable (n_train=%d, m=%d), MASE is NaN",
            record.series_id, len(record.train), record.season_length,
        )

    values = np.empty((len(METRICS) * len(methods), len(steps_list)))
    for j, steps in enumerate(steps_list):
        idx = np.asarray(steps) - 1
        actual = record.test[idx]
        for i, method in enumerate(methods):
            predicted = forecasts[method].mean[idx]
            values[i, j] = AccuracyMetrics.mape(actual, predicted)
            values[len(methods) + i, j] = AccuracyMetrics.mase(actual, predicted, scale)

    return pd.DataFrame(
        values,
        index=accuracy_index(methods),
        columns=[horizon_label(steps) for steps in steps_list],
    )


def evaluate(
    record: SeriesRecord,
    horizon_specs: Optional[Sequence[HorizonSpec]] = None,
    adapters: Optional[Sequence[ForecastAdapter]] = None,
    plot: bool = False,
    axes=None,
) -> pd.DataFrame:
    """
    Score every method on one series.

    Args:
        record: Series to evaluate
        horizon_specs: Steps to score; defaults to the final held-out step
        adapters: Forecast adapters in row order (default: ETS, ARIMA, Theta, Naive)
        plot: Also draw actuals against each method's forecasts
        axes: Optional 2x2 matplotlib axes for the plot

    Returns:
        AccuracyTable: 8 rows (metric, method), one column per horizon spec

    Raises:
        InvalidHorizonError: before any forecasting, if a spec cannot be scored
        AdapterFailure: if any method fails
    """
    steps_list = resolve_horizon_specs(record, horizon_specs)
    forecasts = forecast_all(record, adapters)
    table = score_forecasts(record, forecasts, steps_list)

    if plot:
        from tcomp.forecasting.plotting import plot_forecasts

        plot_forecasts(record, forecasts, axes=axes)

    logger.debug("Series %s evaluated: %d horizon spec(s)", record.series_id, len(steps_list))
    return table
