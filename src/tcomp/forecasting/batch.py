"""
Batch evaluation over one frequency class

Fans the single-series evaluator out over every selected series, waits for
all of them, then averages the accuracy tables cell by cell.

Failure policy:
- "raise" (default): the first failing series aborts the batch
- "skip": failing series are left out of the averages and reported
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from tcomp.config import ON_ERROR_POLICIES, load_settings
from tcomp.data.records import Frequency, SeriesCollection, SeriesRecord
from tcomp.errors import AdapterFailure, TcompError
from tcomp.forecasting.evaluation import (HorizonSpec, evaluate,
                                          normalize_horizon_spec)
from tcomp.forecasting.models import ForecastAdapter

logger = logging.getLogger(__name__)

# Competition test sets: single steps plus averaged windows
DEFAULT_HORIZON_SPECS: Dict[Frequency, List[HorizonSpec]] = {
    Frequency.YEARLY: [1, 2, 3, 4, range(1, 3), range(1, 5)],
    Frequency.QUARTERLY: [1, 2, 3, 4, 6, 8, range(1, 5), range(1, 9)],
    Frequency.MONTHLY: [1, 2, 3, 6, 12, 18, 24, range(1, 4), range(1, 13), range(1, 25)],
}


@dataclass(frozen=True)
class SeriesFailure:
    """A series excluded from a batch under the skip policy"""
    series_id: str
    method: Optional[str]
    message: str


@dataclass
class BatchResult:
    """Summary table plus the bookkeeping needed to interpret it"""
    summary: pd.DataFrame
    frequency: Frequency
    n_series: int
    failures: List[SeriesFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_frame(self) -> pd.DataFrame:
        """Long form: [metric, method, horizon, value]"""
        return self.summary.reset_index().melt(
            id_vars=["metric", "method"], var_name="horizon", value_name="value"
        )


def default_horizon_specs(frequency: Union[Frequency, str]) -> List[HorizonSpec]:
    freq = Frequency.parse(frequency)
    if freq not in DEFAULT_HORIZON_SPECS:
        raise ValueError(f"No default horizon specs for frequency '{freq.value}'; pass horizon_specs")
    return list(DEFAULT_HORIZON_SPECS[freq])


def summarize_tables(tables: Sequence[pd.DataFrame], decimals: int = 2) -> pd.DataFrame:
    """
    Cell-wise mean of accuracy tables, rounded.

    All tables must share row and column labels.
    """
    if not tables:
        raise ValueError("No accuracy tables to summarize")

    first = tables[0]
    for table in tables[1:]:
        if not (table.index.equals(first.index) and table.columns.equals(first.columns)):
            raise ValueError("Accuracy tables have mismatched rows or columns")

    stacked = np.stack([t.to_numpy() for t in tables])
    return pd.DataFrame(
        np.round(stacked.mean(axis=0), decimals),
        index=first.index,
        columns=first.columns,
    )


def _failure(record: SeriesRecord, error: TcompError) -> SeriesFailure:
    method = error.method if isinstance(error, AdapterFailure) else None
    return SeriesFailure(series_id=record.series_id, method=method, message=str(error))


def run_batch(
    collection: SeriesCollection,
    frequency: Union[Frequency, str],
    horizon_specs: Optional[Sequence[HorizonSpec]] = None,
    adapters: Optional[Sequence[ForecastAdapter]] = None,
    max_workers: Optional[int] = None,
    executor: Optional[Executor] = None,
    on_error: Optional[str] = None,
) -> BatchResult:
    """
    Evaluate every series of one frequency class and average the results.

    Args:
        collection: Series store to read from
        frequency: Frequency class to select
        horizon_specs: Steps to score (default: competition test set for the class)
        adapters: Forecast adapters (default: ETS, ARIMA, Theta, Naive)
        max_workers: Thread pool size; 1 runs sequentially (default from settings)
        executor: Caller-owned executor (thread or process pool) used instead of a
            per-call thread pool; it is not shut down here
        on_error: "raise" or "skip" (default from settings)

    Returns:
        BatchResult with the SummaryTable and any skipped series

    Raises:
        EmptySelectionError: no series of that frequency class
        AdapterFailure / InvalidHorizonError: a series failed under "raise",
            or every series failed under "skip"
    """
    freq = Frequency.parse(frequency)
    if max_workers is None or on_error is None:
        settings = load_settings()
        max_workers = max_workers if max_workers is not None else settings.max_workers
        on_error = on_error if on_error is not None else settings.on_error

    if on_error not in ON_ERROR_POLICIES:
        raise ValueError(f"on_error must be one of {ON_ERROR_POLICIES}, got {on_error!r}")

    selected = collection.subset(freq)
    if horizon_specs is None:
        horizon_specs = default_horizon_specs(freq)
    # Step tuples, so one-shot iterables survive every series
    horizon_specs = [normalize_horizon_spec(spec) for spec in horizon_specs]

    records = list(selected.values())
    logger.info(
        "Batch start: %d %s series, %d horizon spec(s), on_error=%s",
        len(records), freq.value, len(horizon_specs), on_error,
    )

    tables: Dict[str, pd.DataFrame] = {}
    failures: List[SeriesFailure] = []
    errors: Dict[str, TcompError] = {}

    def _record_failure(record: SeriesRecord, error: TcompError) -> None:
        if on_error == "raise":
            raise error
        logger.warning("Skipping series %s: %s", record.series_id, error)
        failures.append(_failure(record, error))
        errors[record.series_id] = error

    if executor is None and max_workers == 1:
        for record in records:
            try:
                tables[record.series_id] = evaluate(record, horizon_specs, adapters=adapters)
            except TcompError as e:
                _record_failure(record, e)
    else:
        pool = executor or ThreadPoolExecutor(max_workers=max_workers)
        try:
            futures = {
                pool.submit(evaluate, record, horizon_specs, adapters=adapters): record
                for record in records
            }
            try:
                for future in as_completed(futures):
                    record = futures[future]
                    try:
                        tables[record.series_id] = future.result()
                    except TcompError as e:
                        _record_failure(record, e)
            except TcompError:
                for future in futures:
                    future.cancel()
                raise
        finally:
            if executor is None:
                pool.shutdown(wait=True)

    # Fan-in: restore collection order before reducing
    ordered = [tables[r.series_id] for r in records if r.series_id in tables]
    if not ordered:
        first = next(r.series_id for r in records if r.series_id in errors)
        logger.error("Batch failed: all %d %s series failed", len(records), freq.value)
        raise errors[first]

    position = {r.series_id: i for i, r in enumerate(records)}
    failures.sort(key=lambda f: position[f.series_id])
    summary = summarize_tables(ordered)

    logger.info(
        "Batch done: %d/%d series summarized, %d skipped",
        len(ordered), len(records), len(failures),
    )
    return BatchResult(
        summary=summary,
        frequency=freq,
        n_series=len(ordered),
        failures=failures,
    )
