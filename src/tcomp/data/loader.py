# file: src/tcomp/data/loader.py
"""
Build SeriesCollections from tidy frames or the competition's CSV files.

Every gate fails loud (ValueError naming the series) instead of silently
dropping observations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from tcomp.data.records import Frequency, SeriesCollection, SeriesRecord

logger = logging.getLogger(__name__)

FrequencyLike = Union[Frequency, str]

# Competition file names per frequency class: (training file, held-out file)
COMPETITION_FILES = {
    Frequency.YEARLY: ("yearly_in.csv", "yearly_oos.csv"),
    Frequency.QUARTERLY: ("quarterly_in.csv", "quarterly_oos.csv"),
    Frequency.MONTHLY: ("monthly_in.csv", "monthly_oos.csv"),
}


def _resolve_frequency(
    frequency: Union[FrequencyLike, Mapping[str, FrequencyLike]],
    series_id: str,
) -> Frequency:
    if isinstance(frequency, Mapping):
        if series_id not in frequency:
            raise ValueError(f"No frequency given for series {series_id}")
        return Frequency.parse(frequency[series_id])
    return Frequency.parse(frequency)


def _start_period(ds: pd.Series, freq: Frequency, series_id: str) -> Optional[pd.Period]:
    """First timestamp as a Period, or None for integer-indexed series"""
    first = ds.iloc[0]
    if freq.period_freq is None or pd.api.types.is_integer_dtype(ds):
        return None
    try:
        return pd.Period(pd.Timestamp(first), freq=freq.period_freq)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Series {series_id}: cannot parse start period {first!r}: {e}") from e


def collection_from_frames(
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    frequency: Union[FrequencyLike, Mapping[str, FrequencyLike]],
) -> SeriesCollection:
    """
    Build a collection from statsforecast-style frames [unique_id, ds, y].

    Args:
        train_df: Training observations
        test_df: Held-out observations, one block per training series
        frequency: One frequency class for all series, or a mapping per series id

    Returns:
        SeriesCollection in order of first appearance in train_df
    """
    for name, df in (("train_df", train_df), ("test_df", test_df)):
        missing = [c for c in ("unique_id", "ds", "y") if c not in df.columns]
        if missing:
            raise ValueError(f"{name} missing required columns: {missing}")

        dups = df.duplicated(subset=["unique_id", "ds"], keep=False)
        if dups.any():
            raise ValueError(f"{name} has {int(dups.sum())} duplicate [unique_id, ds] rows")

    train_ids = list(pd.unique(train_df["unique_id"]))
    test_ids = set(pd.unique(test_df["unique_id"]))
    if set(train_ids) != test_ids:
        only_train = sorted(set(train_ids) - test_ids)[:5]
        only_test = sorted(test_ids - set(train_ids))[:5]
        raise ValueError(
            f"Train/test series mismatch: train-only={only_train}, test-only={only_test}"
        )

    train_groups = {k: g.sort_values("ds") for k, g in train_df.groupby("unique_id", sort=False)}
    test_groups = {k: g.sort_values("ds") for k, g in test_df.groupby("unique_id", sort=False)}

    records = []
    for series_id in train_ids:
        train = train_groups[series_id]
        test = test_groups[series_id]

        if train["ds"].iloc[-1] >= test["ds"].iloc[0]:
            raise ValueError(
                f"Series {series_id}: test segment must follow training "
                f"({train['ds'].iloc[-1]} >= {test['ds'].iloc[0]})"
            )

        freq = _resolve_frequency(frequency, str(series_id))
        start = _start_period(train["ds"], freq, series_id)

        if start is not None:
            test_start = _start_period(test["ds"], freq, series_id)
            if test_start != start + len(train):
                raise ValueError(
                    f"Series {series_id}: test starts at {test_start}, "
                    f"expected {start + len(train)} (gap or overlap)"
                )

        records.append(
            SeriesRecord(
                series_id=str(series_id),
                frequency=freq,
                train=train["y"].to_numpy(),
                test=test["y"].to_numpy(),
                start=start,
            )
        )

    logger.info("Built collection from frames: %d series", len(records))
    return SeriesCollection(records)


def _read_wide(path: Path, frequency: Frequency, meta_rows: int) -> List[tuple]:
    """
    Parse one competition file: (series_id, start, values) per column.

    Layout: header row of series ids, then a length row, a start-year row,
    for sub-annual data a start-period row, then observations padded with blanks.
    """
    raw = pd.read_csv(path, header=0, dtype=str)
    parsed = []

    for series_id in raw.columns:
        col = raw[series_id]
        try:
            n_obs = int(float(col.iloc[0]))
            year = int(float(col.iloc[1]))
            sub = int(float(col.iloc[2])) if meta_rows >= 3 else 1
        except (TypeError, ValueError) as e:
            raise ValueError(f"{path.name}: bad header for series {series_id}: {e}") from e

        values = pd.to_numeric(col.iloc[meta_rows:meta_rows + n_obs], errors="raise").to_numpy()
        if len(values) != n_obs or np.isnan(values).any():
            raise ValueError(
                f"{path.name}: series {series_id} declares {n_obs} observations, "
                f"found {int(np.isfinite(values).sum())}"
            )

        if frequency is Frequency.QUARTERLY:
            start = pd.Period(year=year, quarter=sub, freq="Q")
        elif frequency is Frequency.MONTHLY:
            start = pd.Period(year=year, month=sub, freq="M")
        else:
            start = pd.Period(year=year, freq="Y")

        parsed.append((str(series_id).strip(), start, values))

    return parsed


def load_competition_csv(
    in_path: Union[str, Path],
    oos_path: Union[str, Path],
    frequency: FrequencyLike,
    meta_rows: Optional[int] = None,
) -> SeriesCollection:
    """
    Load one frequency class from the competition's wide CSV pair.

    Args:
        in_path: Training file (e.g. monthly_in.csv)
        oos_path: Held-out file (e.g. monthly_oos.csv)
        frequency: Frequency class of every series in the pair
        meta_rows: Header rows above the observations (default 2 yearly, 3 otherwise)
    """
    freq = Frequency.parse(frequency)
    if meta_rows is None:
        meta_rows = 2 if freq is Frequency.YEARLY else 3

    train = _read_wide(Path(in_path), freq, meta_rows)
    test = {sid: (start, values) for sid, start, values in _read_wide(Path(oos_path), freq, meta_rows)}

    records = []
    for series_id, start, values in train:
        if series_id not in test:
            raise ValueError(f"Series {series_id} missing from {Path(oos_path).name}")

        test_start, test_values = test[series_id]
        if test_start != start + len(values):
            raise ValueError(
                f"Series {series_id}: held-out data starts at {test_start}, "
                f"expected {start + len(values)}"
            )

        records.append(
            SeriesRecord(
                series_id=series_id,
                frequency=freq,
                train=values,
                test=test_values,
                start=start,
            )
        )

    logger.info("Loaded %d %s series from %s", len(records), freq.value, Path(in_path).name)
    return SeriesCollection(records)


def load_tourism(
    data_dir: Union[str, Path],
    frequencies: Optional[Iterable[FrequencyLike]] = None,
) -> SeriesCollection:
    """
    Load the tourism competition series from a directory of CSV pairs.

    Call once at startup and pass the collection to evaluate/run_batch.

    Args:
        data_dir: Directory holding {yearly,quarterly,monthly}_{in,oos}.csv
        frequencies: Classes to load (default: all three)

    Returns:
        SeriesCollection ordered yearly, quarterly, monthly
    """
    data_dir = Path(data_dir)
    wanted = [Frequency.parse(f) for f in (frequencies or COMPETITION_FILES)]

    records: List[SeriesRecord] = []
    for freq in wanted:
        if freq not in COMPETITION_FILES:
            raise ValueError(f"No competition files for frequency: {freq.value}")

        in_name, oos_name = COMPETITION_FILES[freq]
        in_path, oos_path = data_dir / in_name, data_dir / oos_name
        for path in (in_path, oos_path):
            if not path.exists():
                raise FileNotFoundError(
                    f"Competition file not found: {path}. Set TCOMP_DATA_DIR or pass data_dir."
                )

        records.extend(load_competition_csv(in_path, oos_path, freq).values())

    collection = SeriesCollection(records)
    logger.info("Loaded tourism data: %r", collection)
    return collection
