# file: src/tcomp/data/records.py
"""
Series records: immutable train/test splits tagged with a frequency class.

A SeriesCollection is the read-only store every evaluation reads from.
Records are built once at load time and shared across workers without locks.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Union

import numpy as np
import pandas as pd

from tcomp.errors import EmptySelectionError

logger = logging.getLogger(__name__)


class Frequency(str, Enum):
    """Sampling cadence of a series"""

    YEARLY = "yearly"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    OTHER = "other"

    @property
    def season_length(self) -> int:
        return {
            Frequency.YEARLY: 1,
            Frequency.QUARTERLY: 4,
            Frequency.MONTHLY: 12,
        }.get(self, 1)

    @property
    def competition_horizon(self) -> Optional[int]:
        """Forecast horizon prescribed by the tourism competition"""
        return {
            Frequency.YEARLY: 4,
            Frequency.QUARTERLY: 8,
            Frequency.MONTHLY: 24,
        }.get(self)

    @property
    def period_freq(self) -> Optional[str]:
        return {
            Frequency.YEARLY: "Y",
            Frequency.QUARTERLY: "Q",
            Frequency.MONTHLY: "M",
        }.get(self)

    @classmethod
    def parse(cls, value: Union["Frequency", str]) -> "Frequency":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(f.value for f in cls)
            raise ValueError(f"Unknown frequency: {value!r} (expected one of {valid})") from None


def _frozen_array(values: Iterable[float], series_id: str, segment: str) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).reshape(-1)

    if arr.size == 0:
        raise ValueError(f"Series {series_id}: {segment} segment is empty")

    if not np.all(np.isfinite(arr)):
        n_bad = int((~np.isfinite(arr)).sum())
        raise ValueError(f"Series {series_id}: {segment} segment has {n_bad} non-finite value(s)")

    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class SeriesRecord:
    """One competition series, pre-split into training and held-out test data"""
    series_id: str
    frequency: Frequency
    train: np.ndarray
    test: np.ndarray
    start: Optional[pd.Period] = None

    def __post_init__(self):
        object.__setattr__(self, "frequency", Frequency.parse(self.frequency))
        object.__setattr__(self, "train", _frozen_array(self.train, self.series_id, "train"))
        object.__setattr__(self, "test", _frozen_array(self.test, self.series_id, "test"))

        if self.start is not None and not isinstance(self.start, pd.Period):
            freq = self.frequency.period_freq
            if freq is None:
                raise ValueError(
                    f"Series {self.series_id}: start must be a pd.Period for frequency 'other'"
                )
            object.__setattr__(self, "start", pd.Period(self.start, freq=freq))

    @property
    def horizon(self) -> int:
        """Declared forecasting horizon (number of held-out steps)"""
        return len(self.test)

    @property
    def season_length(self) -> int:
        return self.frequency.season_length

    def _index(self, offset: int, periods: int) -> pd.Index:
        if self.start is None:
            return pd.RangeIndex(offset, offset + periods)
        return pd.period_range(start=self.start + offset, periods=periods, freq=self.start.freq)

    @property
    def train_series(self) -> pd.Series:
        return pd.Series(self.train, index=self._index(0, len(self.train)), name=self.series_id)

    @property
    def test_series(self) -> pd.Series:
        return pd.Series(
            self.test,
            index=self._index(len(self.train), len(self.test)),
            name=self.series_id,
        )

    def summary(self) -> Dict[str, object]:
        """Human-readable description of the record"""
        info: Dict[str, object] = {
            "series_id": self.series_id,
            "frequency": self.frequency.value,
            "n_train": len(self.train),
            "n_test": len(self.test),
            "horizon": self.horizon,
            "season_length": self.season_length,
        }
        if self.start is not None:
            info["train_start"] = str(self.start)
            info["train_end"] = str(self.start + len(self.train) - 1)
            info["test_end"] = str(self.start + len(self.train) + len(self.test) - 1)
        return info

    def __repr__(self) -> str:
        return (
            f"SeriesRecord({self.series_id!r}, {self.frequency.value}, "
            f"n_train={len(self.train)}, h={self.horizon})"
        )


class SeriesCollection(Mapping):
    """Read-only, insertion-ordered mapping from series id to SeriesRecord"""

    def __init__(self, records: Iterable[SeriesRecord] = ()):
        data: Dict[str, SeriesRecord] = {}
        for record in records:
            if record.series_id in data:
                raise ValueError(f"Duplicate series id: {record.series_id}")
            data[record.series_id] = record
        self._records = data

    def __getitem__(self, series_id: str) -> SeriesRecord:
        return self._records[series_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        counts = ", ".join(f"{k}={v}" for k, v in self.frequencies().items())
        return f"SeriesCollection({len(self)} series: {counts})"

    def subset(
        self,
        frequency: Union[Frequency, str],
        allow_empty: bool = False,
    ) -> "SeriesCollection":
        """
        Select records of one frequency class, keeping collection order.

        Raises:
            EmptySelectionError: nothing matched and allow_empty is False
        """
        freq = Frequency.parse(frequency)
        selected = SeriesCollection(r for r in self._records.values() if r.frequency is freq)

        if len(selected) == 0 and not allow_empty:
            raise EmptySelectionError(freq.value)

        logger.debug("Selected %d/%d %s series", len(selected), len(self), freq.value)
        return selected

    def frequencies(self) -> Dict[str, int]:
        """Number of records per frequency class"""
        counts = Counter(r.frequency.value for r in self._records.values())
        return {f.value: counts[f.value] for f in Frequency if counts[f.value]}
