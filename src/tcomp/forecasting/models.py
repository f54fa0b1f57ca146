"""
Forecast adapters

Wraps four statsforecast methods behind one interface:
1. ETS (AutoETS, exponential smoothing state space)
2. ARIMA (AutoARIMA)
3. Theta (standard theta method)
4. Naive (SeasonalNaive; plain naive when season length is 1)

Each adapter turns a training segment and a step count into point forecasts
plus 80% and 95% prediction intervals. Adapters hold no state between calls.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

LEVELS = (80, 95)


@dataclass(frozen=True)
class ForecastResult:
    """Point forecasts and interval bounds from one method"""
    method: str
    mean: np.ndarray
    lo_80: np.ndarray
    hi_80: np.ndarray
    lo_95: np.ndarray
    hi_95: np.ndarray

    def __post_init__(self):
        h = len(self.mean)
        for name in ("lo_80", "hi_80", "lo_95", "hi_95"):
            if len(getattr(self, name)) != h:
                raise ValueError(
                    f"{self.method}: {name} has {len(getattr(self, name))} steps, expected {h}"
                )

    @property
    def horizon(self) -> int:
        return len(self.mean)

    def to_frame(self) -> pd.DataFrame:
        """One row per forecast step (1-based)"""
        return pd.DataFrame(
            {
                "step": np.arange(1, self.horizon + 1),
                "mean": self.mean,
                "lo_80": self.lo_80,
                "hi_80": self.hi_80,
                "lo_95": self.lo_95,
                "hi_95": self.hi_95,
            }
        )


class ForecastAdapter(ABC):
    """Base class for forecast adapters"""

    name: str = ""

    @abstractmethod
    def forecast(self, y: np.ndarray, h: int, season_length: int = 1) -> ForecastResult:
        """Forecast h steps ahead from training segment y"""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class StatsForecastAdapter(ForecastAdapter):
    """Adapter around a statsforecast model's single-series forecast()"""

    @abstractmethod
    def build_model(self, season_length: int):
        """Create a fresh statsforecast model instance"""
        pass

    def forecast(self, y: np.ndarray, h: int, season_length: int = 1) -> ForecastResult:
        if h < 1:
            raise ValueError(f"Horizon must be positive, got {h}")

        # statsforecast's compiled routines want a writable float64 buffer
        y = np.array(y, dtype=np.float64)
        model = self.build_model(season_length)

        logger.debug("%s: fitting n=%d, h=%d, m=%d", self.name, len(y), h, season_length)
        out = model.forecast(y=y, h=h, level=list(LEVELS))

        return ForecastResult(
            method=self.name,
            mean=np.asarray(out["mean"], dtype=np.float64),
            lo_80=np.asarray(out["lo-80"], dtype=np.float64),
            hi_80=np.asarray(out["hi-80"], dtype=np.float64),
            lo_95=np.asarray(out["lo-95"], dtype=np.float64),
            hi_95=np.asarray(out["hi-95"], dtype=np.float64),
        )


class ETSAdapter(StatsForecastAdapter):
    """Automatic exponential smoothing state space model"""

    name = "ETS"

    def build_model(self, season_length: int):
        from statsforecast.models import AutoETS

        return AutoETS(season_length=season_length)


class ARIMAAdapter(StatsForecastAdapter):
    """Automatic ARIMA (seasonal when season length > 1)"""

    name = "ARIMA"

    def build_model(self, season_length: int):
        from statsforecast.models import AutoARIMA

        return AutoARIMA(season_length=season_length)


class ThetaAdapter(StatsForecastAdapter):
    """Standard theta method with classical seasonal adjustment"""

    name = "Theta"

    def build_model(self, season_length: int):
        from statsforecast.models import Theta

        return Theta(season_length=season_length)


class NaiveAdapter(StatsForecastAdapter):
    """Seasonal naive; repeats the last observed value when season length is 1"""

    name = "Naive"

    def build_model(self, season_length: int):
        from statsforecast.models import SeasonalNaive

        return SeasonalNaive(season_length=season_length)


class AdapterFactory:
    """Factory for creating adapter instances"""

    _adapters = {
        "ets": ETSAdapter,
        "arima": ARIMAAdapter,
        "theta": ThetaAdapter,
        "naive": NaiveAdapter,
    }

    @classmethod
    def create(cls, name: str) -> ForecastAdapter:
        """Create adapter by name (case-insensitive)"""
        key = name.strip().lower()
        if key not in cls._adapters:
            raise ValueError(f"Unknown forecasting method: {name}")

        return cls._adapters[key]()

    @classmethod
    def list_adapters(cls) -> List[str]:
        """List available methods"""
        return list(cls._adapters.keys())


def default_adapters() -> List[ForecastAdapter]:
    """The four competition methods in table order: ETS, ARIMA, Theta, Naive"""
    return [AdapterFactory.create(name) for name in AdapterFactory.list_adapters()]


def method_names(adapters: Sequence[ForecastAdapter]) -> List[str]:
    names = [a.name or type(a).__name__ for a in adapters]
    if len(set(names)) != len(names):
        raise ValueError(f"Adapter names must be unique: {names}")
    return names


def intervals_by_level(result: ForecastResult) -> Dict[int, tuple]:
    """{level: (lower, upper)} for plotting"""
    return {
        80: (result.lo_80, result.hi_80),
        95: (result.lo_95, result.hi_95),
    }
