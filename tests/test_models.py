"""
Forecast adapter smoke tests (statsforecast, synthetic data)
"""

import numpy as np
import pandas as pd
import pytest

from tcomp.data.records import Frequency, SeriesRecord
from tcomp.forecasting.evaluation import evaluate
from tcomp.forecasting.models import (AdapterFactory, ForecastResult,
                                      NaiveAdapter, default_adapters)


def _quarterly_series(n=40, seed=42):
    rng = np.random.default_rng(seed)
    t = np.arange(n)
    return 200 + 0.5 * t + 15 * np.sin(2 * np.pi * t / 4) + rng.normal(0, 2, n)


@pytest.mark.smoke
class TestDefaultAdapters:
    """The four competition methods in table order"""

    def test_order_and_names(self):
        assert [a.name for a in default_adapters()] == ["ETS", "ARIMA", "Theta", "Naive"]

    def test_factory_case_insensitive(self):
        assert AdapterFactory.create("ARIMA").name == "ARIMA"
        assert AdapterFactory.list_adapters() == ["ets", "arima", "theta", "naive"]

    def test_factory_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown forecasting method"):
            AdapterFactory.create("prophet")

    @pytest.mark.parametrize("adapter", default_adapters(), ids=lambda a: a.name)
    def test_forecast_shape_and_intervals(self, adapter):
        y = _quarterly_series()

        result = adapter.forecast(y, 8, season_length=4)

        assert result.method == adapter.name
        assert result.horizon == 8
        assert np.all(np.isfinite(result.mean))
        assert np.all(result.lo_95 <= result.mean + 1e-8)
        assert np.all(result.mean <= result.hi_95 + 1e-8)
        assert np.all(result.lo_95 <= result.lo_80 + 1e-8)
        assert np.all(result.hi_80 <= result.hi_95 + 1e-8)

    def test_read_only_input_accepted(self):
        y = _quarterly_series()
        y.setflags(write=False)

        result = default_adapters()[0].forecast(y, 4, season_length=4)
        assert result.horizon == 4

    def test_seasonal_naive_repeats_last_season(self):
        y = _quarterly_series()

        result = NaiveAdapter().forecast(y, 8, season_length=4)

        np.testing.assert_allclose(result.mean, np.tile(y[-4:], 2))

    def test_naive_repeats_last_value_for_yearly(self):
        y = np.array([1.0, 4.0, 2.0, 8.0, 5.0, 7.0])

        result = NaiveAdapter().forecast(y, 3, season_length=1)

        np.testing.assert_allclose(result.mean, [7.0, 7.0, 7.0])


class TestForecastResult:
    """Interval arrays must match the point forecast length"""

    def test_mismatched_lengths_raise(self):
        with pytest.raises(ValueError, match="lo_80"):
            ForecastResult("X", np.ones(3), np.ones(2), np.ones(3), np.ones(3), np.ones(3))

    def test_to_frame(self):
        mean = np.array([1.0, 2.0])
        frame = ForecastResult("X", mean, mean - 1, mean + 1, mean - 2, mean + 2).to_frame()

        assert list(frame["step"]) == [1, 2]
        assert list(frame.columns) == ["step", "mean", "lo_80", "hi_80", "lo_95", "hi_95"]


@pytest.mark.smoke
class TestEndToEnd:
    """evaluate() with the real statsforecast adapters"""

    def test_quarterly_series(self):
        y = _quarterly_series(n=48)
        record = SeriesRecord(
            "Q_synth", Frequency.QUARTERLY, train=y[:40], test=y[40:],
            start=pd.Period("1990Q1", freq="Q"),
        )

        table = evaluate(record, [1, 4, 8, range(1, 5), range(1, 9)])

        assert table.shape == (8, 5)
        assert table.notna().all().all()
        assert (table.to_numpy() >= 0).all()
        # trend + season is easy; every method should beat 20% error on average
        assert (table.xs("MAPE", level="metric")["1-8"] < 0.2).all()
