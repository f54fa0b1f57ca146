"""
Forecast evaluation

- Forecast adapters (ETS, ARIMA, Theta, Naive via statsforecast)
- Accuracy evaluation per series (MAPE, MASE per horizon spec)
- Batch aggregation over a frequency class
- Comparison plots

Plotting is imported from tcomp.forecasting.plotting so matplotlib is only
loaded when needed.
"""

from .batch import (DEFAULT_HORIZON_SPECS, BatchResult, SeriesFailure,
                    default_horizon_specs, run_batch, summarize_tables)
from .evaluation import (METRICS, AccuracyMetrics, evaluate, forecast_all,
                         horizon_label, normalize_horizon_spec,
                         parse_horizon_spec, score_forecasts)
from .models import (AdapterFactory, ARIMAAdapter, ETSAdapter,
                     ForecastAdapter, ForecastResult, NaiveAdapter,
                     StatsForecastAdapter, ThetaAdapter, default_adapters)

__all__ = [
    # Adapters
    "ForecastAdapter",
    "StatsForecastAdapter",
    "ETSAdapter",
    "ARIMAAdapter",
    "ThetaAdapter",
    "NaiveAdapter",
    "AdapterFactory",
    "ForecastResult",
    "default_adapters",
    # Evaluation
    "METRICS",
    "AccuracyMetrics",
    "evaluate",
    "forecast_all",
    "score_forecasts",
    "parse_horizon_spec",
    "normalize_horizon_spec",
    "horizon_label",
    # Batch
    "BatchResult",
    "SeriesFailure",
    "DEFAULT_HORIZON_SPECS",
    "default_horizon_specs",
    "run_batch",
    "summarize_tables",
]
