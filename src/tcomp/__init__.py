"""
tcomp - Tourism forecasting competition data and accuracy evaluation

Modules:
- data: Immutable train/test series records and loaders
- forecasting: statsforecast adapters, per-series evaluation, batch summaries
- config: Environment-driven settings
- cli: Typer command line (show, evaluate, batch)
"""

from .data import Frequency, SeriesCollection, SeriesRecord, load_tourism
from .errors import (AdapterFailure, EmptySelectionError, InvalidHorizonError,
                     TcompError)
from .forecasting import BatchResult, evaluate, run_batch

__version__ = "0.1.0"

__all__ = [
    "Frequency",
    "SeriesRecord",
    "SeriesCollection",
    "load_tourism",
    "evaluate",
    "run_batch",
    "BatchResult",
    "TcompError",
    "InvalidHorizonError",
    "AdapterFailure",
    "EmptySelectionError",
]
