# file: src/tcomp/errors.py
"""
Error taxonomy for evaluation runs.

Every error is raised to the immediate caller; nothing here is retried.
"""

from __future__ import annotations

from typing import Any, Optional


class TcompError(Exception):
    """Base class for evaluation errors"""


class InvalidHorizonError(TcompError, ValueError):
    """A horizon spec references steps outside the held-out test segment"""

    def __init__(self, series_id: Optional[str], spec: Any, available: Optional[int] = None):
        self.series_id = series_id
        self.spec = spec
        self.available = available

        where = f" for series {series_id}" if series_id is not None else ""
        if available is None:
            msg = f"Invalid horizon spec {spec!r}{where}"
        else:
            msg = (
                f"Horizon spec {spec!r} exceeds available test data{where}: "
                f"only {available} step(s) held out"
            )
        super().__init__(msg)

    def __reduce__(self):
        return (type(self), (self.series_id, self.spec, self.available))


class AdapterFailure(TcompError):
    """A forecasting method failed to produce a forecast for a series"""

    def __init__(self, method: str, series_id: Optional[str], reason: str = ""):
        self.method = method
        self.series_id = series_id
        self.reason = reason

        msg = f"{method} failed for series {series_id}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)

    def __reduce__(self):
        return (type(self), (self.method, self.series_id, self.reason))

    @property
    def tag(self) -> tuple:
        return (self.method, self.series_id)


class EmptySelectionError(TcompError):
    """A frequency filter selected zero series"""

    def __init__(self, frequency: Any):
        self.frequency = frequency
        super().__init__(f"No series match frequency filter: {frequency}")

    def __reduce__(self):
        return (type(self), (self.frequency,))
