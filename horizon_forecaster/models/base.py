"""
Model contracts shared by every forecasting model.

Interface contract
------------------
Recursive (single-output) models implement ``Forecastable``:

  train(y, start=0) → None
    Fit parameters on the contiguous window ``y``.  ``start`` is the window's
    offset into the full series, for models with time-dependent features
    (trend terms, exogenous columns).  Callable repeatedly; each call replaces
    the previous parameters in one assignment.

  predict(t, ref) → float
    One-step-ahead forecast of time ``t + 1`` anchored at ``t``.  ``ref`` is
    anything indexable by absolute time: the raw series, or a ``HistoryView``
    that substitutes earlier forecasts for values beyond the origin.

Direct (multi-head) models implement ``DirectForecastable``:

  forecast(t, y) → ndarray of shape (H,)
    All H horizons issued from origin ``t`` in one call.

Both expose ``name``, ``min_history`` and ``n_params``.  The engines only
read ``n_params`` (for degrees of freedom), never the parameters themselves.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import numpy as np

from horizon_forecaster.exceptions import InsufficientDataError, ModelNotTrainedError


@runtime_checkable
class Forecastable(Protocol):
    """One-step-ahead model driven by the recursive engine."""

    name: str
    min_history: int

    @property
    def n_params(self) -> int: ...

    def train(self, y: np.ndarray, start: int = 0) -> None: ...

    def predict(self, t: int, ref: Any) -> float: ...


@runtime_checkable
class DirectForecastable(Protocol):
    """Multi-output model driven by the direct engine."""

    name: str
    min_history: int
    horizon: int

    @property
    def n_params(self) -> int: ...

    def train(self, y: np.ndarray, start: int = 0) -> None: ...

    def forecast(self, t: int, y: Any) -> np.ndarray: ...


def is_direct(model: Any) -> bool:
    """True when ``model`` emits all horizons itself."""
    return isinstance(model, DirectForecastable)


# ── Helpers ───────────────────────────────────────────────────────────────────


def prior(ref: Any, t: int, n: int) -> np.ndarray:
    """The ``n`` values of ``ref`` ending at time ``t``, oldest first.

    Times before 0 replicate the first observation.
    """
    return np.array([ref[max(s, 0)] for s in range(t - n + 1, t + 1)], dtype=float)


def check_history(name: str, y: Any, required: int) -> np.ndarray:
    """Return ``y`` as a float vector, or raise if it is shorter than ``required``."""
    arr = np.asarray(y, dtype=float).reshape(-1)
    if arr.size < required:
        raise InsufficientDataError(name, required, int(arr.size))
    return arr


def require_trained(name: str, params: Any) -> None:
    if params is None:
        raise ModelNotTrainedError(f"{name}: train() must be called before forecasting.")


def degrees_of_freedom(n_params: int, size: int) -> tuple[int, int]:
    """Model and residual degrees of freedom ``(dfm, df)`` for ``size`` points.

    ``dfm = max(1, n_params - 1)`` (the intercept is not counted) and
    ``df = size - dfm``.
    """
    dfm = max(1, n_params - 1)
    return dfm, size - dfm


def ols(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Least-squares coefficients ``b`` minimising ``||x b - y||``."""
    b, *_ = np.linalg.lstsq(x, y, rcond=None)
    return b
