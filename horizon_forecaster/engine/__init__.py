"""
Forecast engines: fill a forecast matrix from a model.

Modules
-------
base        Shared state: series, training window, matrix ownership, DoF.
recursive   One-step models; horizon h built from horizons < h (diagonal sweeps).
direct      Multi-head models; all horizons from one call per origin (row fills).
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np

from horizon_forecaster.engine.base import ForecasterBase
from horizon_forecaster.engine.direct import DirectForecaster
from horizon_forecaster.engine.recursive import RecursiveForecaster
from horizon_forecaster.models.base import is_direct


def make_forecaster(
    model: Any,
    y: Sequence[float] | np.ndarray,
    horizon: int,
    times: Optional[Sequence[float] | np.ndarray] = None,
) -> ForecasterBase:
    """Pick the engine matching the model's contract."""
    if is_direct(model):
        return DirectForecaster(model, y, horizon, times)
    return RecursiveForecaster(model, y, horizon, times)


__all__ = ["DirectForecaster", "ForecasterBase", "RecursiveForecaster", "make_forecaster"]
