"""
State and operations shared by the recursive and direct engines.

A forecaster owns:
  - a model (reached only through its contract, never its concrete class),
  - the full series ``y`` (read-only: the array is marked non-writeable),
  - ONE forecast matrix, reallocated by every ``forecast_all`` pass.

Nothing else holds a reference to the matrix while a pass is running, and the
model's parameters are only replaced by ``train``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import numpy as np

from horizon_forecaster.backtest.metrics import PredictionInterval, prediction_interval
from horizon_forecaster.exceptions import ModelNotTrainedError
from horizon_forecaster.matrix import ForecastMatrix, RowConvention, make_forecast_matrix
from horizon_forecaster.models.base import degrees_of_freedom

log = logging.getLogger(__name__)


class ForecasterBase:
    """Common plumbing: training windows, matrix ownership, DoF."""

    convention: RowConvention = RowConvention.TARGET

    def __init__(
        self,
        model: Any,
        y: Sequence[float] | np.ndarray,
        horizon: int,
        times: Optional[Sequence[float] | np.ndarray] = None,
    ) -> None:
        series = np.array(y, dtype=float).reshape(-1)
        series.setflags(write=False)
        self.model = model
        self.y = series
        self.horizon = horizon
        self.times = times
        self.train_start: Optional[int] = None
        self.train_end: Optional[int] = None
        self._matrix = make_forecast_matrix(series, horizon, self.convention, times)

    @property
    def n_obs(self) -> int:
        return int(self.y.size)

    @property
    def matrix(self) -> ForecastMatrix:
        return self._matrix

    @property
    def is_trained(self) -> bool:
        return self.train_end is not None

    def reset_matrix(self) -> ForecastMatrix:
        """Discard every forecast and start from an empty matrix."""
        self._matrix = make_forecast_matrix(self.y, self.horizon, self.convention, self.times)
        return self._matrix

    def train(self, start: int = 0, end: Optional[int] = None) -> None:
        """Fit the model on ``y[start:end]``.

        Raises:
            InsufficientDataError: Propagated from the model when the window is
                shorter than its minimum history.
        """
        end = self.n_obs if end is None else end
        if not 0 <= start < end <= self.n_obs:
            raise ValueError(f"invalid training window [{start}, {end}) for {self.n_obs} points.")
        self.model.train(self.y[start:end], start=start)
        self.train_start, self.train_end = start, end
        log.debug("%s trained on [%d, %d)", self.model.name, start, end)

    def _require_trained(self) -> None:
        if not self.is_trained:
            raise ModelNotTrainedError(
                f"{self.model.name}: train() must be called before forecasting."
            )

    def _check_origin(self, origin: int) -> None:
        if not 0 <= origin < self.n_obs:
            raise IndexError(f"origin {origin} outside the series [0, {self.n_obs}).")

    def degrees_of_freedom(self, size: int) -> tuple[int, int]:
        """``(dfm, df)`` for diagnosing ``size`` points."""
        return degrees_of_freedom(self.model.n_params, size)

    def forecast_at_interval(self, h: int, level: float = 0.9) -> PredictionInterval:
        """Normal prediction interval for the filled horizon-``h`` column."""
        actual, forecast = self._matrix.aligned(h)
        return prediction_interval(actual, forecast, h, level=level)
