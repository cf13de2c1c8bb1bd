"""
Recursive forecast engine.

The model only knows how to forecast ONE step ahead.  An h-step forecast from
origin o is the model's one-step forecast anchored at ``o + h - 1``, where
every lag beyond o is replaced by the forecast of that time issued from o.
Those forecasts sit at horizons 1 .. h-1, so filling the matrix in ascending
horizon order guarantees they already exist::

    h = 1   (o+1, 1) ← predict(o, actuals)
    h = 2   (o+2, 2) ← predict(o+1, [actuals ≤ o, (o+1, 1)])
    h = 3   (o+3, 3) ← predict(o+2, [actuals ≤ o, (o+1, 1), (o+2, 2)])

In a target-indexed matrix each origin's forecasts run down an anti-diagonal,
and each horizon is one column sweep.  Reads are funnelled through a
``HistoryView`` that refuses any cell at horizon >= h, and the write checks
the view again.

Origins run over the whole observed series 0 .. m-1, so forecasts reach
target m-1+H.  Targets at or beyond m have no actual and are dropped from
diagnostics by ``ForecastMatrix.aligned``.
"""

from __future__ import annotations

import logging

import numpy as np

from horizon_forecaster.engine.base import ForecasterBase
from horizon_forecaster.matrix import ForecastMatrix, HistoryView, RowConvention

log = logging.getLogger(__name__)


class RecursiveForecaster(ForecasterBase):
    """Drive a ``Forecastable`` model over a target-indexed forecast matrix."""

    convention = RowConvention.TARGET

    def predict(self, t: int) -> float:
        """One-step forecast of ``t + 1`` from the actuals up to ``t``."""
        self._require_trained()
        self._check_origin(t)
        return float(self.model.predict(t, self.y))

    def _forge(self, origin: int, h: int) -> None:
        view = HistoryView(self._matrix, origin, h)
        value = self.model.predict(origin + h - 1, view)
        self._matrix.put_forecast(origin, h, float(value), view=view)

    def forecast(self, origin: int) -> np.ndarray:
        """Forecasts of ``origin+1 .. origin+H``, written into the matrix.

        Used by rolling validation, one origin at a time.
        """
        self._require_trained()
        self._check_origin(origin)
        for h in range(1, self.horizon + 1):
            self._forge(origin, h)
        return np.array([self._matrix.get(origin + h, h) for h in range(1, self.horizon + 1)])

    def forecast_at(self, h: int) -> np.ndarray:
        """Fill column ``h`` for every origin and return it (NaN where unknown).

        Column ``h - 1`` must already be filled for every origin.
        """
        self._require_trained()
        self._matrix.check_horizon(h)
        for origin in range(self.n_obs):
            self._forge(origin, h)
        return self._matrix.column(h)

    def predict_all(self) -> np.ndarray:
        """Fill the horizon-1 column: one-step forecasts from every origin."""
        return self.forecast_at(1)

    def forecast_all(self) -> ForecastMatrix:
        """Allocate a fresh matrix and fill every horizon in ascending order."""
        self._require_trained()
        self.reset_matrix()
        self.predict_all()
        for h in range(2, self.horizon + 1):
            self.forecast_at(h)
        log.debug("%s: forecast matrix filled for horizons 1..%d", self.model.name, self.horizon)
        return self._matrix
