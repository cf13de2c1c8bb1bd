"""
Direct forecast engine.

The model was trained with one mapping per horizon, so a single
``model.forecast(t, y)`` call returns all H forecasts issued from origin t.
Nothing is fed back and there is no ordering between horizons; the engine
only has to store each H-vector in the right place.

Row convention: ORIGIN.  Row t, column h holds the forecast of ``t + h``
issued from t, unlike the recursive engine's target-indexed rows.  Use
``matrix.slant()`` to obtain the target-indexed layout.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import numpy as np

from horizon_forecaster.engine.base import ForecasterBase
from horizon_forecaster.exceptions import DimensionMismatchError, InvalidHorizonError
from horizon_forecaster.matrix import ForecastMatrix, RowConvention

log = logging.getLogger(__name__)


class DirectForecaster(ForecasterBase):
    """Drive a ``DirectForecastable`` model over an origin-indexed forecast matrix."""

    convention = RowConvention.ORIGIN

    def __init__(
        self,
        model: Any,
        y: Sequence[float] | np.ndarray,
        horizon: int,
        times: Optional[Sequence[float] | np.ndarray] = None,
    ) -> None:
        if model.horizon != horizon:
            raise InvalidHorizonError(model.horizon, horizon)
        super().__init__(model, y, horizon, times)

    def _emit(self, origin: int) -> np.ndarray:
        out = np.asarray(self.model.forecast(origin, self.y), dtype=float).reshape(-1)
        if out.size != self.horizon:
            raise DimensionMismatchError(
                self.horizon,
                out.size,
                message=(
                    f"{self.model.name}.forecast returned {out.size} horizons from "
                    f"origin {origin}; the engine expects H = {self.horizon}."
                ),
            )
        return out

    def predict(self, t: int) -> float:
        """One-step forecast of ``t + 1`` (the model's first head)."""
        self._require_trained()
        self._check_origin(t)
        return float(self._emit(t)[0])

    def forecast(self, origin: int) -> np.ndarray:
        """All H forecasts from ``origin``, written into row ``origin``."""
        self._require_trained()
        self._check_origin(origin)
        out = self._emit(origin)
        for h, value in enumerate(out, start=1):
            self._matrix.put(origin, h, float(value))
        return out

    def forecast_at(self, h: int) -> np.ndarray:
        """Column ``h`` (origin-indexed), filling any origin not forecast yet."""
        self._require_trained()
        self._matrix.check_horizon(h)
        for origin in range(self.n_obs):
            if not self._matrix.is_known(origin, h):
                self.forecast(origin)
        return self._matrix.column(h)

    def forecast_all(self) -> ForecastMatrix:
        """Allocate a fresh matrix and fill one row per origin."""
        self._require_trained()
        self.reset_matrix()
        for origin in range(self.n_obs):
            self.forecast(origin)
        log.debug("%s: forecast matrix filled for %d origins", self.model.name, self.n_obs)
        return self._matrix
