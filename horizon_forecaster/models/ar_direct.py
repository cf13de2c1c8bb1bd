"""
Direct multi-horizon AR model.

ARDirect(p) estimates H independent OLS heads on one shared design::

    y(t+h) = δ_h + φ_h · [y(t-p+1) … y(t)]      h = 1 .. H

Because each head maps the lags at origin t straight to its own horizon, no
forecast is ever fed back in: ``forecast(t, y)`` returns all H values in one
call and the direct engine stores them in origin-indexed rows.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from horizon_forecaster.models.base import check_history, ols, prior, require_trained
from horizon_forecaster.models.features import lag_block

log = logging.getLogger(__name__)


class ARDirect:
    """One AR(p) regression head per horizon.

    Attributes:
        p:       Number of lags.
        horizon: Number of heads H.
    """

    name = "ar_direct"

    def __init__(self, p: int = 2, horizon: int = 3) -> None:
        if p < 1:
            raise ValueError(f"p must be >= 1, got {p}")
        if horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {horizon}")
        self.p = p
        self.horizon = horizon
        self.min_history = p + horizon
        self._coef: Optional[np.ndarray] = None

    @property
    def n_params(self) -> int:
        return self.p + 1

    @property
    def coef(self) -> Optional[np.ndarray]:
        """Shape ``(p + 1, H)``: column h-1 holds ``[δ_h, φ_h]``."""
        return None if self._coef is None else self._coef.copy()

    def train(self, y: np.ndarray, start: int = 0) -> None:
        arr = check_history(self.name, y, self.min_history)
        origins = np.arange(arr.size - 1)
        x = np.hstack([np.ones((origins.size, 1)), lag_block(arr, self.p, origins + 1)])
        heads = []
        for h in range(1, self.horizon + 1):
            # Only origins whose h-step target lies inside the window.
            rows = origins[origins + h < arr.size]
            heads.append(ols(x[rows], arr[rows + h]))
        self._coef = np.column_stack(heads)
        log.debug(
            "ARDirect(%d) trained %d heads on %d origins from t=%d",
            self.p, self.horizon, origins.size, start,
        )

    def forecast(self, t: int, y: Any) -> np.ndarray:
        """Forecasts of ``t+1 .. t+H`` from the values of ``y`` up to ``t``."""
        require_trained(self.name, self._coef)
        features = np.concatenate([[1.0], prior(y, t, self.p)])
        return features @ self._coef
