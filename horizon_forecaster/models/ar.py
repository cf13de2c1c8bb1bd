"""
Auto-regressive models estimated by ordinary least squares.

  AR(p)        y(t+1) = δ + φ_1 y(t-p+1) + … + φ_p y(t)
  ARX(p, q)    AR(p) with trend terms and q lags of every exogenous column

Both predict ONE step ahead.  Multi-step forecasts come from the recursive
engine, which hands ``predict`` a ``HistoryView``: lags beyond the forecast
origin then resolve to earlier forecasts instead of actuals.

Exogenous columns are not forecast.  When an h-step forecast needs exogenous
lags that lie beyond the origin, ``hide()`` replaces them with the last
available value (``fill=True``) or with 0 (``fill=False``).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from horizon_forecaster.models.base import check_history, ols, prior, require_trained
from horizon_forecaster.models.features import build_design, hide, trend_block

log = logging.getLogger(__name__)


class AR:
    """AR(p) with an intercept.

    Attributes:
        p: Number of lags.
    """

    name = "ar"

    def __init__(self, p: int = 2) -> None:
        if p < 1:
            raise ValueError(f"p must be >= 1, got {p}")
        self.p = p
        self.min_history = p + 1
        self._coef: Optional[np.ndarray] = None

    @property
    def n_params(self) -> int:
        return self.p + 1

    @property
    def coef(self) -> Optional[np.ndarray]:
        """``[δ, φ_1 … φ_p]`` (lags oldest first), or None before training."""
        return None if self._coef is None else self._coef.copy()

    def train(self, y: np.ndarray, start: int = 0) -> None:
        arr = check_history(self.name, y, self.min_history)
        x, target = build_design(arr, self.p, spec=1, start=start)
        self._coef = ols(x, target)
        log.debug("AR(%d) trained on %d rows from t=%d: %s", self.p, target.size, start, self._coef)

    def predict(self, t: int, ref: Any) -> float:
        require_trained(self.name, self._coef)
        lags = prior(ref, t, self.p)
        return float(self._coef[0] + lags @ self._coef[1:])


class ARX:
    """AR(p) with trend terms and exogenous lags.

    ``x`` must cover the whole series the model will forecast over (the same
    absolute time axis as the endogenous series); training windows select
    their rows through ``start``.

    Attributes:
        p:    Number of endogenous lags.
        q:    Number of lags per exogenous column.
        spec: Trend terms: 0 none, 1 constant, 2 constant + linear time.
        fill: Hidden exogenous lags repeat the last available value (True) or are 0.
    """

    name = "arx"

    def __init__(
        self,
        x: np.ndarray,
        p: int = 2,
        q: int = 1,
        spec: int = 1,
        fill: bool = True,
    ) -> None:
        if p < 1 or q < 1:
            raise ValueError(f"p and q must be >= 1, got p={p}, q={q}")
        if spec not in (0, 1, 2):
            raise ValueError(f"spec must be 0, 1 or 2, got {spec}")
        exo = np.asarray(x, dtype=float)
        self.x = exo.reshape(-1, 1) if exo.ndim == 1 else exo
        self.p = p
        self.q = q
        self.spec = spec
        self.fill = fill
        self.min_history = max(p, q) + 1
        self._coef: Optional[np.ndarray] = None

    @property
    def n_exo(self) -> int:
        return self.x.shape[1]

    @property
    def n_params(self) -> int:
        return self.spec + self.p + self.q * self.n_exo

    @property
    def coef(self) -> Optional[np.ndarray]:
        """``[trend terms, y lags, x lags per column]``, or None before training."""
        return None if self._coef is None else self._coef.copy()

    def train(self, y: np.ndarray, start: int = 0) -> None:
        arr = check_history(self.name, y, self.min_history)
        x_win = self.x[start : start + arr.size]
        if x_win.shape[0] != arr.size:
            raise ValueError(
                f"exogenous data covers {x_win.shape[0]} of the {arr.size} rows "
                f"in the training window starting at t={start}."
            )
        x, target = build_design(arr, self.p, spec=self.spec, start=start, x=x_win, q=self.q)
        self._coef = ols(x, target)
        log.debug(
            "ARX(%d, %d, %d) trained on %d rows from t=%d",
            self.p, self.q, self.n_exo, target.size, start,
        )

    def predict(self, t: int, ref: Any) -> float:
        """One-step forecast of ``t + 1``.

        When ``ref`` is a ``HistoryView`` its origin fixes the horizon, and
        exogenous lags beyond the origin are hidden.
        """
        require_trained(self.name, self._coef)
        origin = getattr(ref, "origin", t)
        h = t - origin + 1
        parts = [
            trend_block(np.array([t + 1]), self.spec).ravel(),
            prior(ref, t, self.p),
        ]
        # Rows past the end of x only occur beyond the origin, where hide() masks them.
        idx = np.clip(np.arange(t - self.q + 1, t + 1), 0, self.x.shape[0] - 1)
        for j in range(self.n_exo):
            parts.append(hide(self.x[idx, j], h, self.fill))
        return float(np.concatenate(parts) @ self._coef)
