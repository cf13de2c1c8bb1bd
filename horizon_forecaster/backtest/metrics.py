"""
Quality of fit (QoF) for aligned actual / forecast vectors.

Metric design rationale
-----------------------
R² and adjusted R²
  Share of the variance around the mean explained by the forecasts.  Can be
  negative out of sample: a forecast worse than the test-tail mean.

SSE, MSE0, RMSE, MAE
  Scale-dependent error sizes.  MSE0 is SSE / m (no DoF correction); RMSE is
  its square root.  RMSE > MAE implies occasional large misses.

sMAPE (symmetric Mean Absolute Percentage Error, in percent)
  200/m · Σ |e| / (|y| + |ŷ|).  Bounded in [0, 200]; the headline metric for
  comparing horizons because it is scale-free.

MAPE (percent)
  100/m · Σ |e| / |y|.  Actuals below MAPE_EPSILON are excluded to avoid
  division by (near) zero.

MASE (Mean Absolute Scaled Error)
  MAE divided by the MAE of the naive one-step forecast ``y(t-1)`` on the same
  actuals.  Below 1 beats the random walk.

F statistic, AIC, BIC
  Computed from the degrees-of-freedom pair ``(dfm, df)``; undefined values
  (zero denominators) are reported as NaN rather than raising.

All values are computed from two equal-length vectors.  Alignment (dropping
unknowable cells) is the caller's job: ``ForecastMatrix.aligned()``.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from statistics import NormalDist
from typing import Optional

import numpy as np

from horizon_forecaster.exceptions import DimensionMismatchError, InsufficientDataError
from horizon_forecaster.models.base import degrees_of_freedom

MAPE_EPSILON = 1e-9  # minimum |actual| included in MAPE


@dataclass(frozen=True)
class QualityOfFit:
    """Fit statistics in their stable reporting order.

    Field order is the column order of every QoF table written to disk.
    """

    r_sq: float
    r_sq_bar: float
    sst: float
    sse: float
    sde: float
    mse0: float
    rmse: float
    mae: float
    smape: float
    m: int
    dfm: int
    df: int
    f_stat: float
    aic: float
    bic: float
    mape: float
    mase: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


QOF_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(QualityOfFit))


def diagnose(
    actual: np.ndarray,
    forecast: np.ndarray,
    n_params: int = 1,
) -> QualityOfFit:
    """Compute QoF for aligned ``actual`` and ``forecast`` vectors.

    Args:
        actual:   Observed values.
        forecast: Forecasts for the same times, same length.
        n_params: Parameter count of the model, for degrees of freedom.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
        InsufficientDataError:  If fewer than 2 pairs are given.
    """
    y = np.asarray(actual, dtype=float).reshape(-1)
    yp = np.asarray(forecast, dtype=float).reshape(-1)
    if y.size != yp.size:
        raise DimensionMismatchError(y.size, yp.size)
    m = int(y.size)
    if m < 2:
        raise InsufficientDataError("diagnose", 2, m)

    dfm, df = degrees_of_freedom(n_params, m)
    e = y - yp
    sst = float(np.sum((y - y.mean()) ** 2))
    sse = float(e @ e)
    ssr = sst - sse
    mse0 = sse / m
    mae = float(np.mean(np.abs(e)))

    r_sq = 1.0 - sse / sst if sst > 0 else math.nan
    r_sq_bar = 1.0 - (1.0 - r_sq) * (m - 1) / df if df > 0 and sst > 0 else math.nan
    f_stat = (ssr / dfm) / (sse / df) if df > 0 and sse > 0 else math.nan

    denom = np.abs(y) + np.abs(yp)
    ratio = np.divide(np.abs(e), denom, out=np.zeros_like(e), where=denom > 0)
    smape = float(200.0 * ratio.sum() / m)

    keep = np.abs(y) > MAPE_EPSILON
    mape = float(100.0 * np.mean(np.abs(e[keep]) / np.abs(y[keep]))) if keep.any() else math.nan

    naive_mae = float(np.mean(np.abs(np.diff(y))))
    mase = mae / naive_mae if naive_mae > 0 else math.nan

    if mse0 > 0:
        aic = m * math.log(2.0 * math.pi * mse0) + m + 2.0 * (dfm + 1)
        bic = aic + (dfm + 1) * (math.log(m) - 2.0)
    else:
        aic = bic = -math.inf

    return QualityOfFit(
        r_sq=r_sq,
        r_sq_bar=r_sq_bar,
        sst=sst,
        sse=sse,
        sde=float(np.std(e, ddof=1)),
        mse0=mse0,
        rmse=math.sqrt(mse0),
        mae=mae,
        smape=smape,
        m=m,
        dfm=dfm,
        df=df,
        f_stat=f_stat,
        aic=aic,
        bic=bic,
        mape=mape,
        mase=mase,
    )


# ── Prediction intervals ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class PredictionInterval:
    """Symmetric normal interval around aligned h-step forecasts.

    Attributes:
        horizon:  Horizon h the forecasts belong to.
        level:    Coverage level p (e.g. 0.9).
        actual:   Aligned actuals.
        forecast: Aligned forecasts.
        lower:    forecast - z_p · sd(actual - forecast).
        upper:    forecast + z_p · sd(actual - forecast).
    """

    horizon: int
    level: float
    actual: np.ndarray
    forecast: np.ndarray
    lower: np.ndarray
    upper: np.ndarray

    @property
    def coverage(self) -> float:
        """Fraction of actuals inside their interval."""
        inside = (self.actual >= self.lower) & (self.actual <= self.upper)
        return float(inside.mean()) if inside.size else math.nan


def prediction_interval(
    actual: np.ndarray,
    forecast: np.ndarray,
    horizon: int,
    level: float = 0.9,
    z: Optional[float] = None,
) -> PredictionInterval:
    """Build ``forecast ± z_p · sd(actual - forecast)``.

    ``z`` defaults to the two-sided standard normal quantile for ``level``.
    """
    if not 0.0 < level < 1.0:
        raise ValueError(f"level must be in (0, 1), got {level}")
    y = np.asarray(actual, dtype=float).reshape(-1)
    yp = np.asarray(forecast, dtype=float).reshape(-1)
    if y.size != yp.size:
        raise DimensionMismatchError(y.size, yp.size)
    if y.size < 2:
        raise InsufficientDataError("prediction_interval", 2, int(y.size))
    if z is None:
        z = NormalDist().inv_cdf(0.5 + level / 2.0)
    width = z * float(np.std(y - yp, ddof=1))
    return PredictionInterval(
        horizon=horizon,
        level=level,
        actual=y,
        forecast=yp,
        lower=yp - width,
        upper=yp + width,
    )
