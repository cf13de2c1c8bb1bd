"""
Design-matrix builders for the lag-based models.

Column layout
-------------
For a target index k (the value being explained) the regressors are laid out
as::

    [ trend terms | y lags | x lags (per exogenous column) ]

  trend terms  spec 0: none; spec 1: constant 1; spec 2: 1 and the absolute
               time of the target
  y lags       p values y(k-p) .. y(k-1), oldest first
  x lags       q values x_j(k-q) .. x_j(k-1), oldest first, for every column j

Lags reaching before the start of the window replicate its first value, so a
window of n observations always yields n - 1 regression rows (targets 1..n-1).
This is the same boundary policy ``prior()`` applies at forecast time.
"""

from __future__ import annotations

import numpy as np


def lag_block(y: np.ndarray, n_lags: int, targets: np.ndarray) -> np.ndarray:
    """``n_lags`` lagged values of ``y`` for every target index, oldest first."""
    offsets = np.arange(-n_lags, 0)
    idx = np.clip(targets[:, None] + offsets[None, :], 0, None)
    return y[idx]


def trend_block(times: np.ndarray, spec: int) -> np.ndarray:
    """Trend regressors for the given absolute times."""
    if spec == 0:
        return np.empty((times.size, 0))
    ones = np.ones((times.size, 1))
    if spec == 1:
        return ones
    return np.hstack([ones, times.reshape(-1, 1).astype(float)])


def exo_block(x: np.ndarray, n_lags: int, targets: np.ndarray) -> np.ndarray:
    """``n_lags`` lags of every exogenous column, column by column."""
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    blocks = [lag_block(x[:, j], n_lags, targets) for j in range(x.shape[1])]
    return np.hstack(blocks) if blocks else np.empty((targets.size, 0))


def hide(z: np.ndarray, h: int, fill: bool = True) -> np.ndarray:
    """Mask the exogenous lags of ``z`` that are future values at horizon ``h``.

    ``z`` holds lags oldest first.  For an h-step forecast the last ``h - 1``
    entries lie beyond the origin.  They are replaced by the last available
    value when ``fill`` is true, else by 0.
    """
    last = z.size - h
    out = np.array(z, dtype=float, copy=True)
    if last + 1 >= out.size:
        return out
    out[max(last + 1, 0):] = (z[last] if last >= 0 else 0.0) if fill else 0.0
    return out


def build_design(
    y: np.ndarray,
    p: int,
    spec: int = 1,
    start: int = 0,
    x: np.ndarray | None = None,
    q: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Regression design for one training window.

    Args:
        y:     Training window of the endogenous series.
        p:     Number of endogenous lags.
        spec:  Trend terms (0, 1 or 2).
        start: Absolute time of ``y[0]`` (used by the linear trend).
        x:     Exogenous values for the same window, shape (n,) or (n, k).
        q:     Number of lags per exogenous column.

    Returns:
        ``(X, target)`` with one row per target index 1..n-1.
    """
    targets = np.arange(1, y.size)
    parts = [trend_block(start + targets, spec), lag_block(y, p, targets)]
    if x is not None and q > 0:
        parts.append(exo_block(x, q, targets))
    return np.hstack(parts), y[targets]
