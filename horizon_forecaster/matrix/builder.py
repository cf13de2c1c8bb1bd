"""
Allocation of empty forecast matrices.

Both engines build their matrix here and only then fill it, in different
orders: the recursive engine diagonal by diagonal, the direct engine row by
row.  Allocation seeds column 0 with the actuals and the last column with the
time index; every forecast cell starts unknown.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from horizon_forecaster.exceptions import InvalidHorizonError
from horizon_forecaster.matrix.forecast_matrix import ForecastMatrix, RowConvention

log = logging.getLogger(__name__)


def make_forecast_matrix(
    y: Sequence[float] | np.ndarray,
    horizon: int,
    convention: RowConvention = RowConvention.TARGET,
    times: Optional[Sequence[float] | np.ndarray] = None,
) -> ForecastMatrix:
    """Allocate a ``(m + H) x (H + 2)`` forecast matrix for series ``y``.

    Args:
        y:          Observed series (length m >= 1).
        horizon:    Maximum horizon H (>= 1).
        convention: Row convention the forecast columns will follow.
        times:      Optional time stamps for the m observed rows; extended
                    past the series at the last observed step.

    Raises:
        InvalidHorizonError: If ``horizon < 1``.
        ValueError:          If ``y`` is empty or ``times`` has the wrong length.
    """
    if horizon < 1:
        raise InvalidHorizonError(horizon)
    matrix = ForecastMatrix(y, horizon, convention=convention, times=times)
    log.debug(
        "Allocated forecast matrix %dx%d (%s rows)",
        matrix.shape[0], matrix.shape[1], matrix.convention.value,
    )
    return matrix
