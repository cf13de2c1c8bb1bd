"""
In-sample testing: train on the full series, forecast every horizon from
every origin, and diagnose each horizon column against the actuals.

In-sample QoF is optimistic (the model has seen every target), but it is the
quickest check that a model and its horizon structure behave: QoF should
degrade smoothly as h grows.  The first ``skip`` targets are excluded because
their lag windows were backfilled with the first observation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

from horizon_forecaster.backtest.metrics import QualityOfFit, diagnose
from horizon_forecaster.engine import make_forecaster
from horizon_forecaster.matrix import ForecastMatrix

log = logging.getLogger(__name__)


@dataclass
class InSampleResult:
    """Forecast matrix and per-horizon QoF of one in-sample test."""

    model_name: str
    horizon: int
    skip: int
    matrix: ForecastMatrix
    qof_by_horizon: dict[int, QualityOfFit] = field(default_factory=dict)


def diagnose_all(
    matrix: ForecastMatrix,
    n_params: int,
    skip: int = 0,
) -> dict[int, QualityOfFit]:
    """QoF for every horizon of a filled matrix, skipping the first ``skip`` targets.

    Horizons with fewer than two aligned pairs are left out.
    """
    out: dict[int, QualityOfFit] = {}
    for h in range(1, matrix.horizon + 1):
        actual, forecast = matrix.aligned(h, start=skip)
        if actual.size < 2:
            log.warning("h=%d: only %d aligned points, QoF skipped", h, actual.size)
            continue
        out[h] = diagnose(actual, forecast, n_params)
    return out


def in_sample_test(
    model: Any,
    y: Sequence[float] | np.ndarray,
    horizon: int,
    skip: int = 2,
    times: Optional[Sequence[float] | np.ndarray] = None,
) -> InSampleResult:
    """Train ``model`` on all of ``y``, fill the forecast matrix, diagnose it.

    Raises:
        InsufficientDataError: If ``y`` is shorter than the model's minimum history.
    """
    forecaster = make_forecaster(model, y, horizon, times)
    forecaster.train()
    matrix = forecaster.forecast_all()
    qof = diagnose_all(matrix, model.n_params, skip=skip)
    log.info(
        "In-sample test of %s | m=%d H=%d skip=%d | horizons diagnosed=%d",
        model.name, forecaster.n_obs, horizon, skip, len(qof),
    )
    return InSampleResult(
        model_name=model.name,
        horizon=horizon,
        skip=skip,
        matrix=matrix,
        qof_by_horizon=qof,
    )
