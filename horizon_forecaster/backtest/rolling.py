"""
Rolling (walk-forward) validation.

State machine
-------------
  Seed  split the series into a training head of ``tr_size`` points and a
        test tail of ``te_size`` points (see ``splits.py``).
  Step  iteration i, training end ``t = tr_size + i``:
          a. retrain on the current window ``[start, t)`` if
             ``i % retrain_cycle == 0``, otherwise keep the previous
             parameters;
          b. forecast ``t .. t+H-1`` from origin ``t - 1``, the last trained
             point, into the rolling matrix;
          c. record the one-step forecast of ``t``.
  Done  after ``te_size`` iterations.

Every test point ``tr_size .. m-1`` gets a one-step forecast.  The first one
has no one-step predecessor inside the test tail and is dropped, so the
accumulator holds ``te_size - 1`` forecasts aligned with ``y[tr_size+1 : m]``.
Per-horizon QoF is computed over the same targets.

Retraining failures are fatal: the error is logged and re-raised.  An
optional ``should_cancel`` callable is polled at the top of every iteration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

import numpy as np

from horizon_forecaster.backtest.metrics import QualityOfFit, diagnose
from horizon_forecaster.backtest.splits import RollingWindow, rolling_windows, split_sizes
from horizon_forecaster.config import RollingConfig
from horizon_forecaster.engine import make_forecaster
from horizon_forecaster.exceptions import ForecastEngineError, ValidationCancelled
from horizon_forecaster.matrix import ForecastMatrix

log = logging.getLogger(__name__)


@dataclass
class RollingResult:
    """Everything one rolling-validation run produced.

    Attributes:
        model_name:     Name of the validated model.
        horizon:        Maximum horizon H.
        tr_size:        Initial training window length.
        te_size:        Test tail length (number of iterations).
        windows:        Window state of every iteration, in order.
        matrix:         Rolling forecast matrix (origins tr_size-1 .. m-2 are filled).
        actual:         Observed values ``y[tr_size+1 : m]``.
        forecast:       One-step forecasts aligned with ``actual``.
        one_step_qof:   QoF of ``forecast`` against ``actual``.
        qof_by_horizon: QoF per horizon over targets ``tr_size+1 .. m-1``.
    """

    model_name: str
    horizon: int
    tr_size: int
    te_size: int
    windows: list[RollingWindow]
    matrix: ForecastMatrix
    actual: np.ndarray
    forecast: np.ndarray
    one_step_qof: Optional[QualityOfFit] = None
    qof_by_horizon: dict[int, QualityOfFit] = field(default_factory=dict)

    @property
    def n_retrains(self) -> int:
        return sum(1 for w in self.windows if w.retrained)


class RollingValidator:
    """Walk a training window across the series, retraining periodically.

    Args:
        config:        Rolling parameters (test ratio/size, retrain cycle,
                       growing or sliding window).
        horizon:       Maximum horizon H forecast from every origin.
        should_cancel: Optional callable polled before each iteration;
                       returning True raises ``ValidationCancelled``.
    """

    def __init__(
        self,
        config: RollingConfig,
        horizon: int,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.config = config
        self.horizon = horizon
        self.should_cancel = should_cancel

    def run(
        self,
        model: Any,
        y: Sequence[float] | np.ndarray,
        times: Optional[Sequence[float] | np.ndarray] = None,
    ) -> RollingResult:
        """Validate ``model`` on ``y``.

        Raises:
            ValueError:            If the split leaves no training or test data.
            InsufficientDataError: If a training window is too short for the model.
            ValidationCancelled:   If ``should_cancel`` returned True.
        """
        forecaster = make_forecaster(model, y, self.horizon, times)
        m = forecaster.n_obs
        tr_size, te_size = split_sizes(m, self.config.te_ratio, self.config.te_size)
        windows = rolling_windows(
            m, te_size, self.config.retrain_cycle, self.config.growing_window,
        )
        log.info(
            "Rolling validation of %s | m=%d tr_size=%d te_size=%d rc=%d %s window",
            model.name, m, tr_size, te_size, self.config.retrain_cycle,
            "growing" if self.config.growing_window else "sliding",
        )

        one_step: list[float] = []
        for w in windows:
            if self.should_cancel is not None and self.should_cancel():
                log.warning("Rolling validation of %s cancelled at i=%d", model.name, w.iteration)
                raise ValidationCancelled(w.iteration)

            if w.retrained:
                try:
                    forecaster.train(w.train_start, w.train_end)
                except (ForecastEngineError, ValueError) as exc:
                    log.error(
                        "Retraining %s on [%d, %d) FAILED at i=%d: %s",
                        model.name, w.train_start, w.train_end, w.iteration, exc,
                    )
                    raise
                log.debug(
                    "i=%d retrained on [%d, %d)", w.iteration, w.train_start, w.train_end,
                )

            yd = forecaster.forecast(w.test_pointer)
            one_step.append(float(yd[0]))

        # The forecast of y[tr_size] has no one-step predecessor in the tail.
        actual = forecaster.y[tr_size + 1 :].copy()
        forecast = np.asarray(one_step[1:], dtype=float)
        result = RollingResult(
            model_name=model.name,
            horizon=self.horizon,
            tr_size=tr_size,
            te_size=te_size,
            windows=windows,
            matrix=forecaster.matrix,
            actual=actual,
            forecast=forecast,
        )

        n_params = model.n_params
        if actual.size >= 2:
            result.one_step_qof = diagnose(actual, forecast, n_params)
        matrix = forecaster.matrix
        for h in range(1, self.horizon + 1):
            yy, yfh = matrix.aligned(h, start=tr_size + 1)
            if yy.size >= 2:
                result.qof_by_horizon[h] = diagnose(yy, yfh, n_params)

        log.info(
            "Rolling validation of %s done | retrains=%d forecasts=%d smape(h=1)=%s",
            model.name, result.n_retrains, forecast.size,
            f"{result.one_step_qof.smape:.4f}" if result.one_step_qof else "n/a",
        )
        return result
