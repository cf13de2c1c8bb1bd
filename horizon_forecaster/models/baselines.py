"""
Baseline one-step forecasting models.

Each baseline tests one hypothesis:

  NullModel            → "The series has no dynamics; the best forecast is the
                          training mean."

  RandomWalk           → "Tomorrow equals today."  Surprisingly hard to beat
                          on persistent series; also the reference the MASE
                          metric scales against.

  SimpleMovingAverage  → "Noise averages out over the last q values."

A lag model that cannot beat all three is not worth its parameters.

All three implement ``Forecastable`` (see ``models/base.py``), so the
recursive engine turns their one-step rule into h-step forecasts by feeding
earlier forecasts back in.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from horizon_forecaster.models.base import check_history, prior, require_trained


class NullModel:
    """Predict the mean of the training window at every time."""

    name = "null"
    min_history = 1

    def __init__(self) -> None:
        self._mean: float | None = None

    @property
    def n_params(self) -> int:
        return 1

    def train(self, y: np.ndarray, start: int = 0) -> None:
        arr = check_history(self.name, y, self.min_history)
        self._mean = float(arr.mean())

    def predict(self, t: int, ref: Any) -> float:
        require_trained(self.name, self._mean)
        return self._mean  # type: ignore[return-value]


class RandomWalk:
    """Naive baseline: ``ŷ(t+1) = y(t)``.

    Has nothing to estimate, but still requires ``train`` so that it can be
    dropped into rolling validation like any other model.
    """

    name = "rw"
    min_history = 1

    def __init__(self) -> None:
        self._trained = False

    @property
    def n_params(self) -> int:
        return 1

    def train(self, y: np.ndarray, start: int = 0) -> None:
        check_history(self.name, y, self.min_history)
        self._trained = True

    def predict(self, t: int, ref: Any) -> float:
        require_trained(self.name, True if self._trained else None)
        return float(ref[max(t, 0)])


class SimpleMovingAverage:
    """Predict the mean of the last ``q`` values (first value replicated before 0)."""

    name = "sma"

    def __init__(self, q: int = 3) -> None:
        if q < 1:
            raise ValueError(f"q must be >= 1, got {q}")
        self.q = q
        self.min_history = q
        self._trained = False

    @property
    def n_params(self) -> int:
        return self.q

    def train(self, y: np.ndarray, start: int = 0) -> None:
        check_history(self.name, y, self.min_history)
        self._trained = True

    def predict(self, t: int, ref: Any) -> float:
        require_trained(self.name, True if self._trained else None)
        return float(prior(ref, t, self.q).mean())
