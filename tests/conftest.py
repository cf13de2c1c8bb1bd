"""
Shared pytest fixtures for the horizon_forecaster test suite.

Provides:
  - ``short_series``: the 10-point series used by the end-to-end scenario.
  - ``ar_series``: a longer, reproducible AR(2) series for fitting models.
  - ``RecordingModel``: a one-step model that records every reference read.
  - ``series_csv``: a CSV file with a series, an exogenous column and times.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pytest


class RecordingModel:
    """Random-walk stand-in that logs every ``predict`` call and its reads."""

    name = "recording"
    min_history = 1

    def __init__(self) -> None:
        self.train_calls: list[tuple[int, int]] = []
        self.reads: list[tuple[Any, list[tuple[int, int]]]] = []

    @property
    def n_params(self) -> int:
        return 1

    def train(self, y: np.ndarray, start: int = 0) -> None:
        self.train_calls.append((start, start + len(y)))

    def predict(self, t: int, ref: Any) -> float:
        value = float(ref[t])
        self.reads.append((getattr(ref, "horizon", None), list(getattr(ref, "reads", []))))
        return value


def make_ar2_series(m: int = 120, seed: int = 7) -> np.ndarray:
    """y_t = 5 + 0.6 y_{t-1} - 0.2 y_{t-2} + noise, started at its mean."""
    rng = np.random.default_rng(seed)
    y = np.empty(m)
    y[:2] = 5.0 / 0.6
    for t in range(2, m):
        y[t] = 5.0 + 0.6 * y[t - 1] - 0.2 * y[t - 2] + rng.normal(scale=0.5)
    return y


@pytest.fixture
def short_series() -> np.ndarray:
    return np.array([1, 3, 4, 2, 5, 7, 9, 8, 6, 3], dtype=float)


@pytest.fixture
def ar_series() -> np.ndarray:
    return make_ar2_series()


@pytest.fixture
def recording_model() -> RecordingModel:
    return RecordingModel()


@pytest.fixture
def series_csv(tmp_path: Path) -> Path:
    """CSV with columns day, sales, temp (60 rows)."""
    y = make_ar2_series(60, seed=3)
    rng = np.random.default_rng(11)
    temp = 20.0 + rng.normal(scale=2.0, size=60)
    path = tmp_path / "series.csv"
    lines = ["day,sales,temp"]
    lines += [f"{t},{y[t]:.6f},{temp[t]:.6f}" for t in range(60)]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
