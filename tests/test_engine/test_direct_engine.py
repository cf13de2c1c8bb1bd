"""
Tests for the direct forecast engine.

What we test
------------
1. Row convention: row t holds the H forecasts issued FROM origin t.
2. Engine selection: a multi-head model gets the direct engine.
3. Alignment: slant() to target rows agrees with aligned() on origin rows.
4. Shape checks: a model built for another H is rejected at construction, and
   a model returning the wrong number of horizons is rejected on forecast.
5. Actual column: unchanged after forecast_all.
"""

from __future__ import annotations

import numpy as np
import pytest

from horizon_forecaster.engine import DirectForecaster, make_forecaster
from horizon_forecaster.exceptions import (
    DimensionMismatchError,
    InvalidHorizonError,
    ModelNotTrainedError,
)
from horizon_forecaster.matrix import RowConvention
from horizon_forecaster.models import ARDirect


class _ConstantHeads:
    """Direct stand-in: forecast(t) = [t + 0.1 h for h in 1..H]."""

    name = "constant_heads"
    min_history = 1

    def __init__(self, horizon: int, emit: int | None = None) -> None:
        self.horizon = horizon
        self._emit = emit if emit is not None else horizon

    @property
    def n_params(self) -> int:
        return 1

    def train(self, y, start: int = 0) -> None:
        pass

    def forecast(self, t: int, y) -> np.ndarray:
        return np.array([t + 0.1 * h for h in range(1, self._emit + 1)])


# ── Row convention ────────────────────────────────────────────────────────────

def test_rows_are_origin_indexed(short_series) -> None:
    fc = DirectForecaster(_ConstantHeads(2), short_series, 2)
    fc.train()
    fm = fc.forecast_all()
    assert fm.convention is RowConvention.ORIGIN
    for t in range(10):
        assert fm.get(t, 1) == pytest.approx(t + 0.1)
        assert fm.get(t, 2) == pytest.approx(t + 0.2)
    assert fm.get(10, 1) is None
    assert fm.get(11, 2) is None


def test_make_forecaster_picks_direct_engine(short_series) -> None:
    fc = make_forecaster(ARDirect(p=2, horizon=2), short_series, 2)
    assert isinstance(fc, DirectForecaster)


def test_forecast_writes_one_row(short_series) -> None:
    fc = DirectForecaster(_ConstantHeads(3), short_series, 3)
    fc.train()
    out = fc.forecast(4)
    assert list(out) == pytest.approx([4.1, 4.2, 4.3])
    assert fc.matrix.get(4, 3) == pytest.approx(4.3)
    assert fc.matrix.get(5, 1) is None


def test_predict_is_first_head(short_series) -> None:
    fc = DirectForecaster(_ConstantHeads(3), short_series, 3)
    fc.train()
    assert fc.predict(6) == pytest.approx(6.1)


def test_forecast_at_fills_missing_origins(short_series) -> None:
    fc = DirectForecaster(_ConstantHeads(2), short_series, 2)
    fc.train()
    col = fc.forecast_at(2)
    assert col[3] == pytest.approx(3.2)
    assert np.isnan(col[10])


# ── Alignment ─────────────────────────────────────────────────────────────────

def test_slant_alignment_matches_origin_alignment(ar_series) -> None:
    fc = DirectForecaster(ARDirect(p=2, horizon=3), ar_series, 3)
    fc.train()
    fm = fc.forecast_all()
    target = fm.slant()
    for h in range(1, 4):
        a1, f1 = fm.aligned(h)
        a2, f2 = target.aligned(h)
        np.testing.assert_allclose(a1, a2)
        np.testing.assert_allclose(f1, f2)
        assert a1.size == len(ar_series) - h


# ── Shape checks and lifecycle ────────────────────────────────────────────────

def test_wrong_vector_length_raises(short_series) -> None:
    fc = DirectForecaster(_ConstantHeads(3, emit=2), short_series, 3)
    fc.train()
    with pytest.raises(DimensionMismatchError, match="returned 2 horizons"):
        fc.forecast(2)


def test_model_horizon_mismatch_fails_at_construction(short_series) -> None:
    with pytest.raises(InvalidHorizonError):
        DirectForecaster(_ConstantHeads(3), short_series, 2)


def test_make_forecaster_rejects_mismatched_heads(short_series) -> None:
    with pytest.raises(InvalidHorizonError):
        make_forecaster(ARDirect(p=2, horizon=3), short_series, 2)


def test_forecast_before_train_raises(short_series) -> None:
    fc = DirectForecaster(_ConstantHeads(2), short_series, 2)
    with pytest.raises(ModelNotTrainedError):
        fc.forecast_all()


def test_actual_column_unchanged(ar_series) -> None:
    fc = DirectForecaster(ARDirect(p=2, horizon=2), ar_series, 2)
    fc.train()
    fc.forecast_all()
    np.testing.assert_array_equal(fc.matrix.actuals, ar_series)
