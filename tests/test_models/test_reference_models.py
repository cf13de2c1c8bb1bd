"""
Tests for the feature builders and the reference models.

What we test
------------
1. prior(): oldest-first windows, first value replicated before time 0.
2. lag_block / trend_block / build_design: column layout.
3. hide(): exogenous lags beyond the origin, both fill policies.
4. Baselines: null, random walk, moving average one-step rules.
5. AR / ARX / ARDirect: OLS recovers known coefficients.
6. Contracts: InsufficientDataError on short windows, ModelNotTrainedError
   before training, protocol membership.
7. Registry: names map to the right classes; arx needs exogenous data.
"""

from __future__ import annotations

import numpy as np
import pytest

from horizon_forecaster.config import ModelConfig
from horizon_forecaster.engine import RecursiveForecaster
from horizon_forecaster.exceptions import InsufficientDataError, ModelNotTrainedError
from horizon_forecaster.models import (
    AR,
    ARX,
    ARDirect,
    DirectForecastable,
    Forecastable,
    NullModel,
    RandomWalk,
    SimpleMovingAverage,
    build_model,
    is_direct,
    prior,
)
from horizon_forecaster.models.base import degrees_of_freedom
from horizon_forecaster.models.features import build_design, hide, lag_block, trend_block
from horizon_forecaster.models.registry import get_model_spec, model_names


# ── Helpers ────────────────────────────────────────────────────────────────────

def _ar1(m: int, delta: float, phi: float, seed: int = 1, noise: float = 0.1) -> np.ndarray:
    rng = np.random.default_rng(seed)
    y = np.empty(m)
    y[0] = delta / (1.0 - phi)
    for t in range(1, m):
        y[t] = delta + phi * y[t - 1] + rng.normal(scale=noise)
    return y


def _arx_data(m: int = 800, seed: int = 5) -> tuple[np.ndarray, np.ndarray]:
    """y_t = 1 + 0.5 y_{t-1} + 2 x_{t-1} + noise."""
    rng = np.random.default_rng(seed)
    x = rng.normal(size=m)
    y = np.empty(m)
    y[0] = 2.0
    for t in range(1, m):
        y[t] = 1.0 + 0.5 * y[t - 1] + 2.0 * x[t - 1] + rng.normal(scale=0.05)
    return y, x


# ── Feature builders ──────────────────────────────────────────────────────────

def test_prior_is_oldest_first_and_clamped() -> None:
    y = np.array([10.0, 20.0, 30.0, 40.0])
    assert list(prior(y, 3, 3)) == [20.0, 30.0, 40.0]
    assert list(prior(y, 1, 3)) == [10.0, 10.0, 20.0]
    assert list(prior(y, 0, 2)) == [10.0, 10.0]


def test_lag_block_layout() -> None:
    y = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    block = lag_block(y, 2, np.array([1, 3, 4]))
    np.testing.assert_array_equal(block, [[1.0, 1.0], [2.0, 3.0], [3.0, 4.0]])


@pytest.mark.parametrize("spec, width", [(0, 0), (1, 1), (2, 2)])
def test_trend_block_width(spec, width) -> None:
    block = trend_block(np.arange(4), spec)
    assert block.shape == (4, width)
    if spec == 2:
        assert list(block[:, 1]) == [0.0, 1.0, 2.0, 3.0]


def test_build_design_rows_and_columns() -> None:
    y = np.arange(6, dtype=float)
    x_exo = np.arange(6, dtype=float) * 10
    design, target = build_design(y, p=2, spec=2, start=100, x=x_exo, q=1)
    assert design.shape == (5, 2 + 2 + 1)
    assert list(target) == [1.0, 2.0, 3.0, 4.0, 5.0]
    # target index 3: [1, t=103, y1, y2, x2]
    assert list(design[2]) == [1.0, 103.0, 1.0, 2.0, 20.0]


def test_hide_fill_with_last_available() -> None:
    z = np.array([1.0, 2.0, 3.0, 4.0])
    assert list(hide(z, 1)) == [1.0, 2.0, 3.0, 4.0]
    assert list(hide(z, 2)) == [1.0, 2.0, 3.0, 3.0]
    assert list(hide(z, 3)) == [1.0, 2.0, 2.0, 2.0]


def test_hide_fill_with_zero() -> None:
    z = np.array([1.0, 2.0, 3.0, 4.0])
    assert list(hide(z, 2, fill=False)) == [1.0, 2.0, 3.0, 0.0]


def test_hide_whole_window_beyond_origin() -> None:
    z = np.array([1.0, 2.0])
    assert list(hide(z, 3, fill=True)) == [0.0, 0.0]


def test_hide_does_not_mutate_input() -> None:
    z = np.array([1.0, 2.0, 3.0])
    hide(z, 3, fill=False)
    assert list(z) == [1.0, 2.0, 3.0]


# ── Baselines ─────────────────────────────────────────────────────────────────

def test_null_model_predicts_training_mean(short_series) -> None:
    model = NullModel()
    model.train(short_series)
    assert model.predict(4, short_series) == pytest.approx(short_series.mean())


def test_random_walk_predicts_last_value(short_series) -> None:
    model = RandomWalk()
    model.train(short_series)
    assert model.predict(4, short_series) == 5.0


def test_sma_predicts_mean_of_last_q(short_series) -> None:
    model = SimpleMovingAverage(q=3)
    model.train(short_series)
    assert model.predict(5, short_series) == pytest.approx((2.0 + 5.0 + 7.0) / 3.0)
    assert model.predict(0, short_series) == pytest.approx(1.0)


def test_sma_window_shorter_than_q_raises() -> None:
    with pytest.raises(InsufficientDataError) as exc_info:
        SimpleMovingAverage(q=4).train(np.array([1.0, 2.0]))
    assert exc_info.value.required == 4
    assert exc_info.value.available == 2


@pytest.mark.parametrize("model", [NullModel(), RandomWalk(), SimpleMovingAverage(2), AR(2)])
def test_predict_before_train_raises(model, short_series) -> None:
    with pytest.raises(ModelNotTrainedError):
        model.predict(3, short_series)


# ── AR / ARX / ARDirect ───────────────────────────────────────────────────────

def test_ar_recovers_coefficients() -> None:
    y = _ar1(3000, delta=2.0, phi=0.7)
    model = AR(p=1)
    model.train(y)
    delta, phi = model.coef
    assert phi == pytest.approx(0.7, abs=0.03)
    assert delta == pytest.approx(2.0, abs=0.2)


def test_ar_window_offset_does_not_change_fit() -> None:
    y = _ar1(400, delta=1.0, phi=0.5)
    a, b = AR(p=2), AR(p=2)
    a.train(y[100:300])
    b.train(y[100:300], start=100)
    np.testing.assert_allclose(a.coef, b.coef)


def test_ar_needs_p_plus_one_points() -> None:
    with pytest.raises(InsufficientDataError):
        AR(p=3).train(np.array([1.0, 2.0, 3.0]))


def test_arx_recovers_coefficients() -> None:
    y, x = _arx_data()
    model = ARX(x, p=1, q=1, spec=1)
    model.train(y)
    delta, phi, beta = model.coef
    assert delta == pytest.approx(1.0, abs=0.05)
    assert phi == pytest.approx(0.5, abs=0.02)
    assert beta == pytest.approx(2.0, abs=0.02)
    assert model.n_params == 3


def test_arx_hides_future_exogenous_values() -> None:
    y, x = _arx_data(200)
    model = ARX(x, p=1, q=1, spec=1, fill=False)
    fc = RecursiveForecaster(model, y, 2)
    fc.train()
    fm = fc.forecast_all()
    delta, phi, beta = model.coef
    f1 = fm.get(51, 1)
    assert f1 == pytest.approx(delta + phi * y[50] + beta * x[50])
    # at h = 2 the only exogenous lag (x[51]) lies beyond origin 50 -> 0
    assert fm.get(52, 2) == pytest.approx(delta + phi * f1)


def test_arx_fill_repeats_last_available() -> None:
    y, x = _arx_data(200)
    model = ARX(x, p=1, q=2, spec=1, fill=True)
    fc = RecursiveForecaster(model, y, 2)
    fc.train()
    fm = fc.forecast_all()
    c = model.coef
    f1 = fm.get(51, 1)
    # lags [x50, x51] with x51 hidden -> [x50, x50]
    expected = c[0] + c[1] * f1 + c[2] * x[50] + c[3] * x[50]
    assert fm.get(52, 2) == pytest.approx(expected)


def test_arx_exogenous_window_must_cover_training_window() -> None:
    y, x = _arx_data(100)
    model = ARX(x[:50], p=1, q=1)
    with pytest.raises(ValueError):
        model.train(y[40:80], start=40)


def test_ar_direct_heads_follow_powers_of_phi() -> None:
    y = _ar1(4000, delta=0.0, phi=0.8, noise=0.5)
    model = ARDirect(p=1, horizon=3)
    model.train(y)
    slopes = model.coef[1]
    for h in range(1, 4):
        assert slopes[h - 1] == pytest.approx(0.8 ** h, abs=0.05)


def test_ar_direct_forecast_length(ar_series) -> None:
    model = ARDirect(p=2, horizon=4)
    model.train(ar_series)
    assert model.forecast(30, ar_series).shape == (4,)


def test_ar_direct_min_history() -> None:
    with pytest.raises(InsufficientDataError):
        ARDirect(p=2, horizon=3).train(np.arange(4, dtype=float))


# ── Contracts ─────────────────────────────────────────────────────────────────

def test_protocol_membership() -> None:
    assert isinstance(AR(2), Forecastable)
    assert isinstance(RandomWalk(), Forecastable)
    assert isinstance(ARDirect(2, 3), DirectForecastable)
    assert not is_direct(AR(2))
    assert is_direct(ARDirect(2, 3))


def test_degrees_of_freedom_floor() -> None:
    assert degrees_of_freedom(1, 10) == (1, 9)
    assert degrees_of_freedom(4, 10) == (3, 7)


# ── Registry ──────────────────────────────────────────────────────────────────

def test_registry_names() -> None:
    assert model_names() == ["null", "rw", "sma", "ar", "arx", "ar_direct"]


@pytest.mark.parametrize("name, cls", [
    ("null", NullModel),
    ("rw", RandomWalk),
    ("sma", SimpleMovingAverage),
    ("ar", AR),
    ("ar_direct", ARDirect),
])
def test_build_model_returns_class(name, cls) -> None:
    model = build_model(ModelConfig(name=name, p=3, q=2), horizon=4)
    assert isinstance(model, cls)


def test_build_model_passes_hyper_parameters() -> None:
    ar = build_model(ModelConfig(name="ar", p=4), horizon=2)
    assert ar.p == 4
    direct = build_model(ModelConfig(name="ar_direct", p=2), horizon=5)
    assert direct.horizon == 5
    sma = build_model(ModelConfig(name="sma", q=6), horizon=1)
    assert sma.q == 6


def test_build_arx_requires_exogenous() -> None:
    with pytest.raises(ValueError):
        build_model(ModelConfig(name="arx"), horizon=2)
    model = build_model(ModelConfig(name="arx", spec=2, fill=False), horizon=2, x=np.zeros(10))
    assert isinstance(model, ARX)
    assert model.spec == 2
    assert model.fill is False


def test_unknown_model_name() -> None:
    with pytest.raises(KeyError):
        get_model_spec("lstm")
