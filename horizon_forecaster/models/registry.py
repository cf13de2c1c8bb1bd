"""
Model registry: the single place that maps a model name to a constructor.

Every CLI command and validation run builds its model through
``build_model(config, horizon, x)``.  A plain list of ``ModelSpec``
dataclasses keeps the mapping readable; adding a model is one line here.

Kinds
-----
recursive   One-step model; h-step forecasts come from the recursive engine.
direct      Multi-head model emitting all horizons itself (direct engine).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

from horizon_forecaster.config import ModelConfig
from horizon_forecaster.models.ar import AR, ARX
from horizon_forecaster.models.ar_direct import ARDirect
from horizon_forecaster.models.baselines import NullModel, RandomWalk, SimpleMovingAverage


@dataclass(frozen=True)
class ModelSpec:
    """One registered model.

    Attributes:
        name:        Registry key (``ModelConfig.name``).
        kind:        ``"recursive"`` or ``"direct"``.
        description: One-line summary shown by ``list-models``.
        factory:     ``(config, horizon, x) -> model``.
        needs_exo:   True when the model requires exogenous columns.
    """

    name: str
    kind: str
    description: str
    factory: Callable[[ModelConfig, int, Optional[np.ndarray]], Any]
    needs_exo: bool = False


MODEL_REGISTRY: list[ModelSpec] = [
    ModelSpec("null", "recursive", "Mean of the training window.",
              lambda c, hh, x: NullModel()),
    ModelSpec("rw", "recursive", "Random walk: next value equals the last one.",
              lambda c, hh, x: RandomWalk()),
    ModelSpec("sma", "recursive", "Mean of the last q values.",
              lambda c, hh, x: SimpleMovingAverage(q=c.q)),
    ModelSpec("ar", "recursive", "AR(p) with intercept, OLS.",
              lambda c, hh, x: AR(p=c.p)),
    ModelSpec("arx", "recursive", "AR(p) + trend terms + q lags per exogenous column, OLS.",
              lambda c, hh, x: ARX(x, p=c.p, q=c.q, spec=c.spec, fill=c.fill),
              needs_exo=True),
    ModelSpec("ar_direct", "direct", "One AR(p) OLS head per horizon.",
              lambda c, hh, x: ARDirect(p=c.p, horizon=hh)),
]


def model_names() -> list[str]:
    return [spec.name for spec in MODEL_REGISTRY]


def get_model_spec(name: str) -> ModelSpec:
    """Look up a registered model by name.

    Raises:
        KeyError: If ``name`` is not registered.
    """
    for spec in MODEL_REGISTRY:
        if spec.name == name:
            return spec
    raise KeyError(f"Unknown model '{name}'. Choose from: {', '.join(model_names())}.")


def build_model(config: ModelConfig, horizon: int, x: Optional[np.ndarray] = None) -> Any:
    """Instantiate the model named by ``config.name``.

    Args:
        config:  Model hyper-parameters.
        horizon: Maximum forecasting horizon (used by direct models).
        x:       Exogenous columns over the whole series (``arx`` only).

    Raises:
        KeyError:   Unknown model name.
        ValueError: ``arx`` requested without exogenous data.
    """
    spec = get_model_spec(config.name)
    if spec.needs_exo and x is None:
        raise ValueError(f"Model '{spec.name}' needs exogenous columns (x).")
    return spec.factory(config, horizon, x)
