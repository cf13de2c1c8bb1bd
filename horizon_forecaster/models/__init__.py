"""Forecasting models: the model contracts and the reference implementations."""

from horizon_forecaster.models.ar import AR, ARX
from horizon_forecaster.models.ar_direct import ARDirect
from horizon_forecaster.models.base import DirectForecastable, Forecastable, is_direct, prior
from horizon_forecaster.models.baselines import NullModel, RandomWalk, SimpleMovingAverage
from horizon_forecaster.models.registry import MODEL_REGISTRY, build_model

__all__ = [
    "AR",
    "ARX",
    "ARDirect",
    "DirectForecastable",
    "Forecastable",
    "MODEL_REGISTRY",
    "NullModel",
    "RandomWalk",
    "SimpleMovingAverage",
    "build_model",
    "is_direct",
    "prior",
]
