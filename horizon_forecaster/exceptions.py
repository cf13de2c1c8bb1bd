"""
Error taxonomy for the forecasting engine.

Shape and horizon problems fail fast where they are first detectable.
Unknowable matrix cells are NOT errors: they read back as ``None``.
"""

from __future__ import annotations


class ForecastEngineError(Exception):
    """Base class for every error raised by horizon_forecaster."""


class InsufficientDataError(ForecastEngineError):
    """A training window is shorter than the history the model needs.

    Attributes:
        required:  Minimum number of observations the model needs.
        available: Number of observations it was given.
    """

    def __init__(self, model_name: str, required: int, available: int) -> None:
        self.model_name = model_name
        self.required = required
        self.available = available
        super().__init__(
            f"{model_name} needs >= {required} observations to train; got {available}."
        )


class InvalidHorizonError(ForecastEngineError, ValueError):
    """A horizon outside 1..H was requested (programming error)."""

    def __init__(self, h: int, max_horizon: int | None = None) -> None:
        self.h = h
        self.max_horizon = max_horizon
        if max_horizon is None:
            super().__init__(f"horizon h = {h} must be >= 1.")
        else:
            super().__init__(f"horizon h = {h} must be in [1, {max_horizon}].")


class DimensionMismatchError(ForecastEngineError, ValueError):
    """Two vectors that must line up have different lengths.

    Raised when actual and forecast vectors reach diagnostics, and when a
    direct model emits the wrong number of horizons (pass ``message``).
    """

    def __init__(self, n_actual: int, n_forecast: int, message: str | None = None) -> None:
        self.n_actual = n_actual
        self.n_forecast = n_forecast
        super().__init__(
            message
            or f"actual and forecast vectors differ in length: {n_actual} != {n_forecast}."
        )


class DiagonalPrecedenceError(ForecastEngineError):
    """A horizon-h forecast tried to read a forecast at horizon >= h."""


class ModelNotTrainedError(ForecastEngineError):
    """predict/forecast was called before train."""


class ValidationCancelled(ForecastEngineError):
    """Rolling validation was cancelled between two iterations."""

    def __init__(self, iteration: int) -> None:
        self.iteration = iteration
        super().__init__(f"rolling validation cancelled before iteration {iteration}.")
