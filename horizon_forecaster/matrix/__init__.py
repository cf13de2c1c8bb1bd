"""Forecast matrix: actuals, h-step forecasts and time index in one table."""

from horizon_forecaster.matrix.builder import make_forecast_matrix
from horizon_forecaster.matrix.forecast_matrix import ForecastMatrix, HistoryView, RowConvention

__all__ = ["ForecastMatrix", "HistoryView", "RowConvention", "make_forecast_matrix"]
