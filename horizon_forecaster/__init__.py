"""
horizon-forecaster: multi-horizon forecast matrices and walk-forward validation.

Packages
--------
matrix      ForecastMatrix storage, row conventions and the allocate helper.
models      Model contract (protocols) and reference forecasting models.
engine      Recursive and direct engines that fill a ForecastMatrix.
backtest    Split arithmetic, rolling validation, in-sample tests, QoF metrics.
ingestion   CSV series loading for the CLI.
utils       Logging setup.
"""

__version__ = "0.3.0"
