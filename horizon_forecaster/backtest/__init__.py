"""
Validation of forecasting models against held-out data.

Modules
-------
splits      Train/test split arithmetic and the rolling-window state.
rolling     Rolling (walk-forward) validation with periodic retraining.
in_sample   Train on the full series and diagnose every horizon.
metrics     Quality of fit (QoF) and prediction intervals.
reporter    Write forecast matrices, QoF tables and a JSON manifest.
"""
