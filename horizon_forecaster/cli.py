"""
Horizon Forecaster: CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (CLI overrides are re-validated by the config models).
  4. Execute action (in-sample test, rolling validation, ...).
  5. Report result to stdout and write output files.

Install and run::

    pip install -e .
    horizon-forecaster --help
    horizon-forecaster validate-config
    horizon-forecaster list-models
    horizon-forecaster in-sample --data series.csv --column y --model ar --horizon 3
    horizon-forecaster roll-validate --data series.csv --column y --retrain-cycle 5 --growing
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import typer

app = typer.Typer(
    name="horizon-forecaster",
    help="Multi-horizon forecast matrices and rolling validation for time series.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from horizon_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from horizon_forecaster.utils.logging import configure_logging
    configure_logging(config.logging)


def _override(section, **overrides: Any):
    """Return a re-validated copy of a config section with non-None overrides applied."""
    from pydantic import ValidationError

    updates = {k: v for k, v in overrides.items() if v is not None}
    if not updates:
        return section
    try:
        return type(section)(**{**section.model_dump(), **updates})
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid option: {exc}", err=True)
        raise typer.Exit(code=1)


def _load_series_or_exit(
    data: str,
    column: str,
    exo: Optional[List[str]],
    time_column: Optional[str],
):
    """Parse the input CSV, printing a friendly error and exiting on failure."""
    from horizon_forecaster.ingestion.series_csv import parse_series_csv

    try:
        return parse_series_csv(Path(data), column, exo or (), time_column)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] CSV parse failed:\n{exc}", err=True)
        raise typer.Exit(code=1)


def _build_model_or_exit(model_config, horizon: int, x):
    from horizon_forecaster.models.registry import build_model

    try:
        return build_model(model_config, horizon, x)
    except (KeyError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _print_qof_table(qof_by_horizon) -> None:
    """Print the headline QoF fields, one row per horizon."""
    typer.echo(f"  {'h':>3}  {'m':>5}  {'r_sq':>9}  {'rmse':>10}  {'mae':>10}  {'smape':>8}  {'mase':>7}")
    typer.echo("  " + "─" * 64)
    for h, q in sorted(qof_by_horizon.items()):
        typer.echo(
            f"  {h:>3}  {q.m:>5}  {q.r_sq:>9.4f}  {q.rmse:>10.4f}  "
            f"{q.mae:>10.4f}  {q.smape:>8.3f}  {q.mase:>7.3f}"
        )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Model:            {config.model.name} (p={config.model.p}, q={config.model.q})")
    typer.echo(f"  Max horizon:      {config.engine.horizon}")
    typer.echo(f"  Retrain cycle:    {config.rolling.retrain_cycle}")
    typer.echo(f"  Window:           {'growing' if config.rolling.growing_window else 'sliding'}")
    typer.echo(f"  Test ratio:       {config.rolling.te_ratio}")
    typer.echo(f"  Output dir:       {config.output.output_dir}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("list-models")
def list_models() -> None:
    """List the registered models."""
    from horizon_forecaster.models.registry import MODEL_REGISTRY

    for spec in MODEL_REGISTRY:
        exo = " [needs --exo]" if spec.needs_exo else ""
        typer.echo(f"  {spec.name:<10} {spec.kind:<10} {spec.description}{exo}")


@app.command("in-sample")
def in_sample(
    data: str = typer.Option(..., "--data", help="CSV file with a header row."),
    column: str = typer.Option(..., "--column", help="Column holding the series."),
    exo: Optional[List[str]] = typer.Option(
        None, "--exo", help="Exogenous column (repeatable; arx only).",
    ),
    time_column: Optional[str] = typer.Option(None, "--time-column", help="Numeric time column."),
    model: Optional[str] = typer.Option(None, "--model", help="Registered model name."),
    horizon: Optional[int] = typer.Option(None, "--horizon", help="Maximum horizon H."),
    p: Optional[int] = typer.Option(None, "--p", help="Endogenous lags."),
    q: Optional[int] = typer.Option(None, "--q", help="Exogenous lags (sma window)."),
    skip: Optional[int] = typer.Option(None, "--skip", help="Leading targets left out of QoF."),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", help="Override output directory."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Train on the full series, forecast every horizon, print QoF per horizon."""
    from horizon_forecaster.backtest.in_sample import in_sample_test
    from horizon_forecaster.backtest.reporter import write_report
    from horizon_forecaster.exceptions import ForecastEngineError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    engine_cfg = _override(config.engine, horizon=horizon, skip=skip)
    model_cfg = _override(config.model, name=model, p=p, q=q)
    series = _load_series_or_exit(data, column, exo, time_column)
    mdl = _build_model_or_exit(model_cfg, engine_cfg.horizon, series.x)

    typer.echo(
        f"In-sample test | model={model_cfg.name} | m={series.n_obs} | "
        f"H={engine_cfg.horizon} | skip={engine_cfg.skip}"
    )
    try:
        result = in_sample_test(mdl, series.y, engine_cfg.horizon, engine_cfg.skip, series.times)
    except (ForecastEngineError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    _print_qof_table(result.qof_by_horizon)
    out_dir = write_report(
        output_dir or config.output.output_dir,
        model_cfg.name,
        "in_sample",
        result.matrix,
        result.qof_by_horizon,
        config_snapshot={
            "engine": engine_cfg.model_dump(),
            "model": model_cfg.model_dump(),
            "data": data,
            "column": column,
        },
    )
    typer.echo("")
    typer.echo(f"  Output: {out_dir}")
    typer.echo("[OK] In-sample test complete.")


@app.command("roll-validate")
def roll_validate(
    data: str = typer.Option(..., "--data", help="CSV file with a header row."),
    column: str = typer.Option(..., "--column", help="Column holding the series."),
    exo: Optional[List[str]] = typer.Option(
        None, "--exo", help="Exogenous column (repeatable; arx only).",
    ),
    time_column: Optional[str] = typer.Option(None, "--time-column", help="Numeric time column."),
    model: Optional[str] = typer.Option(None, "--model", help="Registered model name."),
    horizon: Optional[int] = typer.Option(None, "--horizon", help="Maximum horizon H."),
    p: Optional[int] = typer.Option(None, "--p", help="Endogenous lags."),
    q: Optional[int] = typer.Option(None, "--q", help="Exogenous lags (sma window)."),
    retrain_cycle: Optional[int] = typer.Option(
        None, "--retrain-cycle", help="Retrain every N test steps.",
    ),
    growing: Optional[bool] = typer.Option(
        None, "--growing/--sliding", help="Growing (from t=0) or fixed-length sliding window.",
    ),
    te_ratio: Optional[float] = typer.Option(None, "--te-ratio", help="Test tail fraction."),
    te_size: Optional[int] = typer.Option(None, "--te-size", help="Explicit test tail length."),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", help="Override output directory."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Walk-forward validation with periodic retraining; print QoF per horizon."""
    from horizon_forecaster.backtest.reporter import write_report
    from horizon_forecaster.backtest.rolling import RollingValidator
    from horizon_forecaster.exceptions import ForecastEngineError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    engine_cfg = _override(config.engine, horizon=horizon)
    model_cfg = _override(config.model, name=model, p=p, q=q)
    rolling_cfg = _override(
        config.rolling,
        retrain_cycle=retrain_cycle,
        growing_window=growing,
        te_ratio=te_ratio,
        te_size=te_size,
    )
    series = _load_series_or_exit(data, column, exo, time_column)
    mdl = _build_model_or_exit(model_cfg, engine_cfg.horizon, series.x)

    typer.echo(
        f"Rolling validation | model={model_cfg.name} | m={series.n_obs} | "
        f"H={engine_cfg.horizon} | rc={rolling_cfg.retrain_cycle} | "
        f"{'growing' if rolling_cfg.growing_window else 'sliding'} window"
    )
    try:
        result = RollingValidator(rolling_cfg, engine_cfg.horizon).run(mdl, series.y, series.times)
    except (ForecastEngineError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"  tr_size={result.tr_size} | te_size={result.te_size} | "
        f"retrains={result.n_retrains} | one-step forecasts={result.forecast.size}"
    )
    typer.echo("")
    _print_qof_table(result.qof_by_horizon)
    out_dir = write_report(
        output_dir or config.output.output_dir,
        model_cfg.name,
        "rolling",
        result.matrix,
        result.qof_by_horizon,
        config_snapshot={
            "engine": engine_cfg.model_dump(),
            "model": model_cfg.model_dump(),
            "rolling": rolling_cfg.model_dump(),
            "data": data,
            "column": column,
        },
        rolling=result,
    )
    typer.echo("")
    typer.echo(f"  Output: {out_dir}")
    typer.echo("[OK] Rolling validation complete.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
