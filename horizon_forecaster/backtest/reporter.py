"""
Validation result reporting: CSV files and a JSON manifest.

Output layout (one run):
  {output_dir}/{model}_{mode}_h{H}/
    forecast_matrix.csv  : one row per matrix row; empty cells are unknowable
    qof_by_horizon.csv   : one row per horizon, QoF fields in stable order
    one_step.csv         : rolling mode only: aligned actual / forecast pairs
    manifest.json        : run config, sizes, retrain count, file list

These outputs enable:
  - Quick review in a spreadsheet from the CSV files.
  - Cross-run comparison by diffing manifests and QoF tables.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import numpy as np

from horizon_forecaster.backtest.metrics import QOF_FIELDS, QualityOfFit
from horizon_forecaster.backtest.rolling import RollingResult
from horizon_forecaster.matrix import ForecastMatrix

log = logging.getLogger(__name__)


# ── CSV output ─────────────────────────────────────────────────────────────────

def write_forecast_matrix_csv(matrix: ForecastMatrix, path: Path) -> None:
    """Write the forecast matrix row by row (unknown cells as empty strings)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fieldnames = ["t", "actual"] + [f"h{h}" for h in range(1, matrix.horizon + 1)]
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in matrix.rows():
            writer.writerow({k: _fmt(v) for k, v in row.items()})
    log.info("Forecast matrix CSV written: %s (%d rows)", path, matrix.n_rows)


def write_qof_csv(qof_by_horizon: dict[int, QualityOfFit], path: Path) -> None:
    """Write per-horizon QoF as CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fieldnames = ["horizon", *QOF_FIELDS]
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for h, qof in sorted(qof_by_horizon.items()):
            row: dict[str, Any] = {"horizon": h}
            row.update({k: _fmt(v) for k, v in qof.as_dict().items()})
            writer.writerow(row)
    log.info("QoF CSV written: %s", path)


def write_one_step_csv(result: RollingResult, path: Path) -> None:
    """Write the aligned one-step actual/forecast pairs of a rolling run."""
    path.parent.mkdir(parents=True, exist_ok=True)
    start = result.tr_size + 1
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["t", "actual", "forecast"])
        writer.writeheader()
        for i, (yy, yp) in enumerate(zip(result.actual, result.forecast)):
            writer.writerow({"t": start + i, "actual": _fmt(yy), "forecast": _fmt(yp)})
    log.info("One-step CSV written: %s (%d rows)", path, result.forecast.size)


# ── JSON manifest ──────────────────────────────────────────────────────────────

def build_manifest(
    model_name: str,
    mode: str,
    matrix: ForecastMatrix,
    output_dir: Path,
    config_snapshot: dict[str, Any],
    rolling: Optional[RollingResult] = None,
) -> dict[str, Any]:
    """Build a JSON manifest summarising one validation run."""
    files = {
        "forecast_matrix_csv": str(output_dir / "forecast_matrix.csv"),
        "qof_by_horizon_csv":  str(output_dir / "qof_by_horizon.csv"),
    }
    manifest: dict[str, Any] = {
        "schema_version": "1.0",
        "built_at":   datetime.now(tz=timezone.utc).isoformat(),
        "model_name": model_name,
        "mode":       mode,
        "n_obs":      matrix.n_obs,
        "horizon":    matrix.horizon,
        "convention": matrix.convention.value,
    }
    if rolling is not None:
        files["one_step_csv"] = str(output_dir / "one_step.csv")
        manifest["rolling"] = {
            "tr_size":     rolling.tr_size,
            "te_size":     rolling.te_size,
            "n_retrains":  rolling.n_retrains,
            "n_forecasts": int(rolling.forecast.size),
        }
    manifest["output_files"] = files
    manifest["config_snapshot"] = config_snapshot
    return manifest


def write_manifest(manifest: dict[str, Any], path: Path) -> None:
    """Write the manifest dict as pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, default=str)
    log.info("Run manifest written: %s", path)


def make_output_dir(base_dir: str, model_name: str, mode: str, horizon: int) -> Path:
    """Build the deterministic output directory path for one run."""
    return Path(base_dir) / f"{model_name}_{mode}_h{horizon}"


def write_report(
    base_dir: str,
    model_name: str,
    mode: str,
    matrix: ForecastMatrix,
    qof_by_horizon: dict[int, QualityOfFit],
    config_snapshot: dict[str, Any],
    rolling: Optional[RollingResult] = None,
) -> Path:
    """Write every output file of one run and return its directory."""
    out_dir = make_output_dir(base_dir, model_name, mode, matrix.horizon)
    write_forecast_matrix_csv(matrix, out_dir / "forecast_matrix.csv")
    write_qof_csv(qof_by_horizon, out_dir / "qof_by_horizon.csv")
    if rolling is not None:
        write_one_step_csv(rolling, out_dir / "one_step.csv")
    manifest = build_manifest(model_name, mode, matrix, out_dir, config_snapshot, rolling)
    write_manifest(manifest, out_dir / "manifest.json")
    return out_dir


def _fmt(v: Any) -> str:
    """Format floats to 6 decimal places; None and NaN become empty strings."""
    if v is None:
        return ""
    if isinstance(v, (float, np.floating)):
        if math.isnan(v):
            return ""
        return f"{float(v):.6f}"
    return str(v)
