"""
Tests for the typer CLI.

Covers:
  - validate-config / list-models output
  - in-sample and roll-validate end to end on a small CSV, writing reports
  - Friendly [ERROR] exits for bad input and invalid options
"""

from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from horizon_forecaster.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Drop the handlers configure_logging() installs on the root logger."""
    root = logging.getLogger()
    before, level = set(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in before and type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "app.toml"
    log_file = (tmp_path / "logs" / "run.log").as_posix()
    out_dir = (tmp_path / "out").as_posix()
    path.write_text(
        "[engine]\nhorizon = 3\n\n"
        "[rolling]\nretrain_cycle = 4\n\n"
        f'[logging]\nlevel = "WARNING"\nlog_file = "{log_file}"\n\n'
        f'[output]\noutput_dir = "{out_dir}"\n',
        encoding="utf-8",
    )
    return path


# ── Info commands ─────────────────────────────────────────────────────────────

def test_validate_config(config_file) -> None:
    result = runner.invoke(app, ["validate-config", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "Retrain cycle:    4" in result.output
    assert "[OK] Config valid." in result.output


def test_validate_config_full_dumps_json(config_file) -> None:
    result = runner.invoke(app, ["validate-config", "--config", str(config_file), "--full"])
    assert result.exit_code == 0
    assert '"retrain_cycle": 4' in result.output


def test_validate_config_missing_file(tmp_path) -> None:
    result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "x.toml")])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_list_models() -> None:
    result = runner.invoke(app, ["list-models"])
    assert result.exit_code == 0
    for name in ("null", "rw", "sma", "ar", "arx", "ar_direct"):
        assert name in result.output
    assert "[needs --exo]" in result.output


# ── in-sample ─────────────────────────────────────────────────────────────────

def test_in_sample_writes_report(config_file, series_csv, tmp_path) -> None:
    result = runner.invoke(app, [
        "in-sample", "--data", str(series_csv), "--column", "sales",
        "--config", str(config_file),
    ])
    assert result.exit_code == 0, result.output
    assert "[OK] In-sample test complete." in result.output
    out = tmp_path / "out" / "ar_in_sample_h3"
    assert (out / "forecast_matrix.csv").exists()
    manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["mode"] == "in_sample"
    assert manifest["n_obs"] == 60


def test_in_sample_arx_with_exogenous(config_file, series_csv, tmp_path) -> None:
    result = runner.invoke(app, [
        "in-sample", "--data", str(series_csv), "--column", "sales",
        "--exo", "temp", "--time-column", "day", "--model", "arx", "--horizon", "2",
        "--config", str(config_file),
    ])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "arx_in_sample_h2" / "qof_by_horizon.csv").exists()


def test_in_sample_arx_without_exogenous_fails(config_file, series_csv) -> None:
    result = runner.invoke(app, [
        "in-sample", "--data", str(series_csv), "--column", "sales",
        "--model", "arx", "--config", str(config_file),
    ])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_unknown_model_fails(config_file, series_csv) -> None:
    result = runner.invoke(app, [
        "in-sample", "--data", str(series_csv), "--column", "sales",
        "--model", "lstm", "--config", str(config_file),
    ])
    assert result.exit_code == 1


def test_missing_data_file_fails(config_file, tmp_path) -> None:
    result = runner.invoke(app, [
        "in-sample", "--data", str(tmp_path / "none.csv"), "--column", "sales",
        "--config", str(config_file),
    ])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output


# ── roll-validate ─────────────────────────────────────────────────────────────

def test_roll_validate_writes_report(config_file, series_csv, tmp_path) -> None:
    result = runner.invoke(app, [
        "roll-validate", "--data", str(series_csv), "--column", "sales",
        "--te-size", "12", "--growing", "--config", str(config_file),
    ])
    assert result.exit_code == 0, result.output
    assert "retrains=3" in result.output
    assert "growing window" in result.output
    out = tmp_path / "out" / "ar_rolling_h3"
    manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["rolling"]["te_size"] == 12
    assert manifest["rolling"]["n_forecasts"] == 11
    assert manifest["config_snapshot"]["rolling"]["growing_window"] is True
    assert (out / "one_step.csv").exists()


def test_roll_validate_invalid_retrain_cycle(config_file, series_csv) -> None:
    result = runner.invoke(app, [
        "roll-validate", "--data", str(series_csv), "--column", "sales",
        "--retrain-cycle", "0", "--config", str(config_file),
    ])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_roll_validate_window_too_short_fails(config_file, series_csv) -> None:
    # sliding window of 3 points cannot train AR(5)
    result = runner.invoke(app, [
        "roll-validate", "--data", str(series_csv), "--column", "sales",
        "--p", "5", "--te-size", "57", "--sliding", "--config", str(config_file),
    ])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output
