"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local env overrides (gitignored)
  4. Environment variables       : ``HORIZON_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Every engine, validator and CLI command receives explicit, frozen config
objects.  Nothing reads a mutable module-level hyper-parameter map, so two
runs with equal configs are reproducible and independent.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class EngineConfig(BaseModel):
    """Forecast matrix sizing and in-sample diagnostics."""

    model_config = ConfigDict(frozen=True)

    horizon: int = 3
    skip: int = 2

    @field_validator("horizon")
    @classmethod
    def validate_horizon(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"horizon must be >= 1, got {v}.")
        return v

    @field_validator("skip")
    @classmethod
    def validate_skip(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"skip must be >= 0, got {v}.")
        return v


class RollingConfig(BaseModel):
    """Walk-forward (rolling) validation parameters.

    ``te_size`` wins over ``te_ratio`` when both are given.
    """

    model_config = ConfigDict(frozen=True)

    te_ratio: float = 0.2
    te_size: Optional[int] = None
    retrain_cycle: int = 2
    growing_window: bool = False

    @field_validator("te_ratio")
    @classmethod
    def validate_te_ratio(cls, v: float) -> float:
        if not 0.05 < v < 0.95:
            raise ValueError(f"te_ratio must be in (0.05, 0.95), got {v}.")
        return v

    @field_validator("te_size")
    @classmethod
    def validate_te_size(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError(f"te_size must be >= 1, got {v}.")
        return v

    @field_validator("retrain_cycle")
    @classmethod
    def validate_retrain_cycle(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"retrain_cycle must be >= 1, got {v}.")
        return v


class ModelConfig(BaseModel):
    """Hyper-parameters for the reference models.

    Attributes:
        name: Registry name (``null``, ``rw``, ``sma``, ``ar``, ``arx``, ``ar_direct``).
        p:    Number of endogenous lags.
        q:    Number of exogenous lags per exogenous column (window for ``sma``).
        spec: Trend terms: 0 none, 1 constant, 2 constant + linear time.
        fill: Hidden exogenous lags repeat the last available value (True) or are 0.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "ar"
    p: int = 2
    q: int = 1
    spec: int = 1
    fill: bool = True

    @field_validator("p", "q")
    @classmethod
    def validate_lags(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"lag counts must be >= 1, got {v}.")
        return v

    @field_validator("spec")
    @classmethod
    def validate_spec(cls, v: int) -> int:
        if v not in (0, 1, 2):
            raise ValueError(f"spec must be 0, 1 or 2, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/horizon_forecaster.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class OutputConfig(BaseModel):
    """Where reports are written."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "outputs"


class AppConfig(BaseModel):
    """Complete application configuration: the single source of truth."""

    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = EngineConfig()
    rolling: RollingConfig = RollingConfig()
    model: ModelConfig = ModelConfig()
    logging: LoggingConfig = LoggingConfig()
    output: OutputConfig = OutputConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply HORIZON_FORECASTER_* env vars to the raw config dict.

    Supported overrides:
      HORIZON_FORECASTER_LOG_LEVEL      → raw["logging"]["level"]
      HORIZON_FORECASTER_HORIZON        → raw["engine"]["horizon"]
      HORIZON_FORECASTER_RETRAIN_CYCLE  → raw["rolling"]["retrain_cycle"]
      HORIZON_FORECASTER_DEBUG          → raw["debug"]
    """
    if log_level := os.environ.get("HORIZON_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if horizon := os.environ.get("HORIZON_FORECASTER_HORIZON"):
        raw.setdefault("engine", {})["horizon"] = int(horizon)

    if cycle := os.environ.get("HORIZON_FORECASTER_RETRAIN_CYCLE"):
        raw.setdefault("rolling", {})["retrain_cycle"] = int(cycle)

    if debug := os.environ.get("HORIZON_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        engine=EngineConfig(**raw.get("engine", {})),
        rolling=RollingConfig(**raw.get("rolling", {})),
        model=ModelConfig(**raw.get("model", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        output=OutputConfig(**raw.get("output", {})),
        debug=raw.get("debug", False),
    )
