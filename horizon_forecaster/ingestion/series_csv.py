"""
CSV loader for univariate series (plus optional exogenous columns).

Format: comma delimited, with a header row.  One row per time step, in time
order.  The caller names:
  column        the endogenous series to forecast (required)
  exo_columns   extra numeric columns used by ``arx`` (optional)
  time_column   numeric time stamps for the matrix's time column (optional;
                defaults to 0 .. m-1)

Every value must parse as a float.  All rows are checked before anything is
returned; if any fail, a single ``ValueError`` lists the first 10 failures.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesData:
    """A loaded series.

    Attributes:
        name:      Column name of the endogenous series.
        y:         Observed values, shape (m,).
        times:     Time stamps, shape (m,), or None.
        x:         Exogenous columns, shape (m, k), or None.
        exo_names: Names of the exogenous columns, in ``x`` column order.
    """

    name: str
    y: np.ndarray
    times: Optional[np.ndarray] = None
    x: Optional[np.ndarray] = None
    exo_names: tuple[str, ...] = ()

    @property
    def n_obs(self) -> int:
        return int(self.y.size)


def parse_series_csv(
    path: Path,
    column: str,
    exo_columns: Sequence[str] = (),
    time_column: Optional[str] = None,
) -> SeriesData:
    """Parse a CSV file into a :class:`SeriesData`.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If a named column is missing, the file has no data rows,
            or any value fails to parse.
    """
    if not path.exists():
        raise FileNotFoundError(f"Series CSV file not found: {path}")

    wanted = [column, *exo_columns] + ([time_column] if time_column else [])

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = set(reader.fieldnames)
        missing = [c for c in wanted if c not in actual_cols]
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = list(reader)

    if not rows:
        raise ValueError(f"Series CSV has a header but no data rows: {path}")

    values = np.empty((len(rows), len(wanted)), dtype=float)
    errors: list[tuple[int, str]] = []

    for i, row in enumerate(rows):
        line_no = i + 2  # 1-based, skip header row
        for j, key in enumerate(wanted):
            try:
                values[i, j] = _parse_float(row, key)
            except ValueError as exc:
                errors.append((line_no, str(exc)))

    if errors:
        max_shown = 10
        detail = "\n".join(f"  Row {ln}: {msg}" for ln, msg in errors[:max_shown])
        suffix = f"\n  … and {len(errors) - max_shown} more" if len(errors) > max_shown else ""
        raise ValueError(
            f"{len(errors)} value(s) failed to parse in {path.name}:\n{detail}{suffix}"
        )

    n_exo = len(exo_columns)
    data = SeriesData(
        name=column,
        y=values[:, 0].copy(),
        times=values[:, -1].copy() if time_column else None,
        x=values[:, 1 : 1 + n_exo].copy() if n_exo else None,
        exo_names=tuple(exo_columns),
    )
    logger.info(
        "Parsed series '%s' from %s | m=%d exo=%d", column, path.name, data.n_obs, n_exo,
    )
    return data


# ── Private helpers ────────────────────────────────────────────────────────────

def _parse_float(row: dict[str, str], key: str) -> float:
    """Parse a required float field from a CSV row."""
    v = (row.get(key) or "").strip()
    if not v:
        raise ValueError(f"Required field '{key}' is empty.")
    try:
        return float(v)
    except ValueError:
        raise ValueError(f"Invalid number for '{key}': '{v}'.")
