"""
The FORECAST MATRIX: time x horizons.

Layout
------
A matrix for a series of length m and maximum horizon H has shape
``(m + H, H + 2)``::

    col 0        actual y_t (rows t >= m are unobserved)
    cols 1..H    h-steps ahead forecasts
    col H+1      logical time index of the row

Example values for a target-indexed matrix (H = 2)::

    y_t   h=1   h=2   t
    ---------------------
    1.0    -     -    0
    3.0   1.1    -    1
    4.0   3.2   1.3   2
     -    4.1   3.4   3     row m: forecasts only, actual unknowable
     -     -    4.2   4

Row conventions
---------------
TARGET  row t, column h holds the forecast whose *target* is t, issued from
        origin t - h.  The recursive engine fills this layout diagonal by
        diagonal.
ORIGIN  row t, column h holds the forecast *issued from* origin t, targeting
        t + h.  The direct engine fills this layout row by row.

One matrix has exactly one convention.  ``slant()`` converts between them.

Unknowable cells
----------------
Cells are backed by a float array plus a boolean ``known`` mask.  An unknown
cell (unfilled forecast, unobserved actual, or a row outside the matrix)
reads back as ``None``.  No sign-bit sentinel values are used.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, Optional, Sequence

import numpy as np

from horizon_forecaster.exceptions import DiagonalPrecedenceError, InvalidHorizonError



class RowConvention(str, Enum):
    """How a row index relates to the forecasts stored in it."""

    TARGET = "target"
    ORIGIN = "origin"


class ForecastMatrix:
    """Actuals plus every h-step forecast, for every time point.

    Column 0 is written once, at construction, and never again: there is no
    public method that writes it.

    Attributes:
        n_obs:      Number of observed values m.
        horizon:    Maximum forecasting horizon H.
        convention: Row convention of the forecast columns.
    """

    def __init__(
        self,
        actuals: Sequence[float] | np.ndarray,
        horizon: int,
        convention: RowConvention = RowConvention.TARGET,
        times: Optional[Sequence[float] | np.ndarray] = None,
    ) -> None:
        y = np.asarray(actuals, dtype=float).reshape(-1)
        if y.size == 0:
            raise ValueError("ForecastMatrix needs at least one observed value.")
        if horizon < 1:
            raise InvalidHorizonError(horizon)

        self.n_obs = int(y.size)
        self.horizon = int(horizon)
        self.convention = RowConvention(convention)

        rows = self.n_obs + self.horizon
        cols = self.horizon + 2
        self._values = np.full((rows, cols), np.nan, dtype=float)
        self._known = np.zeros((rows, cols), dtype=bool)

        self._values[: self.n_obs, 0] = y
        self._known[: self.n_obs, 0] = True

        self._values[:, cols - 1] = _extend_times(times, self.n_obs, rows)
        self._known[:, cols - 1] = True

    # ── Shape ────────────────────────────────────────────────────────────────

    @property
    def shape(self) -> tuple[int, int]:
        return self._values.shape  # type: ignore[return-value]

    @property
    def n_rows(self) -> int:
        return self._values.shape[0]

    @property
    def time_col(self) -> int:
        """Index of the trailing time column (H + 1)."""
        return self.horizon + 1

    def check_horizon(self, h: int) -> int:
        """Return ``h`` if it is a forecast horizon (1..H), else raise."""
        if not 1 <= h <= self.horizon:
            raise InvalidHorizonError(h, self.horizon)
        return h

    # ── Reads ────────────────────────────────────────────────────────────────

    def actual(self, t: int) -> float | None:
        """Observed value at time ``t``.

        Times before 0 replicate the first observation; times at or after
        ``n_obs`` are unknowable and return ``None``.
        """
        if t >= self.n_obs:
            return None
        return float(self._values[max(t, 0), 0])

    @property
    def actuals(self) -> np.ndarray:
        """Copy of the observed series (column 0, rows 0..m-1)."""
        return self._values[: self.n_obs, 0].copy()

    def get(self, t: int, h: int) -> float | None:
        """Value at row ``t``, column ``h`` (0 = actual), or ``None`` if unknown."""
        if not 0 <= h <= self.horizon:
            raise InvalidHorizonError(h, self.horizon)
        if not 0 <= t < self.n_rows or not self._known[t, h]:
            return None
        return float(self._values[t, h])

    def is_known(self, t: int, h: int) -> bool:
        if not 0 <= h <= self.horizon:
            raise InvalidHorizonError(h, self.horizon)
        return 0 <= t < self.n_rows and bool(self._known[t, h])

    def time(self, t: int) -> float:
        return float(self._values[t, self.time_col])

    def column(self, h: int) -> np.ndarray:
        """Copy of column ``h`` with unknown cells as NaN."""
        if not 0 <= h <= self.horizon:
            raise InvalidHorizonError(h, self.horizon)
        return np.where(self._known[:, h], self._values[:, h], np.nan)

    def to_array(self) -> np.ndarray:
        """Full matrix as floats, unknown cells as NaN."""
        return np.where(self._known, self._values, np.nan)

    def forecast_cell(self, origin: int, k: int) -> tuple[int, int]:
        """Row/column of the k-step forecast issued from ``origin``."""
        if self.convention is RowConvention.TARGET:
            return origin + k, k
        return origin, k

    def target_of(self, t: int, h: int) -> int:
        """Target time of the forecast stored at row ``t``, column ``h``."""
        if self.convention is RowConvention.TARGET:
            return t
        return t + h

    # ── Writes ───────────────────────────────────────────────────────────────

    def put(self, t: int, h: int, value: float, view: "HistoryView | None" = None) -> None:
        """Store a forecast at row ``t``, horizon ``h`` (1..H).

        When the forecast was forged through a ``HistoryView``, pass it so the
        write can confirm no cell at horizon >= ``h`` was read to produce it.
        """
        self.check_horizon(h)
        if not 0 <= t < self.n_rows:
            raise IndexError(f"row {t} outside forecast matrix with {self.n_rows} rows.")
        if view is not None and view.max_horizon_read >= h:
            raise DiagonalPrecedenceError(
                f"forecast for row {t}, h = {h} read a forecast at horizon "
                f"{view.max_horizon_read}."
            )
        self._values[t, h] = value
        self._known[t, h] = True

    def put_forecast(self, origin: int, k: int, value: float, view: "HistoryView | None" = None) -> None:
        """Store the k-step forecast issued from ``origin`` in this matrix's layout."""
        row, col = self.forecast_cell(origin, k)
        self.put(row, col, value, view=view)

    # ── Alignment ────────────────────────────────────────────────────────────

    def aligned(self, h: int, start: int = 0, stop: Optional[int] = None) -> tuple[np.ndarray, np.ndarray]:
        """Return aligned ``(actual, forecast)`` vectors for horizon ``h``.

        Only pairs whose target time lies in ``[start, stop)`` (default: the
        observed series) and whose forecast and actual are both known are
        kept, so unknowable values never leak into diagnostics.
        """
        self.check_horizon(h)
        stop = self.n_obs if stop is None else min(stop, self.n_obs)
        actual: list[float] = []
        forecast: list[float] = []
        for t in range(self.n_rows):
            target = self.target_of(t, h)
            if not start <= target < stop or not self._known[t, h]:
                continue
            actual.append(self._values[target, 0])
            forecast.append(self._values[t, h])
        return np.asarray(actual, dtype=float), np.asarray(forecast, dtype=float)

    def slant(self) -> "ForecastMatrix":
        """Return a copy re-indexed to the other row convention."""
        other = (
            RowConvention.TARGET
            if self.convention is RowConvention.ORIGIN
            else RowConvention.ORIGIN
        )
        out = ForecastMatrix(
            self.actuals,
            self.horizon,
            convention=other,
            times=self._values[: self.n_obs, self.time_col],
        )
        for t, h in zip(*np.nonzero(self._known[:, 1 : self.horizon + 1])):
            h = int(h) + 1
            row = t + h if other is RowConvention.TARGET else t - h
            if 0 <= row < out.n_rows:
                out.put(int(row), h, float(self._values[t, h]))
        return out

    def copy(self) -> "ForecastMatrix":
        out = ForecastMatrix.__new__(ForecastMatrix)
        out.n_obs = self.n_obs
        out.horizon = self.horizon
        out.convention = self.convention
        out._values = self._values.copy()
        out._known = self._known.copy()
        return out

    def rows(self) -> Iterator[dict[str, Any]]:
        """Yield one flat dict per row (``None`` for unknown cells)."""
        for t in range(self.n_rows):
            row: dict[str, Any] = {"t": self.time(t), "actual": self.get(t, 0)}
            for h in range(1, self.horizon + 1):
                row[f"h{h}"] = self.get(t, h)
            yield row

    def __repr__(self) -> str:
        filled = int(self._known[:, 1 : self.horizon + 1].sum())
        return (
            f"ForecastMatrix(n_obs={self.n_obs}, horizon={self.horizon}, "
            f"convention={self.convention.value}, filled={filled})"
        )


class HistoryView:
    """The series as seen when forging ONE forecast cell.

    Indexing with a time ``s`` returns:
      - the actual value when ``s <= origin`` (times before 0 replicate the
        first observation),
      - the forecast of ``s`` issued from ``origin`` when ``s > origin``; this
        is a cell at horizon ``s - origin``, which must be smaller than the
        horizon being forecast.

    Every forecast cell read is recorded in ``reads`` as ``(row, horizon)``.
    """

    def __init__(self, matrix: ForecastMatrix, origin: int, horizon: int) -> None:
        if origin >= matrix.n_obs:
            raise IndexError(
                f"origin {origin} lies beyond the observed series (n_obs={matrix.n_obs})."
            )
        self.matrix = matrix
        self.origin = origin
        self.horizon = matrix.check_horizon(horizon)
        self.reads: list[tuple[int, int]] = []

    @property
    def max_horizon_read(self) -> int:
        return max((k for _, k in self.reads), default=0)

    def __getitem__(self, s: int) -> float:
        if s <= self.origin:
            # origin < n_obs, so every time up to it is observed
            return self.matrix.actual(s)

        k = s - self.origin
        if k >= self.horizon:
            raise DiagonalPrecedenceError(
                f"h = {self.horizon} forecast from origin {self.origin} needs time {s} "
                f"(horizon {k}); only horizons < {self.horizon} may be read."
            )
        row, col = self.matrix.forecast_cell(self.origin, k)
        value = self.matrix.get(row, col)
        if value is None:
            raise DiagonalPrecedenceError(
                f"h = {k} forecast from origin {self.origin} is not filled yet; "
                "horizons must be computed in ascending order."
            )
        self.reads.append((row, col))
        return value


def _extend_times(times: Optional[Sequence[float] | np.ndarray], n_obs: int, rows: int) -> np.ndarray:
    """Time column: given times for the observed rows, continued at the last step."""
    if times is None:
        return np.arange(rows, dtype=float)
    tt = np.asarray(times, dtype=float).reshape(-1)
    if tt.size != n_obs:
        raise ValueError(f"times has {tt.size} entries, expected {n_obs}.")
    step = tt[-1] - tt[-2] if tt.size > 1 else 1.0
    extra = tt[-1] + step * np.arange(1, rows - n_obs + 1)
    return np.concatenate([tt, extra])
