"""
Train/test split arithmetic for rolling validation.

Split structure
---------------
Given a series of length m and a test ratio r::

    te_size = ceil(m · r)          test tail (rounded up)
    tr_size = m - te_size          initial training window

Iteration i = 0 .. te_size-1 uses the training end ``t = tr_size + i``:

    growing window   train on [0, t)
    sliding window   train on [i, t)     (length tr_size at every step)

and forecasts ``t .. t+H-1`` from origin ``t - 1``, the last trained point.
Retraining happens only when ``i % retrain_cycle == 0``; in between, the
last parameters are reused.

Leakage prevention
------------------
A forecast from origin t-1 only sees actuals up to t-1, and the training
window ends at t-1 or earlier.  This follows from the arithmetic below and
is not checked at runtime.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

# Guard against ceil(30.000000000000004) = 31 for m·r that is integral in exact arithmetic.
_CEIL_TOLERANCE = 1e-9


def split_sizes(m: int, te_ratio: float = 0.2, te_size: Optional[int] = None) -> tuple[int, int]:
    """``(tr_size, te_size)`` for a series of length ``m``.

    An explicit ``te_size`` wins over ``te_ratio``.

    Raises:
        ValueError: If the resulting split leaves no training data or no test data.
    """
    if te_size is None:
        if not 0.05 < te_ratio < 0.95:
            raise ValueError(f"te_ratio must be in (0.05, 0.95), got {te_ratio}")
        te_size = math.ceil(m * te_ratio - _CEIL_TOLERANCE)
    if not 1 <= te_size < m:
        raise ValueError(f"test size {te_size} must be in [1, {m}) for a series of {m} points.")
    return m - te_size, te_size


@dataclass(frozen=True)
class RollingWindow:
    """Window state for one rolling-validation iteration.

    Attributes:
        iteration:    Zero-based step index i.
        train_start:  First index of the training window.
        train_end:    One past the last index of the training window.
        test_pointer: Forecast origin, the last trained point (= tr_size + i - 1).
        retrained:    True if the model was retrained at this step.
    """

    iteration: int
    train_start: int
    train_end: int
    test_pointer: int
    retrained: bool

    @property
    def train_length(self) -> int:
        return self.train_end - self.train_start


def rolling_windows(
    m: int,
    te_size: int,
    retrain_cycle: int = 1,
    growing_window: bool = False,
) -> list[RollingWindow]:
    """Every window state of a rolling-validation run, in order."""
    if retrain_cycle < 1:
        raise ValueError(f"retrain_cycle must be >= 1, got {retrain_cycle}")
    tr_size = m - te_size
    windows: list[RollingWindow] = []
    for i in range(te_size):
        t = tr_size + i
        start = 0 if growing_window else i
        windows.append(RollingWindow(
            iteration=i,
            train_start=start,
            train_end=t,
            test_pointer=t - 1,
            retrained=i % retrain_cycle == 0,
        ))
    return windows
