"""Direct-form-II-transposed linear filtering and thresholded RMS."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


class LinearFilter:
    """One-dimensional digital filter ``y = filter(b, a, x)``.

    Implements ``a[0] y[n] = sum_k b[k] x[n-k] - sum_{k>=1} a[k] y[n-k]``
    in direct form II transposed. The internal state carries over between
    calls to :meth:`filter`, so a long signal may be processed in pieces.
    """

    def __init__(self, b: Sequence[float], a: Sequence[float]) -> None:
        num = np.atleast_1d(np.asarray(b, dtype=float))
        den = np.atleast_1d(np.asarray(a, dtype=float))
        if num.ndim != 1 or den.ndim != 1:
            raise ValueError("filter coefficients must be one-dimensional")
        if num.size == 0 or den.size == 0:
            raise ValueError("filter needs at least one numerator and one denominator coefficient")
        if den[0] == 0.0:
            raise ValueError("leading denominator coefficient must be non-zero")
        self.b = num / den[0]
        self.a = den / den[0]
        self.state = np.zeros(max(num.size, den.size) - 1)

    def filter(self, data: Sequence[float]) -> np.ndarray:
        """Filter ``data`` and return the output, updating the filter state."""
        x = np.asarray(data, dtype=float)
        if x.ndim != 1:
            raise ValueError("expected a one-dimensional signal")
        if self.state.size == 0:
            return self.b[0] * x

        b_tail = self.b[1:]
        a_tail = self.a[1:]
        state = self.state
        out = np.empty_like(x)
        for n, sample in enumerate(x):
            y = self.b[0] * sample + state[0]
            out[n] = y
            state[:-1] = state[1:]
            state[-1] = 0.0
            state[: b_tail.size] += b_tail * sample
            state[: a_tail.size] -= a_tail * y
        return out


def rms_above_threshold(data: Sequence[float], threshold: float) -> float:
    """RMS of the samples whose magnitude exceeds ``threshold``.

    Returns 0.0 when no sample exceeds the threshold or the data is empty.
    """
    x = np.asarray(data, dtype=float)
    selected = x[np.abs(x) > threshold]
    if selected.size == 0:
        return 0.0
    return math.sqrt(float(np.sum(selected * selected)) / selected.size)