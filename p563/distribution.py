"""Cumulative level distributions, their percentiles and a Hann-windowed periodogram."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .fourier import fft

# Hann window power correction, 1 / 0.375.
_HANN_CORRECTION = 2.66666666
_PI = 3.1415926


def distribution_of_vector(
    values: Sequence[float],
    min_value: float,
    max_value: float,
    bins: int,
) -> np.ndarray:
    """Cumulative distribution of ``values`` over ``bins`` equal steps.

    Values are clipped to ``[min_value, max_value]``. Entry ``j`` is the
    fraction of values whose bin index is at most ``j``. A value equal to
    ``max_value`` falls past the last bin and is never counted. The input is
    left unchanged.
    """
    if bins < 1:
        raise ValueError("a distribution needs at least one bin")
    if max_value <= min_value:
        raise ValueError("max_value must be greater than min_value")
    data = np.asarray(values, dtype=float)
    if data.ndim != 1:
        raise ValueError("expected a one-dimensional sequence")
    if data.size == 0:
        raise ValueError("cannot build a distribution of no values")

    step = (max_value - min_value) / bins
    clipped = np.clip(data, min_value, max_value)
    indices = ((clipped - min_value) / step).astype(int)
    counts = np.bincount(indices, minlength=bins + 1)[:bins]
    return np.cumsum(counts) / data.size


def percentile_of_distribution(
    percentile: float,
    min_value: float,
    max_value: float,
    distribution: Sequence[float],
) -> float:
    """Level at which a cumulative distribution first reaches ``1 - percentile/100``.

    ``percentile`` is the share (in percent) of values lying above the
    returned level. When the target is never reached the upper end of the
    range is returned.
    """
    dist = np.asarray(distribution, dtype=float)
    bins = dist.size
    if bins < 1:
        raise ValueError("distribution is empty")
    target = 1.0 - percentile / 100.0
    step = (max_value - min_value) / bins
    reached = np.nonzero(dist >= target)[0]
    index = int(reached[0]) if reached.size else bins
    return index * step + min_value


def spectral_power_density(frame: Sequence[float]) -> np.ndarray:
    """Hann-windowed periodogram of a frame whose length is a power of two.

    Returns ``len(frame) // 2`` power values; the DC entry is set to zero.
    """
    data = np.asarray(frame, dtype=float)
    if data.ndim != 1:
        raise ValueError("expected a one-dimensional frame")
    n = data.size
    if n == 0:
        raise ValueError("frame is empty")
    half = n // 2

    windowed = data.astype(complex)
    if half > 0:
        i = np.arange(1, half + 1)
        hann = 0.5 * (1.0 + np.cos(_PI * (2 * i - 1) / (n - 1)))
        windowed[half + i - 1] *= hann
        windowed[half - i] *= hann

    spectrum = fft(windowed)
    density = np.zeros(half)
    if half > 1:
        bins = spectrum[1:half]
        power = 2.0 * (bins.real ** 2 + bins.imag ** 2)
        density[1:] = power * _HANN_CORRECTION / n / n
    return density