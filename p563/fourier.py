"""Radix-2 Fourier transforms, cross-correlation and power-of-two helpers."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def nextpow2(x: int) -> int:
    """Return the smallest power of two that is greater than or equal to ``x``."""
    if x < 0:
        raise ValueError("nextpow2 needs a non-negative integer")
    c = 1
    while c < x:
        c <<= 1
    return c


def ispow2(x: int) -> bool:
    """Return True when ``x`` is a power of two."""
    return nextpow2(x) == x


def intlog2(x: float) -> int:
    """Return log2(x) rounded to the nearest integer."""
    if x <= 0:
        raise ValueError("intlog2 needs a positive value")
    return math.floor(math.log(x) / math.log(2.0) + 0.5)


def _as_vector(x: Sequence, dtype) -> np.ndarray:
    arr = np.asarray(x, dtype=dtype)
    if arr.ndim != 1:
        raise ValueError("expected a one-dimensional sequence")
    return arr


def _check_length(n: int) -> None:
    if n > 1 and not ispow2(n):
        raise ValueError(f"transform length {n} is not a power of two")


def fft(x: Sequence) -> np.ndarray:
    """Forward FFT of a complex sequence whose length is a power of two.

    Bins are returned in order of increasing frequency.
    """
    arr = _as_vector(x, complex)
    _check_length(arr.size)
    if arr.size <= 1:
        return arr.copy()
    return np.fft.fft(arr)


def ifft(x: Sequence) -> np.ndarray:
    """Inverse FFT (scaled by 1/N) of a complex sequence whose length is a power of two."""
    arr = _as_vector(x, complex)
    _check_length(arr.size)
    if arr.size <= 1:
        return arr.copy()
    return np.fft.ifft(arr)


def fft_xcorr(x1: Sequence[float], x2: Sequence[float]) -> np.ndarray:
    """Cross-correlate two real vectors through the FFT.

    Returns the convolution of reversed ``x1`` with ``x2``, of length
    ``len(x1) + len(x2) - 1``. Identical inputs peak at index ``len(x1) - 1``.
    """
    a = _as_vector(x1, float)
    b = _as_vector(x2, float)
    if a.size == 0 or b.size == 0:
        raise ValueError("fft_xcorr needs two non-empty vectors")
    size = 2 * nextpow2(max(a.size, b.size))
    padded1 = np.zeros(size, dtype=complex)
    padded1[: a.size] = a[::-1]
    padded2 = np.zeros(size, dtype=complex)
    padded2[: b.size] = b
    product = fft(padded1) * fft(padded2)
    return ifft(product).real[: a.size + b.size - 1]


def real_fft(x: Sequence[float]) -> np.ndarray:
    """FFT of a real signal: the N/2 + 1 complex bins from DC to Nyquist."""
    arr = _as_vector(x, float)
    if arr.size == 0:
        raise ValueError("real_fft needs at least one sample")
    _check_length(arr.size)
    return fft(arr)[: arr.size // 2 + 1]


def real_ifft(spectrum: Sequence[complex], n: int) -> np.ndarray:
    """Inverse of :func:`real_fft`: rebuild ``n`` real samples from N/2 + 1 bins."""
    if n < 1:
        raise ValueError("real_ifft needs a positive length")
    _check_length(n)
    bins = _as_vector(spectrum, complex)
    half = n // 2
    if bins.size < half + 1:
        raise ValueError(f"real_ifft of length {n} needs {half + 1} bins")
    full = np.empty(n, dtype=complex)
    full[: half + 1] = bins[: half + 1]
    if half > 1:
        full[half + 1:] = np.conj(bins[half - 1:0:-1])
    return ifft(full).real