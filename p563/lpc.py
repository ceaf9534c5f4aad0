"""Linear prediction, reflection coefficients and vocal tract parameters."""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

import numpy as np


def hamming_window(frame: Sequence[float]) -> np.ndarray:
    """Apply a Hamming window spanning the whole frame."""
    data = np.asarray(frame, dtype=float)
    length = data.size
    with np.errstate(divide="ignore", invalid="ignore"):
        step = np.divide(2.0 * math.pi, length - 1)
        window = 0.54 - 0.46 * np.cos(np.arange(length) * step)
    return window * data


def acfn(frame: Sequence[float], order: int) -> np.ndarray:
    """Autocorrelation at lags 0..order; a zero lag-0 value is replaced by 1."""
    if order < 0:
        raise ValueError("order must be non-negative")
    data = np.asarray(frame, dtype=float)
    length = data.size
    acf = np.zeros(order + 1)
    for lag in range(order + 1):
        if lag < length:
            acf[lag] = float(np.dot(data[: length - lag], data[lag:]))
    if acf[0] == 0.0:
        acf[0] = 1.0
    return acf


def schur(acf: Sequence[float], order: int) -> np.ndarray:
    """Schur recursion: partial correlation coefficients from an autocorrelation."""
    values = np.asarray(acf, dtype=float)
    if order < 0:
        raise ValueError("order must be non-negative")
    if values.size < order + 1:
        raise ValueError(f"schur of order {order} needs {order + 1} autocorrelation values")
    pp = values[: order + 1].copy()
    kk = np.zeros(order + 2)
    for i in range(1, order):
        kk[order + 1 - i] = values[i]
    parcor = np.zeros(order)
    with np.errstate(divide="ignore", invalid="ignore"):
        for n in range(order):
            if pp[0] < abs(pp[1]):
                parcor[n:] = 0.0
                return parcor
            k = abs(pp[1]) / pp[0]
            parcor[n] = -k if pp[1] > 0.0 else k
            if n == order - 1:
                break
            pp[0] += pp[1] * parcor[n]
            for m in range(1, order - n):
                pp[m] = pp[m + 1] + kk[order + 1 - m] * parcor[n]
                kk[order + 1 - m] += pp[m + 1] * parcor[n]
    return parcor


def step_up(parcor: Sequence[float]) -> np.ndarray:
    """Step-up recursion: predictor polynomial (leading 1) from partial correlations."""
    p = np.asarray(parcor, dtype=float)
    order = p.size
    if order < 1:
        raise ValueError("step_up needs at least one coefficient")
    coef = np.zeros(order + 1)
    coef[0] = 1.0
    coef[1] = p[0]
    for m in range(2, order + 1):
        coef[1:m] = coef[1:m] + p[m - 1] * coef[m - 1:0:-1]
        coef[m] = p[m - 1]
    return coef


def lpc_coef(frame: Sequence[float], order: int) -> np.ndarray:
    """LPC polynomial of the frame (Hamming window, autocorrelation, Schur)."""
    if order < 1:
        raise ValueError("order must be at least 1")
    windowed = hamming_window(frame)
    return step_up(schur(acfn(windowed, order), order))


def poly_to_rc(a: Sequence[float]) -> np.ndarray:
    """Convert an LPC polynomial into reflection coefficients."""
    poly = np.asarray(a, dtype=float)
    if poly.size < 1:
        raise ValueError("polynomial must have at least one coefficient")
    if poly[0] == 0.0:
        raise ValueError("leading polynomial coefficient must be non-zero")
    poly = poly / poly[0]
    order = poly.size - 1
    k = np.zeros(order)
    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(order - 1, -1, -1):
            k[i] = -poly[i + 1]
            if i > 0:
                previous = poly.copy()
                r = 1.0 / (1.0 - k[i] * k[i])
                poly[1:i + 1] = (poly[1:i + 1] + k[i] * previous[i:0:-1]) * r
    return k


def rc_to_vtp(mu: Sequence[float]) -> np.ndarray:
    """Convert reflection coefficients into tube section areas."""
    coeffs = np.asarray(mu, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = (1.0 + coeffs) / (1.0 - coeffs)
    return np.cumprod(ratios[::-1])[::-1]


def vocal_tract_param(frame: Sequence[float], order: int) -> np.ndarray:
    """Vocal tract tube areas of one frame."""
    return rc_to_vtp(poly_to_rc(lpc_coef(frame, order)))


def calc_gen_coef(
    signal: Sequence[float],
    indices: Iterable[Tuple[int, int]],
    order: int,
) -> np.ndarray:
    """Vocal tract parameters for each ``(start, end)`` frame of the signal.

    Returns an array with one row of ``order`` values per frame.
    """
    data = np.asarray(signal, dtype=float)
    rows = [vocal_tract_param(data[start:end], order) for start, end in indices]
    if not rows:
        return np.zeros((0, order))
    return np.vstack(rows)