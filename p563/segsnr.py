"""Segmental signal-to-noise estimation from the spectral level range of active speech."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from .distribution import (
    distribution_of_vector,
    percentile_of_distribution,
    spectral_power_density,
)
from .noise import AnalysisError

FRAME_LEN = 512
FRAME_OVERLAP = 0.75
BLOCK_LEN = 10
FULL_SCALE = 32768.0

_BANDPASS_ORDER = 64
_BANDPASS_COEFFS = np.array([
    0.0000531, 0.0003059, 0.00028, 0.0005082, 0.000634, 0.0008517, 0.0010684,
    0.0014012, 0.0013436, 0.002116, 0.0011138, 0.0026455, 0.0001507, 0.0021984,
    -0.001554, -0.0002023, -0.0040758, -0.00498, -0.0081556, -0.0111685, -0.0155649,
    -0.0162199, -0.0285923, -0.0169833, -0.0485369, -0.0115695, -0.0739747, -0.0009768,
    -0.100091, 0.0107859, -0.1199559, 0.0184921, 0.8725996, 0.0184921, -0.1199559,
    0.0107859, -0.100091, -0.0009768, -0.0739747, -0.0115695, -0.0485369, -0.0169833,
    -0.0285923, -0.0162199, -0.0155649, -0.0111685, -0.0081556, -0.00498, -0.0040758,
    -0.0002023, -0.001554, 0.0021984, 0.0001507, 0.0026455, 0.0011138, 0.002116,
    0.0013436, 0.0014012, 0.0010684, 0.0008517, 0.000634, 0.0005082, 0.00028,
    0.0003059, 0.0000531,
])


@dataclass(frozen=True)
class SegSNRResult:
    """Estimated segmental SNR and the spectral measures it is derived from."""

    est_seg_snr: float
    rel_noise_floor: float
    spec_level_dev: float
    spec_level_range: float


def bandpass_filter(speech: Sequence[float]) -> np.ndarray:
    """Apply the weak telephone-band FIR filter; the output has the input's length."""
    x = np.asarray(speech, dtype=float)
    if x.ndim != 1:
        raise ValueError("expected a one-dimensional signal")
    if x.size == 0:
        return x.copy()
    return np.convolve(x, _BANDPASS_COEFFS[:_BANDPASS_ORDER])[: x.size]


def _accumulate(buffer: np.ndarray, values: np.ndarray, lo: float, hi: float, bins: int) -> None:
    # The distribution buffer is shared between calls and never cleared:
    # earlier contents are scaled down and the new distribution added on top.
    buffer[:bins] = buffer[:bins] / values.size + distribution_of_vector(values, lo, hi, bins)


def calc_seg_snr(speech: Sequence[float]) -> SegSNRResult:
    """Estimate the segmental SNR of a speech signal sampled at 8 kHz."""
    samples = np.asarray(speech, dtype=float)
    if samples.ndim != 1:
        raise ValueError("expected a one-dimensional signal")
    step = FRAME_LEN - int(FRAME_OVERLAP * FRAME_LEN)
    n_frames = int(float(samples.size - FRAME_LEN) / step)
    if n_frames < 1:
        raise AnalysisError("signal too short for segmental SNR estimation")

    filtered = bandpass_filter(samples)
    half = FRAME_LEN // 2

    index = np.arange(n_frames)[:, None] * step + np.arange(FRAME_LEN)
    frames = filtered[index]
    sq_sum = np.sum(frames * frames, axis=1)
    lin_sum = np.sum(frames, axis=1)
    env = (sq_sum - lin_sum * lin_sum / FRAME_LEN) / FRAME_LEN / FULL_SCALE / FULL_SCALE
    env = np.clip(10.0 * np.log10(env + 1e-16), -100.0, 0.0)

    distribution = np.zeros(101)
    _accumulate(distribution, env, -100.0, 0.0, 100)
    p20 = percentile_of_distribution(20.0, -100.0, 0.0, distribution[:100])
    p80 = percentile_of_distribution(80.0, -100.0, 0.0, distribution[:100])
    stat_snr = p20 - p80
    threshold = p20 - 4.0

    active = env > threshold
    active_count = int(np.count_nonzero(active))
    if active_count == 0:
        raise AnalysisError("no active speech frames found")
    speech_level = 10.0 * math.log10(
        float(np.sum(10.0 ** (env[active] / 10.0))) / active_count + 1e-16
    )

    cache: Dict[int, np.ndarray] = {}

    def density(frame: int) -> np.ndarray:
        if frame not in cache:
            start = frame * step
            power = spectral_power_density(filtered[start:start + FRAME_LEN])
            cache[frame] = power / FULL_SCALE / FULL_SCALE
        return cache[frame]

    total = np.zeros(half)
    for frame in np.nonzero(active)[0]:
        total += density(int(frame))
    total /= n_frames

    dev_sum = 0.0
    range_sum = 0.0
    band = slice(FRAME_LEN // 8 + 1, FRAME_LEN // 8 + FRAME_LEN // 4)
    quarter = float(FRAME_LEN // 4)
    for frame in np.nonzero(active)[0]:
        spec = density(int(frame)) / (total + 1e-6)
        spec = 10.0 * np.log10(spec + 1e-16)
        part = spec[band]
        total_part = float(np.sum(part))
        dev = (float(np.sum(part * part)) - total_part * total_part / quarter) / quarter
        if dev > 0:
            dev_sum += math.sqrt(dev)
        _accumulate(distribution, spec, -80.0, 0.0, 40)
        p15 = percentile_of_distribution(15.0, -80.0, 0.0, distribution[:40])
        p80_spec = percentile_of_distribution(80.0, -80.0, 0.0, distribution[:40])
        range_sum += p15 - p80_spec
    dev_sum /= active_count
    range_sum /= active_count

    noise_sum = 0.0
    for block in range((n_frames - 1) // BLOCK_LEN):
        first = block * BLOCK_LEN
        minimum = np.full(half, FULL_SCALE * FULL_SCALE)
        for frame in range(first, first + BLOCK_LEN):
            minimum = np.minimum(minimum, np.maximum(density(frame), 1e-8))
        block_power = float(np.sum(minimum[FRAME_LEN // 8:FRAME_LEN // 4]))
        noise_sum += block_power * int(np.count_nonzero(active[first:first + BLOCK_LEN]))

    noise_level = 10.0 * math.log10(noise_sum / active_count + 1e-16)

    est = (range_sum - 10.5) * 2.7
    check = (speech_level - noise_level - 22.0) * 3.0 - est
    if est > 25 or stat_snr < 38 or dev_sum > 8.1 or abs(check) > 20:
        est = 40.0

    return SegSNRResult(
        est_seg_snr=float(est),
        rel_noise_floor=float(speech_level - noise_level),
        spec_level_dev=float(dev_sum),
        spec_level_range=float(range_sum),
    )