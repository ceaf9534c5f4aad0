"""Signal scaling, DC offset and background noise floor estimation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

from .filters import rms_above_threshold

BUFFSIZE = 1024
FRAME_OVERLAP = 0.5
MAX_16BIT_VALUE = 32767.0
MIN_SPEECH_ACTIV_RMS = 100.0
MEAN_RMS_LEVEL = -26.0
ENERGY_WINDOWS = 100
MAX_BOUND_ABOVE_PEAK = 10.0
MAX_BOUND_TO_PEAK = 0.5


class AnalysisError(Exception):
    """Raised when a signal cannot be analysed."""


class HistogramError(AnalysisError):
    """Raised when an energy histogram cannot be built or evaluated."""


@dataclass
class FileInfo:
    """Analysis window and level properties of a signal; positions are in samples."""

    start: int = 0
    stop: int = 0
    file_size: int = 0
    frame_len: int = 0
    frame_shift: int = 0
    sumsq: float = 0.0
    average_rms: float = 0.0
    dc_offset: float = 0.0
    bit_resolution: int = 16
    use_whole_file: bool = True


@dataclass(init=False)
class Channel:
    """Processing state of one signal sampled at ``frequency`` kHz."""

    frequency: int
    fft_size: int
    sample_length: float
    file: FileInfo = field(default_factory=FileInfo)
    file_size: int = 0
    frame_cnt: int = 0
    max_nr_frames: int = 0
    ref_level_correction: float = 0.0
    noise_level_log: float = 0.0
    bit_resolution: int = 16

    def __init__(self, frequency: int) -> None:
        if frequency <= 0:
            raise ValueError("sampling frequency must be positive")
        self.frequency = frequency
        self.fft_size = BUFFSIZE // 2
        self.sample_length = 1.0 / (frequency * 1000.0)
        self.file = FileInfo(
            frame_len=self.fft_size,
            frame_shift=int(self.fft_size * FRAME_OVERLAP),
        )
        self.file_size = 0
        self.frame_cnt = 0
        self.max_nr_frames = 0
        self.ref_level_correction = 0.0
        self.noise_level_log = 0.0
        self.bit_resolution = 16


def remove_dc_offset(channel: Channel, data: Sequence[float]) -> np.ndarray:
    """Subtract the DC offset measured over the whole signal."""
    offset = channel.file.dc_offset * MAX_16BIT_VALUE / 100.0
    return np.asarray(data, dtype=float) - offset


def _activity(block: np.ndarray) -> float:
    rms = math.sqrt(float(np.mean(block * block)))
    return rms - abs(float(np.mean(block)))


def calc_scaling_params(channel: Channel, samples: Sequence[float]) -> FileInfo:
    """Find speech start and stop, DC offset, RMS level and level correction."""
    data = np.asarray(samples, dtype=float)
    info = channel.file
    fft = channel.fft_size
    if fft <= 0:
        raise AnalysisError("FFT size must be positive")
    quarter = fft // 4
    n = data.size

    info.file_size = n
    info.sumsq = 0.0
    info.start = 0
    info.stop = n
    info.frame_len = fft
    info.frame_shift = fft // 2

    active = 0
    pos = 0
    while pos < n - quarter:
        active = active + 1 if _activity(data[pos:pos + quarter]) > MIN_SPEECH_ACTIV_RMS else 0
        if active >= 4:
            info.start = pos - active * quarter
            break
        pos += quarter
    info.start = max(info.start, 0)

    active = 0
    pos = n - quarter
    while pos > quarter:
        active = active + 1 if _activity(data[pos:pos + quarter]) > MIN_SPEECH_ACTIV_RMS else 0
        if active >= 4:
            info.stop = pos + active * quarter
            break
        pos -= quarter
    info.stop = min(max(info.stop, 0), n)

    offset_tmp = 0.0
    dc_sum = 0.0
    blocks = 0
    active_blocks = 0
    pos = info.start
    while pos < info.stop - fft:
        block = data[pos:pos + fft]
        offset_tmp = (0.9 * offset_tmp + float(np.mean(block))) / 1.9
        dc_sum += offset_tmp
        rms = rms_above_threshold(block, MIN_SPEECH_ACTIV_RMS)
        if rms > MIN_SPEECH_ACTIV_RMS:
            info.sumsq += rms
            active_blocks += 1
        blocks += 1
        pos += fft

    if blocks:
        info.dc_offset = dc_sum / blocks / MAX_16BIT_VALUE * 100.0
    if blocks and info.sumsq > 0 and active_blocks > 0:
        mean_rms = info.sumsq / active_blocks
        info.average_rms = 20.0 * math.log10(mean_rms / 2.0 ** (info.bit_resolution - 1)) + 3.0
        channel.ref_level_correction = 10.0 ** ((MEAN_RMS_LEVEL - info.average_rms) / 20.0)
    else:
        info.average_rms = 0.0

    channel.file_size = info.stop - info.start
    if info.use_whole_file:
        info.start = 0
        info.stop = n
    channel.max_nr_frames = (2 * (info.stop - info.start)) // fft + 1
    return info


def energy_histogram(
    channel: Channel,
    samples: Sequence[float],
    frame_size: int,
    resolution: int,
    hist_size: int,
) -> Tuple[np.ndarray, np.ndarray, float, int]:
    """Histogram of short-frame energies in dB relative to full scale.

    Returns ``(counts, bin_values, mean_energy, mean_position)``.
    """
    if frame_size <= 0:
        raise AnalysisError("frame size must be positive")
    if hist_size < 2:
        raise HistogramError("not enough bins in the energy histogram")
    data = np.asarray(samples, dtype=float)
    info = channel.file
    fft = channel.fft_size

    en_at_0db = 2.0 ** (2 * (resolution - 1)) * frame_size
    start = info.start
    stop = min(info.stop + (info.stop - info.start) // 3, info.file_size)
    max_frames = (2 * (stop - start)) // fft - 1
    frame_limit = stop // frame_size
    source = data[start:]

    energies = []
    i = 0
    while i < max_frames - frame_size:
        if len(energies) >= frame_limit:
            break
        offset = i * fft // 2
        block = np.zeros(fft)
        piece = source[offset:offset + fft]
        block[: piece.size] = piece
        i += 1
        block = remove_dc_offset(channel, block)
        for index in range(0, fft, frame_size):
            part = block[index:index + frame_size]
            energy = max(float(np.sum(part * part)), float(frame_size))
            energies.append(10.0 * math.log10(energy / en_at_0db) if en_at_0db > 0 else 0.0)

    channel.frame_cnt = len(energies)
    if not energies:
        raise HistogramError("no frames to build the energy histogram from")
    values = np.asarray(energies)
    max_en = float(values.max())
    min_en = float(values.min())
    if max_en == min_en:
        raise HistogramError("could not estimate the histogram boundaries")

    span = max_en - min_en
    entries = np.clip(((hist_size - 1) * (values - min_en) / span).astype(int), 0, hist_size - 1)
    counts = np.bincount(entries, minlength=hist_size)
    bin_values = min_en + np.arange(hist_size) * span / (hist_size - 1)
    mean = float(values.sum()) / values.size
    position = int(min(max(int((hist_size - 1) * (mean - min_en) / span), 0), hist_size - 1))
    return counts, bin_values, mean, position


def find_noise_floor(
    histogram: Sequence[int],
    hist_values: Sequence[float],
    max_above_peak: float,
) -> Tuple[int, int, int]:
    """Locate the noise peak, the bound above it and the minimum up to the mean.

    Returns ``(peak, bound, minimum)`` bin positions.
    """
    hist = np.asarray(histogram, dtype=np.int64)
    values = np.asarray(hist_values, dtype=float)
    size = hist.size
    if size == 0 or values.size != size:
        raise HistogramError("histogram and bin values must have the same non-zero length")
    frames = int(hist.sum())
    if frames == 0:
        raise HistogramError("could not estimate the noise floor")
    mean_energy = float(np.dot(hist, values)) / frames
    if values[-1] == values[0]:
        raise HistogramError("could not estimate the noise floor")

    scaled = (size - 1) * (mean_energy - values[0]) / (values[-1] - values[0])
    mean_pos = min(max(int(scaled), 0), size - 1)

    peak_value = 0
    peak = 0
    index = size // 3 + 1
    required = int(0.01 * frames)
    while peak_value < required:
        window = hist[: min(index, size)]
        peak = int(np.argmax(window))
        peak_value = int(window[peak])
        index += 1
        if index >= mean_pos:
            break

    if mean_pos < peak:
        mean_pos = max(0, peak - 1)

    span = hist[peak:mean_pos + 1]
    minimum = peak + (int(np.argmin(span)) if span.size else 0)

    bound = peak + 1
    peak_count = float(hist[peak])
    while bound < size:
        if peak_count > 0 and hist[bound] / peak_count < MAX_BOUND_TO_PEAK:
            break
        if values[bound] > values[peak] + max_above_peak:
            break
        bound += 1
    bound = min(bound, size - 1)
    return peak, bound, minimum


def find_noise_floors(channel: Channel, samples: Sequence[float]) -> float:
    """Estimate the background noise level in dB and store it on the channel."""
    counts, values, mean, _ = energy_histogram(
        channel, samples, channel.fft_size // 16, channel.bit_resolution, ENERGY_WINDOWS
    )
    peak, bound, _ = find_noise_floor(counts, values, MAX_BOUND_ABOVE_PEAK)
    if values[bound] > mean:
        level = (mean + values[peak]) / 2.0
    else:
        level = float(values[bound])
    if values[bound] < values[peak]:
        level = float(values[peak])
    channel.noise_level_log = float(level)
    return float(level)