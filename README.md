# p563

Signal-processing building blocks for single-ended speech quality analysis
of 16-bit speech recordings, built on numpy.

## Installation

    pip install .

To run the tests:

    pip install .[test]
    pytest

## What is in the package

- `p563.fourier`: radix-2 FFT and inverse FFT (`fft`, `ifft`, the inverse
  scaled by 1/N). Both reject lengths that are not a power of two. Also
  real-signal transforms (`real_fft` returns the N/2 + 1 bins from DC to
  Nyquist, `real_ifft(spectrum, n)` rebuilds `n` real samples),
  FFT-based cross-correlation (`fft_xcorr`, which convolves the reversed
  first vector with the second) and power-of-two helpers (`nextpow2`,
  `ispow2`, `intlog2`).
- `p563.lpc`: linear prediction through Hamming window, autocorrelation and
  the Schur recursion (`hamming_window`, `acfn`, `schur`, `step_up`,
  `lpc_coef`), conversion to reflection coefficients (`poly_to_rc`), and
  vocal tract tube areas (`rc_to_vtp`, `vocal_tract_param`, and
  `calc_gen_coef`, which takes `(start, end)` frame pairs and returns one
  row per frame).
- `p563.iir`: second-order-section IIR filtering. `iir_sos` filters with one
  section `(b0, b1, b2, a1, a2)` and `iir_filter` with a cascade of them.
  Both return the output together with the final filter registers, so a
  long signal can be filtered in pieces.
- `p563.filters`: `LinearFilter(b, a)`, a direct-form II transposed filter
  whose `filter(data)` keeps its state between calls, and
  `rms_above_threshold`.
- `p563.distribution`: cumulative level distributions
  (`distribution_of_vector`) and their percentiles
  (`percentile_of_distribution`), and a Hann-windowed periodogram
  (`spectral_power_density`).
- `p563.noise`: `Channel` (the processing state of a signal sampled at a
  given rate in kHz), speech start and stop detection with DC offset and
  level scaling (`calc_scaling_params`, `remove_dc_offset`), and background
  noise floor estimation from a histogram of frame energies
  (`energy_histogram`, `find_noise_floor`, `find_noise_floors`).
- `p563.segsnr`: segmental signal-to-noise estimation of 8 kHz speech
  (`calc_seg_snr`, which returns a `SegSNRResult`), with the telephone-band
  FIR filter it uses (`bandpass_filter`).

## Example

    import numpy as np
    from p563.fourier import fft, ifft
    from p563.lpc import lpc_coef

    x = np.random.default_rng(0).standard_normal(256)
    spectrum = fft(x)
    restored = ifft(spectrum).real
    coefficients = lpc_coef(x, 10)   # leading coefficient is 1.0

Estimating the noise floor and segmental SNR of a speech signal held as a
numpy array of 16-bit sample values, sampled at 8 kHz:

    from p563.noise import Channel, calc_scaling_params, find_noise_floors
    from p563.segsnr import calc_seg_snr

    channel = Channel(8)
    calc_scaling_params(channel, speech)
    noise_db = find_noise_floors(channel, speech)

    result = calc_seg_snr(speech)
    print(result.est_seg_snr, result.rel_noise_floor,
          result.spec_level_dev, result.spec_level_range)

Analysis failures, such as a signal too short for segmental SNR estimation
or too flat to build an energy histogram, are raised as
`p563.noise.AnalysisError` and its subclass `HistogramError`. Invalid
arguments raise `ValueError`.

## What the package does not do

The package provides the analysis stages listed above as functions. It does
not compute an overall speech quality score, does not read or write audio
files, and has no command-line program: the caller loads the samples and
combines the results.