import numpy as np
import pytest

from p563.iir import iir_filter, iir_sos


def _impulse(n):
    x = np.zeros(n)
    x[0] = 1.0
    return x


def test_fir_impulse_response_is_numerator():
    y, _ = iir_sos(_impulse(6), 0.3, -0.2, 0.7, 0.0, 0.0)
    np.testing.assert_allclose(y, [0.3, -0.2, 0.7, 0.0, 0.0, 0.0])


def test_identity_section_leaves_signal_unchanged():
    x = np.array([1.5, -2.0, 3.25, 0.0])
    y, state = iir_sos(x, 1.0, 0.0, 0.0, 0.0, 0.0, (4.0, 5.0))
    np.testing.assert_array_equal(y, x)
    assert state == (4.0, 5.0)


def test_gain_only_scales_and_keeps_state():
    x = np.array([1.0, -2.0, 4.0])
    y, state = iir_sos(x, 0.5, 0.0, 0.0, 0.0, 0.0, (1.0, 2.0))
    np.testing.assert_allclose(y, x * 0.5)
    assert state == (1.0, 2.0)


def test_first_order_recursion_is_geometric():
    n = 8
    y, _ = iir_sos(_impulse(n), 1.0, 0.0, 0.0, -0.5, 0.0)
    np.testing.assert_allclose(y, [0.5 ** k for k in range(n)])


def test_input_is_not_modified():
    x = np.array([1.0, 2.0, 3.0])
    iir_sos(x, 1.0, 0.5, 0.25, -0.1, 0.05)
    np.testing.assert_array_equal(x, [1.0, 2.0, 3.0])


@pytest.mark.parametrize(
    "coeffs",
    [
        (0.4, 0.3, 0.2, -0.6, 0.2),
        (2.0, 0.0, 0.0, -0.3, 0.1),
        (1.0, 0.0, 0.0, 0.2, -0.1),
        (0.5, -0.5, 0.25, 0.0, 0.0),
    ],
)
def test_filtering_in_pieces_matches_whole(coeffs):
    rng = np.random.default_rng(1)
    x = rng.standard_normal(50)
    whole, whole_state = iir_sos(x, *coeffs)
    first, state = iir_sos(x[:23], *coeffs)
    second, final_state = iir_sos(x[23:], *coeffs, state)
    np.testing.assert_allclose(np.concatenate([first, second]), whole)
    np.testing.assert_allclose(final_state, whole_state)


def test_linearity():
    rng = np.random.default_rng(2)
    a = rng.standard_normal(30)
    b = rng.standard_normal(30)
    coeffs = (0.7, 0.1, -0.2, -0.4, 0.3)
    ya, _ = iir_sos(a, *coeffs)
    yb, _ = iir_sos(b, *coeffs)
    yab, _ = iir_sos(2.0 * a + b, *coeffs)
    np.testing.assert_allclose(yab, 2.0 * ya + yb)


def test_bad_state_length_raises():
    with pytest.raises(ValueError):
        iir_sos([1.0, 2.0], 1.0, 0.5, 0.0, 0.0, 0.0, (1.0,))


def test_cascade_equals_sections_in_turn():
    rng = np.random.default_rng(3)
    x = rng.standard_normal(40)
    s1 = (0.5, 0.2, 0.1, -0.3, 0.05)
    s2 = (1.2, -0.4, 0.0, 0.1, -0.2)
    y, states = iir_filter([s1, s2], x)
    step1, st1 = iir_sos(x, *s1)
    step2, st2 = iir_sos(step1, *s2)
    np.testing.assert_allclose(y, step2)
    np.testing.assert_allclose(states[0], st1)
    np.testing.assert_allclose(states[1], st2)


def test_cascade_in_pieces_matches_whole():
    rng = np.random.default_rng(4)
    x = rng.standard_normal(64)
    sections = [(0.3, 0.3, 0.3, -0.5, 0.1), (1.0, -1.0, 0.0, -0.9, 0.0)]
    whole, _ = iir_filter(sections, x)
    first, states = iir_filter(sections, x[:20])
    second, _ = iir_filter(sections, x[20:], states)
    np.testing.assert_allclose(np.concatenate([first, second]), whole)


def test_empty_cascade_copies_input():
    x = np.array([1.0, 2.0])
    y, states = iir_filter([], x)
    np.testing.assert_array_equal(y, x)
    assert states == []
    y[0] = 9.0
    assert x[0] == 1.0


def test_cascade_rejects_short_section():
    with pytest.raises(ValueError):
        iir_filter([(1.0, 0.0, 0.0, 0.0)], [1.0])


def test_cascade_rejects_state_count_mismatch():
    with pytest.raises(ValueError):
        iir_filter([(1.0, 0.0, 0.0, 0.0, 0.0)], [1.0], [(0.0, 0.0), (0.0, 0.0)])