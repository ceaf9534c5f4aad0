"""Second-order-section IIR filtering with carried filter state."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

State = Tuple[float, float]
Section = Tuple[float, float, float, float, float]


def _as_signal(x: Sequence[float]) -> np.ndarray:
    arr = np.asarray(x, dtype=float)
    if arr.ndim != 1:
        raise ValueError("expected a one-dimensional signal")
    return arr


def _as_state(state: Optional[Sequence[float]]) -> State:
    if state is None:
        return 0.0, 0.0
    values = tuple(float(v) for v in state)
    if len(values) != 2:
        raise ValueError("a section state holds exactly two registers")
    return values[0], values[1]


def iir_sos(
    x: Sequence[float],
    b0: float,
    b1: float,
    b2: float,
    a1: float,
    a2: float,
    state: Optional[Sequence[float]] = None,
) -> Tuple[np.ndarray, State]:
    """Filter ``x`` with (b0 z^2 + b1 z + b2) / (z^2 + a1 z + a2).

    ``state`` holds the two registers ``(z1, z2)`` to start from; ``None``
    starts from zero. Returns the filtered signal and the final registers,
    so that a long signal can be filtered in consecutive pieces.
    """
    signal = _as_signal(x)
    z1, z2 = _as_state(state)

    if a1 == 0.0 and a2 == 0.0 and b1 == 0.0 and b2 == 0.0:
        # Pure gain: the registers are neither used nor changed.
        out = signal.copy() if b0 == 1.0 else b0 * signal
        return out, (z1, z2)

    out = np.empty_like(signal)
    for n, sample in enumerate(signal):
        z0 = sample - a1 * z1 - a2 * z2
        out[n] = b0 * z0 + b1 * z1 + b2 * z2
        z2, z1 = z1, z0
    return out, (float(z1), float(z2))


def iir_filter(
    sections: Iterable[Sequence[float]],
    x: Sequence[float],
    states: Optional[Sequence[Optional[Sequence[float]]]] = None,
) -> Tuple[np.ndarray, List[State]]:
    """Filter ``x`` through a cascade of second-order sections.

    Each section is ``(b0, b1, b2, a1, a2)``. ``states`` gives one register
    pair per section, or ``None`` to start every section from zero. Returns
    the output and the final register pair of each section.
    """
    coeffs: List[Section] = []
    for section in sections:
        values = tuple(float(v) for v in section)
        if len(values) != 5:
            raise ValueError("each section needs five coefficients: b0 b1 b2 a1 a2")
        coeffs.append(values)  # type: ignore[arg-type]

    if states is None:
        initial: List[Optional[Sequence[float]]] = [None] * len(coeffs)
    else:
        initial = list(states)
        if len(initial) != len(coeffs):
            raise ValueError(
                f"{len(coeffs)} sections need {len(coeffs)} states, got {len(initial)}"
            )

    out = _as_signal(x).copy()
    final: List[State] = []
    for (b0, b1, b2, a1, a2), state in zip(coeffs, initial):
        out, new_state = iir_sos(out, b0, b1, b2, a1, a2, state)
        final.append(new_state)
    return out, final