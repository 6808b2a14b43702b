from __future__ import annotations

import numpy as np

from ..model import FunctionModel


def sinusoid_func(x, amplitude, offset, frequency, phase):
    """Module-level sinusoid: offset + amplitude * sin(2π f x + phase)."""
    return offset + amplitude * np.sin(2 * np.pi * frequency * x + phase)


def _guess_sinusoid(x, y):
    """Frequency from the FFT peak, then offset/amplitude/phase by linear LS.

    Requires roughly uniform sampling; falls back to crude guesses otherwise.
    """
    offset = float(np.mean(y))
    amp0 = 0.5 * float(np.max(y) - np.min(y))
    guess = {
        "amplitude": 1.0 if amp0 <= 0 else amp0,
        "offset": offset,
        "frequency": 1.0,
        "phase": 0.0,
    }
    if x.size < 6:
        return guess

    order = np.argsort(x)
    xs = x[order]
    ys = y[order]
    dx = np.diff(xs)
    if not np.all(dx > 0):
        return guess
    dx_med = float(np.median(dx))
    if float(np.std(dx) / (np.mean(dx) + 1e-15)) > 0.05:
        return guess

    spectrum = np.abs(np.fft.rfft(ys - offset))
    freqs = np.fft.rfftfreq(ys.size, d=dx_med)
    if spectrum.size < 2:
        return guess
    k = int(np.argmax(spectrum[1:]) + 1)
    f0 = float(freqs[k])

    # y ≈ c + s*sin(wx) + q*cos(wx)  =>  amplitude = hypot(s, q), phase = atan2(q, s)
    w = 2 * np.pi * f0
    design = np.column_stack([np.ones_like(xs), np.sin(w * xs), np.cos(w * xs)])
    coef, *_ = np.linalg.lstsq(design, ys, rcond=None)
    c, s, q = (float(v) for v in coef)
    guess.update(
        offset=c,
        amplitude=float(np.hypot(s, q)),
        frequency=f0,
        phase=float(np.arctan2(q, s)),
    )
    return guess


def sinusoid(*, name: str = "sinusoid") -> FunctionModel:
    """Return a sinusoid model."""
    return FunctionModel.from_function(sinusoid_func, name=name).with_guesser(
        _guess_sinusoid
    )
