from __future__ import annotations

import numpy as np

from ..model import FunctionModel


def exponential_decay_func(x, amplitude, rate, offset):
    """y = offset + amplitude * exp(-rate * x)."""
    return offset + amplitude * np.exp(-rate * x)


def _guess_exponential(x, y):
    order = np.argsort(x)
    xs = x[order]
    ys = y[order]
    offset = float(ys[-1])
    amplitude = float(ys[0] - offset)
    span = float(xs[-1] - xs[0])
    # Rate such that the curve has mostly decayed over the sampled span.
    rate = 1.0 if span <= 0 else 3.0 / span
    return {"amplitude": amplitude, "rate": rate, "offset": offset}


def exponential_decay(*, name: str = "exponential decay") -> FunctionModel:
    """Return an exponential decay model with offset."""
    return FunctionModel.from_function(exponential_decay_func, name=name).with_guesser(
        _guess_exponential
    )
