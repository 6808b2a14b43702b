from __future__ import annotations

import numpy as np

from ..model import FunctionModel


def gaussian_with_offset_func(x, x0, y0, a, sigma):
    """Gaussian with baseline: y = y0 + a * exp(-0.5 * ((x - x0)/sigma)^2)."""
    return y0 + a * np.exp(-0.5 * ((x - x0) / sigma) ** 2)


def _guess_gaussian(x, y):
    """Seed x0, y0, a, sigma from the data.

    Baseline is the mean of y; the peak is whichever extremum lies further
    from it. The amplitude carries the sign of the peak.
    """
    y0 = float(np.mean(y))
    dy_min = y0 - float(np.min(y))
    dy_max = float(np.max(y)) - y0

    if dy_max >= dy_min:
        a = dy_max
        x0 = float(x[np.argmax(y)])
    else:
        a = -dy_min
        x0 = float(x[np.argmin(y)])

    span = float(np.max(x) - np.min(x))
    sigma = 1.0 if span <= 0 else 0.2 * span
    return {"x0": x0, "y0": y0, "a": a, "sigma": sigma}


def gaussian_with_offset(*, name: str = "gaussian") -> FunctionModel:
    """Return a Gaussian model with offset.

    Parameters in the model
    -----------------------
    x0   : center position
    y0   : baseline
    a    : amplitude (negative for a dip)
    sigma: width
    """
    return FunctionModel.from_function(gaussian_with_offset_func, name=name).with_guesser(
        _guess_gaussian
    )
