from __future__ import annotations

import numpy as np

from ..model import FunctionModel


def straight_line_func(x, m, b):
    """Module-level straight line function y = m*x + b."""
    return m * x + b


def _guess_line(x, y):
    if x.size < 2 or float(np.ptp(x)) == 0.0:
        return {"m": 0.0, "b": float(np.mean(y))}
    m, b = np.polyfit(x, y, 1)
    return {"m": float(m), "b": float(b)}


def straight_line(*, name: str = "straight line") -> FunctionModel:
    """Return a straight line model."""
    return FunctionModel.from_function(straight_line_func, name=name).with_guesser(
        _guess_line
    )
