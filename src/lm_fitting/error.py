from __future__ import annotations

from typing import Any, Callable

import numpy as np

Evaluator = Callable[[float], float]


def evaluate_model(func: Evaluator, x: np.ndarray) -> np.ndarray:
    """Evaluate a scalar evaluator at every sample in `x`.

    Floating point warnings raised by the model are silenced: NaN and inf
    are returned as ordinary values for the caller to inspect.
    """
    out = np.empty(x.shape[0], dtype=float)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for i in range(x.shape[0]):
            out[i] = func(x[i])
    return out


def parameter_error(data: Any, params: np.ndarray, model: Any) -> float:
    """Sum of absolute residuals ``sum |y_i - f(x_i)|`` at `params`.

    Returns NaN when the model produces NaN for any sample.
    """
    func = model.build(params)
    predicted = evaluate_model(func, data.x)
    with np.errstate(invalid="ignore", over="ignore"):
        return float(np.sum(np.abs(data.y - predicted)))
