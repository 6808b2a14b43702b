from __future__ import annotations

from typing import Any

import numpy as np
from scipy import linalg

from .error import evaluate_model


def gradient_function(
    data: Any,
    evaluated_data: np.ndarray,
    params: np.ndarray,
    gradient_difference: float,
    model: Any,
) -> np.ndarray:
    """Forward-difference sensitivity matrix, shape (n_params, n_samples).

    Row ``p`` holds ``f(x; params) - f(x; params + gradient_difference * e_p)``.
    The step is absolute: it is not scaled by the parameter magnitude.
    """
    n = params.shape[0]
    m = data.x.shape[0]
    ans = np.empty((n, m), dtype=float)

    for param in range(n):
        aux_params = params.copy()
        aux_params[param] += gradient_difference
        func_param = model.build(aux_params)
        with np.errstate(invalid="ignore", over="ignore"):
            ans[param] = evaluated_data - evaluate_model(func_param, data.x)
    return ans


def residual_row(data: Any, evaluated_data: np.ndarray) -> np.ndarray:
    """Residuals ``y - f(x)`` as a (1, n_samples) row."""
    with np.errstate(invalid="ignore", over="ignore"):
        return (data.y - evaluated_data)[None, :]


def _inverse(matrix: np.ndarray) -> np.ndarray:
    """Matrix inverse; singular or non-finite input yields an all-NaN matrix."""
    if not np.all(np.isfinite(matrix)):
        return np.full(matrix.shape, np.nan)
    try:
        return linalg.inv(matrix, check_finite=False)
    except linalg.LinAlgError:
        return np.full(matrix.shape, np.nan)


def lm_step(
    data: Any,
    params: np.ndarray,
    damping: float,
    gradient_difference: float,
    model: Any,
) -> np.ndarray:
    """One damped Gauss-Newton (Levenberg-Marquardt) update.

    Solves ``(damping * gd**2 * I + J J^T) delta = gd * J r^T`` and returns
    ``params - delta``. Nothing here checks for NaN: a singular normal matrix
    or a model returning NaN gives NaN parameters, which the optimizer
    detects.
    """
    params = np.asarray(params, dtype=float)
    n = params.shape[0]
    gd = gradient_difference

    evaluated_data = evaluate_model(model.build(params), data.x)
    gradient = gradient_function(data, evaluated_data, params, gd, model)
    residuals = residual_row(data, evaluated_data).T

    with np.errstate(invalid="ignore", over="ignore", divide="ignore"):
        identity = np.eye(n) * (damping * gd * gd)
        inverse = _inverse(identity + gradient @ gradient.T)
        delta = (inverse @ gradient @ residuals * gd).reshape(n)
        return params - delta
