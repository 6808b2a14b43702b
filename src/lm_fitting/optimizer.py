from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from warnings import warn

import numpy as np

from .config import FitConfig, coerce_config, initial_vector
from .error import parameter_error
from .inputs import FitData, as_fit_data
from .model import Model, as_model, evaluate_on, model_param_names
from .step import lm_step
from .util import format_params


class FitStatus(str, Enum):
    """Terminal state of a fit."""

    CONVERGED = "converged"
    BUDGET_EXHAUSTED = "budget_exhausted"
    NUMERIC_FAILURE_RECOVERED = "numeric_failure_recovered"


@dataclass(frozen=True, eq=False)
class FitResult:
    parameter_values: np.ndarray
    parameter_error: float
    iterations: int
    status: FitStatus = FitStatus.BUDGET_EXHAUSTED
    damping: float = 0.0
    bracketing_iterations: int = 0
    param_names: Optional[Tuple[str, ...]] = None
    model: Any = None

    @property
    def converged(self) -> bool:
        return self.status is FitStatus.CONVERGED

    def __getitem__(self, key: Any) -> float:
        """Return a fitted value by position or by parameter name."""
        if isinstance(key, str):
            if self.param_names is None or key not in self.param_names:
                raise KeyError(key)
            key = self.param_names.index(key)
        return float(self.parameter_values[key])

    def as_dict(self) -> Dict[str, Any]:
        """Plain ``{parameterValues, parameterError, iterations}`` mapping."""
        return {
            "parameterValues": [float(v) for v in self.parameter_values],
            "parameterError": float(self.parameter_error),
            "iterations": int(self.iterations),
        }

    def predict(self, x: Any) -> np.ndarray:
        """Evaluate the fitted model at `x`."""
        if self.model is None:
            raise ValueError("No model attached to this FitResult.")
        return evaluate_on(self.model, x, self.parameter_values)

    def summary(self, digits: int = 4) -> str:
        """Return a human-readable summary string for the fit."""
        lines = [
            f"FitResult(status={self.status.value!r}, iterations={self.iterations}, "
            f"error={self.parameter_error:.{digits}g})"
        ]
        lines.extend(format_params(self.parameter_values, self.param_names, digits))
        return "\n".join(lines)


def _bracket_damping(
    data: FitData,
    model: Model,
    config: FitConfig,
    params: np.ndarray,
    err: float,
) -> Tuple[float, int]:
    """Search for a workable damping factor starting from ``config.damping``.

    Returns the damping and the number of bracketing rounds run, counting
    the round that found a workable damping. The loop
    condition ``err < err_d or err < err_v or count < max_iterations`` is kept
    as is: it can run past ``max_iterations`` while both candidates are
    worse than `err`, and it stops early once neither is. When
    ``max_bracketing_iterations`` is set it caps the number of rounds.
    """
    gd = config.gradient_difference
    v = config.v
    limit = config.max_bracketing_iterations
    damp = config.damping
    par = params
    count = 0

    while True:
        step_d = lm_step(data, par, damp, gd, model)
        err_d = parameter_error(data, step_d, model)
        step_v = lm_step(data, par, damp / v, gd, model)
        err_v = parameter_error(data, step_v, model)

        if err > err_d or err > err_v:
            if err_d > err_v:
                damp = damp / v
                par = step_v
            else:
                # the loop counter is not advanced here, the round still ran
                return damp, count + 1
        else:
            damp = damp * v

        count += 1

        if limit is not None and count >= limit:
            break
        if not (err < err_d or err < err_v or count < config.max_iterations):
            break

    return damp, count


def levenberg_marquardt(data: FitData, model: Model, config: FitConfig) -> FitResult:
    """Fit `model` to `data` with the Levenberg-Marquardt method.

    Two phases:

    1. Bracketing: starting from ``config.damping``, shrink or grow the
       damping by ``config.v`` until a damping that improves the error is
       found.
    2. Refinement: from ``config.initial_values``, take damped steps at that
       damping until the error is within ``config.error_tolerance`` or
       ``config.max_iterations`` steps were taken.

    If a refinement step yields a NaN error the loop stops and the last
    parameters with a valid error are returned, with their error recomputed.
    """
    parameters = initial_vector(config)
    err = parameter_error(data, parameters, model)
    damp, bracketing = _bracket_damping(data, model, config, parameters, err)

    converged = err <= config.error_tolerance
    last_params = parameters
    i = 0
    while i < config.max_iterations and not converged:
        parameters = lm_step(
            data, parameters, damp, config.gradient_difference, model
        )
        err = parameter_error(data, parameters, model)
        if math.isnan(err):
            break
        converged = err <= config.error_tolerance
        last_params = parameters
        i += 1

    names = model_param_names(model)
    if math.isnan(err):
        warn(
            f"Fit stopped after {i} refinement steps: error became NaN. "
            "Returning the last parameters with a valid error.",
            UserWarning,
        )
        return FitResult(
            parameter_values=np.array(last_params, dtype=float),
            parameter_error=parameter_error(data, last_params, model),
            iterations=i,
            status=FitStatus.NUMERIC_FAILURE_RECOVERED,
            damping=float(damp),
            bracketing_iterations=bracketing,
            param_names=names,
            model=model,
        )

    return FitResult(
        parameter_values=np.array(parameters, dtype=float),
        parameter_error=err,
        iterations=i,
        status=FitStatus.CONVERGED if converged else FitStatus.BUDGET_EXHAUSTED,
        damping=float(damp),
        bracketing_iterations=bracketing,
        param_names=names,
        model=model,
    )


def fit(data: Any, model: Any, config: Any = None, **options: Any) -> FitResult:
    """Fit a model to (x, y) data and return a FitResult.

    Parameters
    ----------
    data:
        FitData, an ``(x, y)`` tuple or a ``{"x": ..., "y": ...}`` mapping.
    model:
        Anything with ``build(params) -> (x -> y)``, e.g.
        ``FunctionModel.from_function(f)`` or a built-in from
        ``lm_fitting.models``, or a plain ``params -> (x -> y)`` callable.
    config:
        FitConfig, a mapping of options, or None.
    **options:
        Individual options (``initial_values``, ``damping``, ...), applied on
        top of `config`.

    ``initial_values`` is required and must match the model's declared
    parameter count, when the model declares one.
    """
    fit_data = as_fit_data(data)
    fit_model = as_model(model)
    cfg = coerce_config(config, **options)

    n_declared = getattr(fit_model, "n_params", None)
    if n_declared is not None and n_declared != cfg.n_params:
        raise ValueError(
            f"Model {getattr(fit_model, 'name', 'model')!r} has {n_declared} parameters "
            f"but initial_values has {cfg.n_params}."
        )

    return levenberg_marquardt(fit_data, fit_model, cfg)
