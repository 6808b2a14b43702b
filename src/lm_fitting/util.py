from __future__ import annotations

import inspect
import math
from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np


def infer_param_names(func: Callable[..., Any]) -> Tuple[str, ...]:
    """Infer parameter names from a function signature.

    Conventions:
    - first arg is the independent variable (x)
    - remaining positional/keyword parameters are fit parameters

    Names are used for labelling and for checking the length of
    ``initial_values``; initial values themselves are never inferred.
    """
    sig = inspect.signature(func)
    params = list(sig.parameters.values())

    if len(params) < 2:
        raise TypeError("Model function must have at least (x, p1, ...).")

    bad_kinds = {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}
    for p in params:
        if p.kind in bad_kinds:
            raise TypeError("*args/**kwargs are not supported in model functions.")

    names = [p.name for p in params[1:]]
    if len(set(names)) != len(names):
        raise TypeError("Duplicate parameter names in function signature.")
    return tuple(names)


def safe_float(x: Any) -> float:
    """Convert numpy scalar / 0-d array to python float."""
    if isinstance(x, np.ndarray) and x.shape == ():
        return float(x.item())
    return float(x)


def format_params(
    values: Sequence[float],
    names: Optional[Sequence[str]] = None,
    digits: int = 4,
) -> list[str]:
    """Format parameter values as ``name: value`` lines.

    Unnamed parameters are labelled ``p0``, ``p1``, ...
    """
    vals = [safe_float(v) for v in values]
    if names is None or len(names) != len(vals):
        names = [f"p{i}" for i in range(len(vals))]
    lines = []
    for name, v in zip(names, vals):
        if math.isnan(v):
            lines.append(f"  {name:>12s}: NaN")
        else:
            lines.append(f"  {name:>12s}: {v:.{digits}g}")
    return lines
