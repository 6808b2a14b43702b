from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

# Option names accepted by FitConfig.from_mapping besides the field names.
_OPTION_ALIASES: Dict[str, str] = {
    "gradientDifference": "gradient_difference",
    "initialValues": "initial_values",
    "maxIterations": "max_iterations",
    "errorTolerance": "error_tolerance",
    "maxBracketingIterations": "max_bracketing_iterations",
}


@dataclass(frozen=True)
class FitConfig:
    """Levenberg-Marquardt settings.

    Fields
    ------
    damping : initial damping factor (>= 0)
    gradient_difference : absolute forward-difference step for the Jacobian
    initial_values : starting parameter vector; required, never inferred
    max_iterations : iteration budget for the bracketing and refinement phases
    error_tolerance : sum of absolute residuals considered converged
    v : damping adjustment factor (> 1)
    max_bracketing_iterations : optional hard ceiling on damping bracketing rounds
    """

    initial_values: Optional[Tuple[float, ...]] = None
    damping: float = 0.0
    gradient_difference: float = 0.1
    max_iterations: int = 100
    error_tolerance: float = 0.01
    v: float = 1.5
    max_bracketing_iterations: Optional[int] = None

    def __post_init__(self) -> None:
        if self.initial_values is None:
            raise ValueError(
                "initial_values is required; pass one starting value per model parameter."
            )
        values = np.asarray(self.initial_values, dtype=float).reshape(-1)
        if values.size == 0:
            raise ValueError("initial_values must contain at least one parameter.")
        if not np.all(np.isfinite(values)):
            raise ValueError("initial_values must be finite.")
        object.__setattr__(self, "initial_values", tuple(float(v) for v in values))

        damping = float(self.damping)
        if not math.isfinite(damping) or damping < 0.0:
            raise ValueError(f"damping must be a finite value >= 0; got {self.damping!r}.")
        object.__setattr__(self, "damping", damping)

        gd = float(self.gradient_difference)
        if not math.isfinite(gd) or gd == 0.0:
            raise ValueError(
                f"gradient_difference must be finite and non-zero; got {self.gradient_difference!r}."
            )
        object.__setattr__(self, "gradient_difference", gd)

        v = float(self.v)
        if not math.isfinite(v) or v <= 1.0:
            raise ValueError(f"v must be a finite value > 1; got {self.v!r}.")
        object.__setattr__(self, "v", v)

        tol = float(self.error_tolerance)
        if math.isnan(tol) or tol < 0.0:
            raise ValueError(f"error_tolerance must be >= 0; got {self.error_tolerance!r}.")
        object.__setattr__(self, "error_tolerance", tol)

        object.__setattr__(
            self, "max_iterations", _as_count(self.max_iterations, "max_iterations")
        )
        if self.max_bracketing_iterations is not None:
            object.__setattr__(
                self,
                "max_bracketing_iterations",
                _as_count(self.max_bracketing_iterations, "max_bracketing_iterations"),
            )

    @property
    def n_params(self) -> int:
        return len(self.initial_values)  # type: ignore[arg-type]

    @staticmethod
    def from_mapping(options: Mapping[str, Any]) -> "FitConfig":
        """Build a FitConfig from an options mapping.

        Keys may be field names (``gradient_difference``) or the camelCase
        option names (``gradientDifference``, ``initialValues``, ...).
        Missing keys take their defaults; unknown keys raise TypeError.
        """
        kwargs = _normalize_options(options)
        return FitConfig(**kwargs)

    def with_options(self, **options: Any) -> "FitConfig":
        """Return a new FitConfig with the given options replaced."""
        return replace(self, **_normalize_options(options))


def _normalize_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    valid = {f.name for f in fields(FitConfig)}
    out: Dict[str, Any] = {}
    for key, value in options.items():
        name = _OPTION_ALIASES.get(key, key)
        if name not in valid:
            raise TypeError(
                f"Unknown fit option {key!r}. Available: {tuple(sorted(valid))}"
            )
        if name in out:
            raise TypeError(f"Fit option {name!r} given more than once.")
        out[name] = value
    return out


def _as_count(value: Any, name: str) -> int:
    try:
        count = int(value)
    except (OverflowError, ValueError, TypeError):
        raise ValueError(f"{name} must be an integer; got {value!r}.") from None
    if isinstance(value, bool) or count != value:
        raise ValueError(f"{name} must be an integer; got {value!r}.")
    if count < 0:
        raise ValueError(f"{name} must be >= 0; got {value!r}.")
    return count


def coerce_config(config: Any = None, **options: Any) -> FitConfig:
    """Apply defaults at the call boundary.

    ``config`` may be a FitConfig, a mapping of options or None; keyword
    ``options`` override it.
    """
    if config is None:
        return FitConfig.from_mapping(options)
    if isinstance(config, FitConfig):
        return config.with_options(**options) if options else config
    if isinstance(config, Mapping):
        merged = dict(_normalize_options(config))
        merged.update(_normalize_options(options))
        return FitConfig(**merged)
    raise TypeError("config must be a FitConfig, a mapping of options or None.")


def initial_vector(config: FitConfig) -> np.ndarray:
    """Return a fresh float array of the configured initial values."""
    values: Sequence[float] = config.initial_values  # type: ignore[assignment]
    return np.array(values, dtype=float)
