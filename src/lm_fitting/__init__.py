"""lm_fitting public API."""
from .config import FitConfig
from .error import parameter_error
from .inputs import FitData
from .model import FunctionModel, Model, ParameterizedModel
from .optimizer import FitResult, FitStatus, fit, levenberg_marquardt
from .plotting import plot_fit
from .step import lm_step
from . import models

__all__ = [
    "FitConfig",
    "FitData",
    "FitResult",
    "FitStatus",
    "FunctionModel",
    "Model",
    "ParameterizedModel",
    "fit",
    "levenberg_marquardt",
    "lm_step",
    "models",
    "parameter_error",
    "plot_fit",
]
