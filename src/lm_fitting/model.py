from __future__ import annotations

from dataclasses import dataclass, replace
from typing import (
    Any,
    Callable,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

import numpy as np

from .error import Evaluator, evaluate_model
from .util import infer_param_names

Guesser = Callable[[np.ndarray, np.ndarray], Mapping[str, float]]


@runtime_checkable
class Model(Protocol):
    """Model protocol: parameters in, scalar evaluator out.

    ``build`` must be pure and deterministic; the fitter calls it many times
    per iteration with perturbed parameter vectors.
    """

    def build(self, params: np.ndarray) -> Evaluator: ...


@dataclass(frozen=True)
class FunctionModel:
    """A model wrapping a plain ``func(x, p1, p2, ...)`` function."""

    name: str
    func: Callable[..., Any]
    param_names: Tuple[str, ...]
    guesser: Optional[Guesser] = None

    @staticmethod
    def from_function(
        func: Callable[..., Any], *, name: Optional[str] = None
    ) -> "FunctionModel":
        """Construct a model from a function signature ``(x, p1, ...)``."""
        names = infer_param_names(func)
        return FunctionModel(
            name=name or getattr(func, "__name__", "model"),
            func=func,
            param_names=names,
        )

    @property
    def n_params(self) -> int:
        return len(self.param_names)

    def with_guesser(self, fn: Guesser) -> "FunctionModel":
        """Return a new model using `fn(x, y)` to suggest initial values."""
        return replace(self, guesser=fn)

    def initial_guess(self, x: Any, y: Any) -> Tuple[float, ...]:
        """Suggest starting values from data.

        Only called explicitly by the user; ``fit`` never guesses.
        """
        if self.guesser is None:
            raise ValueError(f"Model {self.name!r} has no guesser.")
        guess = self.guesser(np.asarray(x, dtype=float), np.asarray(y, dtype=float))
        values = {n: float(v) for n, v in guess.items()}
        missing = [n for n in self.param_names if n not in values]
        if missing:
            raise ValueError(f"Guesser did not provide values for: {missing}")
        return tuple(values[n] for n in self.param_names)

    def build(self, params: np.ndarray) -> Evaluator:
        values = tuple(np.array(params, dtype=float))
        func = self.func

        def evaluator(x: float) -> float:
            return func(x, *values)

        return evaluator

    def eval(self, x: Any, params: Sequence[float]) -> Any:
        """Evaluate the model function on (possibly array) ``x``."""
        values = tuple(np.array(params, dtype=float))
        return self.func(np.asarray(x, dtype=float), *values)


@dataclass(frozen=True)
class ParameterizedModel:
    """A model wrapping a ``params -> (x -> y)`` factory callable."""

    factory: Callable[[np.ndarray], Evaluator]
    name: str = "model"
    param_names: Optional[Tuple[str, ...]] = None

    @property
    def n_params(self) -> Optional[int]:
        return None if self.param_names is None else len(self.param_names)

    def build(self, params: np.ndarray) -> Evaluator:
        # Hand the factory its own copy; a factory may hold on to it.
        return self.factory(np.array(params, dtype=float))


def as_model(model: Any) -> Model:
    """Normalize a Model or a ``params -> evaluator`` callable into a Model."""
    if isinstance(model, Model):
        return model
    if callable(model):
        return ParameterizedModel(
            factory=model, name=getattr(model, "__name__", "model")
        )
    raise TypeError(
        "model must provide build(params) or be a callable params -> (x -> y)."
    )


def model_param_names(model: Any) -> Optional[Tuple[str, ...]]:
    """Return declared parameter names, if the model has any."""
    names = getattr(model, "param_names", None)
    if names is None:
        return None
    return tuple(str(n) for n in names)


def evaluate_on(model: Model, x: Any, params: Sequence[float]) -> np.ndarray:
    """Evaluate any model on an array of x values, sample by sample."""
    func = model.build(np.array(params, dtype=float))
    return evaluate_model(func, np.asarray(x, dtype=float).reshape(-1))
