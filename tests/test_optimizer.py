import copy
import math

import numpy as np
import pytest

from lm_fitting import (
    FitConfig,
    FitData,
    FitStatus,
    FunctionModel,
    fit,
    models,
    parameter_error,
)
from lm_fitting.optimizer import levenberg_marquardt


def line(x, m, b):
    return m * x + b


def _line_model() -> FunctionModel:
    return FunctionModel.from_function(line, name="line")


def test_fit_recovers_exact_line():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])

    result = fit(data, _line_model(), initial_values=[1.0, 1.0])

    assert result.parameter_error <= 0.01
    assert result.iterations < 100
    assert result.converged
    assert result.status is FitStatus.CONVERGED
    assert np.allclose(result.parameter_values, [2.0, 1.0], atol=0.1)
    assert result["m"] == pytest.approx(2.0, abs=1e-6)
    assert result["b"] == pytest.approx(1.0, abs=1e-6)


def test_bracketing_can_stop_before_budget():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])

    result = fit(data, _line_model(), initial_values=[1.0, 1.0])

    # undamped candidates improve immediately and are identical -> first round breaks
    assert result.bracketing_iterations == 1
    assert result.damping == 0.0


def _jumpy(params):
    # Adds a large offset for p in a narrow band just below the data value.
    p = params[0]
    offset = 100.0 if 0.945 < p < 0.97 else 0.0
    return lambda x: p + offset


def test_bracketing_runs_past_budget_while_candidates_are_worse():
    data = FitData(x=[0.0], y=[1.0])
    built = []

    def counting_jumpy(params):
        built.append(np.array(params))
        return _jumpy(params)

    result = fit(data, counting_jumpy, initial_values=[0.9], damping=1.0, max_iterations=1)

    # round 1: both candidates land in the band, damping grows;
    # round 2 runs although the budget of 1 is spent.
    assert result.bracketing_iterations == 2
    # a step builds twice (point + one gradient offset), its error once more:
    # baseline + 2 rounds * 2 candidates * 3 + 1 refinement step * 3
    assert len(built) == 1 + 2 * 2 * 3 + 3
    assert result.damping == pytest.approx(1.5)
    assert result.iterations == 1
    assert result.parameter_values[0] == pytest.approx(0.94)
    assert result.status is FitStatus.BUDGET_EXHAUSTED


def test_max_bracketing_iterations_caps_rounds():
    data = FitData(x=[0.0], y=[1.0])

    result = fit(
        data,
        _jumpy,
        initial_values=[0.9],
        damping=1.0,
        max_iterations=1,
        max_bracketing_iterations=1,
    )

    assert result.bracketing_iterations == 1
    assert result.damping == pytest.approx(1.5)


def test_nan_at_initial_parameters_is_recovered():
    def ratio(params):
        return lambda x: x / params[0]

    data = FitData(x=[1.0, 2.0, 3.0], y=[2.0, 4.0, 6.0])

    with pytest.warns(UserWarning, match="error became NaN"):
        result = fit(data, ratio, initial_values=[0.0])

    assert not np.any(np.isnan(result.parameter_values))
    assert np.array_equal(result.parameter_values, [0.0])
    assert result.iterations == 0
    assert result.status is FitStatus.NUMERIC_FAILURE_RECOVERED
    assert not math.isnan(result.parameter_error)
    assert math.isinf(result.parameter_error)


def test_nan_after_valid_steps_returns_last_valid_parameters():
    def cube_below_limit(params):
        p = params[0]
        return lambda x: p**3 if p < 1.2 else math.nan

    data = FitData(x=[0.0, 1.0], y=[8.0, 8.0])

    with pytest.warns(UserWarning, match="error became NaN"):
        result = fit(
            data,
            cube_below_limit,
            initial_values=[0.5],
            damping=1.0,
            max_bracketing_iterations=50,
        )

    assert result.status is FitStatus.NUMERIC_FAILURE_RECOVERED
    assert result.iterations == 1
    assert result.parameter_values[0] == pytest.approx(1.0253, abs=1e-3)
    assert 0.5 < result.parameter_values[0] < 1.2
    assert result.parameter_error == pytest.approx(
        parameter_error(data, result.parameter_values, result.model)
    )
    assert not math.isnan(result.parameter_error)


def test_fit_does_not_mutate_inputs():
    x = [0.0, 1.0, 2.0, 3.0]
    y = [0.9, 3.1, 5.0, 7.2]
    data = {"x": x, "y": y}
    options = {"initialValues": [1.0, 0.0], "maxIterations": 20, "damping": 0.1}
    data_before = copy.deepcopy(data)
    options_before = copy.deepcopy(options)

    fit(data, _line_model(), options)

    assert data == data_before
    assert options == options_before


def test_fit_does_not_mutate_config():
    config = FitConfig(initial_values=(1.0, 1.0), damping=0.5)
    fit(FitData(x=[0.0, 1.0], y=[1.0, 3.0]), _line_model(), config)
    assert config.initial_values == (1.0, 1.0)
    assert config.damping == 0.5


def test_single_exact_sample_converges_immediately():
    def constant(x, c):
        return c + 0.0 * x

    model = FunctionModel.from_function(constant)
    data = FitData(x=[3.0], y=[5.0])

    exact = fit(data, model, initial_values=[5.0])
    near = fit(data, model, initial_values=[4.0])

    assert exact.iterations == 0
    assert exact.converged
    assert near.iterations in (0, 1)
    assert near.converged
    assert near.parameter_values[0] == pytest.approx(5.0)


def test_zero_iteration_budget_reports_initial_values():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])

    result = fit(data, _line_model(), initial_values=[1.0, 1.0], max_iterations=0)

    assert result.iterations == 0
    assert np.array_equal(result.parameter_values, [1.0, 1.0])
    assert result.parameter_error == pytest.approx(1.0)
    assert result.status is FitStatus.BUDGET_EXHAUSTED


def test_gaussian_fit_converges_from_nearby_seed():
    model = models.gaussian_with_offset()
    x = np.linspace(-3.0, 3.0, 31)
    true = [0.0, 0.5, 2.0, 1.0]
    y = model.eval(x, true)

    result = fit(
        FitData(x=x, y=y),
        model,
        initial_values=[0.2, 0.4, 1.8, 1.2],
        damping=1.0,
        gradient_difference=0.01,
        max_bracketing_iterations=200,
    )

    assert result.converged
    assert np.allclose(result.parameter_values, true, atol=1e-2)


def test_exponential_fit_from_guesser_seed():
    model = models.exponential_decay()
    x = np.linspace(0.0, 3.0, 25)
    y = model.eval(x, [2.0, 1.5, 0.5])

    seed = model.initial_guess(x, y)
    result = fit(
        (x, y),
        model,
        initial_values=seed,
        damping=1e-3,
        gradient_difference=1e-3,
        max_bracketing_iterations=200,
    )

    assert result.converged
    assert result["rate"] == pytest.approx(1.5, abs=1e-2)


def test_plain_callable_model_and_dict_result():
    def affine(params):
        m, b = params
        return lambda x: m * x + b

    result = fit({"x": [0.0, 1.0], "y": [1.0, 3.0]}, affine, {"initialValues": [1.0, 1.0]})

    out = result.as_dict()
    assert set(out) == {"parameterValues", "parameterError", "iterations"}
    assert out["parameterValues"] == pytest.approx([2.0, 1.0], abs=1e-6)
    assert out["parameterError"] <= 0.01
    assert result.param_names is None
    with pytest.raises(KeyError):
        result["m"]


def test_initial_values_must_match_model_parameters():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])
    with pytest.raises(ValueError, match="has 2 parameters"):
        fit(data, _line_model(), initial_values=[1.0, 1.0, 1.0])


def test_initial_values_are_required():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])
    with pytest.raises(ValueError, match="initial_values is required"):
        fit(data, _line_model())


def test_predict_and_summary():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])
    result = fit(data, _line_model(), initial_values=[1.0, 1.0])

    assert np.allclose(result.predict([2.0, 3.0]), [5.0, 7.0], atol=1e-6)
    text = result.summary(digits=3)
    assert "converged" in text
    assert "m: 2" in text
    assert "b: 1" in text


def test_levenberg_marquardt_accepts_explicit_config():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])
    config = FitConfig(initial_values=(1.0, 1.0))

    result = levenberg_marquardt(data, _line_model(), config)

    assert result.converged
    assert result.iterations == 1
