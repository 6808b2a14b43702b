import numpy as np
import pytest

from lm_fitting import FitData, FunctionModel, lm_step, models
from lm_fitting.step import gradient_function, residual_row


def line(x, m, b):
    return m * x + b


def test_gradient_function_uses_absolute_forward_difference():
    data = FitData(x=[0.0, 1.0, 2.0], y=[0.0, 0.0, 0.0])
    model = FunctionModel.from_function(line)
    params = np.array([2.0, 1.0])
    evaluated = np.array([1.0, 3.0, 5.0])

    jac = gradient_function(data, evaluated, params, 0.1, model)

    assert jac.shape == (2, 3)
    assert np.allclose(jac[0], [0.0, -0.1, -0.2])
    assert np.allclose(jac[1], [-0.1, -0.1, -0.1])
    # the input vector is perturbed on copies only
    assert np.array_equal(params, [2.0, 1.0])


def test_residual_row_shape():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])
    row = residual_row(data, np.array([0.5, 2.0]))
    assert row.shape == (1, 2)
    assert np.allclose(row, [[0.5, 1.0]])


def test_undamped_step_solves_linear_problem():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])
    model = FunctionModel.from_function(line)

    new = lm_step(data, np.array([1.0, 1.0]), 0.0, 0.1, model)

    assert np.allclose(new, [2.0, 1.0], atol=1e-9)


def test_heavy_damping_gives_small_step():
    data = FitData(x=[0.0, 1.0], y=[1.0, 3.0])
    model = FunctionModel.from_function(line)
    params = np.array([1.0, 1.0])

    new = lm_step(data, params, 1e12, 0.1, model)

    assert np.allclose(new, params, atol=1e-6)


@pytest.mark.parametrize(
    "model, params",
    [
        (models.straight_line(), [1.0, 0.0]),
        (models.exponential_decay(), [1.0, 0.5, 0.1]),
        (models.gaussian_with_offset(), [0.0, 0.1, 1.0, 1.0]),
        (models.sinusoid(), [1.0, 0.0, 0.5, 0.2]),
    ],
    ids=["line", "exponential", "gaussian", "sinusoid"],
)
def test_step_preserves_parameter_count(model, params):
    x = np.linspace(-1.0, 1.0, 7)
    data = FitData(x=x, y=np.cos(x))

    new = lm_step(data, np.asarray(params, dtype=float), 0.5, 0.1, model)

    assert new.shape == (len(params),)


def test_singular_normal_matrix_gives_nan_without_raising():
    # `unused` has no effect on the model: its Jacobian row is all zeros.
    def scaled(x, a, unused):
        return a * x

    data = FitData(x=[1.0, 2.0], y=[2.0, 4.0])
    model = FunctionModel.from_function(scaled)

    new = lm_step(data, np.array([1.0, 3.0]), 0.0, 0.1, model)

    assert new.shape == (2,)
    assert np.all(np.isnan(new))


def test_damping_regularizes_singular_problem():
    def scaled(x, a, unused):
        return a * x

    data = FitData(x=[1.0, 2.0], y=[2.0, 4.0])
    model = FunctionModel.from_function(scaled)

    new = lm_step(data, np.array([1.0, 3.0]), 1.0, 0.1, model)

    assert np.all(np.isfinite(new))
    assert new[1] == pytest.approx(3.0)
    assert 1.0 < new[0] < 2.0
