import warnings

from lm_fitting import FitData, fit


def inverse(params):
    return lambda x: x / params[0]


data = FitData(x=[1.0, 2.0, 3.0], y=[2.0, 4.0, 6.0])

# A zero divisor makes every step NaN: the fit reports the last valid parameters.
with warnings.catch_warnings(record=True) as caught:
    warnings.simplefilter("always")
    result = fit(data, inverse, initial_values=[0.0])

print(result.status.value)
print(result.parameter_values, result.parameter_error, result.iterations)
print([str(w.message) for w in caught if issubclass(w.category, UserWarning)])
