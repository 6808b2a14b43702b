import math

import numpy as np

from lm_fitting import fit


# A model can be any params -> (x -> y) factory.
def decay(params):
    amplitude, rate = params
    return lambda x: amplitude * np.exp(-rate * x)


x = [0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0]
y = [3.0 * math.exp(-0.8 * xi) for xi in x]

result = fit(
    {"x": x, "y": y},
    decay,
    {
        "initialValues": [2.5, 1.0],
        "damping": 1e-3,
        "gradientDifference": 1e-3,
        "maxIterations": 100,
        "errorTolerance": 1e-3,
    },
    max_bracketing_iterations=200,
)

print(result.status.value, result.iterations)
print(result.as_dict())
