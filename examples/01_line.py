import numpy as np
from lm_fitting import FitData, fit, models

model = models.straight_line()

rng = np.random.default_rng(0)
x = np.linspace(0, 10, 20)
y = 2.0 * x - 1.0 + rng.normal(0, 0.3, size=x.size)

data = FitData(x=x, y=y, x_label="x", y_label="y", label="data")

# initial_values is always explicit; the built-in guesser is one way to get them.
seed = model.initial_guess(data.x, data.y)
result = fit(
    data,
    model,
    initial_values=seed,
    damping=0.1,
    max_iterations=50,
    max_bracketing_iterations=100,
)

print(result.summary())
print(result.as_dict())
