import numpy as np
import matplotlib.pyplot as plt
from lm_fitting import FitData, fit, models, plot_fit

model = models.gaussian_with_offset()

rng = np.random.default_rng(1)
x = np.linspace(-4, 4, 60)
y = model.eval(x, [0.5, 0.2, 1.5, 0.9]) + rng.normal(0, 0.02, size=x.size)

data = FitData(x=x, y=y, x_label="detuning", y_label="signal", label="data")
result = fit(
    data,
    model,
    initial_values=model.initial_guess(x, y),
    damping=1.0,
    gradient_difference=0.01,
    max_iterations=50,
    max_bracketing_iterations=100,
)
print(result.summary())

fig, ax = plot_fit(data, result, show_params=True)
ax.legend()
plt.show()
