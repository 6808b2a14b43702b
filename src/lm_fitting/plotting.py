from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple
from warnings import warn

import numpy as np

from .inputs import as_fit_data
from .util import format_params


def plot_fit(
    data: Any,
    result: Optional[Any] = None,
    *,
    ax: Optional[Any] = None,
    xg: Optional[np.ndarray] = None,
    data_kwargs: Optional[Mapping[str, Any]] = None,
    line_kwargs: Optional[Mapping[str, Any]] = None,
    show_params: bool = False,
    param_digits: int = 4,
    text_kwargs: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Any]:
    """Plot data points and an optional fitted curve on a Matplotlib Axes.

    Parameters
    ----------
    data : FitData, (x, y) tuple or {"x", "y"} mapping
        Samples to plot. FitData labels are used for axes and legend.
    result : FitResult, optional
        Fit providing predict(). Required for the fit line.
    ax : matplotlib.axes.Axes, optional
        If None, a new figure/axes is created.
    xg : ndarray, optional
        Grid for the fit line. Defaults to 400 points over the x range.
    data_kwargs, line_kwargs, text_kwargs : dict, optional
        Styling kwargs for plot (data), plot (fit) and text.
    show_params : bool
        If True, annotate fitted parameters on the plot.
    """
    import matplotlib.pyplot as plt

    fd = as_fit_data(data)

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    data_kwargs = dict(data_kwargs or {})
    line_kwargs = dict(line_kwargs or {})
    text_kwargs = dict(text_kwargs or {})

    data_kwargs.setdefault("marker", "o")
    data_kwargs.setdefault("linestyle", "none")
    if fd.label is not None:
        data_kwargs.setdefault("label", fd.label)
    ax.plot(fd.x, fd.y, **data_kwargs)

    if fd.x_label is not None:
        ax.set_xlabel(fd.x_label)
    if fd.y_label is not None:
        ax.set_ylabel(fd.y_label)

    if result is not None:
        if xg is None:
            xg = np.linspace(float(np.min(fd.x)), float(np.max(fd.x)), 400)
        yfit = result.predict(xg)
        if not np.all(np.isfinite(yfit)):
            warn("plot_fit: fit line has non-finite values.", UserWarning)
        line_kwargs.setdefault("label", "fit")
        ax.plot(xg, yfit, **line_kwargs)

        if show_params:
            lines = [
                s.strip()
                for s in format_params(
                    result.parameter_values, result.param_names, param_digits
                )
            ]
            text_kwargs.setdefault("ha", "left")
            text_kwargs.setdefault("va", "top")
            text_kwargs.setdefault("fontsize", 9)
            text_kwargs.setdefault("transform", ax.transAxes)
            text_kwargs.setdefault(
                "bbox",
                {"boxstyle": "round", "facecolor": "white", "alpha": 0.7, "edgecolor": "none"},
            )
            ax.text(0.02, 0.98, "\n".join(lines), **text_kwargs)

    return fig, ax
