from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class FitData:
    """Container for fit inputs plus lightweight plotting metadata.

    ``x`` and ``y`` are stored as read-only 1D float arrays, so a fit can never
    modify the caller's samples.
    """

    x: Any
    y: Any

    # Plotting metadata (optional)
    x_label: Optional[str] = None
    y_label: Optional[str] = None
    label: Optional[str] = None  # legend label for the data

    # Extra user metadata
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        x = np.array(self.x, dtype=float, copy=True)
        y = np.array(self.y, dtype=float, copy=True)
        if x.ndim != 1 or y.ndim != 1:
            raise ValueError(
                f"FitData requires 1D x and y; got shapes {x.shape} and {y.shape}."
            )
        if x.shape != y.shape:
            raise ValueError(
                f"x and y must have the same length; got {x.size} and {y.size}."
            )
        if x.size == 0:
            raise ValueError("FitData requires at least one sample.")
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "meta", dict(self.meta))

    def __len__(self) -> int:
        return int(self.x.shape[0])

    @staticmethod
    def from_pairs(
        pairs: Iterable[Tuple[float, float]],
        *,
        x_label: Optional[str] = None,
        y_label: Optional[str] = None,
        label: Optional[str] = None,
    ) -> "FitData":
        """Create FitData from an iterable of (x, y) points."""
        pts = [tuple(p) for p in pairs]
        if any(len(p) != 2 for p in pts):
            raise ValueError("from_pairs expects (x, y) pairs.")
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return FitData(x=xs, y=ys, x_label=x_label, y_label=y_label, label=label)

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "FitData":
        """Create FitData from a ``{"x": [...], "y": [...]}`` mapping."""
        missing = [k for k in ("x", "y") if k not in data]
        if missing:
            raise ValueError(f"Data mapping is missing keys: {missing}")
        extra = {k: v for k, v in data.items() if k not in ("x", "y")}
        return FitData(x=data["x"], y=data["y"], meta=extra)

    def with_labels(
        self,
        *,
        x_label: Optional[str] = None,
        y_label: Optional[str] = None,
        label: Optional[str] = None,
    ) -> "FitData":
        """Return a copy with updated label fields."""
        return replace(
            self,
            x_label=self.x_label if x_label is None else x_label,
            y_label=self.y_label if y_label is None else y_label,
            label=self.label if label is None else label,
        )


def as_fit_data(data: Any) -> FitData:
    """Normalize user data into a FitData.

    Accepted forms:
    - FitData (returned as is)
    - mapping with "x" and "y" keys
    - 2-tuple/list ``(x, y)`` of equal-length sequences
    """
    if isinstance(data, FitData):
        return data
    if isinstance(data, Mapping):
        return FitData.from_mapping(data)
    if isinstance(data, (tuple, list)) and len(data) == 2:
        x, y = data
        return FitData(x=x, y=y)
    raise TypeError(
        "data must be FitData, a {'x': ..., 'y': ...} mapping or an (x, y) tuple."
    )
