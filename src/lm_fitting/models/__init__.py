"""Built-in models for common curve shapes."""
from .exponential import exponential_decay, exponential_decay_func
from .gaussian import gaussian_with_offset, gaussian_with_offset_func
from .line import straight_line, straight_line_func
from .sinusoid import sinusoid, sinusoid_func

__all__ = [
    "exponential_decay",
    "exponential_decay_func",
    "gaussian_with_offset",
    "gaussian_with_offset_func",
    "sinusoid",
    "sinusoid_func",
    "straight_line",
    "straight_line_func",
]
