"""
Run progress and its color coding.

Curves drawn by the monitor are colored by how far the run has advanced,
going linearly from blue at the first step to red at the last one.
"""

from typing import Tuple

RGB = Tuple[float, float, float]

#: Color of a run that has not started
START_COLOR: RGB = (0.0, 0.0, 1.0)

#: Color of a completed run
END_COLOR: RGB = (1.0, 0.0, 0.0)


def progress_ratio(completed_steps: float, total_steps: float) -> float:
    """
    Fraction of the run completed, clamped to [0, 1].

    Parameters
    ----------
    completed_steps : float
        Step counter reported by the particle field.
    total_steps : float
        Expected number of steps. Must be positive.

    Returns
    -------
    float
        ``completed_steps / total_steps`` clamped to [0, 1].
    """
    if total_steps <= 0:
        raise ValueError(f"total_steps must be positive, got {total_steps}")
    ratio = completed_steps / total_steps
    return float(min(max(ratio, 0.0), 1.0))


def progress_color(ratio: float) -> RGB:
    """Linear interpolation between START_COLOR and END_COLOR."""
    ratio = float(min(max(ratio, 0.0), 1.0))
    return tuple(s + ratio * (e - s) for s, e in zip(START_COLOR, END_COLOR))
