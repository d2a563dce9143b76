"""
Fixed-velocity joint smoothing.

Each call moves one rotation axis a constant half-threshold step toward
the desired angle, and holds still once the gap falls inside the dead band.
Exact convergence is never reached; the axis settles somewhere within
``threshold`` of the desired value.

Classes:
    JointAnimator: Per-axis bounded stepping toward a desired angle.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from armreach_sim.utils.constants import ANGLE_THRESHOLD


@dataclass(frozen=True)
class JointAnimator:
    """Advances a single rotation axis toward a desired angle.

    Attributes:
        threshold: Width of the dead band in radians.  The step size is
            half of it.
    """

    threshold: float = ANGLE_THRESHOLD

    def __post_init__(self) -> None:
        if self.threshold <= 0.0:
            raise ValueError(f"threshold must be positive, got {self.threshold}")

    @property
    def step_size(self) -> float:
        """Angular distance covered by one step."""
        return self.threshold / 2.0

    def step(self, current: float, desired: float) -> float:
        """Return the next angle for an axis currently at *current*.

        Args:
            current: Current rotation in radians.
            desired: Desired rotation in radians.

        Returns:
            *current* when inside the dead band, otherwise *current* moved
            one step toward *desired*.
        """
        difference = current - desired
        if abs(difference) < self.threshold:
            return current
        return current - math.copysign(self.step_size, difference)
