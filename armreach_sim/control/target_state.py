"""
Target position owned by the control loop.

The target is moved only through discrete displacements issued by the
keyboard teleop layer and read once per frame by the control loop.  A lock
guards the three coordinates so readers always get a consistent snapshot,
even when input arrives from another thread.

Classes:
    Vector3: Immutable 3-D point.
    TargetState: Mutable holder of the current target position.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from armreach_sim.utils.constants import INITIAL_TARGET

_AXES: Tuple[str, ...] = ("x", "y", "z")


@dataclass(frozen=True)
class Vector3:
    """A point in world space.

    Attributes:
        x: Lateral coordinate.
        y: Vertical coordinate.
        z: Depth coordinate (towards the camera is positive).
    """

    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        """Return the point as a float64 array of shape ``(3,)``."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


class TargetState:
    """The control target's position.

    Attributes:
        initial: Position restored by ``reset``.
    """

    def __init__(self, initial: Tuple[float, float, float] = INITIAL_TARGET) -> None:
        """Initialise the target at *initial*.

        Args:
            initial: Starting ``(x, y, z)`` position.
        """
        self.initial = Vector3(*(float(v) for v in initial))
        self._coords = list(self.initial.as_tuple())
        self._lock = threading.Lock()

    @property
    def position(self) -> Vector3:
        """Return an atomic snapshot of the current position."""
        with self._lock:
            return Vector3(*self._coords)

    def apply_displacement(self, axis: str, delta: float) -> Vector3:
        """Add *delta* to one axis of the target position.

        No bounds are enforced; the target may be moved anywhere.

        Args:
            axis: One of ``'x'``, ``'y'``, ``'z'``.
            delta: Signed displacement.

        Returns:
            The updated position.

        Raises:
            ValueError: If *axis* is not a known axis name.
        """
        if axis not in _AXES:
            raise ValueError(f"Unknown axis '{axis}'. Choose from {list(_AXES)}")
        index = _AXES.index(axis)
        with self._lock:
            self._coords[index] += delta
            return Vector3(*self._coords)

    def reset(self) -> Vector3:
        """Move the target back to its initial position."""
        with self._lock:
            self._coords = list(self.initial.as_tuple())
            return self.initial
