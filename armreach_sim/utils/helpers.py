"""
Small stateless helpers used across the armreach_sim package.

Provides angle conversion, Euler rotation matrices for the joint frames,
and the perspective projection used to place 3-D points on the canvas.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from armreach_sim.utils.constants import (
    CAMERA_FOV_DEG,
    CAMERA_NEAR,
    CAMERA_POSITION,
)

RAD2DEG: float = 180.0 / math.pi
DEGREE_SIGN: str = chr(176)


def rad_to_deg(angle: float) -> float:
    """Convert an angle from radians to degrees.

    Args:
        angle: Angle in radians.

    Returns:
        The same angle in degrees.
    """
    return angle * RAD2DEG


def rotation_y(angle: float) -> np.ndarray:
    """Return the 3x3 rotation matrix about the y axis."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_z(angle: float) -> np.ndarray:
    """Return the 3x3 rotation matrix about the z axis."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def joint_rotation(yaw: float, pitch: float) -> np.ndarray:
    """Compose a joint's local rotation from its yaw and pitch.

    The joint frame follows the X-Y-Z Euler order with no roll, so the
    matrix is ``Ry(yaw) @ Rz(pitch)``.

    Args:
        yaw: Rotation about the joint's y axis (radians).
        pitch: Rotation about the joint's z axis (radians).

    Returns:
        3x3 float64 rotation matrix.
    """
    return rotation_y(yaw) @ rotation_z(pitch)


def _focal_length(height: int, fov_deg: float) -> float:
    """Return the focal length in pixels for a vertical field of view."""
    return (height / 2.0) / math.tan(math.radians(fov_deg) / 2.0)


def project_points(
    points: np.ndarray,
    width: int,
    height: int,
    camera: Tuple[float, float, float] = CAMERA_POSITION,
    fov_deg: float = CAMERA_FOV_DEG,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Project world points through a pinhole camera looking down -z.

    Args:
        points: World-space array of shape ``(N, 3)``.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        camera: Camera position in world space.
        fov_deg: Vertical field of view in degrees.

    Returns:
        Tuple ``(cols, rows, depths, visible)`` of shape ``(N,)`` arrays.
        ``visible`` is False for points behind the near plane; their
        pixel coordinates are meaningless.
    """
    rel = np.atleast_2d(np.asarray(points, dtype=np.float64)) - np.asarray(camera)
    depths = -rel[:, 2]
    visible = depths >= CAMERA_NEAR
    safe = np.where(visible, depths, 1.0)
    focal = _focal_length(height, fov_deg)
    cols = width / 2.0 + focal * rel[:, 0] / safe
    rows = height / 2.0 - focal * rel[:, 1] / safe
    return cols, rows, depths, visible


def pixel_radius(world_radius: float, depth: float, height: int,
                 fov_deg: float = CAMERA_FOV_DEG) -> float:
    """Return the on-screen radius of a sphere at *depth* (at least 1)."""
    return max(1.0, _focal_length(height, fov_deg) * world_radius / depth)
