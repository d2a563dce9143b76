"""
Shared constants and type aliases for the armreach_sim package.

Collects the key bindings, controller tuning, arm geometry, camera
parameters and colours used across the control, inference and rendering
layers so that every module agrees on a single set of values.
"""

from __future__ import annotations

from typing import Dict, Tuple

# ---------------------------------------------------------------------------
# Target defaults
# ---------------------------------------------------------------------------
INITIAL_TARGET: Tuple[float, float, float] = (0.3, 0.6, 0.9)
TARGET_STEP: float = 0.1

# ---------------------------------------------------------------------------
# Key bindings: DOM ``KeyboardEvent.code`` -> (axis, sign)
# ---------------------------------------------------------------------------
KEY_BINDINGS: Dict[str, Tuple[str, float]] = {
    "ArrowUp": ("z", -1.0),
    "KeyW": ("z", -1.0),
    "ArrowDown": ("z", 1.0),
    "KeyS": ("z", 1.0),
    "ArrowLeft": ("x", -1.0),
    "KeyA": ("x", -1.0),
    "ArrowRight": ("x", 1.0),
    "KeyD": ("x", 1.0),
    "KeyQ": ("y", 1.0),
    "KeyE": ("y", -1.0),
}

# Discrete action index -> canonical key code (0 is "no key")
ACTION_KEYS: Tuple[str, ...] = (
    "",
    "KeyW",
    "KeyS",
    "KeyA",
    "KeyD",
    "KeyQ",
    "KeyE",
)

# ---------------------------------------------------------------------------
# Joint animation
# ---------------------------------------------------------------------------
ANGLE_THRESHOLD: float = 0.05

# ---------------------------------------------------------------------------
# Arm geometry (two unit links along each joint's local +y axis)
# ---------------------------------------------------------------------------
NUM_JOINTS: int = 2
LINK_LENGTHS: Tuple[float, float] = (1.0, 1.0)
JOINT_NAMES: Tuple[str, str] = ("joint1", "joint2")
AXIS_NAMES: Tuple[str, str] = ("yaw", "pitch")

# ---------------------------------------------------------------------------
# Inference engine
# ---------------------------------------------------------------------------
MODEL_INPUT_DIM: int = 3
MODEL_OUTPUT_DIM: int = 4
DEFAULT_MODEL_PATH: str = "model.npz"

# ---------------------------------------------------------------------------
# Camera and rendering
# ---------------------------------------------------------------------------
CAMERA_POSITION: Tuple[float, float, float] = (0.0, 1.0, 3.0)
CAMERA_FOV_DEG: float = 75.0
CAMERA_NEAR: float = 0.1
GRID_SIZE: int = 20

DEFAULT_RENDER_WIDTH: int = 640
DEFAULT_RENDER_HEIGHT: int = 480
DEFAULT_FPS: int = 60

JOINT_RADIUS: float = 0.1
LINK_RADIUS: float = 0.1

# ---------------------------------------------------------------------------
# Color palette (RGB 0-255)
# ---------------------------------------------------------------------------
COLOR_BACKGROUND: Tuple[int, int, int] = (240, 240, 240)
COLOR_GRID: Tuple[int, int, int] = (200, 200, 200)
COLOR_LINK: Tuple[int, int, int] = (255, 255, 0)
COLOR_JOINT: Tuple[int, int, int] = (255, 0, 255)
COLOR_TARGET: Tuple[int, int, int] = (219, 68, 55)
COLOR_TEXT: Tuple[int, int, int] = (50, 50, 50)
