"""
3-D arm-reaching simulation environment (Gymnasium-compatible).

A two-link arm follows a target point moved by discrete key actions.  Each
``step`` applies at most one key, then runs one frame of the control loop:
infer desired joint angles for the target and advance every joint axis one
bounded step toward them.  Frames are drawn by ``ArmRenderer`` onto a NumPy
canvas through a fixed perspective camera.

Classes:
    ArmRenderer: Draws the rig and target marker as an RGB image.
    TargetReachEnv: Gymnasium environment for the reaching task.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from armreach_sim.control.control_loop import ControlLoop
from armreach_sim.control.joint_animator import JointAnimator
from armreach_sim.control.target_state import TargetState, Vector3
from armreach_sim.envs.configs import ReachSimConfig
from armreach_sim.inference.loader import ModelLoader, build_model_factory
from armreach_sim.robots.arm_rig import ArmRig
from armreach_sim.teleop.keyboard_teleop import KeyboardTeleop
from armreach_sim.utils.constants import (
    ACTION_KEYS,
    COLOR_BACKGROUND,
    COLOR_GRID,
    COLOR_JOINT,
    COLOR_LINK,
    COLOR_TARGET,
    GRID_SIZE,
    JOINT_RADIUS,
    LINK_RADIUS,
)
from armreach_sim.utils.helpers import pixel_radius, project_points

logger = logging.getLogger(__name__)


class ArmRenderer:
    """Rasterises the arm rig and target marker with NumPy.

    Attributes:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._grid_points = self._build_grid_points()

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _sample_segment(start: np.ndarray, end: np.ndarray, spacing: float) -> np.ndarray:
        """Return points spaced roughly *spacing* apart along a segment.

        Args:
            start: Segment start, shape ``(3,)``.
            end: Segment end, shape ``(3,)``.
            spacing: World-space distance between samples.

        Returns:
            Array of shape ``(N, 3)`` including both end points.
        """
        length = float(np.linalg.norm(end - start))
        count = max(2, int(length / spacing) + 1)
        t = np.linspace(0.0, 1.0, count)[:, np.newaxis]
        return start + t * (end - start)

    def _build_grid_points(self) -> np.ndarray:
        """Sample the floor grid lines once; they never move."""
        half = GRID_SIZE / 2.0
        segments = []
        for offset in np.linspace(-half, half, GRID_SIZE + 1):
            segments.append(
                self._sample_segment(np.array([offset, 0.0, -half]), np.array([offset, 0.0, half]), 0.01)
            )
            segments.append(
                self._sample_segment(np.array([-half, 0.0, offset]), np.array([half, 0.0, offset]), 0.01)
            )
        return np.concatenate(segments)

    # ------------------------------------------------------------------
    # Painting primitives
    # ------------------------------------------------------------------

    def _paint_points(self, canvas: np.ndarray, points: np.ndarray, color: Tuple[int, int, int],
                      radius: int = 0) -> None:
        """Paint projected *points* as squares of half-width *radius*.

        Args:
            canvas: Mutable (H, W, 3) uint8 array.
            points: World-space points, shape ``(N, 3)``.
            color: RGB colour.
            radius: Half-width in pixels of each painted square.
        """
        cols, rows, _, visible = project_points(points, self.width, self.height)
        cols = np.round(cols[visible]).astype(np.int64)
        rows = np.round(rows[visible]).astype(np.int64)
        for dr in range(-radius, radius + 1):
            for dc in range(-radius, radius + 1):
                r, c = rows + dr, cols + dc
                inside = (r >= 0) & (r < self.height) & (c >= 0) & (c < self.width)
                canvas[r[inside], c[inside]] = color

    def _paint_disc(self, canvas: np.ndarray, center: np.ndarray, world_radius: float,
                    color: Tuple[int, int, int]) -> None:
        """Paint a sphere of *world_radius* at *center* as a filled disc."""
        cols, rows, depths, visible = project_points(center, self.width, self.height)
        if not visible[0]:
            return
        radius = pixel_radius(world_radius, float(depths[0]), self.height)
        rr, cc = np.ogrid[: self.height, : self.width]
        mask = (rr - rows[0]) ** 2 + (cc - cols[0]) ** 2 < radius**2
        canvas[mask] = color

    def _paint_link(self, canvas: np.ndarray, start: np.ndarray, end: np.ndarray) -> None:
        """Paint a link as a thick line whose width follows its depth."""
        samples = self._sample_segment(start, end, 0.005)
        _, _, depths, visible = project_points(samples, self.width, self.height)
        if not visible.any():
            return
        mean_depth = float(np.mean(depths[visible]))
        thickness = int(pixel_radius(LINK_RADIUS, mean_depth, self.height) * 0.5)
        self._paint_points(canvas, samples, COLOR_LINK, radius=thickness)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, rig: ArmRig, target: Vector3) -> np.ndarray:
        """Draw one frame.

        Args:
            rig: Arm rig in its current pose.
            target: Target marker position.

        Returns:
            (H, W, 3) uint8 RGB image.
        """
        canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        canvas[:] = COLOR_BACKGROUND
        self._paint_points(canvas, self._grid_points, COLOR_GRID)
        self._paint_disc(canvas, target.as_array(), JOINT_RADIUS, COLOR_TARGET)
        frames = rig.forward_kinematics()
        self._paint_link(canvas, frames["joint1"], frames["joint2"])
        self._paint_link(canvas, frames["joint2"], frames["end_effector"])
        self._paint_disc(canvas, frames["end_effector"], JOINT_RADIUS, COLOR_JOINT)
        return canvas


class TargetReachEnv(gym.Env):
    """Gymnasium environment for the keyboard-driven reaching task.

    Actions are ``Discrete(7)``: 0 presses nothing, 1..6 press forward,
    back, left, right, up, down.  Observations hold the target position,
    the four current joint rotations, the four latest desired angles and
    the end-effector position.  The reward is the negative distance from
    the end effector to the target; the episode never terminates and is
    truncated after ``episode_length`` steps.

    Attributes:
        metadata: Gymnasium metadata with supported render modes.
        cfg: ``ReachSimConfig`` controlling the task.
        loop: The control loop advanced once per step.
        teleop: Keyboard handler used to apply actions.
    """

    metadata: Dict[str, Any] = {"render_modes": ["rgb_array", "human"], "render_fps": 60}

    def __init__(
        self,
        cfg: ReachSimConfig | None = None,
        loader: ModelLoader | None = None,
        render_mode: str | None = None,
    ) -> None:
        """Initialise the environment.

        Args:
            cfg: Optional configuration; defaults when *None*.
            loader: Optional model loader; one is built from ``cfg`` and
                started when *None*.
            render_mode: Overrides ``cfg.render_mode`` when given.
        """
        super().__init__()
        self.cfg = cfg or ReachSimConfig()
        self.render_mode = render_mode or self.cfg.render_mode
        self.metadata = {**self.metadata, "render_fps": self.cfg.fps}
        self._step_count = 0
        self._init_spaces()
        self._init_components(loader)

    # ------------------------------------------------------------------
    # Initialisation helpers (called by __init__)
    # ------------------------------------------------------------------

    def _init_spaces(self) -> None:
        """Define action and observation Gymnasium spaces."""
        self.action_space = spaces.Discrete(len(ACTION_KEYS))

        def box(size: int) -> spaces.Box:
            return spaces.Box(low=-np.inf, high=np.inf, shape=(size,), dtype=np.float32)

        self.observation_space = spaces.Dict(
            {
                "target": box(3),
                "joint_rotations": box(4),
                "desired_angles": box(4),
                "end_effector": box(3),
            }
        )

    def _init_components(self, loader: ModelLoader | None) -> None:
        """Wire target, rig, teleop, control loop and renderer together."""
        cfg = self.cfg
        if loader is None:
            factory = build_model_factory(cfg.backend, cfg.model_path, cfg.link_lengths)
            loader = ModelLoader(factory, name=f"{cfg.backend} backend").start()
        self.target = TargetState(cfg.initial_target)
        self.rig = ArmRig.with_link_lengths(cfg.link_lengths)
        self.teleop = KeyboardTeleop(self.target, step_size=cfg.step_size)
        self.loop = ControlLoop(
            self.target,
            self.rig,
            loader,
            animator=JointAnimator(cfg.threshold),
            use_async=cfg.async_inference,
        )
        self.renderer = ArmRenderer(cfg.observation_width, cfg.observation_height)

    # ------------------------------------------------------------------
    # Gymnasium API
    # ------------------------------------------------------------------

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """Restore the initial target, zero the rig and forget the last status.

        Args:
            seed: Optional seed (the task is deterministic).
            options: Unused; reserved for Gymnasium compatibility.

        Returns:
            Tuple of (observation dict, info dict).
        """
        super().reset(seed=seed)
        self._step_count = 0
        self.target.reset()
        self.rig.reset()
        self.loop.reset()
        return self._build_observation(), self._build_info()

    def step(
        self, action: int
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """Apply one key action and advance one animation frame.

        Args:
            action: Index into the key table (0 = no key).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        code = ACTION_KEYS[int(action)]
        if code:
            self.teleop.handle_code(code)
        self.loop.frame()
        self._step_count += 1
        truncated = self._step_count >= self.cfg.episode_length
        return self._build_observation(), self._compute_reward(), False, truncated, self._build_info()

    def render(self) -> np.ndarray:
        """Render the current scene as an RGB image.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        return self.renderer.render(self.rig, self.target.position)

    def close(self) -> None:
        self.loop.close()

    # ------------------------------------------------------------------
    # Observation / reward builders
    # ------------------------------------------------------------------

    def _desired_angles(self) -> np.ndarray:
        status = self.loop.last_status
        if status is None:
            return np.zeros(4)
        return np.array(list(status.desired))

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """Assemble the observation dictionary."""
        return {
            "target": self.target.position.as_array().astype(np.float32),
            "joint_rotations": self.rig.get_rotations().astype(np.float32),
            "desired_angles": self._desired_angles().astype(np.float32),
            "end_effector": self.rig.end_effector().astype(np.float32),
        }

    def _compute_reward(self) -> float:
        """Negative end-effector to target distance."""
        gap = self.rig.end_effector() - self.target.position.as_array()
        return -float(np.linalg.norm(gap))

    def _build_info(self) -> Dict[str, Any]:
        status = self.loop.last_status
        return {
            "model_ready": self.loop.ready,
            "failed_frames": self.loop.failed_frames,
            "status": None if status is None else status.format_target() + "\n" + status.format_angles(),
        }
