"""
Dataclass configuration for the target-reaching simulation.

Classes:
    SimConfig: Base configuration shared by simulation front ends.
    ReachSimConfig: Configuration of the interactive arm-reaching task.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Tuple

from armreach_sim.utils.constants import (
    ANGLE_THRESHOLD,
    DEFAULT_FPS,
    DEFAULT_MODEL_PATH,
    DEFAULT_RENDER_HEIGHT,
    DEFAULT_RENDER_WIDTH,
    INITIAL_TARGET,
    LINK_LENGTHS,
    TARGET_STEP,
)

_BACKENDS: Tuple[str, ...] = ("mlp", "analytic")
_RENDER_MODES: Tuple[str, ...] = ("rgb_array", "human")


@dataclass
class SimConfig(abc.ABC):
    """Base configuration shared by all armreach_sim front ends.

    Attributes:
        task: Human-readable task identifier.
        fps: Animation frames per second.
        episode_length: Maximum steps per Gymnasium episode.
        render_mode: Gymnasium render mode (``'rgb_array'``, ``'human'``).
        observation_height: Pixel height of rendered frames.
        observation_width: Pixel width of rendered frames.
        seed: Random seed for reproducibility.
    """

    task: str = "base"
    fps: int = DEFAULT_FPS
    episode_length: int = 1000
    render_mode: str = "rgb_array"
    observation_height: int = DEFAULT_RENDER_HEIGHT
    observation_width: int = DEFAULT_RENDER_WIDTH
    seed: int = 42

    @property
    def env_type(self) -> str:
        """Return the ``task`` field value."""
        return self.task

    @property
    @abc.abstractmethod
    def gym_kwargs(self) -> dict:
        """Return keyword arguments forwarded to ``gymnasium.make()``."""
        raise NotImplementedError


@dataclass
class ReachSimConfig(SimConfig):
    """Configuration for the keyboard-driven arm-reaching task.

    Attributes:
        task: Fixed to ``'ArmReach-Sim-v0'``.
        initial_target: Starting target position.
        step_size: Target displacement per key press.
        threshold: Joint animator dead band (radians).
        link_lengths: Lengths of link1 and link2.
        backend: Inference backend, ``'mlp'`` or ``'analytic'``.
        model_path: ``.npz`` resource loaded by the MLP backend.
        async_inference: Run inference on a worker thread.
    """

    task: str = "ArmReach-Sim-v0"
    initial_target: Tuple[float, float, float] = INITIAL_TARGET
    step_size: float = TARGET_STEP
    threshold: float = ANGLE_THRESHOLD
    link_lengths: Tuple[float, float] = LINK_LENGTHS
    backend: str = "analytic"
    model_path: str = DEFAULT_MODEL_PATH
    async_inference: bool = False

    def __post_init__(self) -> None:
        """Validate field values.

        Raises:
            ValueError: On an unknown backend or render mode, or on
                non-positive sizes.
        """
        if self.backend not in _BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}'. Choose from {list(_BACKENDS)}")
        if self.render_mode not in _RENDER_MODES:
            raise ValueError(
                f"Unknown render mode '{self.render_mode}'. Choose from {list(_RENDER_MODES)}"
            )
        self._check_positive("fps", self.fps)
        self._check_positive("episode_length", self.episode_length)
        self._check_positive("step_size", self.step_size)
        self._check_positive("threshold", self.threshold)
        if len(self.initial_target) != 3:
            raise ValueError(f"initial_target needs 3 coordinates, got {self.initial_target}")
        if len(self.link_lengths) != 2:
            raise ValueError(f"link_lengths needs 2 values, got {self.link_lengths}")

    @staticmethod
    def _check_positive(name: str, value: float) -> None:
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")

    @property
    def gym_kwargs(self) -> dict:
        """Return Reach-specific Gymnasium kwargs.

        Returns:
            Dictionary with ``render_mode`` and ``max_episode_steps``.
        """
        return {
            "render_mode": self.render_mode,
            "max_episode_steps": self.episode_length,
        }
