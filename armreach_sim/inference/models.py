"""
Inference backends mapping a model-frame position to four joint angles.

Every backend implements the single-method ``AngleModel`` capability so the
control loop never depends on how the angles are produced.  Two backends
ship with the package:

* ``MLPAngleModel``: a pretrained NumPy multilayer perceptron whose
  weights are read from a ``.npz`` model resource.
* ``AnalyticIKModel``: a closed-form two-link inverse-kinematics solver,
  useful when no trained model is at hand.

Both receive positions in the model frame, i.e. ``(x, -z, y)`` of the world
point (z up, y pointing away from the camera).

Classes:
    AngleModel: Abstract ``predict(inputs[1, 3]) -> outputs[1, 4]`` capability.
    MLPAngleModel: NumPy MLP loaded from an ``.npz`` file.
    AnalyticIKModel: Closed-form inverse kinematics.
"""

from __future__ import annotations

import abc
import logging
import math
from pathlib import Path
from typing import Any, Dict, Tuple

import numpy as np

from armreach_sim.utils.constants import (
    LINK_LENGTHS,
    MODEL_INPUT_DIM,
    MODEL_OUTPUT_DIM,
)

logger = logging.getLogger(__name__)

_WEIGHT_NAMES: Tuple[str, ...] = ("w1", "b1", "w2", "b2", "w3", "b3")


class AngleModel(abc.ABC):
    """Abstract inference engine consumed by the angle adapter."""

    @abc.abstractmethod
    def predict(self, inputs: np.ndarray) -> np.ndarray:
        """Map a batch of model-frame positions to joint angles.

        Args:
            inputs: Array of shape ``(1, 3)``.

        Returns:
            Array of shape ``(1, 4)`` holding
            ``[theta1, phi1, theta2, phi2]`` in radians.
        """
        raise NotImplementedError


class MLPAngleModel(AngleModel):
    """Two-hidden-layer MLP regressing joint angles from a position.

    Hidden layers use ReLU; the output layer is linear so predicted angles
    are not bounded.

    Attributes:
        input_dim: Size of the input vector (3).
        output_dim: Size of the output vector (4).
        hidden_dim: Width of both hidden layers.
    """

    def __init__(
        self,
        input_dim: int = MODEL_INPUT_DIM,
        output_dim: int = MODEL_OUTPUT_DIM,
        hidden_dim: int = 64,
        seed: int = 42,
    ) -> None:
        """Initialise the MLP with Xavier-uniform weights.

        Args:
            input_dim: Size of the input vector.
            output_dim: Size of the output vector.
            hidden_dim: Width of both hidden layers.
            seed: RNG seed for weight initialisation.
        """
        self.input_dim = input_dim
        self.output_dim = output_dim
        self.hidden_dim = hidden_dim
        self._rng = np.random.default_rng(seed)
        self._init_weights()

    # ------------------------------------------------------------------
    # Weight initialisation helpers
    # ------------------------------------------------------------------

    def _xavier_init(self, fan_in: int, fan_out: int) -> np.ndarray:
        """Create a weight matrix with Xavier uniform initialisation.

        Args:
            fan_in: Number of input units.
            fan_out: Number of output units.

        Returns:
            2-D float64 array of shape ``(fan_in, fan_out)``.
        """
        limit = np.sqrt(6.0 / (fan_in + fan_out))
        return self._rng.uniform(-limit, limit, size=(fan_in, fan_out))

    def _init_weights(self) -> None:
        """Allocate and initialise all weight matrices and bias vectors."""
        self.w1 = self._xavier_init(self.input_dim, self.hidden_dim)
        self.b1 = np.zeros(self.hidden_dim)
        self.w2 = self._xavier_init(self.hidden_dim, self.hidden_dim)
        self.b2 = np.zeros(self.hidden_dim)
        self.w3 = self._xavier_init(self.hidden_dim, self.output_dim)
        self.b3 = np.zeros(self.output_dim)

    # ------------------------------------------------------------------
    # Forward pass
    # ------------------------------------------------------------------

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        """Run the forward pass on a ``(1, 3)`` batch.

        Args:
            inputs: Model-frame positions.

        Returns:
            ``(1, 4)`` float32 array of joint angles.
        """
        x = np.asarray(inputs, dtype=np.float64).reshape(-1, self.input_dim)
        h1 = np.maximum(0.0, x @ self.w1 + self.b1)
        h2 = np.maximum(0.0, h1 @ self.w2 + self.b2)
        return (h2 @ self.w3 + self.b3).astype(np.float32)

    # ------------------------------------------------------------------
    # Save / Load
    # ------------------------------------------------------------------

    def save(self, path: str | Path) -> None:
        """Save all weights to a ``.npz`` model resource.

        Args:
            path: Destination file path.
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        np.savez(path, **{name: getattr(self, name) for name in _WEIGHT_NAMES})

    @classmethod
    def load(cls, path: str | Path) -> "MLPAngleModel":
        """Load a model resource written by ``save``.

        Args:
            path: Path to the ``.npz`` file.

        Returns:
            An ``MLPAngleModel`` with restored weights.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If the archive is missing weights or their shapes
                do not chain from 3 inputs to 4 outputs.
        """
        resource = Path(path)
        if not resource.exists():
            raise FileNotFoundError(f"No model resource at {resource}")
        with np.load(resource) as archive:
            data = {name: archive[name] for name in _WEIGHT_NAMES if name in archive}
        _validate_weights(data, resource)
        model = cls(hidden_dim=int(data["w1"].shape[1]))
        model._restore_weights(data)
        logger.info("Loaded MLP model from %s (hidden_dim=%d)", resource, model.hidden_dim)
        return model

    def _restore_weights(self, data: Dict[str, Any]) -> None:
        """Copy saved arrays into the weight attributes.

        Args:
            data: Mapping with w1, b1, w2, b2, w3, b3 keys.
        """
        for name in _WEIGHT_NAMES:
            setattr(self, name, np.asarray(data[name], dtype=np.float64))


def _validate_weights(data: Dict[str, np.ndarray], source: Path) -> None:
    """Raise if the loaded weights do not form a 3 -> 4 MLP.

    Args:
        data: Loaded arrays keyed by name.
        source: File the arrays came from (for the message).

    Raises:
        ValueError: When a weight is missing or shapes mismatch.
    """
    missing = [name for name in _WEIGHT_NAMES if name not in data]
    if missing:
        raise ValueError(f"{source}: missing weights {missing}")
    w1 = data["w1"]
    hidden = w1.shape[1] if w1.ndim == 2 else -1
    expected = {
        "w1": (MODEL_INPUT_DIM, hidden),
        "b1": (hidden,),
        "w2": (hidden, hidden),
        "b2": (hidden,),
        "w3": (hidden, MODEL_OUTPUT_DIM),
        "b3": (MODEL_OUTPUT_DIM,),
    }
    for name, shape in expected.items():
        if data[name].shape != shape:
            raise ValueError(
                f"{source}: weight '{name}' has shape {data[name].shape}, expected {shape}"
            )


class AnalyticIKModel(AngleModel):
    """Closed-form inverse kinematics for the two-link rig.

    The second joint's yaw is fixed at zero so both pitches act in the same
    vertical plane, which reduces the problem to a planar two-link arm
    rotated by the first joint's yaw.  Targets out of reach give the fully
    stretched arm pointing at them.

    Attributes:
        link_lengths: Lengths of link1 and link2.
    """

    def __init__(self, link_lengths: Tuple[float, float] = LINK_LENGTHS) -> None:
        self.link_lengths = (float(link_lengths[0]), float(link_lengths[1]))

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        """Solve the joint angles for a ``(1, 3)`` model-frame position.

        Args:
            inputs: ``[[x, -z, y]]`` of the world target.

        Returns:
            ``(1, 4)`` float32 array ``[theta1, phi1, theta2, phi2]``.
        """
        mx, my, mz = (float(v) for v in np.asarray(inputs).reshape(-1)[:3])
        x, y, z = mx, mz, -my
        theta1 = math.atan2(z, -x)
        phi1, phi2 = self._solve_planar(math.hypot(x, z), y)
        return np.array([[theta1, phi1, 0.0, phi2]], dtype=np.float32)

    def _solve_planar(self, reach: float, height: float) -> Tuple[float, float]:
        """Solve the two pitches for a point in the arm's vertical plane.

        Pitches are measured from the vertical, positive toward *reach*.

        Args:
            reach: Horizontal distance from the base.
            height: Vertical coordinate.

        Returns:
            ``(phi1, phi2)`` in radians.
        """
        l1, l2 = self.link_lengths
        dist_sq = reach**2 + height**2
        cos_elbow = (dist_sq - l1**2 - l2**2) / (2.0 * l1 * l2)
        elbow = math.acos(max(-1.0, min(1.0, cos_elbow)))
        shoulder = math.atan2(reach, height) - math.atan2(
            l2 * math.sin(elbow), l1 + l2 * math.cos(elbow)
        )
        return shoulder, elbow
