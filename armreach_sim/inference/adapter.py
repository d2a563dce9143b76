"""
Adapter between world-frame target positions and the inference engine.

The adapter permutes the target into the model's training frame, runs the
model and reads the four output angles positionally.  All intermediate
buffers live inside a ``TensorScope`` so they are released on every exit
path, including when the model raises.

Classes:
    JointAngles: Four desired angles produced for one frame.
    TensorScope: Context manager owning the buffers of one inference call.
    AngleInferenceAdapter: Synchronous ``infer(position) -> JointAngles``.
    AsyncInferenceAdapter: Same contract with at most one request in flight.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

import numpy as np

from armreach_sim.control.target_state import Vector3
from armreach_sim.inference.models import AngleModel
from armreach_sim.utils.constants import MODEL_OUTPUT_DIM
from armreach_sim.utils.helpers import rad_to_deg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JointAngles:
    """Desired yaw/pitch for both joints, in radians.

    Attributes:
        theta1: Joint 1 yaw.
        phi1: Joint 1 pitch.
        theta2: Joint 2 yaw.
        phi2: Joint 2 pitch.
    """

    theta1: float
    phi1: float
    theta2: float
    phi2: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.theta1, self.phi1, self.theta2, self.phi2))

    def degrees(self) -> Tuple[float, float, float, float]:
        """Return the four angles converted to degrees."""
        return tuple(rad_to_deg(angle) for angle in self)


class TensorScope:
    """Owns every buffer allocated during one inference call.

    Buffers created through ``tensor`` or registered with ``track`` are
    dropped when the scope exits.  ``live_count`` reports how many buffers
    are held across all open scopes, which must return to its previous
    value once a call finishes.
    """

    _live: int = 0
    _live_lock = threading.Lock()

    def __init__(self) -> None:
        self._buffers: List[np.ndarray] = []

    def __enter__(self) -> "TensorScope":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    def tensor(self, values: Any, dtype: Any = np.float32) -> np.ndarray:
        """Allocate a new buffer owned by this scope."""
        return self.track(np.array(values, dtype=dtype))

    def track(self, buffer: np.ndarray) -> np.ndarray:
        """Hand ownership of an existing buffer to this scope."""
        self._buffers.append(buffer)
        with TensorScope._live_lock:
            TensorScope._live += 1
        return buffer

    def release(self) -> None:
        """Drop every buffer held by this scope."""
        count = len(self._buffers)
        self._buffers.clear()
        with TensorScope._live_lock:
            TensorScope._live -= count

    @classmethod
    def live_count(cls) -> int:
        """Number of buffers currently held by open scopes."""
        with cls._live_lock:
            return cls._live


class AngleInferenceAdapter:
    """Maps a world-frame target position to desired joint angles.

    The model input is ``[[x, -z, y]]``: the model was trained in a z-up
    frame whose y axis points away from the viewer.

    Attributes:
        model: The opaque inference engine.
    """

    def __init__(self, model: AngleModel) -> None:
        self.model = model

    @staticmethod
    def to_model_frame(position: Vector3) -> Tuple[float, float, float]:
        """Return the model-frame coordinates of a world position."""
        return (position.x, -position.z, position.y)

    def infer(self, position: Vector3) -> JointAngles:
        """Run the model for *position*.

        Args:
            position: Target position in world coordinates.

        Returns:
            The four predicted angles, unvalidated.

        Raises:
            ValueError: If the model does not return four values.
        """
        with TensorScope() as scope:
            inputs = scope.tensor([self.to_model_frame(position)])
            outputs = scope.track(np.asarray(self.model.predict(inputs)))
            values = outputs.reshape(-1)
            if values.size != MODEL_OUTPUT_DIM:
                raise ValueError(
                    f"Model returned {values.size} values, expected {MODEL_OUTPUT_DIM}"
                )
            theta1, phi1, theta2, phi2 = (float(v) for v in values)
        return JointAngles(theta1, phi1, theta2, phi2)


class AsyncInferenceAdapter:
    """Runs a slow adapter on a worker with at most one request in flight.

    ``infer`` never blocks.  While a request is pending it returns *None*.
    A finished result is returned only if it was computed for the position
    passed now; a stale result is dropped and a new request submitted.

    Attributes:
        adapter: The synchronous adapter executed on the worker.
        dropped: Number of stale results discarded so far.
    """

    def __init__(
        self,
        adapter: AngleInferenceAdapter,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.adapter = adapter
        self.dropped = 0
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="armreach-infer"
        )
        self._pending: Optional[Tuple[Vector3, Future]] = None

    @property
    def in_flight(self) -> bool:
        """Whether a request has been submitted and not yet consumed."""
        return self._pending is not None

    def infer(self, position: Vector3) -> Optional[JointAngles]:
        """Return fresh angles for *position* if available.

        Args:
            position: Current target position.

        Returns:
            Angles computed for *position*, or *None* when no matching
            result is ready this frame.

        Raises:
            Exception: Whatever the wrapped adapter raised for the request
                that just completed.
        """
        if self._pending is not None:
            requested, future = self._pending
            if not future.done():
                return None
            self._pending = None
            angles = future.result()
            if requested == position:
                return angles
            self.dropped += 1
            logger.debug("Dropped stale inference result for %s", requested)
        self._pending = (position, self._executor.submit(self.adapter.infer, position))
        return None

    def discard(self) -> None:
        """Forget the pending request; its result will never be returned."""
        if self._pending is not None:
            self._pending[1].cancel()
            self._pending = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the pending request finishes.

        Returns:
            True if nothing is pending or the request completed in time.
        """
        if self._pending is None:
            return True
        done, _ = wait_futures([self._pending[1]], timeout=timeout)
        return bool(done)

    def close(self) -> None:
        """Shut the worker down, waiting for any running request."""
        self._executor.shutdown(wait=True)
