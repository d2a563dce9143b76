"""
Per-frame orchestration of target, inference and joint animation.

Each ``frame`` call reads the target, infers desired angles for it and
moves every joint axis one bounded step toward them.  Desired angles are
recomputed every frame, so the joints keep chasing a moving setpoint and
settle inside the animator's dead band rather than on an exact value.

Classes:
    StatusReport: Target position and desired angles of one frame.
    ControlLoop: The per-frame state machine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from armreach_sim.control.joint_animator import JointAnimator
from armreach_sim.control.target_state import TargetState, Vector3
from armreach_sim.inference.adapter import (
    AngleInferenceAdapter,
    AsyncInferenceAdapter,
    JointAngles,
)
from armreach_sim.inference.loader import ModelLoader
from armreach_sim.robots.arm_rig import ArmRig
from armreach_sim.utils.helpers import DEGREE_SIGN

logger = logging.getLogger(__name__)

_ANGLE_LABELS = ("Link 1 Yaw", "Link 1 Pitch", "Link 2 Yaw", "Link 2 Pitch")


@dataclass(frozen=True)
class StatusReport:
    """What the status display shows for one frame.

    Attributes:
        target: Target position used for the frame.
        desired: Instantaneous inferred angles (not the smoothed rotations).
    """

    target: Vector3
    desired: JointAngles

    def format_target(self) -> str:
        """Return the target line, coordinates to two decimals."""
        t = self.target
        return f"Target at x={t.x:.2f}, y={t.y:.2f}, z={t.z:.2f}"

    def format_angles(self) -> str:
        """Return the multi-line joint angle text, degrees to one decimal."""
        lines = [
            f"{label} = {value:.1f}{DEGREE_SIGN}"
            for label, value in zip(_ANGLE_LABELS, self.desired.degrees())
        ]
        return "Joint Angles:\n" + ",\n".join(lines)


StatusListener = Callable[[StatusReport], None]


class ControlLoop:
    """Drives the rig toward the angles inferred for the current target.

    Attributes:
        target: Target position, written by the input handler.
        rig: Arm rig whose rotations this loop advances.
        loader: Model loader gating inference until the model is ready.
        animator: Per-axis stepping function.
        failed_frames: Frames whose angle update was skipped because
            inference raised.
        last_status: Report of the most recent successful frame.
    """

    def __init__(
        self,
        target: TargetState,
        rig: ArmRig,
        loader: ModelLoader,
        animator: Optional[JointAnimator] = None,
        use_async: bool = False,
    ) -> None:
        """Initialise the loop.

        Args:
            target: Shared target state.
            rig: Arm rig to animate.
            loader: Loader providing the model once ready.
            animator: Stepping function; default threshold when *None*.
            use_async: Run inference on a worker with one request in flight.
        """
        self.target = target
        self.rig = rig
        self.loader = loader
        self.animator = animator or JointAnimator()
        self.use_async = use_async
        self.failed_frames = 0
        self.last_status: Optional[StatusReport] = None
        self._adapter: Union[AngleInferenceAdapter, AsyncInferenceAdapter, None] = None
        self._listeners: List[StatusListener] = []
        self._failing = False

    def add_status_listener(self, listener: StatusListener) -> None:
        """Register a callable invoked with each frame's status report."""
        self._listeners.append(listener)

    @property
    def ready(self) -> bool:
        return self.loader.ready

    def _get_adapter(self) -> Union[AngleInferenceAdapter, AsyncInferenceAdapter]:
        """Build the adapter the first time the model is available."""
        if self._adapter is None:
            adapter = AngleInferenceAdapter(self.loader.model)
            self._adapter = AsyncInferenceAdapter(adapter) if self.use_async else adapter
        return self._adapter

    def _infer(self, position: Vector3) -> Optional[JointAngles]:
        """Run inference, converting a failure into a skipped frame."""
        try:
            desired = self._get_adapter().infer(position)
        except Exception:
            self.failed_frames += 1
            if not self._failing:
                logger.exception("Inference failed at %s; skipping frame", position)
            self._failing = True
            return None
        if self._failing and desired is not None:
            logger.info("Inference recovered after %d failed frames", self.failed_frames)
            self._failing = False
        return desired

    def _animate(self, desired: JointAngles) -> None:
        """Step each of the four axes toward its desired angle."""
        for (joint, axis), angle in zip(self.rig.axes(), desired):
            joint.set_axis(axis, self.animator.step(joint.get_axis(axis), angle))

    def frame(self) -> Optional[StatusReport]:
        """Advance the rig by one frame.

        Returns:
            The frame's status report, or *None* when the model is not
            ready or no angles were available this frame.
        """
        if not self.loader.ready:
            return None
        position = self.target.position
        desired = self._infer(position)
        if desired is None:
            return None
        self._animate(desired)
        report = StatusReport(target=position, desired=desired)
        self.last_status = report
        for listener in self._listeners:
            listener(report)
        return report

    def reset(self) -> None:
        """Forget the previous run: status, failure count and pending request."""
        self.last_status = None
        self.failed_frames = 0
        self._failing = False
        if isinstance(self._adapter, AsyncInferenceAdapter):
            self._adapter.discard()

    def close(self) -> None:
        """Release the async worker, if any."""
        if isinstance(self._adapter, AsyncInferenceAdapter):
            self._adapter.close()
