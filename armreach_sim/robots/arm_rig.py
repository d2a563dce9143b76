"""
Two-link arm rig with yaw/pitch joints and forward kinematics.

The rig is a fixed parent chain: joint1 sits at the origin and carries
link1 plus joint2 at the link's tip; joint2 carries link2 and the end
effector.  Each joint has two independent rotation axes (yaw about its
local y axis, pitch about its local z axis).  The renderer consumes the
world positions produced by ``forward_kinematics``.

Classes:
    Joint: One rotatable node of the chain.
    ArmRig: The complete two-joint kinematic tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple

import numpy as np

from armreach_sim.utils.constants import (
    AXIS_NAMES,
    JOINT_NAMES,
    LINK_LENGTHS,
    NUM_JOINTS,
)
from armreach_sim.utils.helpers import joint_rotation

_LINK_AXIS = np.array([0.0, 1.0, 0.0])
_NUM_AXES = NUM_JOINTS * len(AXIS_NAMES)


@dataclass
class Joint:
    """A joint with independent yaw and pitch rotation.

    Attributes:
        name: Identifier used in logs and status output.
        link_length: Length of the link this joint owns.
        yaw: Current rotation about the local y axis (radians).
        pitch: Current rotation about the local z axis (radians).
    """

    name: str
    link_length: float
    yaw: float = 0.0
    pitch: float = 0.0

    def get_axis(self, axis: str) -> float:
        """Return the current rotation of *axis* (``'yaw'`` or ``'pitch'``)."""
        _validate_axis(axis)
        return getattr(self, axis)

    def set_axis(self, axis: str, value: float) -> None:
        """Overwrite the current rotation of *axis*."""
        _validate_axis(axis)
        setattr(self, axis, float(value))

    def rotation_matrix(self) -> np.ndarray:
        """Return the joint's local 3x3 rotation."""
        return joint_rotation(self.yaw, self.pitch)


def _validate_axis(axis: str) -> None:
    """Raise if *axis* is not a joint rotation axis.

    Raises:
        ValueError: When *axis* is unknown.
    """
    if axis not in AXIS_NAMES:
        raise ValueError(f"Unknown joint axis '{axis}'. Choose from {list(AXIS_NAMES)}")


@dataclass
class ArmRig:
    """The arm's kinematic hierarchy and current joint rotations.

    Attributes:
        joint1: Proximal joint, attached to the world origin.
        joint2: Distal joint, attached to the tip of joint1's link.
    """

    joint1: Joint = field(default_factory=lambda: Joint(JOINT_NAMES[0], LINK_LENGTHS[0]))
    joint2: Joint = field(default_factory=lambda: Joint(JOINT_NAMES[1], LINK_LENGTHS[1]))

    @classmethod
    def with_link_lengths(cls, link_lengths: Tuple[float, float]) -> "ArmRig":
        """Build a rig with custom link lengths.

        Args:
            link_lengths: Lengths of link1 and link2.

        Returns:
            A rig with all rotations at zero.
        """
        first, second = link_lengths
        return cls(
            joint1=Joint(JOINT_NAMES[0], float(first)),
            joint2=Joint(JOINT_NAMES[1], float(second)),
        )

    # ------------------------------------------------------------------
    # Rotation state
    # ------------------------------------------------------------------

    @property
    def joints(self) -> Tuple[Joint, Joint]:
        """Joints in chain order (proximal first)."""
        return (self.joint1, self.joint2)

    def axes(self) -> Iterator[Tuple[Joint, str]]:
        """Yield ``(joint, axis)`` in the order joint1-yaw, joint1-pitch,
        joint2-yaw, joint2-pitch."""
        for joint in self.joints:
            for axis in AXIS_NAMES:
                yield joint, axis

    def get_rotations(self) -> np.ndarray:
        """Return the four current rotations as a float64 array."""
        return np.array([joint.get_axis(axis) for joint, axis in self.axes()])

    def set_rotations(self, rotations: np.ndarray) -> None:
        """Overwrite all four rotations (used by resets and tests).

        Args:
            rotations: Sequence of four angles in ``axes()`` order.
        """
        values = list(rotations)
        if len(values) != _NUM_AXES:
            raise ValueError(f"Expected {_NUM_AXES} rotations, got {len(values)}")
        for (joint, axis), value in zip(self.axes(), values):
            joint.set_axis(axis, value)

    def reset(self) -> None:
        """Zero every rotation."""
        self.set_rotations(np.zeros(_NUM_AXES))

    # ------------------------------------------------------------------
    # Forward kinematics
    # ------------------------------------------------------------------

    def forward_kinematics(self) -> Dict[str, np.ndarray]:
        """Compute world positions of both joints and the end effector.

        Returns:
            Mapping with ``'joint1'``, ``'joint2'`` and ``'end_effector'``
            keys, each a float64 array of shape ``(3,)``.
        """
        r1 = self.joint1.rotation_matrix()
        r12 = r1 @ self.joint2.rotation_matrix()
        base = np.zeros(3)
        elbow = base + r1 @ (_LINK_AXIS * self.joint1.link_length)
        hand = elbow + r12 @ (_LINK_AXIS * self.joint2.link_length)
        return {"joint1": base, "joint2": elbow, "end_effector": hand}

    def end_effector(self) -> np.ndarray:
        """Return the end-effector world position."""
        return self.forward_kinematics()["end_effector"]
