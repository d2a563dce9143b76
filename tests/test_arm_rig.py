from __future__ import annotations

import math

import numpy as np
import pytest

from armreach_sim.control.target_state import Vector3
from armreach_sim.inference.adapter import AngleInferenceAdapter
from armreach_sim.inference.models import AnalyticIKModel
from armreach_sim.robots.arm_rig import ArmRig


def test_zero_pose_points_straight_up(rig):
    frames = rig.forward_kinematics()
    assert frames["joint1"] == pytest.approx([0.0, 0.0, 0.0])
    assert frames["joint2"] == pytest.approx([0.0, 1.0, 0.0])
    assert frames["end_effector"] == pytest.approx([0.0, 2.0, 0.0])


def test_pitch_tilts_toward_negative_x(rig):
    rig.joint1.pitch = math.pi / 2
    assert rig.end_effector() == pytest.approx([-2.0, 0.0, 0.0], abs=1e-9)


def test_yaw_swings_pitched_arm(rig):
    rig.joint1.yaw = math.pi / 2
    rig.joint1.pitch = math.pi / 2
    frames = rig.forward_kinematics()
    assert frames["joint2"] == pytest.approx([0.0, 0.0, 1.0], abs=1e-9)
    assert frames["end_effector"] == pytest.approx([0.0, 0.0, 2.0], abs=1e-9)


def test_child_joint_inherits_parent_rotation(rig):
    rig.joint1.pitch = math.pi / 2
    rig.joint2.pitch = -math.pi / 2
    assert rig.end_effector() == pytest.approx([-1.0, 1.0, 0.0], abs=1e-9)


def test_axes_order_and_rotation_roundtrip(rig):
    names = [(joint.name, axis) for joint, axis in rig.axes()]
    assert names == [
        ("joint1", "yaw"),
        ("joint1", "pitch"),
        ("joint2", "yaw"),
        ("joint2", "pitch"),
    ]
    rig.set_rotations([0.1, 0.2, 0.3, 0.4])
    assert rig.get_rotations() == pytest.approx([0.1, 0.2, 0.3, 0.4])
    rig.reset()
    assert rig.get_rotations() == pytest.approx([0.0] * 4)


def test_invalid_axis_and_rotation_count(rig):
    with pytest.raises(ValueError):
        rig.joint1.get_axis("roll")
    with pytest.raises(ValueError):
        rig.set_rotations([0.0, 0.0])


def test_custom_link_lengths():
    rig = ArmRig.with_link_lengths((0.5, 2.0))
    assert rig.end_effector() == pytest.approx([0.0, 2.5, 0.0])


@pytest.mark.parametrize(
    "point",
    [(0.3, 0.6, 0.9), (0.5, 1.2, -0.4), (-0.7, 0.3, 0.2), (0.0, 1.5, 0.0), (1.0, -0.5, 0.5)],
)
def test_analytic_solution_reaches_target(rig, point):
    angles = AngleInferenceAdapter(AnalyticIKModel()).infer(Vector3(*point))
    rig.set_rotations(list(angles))
    assert rig.end_effector() == pytest.approx(point, abs=1e-4)


def test_analytic_solution_stretches_toward_unreachable_target(rig):
    angles = AngleInferenceAdapter(AnalyticIKModel()).infer(Vector3(3.0, 0.0, 0.0))
    rig.set_rotations(list(angles))
    assert rig.end_effector() == pytest.approx([2.0, 0.0, 0.0], abs=1e-4)


def test_analytic_solution_respects_link_lengths():
    rig = ArmRig.with_link_lengths((0.6, 0.8))
    model = AnalyticIKModel((0.6, 0.8))
    point = (0.4, 0.7, -0.3)
    rig.set_rotations(list(AngleInferenceAdapter(model).infer(Vector3(*point))))
    assert rig.end_effector() == pytest.approx(point, abs=1e-4)


def test_analytic_output_shape():
    out = AnalyticIKModel().predict(np.array([[0.3, -0.9, 0.6]], dtype=np.float32))
    assert out.shape == (1, 4)
    assert out.dtype == np.float32
    assert out[0, 2] == 0.0
