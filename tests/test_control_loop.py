from __future__ import annotations

import logging
import threading

import numpy as np
import pytest

from armreach_sim.control.control_loop import ControlLoop, StatusReport
from armreach_sim.control.target_state import Vector3
from armreach_sim.inference.adapter import JointAngles, TensorScope
from armreach_sim.inference.loader import ModelLoader
from armreach_sim.teleop.keyboard_teleop import KeyboardTeleop
from conftest import FailingModel, GatedModel, RecordingModel


def test_frame_steps_every_axis(target, rig, ready_loader):
    loop = ControlLoop(target, rig, ready_loader)
    report = loop.frame()
    assert report is not None
    assert rig.get_rotations() == pytest.approx([0.025, -0.025, 0.025, 0.0])


def test_frame_infers_for_current_target(target, rig, ready_loader, recording_model):
    loop = ControlLoop(target, rig, ready_loader)
    KeyboardTeleop(target).handle_code("KeyD")
    loop.frame()
    assert recording_model.calls[-1] == [pytest.approx([0.4, -0.9, 0.6])]


def test_desired_angles_recomputed_each_frame(target, rig, ready_loader, recording_model):
    loop = ControlLoop(target, rig, ready_loader)
    for _ in range(5):
        loop.frame()
    assert len(recording_model.calls) == 5


def test_report_carries_desired_not_smoothed_angles(target, rig, ready_loader):
    loop = ControlLoop(target, rig, ready_loader)
    report = loop.frame()
    assert list(report.desired) == pytest.approx([0.2, -0.2, 0.1, 0.0])
    assert report.target.as_tuple() == pytest.approx((0.3, 0.6, 0.9))
    assert loop.last_status is report


def test_converges_into_dead_band(target, rig, ready_loader):
    loop = ControlLoop(target, rig, ready_loader)
    for _ in range(40):
        loop.frame()
    desired = np.array([0.2, -0.2, 0.1, 0.0])
    assert np.all(np.abs(rig.get_rotations() - desired) < 0.05)


def test_not_ready_leaves_rig_untouched(target, rig, recording_model):
    gate = threading.Event()

    def slow_load():
        gate.wait(timeout=5.0)
        return recording_model

    loader = ModelLoader(slow_load).start()
    loop = ControlLoop(target, rig, loader)
    rig.set_rotations([0.5, -0.1, 0.3, 0.2])
    for _ in range(10):
        assert loop.frame() is None
    assert rig.get_rotations() == pytest.approx([0.5, -0.1, 0.3, 0.2])
    assert recording_model.calls == []

    gate.set()
    assert loader.wait(timeout=5.0)
    assert loop.frame() is not None
    assert rig.get_rotations() != pytest.approx([0.5, -0.1, 0.3, 0.2])


def test_failed_inference_skips_frame(target, rig, caplog):
    loop = ControlLoop(target, rig, ModelLoader.from_model(FailingModel()))
    before = TensorScope.live_count()
    with caplog.at_level(logging.ERROR, logger="armreach_sim.control.control_loop"):
        assert loop.frame() is None
        assert loop.frame() is None
    assert loop.failed_frames == 2
    assert rig.get_rotations() == pytest.approx([0.0, 0.0, 0.0, 0.0])
    assert TensorScope.live_count() == before
    failures = [r for r in caplog.records if "Inference failed" in r.getMessage()]
    assert len(failures) == 1


def test_status_listeners_receive_reports(target, rig, ready_loader):
    loop = ControlLoop(target, rig, ready_loader)
    seen = []
    loop.add_status_listener(seen.append)
    loop.frame()
    loop.frame()
    assert len(seen) == 2
    assert all(isinstance(report, StatusReport) for report in seen)


def test_async_loop_skips_until_result_arrives(target, rig, ready_loader):
    loop = ControlLoop(target, rig, ready_loader, use_async=True)
    try:
        assert loop.frame() is None
        assert rig.get_rotations() == pytest.approx([0.0] * 4)
        loop._adapter.wait(timeout=5.0)
        assert loop.frame() is not None
        assert rig.get_rotations() == pytest.approx([0.025, -0.025, 0.025, 0.0])
    finally:
        loop.close()


def test_reset_clears_status_and_failure_streak(target, rig, ready_loader, caplog):
    loop = ControlLoop(target, rig, ready_loader)
    assert loop.frame() is not None
    loop.reset()
    assert loop.last_status is None

    failing = ControlLoop(target, rig, ModelLoader.from_model(FailingModel()))
    with caplog.at_level(logging.ERROR, logger="armreach_sim.control.control_loop"):
        failing.frame()
        failing.reset()
        failing.frame()
    assert failing.failed_frames == 1
    failures = [r for r in caplog.records if "Inference failed" in r.getMessage()]
    assert len(failures) == 2


def test_reset_drops_pending_async_request(target, rig):
    model = GatedModel()
    loop = ControlLoop(target, rig, ModelLoader.from_model(model), use_async=True)
    try:
        assert loop.frame() is None
        assert loop._adapter.in_flight
        loop.reset()
        assert not loop._adapter.in_flight
    finally:
        model.gate.set()
        loop.close()

def test_status_text_format():
    report = StatusReport(
        target=Vector3(0.3, 0.6, 0.9),
        desired=JointAngles(np.pi / 2, 0.0, -np.pi, 0.1),
    )
    assert report.format_target() == "Target at x=0.30, y=0.60, z=0.90"
    assert report.format_angles() == (
        "Joint Angles:\n"
        "Link 1 Yaw = 90.0°,\n"
        "Link 1 Pitch = 0.0°,\n"
        "Link 2 Yaw = -180.0°,\n"
        "Link 2 Pitch = 5.7°"
    )
