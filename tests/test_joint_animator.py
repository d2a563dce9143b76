from __future__ import annotations

import numpy as np
import pytest

from armreach_sim.control.joint_animator import JointAnimator


def test_first_step_moves_toward_desired():
    assert JointAnimator().step(0.0, 0.2) == pytest.approx(0.025)
    assert JointAnimator().step(0.0, -0.2) == pytest.approx(-0.025)


def test_inside_dead_band_is_unchanged():
    animator = JointAnimator()
    for current, desired in [(0.0, 0.0), (0.1, 0.12), (-0.3, -0.349), (1.0, 0.951)]:
        assert animator.step(current, desired) == current


def test_constant_step_regardless_of_gap():
    animator = JointAnimator()
    for gap in [0.05, 0.3, 3.0, 100.0]:
        assert animator.step(0.0, gap) == pytest.approx(0.025)


def test_step_reduces_gap_by_half_threshold_without_overshoot():
    animator = JointAnimator()
    rng = np.random.default_rng(0)
    for current, desired in rng.uniform(-4.0, 4.0, size=(500, 2)):
        gap = abs(current - desired)
        new = animator.step(current, desired)
        if gap >= 0.05:
            assert abs(new - desired) == pytest.approx(gap - 0.025)
            assert np.sign(new - desired) == np.sign(current - desired)
        else:
            assert new == current


def test_settles_in_dead_band_and_holds():
    animator = JointAnimator()
    angle = 0.0
    for _ in range(20):
        angle = animator.step(angle, 0.2)
    assert 0.15 <= angle <= 0.25
    assert abs(angle - 0.2) < 0.05
    settled = angle
    for _ in range(10):
        angle = animator.step(angle, 0.2)
    assert angle == settled


def test_custom_threshold():
    animator = JointAnimator(threshold=0.2)
    assert animator.step_size == pytest.approx(0.1)
    assert animator.step(0.0, 0.15) == 0.0
    assert animator.step(0.0, 1.0) == pytest.approx(0.1)


def test_rejects_non_positive_threshold():
    with pytest.raises(ValueError):
        JointAnimator(threshold=0.0)
