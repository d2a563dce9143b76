from __future__ import annotations

import gymnasium as gym
import numpy as np
import pytest

from armreach_sim.control.target_state import Vector3
from armreach_sim.envs import ENV_ID, ArmRenderer, ReachSimConfig, TargetReachEnv
from armreach_sim.inference.loader import ModelLoader
from armreach_sim.inference.models import AnalyticIKModel
from armreach_sim.robots.arm_rig import ArmRig
from armreach_sim.utils.constants import COLOR_BACKGROUND, COLOR_TARGET


def _small_config(**overrides) -> ReachSimConfig:
    values = dict(observation_width=64, observation_height=48, episode_length=5)
    values.update(overrides)
    return ReachSimConfig(**values)


@pytest.fixture
def env():
    environment = TargetReachEnv(
        _small_config(), loader=ModelLoader.from_model(AnalyticIKModel())
    )
    yield environment
    environment.close()


def test_reset_observation(env):
    obs, info = env.reset(seed=0)
    assert set(obs) == {"target", "joint_rotations", "desired_angles", "end_effector"}
    assert obs["target"] == pytest.approx([0.3, 0.6, 0.9])
    assert obs["joint_rotations"] == pytest.approx([0.0] * 4)
    assert all(arr.dtype == np.float32 for arr in obs.values())
    assert info["model_ready"]
    assert env.observation_space.contains(obs)


def test_step_applies_key_and_animates(env):
    env.reset()
    obs, reward, terminated, truncated, info = env.step(4)
    assert obs["target"] == pytest.approx([0.4, 0.6, 0.9])
    assert np.any(obs["joint_rotations"] != 0.0)
    assert reward < 0.0
    assert not terminated
    assert not truncated
    assert info["status"].startswith("Target at x=0.40")


def test_noop_action_keeps_target(env):
    env.reset()
    obs, *_ = env.step(0)
    assert obs["target"] == pytest.approx([0.3, 0.6, 0.9])


def test_truncates_after_episode_length(env):
    env.reset()
    truncated = False
    for _ in range(5):
        *_, truncated, _ = env.step(0)
    assert truncated


def test_reward_improves_as_arm_reaches(env):
    env.reset()
    _, first, *_ = env.step(0)
    for _ in range(200):
        _, last, *_ = env.step(0)
    assert last > first
    assert last > -0.25


def test_render_frame(env):
    env.reset()
    frame = env.render()
    assert frame.shape == (48, 64, 3)
    assert frame.dtype == np.uint8
    assert (frame == COLOR_TARGET).all(axis=-1).any()
    assert (frame == COLOR_BACKGROUND).all(axis=-1).any()


def test_renderer_skips_points_behind_camera():
    renderer = ArmRenderer(32, 24)
    frame = renderer.render(ArmRig(), Vector3(0.0, 0.0, 5.0))
    assert not (frame == COLOR_TARGET).all(axis=-1).any()


def test_unready_env_reports_and_holds():
    loader = ModelLoader(AnalyticIKModel)
    environment = TargetReachEnv(_small_config(), loader=loader)
    obs, info = environment.reset()
    obs, *_, info = environment.step(0)
    assert not info["model_ready"]
    assert info["status"] is None
    assert obs["joint_rotations"] == pytest.approx([0.0] * 4)


def test_gym_make_registered_env():
    environment = gym.make(
        ENV_ID,
        cfg=_small_config(),
        loader=ModelLoader.from_model(AnalyticIKModel()),
    )
    obs, _ = environment.reset(seed=1)
    obs, reward, terminated, truncated, _ = environment.step(environment.action_space.sample())
    assert isinstance(reward, float)
    assert environment.observation_space.contains(obs)
    environment.close()


@pytest.mark.parametrize(
    "overrides",
    [{"backend": "tfjs"}, {"render_mode": "ansi"}, {"fps": 0}, {"threshold": -1.0}],
)
def test_config_validation(overrides):
    with pytest.raises(ValueError):
        ReachSimConfig(**overrides)


def test_config_gym_kwargs():
    cfg = ReachSimConfig(episode_length=42)
    assert cfg.gym_kwargs == {"render_mode": "rgb_array", "max_episode_steps": 42}
    assert cfg.env_type == "ArmReach-Sim-v0"


def test_reset_forgets_previous_episode_status(env):
    env.reset()
    for _ in range(10):
        _, _, _, _, info = env.step(4)
    assert info["status"].startswith("Target at x=1.30")
    obs, info = env.reset()
    assert obs["target"] == pytest.approx([0.3, 0.6, 0.9])
    assert obs["desired_angles"] == pytest.approx([0.0] * 4)
    assert info["status"] is None
    assert info["failed_frames"] == 0
    assert env.loop.last_status is None


def test_render_fps_follows_config():
    environment = TargetReachEnv(
        _small_config(fps=24), loader=ModelLoader.from_model(AnalyticIKModel())
    )
    try:
        assert environment.metadata["render_fps"] == 24
        assert TargetReachEnv.metadata["render_fps"] == 60
    finally:
        environment.close()
