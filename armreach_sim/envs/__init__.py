"""
Gymnasium-compatible simulation environment for the arm-reaching task.

Importing this package registers ``ArmReach-Sim-v0`` with Gymnasium.
"""

import gymnasium as gym

from armreach_sim.envs.configs import ReachSimConfig
from armreach_sim.envs.target_reach import ArmRenderer, TargetReachEnv

ENV_ID = "ArmReach-Sim-v0"

if ENV_ID not in gym.registry:
    gym.register(id=ENV_ID, entry_point="armreach_sim.envs.target_reach:TargetReachEnv")

__all__ = [
    "ArmRenderer",
    "ENV_ID",
    "ReachSimConfig",
    "TargetReachEnv",
]
