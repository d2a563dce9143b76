#!/usr/bin/env python3
"""
Main entry point for the Arm Reach Simulation.

Moves a target point with the keyboard and watches a two-link arm chase
it.  Run directly with ``python run_sim.py`` or through the
``armreach-sim`` console script.

Usage examples::

    # Pygame window, arrows/WASD move the target, Q/E raise/lower it
    python run_sim.py --mode interactive

    # Same loop driven from the terminal (w/a/s/d/q/e, x to quit)
    python run_sim.py --mode terminal

    # Step the Gymnasium env with a scripted key sequence
    python run_sim.py --mode env --steps 300

    # Use a pretrained MLP instead of the analytic solver
    python run_sim.py --backend mlp --model-path ./model.npz
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

import gymnasium as gym

from armreach_sim.envs import ENV_ID
from armreach_sim.envs.configs import ReachSimConfig
from armreach_sim.envs.target_reach import TargetReachEnv
from armreach_sim.utils.constants import ACTION_KEYS
from armreach_sim.utils.logging_config import setup_logging
from armreach_sim.visualization.visualizer import SimVisualizer

# Seconds to wait for the model before the terminal/env modes give up
_LOAD_TIMEOUT = 30.0

# ======================================================================
# Configuration builders
# ======================================================================


def _build_config(args: argparse.Namespace) -> ReachSimConfig:
    """Construct a ``ReachSimConfig`` from parsed CLI arguments.

    Args:
        args: Namespace from ``argparse``.

    Returns:
        A validated ``ReachSimConfig``.
    """
    return ReachSimConfig(
        fps=args.fps,
        episode_length=args.steps,
        observation_width=args.width,
        observation_height=args.height,
        backend=args.backend,
        model_path=args.model_path,
        async_inference=args.async_inference,
        seed=args.seed,
    )


# ======================================================================
# Mode runners
# ======================================================================


def _run_interactive(cfg: ReachSimConfig, args: argparse.Namespace) -> None:
    """Open a Pygame window and animate until it is closed.

    Args:
        cfg: Simulation configuration.
        args: Parsed CLI arguments.
    """
    env = TargetReachEnv(cfg)
    viz = SimVisualizer(
        width=cfg.observation_width,
        height=cfg.observation_height,
        fps=cfg.fps,
        teleop=env.teleop,
    )
    print("Interactive mode: arrows/WASD move the target, Q/E move it up/down.")
    alive = True
    try:
        while alive:
            env.loop.frame()
            status = env.loop.last_status if env.loop.ready else None
            alive = viz.render_frame(env.render(), status)
    finally:
        viz.close()
        env.close()
    print(f"Closed after {env.loop.failed_frames} failed inference frames.")


def _wait_for_model(env: TargetReachEnv) -> bool:
    """Block until the model is ready, reporting failures.

    Returns:
        True if the model loaded.
    """
    print("Waiting for model ...")
    if env.loop.loader.wait(_LOAD_TIMEOUT):
        return True
    print(f"Model did not load ({env.loop.loader.name}).", file=sys.stderr)
    return False


def _run_terminal(cfg: ReachSimConfig, args: argparse.Namespace) -> None:
    """Read key characters from stdin and animate one second per line.

    Args:
        cfg: Simulation configuration.
        args: Parsed CLI arguments.
    """
    env = TargetReachEnv(cfg)
    if not _wait_for_model(env):
        env.close()
        return
    print("Terminal mode: w/s forward/back, a/d left/right, q/e up/down, x quits.")
    try:
        for line in sys.stdin:
            alive = all(env.teleop.process_terminal_input(ch) for ch in line.strip())
            if not alive:
                break
            for _ in range(cfg.fps):
                env.loop.frame()
            status = env.loop.last_status
            if status is not None:
                print(status.format_target())
                print(status.format_angles())
    finally:
        env.close()


def _run_env(cfg: ReachSimConfig, args: argparse.Namespace) -> None:
    """Step the registered Gymnasium env through a scripted key sequence.

    Args:
        cfg: Simulation configuration.
        args: Parsed CLI arguments.
    """
    env = gym.make(ENV_ID, cfg=cfg, **cfg.gym_kwargs)
    if not _wait_for_model(env.unwrapped):
        env.close()
        return
    obs, info = env.reset(seed=cfg.seed)
    total_reward = 0.0
    reward = 0.0
    for step in range(cfg.episode_length):
        # Press each key once every 30 frames, otherwise idle
        action = (step // 30) % len(ACTION_KEYS) if step % 30 == 0 else 0
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += reward
        if terminated or truncated:
            break
    env.close()
    print(f"Final target: {obs['target']}, end effector: {obs['end_effector']}")
    print(f"Final reward: {reward:.3f} | Mean reward: {total_reward / cfg.episode_length:.3f}")
    if info["status"]:
        print(info["status"])


# ======================================================================
# CLI
# ======================================================================


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed ``argparse.Namespace``.
    """
    parser = argparse.ArgumentParser(description="Arm Reach Simulation")
    parser.add_argument(
        "--mode", choices=["interactive", "terminal", "env"], default="interactive"
    )
    parser.add_argument("--backend", choices=["analytic", "mlp"], default="analytic")
    parser.add_argument("--model-path", default="model.npz")
    parser.add_argument("--async-inference", action="store_true")
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--width", type=int, default=640)
    parser.add_argument("--height", type=int, default=480)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    return parser.parse_args(argv)


# Mapping from mode name to runner function
_MODE_DISPATCH = {
    "interactive": _run_interactive,
    "terminal": _run_terminal,
    "env": _run_env,
}


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse arguments, configure logging and run the selected mode."""
    args = _parse_args(argv)
    setup_logging(getattr(logging, args.log_level.upper(), logging.INFO), args.log_file)
    cfg = _build_config(args)
    print(f"Mode: {args.mode} | Backend: {cfg.backend} | fps={cfg.fps}")
    print("-" * 60)
    _MODE_DISPATCH[args.mode](cfg, args)


if __name__ == "__main__":
    main()
