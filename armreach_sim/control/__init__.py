"""
Target state, joint animation and the per-frame control loop.

The control loop reads the target position, asks the inference adapter for
desired joint angles, and advances each joint axis a bounded step toward
them every frame.
"""
