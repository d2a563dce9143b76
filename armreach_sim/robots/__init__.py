"""
Two-link arm rig for simulation.

Provides the joint hierarchy, the current rotation state of each joint
axis, and forward kinematics for the renderer.
"""
