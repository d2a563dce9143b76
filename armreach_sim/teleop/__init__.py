"""
Keyboard teleoperation of the target position.
"""
