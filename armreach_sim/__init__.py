"""
Arm Reach Simulation.

A simulated two-link robotic arm that follows a keyboard-movable 3-D target.
A pretrained model (or an analytic solver) maps the target position to four
joint angles, and the joints are animated toward them at a bounded rate
every frame.

Modules:
    control: Target state, joint animation, and the per-frame control loop.
    inference: Model backends, the angle adapter, and async model loading.
    robots: The two-joint arm rig and its forward kinematics.
    teleop: Keyboard mapping from key codes to target displacements.
    envs: Gymnasium environment and NumPy renderer.
    visualization: Pygame window with a status HUD.
    utils: Shared constants, logging setup, and helper utilities.
"""

__version__ = "0.1.0"
