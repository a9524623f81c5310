"""
Arm Stabilization Simulation.

A simulated articulated arm whose end-effector is held at an anchor point
while a sinusoidal disturbance shakes the arm's mount.  Every tick the joint
angles are re-solved against the anchor and low-pass filtered so the arm
compensates smoothly instead of snapping between solutions.

Modules:
    robots: Kinematics solvers and the ``KinematicChain`` facade.
    control: Disturbance generator, stabilization loop, and test session.
    envs: Gymnasium-compatible environment wrapping the control loop.
    teleop: Rate-limited manual parameter control and keyboard hot-keys.
    visualization: Real-time rendering with a status HUD.
    utils: Shared constants and small numeric helpers.
"""

__version__ = "0.1.0"
