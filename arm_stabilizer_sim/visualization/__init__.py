"""
Real-time visualization for the stabilization simulator.

Provides a Pygame window that shows rendered frames with a HUD of joint
angles, solve status, and test-session state.
"""
