"""Trajectory visualization."""

from threebody_sim.render.viewer import TrajectoryViewer, camera_target

__all__ = ["TrajectoryViewer", "camera_target"]
