"""I/O utilities for trajectory export."""

from threebody_sim.io.gif_exporter import GIFExporter
from threebody_sim.io.trajectory_io import write_trajectory_csv, load_trajectory_csv

__all__ = ["GIFExporter", "write_trajectory_csv", "load_trajectory_csv"]
