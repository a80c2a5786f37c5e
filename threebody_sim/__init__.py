"""
Three-Body Simulator - Newtonian N-body integration for a handful of bodies.

Features:
- Velocity Verlet (default), Euler and RK4 fixed-step integrators
- Vectorized, pairwise and thread-parallel force evaluation with softening
- Trajectory recording with CSV export
- INI/JSON/YAML initial conditions and built-in presets
- matplotlib 3D viewer with GIF export
- CLI interface
"""

__version__ = "0.1.0"

from threebody_sim.physics.body import Body, SystemState
from threebody_sim.physics.simulator import Simulator, SimulationStatus, run
from threebody_sim.physics.trajectory import Trajectory, TrajectoryRecord
from threebody_sim.utils.config import SimulationConfig, load_config
from threebody_sim.exceptions import SimulationError, InvalidConfiguration, SingularForce, Cancelled

__all__ = [
    "Body",
    "SystemState",
    "Simulator",
    "SimulationStatus",
    "run",
    "Trajectory",
    "TrajectoryRecord",
    "SimulationConfig",
    "load_config",
    "SimulationError",
    "InvalidConfiguration",
    "SingularForce",
    "Cancelled",
]
