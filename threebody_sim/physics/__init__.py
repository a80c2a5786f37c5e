"""Physics engine for N-body simulations."""

from threebody_sim.physics.body import Body, SystemState
from threebody_sim.physics.force_calculator import ForceEvaluator, GRAVITATIONAL_CONSTANT
from threebody_sim.physics.trajectory import Trajectory, TrajectoryRecord
from threebody_sim.physics.diagnostics import Diagnostics
from threebody_sim.physics.simulator import Simulator, SimulationStatus, run

__all__ = [
    "Body",
    "SystemState",
    "ForceEvaluator",
    "GRAVITATIONAL_CONSTANT",
    "Trajectory",
    "TrajectoryRecord",
    "Diagnostics",
    "Simulator",
    "SimulationStatus",
    "run",
]
