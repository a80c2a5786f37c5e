"""Euler method integrator (baseline, O(h) accuracy)."""

from threebody_sim.physics.body import SystemState
from threebody_sim.physics.force_calculator import ForceEvaluator
from threebody_sim.physics.integrators.base import Integrator


class EulerIntegrator(Integrator):
    """Explicit Euler method - simple first-order integrator.

    Not symplectic: orbits spiral outward and energy drifts steadily.
    Kept as a baseline for comparison against Verlet.
    """

    @property
    def name(self) -> str:
        return "euler"

    @property
    def order(self) -> int:
        return 1

    def step(self, state: SystemState, dt: float, forces: ForceEvaluator) -> None:
        """Euler step: v_new = v + a*dt, r_new = r + v*dt."""
        accelerations = forces.compute_accelerations(state.positions, state.masses)

        # Position update uses the old velocity
        new_positions = state.positions + state.velocities * dt
        forces.check_path(state.positions, new_positions)
        state.velocities += accelerations * dt
        state.positions[...] = new_positions
        state.time += dt
