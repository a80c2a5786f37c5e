"""Runge-Kutta 4th order integrator (high accuracy, O(h⁴))."""

import numpy as np
from threebody_sim.physics.body import SystemState
from threebody_sim.physics.force_calculator import ForceEvaluator
from threebody_sim.physics.integrators.base import Integrator


class RK4Integrator(Integrator):
    """Classical Runge-Kutta 4th order method at a fixed step.

    Most accurate per step but costs four force evaluations and is not
    symplectic, so energy slowly decays over very long runs.
    """

    @property
    def name(self) -> str:
        return "rk4"

    @property
    def order(self) -> int:
        return 4

    def step(self, state: SystemState, dt: float, forces: ForceEvaluator) -> None:
        """RK4 step for dr/dt = v, dv/dt = a(r):

        k1_r = v                 k1_v = a(r)
        k2_r = v + k1_v*dt/2     k2_v = a(r + k1_r*dt/2)
        k3_r = v + k2_v*dt/2     k3_v = a(r + k2_r*dt/2)
        k4_r = v + k3_v*dt       k4_v = a(r + k3_r*dt)

        r_new = r + (k1_r + 2*k2_r + 2*k3_r + k4_r)*dt/6
        v_new = v + (k1_v + 2*k2_v + 2*k3_v + k4_v)*dt/6
        """
        r = state.positions.copy()
        v = state.velocities.copy()
        masses = state.masses
        half = 0.5 * dt

        k1_r = v
        k1_v = forces.compute_accelerations(r, masses)

        k2_r = v + k1_v * half
        k2_v = forces.compute_accelerations(self._stage(r, k1_r * half, forces), masses)

        k3_r = v + k2_v * half
        k3_v = forces.compute_accelerations(self._stage(r, k2_r * half, forces), masses)

        k4_r = v + k3_v * dt
        k4_v = forces.compute_accelerations(self._stage(r, k3_r * dt, forces), masses)

        state.positions[...] = self._stage(r, (k1_r + 2.0 * k2_r + 2.0 * k3_r + k4_r) * (dt / 6.0), forces)
        state.velocities[...] = v + (k1_v + 2.0 * k2_v + 2.0 * k3_v + k4_v) * (dt / 6.0)
        state.time += dt

    @staticmethod
    def _stage(r: np.ndarray, shift: np.ndarray, forces: ForceEvaluator) -> np.ndarray:
        """Stage positions r + shift, after checking no pair collides on the way."""
        staged = r + shift
        forces.check_path(r, staged)
        return staged
