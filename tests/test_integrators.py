"""Tests for numerical integrators."""

import numpy as np
import pytest
from threebody_sim.exceptions import InvalidConfiguration, SingularForce
from threebody_sim.physics.body import SystemState
from threebody_sim.physics.diagnostics import Diagnostics
from threebody_sim.physics.force_calculator import ForceEvaluator
from threebody_sim.physics.integrators import (
    EulerIntegrator, VelocityVerletIntegrator, RK4Integrator, get_integrator, list_integrators
)


class CountingForces(ForceEvaluator):
    """ForceEvaluator that counts evaluations."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = 0

    def compute_accelerations(self, positions, masses):
        self.calls += 1
        return super().compute_accelerations(positions, masses)


def _eccentric_binary():
    """Unit-mass binary (G = 1) launched at 80% of circular speed."""
    v = 0.8 * np.sqrt(2.0 / 1.0) / 2.0
    return SystemState(
        [1.0, 1.0],
        [[-0.5, 0.0, 0.0], [0.5, 0.0, 0.0]],
        [[0.0, -v, 0.0], [0.0, v, 0.0]],
    )


def _max_energy_error(integrator, dt, t_end):
    state = _eccentric_binary()
    forces = ForceEvaluator(G=1.0)
    diagnostics = Diagnostics(G=1.0)
    E0 = diagnostics.compute_energies(state.positions, state.velocities, state.masses)[2]
    worst = 0.0
    for _ in range(int(round(t_end / dt))):
        integrator.step(state, dt, forces)
        E = diagnostics.compute_energies(state.positions, state.velocities, state.masses)[2]
        worst = max(worst, abs(E - E0) / abs(E0))
    return worst


def test_integrator_properties():
    """Test names and orders."""
    assert EulerIntegrator().name == "euler"
    assert EulerIntegrator().order == 1
    assert VelocityVerletIntegrator().name == "verlet"
    assert VelocityVerletIntegrator().order == 2
    assert RK4Integrator().name == "rk4"
    assert RK4Integrator().order == 4


def test_get_integrator():
    """Test lookup by name returns fresh instances."""
    assert set(list_integrators()) == {"verlet", "euler", "rk4"}
    assert isinstance(get_integrator("Verlet"), VelocityVerletIntegrator)
    assert get_integrator("rk4") is not get_integrator("rk4")
    with pytest.raises(InvalidConfiguration):
        get_integrator("leapfrog")


@pytest.mark.parametrize("integrator", [EulerIntegrator(), VelocityVerletIntegrator(), RK4Integrator()])
def test_step_advances_state_in_place(integrator):
    """Test a step moves bodies and advances time by dt."""
    state = _eccentric_binary()
    positions = state.positions
    before = positions.copy()

    integrator.step(state, 0.01, ForceEvaluator(G=1.0))

    assert state.positions is positions
    assert not np.allclose(state.positions, before)
    assert state.time == pytest.approx(0.01)


def test_verlet_free_particle_is_exact():
    """Test bodies too far apart to interact move in straight lines."""
    state = SystemState(
        [1.0, 1.0],
        [[0.0, 0.0, 0.0], [1e30, 0.0, 0.0]],
        [[1.0, 2.0, 3.0], [0.0, 0.0, 0.0]],
    )
    integrator = VelocityVerletIntegrator()
    for _ in range(10):
        integrator.step(state, 0.5, ForceEvaluator(G=1.0))
    assert np.allclose(state.positions[0], [5.0, 10.0, 15.0])
    assert np.allclose(state.velocities[0], [1.0, 2.0, 3.0])


def test_verlet_reuses_accelerations():
    """Test Verlet needs one evaluation per step after the first."""
    state = _eccentric_binary()
    forces = CountingForces(G=1.0)
    integrator = VelocityVerletIntegrator()

    for _ in range(10):
        integrator.step(state, 0.01, forces)
    assert forces.calls == 11

    # A different state must not reuse the cache
    integrator.step(_eccentric_binary(), 0.01, forces)
    assert forces.calls == 13

    integrator.reset()
    integrator.step(state, 0.01, forces)
    assert forces.calls == 15


def test_rk4_uses_four_evaluations():
    state = _eccentric_binary()
    forces = CountingForces(G=1.0)
    RK4Integrator().step(state, 0.01, forces)
    assert forces.calls == 4


def test_verlet_energy_error_second_order():
    """Test halving dt cuts the Verlet energy error by about four."""
    t_end = 3.0
    coarse = _max_energy_error(VelocityVerletIntegrator(), 0.01, t_end)
    fine = _max_energy_error(VelocityVerletIntegrator(), 0.005, t_end)
    assert fine < coarse
    assert coarse / fine > 3.0


def test_euler_drifts_more_than_verlet():
    t_end = 3.0
    euler = _max_energy_error(EulerIntegrator(), 0.01, t_end)
    verlet = _max_energy_error(VelocityVerletIntegrator(), 0.01, t_end)
    assert euler > 10 * verlet


def test_rk4_more_accurate_than_verlet():
    t_end = 3.0
    rk4 = _max_energy_error(RK4Integrator(), 0.01, t_end)
    verlet = _max_energy_error(VelocityVerletIntegrator(), 0.01, t_end)
    assert rk4 < verlet


def test_singular_force_propagates_from_step(infall_bodies):
    """Test a Verlet step that lands both bodies together raises before moving them."""
    state = SystemState.from_bodies(infall_bodies)
    with pytest.raises(SingularForce) as excinfo:
        VelocityVerletIntegrator().step(state, 1.0, ForceEvaluator(G=1.0))
    assert excinfo.value.bodies == (0, 1)
    assert excinfo.value.separation == 0.0
    assert np.allclose(state.positions[:, 0], [-0.5, 0.5])
    assert state.time == 0.0
