"""Tests for preset scenarios."""

import numpy as np
import pytest
from threebody_sim import run
from threebody_sim.exceptions import InvalidConfiguration
from threebody_sim.physics.body import SystemState
from threebody_sim.physics.diagnostics import Diagnostics
from threebody_sim.presets import CircularBinary, EarthMoon, FigureEight, get_preset, list_presets
from threebody_sim.utils.config import SimulationConfig


def test_circular_binary():
    """Test circular binary preset."""
    preset = CircularBinary(mass_1=2e30, mass_2=1e30, separation=1e11)
    bodies = preset.generate()

    assert len(bodies) == 2
    assert preset.name == "binary"
    assert bodies[0].distance_to(bodies[1]) == pytest.approx(1e11)

    state = SystemState.from_bodies(bodies)
    diagnostics = Diagnostics()
    assert np.allclose(diagnostics.center_of_mass(state.positions, state.masses), 0.0, atol=1e-3)
    assert np.allclose(diagnostics.total_momentum(state.velocities, state.masses), 0.0,
                       atol=1e-9 * diagnostics.momentum_scale(state.velocities, state.masses))
    relative_speed = np.linalg.norm(state.velocities[1] - state.velocities[0])
    assert relative_speed == pytest.approx(preset.relative_speed)


def test_kepler_period():
    """Test T = 2π sqrt(d³ / (G M))."""
    preset = CircularBinary(mass_1=1.0, mass_2=3.0, separation=2.0, G=1.0)
    assert preset.period == pytest.approx(2 * np.pi * np.sqrt(8.0 / 4.0))


def test_earth_moon():
    preset = EarthMoon()
    bodies = preset.generate()
    assert preset.name == "earth_moon"
    assert bodies[0].mass == EarthMoon.EARTH_MASS
    assert bodies[1].mass == EarthMoon.MOON_MASS
    # Sidereal month, ~27.3 days
    assert preset.period / 86400.0 == pytest.approx(27.3, rel=0.02)


def test_figure_eight_initial_conditions():
    preset = FigureEight(mass=1.0, length_scale=1.0, G=1.0)
    bodies = preset.generate()

    assert len(bodies) == 3
    assert preset.name == "figure_eight"
    assert np.allclose(bodies[0].position, [0.97000436, -0.24308753, 0.0])
    assert np.allclose(bodies[1].position, [-0.97000436, 0.24308753, 0.0])
    assert np.allclose(bodies[2].velocity, [-0.93240737, -0.86473146, 0.0])


def test_figure_eight_returns_after_one_period():
    """Test the choreography closes after one period."""
    preset = FigureEight(mass=1e30, length_scale=1e11)
    steps = 2000
    config = SimulationConfig(dt=preset.period / steps, step_count=steps, integrator="rk4")
    trajectory = run(preset.generate(), config)

    drift = np.linalg.norm(trajectory[-1].positions - trajectory[0].positions, axis=1)
    assert np.all(drift < 1e-3 * preset.length_scale)


def test_get_preset():
    assert set(list_presets()) == {"binary", "earth_moon", "figure_eight"}
    assert isinstance(get_preset("Figure_Eight"), FigureEight)
    assert get_preset("binary", separation=5e10).separation == 5e10
    with pytest.raises(InvalidConfiguration):
        get_preset("spiral")
