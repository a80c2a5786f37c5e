"""Figure-eight three-body choreography preset."""

from typing import List
import numpy as np
from threebody_sim.physics.body import Body
from threebody_sim.physics.force_calculator import GRAVITATIONAL_CONSTANT
from threebody_sim.presets.base import Preset, to_center_of_mass_frame

# Chenciner-Montgomery initial conditions for G = m = 1
_X1 = np.array([0.97000436, -0.24308753, 0.0])
_V3 = np.array([-0.93240737, -0.86473146, 0.0])
_PERIOD = 6.32591398


class FigureEight(Preset):
    """Three equal masses chasing each other along a figure-eight.

    The dimensionless solution is scaled by a length L and a mass m; the
    velocity unit is sqrt(G m / L) and the time unit L / sqrt(G m / L).
    """

    def __init__(
        self,
        mass: float = 1e30,
        length_scale: float = 1e11,
        G: float = GRAVITATIONAL_CONSTANT
    ):
        """Initialize figure-eight preset.

        Args:
            mass: Mass of each body (kg)
            length_scale: Length unit L (m)
            G: Gravitational constant
        """
        super().__init__(G)
        self.mass = mass
        self.length_scale = length_scale

    @property
    def name(self) -> str:
        return "figure_eight"

    @property
    def velocity_scale(self) -> float:
        return float(np.sqrt(self.G * self.mass / self.length_scale))

    @property
    def period(self) -> float:
        return float(_PERIOD * self.length_scale / self.velocity_scale)

    def generate(self) -> List[Body]:
        """Generate figure-eight initial conditions."""
        L = self.length_scale
        V = self.velocity_scale
        positions = [_X1 * L, -_X1 * L, np.zeros(3)]
        velocities = [-0.5 * _V3 * V, -0.5 * _V3 * V, _V3 * V]
        bodies = [
            Body(mass=self.mass, position=tuple(p), velocity=tuple(v))
            for p, v in zip(positions, velocities)
        ]
        return to_center_of_mass_frame(bodies)
