"""Circular two-body presets."""

from typing import List
import numpy as np
from threebody_sim.physics.body import Body
from threebody_sim.physics.force_calculator import GRAVITATIONAL_CONSTANT
from threebody_sim.presets.base import Preset


class CircularBinary(Preset):
    """Two bodies on a circular orbit about their common centre of mass.

    The bodies start on the x axis with velocities along ±y, orbiting in
    the xy plane. Relative speed v = sqrt(G (m1 + m2) / d).
    """

    def __init__(
        self,
        mass_1: float = 1e30,
        mass_2: float = 1e30,
        separation: float = 1e11,
        G: float = GRAVITATIONAL_CONSTANT
    ):
        """Initialize circular binary preset.

        Args:
            mass_1: Mass of body 0 (kg)
            mass_2: Mass of body 1 (kg)
            separation: Distance between the bodies (m)
            G: Gravitational constant
        """
        super().__init__(G)
        self.mass_1 = mass_1
        self.mass_2 = mass_2
        self.separation = separation

    @property
    def name(self) -> str:
        return "binary"

    @property
    def total_mass(self) -> float:
        return self.mass_1 + self.mass_2

    @property
    def relative_speed(self) -> float:
        return float(np.sqrt(self.G * self.total_mass / self.separation))

    @property
    def period(self) -> float:
        """Orbital period from Kepler's third law: T = 2π sqrt(d³ / (G M))."""
        return float(2 * np.pi * np.sqrt(self.separation ** 3 / (self.G * self.total_mass)))

    def generate(self) -> List[Body]:
        """Generate circular binary initial conditions in the centre-of-mass frame."""
        M = self.total_mass
        d = self.separation
        v = self.relative_speed
        # Each body sits at its lever arm from the centre of mass
        r1 = -self.mass_2 / M * d
        r2 = self.mass_1 / M * d
        v1 = -self.mass_2 / M * v
        v2 = self.mass_1 / M * v
        return [
            Body(mass=self.mass_1, position=(r1, 0.0, 0.0), velocity=(0.0, v1, 0.0)),
            Body(mass=self.mass_2, position=(r2, 0.0, 0.0), velocity=(0.0, v2, 0.0)),
        ]


class EarthMoon(CircularBinary):
    """Earth-Moon system on a circular orbit."""

    EARTH_MASS = 5.972e24
    MOON_MASS = 7.342e22
    DISTANCE = 3.844e8

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT):
        super().__init__(self.EARTH_MASS, self.MOON_MASS, self.DISTANCE, G=G)

    @property
    def name(self) -> str:
        return "earth_moon"
