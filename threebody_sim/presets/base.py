"""Preset interface and frame helpers."""

from abc import ABC, abstractmethod
from typing import List, Sequence
import numpy as np
from threebody_sim.physics.body import Body
from threebody_sim.physics.force_calculator import GRAVITATIONAL_CONSTANT


class Preset(ABC):
    """A named, parameterised set of initial bodies."""

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT):
        """Initialize preset parameters.

        Args:
            G: Gravitational constant the initial velocities are computed for
        """
        self.G = G

    @abstractmethod
    def generate(self) -> List[Body]:
        """Build the initial bodies.

        Returns:
            Bodies in index order
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name used by get_preset()."""
        pass


def to_center_of_mass_frame(bodies: Sequence[Body]) -> List[Body]:
    """Shift bodies so the centre of mass sits at rest at the origin."""
    masses = np.array([b.mass for b in bodies], dtype=np.float64)
    positions = np.array([b.position for b in bodies], dtype=np.float64)
    velocities = np.array([b.velocity for b in bodies], dtype=np.float64)
    total_mass = np.sum(masses)
    COM = np.sum(masses[:, np.newaxis] * positions, axis=0) / total_mass
    COMv = np.sum(masses[:, np.newaxis] * velocities, axis=0) / total_mass
    return [
        Body(mass=float(m), position=tuple(map(float, p - COM)), velocity=tuple(map(float, v - COMv)))
        for m, p, v in zip(masses, positions, velocities)
    ]
