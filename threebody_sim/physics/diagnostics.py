"""Conservation diagnostics for N-body simulations."""

from typing import Dict, Tuple
import numpy as np
from threebody_sim.physics.body import SystemState
from threebody_sim.physics.force_calculator import GRAVITATIONAL_CONSTANT


class Diagnostics:
    """Compute energies and momenta consistent with the force law."""

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT, softening: float = 0.0):
        """Initialize diagnostics.

        Args:
            G: Gravitational constant
            softening: Softening length (must match the force evaluator)
        """
        self.G = G
        self.softening = softening

    def compute_energies(
        self,
        positions,
        velocities,
        masses
    ) -> Tuple[float, float, float]:
        """Compute kinetic, potential, and total energy.

        Potential uses the same softening as the force law:
        U = -G * Σ_{i<j} m_i * m_j / sqrt(r_ij^2 + eps^2)

        Args:
            positions: Body positions (n, 3)
            velocities: Body velocities (n, 3)
            masses: Body masses (n,)

        Returns:
            Tuple of (kinetic_energy, potential_energy, total_energy)
        """
        positions = np.asarray(positions, dtype=np.float64)
        velocities = np.asarray(velocities, dtype=np.float64)
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        n = len(masses)

        # Kinetic energy: K = 0.5 * Σ m_i * v_i^2
        v_sq = np.sum(velocities ** 2, axis=1)
        K = 0.5 * np.sum(masses * v_sq)

        U = 0.0
        for i in range(n):
            for j in range(i + 1, n):
                r_diff = positions[j] - positions[i]
                r_soft = np.sqrt(np.sum(r_diff ** 2) + self.softening ** 2)
                U -= self.G * masses[i] * masses[j] / r_soft

        return float(K), float(U), float(K + U)

    def total_momentum(self, velocities, masses) -> np.ndarray:
        """Total linear momentum Σ m_i v_i, shape (3,)."""
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        return np.sum(masses[:, np.newaxis] * np.asarray(velocities, dtype=np.float64), axis=0)

    def momentum_scale(self, velocities, masses) -> float:
        """Σ m_i |v_i|, the natural scale for relative momentum errors."""
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        speeds = np.linalg.norm(np.asarray(velocities, dtype=np.float64), axis=1)
        return float(np.sum(masses * speeds))

    def angular_momentum(self, positions, velocities, masses) -> np.ndarray:
        """Total angular momentum L = Σ m_i r_i × v_i, shape (3,)."""
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        return np.sum(
            masses[:, np.newaxis] * np.cross(np.asarray(positions, dtype=np.float64),
                                             np.asarray(velocities, dtype=np.float64)),
            axis=0
        )

    def center_of_mass(self, positions, masses) -> np.ndarray:
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        return np.sum(masses[:, np.newaxis] * np.asarray(positions, dtype=np.float64), axis=0) / np.sum(masses)

    def center_of_mass_velocity(self, velocities, masses) -> np.ndarray:
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        return self.total_momentum(velocities, masses) / np.sum(masses)

    def compute_virial_ratio(self, positions, velocities, masses) -> float:
        """Compute virial ratio Q = 2K / |U|.

        Q = 1.0 for a circular two-body orbit.
        """
        K, U, _ = self.compute_energies(positions, velocities, masses)
        if U == 0.0:
            return float('inf')
        return float(2.0 * K / abs(U))

    def summarize(self, state: SystemState) -> Dict[str, object]:
        """Snapshot of every conserved quantity for one state."""
        K, U, E = self.compute_energies(state.positions, state.velocities, state.masses)
        return {
            "time": state.time,
            "kinetic": K,
            "potential": U,
            "energy": E,
            "momentum": self.total_momentum(state.velocities, state.masses),
            "momentum_scale": self.momentum_scale(state.velocities, state.masses),
            "angular_momentum": self.angular_momentum(state.positions, state.velocities, state.masses),
        }
