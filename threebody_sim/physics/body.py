"""Body records and the mutable system state advanced by the integrators."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple
import numpy as np
from threebody_sim.exceptions import InvalidConfiguration

Vector3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Body:
    """A point mass: mass (kg), position (m), velocity (m/s)."""
    mass: float
    position: Vector3 = (0.0, 0.0, 0.0)
    velocity: Vector3 = (0.0, 0.0, 0.0)

    def distance_to(self, other: "Body") -> float:
        """Euclidean distance to another body."""
        return float(np.linalg.norm(np.subtract(other.position, self.position)))


class SystemState:
    """Ordered set of bodies at one simulation time.

    Bodies are referenced by index only; the order is fixed at construction
    and matches the column order of the exported trajectory. Masses are
    read-only. Positions, velocities and time are mutated in place by the
    integrators and by nothing else.
    """

    MIN_BODIES = 2

    def __init__(self, masses, positions, velocities, time: float = 0.0):
        """Initialize and validate state.

        Args:
            masses: Array-like of shape (n,), strictly positive
            positions: Array-like of shape (n, 3) in meters
            velocities: Array-like of shape (n, 3) in meters/second
            time: Simulation time in seconds

        Raises:
            InvalidConfiguration: On fewer than two bodies, non-positive mass,
                wrong shapes or non-finite values
        """
        masses = np.array(masses, dtype=np.float64).reshape(-1)
        positions = np.array(positions, dtype=np.float64)
        velocities = np.array(velocities, dtype=np.float64)
        n = masses.shape[0]

        if n < self.MIN_BODIES:
            raise InvalidConfiguration(f"At least {self.MIN_BODIES} bodies are required, got {n}")
        if not np.all(np.isfinite(masses)) or np.any(masses <= 0.0):
            bad = [int(i) for i in np.flatnonzero(~(np.isfinite(masses) & (masses > 0.0)))]
            raise InvalidConfiguration(f"Body mass must be positive and finite (bodies {bad})")
        if positions.shape != (n, 3):
            raise InvalidConfiguration(f"Positions must have shape ({n}, 3), got {positions.shape}")
        if velocities.shape != (n, 3):
            raise InvalidConfiguration(f"Velocities must have shape ({n}, 3), got {velocities.shape}")
        if not (np.all(np.isfinite(positions)) and np.all(np.isfinite(velocities))):
            raise InvalidConfiguration("Positions and velocities must be finite")
        if not np.isfinite(time):
            raise InvalidConfiguration(f"Start time must be finite, got {time}")

        masses.setflags(write=False)
        self._masses = masses
        self.positions = positions
        self.velocities = velocities
        self.time = float(time)

    @classmethod
    def from_bodies(cls, bodies: Sequence[Body], time: float = 0.0) -> "SystemState":
        """Build a state from Body records, preserving their order."""
        bodies = list(bodies)
        if len(bodies) < cls.MIN_BODIES:
            raise InvalidConfiguration(f"At least {cls.MIN_BODIES} bodies are required, got {len(bodies)}")
        masses = [b.mass for b in bodies]
        positions = [list(b.position) for b in bodies]
        velocities = [list(b.velocity) for b in bodies]
        return cls(masses, positions, velocities, time=time)

    @property
    def masses(self) -> np.ndarray:
        return self._masses

    @property
    def n_bodies(self) -> int:
        return self._masses.shape[0]

    def body(self, index: int) -> Body:
        """Snapshot of a single body."""
        return Body(
            mass=float(self._masses[index]),
            position=tuple(float(x) for x in self.positions[index]),
            velocity=tuple(float(v) for v in self.velocities[index]),
        )

    @property
    def bodies(self) -> List[Body]:
        """Snapshots of all bodies in index order."""
        return [self.body(i) for i in range(self.n_bodies)]

    def copy(self) -> "SystemState":
        return SystemState(self._masses, self.positions, self.velocities, time=self.time)

    def __len__(self) -> int:
        return self.n_bodies

    def __repr__(self) -> str:
        return f"SystemState(n_bodies={self.n_bodies}, time={self.time:.6e})"
