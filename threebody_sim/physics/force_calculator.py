"""Newtonian gravitational accelerations for a small set of bodies.

Three interchangeable evaluation paths produce the same field:
- vectorized: one broadcasted (n, n, 3) displacement tensor
- pairwise: each unordered pair once, equal and opposite contributions
- parallel: one task per body on a thread pool, disjoint output rows
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Literal, Optional, Tuple
import logging
import numpy as np
from threebody_sim.exceptions import InvalidConfiguration, SingularForce

logger = logging.getLogger(__name__)

GRAVITATIONAL_CONSTANT = 6.67430e-11  # m^3 kg^-1 s^-2

FORCE_METHODS = ("vectorized", "pairwise", "parallel")

# An unsoftened pair whose straight-line path within one step comes closer than
# this fraction of its starting separation is treated as a collision.
CLOSE_APPROACH_RATIO = 1e-6


class ForceEvaluator:
    """Computes the acceleration on every body from every other body."""

    def __init__(
        self,
        G: float = GRAVITATIONAL_CONSTANT,
        softening: float = 0.0,
        method: Literal["vectorized", "pairwise", "parallel"] = "vectorized",
        workers: int = 1,
        min_separation: float = 0.0
    ):
        """Initialize force evaluator.

        Args:
            G: Gravitational constant
            softening: Softening length epsilon; 0 disables softening
            method: Evaluation path ('vectorized', 'pairwise' or 'parallel')
            workers: Thread count for the 'parallel' path
            min_separation: Unsoftened separations at or below this raise SingularForce
        """
        if not (np.isfinite(G) and G > 0.0):
            raise InvalidConfiguration(f"Gravitational constant must be positive, got {G}")
        if not (np.isfinite(softening) and softening >= 0.0):
            raise InvalidConfiguration(f"Softening length must be non-negative, got {softening}")
        if not (np.isfinite(min_separation) and min_separation >= 0.0):
            raise InvalidConfiguration(f"Minimum separation must be non-negative, got {min_separation}")
        if method not in FORCE_METHODS:
            raise InvalidConfiguration(f"Unknown force method '{method}'. Available: {list(FORCE_METHODS)}")
        if int(workers) < 1:
            raise InvalidConfiguration(f"Worker count must be at least 1, got {workers}")

        self.G = float(G)
        self.softening = float(softening)
        self.method = method
        self.workers = int(workers)
        self.min_separation = float(min_separation)
        self._executor: Optional[ThreadPoolExecutor] = None

    def compute_accelerations(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        """Compute gravitational acceleration on all bodies.

        Args:
            positions: (n, 3) array, read only
            masses: (n,) array

        Returns:
            (n, 3) array of accelerations

        Raises:
            SingularForce: If an unsoftened pair is (near-)coincident or the
                result is not finite
        """
        positions = np.asarray(positions, dtype=np.float64)
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)

        if self.softening == 0.0:
            self._check_separations(positions)

        if self.method == "pairwise":
            accelerations = self._compute_pairwise(positions, masses)
        elif self.method == "parallel":
            accelerations = self._compute_parallel(positions, masses)
        else:
            accelerations = self._compute_vectorized(positions, masses)

        if not np.all(np.isfinite(accelerations)):
            i, j, d = _closest_pair(positions)
            raise SingularForce((i, j), d, reason="acceleration is not finite")
        return accelerations

    def pairwise_accelerations(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        """Per-pair contributions: entry [i, j] is the acceleration of i due to j.

        Returns:
            (n, n, 3) array with a zero diagonal
        """
        positions = np.asarray(positions, dtype=np.float64)
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        if self.softening == 0.0:
            self._check_separations(positions)
        r_diff, inv_r_cubed = self._displacements(positions)
        m_j = masses[np.newaxis, :, np.newaxis]
        return self.G * m_j * inv_r_cubed[:, :, np.newaxis] * r_diff

    def check_path(self, start: np.ndarray, end: np.ndarray) -> None:
        """Detect pairs that collide between two sets of positions.

        A fixed step can carry two unsoftened bodies straight through each
        other without either endpoint being close. Each pair's relative
        displacement is taken to move linearly from start to end, and its
        closest approach along that segment is compared with min_separation
        and with CLOSE_APPROACH_RATIO times the starting separation.

        Args:
            start: (n, 3) positions at the beginning of the step
            end: (n, 3) proposed positions at the end of the step

        Raises:
            SingularForce: For the pair with the smallest offending approach
        """
        if self.softening > 0.0:
            return
        start = np.asarray(start, dtype=np.float64)
        end = np.asarray(end, dtype=np.float64)
        i_idx, j_idx = np.triu_indices(start.shape[0], k=1)
        r0 = start[j_idx] - start[i_idx]
        delta = (end[j_idx] - end[i_idx]) - r0

        delta_sq = np.sum(np.square(delta), axis=1)
        with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
            s = np.where(delta_sq > 0.0, -np.sum(r0 * delta, axis=1) / delta_sq, 0.0)
        s = np.clip(np.nan_to_num(s, nan=0.0), 0.0, 1.0)
        closest = np.linalg.norm(r0 + s[:, np.newaxis] * delta, axis=1)

        threshold = np.maximum(self.min_separation, CLOSE_APPROACH_RATIO * np.linalg.norm(r0, axis=1))
        hits = closest <= threshold
        if np.any(hits):
            k = int(np.argmin(np.where(hits, closest, np.inf)))
            raise SingularForce(
                (int(i_idx[k]), int(j_idx[k])),
                float(closest[k]),
                reason="bodies pass through each other within one step"
            )

    def _displacements(self, positions: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Return r_diff[i, j] = x_j - x_i and 1 / (|r|^2 + eps^2)^(3/2) with a zero diagonal."""
        n = positions.shape[0]
        pos_i = positions.reshape(n, 1, 3)
        pos_j = positions.reshape(1, n, 3)
        r_diff = pos_j - pos_i
        r_sq = np.sum(np.square(r_diff), axis=2)
        r_soft_cubed = np.power(r_sq + self.softening ** 2, 1.5)
        # Self-interaction: 1/inf == 0
        np.fill_diagonal(r_soft_cubed, np.inf)
        with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
            inv_r_cubed = 1.0 / r_soft_cubed
        return r_diff, inv_r_cubed

    def _compute_vectorized(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        r_diff, inv_r_cubed = self._displacements(positions)
        with np.errstate(over="ignore", invalid="ignore"):
            weights = self.G * masses[np.newaxis, :] * inv_r_cubed
            return np.sum(weights[:, :, np.newaxis] * r_diff, axis=1)

    def _compute_pairwise(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        n = positions.shape[0]
        accelerations = np.zeros((n, 3))
        eps_sq = self.softening ** 2
        with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
            for i in range(n):
                for j in range(i + 1, n):
                    r_vec = positions[j] - positions[i]
                    r_soft_cubed = (np.dot(r_vec, r_vec) + eps_sq) ** 1.5
                    # G * r_ij / d^3, shared by both bodies (Newton's third law)
                    f = self.G * r_vec / r_soft_cubed
                    accelerations[i] += masses[j] * f
                    accelerations[j] -= masses[i] * f
        return accelerations

    def _compute_parallel(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        n = positions.shape[0]
        snapshot = np.array(positions)
        snapshot.setflags(write=False)
        accelerations = np.zeros((n, 3))

        def accumulate(i: int) -> None:
            accelerations[i] = self._acceleration_on(i, snapshot, masses)

        executor = self._get_executor()
        # Consuming the iterator is the barrier: every row is written on return
        for _ in executor.map(accumulate, range(n)):
            pass
        return accelerations

    def _acceleration_on(self, i: int, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        """Acceleration of body i, summed over j in index order."""
        eps_sq = self.softening ** 2
        total = np.zeros(3)
        with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
            for j in range(positions.shape[0]):
                if j == i:
                    continue
                r_vec = positions[j] - positions[i]
                r_soft_cubed = (np.dot(r_vec, r_vec) + eps_sq) ** 1.5
                total += self.G * masses[j] * r_vec / r_soft_cubed
        return total

    def _check_separations(self, positions: np.ndarray) -> None:
        """Raise SingularForce if the closest pair is at or below min_separation."""
        i, j, d = _closest_pair(positions)
        if d <= self.min_separation:
            raise SingularForce((i, j), d)

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="forces")
            logger.debug("Started force thread pool with %d workers", self.workers)
        return self._executor

    def close(self) -> None:
        """Shut down the worker pool, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "ForceEvaluator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"ForceEvaluator(G={self.G!r}, softening={self.softening!r}, "
            f"method={self.method!r}, workers={self.workers})"
        )


def _closest_pair(positions: np.ndarray) -> Tuple[int, int, float]:
    """Indices and separation of the closest pair of bodies."""
    n = positions.shape[0]
    r_diff = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    with np.errstate(over="ignore", invalid="ignore"):
        distances = np.sqrt(np.sum(np.square(r_diff), axis=2))
    distances[~np.isfinite(distances)] = np.inf
    distances[np.tril_indices(n)] = np.inf
    flat = int(np.argmin(distances))
    i, j = divmod(flat, n)
    return i, j, float(distances[i, j])
