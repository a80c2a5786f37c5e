"""Recorded trajectory: timestamped snapshots of body positions."""

from dataclasses import dataclass
from typing import Iterator, List
import numpy as np


@dataclass(frozen=True)
class TrajectoryRecord:
    """Positions of every body at one simulation time."""
    time: float
    positions: np.ndarray  # (n, 3), read-only


class Trajectory:
    """Append-only, time-ordered sequence of TrajectoryRecords.

    The body count is fixed at construction. Records must arrive with
    strictly increasing time; nothing is ever removed or reordered.
    """

    def __init__(self, n_bodies: int):
        if n_bodies < 1:
            raise ValueError(f"Trajectory needs at least one body, got {n_bodies}")
        self.n_bodies = int(n_bodies)
        self._records: List[TrajectoryRecord] = []

    def append(self, time: float, positions) -> TrajectoryRecord:
        """Record a snapshot. Positions are copied.

        Raises:
            ValueError: On a shape mismatch or non-increasing time
        """
        snapshot = np.array(positions, dtype=np.float64)
        if snapshot.shape != (self.n_bodies, 3):
            raise ValueError(f"Expected positions of shape ({self.n_bodies}, 3), got {snapshot.shape}")
        time = float(time)
        if self._records and not time > self._records[-1].time:
            raise ValueError(f"Record time {time} does not follow {self._records[-1].time}")
        snapshot.setflags(write=False)
        record = TrajectoryRecord(time=time, positions=snapshot)
        self._records.append(record)
        return record

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TrajectoryRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> TrajectoryRecord:
        return self._records[index]

    @property
    def times(self) -> np.ndarray:
        """Record times, shape (k,)."""
        return np.array([r.time for r in self._records], dtype=np.float64)

    @property
    def positions(self) -> np.ndarray:
        """All positions, shape (k, n, 3)."""
        if not self._records:
            return np.zeros((0, self.n_bodies, 3))
        return np.stack([r.positions for r in self._records])

    def body_positions(self, index: int) -> np.ndarray:
        """Path of one body, shape (k, 3)."""
        return self.positions[:, index, :]

    def column_names(self) -> List[str]:
        """Tabular header: time, body0_x, body0_y, body0_z, body1_x, ..."""
        names = ["time"]
        for i in range(self.n_bodies):
            names.extend([f"body{i}_x", f"body{i}_y", f"body{i}_z"])
        return names

    def to_rows(self) -> np.ndarray:
        """Tabular form, shape (k, 1 + 3n), columns as in column_names()."""
        k = len(self._records)
        rows = np.empty((k, 1 + 3 * self.n_bodies))
        if k:
            rows[:, 0] = self.times
            rows[:, 1:] = self.positions.reshape(k, 3 * self.n_bodies)
        return rows

    @classmethod
    def from_rows(cls, rows) -> "Trajectory":
        """Rebuild a trajectory from its tabular form."""
        rows = np.asarray(rows, dtype=np.float64)
        if rows.ndim != 2 or rows.shape[1] < 4 or (rows.shape[1] - 1) % 3 != 0:
            raise ValueError(f"Rows must have 1 + 3*n columns (n >= 1), got shape {rows.shape}")
        n_bodies = (rows.shape[1] - 1) // 3
        trajectory = cls(n_bodies)
        for row in rows:
            trajectory.append(row[0], row[1:].reshape(n_bodies, 3))
        return trajectory

    def __repr__(self) -> str:
        return f"Trajectory(n_bodies={self.n_bodies}, records={len(self)})"
