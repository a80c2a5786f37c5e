"""Trajectory I/O: CSV export for the recorded positions."""

import io
import logging
import os
import tempfile
from pathlib import Path
import numpy as np
from threebody_sim.physics.trajectory import Trajectory

logger = logging.getLogger(__name__)


def write_trajectory_csv(trajectory: Trajectory, output_path: str, fmt: str = "%.10e"):
    """Save a trajectory as CSV.

    One header line (time,body0_x,body0_y,body0_z,body1_x,...) followed by
    one row per record. The file is written to a temporary file next to
    the destination and moved into place, so the destination is either
    the complete new file or untouched.

    Args:
        trajectory: Recorded trajectory
        output_path: Output file path
        fmt: printf-style format for every value
    """
    output_path = Path(output_path)
    directory = output_path.parent
    header = ",".join(trajectory.column_names())
    rows = trajectory.to_rows()

    fd, tmp_path = tempfile.mkstemp(prefix=f".{output_path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, 'w', newline='') as f:
            np.savetxt(f, rows, fmt=fmt, delimiter=",", header=header, comments="")
        os.replace(tmp_path, output_path)
    except BaseException:
        os.unlink(tmp_path)
        raise
    logger.info("Wrote %d records for %d bodies to %s", len(trajectory), trajectory.n_bodies, output_path)


def load_trajectory_csv(input_path: str) -> Trajectory:
    """Load a trajectory written by write_trajectory_csv().

    Args:
        input_path: Input file path

    Returns:
        The trajectory

    Raises:
        ValueError: If the header or rows do not describe 1 + 3N columns
    """
    input_path = Path(input_path)
    with open(input_path, 'r') as f:
        header = f.readline().strip()
        body = f.read()

    columns = [c.strip() for c in header.split(",")] if header else []
    if len(columns) < 4 or (len(columns) - 1) % 3 != 0:
        raise ValueError(
            f"{input_path}: expected a header with 1 + 3*N columns (time, body0_x, ...), "
            f"got {len(columns)}"
        )
    n_bodies = (len(columns) - 1) // 3
    if not body.strip():
        return Trajectory(n_bodies)

    rows = np.loadtxt(io.StringIO(body), delimiter=",", ndmin=2)
    if rows.shape[1] != len(columns):
        raise ValueError(f"{input_path}: header has {len(columns)} columns but rows have {rows.shape[1]}")
    trajectory = Trajectory.from_rows(rows)
    logger.debug("Loaded %d records for %d bodies from %s", len(trajectory), n_bodies, input_path)
    return trajectory
