"""Tests for I/O functionality."""

import os
import numpy as np
import pytest
from threebody_sim import run
from threebody_sim.io.gif_exporter import GIFExporter
from threebody_sim.io.trajectory_io import write_trajectory_csv, load_trajectory_csv
from threebody_sim.physics.trajectory import Trajectory
from threebody_sim.utils.config import SimulationConfig


def _small_trajectory():
    trajectory = Trajectory(2)
    trajectory.append(0.0, [[0.0, 0.0, 0.0], [1.5e11, 0.0, 0.0]])
    trajectory.append(86400.0, [[1.0, 2.0, 3.0], [1.4e11, 2.0e9, -1.0e3]])
    return trajectory


def test_csv_header_and_rows(tmp_path):
    """Test the CSV layout: time then x, y, z per body."""
    path = tmp_path / "results.csv"
    write_trajectory_csv(_small_trajectory(), path)

    lines = path.read_text().splitlines()
    assert lines[0] == "time,body0_x,body0_y,body0_z,body1_x,body1_y,body1_z"
    assert len(lines) == 3
    values = [float(v) for v in lines[2].split(",")]
    assert values == pytest.approx([86400.0, 1.0, 2.0, 3.0, 1.4e11, 2.0e9, -1.0e3])


def test_csv_round_trip(tmp_path, figure_eight_bodies):
    """Test a simulated trajectory survives write and load."""
    trajectory = run(figure_eight_bodies, SimulationConfig(step_count=20))
    path = tmp_path / "figure_eight.csv"
    write_trajectory_csv(trajectory, path, fmt="%.17e")

    loaded = load_trajectory_csv(path)
    assert loaded.n_bodies == 3
    assert len(loaded) == 21
    assert np.array_equal(loaded.times, trajectory.times)
    assert np.array_equal(loaded.positions, trajectory.positions)


def test_csv_write_replaces_atomically(tmp_path):
    """Test a failed write leaves the previous file and no temp files."""
    path = tmp_path / "results.csv"
    path.write_text("previous\n")

    with pytest.raises(ValueError):
        write_trajectory_csv(_small_trajectory(), path, fmt=None)

    assert path.read_text() == "previous\n"
    assert os.listdir(tmp_path) == ["results.csv"]


def test_load_header_only(tmp_path):
    path = tmp_path / "empty.csv"
    write_trajectory_csv(Trajectory(3), path)
    loaded = load_trajectory_csv(path)
    assert loaded.n_bodies == 3
    assert len(loaded) == 0


@pytest.mark.parametrize("text", [
    "",
    "time,body0_x\n0,1\n",
    "time,body0_x,body0_y,body0_z,body1_x\n0,1,2,3,4\n",
    "time,body0_x,body0_y,body0_z\n0,1,2\n",
])
def test_load_rejects_bad_columns(tmp_path, text):
    path = tmp_path / "bad.csv"
    path.write_text(text)
    with pytest.raises(ValueError):
        load_trajectory_csv(path)


def test_trajectory_rejects_out_of_order_records():
    trajectory = _small_trajectory()
    with pytest.raises(ValueError):
        trajectory.append(86400.0, np.zeros((2, 3)))
    with pytest.raises(ValueError):
        trajectory.append(2e5, np.zeros((3, 3)))
    assert len(trajectory) == 2


def test_trajectory_records_are_snapshots():
    positions = np.zeros((2, 3))
    trajectory = Trajectory(2)
    record = trajectory.append(0.0, positions)
    positions[0, 0] = 99.0
    assert record.positions[0, 0] == 0.0
    with pytest.raises(ValueError):
        record.positions[0, 0] = 1.0


def test_gif_exporter_requires_frames(tmp_path):
    exporter = GIFExporter(str(tmp_path / "out.gif"), fps=10)
    assert exporter.duration == pytest.approx(0.1)
    assert exporter.frame_ms == 100
    assert len(exporter) == 0
    with pytest.raises(ValueError):
        exporter.export()


def test_gif_exporter_normalizes_float_frames(tmp_path):
    exporter = GIFExporter(str(tmp_path / "out.gif"))
    exporter.add_frame(np.ones((4, 4, 3)))
    assert exporter.frames[0].dtype == np.uint8
    assert exporter.frames[0].max() == 255
    with pytest.raises(ValueError):
        exporter.add_frame(np.zeros((5, 4, 3), dtype=np.uint8))


def test_gif_export(tmp_path):
    """Test frames are written to a GIF."""
    pytest.importorskip("imageio")
    path = tmp_path / "out.gif"
    exporter = GIFExporter(str(path), fps=5)
    for value in (0, 128, 255):
        exporter.add_frame(np.full((8, 8, 3), value, dtype=np.uint8))
    assert exporter.export() == path
    assert path.exists()
    assert path.stat().st_size > 0
