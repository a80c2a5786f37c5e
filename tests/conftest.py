"""Shared fixtures."""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib  # noqa: E402

matplotlib.use("Agg")

import pytest  # noqa: E402
from threebody_sim.physics.body import Body  # noqa: E402
from threebody_sim.presets import CircularBinary, FigureEight  # noqa: E402


@pytest.fixture
def binary():
    """Equal-mass circular binary, 1e30 kg each at 1e11 m."""
    return CircularBinary(mass_1=1e30, mass_2=1e30, separation=1e11)


@pytest.fixture
def binary_bodies(binary):
    return binary.generate()


@pytest.fixture
def figure_eight_bodies():
    return FigureEight(mass=1e30, length_scale=1e11).generate()


@pytest.fixture
def infall_bodies():
    """Two unit masses at rest at x = ±0.5 (use with G = 1, dt = 1).

    The first Verlet drift puts both exactly at the origin.
    """
    return [
        Body(mass=1.0, position=(-0.5, 0.0, 0.0)),
        Body(mass=1.0, position=(0.5, 0.0, 0.0)),
    ]
