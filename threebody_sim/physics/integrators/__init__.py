"""Numerical integrators for N-body simulations."""

from typing import List
from threebody_sim.exceptions import InvalidConfiguration
from threebody_sim.physics.integrators.base import Integrator
from threebody_sim.physics.integrators.euler import EulerIntegrator
from threebody_sim.physics.integrators.verlet import VelocityVerletIntegrator
from threebody_sim.physics.integrators.rk4 import RK4Integrator

_INTEGRATORS = {
    'verlet': VelocityVerletIntegrator,
    'euler': EulerIntegrator,
    'rk4': RK4Integrator,
}


def list_integrators() -> List[str]:
    """Names accepted by get_integrator()."""
    return list(_INTEGRATORS)


def get_integrator(name: str) -> Integrator:
    """Get a new integrator instance by name.

    Raises:
        InvalidConfiguration: If the name is unknown
    """
    integrator_class = _INTEGRATORS.get(str(name).lower())
    if integrator_class is None:
        raise InvalidConfiguration(f"Unknown integrator '{name}'. Available: {list_integrators()}")
    return integrator_class()


__all__ = [
    "Integrator",
    "EulerIntegrator",
    "VelocityVerletIntegrator",
    "RK4Integrator",
    "get_integrator",
    "list_integrators",
]
