"""Abstract base class for numerical integrators."""

from abc import ABC, abstractmethod
from threebody_sim.physics.body import SystemState
from threebody_sim.physics.force_calculator import ForceEvaluator


class Integrator(ABC):
    """Abstract interface for fixed-step integrators.

    An integrator is the only component that mutates a SystemState: each
    call to step() updates positions, velocities and time in place.
    """

    @abstractmethod
    def step(self, state: SystemState, dt: float, forces: ForceEvaluator) -> None:
        """Advance the state by one time step.

        Args:
            state: System state, updated in place (time advances by dt)
            dt: Time step in seconds
            forces: Evaluator used for every acceleration this step needs

        Raises:
            SingularForce: Propagated from the force evaluator; no retry
        """
        pass

    def reset(self) -> None:
        """Drop any state carried between steps."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this integrator."""
        pass

    @property
    @abstractmethod
    def order(self) -> int:
        """Return the order of accuracy (e.g., 1 for Euler, 2 for Verlet, 4 for RK4)."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
