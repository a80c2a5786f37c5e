"""Error types raised by the simulation core."""

from typing import Optional, Tuple


class SimulationError(Exception):
    """Base class for every failure the simulation core reports."""


class InvalidConfiguration(SimulationError, ValueError):
    """Bodies or run parameters are unusable; the run never starts."""


class SingularForce(SimulationError, ArithmeticError):
    """Two bodies got too close to evaluate an unsoftened force.

    Attributes:
        bodies: Indices (i, j) of the closest offending pair
        separation: Distance between them in meters
        step: 0-based index of the integration step that failed (set by the driver)
        time: Simulation time at the start of that step (set by the driver)
    """

    def __init__(
        self,
        bodies: Tuple[int, int],
        separation: float,
        step: Optional[int] = None,
        time: Optional[float] = None,
        reason: str = "separation at or below singular threshold"
    ):
        self.bodies = tuple(bodies)
        self.separation = float(separation)
        self.step = step
        self.time = time
        self.reason = reason
        super().__init__(self.bodies, self.separation)

    def __str__(self) -> str:
        i, j = self.bodies
        message = f"Singular force between bodies {i} and {j} ({self.reason}, d={self.separation:.6e} m)"
        if self.step is not None:
            message += f" at step {self.step}"
        if self.time is not None:
            message += f", t={self.time:.6e} s"
        return message


class Cancelled(SimulationError):
    """The run was interrupted before completing all steps."""

    def __init__(self, step: int, time: float):
        self.step = step
        self.time = time
        super().__init__(step, time)

    def __str__(self) -> str:
        return f"Simulation cancelled before step {self.step} (t={self.time:.6e} s)"
