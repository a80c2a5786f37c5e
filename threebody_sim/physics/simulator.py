"""Main simulator controller."""

from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Union
import logging
import threading
import numpy as np
from threebody_sim.exceptions import Cancelled, SingularForce
from threebody_sim.physics.body import Body, SystemState
from threebody_sim.physics.diagnostics import Diagnostics
from threebody_sim.physics.force_calculator import ForceEvaluator
from threebody_sim.physics.integrators import Integrator, get_integrator
from threebody_sim.physics.trajectory import Trajectory
from threebody_sim.utils.config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationStatus(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Simulator:
    """Main simulation controller.

    Owns the system state for the duration of a run, drives the integrator
    for a fixed number of steps and records the trajectory. A Simulator runs
    once; build a new one to run again.
    """

    def __init__(
        self,
        initial: Union[SystemState, Sequence[Body]],
        config: Optional[SimulationConfig] = None,
        integrator: Optional[Integrator] = None,
        forces: Optional[ForceEvaluator] = None
    ):
        """Initialize simulator.

        Args:
            initial: Initial state or bodies; copied, the caller's object is never mutated
            config: Run parameters (default: SimulationConfig())
            integrator: Integrator to use (default: from config, Verlet)
            forces: Force evaluator (default: built from config)

        Raises:
            InvalidConfiguration: If the bodies or parameters are invalid
        """
        self.config = (config or SimulationConfig()).validate()
        if isinstance(initial, SystemState):
            self._state: Optional[SystemState] = initial.copy()
        else:
            self._state = SystemState.from_bodies(initial)
        self.n_bodies = self._state.n_bodies

        self.integrator = integrator or get_integrator(self.config.integrator)
        self.forces = forces or ForceEvaluator(
            G=self.config.G,
            softening=self.config.softening,
            method=self.config.force_method,
            workers=self.config.workers,
            min_separation=self.config.min_separation,
        )
        self.diagnostics = Diagnostics(G=self.forces.G, softening=self.forces.softening)

        self.status = SimulationStatus.NOT_STARTED
        self.step_count = 0
        self.summary: Dict[str, float] = {}
        self._cancel_event = threading.Event()

        # Callbacks
        self.on_step_callback: Optional[Callable] = None
        self.progress_interval: int = max(1, self.config.step_count // 10)

    @property
    def state(self) -> Optional[SystemState]:
        """Live state while running, None once the run has ended."""
        return self._state

    @property
    def time(self) -> float:
        return self._state.time if self._state is not None else float("nan")

    def cancel(self):
        """Request cancellation; takes effect before the next step. Thread-safe."""
        self._cancel_event.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def run(self) -> Trajectory:
        """Run the configured number of steps.

        Returns:
            The complete trajectory

        Raises:
            SingularForce: A force evaluation hit a (near-)coincident pair
            Cancelled: cancel() was called or the run was interrupted
            RuntimeError: If this simulator has already run
        """
        if self.status is not SimulationStatus.NOT_STARTED:
            raise RuntimeError(f"Simulator already {self.status.value}; create a new one to run again")

        config = self.config
        state = self._state
        trajectory = Trajectory(self.n_bodies)
        self.integrator.reset()
        initial_summary = self.diagnostics.summarize(state)

        self.status = SimulationStatus.RUNNING
        logger.info(
            "Running %d steps of %s s with %s (%d bodies, softening=%g)",
            config.step_count, config.dt, self.integrator.name, self.n_bodies, self.forces.softening,
        )

        step = 0
        step_start_time = state.time
        try:
            if config.record_initial:
                trajectory.append(state.time, state.positions)
            with self.forces:
                for step in range(config.step_count):
                    step_start_time = state.time
                    if self._cancel_event.is_set():
                        raise Cancelled(step, step_start_time)

                    self.integrator.step(state, config.dt, self.forces)
                    self.step_count = step + 1

                    if self.step_count % config.record_interval == 0:
                        trajectory.append(state.time, state.positions)
                    if self.step_count % self.progress_interval == 0:
                        logger.debug("step %d/%d t=%.6e s", self.step_count, config.step_count, state.time)
                    if self.on_step_callback:
                        self.on_step_callback(self, step)
        except SingularForce as e:
            e.step = step
            e.time = step_start_time
            self._finish(SimulationStatus.FAILED)
            logger.error("Run failed: %s", e)
            raise
        except Cancelled as e:
            self._finish(SimulationStatus.CANCELLED)
            logger.warning("%s; partial trajectory discarded", e)
            raise
        except KeyboardInterrupt as e:
            self._finish(SimulationStatus.CANCELLED)
            logger.warning("Simulation interrupted at step %d; partial trajectory discarded", step)
            raise Cancelled(step, step_start_time) from e
        except BaseException:
            self._finish(SimulationStatus.FAILED)
            logger.exception("Run aborted at step %d", step)
            raise

        self.summary = self._summarize(initial_summary, self.diagnostics.summarize(state))
        self._finish(SimulationStatus.COMPLETED)
        logger.info(
            "Completed %d steps, %d records, relative energy drift %.3e",
            self.step_count, len(trajectory), self.summary["relative_energy_drift"],
        )
        return trajectory

    def _finish(self, status: SimulationStatus):
        self.status = status
        # The state is exclusively owned by the run and discarded with it
        self._state = None

    @staticmethod
    def _summarize(initial: Dict[str, object], final: Dict[str, object]) -> Dict[str, float]:
        E0 = initial["energy"]
        E1 = final["energy"]
        momentum_drift = float(np.linalg.norm(final["momentum"] - initial["momentum"]))
        scale = max(initial["momentum_scale"], final["momentum_scale"])
        return {
            "initial_energy": E0,
            "final_energy": E1,
            "relative_energy_drift": abs(E1 - E0) / abs(E0) if E0 != 0 else float("inf"),
            "momentum_drift": momentum_drift,
            "relative_momentum_drift": momentum_drift / scale if scale > 0 else momentum_drift,
            "final_time": final["time"],
        }


def run(
    initial: Union[SystemState, Sequence[Body]],
    config: Optional[SimulationConfig] = None
) -> Trajectory:
    """Run a simulation and return its trajectory.

    Raises:
        InvalidConfiguration: Before the run starts
        SingularForce: If the run fails
        Cancelled: If the run is interrupted
    """
    return Simulator(initial, config).run()


__all__ = ["Simulator", "SimulationStatus", "run"]
