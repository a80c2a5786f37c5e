"""CLI main entry points."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple
from threebody_sim.exceptions import SimulationError
from threebody_sim.io.trajectory_io import write_trajectory_csv, load_trajectory_csv
from threebody_sim.physics.body import Body
from threebody_sim.physics.force_calculator import FORCE_METHODS
from threebody_sim.physics.integrators import list_integrators
from threebody_sim.physics.simulator import Simulator
from threebody_sim.physics.trajectory import Trajectory
from threebody_sim.presets import get_preset, list_presets
from threebody_sim.utils.config import SimulationConfig, load_config

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "results.csv"

# Command-line option -> SimulationConfig field
_OVERRIDES = {
    'dt': 'dt',
    'steps': 'step_count',
    'softening': 'softening',
    'G': 'G',
    'integrator': 'integrator',
    'force_method': 'force_method',
    'workers': 'workers',
    'record_interval': 'record_interval',
    'min_separation': 'min_separation',
}


def configure_logging(verbosity: int):
    """Map -v/-q counts onto a root log level."""
    level = {-1: logging.ERROR, 0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    if verbosity < -1:
        level = logging.CRITICAL
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def load_initial_conditions(args) -> Tuple[List[Body], SimulationConfig]:
    """Bodies and run parameters from the preset or config file, with CLI overrides applied."""
    if args.preset:
        bodies = get_preset(args.preset).generate()
        config = SimulationConfig()
    else:
        bodies, config = load_config(args.config)

    for option, field_name in _OVERRIDES.items():
        value = getattr(args, option)
        if value is not None:
            setattr(config, field_name, value)
    if args.no_initial:
        config.record_initial = False
    return bodies, config.validate()


def view_trajectory(trajectory: Trajectory, gif_path: Optional[str], fps: int, every: int, show: bool):
    """Open the viewer and/or write a GIF."""
    from threebody_sim.render.viewer import TrajectoryViewer

    viewer = TrajectoryViewer(trajectory)
    try:
        if gif_path:
            print(f"Exporting GIF to {gif_path}...")
            viewer.export_gif(gif_path, fps=fps, every=every)
        if show:
            viewer.show()
    finally:
        viewer.close()


def run_simulation(args) -> int:
    """Run a simulation and write its trajectory. Returns the exit code."""
    try:
        bodies, config = load_initial_conditions(args)
    except FileNotFoundError as e:
        print(f"Error: config file not found: {e.filename}", file=sys.stderr)
        return 1
    except SimulationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.debug("Run parameters: %s", config)
    source = f"preset '{args.preset}'" if args.preset else args.config
    print(f"Running simulation: {len(bodies)} bodies from {source}")
    print(f"Integrator: {config.integrator}, dt: {config.dt} s, steps: {config.step_count}, "
          f"softening: {config.softening} m, force method: {config.force_method}")

    try:
        sim = Simulator(bodies, config)
        trajectory = sim.run()
    except SimulationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    summary = sim.summary
    print(f"Completed {sim.step_count} steps, t = {summary['final_time']:.6e} s")
    print(f"Relative energy drift: {summary['relative_energy_drift']:.3e}, "
          f"relative momentum drift: {summary['relative_momentum_drift']:.3e}")

    try:
        write_trajectory_csv(trajectory, args.output)
    except OSError as e:
        print(f"Error: cannot write {args.output}: {e}", file=sys.stderr)
        return 1
    print(f"Trajectory ({len(trajectory)} records) saved to {args.output}")

    if args.view or args.gif:
        try:
            view_trajectory(trajectory, args.gif, args.fps, args.every, show=args.view)
        except (ImportError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    print("Simulation complete!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="threebody-sim",
        description="Three-body simulator - direct-summation Newtonian gravity"
    )
    parser.add_argument('config', nargs='?', default=None,
                        help='Initial conditions file (.ini, .json or .yaml)')
    parser.add_argument('output', nargs='?', default=None,
                        help=f'Output CSV path (default: {DEFAULT_OUTPUT})')
    parser.add_argument('--preset', type=str, default=None, choices=list_presets(),
                        help='Use a built-in scenario instead of a config file')

    # Simulation parameters (override the config file)
    parser.add_argument('--dt', type=float, default=None,
                        help='Time step in seconds (default: 86400)')
    parser.add_argument('--steps', type=int, default=None,
                        help='Number of simulation steps (default: 1000)')
    parser.add_argument('--softening', type=float, default=None,
                        help='Softening length in metres (default: 0)')
    parser.add_argument('--G', type=float, default=None,
                        help='Gravitational constant (default: 6.67430e-11)')
    parser.add_argument('--integrator', type=str, default=None, choices=list_integrators(),
                        help='Numerical integrator (default: verlet)')
    parser.add_argument('--force-method', type=str, default=None, choices=list(FORCE_METHODS),
                        help='Force evaluation strategy (default: vectorized)')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker threads for the parallel force method')
    parser.add_argument('--record-interval', type=int, default=None,
                        help='Record every N steps (default: 1)')
    parser.add_argument('--no-initial', action='store_true',
                        help='Do not record the t = 0 state')
    parser.add_argument('--min-separation', type=float, default=None,
                        help='Fail when two unsoftened bodies come this close (m)')

    # Visualization
    parser.add_argument('--view', action='store_true',
                        help='Open the 3D viewer after the run')
    parser.add_argument('--gif', type=str, default=None,
                        help='Export an animated GIF to this path')
    parser.add_argument('--fps', type=int, default=20,
                        help='Frames per second for GIF export')
    parser.add_argument('--every', type=int, default=1,
                        help='Use every N-th record for GIF export')

    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='More log output (repeat for debug)')
    parser.add_argument('-q', '--quiet', action='count', default=0,
                        help='Less log output')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """threebody-sim entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose - args.quiet)

    if args.preset:
        if args.config is not None and args.output is not None:
            parser.error("CONFIG cannot be combined with --preset")
        # With a preset the only positional is the output path
        if args.config is not None:
            args.output, args.config = args.config, None
    elif args.config is None:
        parser.error("a CONFIG file or --preset is required")
    if args.output is None:
        args.output = DEFAULT_OUTPUT

    return run_simulation(args)


def view_main(argv: Optional[List[str]] = None) -> int:
    """threebody-view entry point: display a saved trajectory."""
    parser = argparse.ArgumentParser(
        prog="threebody-view",
        description="View a trajectory CSV written by threebody-sim"
    )
    parser.add_argument('csv', help='Trajectory CSV file')
    parser.add_argument('--gif', type=str, default=None,
                        help='Export an animated GIF instead of opening a window')
    parser.add_argument('--fps', type=int, default=20,
                        help='Frames per second for GIF export')
    parser.add_argument('--every', type=int, default=1,
                        help='Use every N-th record for GIF export')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='More log output (repeat for debug)')
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not Path(args.csv).is_file():
        print(f"Error: trajectory file not found: {args.csv}", file=sys.stderr)
        return 1
    try:
        trajectory = load_trajectory_csv(args.csv)
        print(f"Loaded {len(trajectory)} frames for {trajectory.n_bodies} bodies from {args.csv}")
        view_trajectory(trajectory, args.gif, args.fps, args.every, show=args.gif is None)
    except (ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
