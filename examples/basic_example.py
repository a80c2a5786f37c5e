"""Basic example of using the three-body simulator."""

from threebody_sim import Simulator, SimulationConfig
from threebody_sim.io import write_trajectory_csv
from threebody_sim.presets import FigureEight


def main():
    """Run one period of the figure-eight choreography."""
    preset = FigureEight(mass=1e30, length_scale=1e11)
    bodies = preset.generate()

    # ~1000 steps per orbit keeps the Verlet energy error small
    steps = 1000
    config = SimulationConfig(dt=preset.period / steps, step_count=steps, record_interval=10)

    sim = Simulator(bodies, config)
    print("Running simulation...")
    trajectory = sim.run()

    print(f"Period: {preset.period:.4e} s, records: {len(trajectory)}")
    print(f"Relative energy drift: {sim.summary['relative_energy_drift']:.3e}")

    write_trajectory_csv(trajectory, "figure_eight.csv")
    print("Trajectory saved to figure_eight.csv")


if __name__ == "__main__":
    main()
