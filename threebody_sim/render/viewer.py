"""3D trajectory viewer using matplotlib."""

import logging
from typing import List, Optional, Tuple
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from mpl_toolkits.mplot3d import Axes3D
from mpl_toolkits.mplot3d.art3d import Line3DCollection
from threebody_sim.io.gif_exporter import GIFExporter
from threebody_sim.physics.trajectory import Trajectory

logger = logging.getLogger(__name__)

# Smallest half-width of the view (m), so a tight system still gets a usable box
MIN_EXTENT = 1e9

SECONDS_PER_DAY = 86400.0


def camera_target(positions: np.ndarray) -> Tuple[np.ndarray, float]:
    """Centroid of one frame and the largest body distance from it.

    Args:
        positions: Body positions (n, 3)

    Returns:
        Tuple of (centroid, max_distance), max_distance floored at MIN_EXTENT
    """
    centroid = positions.mean(axis=0)
    max_distance = float(np.max(np.linalg.norm(positions - centroid, axis=1)))
    return centroid, max(max_distance, MIN_EXTENT)


class TrajectoryViewer:
    """Play back a recorded trajectory in a matplotlib 3D view.

    The view is fixed on the frame-0 centroid. Each body is drawn as a dot
    with a fading trail of its recent positions.

    Keys while show() runs: space toggles play/pause, + and - change the
    playback speed, r restarts from the first frame.
    """

    def __init__(
        self,
        trajectory: Trajectory,
        figsize: Tuple[int, int] = (8, 8),
        dpi: int = 100,
        trail_length: int = 500,
        elevation: float = 30.0,
        azimuth: float = -60.0,
        title: str = "Three-body simulation"
    ):
        """Initialize viewer.

        Args:
            trajectory: Trajectory to display (at least one record)
            figsize: Figure size
            dpi: Dots per inch
            trail_length: Number of previous positions drawn behind each body
            elevation: Camera elevation angle
            azimuth: Camera azimuth angle
            title: Axes title
        """
        if len(trajectory) == 0:
            raise ValueError("Cannot view an empty trajectory")
        self.trajectory = trajectory
        self.figsize = figsize
        self.dpi = dpi
        self.trail_length = max(1, trail_length)
        self.elevation = elevation
        self.azimuth = azimuth
        self.title = title

        self._times = trajectory.times
        self._positions = trajectory.positions
        self.n_frames = len(trajectory)
        self.center, max_distance = camera_target(self._positions[0])
        self.extent = 1.5 * max_distance

        # Playback state
        self.current_frame = 0
        self.playing = True
        self.speed = 1.0
        self._cursor = 0.0

        self.fig: Optional[Figure] = None
        self.ax: Optional[Axes3D] = None
        self._markers: List = []
        self._trails: List[Line3DCollection] = []
        self._time_text = None

    def _initialize(self):
        """Create the figure and one marker and trail per body."""
        if self.fig is not None:
            return
        self.fig = plt.figure(figsize=self.figsize, dpi=self.dpi)
        self.ax = self.fig.add_subplot(111, projection='3d')
        self.ax.set_xlabel('X (m)')
        self.ax.set_ylabel('Y (m)')
        self.ax.set_zlabel('Z (m)')
        self.ax.set_title(self.title)
        cx, cy, cz = self.center
        self.ax.set_xlim(cx - self.extent, cx + self.extent)
        self.ax.set_ylim(cy - self.extent, cy + self.extent)
        self.ax.set_zlim(cz - self.extent, cz + self.extent)
        self.ax.view_init(elev=self.elevation, azim=self.azimuth)

        for i in range(self.trajectory.n_bodies):
            color = plt.cm.tab10(i % 10)
            p0 = self._positions[0, i]
            trail = Line3DCollection([np.stack([p0, p0])], linewidths=1.5)
            self.ax.add_collection3d(trail)
            self._trails.append(trail)
            marker, = self.ax.plot([p0[0]], [p0[1]], [p0[2]], 'o', color=color, markersize=8, label=f"body{i}")
            self._markers.append(marker)
        self.ax.legend(loc='upper right')
        self._time_text = self.ax.text2D(0.02, 0.95, "", transform=self.ax.transAxes)

    def render_frame(self, k: int):
        """Draw record k with the trails leading up to it."""
        if not 0 <= k < self.n_frames:
            raise IndexError(f"Frame {k} out of range [0, {self.n_frames})")
        self._initialize()
        self.current_frame = k

        start = max(0, k - self.trail_length)
        for i, (marker, trail) in enumerate(zip(self._markers, self._trails)):
            x, y, z = self._positions[k, i]
            marker.set_data_3d([x], [y], [z])

            path = self._positions[start:k + 1, i]
            if len(path) > 1:
                segments = np.stack([path[:-1], path[1:]], axis=1)
            else:
                segments = np.stack([path, path], axis=1)
            trail.set_segments(segments)
            colors = np.tile(plt.cm.tab10(i % 10), (len(segments), 1))
            # Older segments fade out
            colors[:, 3] = np.linspace(0.05, 0.9, len(segments))
            trail.set_color(colors)

        t = self._times[k]
        self._time_text.set_text(
            f"t = {t:.4e} s ({t / SECONDS_PER_DAY:.2f} d)  frame {k + 1}/{self.n_frames}  x{self.speed:g}"
        )

    def capture_frame(self) -> np.ndarray:
        """Capture current frame as image array (H, W, 3) uint8."""
        if self.fig is None:
            raise RuntimeError("Viewer not initialized. Call render_frame() first.")
        self.fig.canvas.draw()
        return np.asarray(self.fig.canvas.buffer_rgba())[..., :3].copy()

    def _on_key(self, event):
        if event.key == ' ':
            self.playing = not self.playing
        elif event.key in ('+', '='):
            self.speed = min(self.speed * 2.0, 64.0)
        elif event.key in ('-', '_'):
            self.speed = max(self.speed / 2.0, 0.125)
        elif event.key == 'r':
            self._cursor = 0.0
            self.playing = True
        else:
            return
        logger.debug("playing=%s speed=%g", self.playing, self.speed)

    def show(self, interval: float = 0.03):
        """Play the trajectory in a window until it is closed.

        Args:
            interval: Pause between frames in seconds
        """
        self._initialize()
        self.fig.canvas.mpl_connect('key_press_event', self._on_key)
        print("Controls: SPACE play/pause, +/- speed, r restart, close window to quit")
        self.render_frame(0)
        plt.show(block=False)

        last = self.n_frames - 1
        while plt.fignum_exists(self.fig.number):
            if self.playing:
                frame = int(self._cursor)
                if frame != self.current_frame:
                    self.render_frame(frame)
                if self._cursor >= last:
                    self.playing = False
                self._cursor = min(self._cursor + self.speed, last)
            plt.pause(interval)
        self.fig = None
        self.ax = None
        self._markers = []
        self._trails = []

    def export_gif(self, output_path: str, fps: int = 20, every: int = 1):
        """Render every `every`-th record into an animated GIF.

        Args:
            output_path: Output file path (.gif)
            fps: Frames per second
            every: Record stride
        """
        if every < 1:
            raise ValueError(f"every must be positive, got {every}")
        exporter = GIFExporter(output_path, fps=fps)
        frames = list(range(0, self.n_frames, every))
        if frames[-1] != self.n_frames - 1:
            frames.append(self.n_frames - 1)
        for k in frames:
            self.render_frame(k)
            exporter.add_frame(self.capture_frame())
        exporter.export()

    def close(self):
        """Close the viewer."""
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
            self.ax = None
            self._markers = []
            self._trails = []
            self._time_text = None
