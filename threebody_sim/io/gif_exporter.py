"""Animated GIF output for rendered viewer frames."""

import logging
from pathlib import Path
from typing import List, Optional
import numpy as np

logger = logging.getLogger(__name__)


class GIFExporter:
    """Collects RGB frames and writes them as one looping GIF.

    Frames are buffered in memory until export(); all must share the shape
    of the first one.
    """

    def __init__(self, output_path: str, fps: int = 20, duration: Optional[float] = None, loop: int = 0):
        """
        Args:
            output_path: Destination .gif file
            fps: Playback rate, ignored when duration is given
            duration: Seconds each frame stays on screen
            loop: Repeat count, 0 loops forever
        """
        if duration is None:
            if fps <= 0:
                raise ValueError(f"fps must be positive, got {fps}")
            duration = 1.0 / fps
        self.output_path = Path(output_path)
        self.fps = fps
        self.duration = duration
        self.loop = loop
        self.frames: List[np.ndarray] = []

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def frame_ms(self) -> int:
        """Per-frame display time in the millisecond units GIF stores."""
        return int(round(self.duration * 1000))

    def add_frame(self, frame: np.ndarray):
        """Queue one (H, W, 3) image; float images in [0, 1] are scaled to uint8."""
        if frame.dtype != np.uint8:
            frame = (np.clip(frame, 0.0, 1.0) * 255).astype(np.uint8)
        if self.frames and frame.shape != self.frames[0].shape:
            raise ValueError(f"Frame shape {frame.shape} differs from first frame {self.frames[0].shape}")
        self.frames.append(frame.copy())

    def export(self) -> Path:
        """Write the queued frames and return the output path."""
        if not self.frames:
            raise ValueError("No frames to export")

        try:
            import imageio.v3 as iio
        except ImportError:
            raise ImportError(
                "GIF export requires imageio. Install with: pip install imageio"
            )

        iio.imwrite(self.output_path, np.stack(self.frames), duration=self.frame_ms, loop=self.loop)
        logger.info("Exported %d frames to %s", len(self.frames), self.output_path)
        return self.output_path
