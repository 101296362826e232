"""
MP4 animation of a tracking session.

Writes one rendered canvas frame per recorded point using OpenCV, so a
replayed drive can be watched growing point by point.
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class TrackVideoWriter:
    """
    Context manager writing RGB canvas frames to an MP4 file.

    Args:
        path: Output video path
        fps: Frames per second
        size: (width, height) of every frame
    """

    def __init__(self, path: str, fps: float, size: Tuple[int, int]):
        self.path = path
        self.fps = fps
        self.size = size
        self._writer: Optional[cv2.VideoWriter] = None
        self.frame_count = 0

    def __enter__(self) -> 'TrackVideoWriter':
        fourcc = cv2.VideoWriter_fourcc(*'mp4v')
        self._writer = cv2.VideoWriter(self.path, fourcc, self.fps, self.size)
        if not self._writer.isOpened():
            raise OSError(f"Could not open video writer for {self.path}")
        return self

    def write(self, frame_rgb: np.ndarray) -> None:
        """Append one RGB frame (resized if its size differs)."""
        if self._writer is None:
            raise RuntimeError("TrackVideoWriter used outside of its context")

        height, width = frame_rgb.shape[:2]
        if (width, height) != self.size:
            frame_rgb = cv2.resize(frame_rgb, self.size)
        # OpenCV expects BGR
        self._writer.write(cv2.cvtColor(frame_rgb, cv2.COLOR_RGB2BGR))
        self.frame_count += 1

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._writer is not None:
            self._writer.release()
            logger.debug(f"Released TrackVideoWriter: {self.path} ({self.frame_count} frames)")
            self._writer = None
        return False
