"""Frame acquisition from cameras, video files and images."""

from pathlib import Path
from typing import Iterator, Tuple

import cv2
import numpy as np
from PIL import Image


VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv"}


def is_video_file(filename: str) -> bool:
    """Check if filename has a video extension.

    Args:
        filename: Path to file.

    Returns:
        True if file has a video extension.
    """
    return Path(filename).suffix.lower() in VIDEO_EXTENSIONS


def is_camera_source(source: str) -> bool:
    """Camera sources are given as a device index, e.g. "0"."""
    return source.isdigit()


class FrameSource:
    """Read RGB frames from a camera, a video file or a single image."""

    def __init__(self, source: str):
        """Open the source.

        Args:
            source: Camera index ("0"), video path or image path.

        Raises:
            IOError: If the camera or file cannot be opened.
        """
        self.source = source
        self.is_camera = is_camera_source(source)
        self.is_video = not self.is_camera and is_video_file(source)
        self._cap = None
        self._image = None
        self._fps = 30.0
        self._frame_count = 1

        if self.is_camera:
            self._cap = cv2.VideoCapture(int(source))
            if not self._cap.isOpened():
                raise IOError(f"Cannot open camera: {source}")
            self._frame_count = 0
        elif self.is_video:
            self._cap = cv2.VideoCapture(source)
            if not self._cap.isOpened():
                raise IOError(f"Cannot open video file: {source}")
            self._fps = self._cap.get(cv2.CAP_PROP_FPS) or self._fps
            self._frame_count = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
        else:
            try:
                self._image = np.array(Image.open(source).convert("RGB"))
            except OSError as e:
                raise IOError(f"Cannot open image file: {source}") from e

    @property
    def fps(self) -> float:
        """Get frames per second (nominal 30 for cameras and images)."""
        return self._fps

    @property
    def frame_count(self) -> int:
        """Get total frame count (1 for images, 0 for unbounded cameras)."""
        return self._frame_count

    def read_frame(self) -> Tuple[bool, np.ndarray | None]:
        """Read the next frame.

        Returns:
            Tuple of (success, frame). Frame is RGB numpy array.
        """
        if self._cap is not None:
            ret, frame = self._cap.read()
            if ret:
                frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            return ret, frame
        if self._image is not None:
            img = self._image
            self._image = None  # Only return once
            return True, img
        return False, None

    def __iter__(self) -> Iterator[np.ndarray]:
        """Iterate over frames."""
        while True:
            ret, frame = self.read_frame()
            if not ret:
                break
            yield frame

    def close(self):
        """Release the capture device, stopping any camera stream."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
