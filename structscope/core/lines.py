"""Near-vertical line extraction and filtering."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

import cv2
import numpy as np

from ..config import DEFAULT_THRESHOLDS, EdgeConfig, Thresholds

RawLine = Tuple[float, float, float, float]


@dataclass(frozen=True)
class LineSegment:
    """A line segment with its horizontal midpoint and vertical extent.

    Attributes:
        x1, y1, x2, y2: Raw endpoints as reported by the extractor.
        mid_x: Mean of x1 and x2.
        y_top: Smaller of y1 and y2 (image y grows downwards).
        y_bottom: Larger of y1 and y2.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    mid_x: float
    y_top: float
    y_bottom: float

    @classmethod
    def from_endpoints(cls, x1: float, y1: float, x2: float, y2: float) -> "LineSegment":
        return cls(
            x1=x1,
            y1=y1,
            x2=x2,
            y2=y2,
            mid_x=(x1 + x2) / 2,
            y_top=min(y1, y2),
            y_bottom=max(y1, y2),
        )

    @property
    def length(self) -> float:
        return self.y_bottom - self.y_top


class LineExtractor(Protocol):
    """Protocol for edge/line extractors."""

    def extract_lines(self, frame: np.ndarray) -> List[RawLine]:
        """Extract raw line segments from a frame.

        Args:
            frame: Input frame (RGB).

        Returns:
            List of (x1, y1, x2, y2) tuples.
        """
        ...


def filter_vertical_lines(
    lines: Iterable[Sequence[float]],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> List[LineSegment]:
    """Keep near-vertical, long-enough segments.

    A segment survives when |x2 - x1| < max_line_dx and |y2 - y1| > min_line_dy.
    Input order is preserved.

    Args:
        lines: Raw (x1, y1, x2, y2) segments.
        thresholds: Threshold table.

    Returns:
        LineSegment records for the surviving segments.
    """
    vertical = []
    for x1, y1, x2, y2 in lines:
        if abs(x2 - x1) < thresholds.max_line_dx and abs(y2 - y1) > thresholds.min_line_dy:
            vertical.append(LineSegment.from_endpoints(x1, y1, x2, y2))
    return vertical


class HoughLineExtractor:
    """Line extractor: grayscale, Gaussian blur, Canny, probabilistic Hough."""

    def __init__(self, config: Optional[EdgeConfig] = None):
        """Initialize the extractor.

        Args:
            config: Edge detection parameters; defaults to EdgeConfig().
        """
        self.config = config or EdgeConfig()

    def extract_lines(self, frame: np.ndarray) -> List[RawLine]:
        cfg = self.config
        if frame.ndim == 3:
            gray = cv2.cvtColor(frame, cv2.COLOR_RGB2GRAY)
        else:
            gray = frame
        kernel = (cfg.blur_kernel, cfg.blur_kernel)
        blurred = cv2.GaussianBlur(gray, kernel, 0)
        edges = cv2.Canny(blurred, cfg.canny_low, cfg.canny_high)
        lines = cv2.HoughLinesP(
            edges,
            rho=cfg.hough_rho,
            theta=np.deg2rad(cfg.hough_theta_deg),
            threshold=cfg.hough_threshold,
            minLineLength=cfg.min_line_length,
            maxLineGap=cfg.max_line_gap,
        )
        if lines is None:
            return []
        # Older OpenCV returns (N, 1, 4), newer (N, 4)
        return [tuple(int(v) for v in line) for line in lines.reshape(-1, 4)]
