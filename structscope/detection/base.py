"""Base detection protocol and data structures."""

import math
from dataclasses import dataclass
from typing import List, Protocol, Tuple

import numpy as np


@dataclass(frozen=True)
class Detection:
    """Standardized detection result.

    Attributes:
        label: Class label name (COCO names such as "person" or "cell phone").
        score: Confidence score (0.0 to 1.0).
        bbox: Bounding box as (x, y, width, height) in pixels.
        class_id: Class integer ID, -1 when the detector does not report one.
    """

    label: str
    score: float
    bbox: Tuple[float, float, float, float]
    class_id: int = -1

    @property
    def x(self) -> float:
        return self.bbox[0]

    @property
    def y(self) -> float:
        return self.bbox[1]

    @property
    def area(self) -> float:
        """Box area, with negative extents clamped to zero."""
        _, _, width, height = self.bbox
        return max(0.0, width) * max(0.0, height)

    def debug_label(self) -> str:
        """Format as "label (NN%)" with half-up rounding."""
        return f"{self.label} ({math.floor(self.score * 100 + 0.5)}%)"


class Detector(Protocol):
    """Protocol for object detectors."""

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Detect objects in a frame.

        Args:
            frame: Input frame (RGB).

        Returns:
            List of Detection objects.
        """
        ...
