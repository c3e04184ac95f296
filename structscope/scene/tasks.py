"""Interactive lesson tasks driven by classification results."""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..detection.base import Detection
from .classifier import ARRAY, ClassificationResult


def focused_index(items: Sequence[Detection]) -> Optional[int]:
    """Index of the item with the largest box area (closest to the camera)."""
    if not items:
        return None
    areas = [d.area for d in items]
    return areas.index(max(areas))


@dataclass
class IndexFocusTask:
    """Array access-by-index exercise.

    The target index is fixed the first time an Array is recognised, at the
    middle of the detected row. From then on every frame's array row is
    checked, whatever concept won that frame. The task completes when the
    learner moves the object at the target index closest to the camera.
    """

    target_index: Optional[int] = None
    completed: bool = False
    message: str = ""

    def update(self, result: ClassificationResult, items: Sequence[Detection]) -> bool:
        """Advance the task with one frame.

        Args:
            result: The frame's classification.
            items: The frame's array objects in index order, see
                classifier.array_items.

        Returns:
            True on the frame the task completes.
        """
        if self.completed:
            return False
        if self.target_index is None:
            if result.concept == ARRAY:
                self.target_index = len(result.members) // 2
            return False
        if len(items) <= self.target_index:
            return False
        if focused_index(items) != self.target_index:
            return False
        self.completed = True
        k = self.target_index
        self.message = (
            f"Correct! You focused on the element at index {k}. This simulates "
            f"arr[{k}]: direct access to a fixed position in O(1) time."
        )
        return True
