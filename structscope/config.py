"""Configuration dataclasses for structscope."""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional


MODES = ["auto", "queue", "stack", "linked-list", "array"]


@dataclass(frozen=True)
class Thresholds:
    """Named constants shared by the line filter, clusterer and classifier.

    Attributes:
        confidence_floor: Detections must score strictly above this.
        alignment_spread: Max y spread (exclusive) for a row of objects.
        min_queue_persons: Persons needed for a Queue.
        min_stack_books: Books needed for a Stack.
        min_list_cups: Cups needed for a Linked List.
        min_array_items: Phones plus bottles needed for an Array.
        max_line_dx: Horizontal extent (exclusive) of a near-vertical line.
        min_line_dy: Vertical extent (exclusive) of a near-vertical line.
        stack_link_distance: Max midX gap (inclusive) to chain two lines.
        min_stack_lines: Lines needed before any stack is formed.
    """

    confidence_floor: float = 0.4
    alignment_spread: float = 80
    min_queue_persons: int = 2
    min_stack_books: int = 1
    min_list_cups: int = 3
    min_array_items: int = 2
    max_line_dx: float = 15
    min_line_dy: float = 40
    stack_link_distance: float = 40
    min_stack_lines: int = 2
    queue_classes: FrozenSet[str] = frozenset({"person"})
    stack_classes: FrozenSet[str] = frozenset({"book"})
    list_classes: FrozenSet[str] = frozenset({"cup"})
    array_classes: FrozenSet[str] = frozenset({"cell phone", "bottle"})


DEFAULT_THRESHOLDS = Thresholds()


@dataclass
class EdgeConfig:
    """Configuration for the Canny + probabilistic Hough line extractor."""

    blur_kernel: int = 5
    canny_low: int = 50
    canny_high: int = 150
    hough_rho: float = 1.0
    hough_theta_deg: float = 1.0
    hough_threshold: int = 80
    min_line_length: int = 50
    max_line_gap: int = 10


@dataclass
class DetectionConfig:
    """Configuration for object detection."""

    model: str = "yolo"
    weights: str = "yolov5s"
    confidence_threshold: float = 0.25
    iou_threshold: float = 0.45
    max_objects: int = 20
    device: Optional[str] = None


@dataclass
class LoopConfig:
    """Configuration for the throttled detection loop."""

    interval_ms: float = 200.0
    mode: str = "auto"
    extract_edges: bool = True
    index_task: bool = False
    debug_labels: bool = False


@dataclass
class ProcessingConfig:
    """Combined configuration for a headless run."""

    source: str
    detection: DetectionConfig
    loop: LoopConfig
    edges: EdgeConfig = field(default_factory=EdgeConfig)
    thresholds: Thresholds = DEFAULT_THRESHOLDS
    max_frames: Optional[int] = None
    verbose: bool = False

    @classmethod
    def from_args(
        cls,
        source: str,
        max_frames: Optional[int] = None,
        verbose: bool = False,
        # Detection config
        detection_model: str = "yolo",
        detection_weights: str = "yolov5s",
        detection_confidence: float = 0.25,
        detection_iou: float = 0.45,
        detection_max_objects: int = 20,
        device: Optional[str] = None,
        # Loop config
        interval_ms: float = 200.0,
        mode: str = "auto",
        extract_edges: bool = True,
        index_task: bool = False,
        debug_labels: bool = False,
    ) -> "ProcessingConfig":
        """Create ProcessingConfig from CLI arguments."""
        return cls(
            source=source,
            detection=DetectionConfig(
                model=detection_model,
                weights=detection_weights,
                confidence_threshold=detection_confidence,
                iou_threshold=detection_iou,
                max_objects=detection_max_objects,
                device=device,
            ),
            loop=LoopConfig(
                interval_ms=interval_ms,
                mode=mode,
                extract_edges=extract_edges,
                index_task=index_task,
                debug_labels=debug_labels,
            ),
            max_frames=max_frames,
            verbose=verbose,
        )
