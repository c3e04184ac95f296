"""Detection module for object detection."""

from .base import Detection, Detector

# Lazy imports for torch-dependent detectors
def __getattr__(name):
    if name == "YOLODetector":
        from .yolo import YOLODetector
        return YOLODetector
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "Detection",
    "Detector",
    "YOLODetector",
]
