"""YOLO-based object detection."""

import logging
from typing import List, Optional

import numpy as np
import torch
from PIL import Image

from ..config import DetectionConfig
from .base import Detection

logger = logging.getLogger(__name__)


def default_device() -> str:
    """Pick CUDA when available, CPU otherwise."""
    return "cuda" if torch.cuda.is_available() else "cpu"


class YOLODetector:
    """YOLO object detector implementing the Detector protocol.

    Boxes are returned as (x, y, width, height) with COCO class names, which
    is what the scene classifier reads.

    Attributes:
        model: YOLOv5 model loaded from torch hub.
        confidence_threshold: Minimum confidence for detections.
        iou_threshold: IOU threshold for NMS.
        max_objects: Maximum number of objects to return per frame.
    """

    def __init__(
        self,
        weights: str = "yolov5s",
        confidence_threshold: float = 0.25,
        iou_threshold: float = 0.45,
        max_objects: int = 20,
        device: Optional[str] = None,
        inference_size: int = 640,
    ):
        """Initialize YOLODetector.

        Args:
            weights: torch hub model name (yolov5n, yolov5s, ... yolov5x).
            confidence_threshold: Minimum confidence score (0.0 to 1.0).
            iou_threshold: IOU threshold for non-max suppression.
            max_objects: Maximum detections to return per frame.
            device: Device to run inference on; autodetected when None.
            inference_size: Longest side the model resizes frames to.
        """
        self.weights = weights
        self.confidence_threshold = confidence_threshold
        self.iou_threshold = iou_threshold
        self.max_objects = max_objects
        self.device = device or default_device()
        self.inference_size = inference_size
        self.model = self._load_model()

    @classmethod
    def from_config(cls, config: DetectionConfig) -> "YOLODetector":
        """Create YOLODetector from DetectionConfig.

        Args:
            config: Detection configuration.

        Returns:
            Configured YOLODetector instance.
        """
        return cls(
            weights=config.weights,
            confidence_threshold=config.confidence_threshold,
            iou_threshold=config.iou_threshold,
            max_objects=config.max_objects,
            device=config.device,
        )

    def _load_model(self) -> torch.nn.Module:
        """Load YOLOv5 model from torch hub.

        Returns:
            Loaded YOLOv5 model.

        Raises:
            RuntimeError: If model loading fails.
        """
        logger.info("Loading %s model on %s...", self.weights, self.device)
        try:
            model = torch.hub.load(
                "ultralytics/yolov5", self.weights, pretrained=True
            )
            model = model.to(self.device).eval()
            model.conf = self.confidence_threshold
            model.iou = self.iou_threshold
            logger.info("%s model loaded", self.weights)
            return model
        except Exception as e:
            raise RuntimeError(f"Failed to load YOLOv5 model: {e}") from e

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Detect objects in a frame.

        Args:
            frame: Input frame as RGB numpy array (H, W, 3).

        Returns:
            List of Detection objects, sorted by confidence.
        """
        pil_image = Image.fromarray(frame)

        # Update model thresholds
        self.model.conf = self.confidence_threshold
        self.model.iou = self.iou_threshold

        results = self.model(pil_image, size=self.inference_size)
        detections_df = results.pandas().xyxy[0]

        if detections_df.empty:
            return []

        # Keep top N by confidence
        detections_df = detections_df.nlargest(self.max_objects, "confidence")

        detections = []
        for _, row in detections_df.iterrows():
            x_min, y_min = float(row["xmin"]), float(row["ymin"])
            detections.append(
                Detection(
                    label=str(row["name"]),
                    score=float(row["confidence"]),
                    bbox=(
                        x_min,
                        y_min,
                        float(row["xmax"]) - x_min,
                        float(row["ymax"]) - y_min,
                    ),
                    class_id=int(row["class"]),
                )
            )

        logger.debug(
            "Detected %d objects (YOLO): %s",
            len(detections),
            ", ".join(d.debug_label() for d in detections),
        )
        return detections
