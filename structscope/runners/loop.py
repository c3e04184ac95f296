"""Throttled detection loop feeding the scene classifier."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from ..config import DEFAULT_THRESHOLDS, MODES, EdgeConfig, LoopConfig, Thresholds
from ..core.lines import HoughLineExtractor, LineExtractor, filter_vertical_lines
from ..core.stacks import Stack, cluster_stacks
from ..detection.base import Detection, Detector
from ..scene.classifier import (
    NO_MATCH,
    ClassificationResult,
    SceneClassifier,
    SceneCounts,
    confident,
    count_scene,
)

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class SceneState:
    """Classification context threaded through every loop tick.

    Only DetectionLoop.tick writes to it. Every field except the counters
    and last_invocation_ms is replaced wholesale on each sampled tick.
    """

    last_invocation_ms: Optional[float] = None
    detections: List[Detection] = field(default_factory=list)
    stacks: List[Stack] = field(default_factory=list)
    result: ClassificationResult = NO_MATCH
    counts: SceneCounts = field(default_factory=SceneCounts)
    debug_labels: List[str] = field(default_factory=list)
    sampled_ticks: int = 0
    failed_ticks: int = 0


class DetectionLoop:
    """Bound detector and line-extractor calls to one per interval.

    Calls are made inline from tick(), so a new detection never starts while
    a previous one is still running and results land in invocation order.
    """

    def __init__(
        self,
        detector: Detector,
        line_extractor: Optional[LineExtractor] = None,
        classifier: Optional[SceneClassifier] = None,
        thresholds: Thresholds = DEFAULT_THRESHOLDS,
        interval_ms: float = 200.0,
        mode: str = "auto",
        clock: Callable[[], float] = monotonic_ms,
    ):
        """Initialize the loop.

        Args:
            detector: Object detector.
            line_extractor: Edge/line extractor; stacks are never detected
                when None.
            classifier: Scene classifier; built from thresholds when None.
            thresholds: Threshold table for filtering and clustering.
            interval_ms: Minimum time between two sampled ticks.
            mode: Classification mode, see config.MODES.
            clock: Millisecond clock used when tick() gets no timestamp.

        Raises:
            ValueError: If mode is unknown or interval_ms is negative.
        """
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}; expected one of {MODES}")
        if interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")
        self.detector = detector
        self.line_extractor = line_extractor
        self.thresholds = thresholds
        self.classifier = classifier or SceneClassifier(thresholds)
        self.interval_ms = interval_ms
        self.mode = mode
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        detector: Detector,
        config: LoopConfig,
        edges: Optional[EdgeConfig] = None,
        thresholds: Thresholds = DEFAULT_THRESHOLDS,
    ) -> "DetectionLoop":
        """Create a DetectionLoop with an OpenCV line extractor from config."""
        extractor = HoughLineExtractor(edges) if config.extract_edges else None
        return cls(
            detector=detector,
            line_extractor=extractor,
            thresholds=thresholds,
            interval_ms=config.interval_ms,
            mode=config.mode,
        )

    def due(self, state: SceneState, now_ms: float) -> bool:
        """Whether enough time has passed since the last sampled tick."""
        if state.last_invocation_ms is None:
            return True
        return now_ms - state.last_invocation_ms >= self.interval_ms

    def tick(self, state: SceneState, frame: np.ndarray, now_ms: Optional[float] = None) -> bool:
        """Sample a frame if the interval has elapsed.

        Args:
            state: Classification context, updated in place.
            frame: Current RGB frame.
            now_ms: Timestamp in milliseconds; read from the clock when None.

        Returns:
            True if the frame was sampled, False if the tick was skipped.
        """
        if now_ms is None:
            now_ms = self.clock()
        if not self.due(state, now_ms):
            return False
        state.last_invocation_ms = now_ms
        state.sampled_ticks += 1

        detections = self._detect(state, frame)
        stacks = self._find_stacks(state, frame, detections)

        state.detections = detections
        state.stacks = stacks
        state.debug_labels = [d.debug_label() for d in detections]
        state.counts = count_scene(detections, self.thresholds)
        state.result = self.classifier.classify(detections, stacks, self.mode)
        logger.debug(
            "tick at %.0f ms: %d detections, %d stacks -> %r",
            now_ms,
            len(detections),
            len(stacks),
            state.result.concept,
        )
        return True

    def _detect(self, state: SceneState, frame: np.ndarray) -> List[Detection]:
        try:
            return list(self.detector.detect(frame))
        except Exception:
            logger.exception("Detection error")
            state.failed_ticks += 1
            return []

    def _find_stacks(
        self, state: SceneState, frame: np.ndarray, detections: List[Detection]
    ) -> List[Stack]:
        if self.line_extractor is None:
            return []
        if not confident(detections, self.thresholds.stack_classes, self.thresholds):
            return []
        try:
            raw_lines = self.line_extractor.extract_lines(frame)
        except Exception:
            logger.exception("Stack detection error")
            state.failed_ticks += 1
            return []
        segments = filter_vertical_lines(raw_lines, self.thresholds)
        return cluster_stacks(segments, self.thresholds)
