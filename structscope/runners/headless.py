"""Headless scene scanning runner."""

import logging
import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from tqdm import tqdm

from ..config import ProcessingConfig
from ..core.io import FrameSource
from ..core.stacks import summarize_stacks
from ..detection.base import Detector
from ..scene.classifier import STACK, array_items
from ..scene.tasks import IndexFocusTask
from .loop import DetectionLoop, SceneState

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Totals for one headless run."""

    frames: int = 0
    sampled_ticks: int = 0
    failed_ticks: int = 0
    concepts: Counter = field(default_factory=Counter)
    task_completed: bool = False

    def format(self) -> str:
        lines = [
            f"Frames read: {self.frames}",
            f"Sampled ticks: {self.sampled_ticks} ({self.failed_ticks} failed)",
        ]
        if self.concepts:
            lines.append("Concepts recognised:")
            for concept, count in self.concepts.most_common():
                lines.append(f"  {concept}: {count} tick(s)")
        else:
            lines.append("No concept recognised.")
        return "\n".join(lines)


def create_detector(config: ProcessingConfig) -> Detector:
    """Create detector based on config.

    Args:
        config: Processing configuration.

    Returns:
        Detector instance.

    Raises:
        ValueError: If the detection model is unknown.
        RuntimeError: If the model cannot be loaded.
    """
    if config.detection.model == "yolo":
        from ..detection.yolo import YOLODetector
        return YOLODetector.from_config(config.detection)
    raise ValueError(f"Unknown detection model: {config.detection.model}")


def describe_tick(state: SceneState, elapsed_s: float) -> str:
    """One status line for a sampled tick whose concept changed."""
    if not state.result.matched:
        return f"[{elapsed_s:8.2f}s] no pattern"
    line = f"[{elapsed_s:8.2f}s] {state.result.concept}: {state.result.detail}"
    if state.result.concept != STACK:
        return line
    stacks = summarize_stacks(state.stacks)
    if stacks:
        line += " [" + ", ".join(s.label for s in stacks) + "]"
    return line


def describe_debug(state: SceneState) -> str:
    """Raw detections and per-role counts of a sampled tick."""
    counts = state.counts
    labels = ", ".join(state.debug_labels) or "none"
    return (
        f"  detections: {labels} | persons={counts.persons} books={counts.books} "
        f"cups={counts.cups} array items={counts.array_items} stacks={len(state.stacks)}"
    )


def run_headless(config: ProcessingConfig, detector: Optional[Detector] = None) -> RunSummary:
    """Scan a camera, video or image and report recognised concepts.

    Args:
        config: Processing configuration.
        detector: Detector to use; built from config when None.

    Returns:
        RunSummary of the run.

    Raises:
        SystemExit: If the model or the frame source cannot be opened.
    """
    try:
        if detector is None:
            print(f"Loading {config.detection.model} detector...")
            detector = create_detector(config)
        source = FrameSource(config.source)
    except (RuntimeError, IOError) as e:
        print(f"Error loading camera or model: {e}", file=sys.stderr)
        sys.exit(1)

    loop = DetectionLoop.from_config(
        detector, config.loop, edges=config.edges, thresholds=config.thresholds
    )
    state = SceneState()
    task = IndexFocusTask() if config.loop.index_task else None
    summary = RunSummary()
    last_concept = None
    start_ms = None

    print(f"Scanning {config.source} (mode: {config.loop.mode})")
    with source:
        total = source.frame_count or None
        if config.max_frames is not None:
            total = min(total, config.max_frames) if total else config.max_frames
        progress = tqdm(total=total, desc="Scanning", disable=source.is_camera)
        try:
            for index, frame in enumerate(source):
                if config.max_frames is not None and index >= config.max_frames:
                    break
                summary.frames += 1
                # Files are throttled in media time, cameras in wall time
                now_ms = None if source.is_camera else index * 1000.0 / source.fps
                if loop.tick(state, frame, now_ms):
                    if start_ms is None:
                        start_ms = state.last_invocation_ms
                    elapsed_s = (state.last_invocation_ms - start_ms) / 1000.0
                    if state.result.matched:
                        summary.concepts[state.result.concept] += 1
                    if state.result.concept != last_concept:
                        tqdm.write(describe_tick(state, elapsed_s))
                        last_concept = state.result.concept
                    if config.loop.debug_labels:
                        tqdm.write(describe_debug(state))
                    if task is not None:
                        items = array_items(state.detections, config.thresholds)
                        if task.update(state.result, items):
                            tqdm.write(task.message)
                progress.update(1)
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping scan")
        finally:
            progress.close()

    summary.sampled_ticks = state.sampled_ticks
    summary.failed_ticks = state.failed_ticks
    summary.task_completed = bool(task and task.completed)
    print(summary.format())
    return summary
