"""Command-line interface for structscope."""

import argparse
import logging
from pathlib import Path

from . import __version__
from .config import MODES, ProcessingConfig
from .core.io import is_camera_source

EPILOG = """\
Examples:
  structscope 0
  structscope shelf.mp4 --mode stack --debug-labels
  structscope desk.jpg --detect-confidence 0.3
  structscope 0 --mode array --index-task

Concepts (checked in this order in auto mode):
  Queue (FIFO)   2+ people whose boxes line up (top edges within 80 px)
  Stack (LIFO)   a book plus a pile of vertical spine edges
  Linked List    3+ cups side by side in a row
  Array          2+ phones and/or bottles

SOURCE is a camera index (0, 1, ...), a video file or an image.
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure console logging for the command-line run."""
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def parse_args(args=None) -> ProcessingConfig:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv).

    Returns:
        ProcessingConfig with parsed options.
    """
    parser = argparse.ArgumentParser(
        prog="structscope",
        description="Recognise data-structure concepts in a camera scene.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "source",
        type=str,
        help="Camera index, video (.mp4, .avi, .mov, .mkv) or image file",
    )

    parser.add_argument(
        "--mode",
        type=str,
        default="auto",
        choices=MODES,
        help="Concept to look for; auto tries all in priority order (default: auto)",
    )

    parser.add_argument(
        "--interval-ms",
        type=float,
        default=200.0,
        help="Minimum milliseconds between two detector runs (default: 200)",
    )

    parser.add_argument(
        "--frames",
        type=int,
        default=None,
        help="Stop after N frames (default: whole file, or until Ctrl-C for cameras)",
    )

    parser.add_argument(
        "--no-edges",
        action="store_true",
        help="Skip edge extraction; disables Stack recognition",
    )

    parser.add_argument(
        "--index-task",
        action="store_true",
        help="Run the array access-by-index exercise once an Array is recognised",
    )

    parser.add_argument(
        "--debug-labels",
        action="store_true",
        help="Print raw detections for every sampled frame",
    )

    # Detection arguments
    parser.add_argument(
        "--detect-model",
        type=str,
        default="yolo",
        choices=["yolo"],
        help="Detection model to use (default: yolo)",
    )

    parser.add_argument(
        "--weights",
        type=str,
        default="yolov5s",
        help="YOLOv5 torch hub weights, e.g. yolov5n, yolov5x (default: yolov5s)",
    )

    parser.add_argument(
        "--detect-confidence",
        type=float,
        default=0.25,
        help="Detector confidence threshold; 0.0-1.0 (default: 0.25)",
    )

    parser.add_argument(
        "--max-objects",
        type=int,
        default=20,
        help="Maximum detections kept per frame (default: 20)",
    )

    parser.add_argument(
        "--device",
        type=str,
        default=None,
        help="Inference device, e.g. cpu or cuda (default: cuda when available)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parsed = parser.parse_args(args)

    if not is_camera_source(parsed.source) and not Path(parsed.source).exists():
        parser.error(f"Input file not found: {parsed.source}")
    if parsed.interval_ms < 0:
        parser.error("--interval-ms must be >= 0")
    if parsed.frames is not None and parsed.frames <= 0:
        parser.error("--frames must be positive")
    if not 0.0 <= parsed.detect_confidence <= 1.0:
        parser.error("--detect-confidence must be between 0.0 and 1.0")
    if parsed.max_objects <= 0:
        parser.error("--max-objects must be positive")

    return ProcessingConfig.from_args(
        source=parsed.source,
        max_frames=parsed.frames,
        verbose=parsed.verbose,
        detection_model=parsed.detect_model,
        detection_weights=parsed.weights,
        detection_confidence=parsed.detect_confidence,
        detection_max_objects=parsed.max_objects,
        device=parsed.device,
        interval_ms=parsed.interval_ms,
        mode=parsed.mode,
        extract_edges=not parsed.no_edges,
        index_task=parsed.index_task,
        debug_labels=parsed.debug_labels,
    )
