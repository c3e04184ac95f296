from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from structscope.config import EdgeConfig, Thresholds
from structscope.core.lines import HoughLineExtractor, LineSegment, filter_vertical_lines
from structscope.core.stacks import cluster_stacks
from structscope.detection.base import Detection
from structscope.runners.loop import DetectionLoop, SceneState
from structscope.scene.classifier import STACK


def test_line_segment_derived_fields():
    seg = LineSegment.from_endpoints(10, 200, 14, 100)
    assert seg.mid_x == 12
    assert seg.y_top == 100
    assert seg.y_bottom == 200
    assert seg.length == 100


@pytest.mark.parametrize(
    "line, kept",
    [
        ((0, 0, 14, 41), True),
        ((0, 0, 15, 100), False),  # dx must be strictly below 15
        ((0, 0, 0, 40), False),  # dy must be strictly above 40
        ((50, 100, 45, 20), True),
        ((0, 0, 200, 0), False),
    ],
)
def test_filter_vertical_lines_thresholds(line, kept):
    assert (len(filter_vertical_lines([line])) == 1) is kept


def test_filter_preserves_order():
    raw = [(300, 0, 300, 100), (5, 5, 100, 5), (10, 0, 12, 90), (200, 10, 200, 60)]
    result = filter_vertical_lines(raw)
    assert [s.x1 for s in result] == [300, 10, 200]


def test_filter_empty_input():
    assert filter_vertical_lines([]) == []


def test_filter_uses_threshold_table():
    strict = Thresholds(max_line_dx=2, min_line_dy=100)
    raw = [(0, 0, 1, 120), (0, 0, 3, 120), (0, 0, 0, 90)]
    assert [s.x2 for s in filter_vertical_lines(raw, strict)] == [1]


def test_hough_extractor_blank_frame():
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    assert HoughLineExtractor().extract_lines(frame) == []


def test_hough_extractor_finds_spine_edges():
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    cv2.rectangle(frame, (100, 40), (130, 200), (255, 255, 255), -1)

    raw = HoughLineExtractor(EdgeConfig()).extract_lines(frame)
    vertical = filter_vertical_lines(raw)

    assert len(vertical) >= 2
    assert all(90 <= s.mid_x <= 140 for s in vertical)
    stacks = cluster_stacks(vertical)
    assert len(stacks) == 1


def test_hough_extractor_accepts_grayscale():
    frame = np.zeros((240, 320), dtype=np.uint8)
    frame[40:200, 100:130] = 255
    raw = HoughLineExtractor().extract_lines(frame)
    assert all(len(line) == 4 for line in raw)
    assert len(filter_vertical_lines(raw)) >= 2


@pytest.mark.parametrize(
    "hough_output",
    [
        np.array([[[10, 0, 10, 100]], [[30, 5, 32, 120]]], dtype=np.int32),
        np.array([[10, 0, 10, 100], [30, 5, 32, 120]], dtype=np.int32),
    ],
)
def test_hough_extractor_handles_both_output_layouts(hough_output):
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    with patch("structscope.core.lines.cv2.HoughLinesP", return_value=hough_output):
        raw = HoughLineExtractor().extract_lines(frame)
    assert raw == [(10, 0, 10, 100), (30, 5, 32, 120)]
    assert all(isinstance(v, int) for line in raw for v in line)


def test_hough_extractor_feeds_stack_recognition():
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    cv2.rectangle(frame, (60, 40), (90, 200), (255, 255, 255), -1)
    cv2.rectangle(frame, (220, 40), (250, 200), (255, 255, 255), -1)

    detector = MagicMock()
    detector.detect.return_value = [Detection(label="book", score=0.8, bbox=(50, 30, 220, 180))]
    loop = DetectionLoop(detector, line_extractor=HoughLineExtractor())
    state = SceneState()
    loop.tick(state, frame, now_ms=0)

    assert state.failed_ticks == 0
    assert len(state.stacks) == 2
    assert state.result.concept == STACK
