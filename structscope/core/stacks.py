"""Single-link clustering of vertical lines into physical stacks."""

from dataclasses import dataclass
from typing import List, Sequence

from ..config import DEFAULT_THRESHOLDS, Thresholds
from .lines import LineSegment

Stack = List[LineSegment]


@dataclass(frozen=True)
class StackSummary:
    """Overlay-ready description of one stack.

    Attributes:
        index: 1-based position among summarized stacks.
        line_count: Number of vertical lines (book spines) in the stack.
        center_x: Mean mid_x of the stack's lines.
        top_y: Top-most y of the stack.
    """

    index: int
    line_count: int
    center_x: float
    top_y: float

    @property
    def label(self) -> str:
        return f"Stack {self.index} ({self.line_count} book/s)"


def cluster_stacks(
    segments: Sequence[LineSegment],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> List[Stack]:
    """Group vertical segments into stacks by x-proximity.

    Segments are sorted by mid_x and chained greedily: a segment joins the
    current stack when its mid_x is within stack_link_distance of the segment
    added last, otherwise it opens a new stack. Chains may therefore span more
    than stack_link_distance end to end. Each stack is then ordered top-most
    line first.

    Args:
        segments: Filtered vertical segments.
        thresholds: Threshold table.

    Returns:
        Stacks in left-to-right order; empty when fewer than min_stack_lines
        segments are given.
    """
    if len(segments) < thresholds.min_stack_lines:
        return []

    stacks: List[Stack] = []
    for segment in sorted(segments, key=lambda s: s.mid_x):
        if stacks and abs(segment.mid_x - stacks[-1][-1].mid_x) <= thresholds.stack_link_distance:
            stacks[-1].append(segment)
        else:
            stacks.append([segment])

    for stack in stacks:
        stack.sort(key=lambda s: s.y_top)
    return stacks


def summarize_stacks(
    stacks: Sequence[Stack],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> List[StackSummary]:
    """Describe stacks that have enough lines to be drawn as a pile."""
    valid = [stack for stack in stacks if len(stack) >= thresholds.min_stack_lines]
    return [
        StackSummary(
            index=i,
            line_count=len(stack),
            center_x=sum(s.mid_x for s in stack) / len(stack),
            top_y=min(s.y_top for s in stack),
        )
        for i, stack in enumerate(valid, start=1)
    ]
