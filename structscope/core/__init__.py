"""Core geometry and I/O helpers."""

from .lines import HoughLineExtractor, LineExtractor, LineSegment, filter_vertical_lines
from .stacks import Stack, StackSummary, cluster_stacks, summarize_stacks

__all__ = [
    "HoughLineExtractor",
    "LineExtractor",
    "LineSegment",
    "Stack",
    "StackSummary",
    "cluster_stacks",
    "filter_vertical_lines",
    "summarize_stacks",
]
