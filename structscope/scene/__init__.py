"""Scene classification into data-structure concepts."""

from .classifier import (
    ARRAY,
    LINKED_LIST,
    NO_MATCH,
    QUEUE,
    STACK,
    ClassificationResult,
    SceneClassifier,
    SceneCounts,
    array_items,
    classify_scene,
    count_scene,
)
from .tasks import IndexFocusTask, focused_index

__all__ = [
    "ARRAY",
    "LINKED_LIST",
    "NO_MATCH",
    "QUEUE",
    "STACK",
    "ClassificationResult",
    "IndexFocusTask",
    "SceneClassifier",
    "SceneCounts",
    "array_items",
    "classify_scene",
    "count_scene",
    "focused_index",
]
