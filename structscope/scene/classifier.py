"""Rule cascade mapping object arrangements onto data-structure concepts."""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import DEFAULT_THRESHOLDS, MODES, Thresholds
from ..core.stacks import Stack
from ..detection.base import Detection

QUEUE = "Queue (FIFO)"
STACK = "Stack (LIFO)"
LINKED_LIST = "Linked List"
ARRAY = "Array"


@dataclass(frozen=True)
class ClassificationResult:
    """Concept recognised in one frame.

    Attributes:
        concept: Concept label, "" when nothing was recognised.
        detail: Human-readable justification, "" when nothing was recognised.
        members: Detections forming the concept in structure order (queue
            front first, list head first, array index 0 first).
    """

    concept: str = ""
    detail: str = ""
    members: Tuple[Detection, ...] = ()

    @property
    def matched(self) -> bool:
        return bool(self.concept)


NO_MATCH = ClassificationResult()


@dataclass(frozen=True)
class SceneCounts:
    """Confident detections per role in one frame."""

    persons: int = 0
    books: int = 0
    cups: int = 0
    array_items: int = 0


def confident(
    detections: Sequence[Detection],
    classes: Iterable[str],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> List[Detection]:
    """Detections of the given classes scoring above the confidence floor."""
    return [
        d for d in detections
        if d.label in classes and d.score > thresholds.confidence_floor
    ]


def array_items(
    detections: Sequence[Detection], thresholds: Thresholds = DEFAULT_THRESHOLDS
) -> List[Detection]:
    """Confident array objects in index order (left to right)."""
    items = confident(detections, thresholds.array_classes, thresholds)
    return sorted(items, key=lambda d: d.x)


def y_spread(detections: Sequence[Detection]) -> float:
    """Difference between the largest and smallest box top."""
    ys = [d.y for d in detections]
    return max(ys) - min(ys)


def count_scene(
    detections: Sequence[Detection], thresholds: Thresholds = DEFAULT_THRESHOLDS
) -> SceneCounts:
    return SceneCounts(
        persons=len(confident(detections, thresholds.queue_classes, thresholds)),
        books=len(confident(detections, thresholds.stack_classes, thresholds)),
        cups=len(confident(detections, thresholds.list_classes, thresholds)),
        array_items=len(confident(detections, thresholds.array_classes, thresholds)),
    )


class SceneClassifier:
    """Fixed-priority rule cascade: Queue, Stack, Linked List, Array.

    The first rule that matches wins. In a forced mode only the rule for that
    mode is evaluated. The classifier holds no state besides its thresholds,
    so equal inputs always give equal results.
    """

    def __init__(self, thresholds: Thresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds
        self._rules: Dict[str, Callable[[Sequence[Detection], Sequence[Stack]], Optional[ClassificationResult]]] = {
            "queue": self._try_queue,
            "stack": self._try_stack,
            "linked-list": self._try_linked_list,
            "array": self._try_array,
        }

    def classify(
        self,
        detections: Sequence[Detection],
        stacks: Sequence[Stack],
        mode: str = "auto",
    ) -> ClassificationResult:
        """Classify a scene.

        Args:
            detections: Detections of the current frame.
            stacks: Stacks clustered from the current frame's vertical lines.
            mode: "auto" for the full cascade, or one of the forced modes.

        Returns:
            The first matching ClassificationResult, or NO_MATCH.

        Raises:
            ValueError: If mode is unknown.
        """
        if mode == "auto":
            rules = list(self._rules.values())
        elif mode in self._rules:
            rules = [self._rules[mode]]
        else:
            raise ValueError(f"Unknown mode {mode!r}; expected one of {MODES}")

        for rule in rules:
            result = rule(detections, stacks)
            if result is not None:
                return result
        return NO_MATCH

    def _try_queue(
        self, detections: Sequence[Detection], stacks: Sequence[Stack]
    ) -> Optional[ClassificationResult]:
        t = self.thresholds
        persons = confident(detections, t.queue_classes, t)
        if len(persons) < t.min_queue_persons or y_spread(persons) >= t.alignment_spread:
            return None
        return ClassificationResult(
            concept=QUEUE,
            detail=(
                f"Detected {len(persons)} person(s) standing in a line -> behaves like a "
                "Queue (First In, First Out): the first to arrive is the first to leave."
            ),
            members=tuple(sorted(persons, key=lambda d: d.x)),
        )

    def _try_stack(
        self, detections: Sequence[Detection], stacks: Sequence[Stack]
    ) -> Optional[ClassificationResult]:
        t = self.thresholds
        books = confident(detections, t.stack_classes, t)
        if len(books) < t.min_stack_books or not stacks:
            return None
        return ClassificationResult(
            concept=STACK,
            detail=(
                f"Detected {len(books)} book(s) arranged into {len(stacks)} stack(s) via "
                "vertical edges (spines) -> behaves like a Stack (Last In, First Out)."
            ),
        )

    def _try_linked_list(
        self, detections: Sequence[Detection], stacks: Sequence[Stack]
    ) -> Optional[ClassificationResult]:
        t = self.thresholds
        cups = confident(detections, t.list_classes, t)
        if len(cups) < t.min_list_cups:
            return None
        nodes = sorted(cups, key=lambda d: d.x)
        if y_spread(nodes) >= t.alignment_spread:
            return None
        return ClassificationResult(
            concept=LINKED_LIST,
            detail=(
                f"Detected {len(nodes)} cup(s) aligned in a row -> can be modeled as a "
                "Singly Linked List: each node points to the next, the last points to null."
            ),
            members=tuple(nodes),
        )

    def _try_array(
        self, detections: Sequence[Detection], stacks: Sequence[Stack]
    ) -> Optional[ClassificationResult]:
        t = self.thresholds
        items = array_items(detections, t)
        if len(items) < t.min_array_items:
            return None
        return ClassificationResult(
            concept=ARRAY,
            detail=(
                f"Detected {len(items)} phone/bottle object(s) -> modeled as an Array: "
                "fixed positions, each reached directly by its index."
            ),
            members=tuple(items),
        )


def classify_scene(
    detections: Sequence[Detection],
    stacks: Sequence[Stack],
    mode: str = "auto",
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> ClassificationResult:
    """Functional shortcut for SceneClassifier(thresholds).classify(...)."""
    return SceneClassifier(thresholds).classify(detections, stacks, mode)
