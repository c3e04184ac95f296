from typing import Iterable, Sequence, get_type_hints

import pytest

from structscope.config import Thresholds
from structscope.core.lines import LineSegment
from structscope.detection.base import Detection
from structscope.scene.classifier import (
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
    confident,
    count_scene,
)


def det(label, score, x=0, y=0, w=50, h=100):
    return Detection(label=label, score=score, bbox=(x, y, w, h))


def stack_at(x):
    return [LineSegment.from_endpoints(x, 0, x, 100), LineSegment.from_endpoints(x + 20, 10, x + 20, 120)]


def test_queue_scenario():
    persons = [det("person", 0.6, x=i * 100, y=y) for i, y in enumerate([100, 105, 110])]
    result = classify_scene(persons, [])
    assert result.concept == QUEUE
    assert "3" in result.detail


def test_stack_scenario():
    result = classify_scene([det("book", 0.5)], [stack_at(10), stack_at(300)])
    assert result.concept == STACK
    assert "2" in result.detail
    assert result.members == ()


def test_empty_scene():
    result = classify_scene([], [])
    assert result == ClassificationResult(concept="", detail="")
    assert not result.matched


def test_linked_list_scenario():
    cups = [det("cup", 0.45, x=x, y=200) for x in (10, 60, 110, 160)]
    result = classify_scene(cups, [])
    assert result.concept == LINKED_LIST
    assert "null" in result.detail


def test_queue_spread_boundary_is_strict():
    persons = [det("person", 0.9, y=100), det("person", 0.9, y=180)]
    assert classify_scene(persons, []).concept == ""
    persons = [det("person", 0.9, y=100), det("person", 0.9, y=179.5)]
    assert classify_scene(persons, []).concept == QUEUE


def test_queue_wins_over_stack_and_array():
    detections = [
        det("person", 0.95, y=10),
        det("person", 0.95, y=12),
        det("book", 0.99),
        det("book", 0.99),
        det("cell phone", 0.99),
        det("bottle", 0.99),
        det("bottle", 0.99),
    ]
    result = classify_scene(detections, [stack_at(0), stack_at(200)])
    assert result.concept == QUEUE


def test_stack_wins_over_linked_list():
    detections = [det("book", 0.7)] + [det("cup", 0.9, x=x, y=50) for x in (0, 100, 200)]
    assert classify_scene(detections, [stack_at(0)]).concept == STACK


def test_misaligned_persons_fall_through_to_array():
    detections = [
        det("person", 0.9, y=0),
        det("person", 0.9, y=300),
        det("cell phone", 0.6),
        det("bottle", 0.6),
    ]
    result = classify_scene(detections, [])
    assert result.concept == ARRAY
    assert "2" in result.detail


def test_book_without_stacks_is_not_a_stack():
    assert classify_scene([det("book", 0.9)], []).concept == ""


def test_confidence_floor_is_exclusive():
    persons = [det("person", 0.4, y=100), det("person", 0.4, y=100)]
    assert classify_scene(persons, []) == NO_MATCH
    assert classify_scene([det("book", 0.4)], [stack_at(0)]) == NO_MATCH


def test_misaligned_cups_do_not_form_a_list():
    cups = [det("cup", 0.9, x=0, y=0), det("cup", 0.9, x=50, y=40), det("cup", 0.9, x=100, y=80)]
    assert classify_scene(cups, []).concept == ""


def test_two_cups_are_not_a_list():
    cups = [det("cup", 0.9, x=0), det("cup", 0.9, x=50)]
    assert classify_scene(cups, []).concept == ""


def test_unrelated_classes_are_ignored():
    detections = [det("dog", 0.99), det("laptop", 0.99), det("chair", 0.99)]
    assert classify_scene(detections, [stack_at(0)]) == NO_MATCH


def test_members_are_ordered_left_to_right():
    cups = [det("cup", 0.9, x=x, y=10) for x in (160, 10, 110, 60)]
    result = classify_scene(cups, [])
    assert [m.x for m in result.members] == [10, 60, 110, 160]

    persons = [det("person", 0.9, x=300, y=5), det("person", 0.9, x=20, y=0)]
    assert [m.x for m in classify_scene(persons, []).members] == [20, 300]


def test_classification_is_deterministic():
    detections = [det("cell phone", 0.8, x=50), det("bottle", 0.7, x=10), det("book", 0.3)]
    classifier = SceneClassifier()
    first = classifier.classify(detections, [])
    for _ in range(5):
        assert classifier.classify(detections, []) == first
    assert classify_scene(list(detections), []) == first


def test_forced_mode_only_checks_its_rule():
    detections = [
        det("person", 0.9, y=0),
        det("person", 0.9, y=0),
        det("cell phone", 0.9),
        det("bottle", 0.9),
    ]
    assert classify_scene(detections, [], mode="array").concept == ARRAY
    assert classify_scene(detections, [], mode="queue").concept == QUEUE
    assert classify_scene(detections, [], mode="linked-list") == NO_MATCH
    assert classify_scene(detections, [], mode="stack") == NO_MATCH


def test_unknown_mode_raises():
    with pytest.raises(ValueError):
        classify_scene([], [], mode="heap")


def test_custom_thresholds():
    lenient = Thresholds(confidence_floor=0.1, min_queue_persons=3)
    persons = [det("person", 0.2, y=0), det("person", 0.2, y=0)]
    assert classify_scene(persons, [], thresholds=lenient) == NO_MATCH
    persons.append(det("person", 0.2, y=5))
    assert classify_scene(persons, [], thresholds=lenient).concept == QUEUE


def test_count_scene():
    detections = [
        det("person", 0.9),
        det("person", 0.3),
        det("book", 0.5),
        det("cup", 0.41),
        det("cell phone", 0.8),
        det("bottle", 0.8),
        det("tv", 0.99),
    ]
    assert count_scene(detections) == SceneCounts(persons=1, books=1, cups=1, array_items=2)


def test_array_items_are_confident_and_ordered():
    detections = [
        det("bottle", 0.9, x=300),
        det("cell phone", 0.3, x=0),
        det("cell phone", 0.8, x=100),
        det("cup", 0.9, x=50),
    ]
    assert [d.x for d in array_items(detections)] == [100, 300]
    assert array_items([]) == []


def test_rule_helpers_are_annotated():
    hints = get_type_hints(confident)
    assert hints["classes"] == Iterable[str]
    for rule in ("_try_queue", "_try_stack", "_try_linked_list", "_try_array"):
        hints = get_type_hints(getattr(SceneClassifier, rule))
        assert hints["detections"] == Sequence[Detection]
        assert "stacks" in hints
