from structscope.detection.base import Detection
from structscope.scene.classifier import ARRAY, NO_MATCH, QUEUE, STACK, ClassificationResult
from structscope.scene.tasks import IndexFocusTask, focused_index


def item(x, size):
    return Detection(label="bottle", score=0.9, bbox=(x, 0, size, size))


def row(*sizes):
    return tuple(item(i * 100, s) for i, s in enumerate(sizes))


def array_result(items):
    return ClassificationResult(concept=ARRAY, detail="", members=items)


def test_focused_index():
    assert focused_index([]) is None
    assert focused_index([item(0, 10), item(100, 30), item(200, 20)]) == 1


def test_target_is_fixed_at_middle_of_first_array():
    task = IndexFocusTask()
    items = row(10, 10, 10, 10, 10)
    assert task.update(array_result(items), items) is False
    assert task.target_index == 2
    items = row(10, 10)
    task.update(array_result(items), items)
    assert task.target_index == 2


def test_task_completes_when_target_is_closest():
    task = IndexFocusTask()
    items = row(10, 10, 10)
    task.update(array_result(items), items)
    assert task.target_index == 1
    items = row(50, 10, 10)
    assert task.update(array_result(items), items) is False
    items = row(10, 50, 10)
    assert task.update(array_result(items), items) is True
    assert task.completed
    assert "arr[1]" in task.message
    assert task.update(array_result(items), items) is False


def test_task_completes_while_another_concept_wins():
    task = IndexFocusTask()
    items = row(10, 10, 10)
    task.update(array_result(items), items)

    stack_result = ClassificationResult(concept=STACK, detail="")
    assert task.update(stack_result, row(10, 50, 10)) is True
    assert task.completed


def test_target_needs_an_array_first():
    task = IndexFocusTask()
    task.update(NO_MATCH, row(10, 50))
    task.update(ClassificationResult(concept=QUEUE, detail="", members=(item(0, 1),)), row(50, 10))
    assert task.target_index is None
    assert not task.completed
