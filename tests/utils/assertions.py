"""Custom assertion helpers."""

from typing import Any

from taskhub.models.task import Subtask, Task


def assert_valid_task(task: Any) -> None:
    """Assert that a task returned by the service is well formed."""
    assert isinstance(task, Task)
    assert task.id
    assert task.title
    assert isinstance(task.subtasks, list)
    for subtask in task.subtasks:
        assert_valid_subtask(subtask)
        assert subtask.task_id == task.id


def assert_valid_subtask(subtask: Any) -> None:
    """Assert that a subtask returned by the service is well formed."""
    assert isinstance(subtask, Subtask)
    assert subtask.id
    assert subtask.task_id
    assert isinstance(subtask.completed, bool)


def assert_subtasks_match(subtasks: list[Subtask], seeds: list[dict]) -> None:
    """Assert created subtasks mirror their input records, in order."""
    assert len(subtasks) == len(seeds)
    for subtask, seed in zip(subtasks, seeds):
        assert subtask.title == seed["title"]
        assert subtask.description == seed.get("description")
        assert subtask.completed is bool(seed.get("completed") or False)
