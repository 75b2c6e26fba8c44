import pytest

from core import (
    CyclicDependencyError,
    SelfDependencyError,
    Status,
    Task,
    TaskNotFoundError,
    add_dependency,
    build_dependency_graph,
    get_blocked_by,
    get_blocking_tasks,
    get_dependency_tree,
    is_blocked,
    remove_dependency,
)
from core.dependency_validator import find_path


def _task(task_id, deps=None, status=Status.PENDING):
    task = Task.new(task_id, f"Task {task_id}")
    task.depends_on = list(deps or [])
    task.status = status
    return task


def test_graph_is_indexed_by_id():
    tasks = [_task(1, [2]), _task(2)]
    assert build_dependency_graph(tasks) == {1: [2], 2: []}


def test_find_path_follows_depends_on():
    graph = {1: [2], 2: [3], 3: []}
    assert find_path(1, 3, graph) == [1, 2, 3]
    assert find_path(3, 1, graph) is None


def test_find_path_terminates_on_corrupt_cycle():
    graph = {1: [2], 2: [1], 3: []}
    assert find_path(1, 3, graph) is None


def test_self_dependency_rejected():
    with pytest.raises(SelfDependencyError):
        add_dependency(1, 1, [_task(1)])


def test_unknown_dependency_rejected():
    with pytest.raises(TaskNotFoundError) as excinfo:
        add_dependency(1, 99, [_task(1)])
    assert excinfo.value.task_id == 99


def test_two_node_cycle_detected():
    tasks = [_task(1, [2]), _task(2)]
    with pytest.raises(CyclicDependencyError) as excinfo:
        add_dependency(2, 1, tasks)
    assert excinfo.value.path == [2, 1, 2]
    assert "#2 -> #1 -> #2" in str(excinfo.value)
    assert tasks[1].depends_on == []


def test_three_node_cycle_detected():
    tasks = [_task(1, [2]), _task(2, [3]), _task(3)]
    with pytest.raises(CyclicDependencyError) as excinfo:
        add_dependency(3, 1, tasks)
    assert excinfo.value.path == [3, 1, 2, 3]
    assert tasks[2].depends_on == []


def test_valid_edge_passes():
    tasks = [_task(1, [2]), _task(2), _task(3)]
    add_dependency(3, 1, tasks)
    add_dependency(1, 3, tasks)


def test_remove_dependency_reports_change():
    task = _task(1, [2, 3])
    assert remove_dependency(task, 2) is True
    assert task.depends_on == [3]
    assert remove_dependency(task, 2) is False


def test_blocked_by_ignores_done_and_missing():
    tasks = [_task(1, [2, 3, 42]), _task(2, status=Status.DONE), _task(3)]
    assert get_blocked_by(tasks[0], tasks) == [3]
    assert is_blocked(tasks[0], tasks)
    tasks[2].status = Status.DONE
    assert not is_blocked(tasks[0], tasks)


def test_blocking_tasks_lists_unfinished_dependents():
    tasks = [_task(1), _task(2, [1]), _task(3, [1], status=Status.DONE), _task(4, [1])]
    assert get_blocking_tasks(1, tasks) == [2, 4]


def test_dependency_tree_expands_recursively():
    tasks = [_task(1, [2, 3]), _task(2, [4]), _task(3), _task(4)]
    tree = get_dependency_tree(1, tasks)
    assert tree.id == 1
    assert [child.id for child in tree.children] == [2, 3]
    assert [child.id for child in tree.children[0].children] == [4]


def test_dependency_tree_shows_shared_node_once_and_skips_unknown():
    tasks = [_task(1, [2, 3, 77]), _task(2, [4]), _task(3, [4]), _task(4)]
    tree = get_dependency_tree(1, tasks)
    assert [child.id for child in tree.children] == [2, 3]
    assert [c.id for c in tree.children[0].children] == [4]
    assert tree.children[1].children == []


def test_dependency_tree_unknown_root():
    assert get_dependency_tree(5, [_task(1)]) is None
