"""Dependency validation with cycle detection.

Pure domain logic over a full task snapshot.
No I/O operations - receives task data as parameters.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from .errors import CyclicDependencyError, SelfDependencyError, TaskNotFoundError
from .status import Status
from .task_detail import Task


@dataclass
class TreeNode:
    """One task in a dependency tree; children follow depends_on order."""

    id: int
    title: str
    status: Status
    children: List["TreeNode"] = field(default_factory=list)


def build_dependency_graph(tasks: Iterable[Task]) -> Dict[int, List[int]]:
    """Build an id-indexed adjacency view {task_id: [dep_ids]}."""
    return {task.id: list(task.depends_on) for task in tasks}


def _index(all_tasks: Iterable[Task]) -> Dict[int, Task]:
    return {task.id: task for task in all_tasks}


def find_path(start: int, goal: int, graph: Dict[int, List[int]]) -> Optional[List[int]]:
    """Find one path start -> ... -> goal following depends_on edges.

    Iterative DFS with a visited set, so corrupted data containing cycles
    cannot loop forever.

    Returns:
        List of task IDs from start to goal (inclusive), or None if unreachable
    """
    visited: Set[int] = set()
    # Each entry is (node, path to node)
    stack: List[tuple] = [(start, [start])]
    while stack:
        node, path = stack.pop()
        if node == goal:
            return path
        if node in visited:
            continue
        visited.add(node)
        # Reverse keeps exploration in depends_on order
        for neighbor in reversed(graph.get(node, [])):
            if neighbor not in visited:
                stack.append((neighbor, path + [neighbor]))
    return None


def add_dependency(task_id: int, depends_on_id: int, all_tasks: List[Task]) -> None:
    """Validate the edge task_id -> depends_on_id against the snapshot.

    Does not persist anything; the caller appends the edge and saves.

    Args:
        task_id: The task that would gain a dependency
        depends_on_id: The task it would depend on
        all_tasks: Full snapshot of the task collection

    Raises:
        SelfDependencyError: task_id == depends_on_id
        TaskNotFoundError: depends_on_id is not in the snapshot
        CyclicDependencyError: task_id is reachable from depends_on_id
    """
    if task_id == depends_on_id:
        raise SelfDependencyError(task_id)

    graph = build_dependency_graph(all_tasks)
    if depends_on_id not in graph:
        raise TaskNotFoundError(depends_on_id)

    # Adding task_id -> depends_on_id closes a cycle iff depends_on_id already reaches task_id
    back_path = find_path(depends_on_id, task_id, graph)
    if back_path is not None:
        raise CyclicDependencyError([task_id] + back_path)


def remove_dependency(task: Task, depends_on_id: int) -> bool:
    """Drop every occurrence of depends_on_id; returns True if anything changed."""
    before = len(task.depends_on)
    task.depends_on = [dep for dep in task.depends_on if dep != depends_on_id]
    return len(task.depends_on) != before


def get_blocked_by(task: Task, all_tasks: List[Task]) -> List[int]:
    """Unfinished dependencies that still exist, in depends_on order.

    Ids that no longer resolve to a task are soft references and never block.
    """
    by_id = _index(all_tasks)
    return [
        dep_id
        for dep_id in task.depends_on
        if dep_id in by_id and by_id[dep_id].status != Status.DONE
    ]


def is_blocked(task: Task, all_tasks: List[Task]) -> bool:
    return bool(get_blocked_by(task, all_tasks))


def get_blocking_tasks(task_id: int, all_tasks: List[Task]) -> List[int]:
    """IDs of unfinished tasks waiting on task_id."""
    return [
        task.id
        for task in all_tasks
        if task_id in task.depends_on and task.status != Status.DONE
    ]


def get_dependency_tree(task_id: int, all_tasks: List[Task]) -> Optional[TreeNode]:
    """Expand depends_on recursively from task_id.

    Unknown dependency ids are omitted; a node that was already expanded is
    never expanded again.

    Returns:
        The root TreeNode, or None when task_id is not in the snapshot
    """
    by_id = _index(all_tasks)
    root = by_id.get(task_id)
    if root is None:
        return None
    visited: Set[int] = set()
    return _build_tree(root, by_id, visited)


def _build_tree(task: Task, by_id: Dict[int, Task], visited: Set[int]) -> TreeNode:
    visited.add(task.id)
    children: List[TreeNode] = []
    for dep_id in task.depends_on:
        if dep_id in visited:
            continue
        dep = by_id.get(dep_id)
        if dep is None:
            continue
        children.append(_build_tree(dep, by_id, visited))
    return TreeNode(id=task.id, title=task.title, status=task.status, children=children)


__all__ = [
    "TreeNode",
    "build_dependency_graph",
    "find_path",
    "add_dependency",
    "remove_dependency",
    "get_blocked_by",
    "is_blocked",
    "get_blocking_tasks",
    "get_dependency_tree",
]
