"""Canonical JSON contract for tasks, dependency trees and scores.

Every command that emits a task goes through these helpers so the
payload shape stays the same across `list`, `show`, `next` and friends.
"""

from typing import Any, Dict, List, Optional

from core import Task, TaskRecord, TreeNode
from core.scoring import ScoreResult


def task_to_dict(task: Task, *, note: Optional[str] = None, blocked: Optional[bool] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": task.id,
        "title": task.title,
        "status": task.status.token,
        "symbol": task.status.symbol,
        "created_at": task.created_at.isoformat(),
        "updated_at": task.updated_at.isoformat(),
        "due": task.due.isoformat() if task.due else None,
        "tags": list(task.tags),
        "estimate": task.estimate,
        "depends_on": list(task.depends_on),
        "pinned": task.pinned,
        "pinned_at": task.pinned_at.isoformat() if task.pinned_at else None,
    }
    if blocked is not None:
        data["blocked"] = blocked
    if note is not None:
        data["note"] = note
    return data


def record_to_dict(record: TaskRecord) -> Dict[str, Any]:
    return task_to_dict(record.task, note=record.note)


def score_to_dict(result: ScoreResult) -> Dict[str, Any]:
    return {
        "score": round(result.score, 4),
        "factors": list(result.primary_factors),
        "signals": {name: round(value, 4) for name, value in result.signals.items()},
    }


def tree_to_dict(node: TreeNode) -> Dict[str, Any]:
    return {
        "id": node.id,
        "title": node.title,
        "status": node.status.token,
        "symbol": node.status.symbol,
        "children": [tree_to_dict(child) for child in node.children],
    }


def render_tree(node: TreeNode) -> List[str]:
    """Indented text rendering, one line per node."""
    lines: List[str] = []

    def walk(current: TreeNode, prefix: str, is_last: bool, root: bool) -> None:
        label = f"{current.status.symbol} #{current.id} {current.title}"
        if root:
            lines.append(label)
            child_prefix = ""
        else:
            lines.append(f"{prefix}{'└── ' if is_last else '├── '}{label}")
            child_prefix = prefix + ("    " if is_last else "│   ")
        for index, child in enumerate(current.children):
            walk(child, child_prefix, index == len(current.children) - 1, False)

    walk(node, "", True, True)
    return lines


__all__ = ["task_to_dict", "record_to_dict", "score_to_dict", "tree_to_dict", "render_tree"]
